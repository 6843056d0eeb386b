"""Utility functions for domain models."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Get the current UTC datetime with timezone awareness."""
    return datetime.now(UTC)


def utc_now_iso() -> str:
    """Current UTC time as ``2025-01-31T12:00:00.000Z``."""
    return utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")
