"""Content fingerprints and memory identifiers."""

import hashlib
from uuid import uuid4


def content_hash(text: str) -> str:
    """SHA-256 hex digest of the UTF-8 encoded text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def generate_memory_id() -> str:
    """Fresh opaque id such as ``mem_3f2a9c0d1b7e4a55``."""
    return "mem_" + uuid4().hex[:16]
