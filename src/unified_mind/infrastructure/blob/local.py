"""Filesystem blob store for oversized chunk payloads."""

import asyncio
from pathlib import Path

from unified_mind.core.base import StorageErrorDetails
from unified_mind.core.errors import StorageError
from unified_mind.core.logging import get_logger

logger = get_logger(__name__)


class LocalBlobStore:
    """Keeps each blob as a file under ``root``; keys are relative paths."""

    def __init__(self, root: Path | str):
        self.root = Path(root).resolve()

    def _path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not key or not path.is_relative_to(self.root) or path == self.root:
            raise StorageError(
                message=f"Blob key escapes the store: {key!r}",
                details=StorageErrorDetails(
                    source="LocalBlobStore",
                    operation="resolve_key",
                    service_name="blob_store",
                    object_key=key,
                ),
            )
        return path

    def _write(self, path: Path, data: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(data, encoding="utf-8")
        tmp.replace(path)

    async def put(self, key: str, data: str) -> None:
        path = self._path_for(key)
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as e:
            raise StorageError(
                message=f"Failed to write blob {key}: {e!s}",
                details=StorageErrorDetails(
                    source="LocalBlobStore",
                    operation="put",
                    service_name="blob_store",
                    object_key=key,
                ),
            ) from e
        logger.debug("Stored blob", extra={"key": key, "bytes": len(data)})

    async def get(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        return await asyncio.to_thread(path.read_text, encoding="utf-8")
