"""
Filesystem blob storage.

Blocking file I/O runs in the default thread-pool executor so it doesn't
stall the event loop.
"""
import asyncio
from functools import partial
from pathlib import Path
from uuid import uuid4

import structlog

from classifieds.application.interfaces.blob_storage import BlobStorage
from classifieds.domain.exceptions import StorageFailureError

logger = structlog.get_logger(__name__)

_MAX_SUFFIX_LENGTH = 10


def _safe_suffix(filename: str) -> str:
    suffix = Path(filename).suffix.lower()
    if len(suffix) > _MAX_SUFFIX_LENGTH or not suffix[1:].isalnum() or not suffix.isascii():
        return ""
    return suffix


def _write_new(path: Path, data: bytes) -> None:
    # "xb" fails instead of overwriting if the generated name is ever reused
    with open(path, "xb") as fh:
        fh.write(data)


class LocalFileBlobStorage(BlobStorage):
    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()
        self._root.mkdir(parents=True, exist_ok=True)
        logger.info("blob_storage_initialised", root=str(self._root))

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, storage_path: str) -> Path:
        if not storage_path:
            raise StorageFailureError("Storage path cannot be empty.")
        try:
            target = (self._root / storage_path).resolve()
        except (OSError, ValueError) as exc:
            raise StorageFailureError(f"Invalid storage path {storage_path!r}: {exc}") from exc
        if target == self._root or not target.is_relative_to(self._root):
            raise StorageFailureError(f"Path {storage_path!r} escapes the storage root.")
        return target

    async def put(self, filename: str, data: bytes) -> str:
        storage_path = f"{uuid4().hex}{_safe_suffix(filename)}"
        target = self._resolve(storage_path)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, partial(_write_new, target, data))
        except (OSError, ValueError) as exc:
            logger.error("blob_store_failed", filename=filename, error=str(exc))
            raise StorageFailureError(f"Failed to store {filename!r}: {exc}") from exc
        logger.debug("blob_stored", storage_path=storage_path, size=len(data))
        return storage_path

    async def delete(self, storage_path: str) -> None:
        target = self._resolve(storage_path)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, partial(target.unlink, missing_ok=True))
        except OSError as exc:
            raise StorageFailureError(f"Failed to delete {storage_path!r}: {exc}") from exc
        logger.debug("blob_deleted", storage_path=storage_path)

    async def exists(self, storage_path: str) -> bool:
        target = self._resolve(storage_path)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, target.is_file)
