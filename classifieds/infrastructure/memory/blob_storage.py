import threading
from pathlib import PurePosixPath
from uuid import uuid4

from classifieds.application.interfaces.blob_storage import BlobStorage


class InMemoryBlobStorage(BlobStorage):
    """Keeps blobs in a dict keyed by storage path."""

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}
        self._lock = threading.Lock()

    @property
    def paths(self) -> list[str]:
        with self._lock:
            return list(self._blobs)

    async def put(self, filename: str, data: bytes) -> str:
        storage_path = f"{uuid4().hex}{PurePosixPath(filename).suffix.lower()}"
        with self._lock:
            self._blobs[storage_path] = bytes(data)
        return storage_path

    async def delete(self, storage_path: str) -> None:
        with self._lock:
            self._blobs.pop(storage_path, None)

    async def exists(self, storage_path: str) -> bool:
        with self._lock:
            return storage_path in self._blobs
