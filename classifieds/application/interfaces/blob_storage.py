from abc import ABC, abstractmethod


class BlobStorage(ABC):
    """
    Port for raw photo bytes.

    Implementations generate a collision-free storage path on every put, and
    reject any path that would resolve outside their storage root. I/O
    problems are raised as StorageFailureError.
    """

    @abstractmethod
    async def put(self, filename: str, data: bytes) -> str:
        """Store data and return its opaque storage path."""
        ...

    @abstractmethod
    async def delete(self, storage_path: str) -> None:
        """Delete the blob. Deleting a missing blob is not an error."""
        ...

    @abstractmethod
    async def exists(self, storage_path: str) -> bool:
        ...
