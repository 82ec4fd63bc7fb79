from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from classifieds.domain.exceptions import InvalidArgumentError
from classifieds.domain.value_objects.photo_metadata import PhotoMetadata


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ListingPhoto:
    """A stored photo, owned by exactly one listing."""

    listing_id: UUID
    metadata: PhotoMetadata
    storage_path: str
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if self.listing_id is None:
            raise InvalidArgumentError("Listing ID is required.")
        if not self.storage_path or not self.storage_path.strip():
            raise InvalidArgumentError("Storage path cannot be empty.")

    @classmethod
    def create(cls, listing_id: UUID, metadata: PhotoMetadata, storage_path: str) -> "ListingPhoto":
        return cls(listing_id=listing_id, metadata=metadata, storage_path=storage_path)

    @property
    def filename(self) -> str:
        return self.metadata.filename

    @property
    def content_type(self) -> str:
        return self.metadata.content_type

    @property
    def size(self) -> int:
        return self.metadata.size
