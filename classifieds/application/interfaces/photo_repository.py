from abc import ABC, abstractmethod
from uuid import UUID

from classifieds.domain.entities.listing_photo import ListingPhoto


class PhotoRepository(ABC):
    """Port for reading and writing individual listing photos."""

    @abstractmethod
    async def save(self, photo: ListingPhoto) -> ListingPhoto:
        ...

    @abstractmethod
    async def list_for_listing(self, listing_id: UUID) -> list[ListingPhoto]:
        """Return the listing's photos in insertion order."""
        ...
