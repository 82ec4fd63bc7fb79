from uuid import UUID

from classifieds.application.interfaces.listing_repository import ListingRepository
from classifieds.application.interfaces.photo_repository import PhotoRepository
from classifieds.domain.entities.listing import Listing
from classifieds.domain.entities.listing_photo import ListingPhoto
from classifieds.domain.exceptions import ListingNotFoundError


class GetListing:
    """Use case: Load a single listing with its photos."""

    def __init__(self, listing_repo: ListingRepository) -> None:
        self._listing_repo = listing_repo

    async def execute(self, listing_id: UUID) -> Listing:
        listing = await self._listing_repo.get_by_id(listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return listing


class ListListingPhotos:
    """Use case: Return a listing's photos in insertion order."""

    def __init__(self, listing_repo: ListingRepository, photo_repo: PhotoRepository) -> None:
        self._listing_repo = listing_repo
        self._photo_repo = photo_repo

    async def execute(self, listing_id: UUID) -> list[ListingPhoto]:
        if await self._listing_repo.get_by_id(listing_id) is None:
            raise ListingNotFoundError(listing_id)
        return await self._photo_repo.list_for_listing(listing_id)
