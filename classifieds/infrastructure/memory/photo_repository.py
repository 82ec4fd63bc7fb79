import threading
from collections.abc import Iterable
from uuid import UUID

from classifieds.application.interfaces.photo_repository import PhotoRepository
from classifieds.domain.entities.listing_photo import ListingPhoto


class InMemoryPhotoRepository(PhotoRepository):
    def __init__(self) -> None:
        self._photos: dict[UUID, ListingPhoto] = {}
        self._lock = threading.Lock()

    def add_all(self, photos: Iterable[ListingPhoto]) -> None:
        with self._lock:
            for photo in photos:
                self._photos[photo.id] = photo

    async def save(self, photo: ListingPhoto) -> ListingPhoto:
        self.add_all([photo])
        return photo

    async def list_for_listing(self, listing_id: UUID) -> list[ListingPhoto]:
        # dicts keep insertion order, which is the photo order
        with self._lock:
            return [p for p in self._photos.values() if p.listing_id == listing_id]
