"""
In-memory listing store, used in tests and for local runs without Postgres.

Honours the same compare-and-swap contract as the SQL store, and hands out
copies so callers never share aggregate instances across requests.
"""
import threading
from uuid import UUID

from classifieds.application.interfaces.listing_repository import ListingFilter, ListingRepository
from classifieds.domain.entities.listing import Listing
from classifieds.domain.exceptions import ConcurrentModificationError
from classifieds.infrastructure.memory.photo_repository import InMemoryPhotoRepository


class InMemoryListingRepository(ListingRepository):
    def __init__(self, photo_repo: InMemoryPhotoRepository | None = None) -> None:
        self._rows: dict[UUID, Listing] = {}
        self._lock = threading.Lock()
        self.photo_repo = photo_repo or InMemoryPhotoRepository()

    async def save(self, listing: Listing) -> Listing:
        with self._lock:
            current = self._rows.get(listing.id)
            if listing.version is None:
                if current is not None:
                    raise ConcurrentModificationError(listing.id, None)
                new_version = 0
            else:
                if current is None or current.version != listing.version:
                    raise ConcurrentModificationError(listing.id, listing.version)
                new_version = listing.version + 1

            known_photo_ids = {p.id for p in current.photos} if current is not None else set()
            self._rows[listing.id] = listing.stored_as(new_version)
            self.photo_repo.add_all(p for p in listing.photos if p.id not in known_photo_ids)

        return listing.stored_as(new_version)

    async def get_by_id(self, listing_id: UUID) -> Listing | None:
        with self._lock:
            stored = self._rows.get(listing_id)
        if stored is None:
            return None
        return stored.stored_as(stored.version)  # type: ignore[arg-type]

    async def find_by_filter(self, criteria: ListingFilter) -> list[Listing]:
        with self._lock:
            rows = list(self._rows.values())
        matched = [row for row in rows if _matches(row, criteria)]
        matched.sort(key=lambda row: row.created_at, reverse=True)
        return [row.stored_as(row.version) for row in matched]  # type: ignore[arg-type]


def _matches(listing: Listing, criteria: ListingFilter) -> bool:
    if criteria.query:
        needle = criteria.query.lower()
        if needle not in listing.title.lower() and needle not in listing.description.lower():
            return False
    if criteria.category is not None and listing.category != criteria.category:
        return False
    if criteria.status is not None and listing.status != criteria.status:
        return False
    if criteria.min_price is not None and listing.price.amount < criteria.min_price:
        return False
    if criteria.max_price is not None and listing.price.amount > criteria.max_price:
        return False
    return True
