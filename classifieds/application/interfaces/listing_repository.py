from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from classifieds.domain.entities.listing import Listing
from classifieds.domain.enums.category import Category
from classifieds.domain.enums.listing_status import ListingStatus


@dataclass(frozen=True)
class ListingFilter:
    """Browse criteria; a None field does not constrain the result."""

    query: str | None = None
    category: Category | None = None
    status: ListingStatus | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None


class ListingRepository(ABC):
    """Port for persisting and loading Listing aggregates, photos included."""

    @abstractmethod
    async def save(self, listing: Listing) -> Listing:
        """
        Compare-and-swap write of the whole aggregate.

        ``listing.version`` is the version the caller read. A listing with no
        version is inserted at version 0; otherwise the write succeeds only if
        the stored version still equals it, and the stored version is then
        incremented. Returns the listing as stored (with its new version).

        Raises ConcurrentModificationError when the stored version has moved
        on, or when an insert collides with an existing listing.
        """
        ...

    @abstractmethod
    async def get_by_id(self, listing_id: UUID) -> Listing | None:
        ...

    @abstractmethod
    async def find_by_filter(self, criteria: ListingFilter) -> list[Listing]:
        """
        Listings matching every given criterion, newest first.

        ``query`` is a case-insensitive substring match on title or
        description; the price bounds are inclusive.
        """
        ...
