from dataclasses import replace
from decimal import Decimal

import structlog

from classifieds.application.interfaces.listing_repository import ListingFilter, ListingRepository
from classifieds.domain.entities.listing import Listing
from classifieds.domain.exceptions import InvalidArgumentError

logger = structlog.get_logger(__name__)


class ListListings:
    """Use case: Browse listings by text, category, status and price range."""

    def __init__(self, listing_repo: ListingRepository) -> None:
        self._listing_repo = listing_repo

    async def execute(self, criteria: ListingFilter) -> list[Listing]:
        _check_bound("min_price", criteria.min_price)
        _check_bound("max_price", criteria.max_price)

        if criteria.query is not None:
            criteria = replace(criteria, query=criteria.query.strip() or None)

        listings = await self._listing_repo.find_by_filter(criteria)
        logger.debug("listings_browsed", matched=len(listings))
        return listings


def _check_bound(name: str, value: Decimal | None) -> None:
    if value is None:
        return
    if not value.is_finite():
        raise InvalidArgumentError(f"{name} must be a finite number.")
    if value < 0:
        raise InvalidArgumentError(f"{name} cannot be negative.")
