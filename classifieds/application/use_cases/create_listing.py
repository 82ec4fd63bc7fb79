from dataclasses import dataclass
from decimal import Decimal

import structlog

from classifieds.application.interfaces.event_publisher import EventPublisher
from classifieds.application.interfaces.listing_repository import ListingRepository
from classifieds.domain.entities.listing import Listing
from classifieds.domain.enums.category import Category
from classifieds.domain.enums.currency import Currency
from classifieds.domain.value_objects.money import Money

logger = structlog.get_logger(__name__)


@dataclass
class CreateListingInput:
    title: str
    description: str | None
    price_amount: Decimal
    price_currency: Currency
    category: Category


class CreateListing:
    """Use case: Create a listing in DRAFT and store it at version 0."""

    def __init__(self, listing_repo: ListingRepository, event_publisher: EventPublisher) -> None:
        self._listing_repo = listing_repo
        self._event_publisher = event_publisher

    async def execute(self, input_data: CreateListingInput) -> Listing:
        listing = Listing.create(
            title=input_data.title,
            description=input_data.description,
            price=Money.of(input_data.price_amount, input_data.price_currency),
            category=input_data.category,
        )

        stored = await self._listing_repo.save(listing)
        await self._event_publisher.publish_many(listing.collect_events())

        logger.info(
            "listing_created",
            listing_id=str(stored.id),
            category=stored.category.value,
            price=str(stored.price),
        )
        return stored
