from dataclasses import dataclass, field
from uuid import UUID

import structlog

from classifieds.application.interfaces.event_publisher import EventPublisher
from classifieds.application.interfaces.listing_repository import ListingRepository
from classifieds.application.services.audit_emitter import AuditEmitter, AuditFailure
from classifieds.domain.entities.listing import Listing
from classifieds.domain.exceptions import ListingNotFoundError

logger = structlog.get_logger(__name__)


@dataclass
class ArchiveListingOutput:
    listing: Listing
    audit_failures: list[AuditFailure] = field(default_factory=list)


class ArchiveListing:
    """Use case: Move a PUBLISHED listing to ARCHIVED."""

    def __init__(
        self,
        listing_repo: ListingRepository,
        audit_emitter: AuditEmitter,
        event_publisher: EventPublisher,
    ) -> None:
        self._listing_repo = listing_repo
        self._audit_emitter = audit_emitter
        self._event_publisher = event_publisher

    async def execute(self, listing_id: UUID) -> ArchiveListingOutput:
        listing = await self._listing_repo.get_by_id(listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)

        listing.archive()
        archived = await self._listing_repo.save(listing)

        events = listing.collect_events()
        audit_failures = await self._audit_emitter.emit_many(events)
        await self._event_publisher.publish_many(events)

        logger.info("listing_archived", listing_id=str(archived.id), version=archived.version)
        return ArchiveListingOutput(listing=archived, audit_failures=audit_failures)
