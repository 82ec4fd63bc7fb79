from dataclasses import dataclass, field
from uuid import UUID

import structlog

from classifieds.application.coordinators.idempotency_coordinator import (
    IdempotencyCoordinator,
    validate_idempotency_key,
)
from classifieds.application.interfaces.event_publisher import EventPublisher
from classifieds.application.interfaces.listing_repository import ListingRepository
from classifieds.application.services.audit_emitter import AuditEmitter, AuditFailure
from classifieds.domain.entities.listing import Listing
from classifieds.domain.exceptions import (
    ClassifiedsError,
    ErrorKind,
    IdempotencyConflictError,
    ListingNotFoundError,
)

logger = structlog.get_logger(__name__)

PUBLISH_STATUS_CODE = 200


class IdempotencyRecordingError(ClassifiedsError):
    """
    The listing WAS published, but its idempotency token could not be recorded.

    Distinct from every "publish failed" error so a retrying client knows the
    state change already happened.
    """

    kind = ErrorKind.IDEMPOTENCY_RECORDING_FAILED

    def __init__(self, idempotency_key: str, listing: Listing, cause: BaseException) -> None:
        self.idempotency_key = idempotency_key
        self.listing = listing
        self.cause = cause
        super().__init__(
            f"Listing {listing.id} was published but idempotency key "
            f"'{idempotency_key}' could not be recorded: {cause}"
        )

    def details(self) -> dict:  # type: ignore[type-arg]
        return {
            "idempotency_key": self.idempotency_key,
            "listing_id": str(self.listing.id),
            "published": True,
            "cause": getattr(self.cause, "kind", ErrorKind.STORAGE_FAILURE).value,
        }


@dataclass
class PublishListingInput:
    listing_id: UUID
    idempotency_key: str | None = None


@dataclass
class PublishListingOutput:
    listing: Listing
    audit_failures: list[AuditFailure] = field(default_factory=list)


class PublishListing:
    """
    Use case: Publish a DRAFT listing, optionally guarded by an idempotency key.

    A key that was already spent on an unexpired record is rejected with
    IdempotencyConflictError whatever listing it points at; the earlier result
    is never replayed. Version conflicts on the listing write are not retried
    here.
    """

    def __init__(
        self,
        listing_repo: ListingRepository,
        idempotency: IdempotencyCoordinator,
        audit_emitter: AuditEmitter,
        event_publisher: EventPublisher,
    ) -> None:
        self._listing_repo = listing_repo
        self._idempotency = idempotency
        self._audit_emitter = audit_emitter
        self._event_publisher = event_publisher

    async def execute(self, input_data: PublishListingInput) -> PublishListingOutput:
        key = input_data.idempotency_key
        if key is not None:
            validate_idempotency_key(key)
            existing = await self._idempotency.lookup(key)
            if existing is not None:
                logger.warning(
                    "idempotency_conflict",
                    idempotency_key=key,
                    listing_id=str(input_data.listing_id),
                    recorded_listing_id=str(existing.listing_id),
                )
                raise IdempotencyConflictError(key, existing.listing_id)

        listing = await self._listing_repo.get_by_id(input_data.listing_id)
        if listing is None:
            raise ListingNotFoundError(input_data.listing_id)

        # May raise InvalidStateTransitionError; propagated to the caller
        listing.publish()

        # May raise ConcurrentModificationError, likewise
        published = await self._listing_repo.save(listing)

        events = listing.collect_events()
        audit_failures = await self._audit_emitter.emit_many(events)
        await self._event_publisher.publish_many(events)

        if key is not None:
            try:
                await self._idempotency.record(key, published.id, status_code=PUBLISH_STATUS_CODE)
            except Exception as exc:
                logger.error(
                    "idempotency_recording_failed",
                    idempotency_key=key,
                    listing_id=str(published.id),
                    error=str(exc),
                )
                raise IdempotencyRecordingError(key, published, exc) from exc

        logger.info(
            "listing_published",
            listing_id=str(published.id),
            version=published.version,
            idempotency_key=key,
            audit_failures=len(audit_failures),
        )

        return PublishListingOutput(listing=published, audit_failures=audit_failures)
