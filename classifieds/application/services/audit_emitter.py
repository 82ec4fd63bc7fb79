"""
Best-effort audit trail writer.

Audit entries are written after the primary change has been committed and
never share its transaction. A failed write does not change the outcome of
the workflow that triggered it, but it is not silent either: it is logged,
returned to the caller as an AuditFailure and reported on the event bus.
"""
import dataclasses
import json
from dataclasses import dataclass
from uuid import UUID

import structlog

from classifieds.application.interfaces.audit_log_repository import AuditLogRepository
from classifieds.application.interfaces.event_publisher import EventPublisher
from classifieds.domain.entities.audit_log import AuditLog
from classifieds.domain.events.domain_events import (
    AuditEmissionFailedEvent,
    DomainEvent,
    ListingArchivedEvent,
    ListingPublishedEvent,
    PhotoUploadedEvent,
)

logger = structlog.get_logger(__name__)

AUDIT_EVENT_TYPES: dict[type[DomainEvent], str] = {
    ListingPublishedEvent: "LISTING_PUBLISHED",
    ListingArchivedEvent: "LISTING_ARCHIVED",
    PhotoUploadedEvent: "PHOTO_UPLOADED",
}


@dataclass(frozen=True)
class AuditFailure:
    event_type: str
    listing_id: UUID
    source_event_id: UUID
    error: str


def _serialise_event(event: DomainEvent) -> str:
    return json.dumps(dataclasses.asdict(event), default=str, sort_keys=True)


class AuditEmitter:
    def __init__(
        self,
        audit_repo: AuditLogRepository,
        failure_publisher: EventPublisher | None = None,
    ) -> None:
        self._audit_repo = audit_repo
        self._failure_publisher = failure_publisher

    async def emit(self, event: DomainEvent) -> AuditFailure | None:
        """Write one audit entry. Events without an audit type are ignored."""
        event_type = AUDIT_EVENT_TYPES.get(type(event))
        if event_type is None:
            return None

        listing_id: UUID = event.listing_id  # type: ignore[attr-defined]
        try:
            entry = AuditLog(
                event_type=event_type,
                listing_id=listing_id,
                payload=_serialise_event(event),
            )
            await self._audit_repo.append(entry)
        except Exception as exc:
            logger.error(
                "audit_emission_failed",
                event_type=event_type,
                listing_id=str(listing_id),
                event_id=str(event.event_id),
                error=str(exc),
                exc_info=True,
            )
            failure = AuditFailure(
                event_type=event_type,
                listing_id=listing_id,
                source_event_id=event.event_id,
                error=str(exc),
            )
            await self._report(failure)
            return failure

        logger.debug("audit_log_created", event_type=event_type, listing_id=str(listing_id))
        return None

    async def emit_many(self, events: list[DomainEvent]) -> list[AuditFailure]:
        failures: list[AuditFailure] = []
        for event in events:
            failure = await self.emit(event)
            if failure is not None:
                failures.append(failure)
        return failures

    async def _report(self, failure: AuditFailure) -> None:
        if self._failure_publisher is None:
            return
        try:
            await self._failure_publisher.publish(
                AuditEmissionFailedEvent(
                    listing_id=failure.listing_id,
                    audit_event_type=failure.event_type,
                    source_event_id=failure.source_event_id,
                    error=failure.error,
                )
            )
        except Exception:
            # The error log above is the last line of defence.
            logger.exception("audit_failure_report_failed", listing_id=str(failure.listing_id))
