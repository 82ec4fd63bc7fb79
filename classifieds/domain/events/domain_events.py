from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class ListingCreatedEvent(DomainEvent):
    """Recorded when a new listing is created in DRAFT."""

    listing_id: UUID = field(default_factory=uuid4)
    title: str = ""
    price_amount: Decimal = Decimal("0")
    price_currency: str = ""
    category: str = ""


@dataclass(frozen=True)
class ListingPublishedEvent(DomainEvent):
    """Recorded when a listing transitions DRAFT → PUBLISHED."""

    listing_id: UUID = field(default_factory=uuid4)
    title: str = ""


@dataclass(frozen=True)
class ListingArchivedEvent(DomainEvent):
    """Recorded when a listing transitions PUBLISHED → ARCHIVED."""

    listing_id: UUID = field(default_factory=uuid4)
    title: str = ""


@dataclass(frozen=True)
class PhotoUploadedEvent(DomainEvent):
    """Recorded for every photo appended to a listing."""

    listing_id: UUID = field(default_factory=uuid4)
    photo_id: UUID = field(default_factory=uuid4)
    filename: str = ""
    file_size: int = 0
    storage_path: str = ""


@dataclass(frozen=True)
class AuditEmissionFailedEvent(DomainEvent):
    """Published on the side channel when an audit entry could not be written."""

    listing_id: UUID = field(default_factory=uuid4)
    audit_event_type: str = ""
    source_event_id: UUID = field(default_factory=uuid4)
    error: str = ""
