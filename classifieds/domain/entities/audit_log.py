from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from classifieds.domain.exceptions import InvalidArgumentError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AuditLog:
    """Append-only record of a domain event. Never mutated or deleted by the core."""

    event_type: str
    listing_id: UUID
    payload: str
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not self.event_type or not self.event_type.strip():
            raise InvalidArgumentError("Event type cannot be empty.")
        if self.listing_id is None:
            raise InvalidArgumentError("Listing ID is required.")
        if not self.payload:
            raise InvalidArgumentError("Payload cannot be empty.")
