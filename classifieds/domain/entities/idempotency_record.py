from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from classifieds.domain.exceptions import InvalidArgumentError

DEFAULT_TTL = timedelta(hours=24)
MAX_KEY_LENGTH = 255


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class IdempotencyRecord:
    """
    Proof that the operation bearing ``key`` already succeeded.

    The key is unique among unexpired records; uniqueness itself is enforced
    by the store.
    """

    key: str
    listing_id: UUID
    result_payload: str
    status_code: int
    created_at: datetime
    expires_at: datetime
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        if not self.key or not self.key.strip():
            raise InvalidArgumentError("Idempotency key cannot be empty.")
        if len(self.key) > MAX_KEY_LENGTH:
            raise InvalidArgumentError(f"Idempotency key cannot exceed {MAX_KEY_LENGTH} characters.")
        if self.listing_id is None:
            raise InvalidArgumentError("Listing ID is required.")
        if not self.result_payload:
            raise InvalidArgumentError("Result payload cannot be empty.")
        if not 100 <= self.status_code <= 599:
            raise InvalidArgumentError("Status code must be between 100 and 599.")
        if self.expires_at <= self.created_at:
            raise InvalidArgumentError("Expiry must be after creation.")

    @classmethod
    def create(
        cls,
        *,
        key: str,
        listing_id: UUID,
        result_payload: str,
        status_code: int,
        now: datetime | None = None,
        ttl: timedelta = DEFAULT_TTL,
    ) -> "IdempotencyRecord":
        created_at = now or _utcnow()
        return cls(
            key=key,
            listing_id=listing_id,
            result_payload=result_payload,
            status_code=status_code,
            created_at=created_at,
            expires_at=created_at + ttl,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or _utcnow()) >= self.expires_at
