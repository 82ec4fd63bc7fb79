from abc import ABC, abstractmethod
from datetime import datetime

from classifieds.domain.entities.idempotency_record import IdempotencyRecord


class IdempotencyRepository(ABC):
    """Port for idempotency records. Owns the key uniqueness constraint."""

    @abstractmethod
    async def save(self, record: IdempotencyRecord) -> IdempotencyRecord:
        """
        Insert a record. Raises DuplicateKeyError if an unexpired record with
        the same key exists; an expired one is replaced.
        """
        ...

    @abstractmethod
    async def get_by_key(self, key: str) -> IdempotencyRecord | None:
        """Return the stored record for key, expired or not."""
        ...

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Physically remove records that expired at or before now. Returns the count."""
        ...
