import threading
from datetime import datetime

from classifieds.application.interfaces.idempotency_repository import IdempotencyRepository
from classifieds.domain.entities.idempotency_record import IdempotencyRecord
from classifieds.domain.exceptions import DuplicateKeyError


class InMemoryIdempotencyRepository(IdempotencyRepository):
    """Key-unique record store; liveness is judged at the new record's creation time."""

    def __init__(self) -> None:
        self._records: dict[str, IdempotencyRecord] = {}
        self._lock = threading.Lock()

    async def save(self, record: IdempotencyRecord) -> IdempotencyRecord:
        with self._lock:
            existing = self._records.get(record.key)
            if existing is not None and not existing.is_expired(record.created_at):
                raise DuplicateKeyError(record.key)
            self._records[record.key] = record
        return record

    async def get_by_key(self, key: str) -> IdempotencyRecord | None:
        with self._lock:
            return self._records.get(key)

    async def delete_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [key for key, r in self._records.items() if r.is_expired(now)]
            for key in expired:
                del self._records[key]
        return len(expired)
