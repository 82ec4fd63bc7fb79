import json
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from uuid import UUID

import structlog

from classifieds.application.interfaces.idempotency_repository import IdempotencyRepository
from classifieds.domain.entities.idempotency_record import (
    DEFAULT_TTL,
    MAX_KEY_LENGTH,
    IdempotencyRecord,
)
from classifieds.domain.exceptions import InvalidArgumentError

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_idempotency_key(key: str) -> str:
    """Reject blank or oversized tokens before any side effect happens."""
    if not isinstance(key, str) or not key.strip():
        raise InvalidArgumentError("Idempotency key cannot be empty.")
    if len(key) > MAX_KEY_LENGTH:
        raise InvalidArgumentError(f"Idempotency key cannot exceed {MAX_KEY_LENGTH} characters.")
    return key


class IdempotencyCoordinator:
    """
    Maps client-supplied idempotency tokens to the operation they were spent on.

    A token is consumed by at most one successful operation. Expired records
    read as absent whether or not the sweep has physically removed them yet.
    """

    def __init__(
        self,
        repository: IdempotencyRepository,
        *,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repository = repository
        self._ttl = ttl
        self._clock = clock

    async def lookup(self, key: str) -> IdempotencyRecord | None:
        record = await self._repository.get_by_key(key)
        if record is None:
            return None
        if record.is_expired(self._clock()):
            logger.debug("idempotency_record_expired", idempotency_key=key)
            return None
        return record

    async def record(
        self,
        key: str,
        listing_id: UUID,
        status_code: int = 200,
        result: dict | None = None,  # type: ignore[type-arg]
    ) -> IdempotencyRecord:
        """
        Persist a fresh record for key. A live record for the same key makes the
        repository raise DuplicateKeyError, which is propagated unchanged.
        """
        payload = result if result is not None else {"listing_id": str(listing_id), "status": "success"}
        record = IdempotencyRecord.create(
            key=key,
            listing_id=listing_id,
            result_payload=json.dumps(payload, default=str, sort_keys=True),
            status_code=status_code,
            now=self._clock(),
            ttl=self._ttl,
        )
        saved = await self._repository.save(record)
        logger.debug(
            "idempotency_record_saved",
            idempotency_key=key,
            listing_id=str(listing_id),
            expires_at=saved.expires_at.isoformat(),
        )
        return saved

    async def purge_expired(self) -> int:
        removed = await self._repository.delete_expired(self._clock())
        logger.debug("idempotency_records_purged", removed=removed)
        return removed
