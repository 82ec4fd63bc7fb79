"""Unit tests for idempotency token handling, backed by the in-memory store."""
import json
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from classifieds.application.coordinators.idempotency_coordinator import (
    IdempotencyCoordinator,
    validate_idempotency_key,
)
from classifieds.domain.entities.idempotency_record import IdempotencyRecord
from classifieds.domain.exceptions import DuplicateKeyError, InvalidArgumentError
from classifieds.infrastructure.memory.idempotency_repository import (
    InMemoryIdempotencyRepository,
)

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _make_coordinator(
    clock: _Clock | None = None,
) -> tuple[IdempotencyCoordinator, InMemoryIdempotencyRepository, _Clock]:
    repo = InMemoryIdempotencyRepository()
    clock = clock or _Clock(T0)
    return IdempotencyCoordinator(repo, clock=clock), repo, clock


class TestValidateKey:
    @pytest.mark.parametrize("key", ["", "   ", "k" * 256])
    def test_rejects_bad_keys(self, key: str) -> None:
        with pytest.raises(InvalidArgumentError):
            validate_idempotency_key(key)

    def test_accepts_max_length_key(self) -> None:
        assert validate_idempotency_key("k" * 255) == "k" * 255


class TestRecordAndLookup:
    @pytest.mark.asyncio
    async def test_lookup_of_unknown_key_is_none(self) -> None:
        coordinator, _, _ = _make_coordinator()
        assert await coordinator.lookup("key-1") is None

    @pytest.mark.asyncio
    async def test_recorded_key_is_found_until_expiry(self) -> None:
        coordinator, _, clock = _make_coordinator()
        listing_id = uuid4()

        record = await coordinator.record("key-1", listing_id)

        assert record.expires_at == T0 + timedelta(hours=24)
        assert json.loads(record.result_payload) == {
            "listing_id": str(listing_id),
            "status": "success",
        }
        clock.now = T0 + timedelta(hours=23, minutes=59)
        found = await coordinator.lookup("key-1")
        assert found is not None
        assert found.listing_id == listing_id

    @pytest.mark.asyncio
    async def test_expired_record_reads_as_absent(self) -> None:
        coordinator, repo, clock = _make_coordinator()
        await coordinator.record("key-1", uuid4())

        clock.now = T0 + timedelta(hours=24)

        assert await coordinator.lookup("key-1") is None
        # Not physically removed until the sweep runs
        assert await repo.get_by_key("key-1") is not None

    @pytest.mark.asyncio
    async def test_live_duplicate_raises(self) -> None:
        coordinator, _, _ = _make_coordinator()
        await coordinator.record("key-1", uuid4())

        with pytest.raises(DuplicateKeyError):
            await coordinator.record("key-1", uuid4())

    @pytest.mark.asyncio
    async def test_expired_record_is_replaced(self) -> None:
        coordinator, repo, clock = _make_coordinator()
        await coordinator.record("key-1", uuid4())
        clock.now = T0 + timedelta(hours=25)
        second_listing = uuid4()

        await coordinator.record("key-1", second_listing)

        stored = await repo.get_by_key("key-1")
        assert stored is not None
        assert stored.listing_id == second_listing

    @pytest.mark.asyncio
    async def test_custom_ttl(self) -> None:
        repo = InMemoryIdempotencyRepository()
        coordinator = IdempotencyCoordinator(repo, ttl=timedelta(minutes=5), clock=_Clock(T0))

        record = await coordinator.record("key-1", uuid4())

        assert record.expires_at == T0 + timedelta(minutes=5)


class TestPurgeExpired:
    @pytest.mark.asyncio
    async def test_removes_only_expired(self) -> None:
        coordinator, repo, clock = _make_coordinator()
        await coordinator.record("old", uuid4())
        clock.now = T0 + timedelta(hours=12)
        await coordinator.record("new", uuid4())
        clock.now = T0 + timedelta(hours=30)

        removed = await coordinator.purge_expired()

        assert removed == 1
        assert await repo.get_by_key("old") is None
        assert await repo.get_by_key("new") is not None


class TestIdempotencyRecord:
    def test_expiry_must_follow_creation(self) -> None:
        with pytest.raises(InvalidArgumentError):
            IdempotencyRecord(
                key="k",
                listing_id=uuid4(),
                result_payload="{}",
                status_code=200,
                created_at=T0,
                expires_at=T0,
            )

    def test_is_expired_at_boundary(self) -> None:
        record = IdempotencyRecord.create(
            key="k", listing_id=uuid4(), result_payload="{}", status_code=200, now=T0
        )
        assert record.is_expired(T0 + timedelta(hours=24)) is True
        assert record.is_expired(T0 + timedelta(hours=24) - timedelta(seconds=1)) is False
