"""Unit tests for the idempotent publish workflow."""
import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest

from classifieds.application.coordinators.idempotency_coordinator import IdempotencyCoordinator
from classifieds.application.services.audit_emitter import AuditEmitter
from classifieds.application.use_cases.publish_listing import (
    IdempotencyRecordingError,
    PublishListing,
    PublishListingInput,
)
from classifieds.domain.entities.listing import Listing
from classifieds.domain.enums.category import Category
from classifieds.domain.enums.currency import Currency
from classifieds.domain.enums.listing_status import ListingStatus
from classifieds.domain.events.domain_events import ListingPublishedEvent
from classifieds.domain.exceptions import (
    ConcurrentModificationError,
    DuplicateKeyError,
    ErrorKind,
    IdempotencyConflictError,
    InvalidArgumentError,
    ListingNotFoundError,
)
from classifieds.domain.state_machine.lifecycle_state_machine import InvalidStateTransitionError
from classifieds.domain.value_objects.money import Money
from classifieds.infrastructure.memory.audit_log_repository import InMemoryAuditLogRepository
from classifieds.infrastructure.memory.idempotency_repository import (
    InMemoryIdempotencyRepository,
)
from classifieds.infrastructure.memory.listing_repository import InMemoryListingRepository


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


class _BarrierListingRepository(InMemoryListingRepository):
    """Holds the first readers until all of them have read the same version."""

    def __init__(self, readers: int) -> None:
        super().__init__()
        self._barrier = asyncio.Barrier(readers)
        self._held = readers

    async def get_by_id(self, listing_id: UUID) -> Listing | None:
        listing = await super().get_by_id(listing_id)
        if self._held > 0:
            self._held -= 1
            await self._barrier.wait()
        return listing


def _make_publisher() -> MagicMock:
    pub = MagicMock()
    pub.publish = AsyncMock()
    pub.publish_many = AsyncMock()
    return pub


def _make_use_case(
    listing_repo: InMemoryListingRepository | None = None,
    idempotency_repo: InMemoryIdempotencyRepository | MagicMock | None = None,
    audit_repo: InMemoryAuditLogRepository | MagicMock | None = None,
    clock: _Clock | None = None,
) -> tuple[PublishListing, dict]:  # type: ignore[type-arg]
    deps = {
        "listings": listing_repo or InMemoryListingRepository(),
        "keys": idempotency_repo or InMemoryIdempotencyRepository(),
        "audit": audit_repo or InMemoryAuditLogRepository(),
        "publisher": _make_publisher(),
    }
    coordinator = IdempotencyCoordinator(deps["keys"], clock=clock or _Clock())
    use_case = PublishListing(
        deps["listings"],
        coordinator,
        AuditEmitter(deps["audit"], failure_publisher=deps["publisher"]),
        deps["publisher"],
    )
    return use_case, deps


async def _seed(repo: InMemoryListingRepository, title: str = "MacBook Pro 2021") -> Listing:
    listing = Listing.create(
        title=title,
        description="M1 Pro",
        price=Money.of(Decimal("1999.99"), Currency.USD),
        category=Category.ELECTRONICS,
    )
    return await repo.save(listing)


class TestPublish:
    @pytest.mark.asyncio
    async def test_publishes_draft_without_key(self) -> None:
        use_case, deps = _make_use_case()
        listing = await _seed(deps["listings"])

        result = await use_case.execute(PublishListingInput(listing_id=listing.id))

        assert result.listing.status == ListingStatus.PUBLISHED
        assert result.listing.version == 1
        assert result.audit_failures == []
        stored = await deps["listings"].get_by_id(listing.id)
        assert stored.status == ListingStatus.PUBLISHED
        assert [e.event_type for e in deps["audit"].entries] == ["LISTING_PUBLISHED"]
        published_events = deps["publisher"].publish_many.call_args.args[0]
        assert isinstance(published_events[0], ListingPublishedEvent)

    @pytest.mark.asyncio
    async def test_records_key_after_success(self) -> None:
        use_case, deps = _make_use_case()
        listing = await _seed(deps["listings"])

        await use_case.execute(PublishListingInput(listing_id=listing.id, idempotency_key="key-1"))

        record = await deps["keys"].get_by_key("key-1")
        assert record is not None
        assert record.listing_id == listing.id
        assert record.status_code == 200

    @pytest.mark.asyncio
    async def test_unknown_listing(self) -> None:
        use_case, _ = _make_use_case()

        with pytest.raises(ListingNotFoundError):
            await use_case.execute(PublishListingInput(listing_id=uuid4(), idempotency_key="k"))

    @pytest.mark.asyncio
    async def test_archived_listing_cannot_be_published(self) -> None:
        use_case, deps = _make_use_case()
        listing = await _seed(deps["listings"])
        listing.publish()
        listing = await deps["listings"].save(listing)
        listing.archive()
        await deps["listings"].save(listing)

        with pytest.raises(InvalidStateTransitionError):
            await use_case.execute(PublishListingInput(listing_id=listing.id))

        assert deps["audit"].entries == []

    @pytest.mark.asyncio
    async def test_failed_publish_does_not_spend_key(self) -> None:
        use_case, deps = _make_use_case()

        with pytest.raises(ListingNotFoundError):
            await use_case.execute(PublishListingInput(listing_id=uuid4(), idempotency_key="k"))

        assert await deps["keys"].get_by_key("k") is None


class TestIdempotencyKeys:
    @pytest.mark.asyncio
    async def test_reused_key_is_a_conflict_not_a_replay(self) -> None:
        use_case, deps = _make_use_case()
        listing = await _seed(deps["listings"])
        await use_case.execute(PublishListingInput(listing_id=listing.id, idempotency_key="key-1"))

        with pytest.raises(IdempotencyConflictError) as exc_info:
            await use_case.execute(
                PublishListingInput(listing_id=listing.id, idempotency_key="key-1")
            )

        assert exc_info.value.listing_id == listing.id
        assert exc_info.value.kind is ErrorKind.IDEMPOTENCY_CONFLICT

    @pytest.mark.asyncio
    async def test_key_spent_on_another_listing_conflicts(self) -> None:
        use_case, deps = _make_use_case()
        first = await _seed(deps["listings"])
        second = await _seed(deps["listings"], title="Road bike")
        await use_case.execute(PublishListingInput(listing_id=first.id, idempotency_key="key-1"))

        with pytest.raises(IdempotencyConflictError) as exc_info:
            await use_case.execute(
                PublishListingInput(listing_id=second.id, idempotency_key="key-1")
            )

        assert exc_info.value.listing_id == first.id
        stored = await deps["listings"].get_by_id(second.id)
        assert stored.status == ListingStatus.DRAFT

    @pytest.mark.asyncio
    async def test_expired_key_can_be_spent_again(self) -> None:
        clock = _Clock()
        use_case, deps = _make_use_case(clock=clock)
        first = await _seed(deps["listings"])
        second = await _seed(deps["listings"], title="Road bike")
        await use_case.execute(PublishListingInput(listing_id=first.id, idempotency_key="key-1"))

        clock.now += timedelta(hours=25)
        result = await use_case.execute(
            PublishListingInput(listing_id=second.id, idempotency_key="key-1")
        )

        assert result.listing.status == ListingStatus.PUBLISHED
        record = await deps["keys"].get_by_key("key-1")
        assert record.listing_id == second.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["", "   ", "k" * 256])
    async def test_malformed_key_is_rejected_before_any_side_effect(self, key: str) -> None:
        use_case, deps = _make_use_case()
        listing = await _seed(deps["listings"])

        with pytest.raises(InvalidArgumentError):
            await use_case.execute(PublishListingInput(listing_id=listing.id, idempotency_key=key))

        stored = await deps["listings"].get_by_id(listing.id)
        assert stored.status == ListingStatus.DRAFT

    @pytest.mark.asyncio
    async def test_recording_failure_is_distinct_from_publish_failure(self) -> None:
        keys = MagicMock()
        keys.get_by_key = AsyncMock(return_value=None)
        keys.save = AsyncMock(side_effect=RuntimeError("keys db down"))
        use_case, deps = _make_use_case(idempotency_repo=keys)
        listing = await _seed(deps["listings"])

        with pytest.raises(IdempotencyRecordingError) as exc_info:
            await use_case.execute(
                PublishListingInput(listing_id=listing.id, idempotency_key="key-1")
            )

        assert exc_info.value.kind is ErrorKind.IDEMPOTENCY_RECORDING_FAILED
        assert exc_info.value.details()["published"] is True
        stored = await deps["listings"].get_by_id(listing.id)
        assert stored.status == ListingStatus.PUBLISHED

    @pytest.mark.asyncio
    async def test_duplicate_key_race_surfaces_as_recording_error(self) -> None:
        keys = MagicMock()
        keys.get_by_key = AsyncMock(return_value=None)
        keys.save = AsyncMock(side_effect=DuplicateKeyError("key-1"))
        use_case, deps = _make_use_case(idempotency_repo=keys)
        listing = await _seed(deps["listings"])

        with pytest.raises(IdempotencyRecordingError) as exc_info:
            await use_case.execute(
                PublishListingInput(listing_id=listing.id, idempotency_key="key-1")
            )

        assert exc_info.value.details()["cause"] == "DUPLICATE_KEY"


class TestAuditFailures:
    @pytest.mark.asyncio
    async def test_audit_failure_does_not_fail_publish(self) -> None:
        audit = MagicMock()
        audit.append = AsyncMock(side_effect=RuntimeError("audit db down"))
        use_case, deps = _make_use_case(audit_repo=audit)
        listing = await _seed(deps["listings"])

        result = await use_case.execute(
            PublishListingInput(listing_id=listing.id, idempotency_key="key-1")
        )

        assert result.listing.status == ListingStatus.PUBLISHED
        assert len(result.audit_failures) == 1
        assert result.audit_failures[0].event_type == "LISTING_PUBLISHED"
        deps["publisher"].publish.assert_awaited_once()
        assert await deps["keys"].get_by_key("key-1") is not None


class TestConcurrentPublish:
    @pytest.mark.asyncio
    async def test_exactly_one_of_two_concurrent_publishes_wins(self) -> None:
        listings = _BarrierListingRepository(readers=2)
        use_case, deps = _make_use_case(listing_repo=listings)
        listing = await _seed(listings)

        results = await asyncio.gather(
            use_case.execute(PublishListingInput(listing_id=listing.id, idempotency_key="a")),
            use_case.execute(PublishListingInput(listing_id=listing.id, idempotency_key="b")),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], ConcurrentModificationError)
        assert errors[0].retryable is True
        stored = await listings.get_by_id(listing.id)
        assert stored.version == 1
        assert len(deps["audit"].entries) == 1
        recorded = [k for k in ("a", "b") if await deps["keys"].get_by_key(k) is not None]
        assert len(recorded) == 1
