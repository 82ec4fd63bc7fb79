"""Unit tests for the best-effort audit emitter."""
import json
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from classifieds.application.services.audit_emitter import AuditEmitter
from classifieds.domain.events.domain_events import (
    AuditEmissionFailedEvent,
    ListingArchivedEvent,
    ListingCreatedEvent,
    ListingPublishedEvent,
    PhotoUploadedEvent,
)
from classifieds.infrastructure.memory.audit_log_repository import InMemoryAuditLogRepository


def _make_failing_repo() -> MagicMock:
    repo = MagicMock()
    repo.append = AsyncMock(side_effect=RuntimeError("audit db down"))
    return repo


def _make_publisher() -> MagicMock:
    pub = MagicMock()
    pub.publish = AsyncMock()
    return pub


class TestEmit:
    @pytest.mark.asyncio
    async def test_writes_entry_for_published_event(self) -> None:
        repo = InMemoryAuditLogRepository()
        emitter = AuditEmitter(repo)
        listing_id = uuid4()

        failure = await emitter.emit(ListingPublishedEvent(listing_id=listing_id, title="Bike"))

        assert failure is None
        [entry] = repo.entries
        assert entry.event_type == "LISTING_PUBLISHED"
        assert entry.listing_id == listing_id
        assert json.loads(entry.payload)["title"] == "Bike"

    @pytest.mark.asyncio
    async def test_maps_every_audited_event_type(self) -> None:
        repo = InMemoryAuditLogRepository()
        emitter = AuditEmitter(repo)
        listing_id = uuid4()

        await emitter.emit_many(
            [
                ListingPublishedEvent(listing_id=listing_id),
                ListingArchivedEvent(listing_id=listing_id),
                PhotoUploadedEvent(listing_id=listing_id, filename="a.jpg"),
            ]
        )

        assert [e.event_type for e in repo.entries] == [
            "LISTING_PUBLISHED",
            "LISTING_ARCHIVED",
            "PHOTO_UPLOADED",
        ]

    @pytest.mark.asyncio
    async def test_created_event_is_not_audited(self) -> None:
        repo = InMemoryAuditLogRepository()
        emitter = AuditEmitter(repo)

        assert await emitter.emit(ListingCreatedEvent(listing_id=uuid4())) is None
        assert repo.entries == []


class TestFailures:
    @pytest.mark.asyncio
    async def test_failure_is_returned_not_raised(self) -> None:
        emitter = AuditEmitter(_make_failing_repo())
        event = ListingPublishedEvent(listing_id=uuid4())

        failure = await emitter.emit(event)

        assert failure is not None
        assert failure.event_type == "LISTING_PUBLISHED"
        assert failure.listing_id == event.listing_id
        assert failure.source_event_id == event.event_id
        assert "audit db down" in failure.error

    @pytest.mark.asyncio
    async def test_failure_is_reported_on_side_channel(self) -> None:
        publisher = _make_publisher()
        emitter = AuditEmitter(_make_failing_repo(), failure_publisher=publisher)
        event = PhotoUploadedEvent(listing_id=uuid4())

        await emitter.emit(event)

        publisher.publish.assert_awaited_once()
        reported = publisher.publish.call_args.args[0]
        assert isinstance(reported, AuditEmissionFailedEvent)
        assert reported.audit_event_type == "PHOTO_UPLOADED"
        assert reported.source_event_id == event.event_id

    @pytest.mark.asyncio
    async def test_report_failure_is_swallowed(self) -> None:
        publisher = _make_publisher()
        publisher.publish = AsyncMock(side_effect=ConnectionError("bus down"))
        emitter = AuditEmitter(_make_failing_repo(), failure_publisher=publisher)

        failure = await emitter.emit(ListingArchivedEvent(listing_id=uuid4()))

        assert failure is not None

    @pytest.mark.asyncio
    async def test_emit_many_keeps_going_after_failure(self) -> None:
        repo = MagicMock()
        repo.append = AsyncMock(side_effect=[RuntimeError("boom"), None, None])
        emitter = AuditEmitter(repo)
        listing_id = uuid4()

        failures = await emitter.emit_many(
            [PhotoUploadedEvent(listing_id=listing_id) for _ in range(3)]
        )

        assert len(failures) == 1
        assert repo.append.await_count == 3
