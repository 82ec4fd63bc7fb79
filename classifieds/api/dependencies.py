"""
FastAPI dependency injection wiring.

Each dependency function returns a fully-constructed object with its
collaborators injected, keeping the route handlers thin. Adapters are
process-wide singletons; tests swap them through ``app.dependency_overrides``.
"""
from datetime import timedelta
from functools import lru_cache

from fastapi import Depends

from classifieds.application.coordinators.idempotency_coordinator import IdempotencyCoordinator
from classifieds.application.interfaces.audit_log_repository import AuditLogRepository
from classifieds.application.interfaces.blob_storage import BlobStorage
from classifieds.application.interfaces.event_publisher import EventPublisher
from classifieds.application.interfaces.idempotency_repository import IdempotencyRepository
from classifieds.application.interfaces.listing_repository import ListingRepository
from classifieds.application.interfaces.photo_repository import PhotoRepository
from classifieds.application.services.audit_emitter import AuditEmitter
from classifieds.application.use_cases.archive_listing import ArchiveListing
from classifieds.application.use_cases.create_listing import CreateListing
from classifieds.application.use_cases.get_listing import GetListing, ListListingPhotos
from classifieds.application.use_cases.list_listings import ListListings
from classifieds.application.use_cases.publish_listing import PublishListing
from classifieds.application.use_cases.upload_listing_photos import UploadListingPhotos
from classifieds.config import settings
from classifieds.infrastructure.database.connection import AsyncSessionLocal
from classifieds.infrastructure.database.repositories.audit_log_repository import (
    SqlAlchemyAuditLogRepository,
)
from classifieds.infrastructure.database.repositories.idempotency_repository import (
    SqlAlchemyIdempotencyRepository,
)
from classifieds.infrastructure.database.repositories.listing_repository import (
    SqlAlchemyListingRepository,
)
from classifieds.infrastructure.database.repositories.photo_repository import (
    SqlAlchemyPhotoRepository,
)
from classifieds.infrastructure.messaging.noop_publisher import NoOpEventPublisher
from classifieds.infrastructure.messaging.rabbitmq_publisher import RabbitMQPublisher
from classifieds.infrastructure.storage.local_blob_storage import LocalFileBlobStorage


# ---- Adapters --------------------------------------------------------------

@lru_cache
def get_listing_repo() -> ListingRepository:
    return SqlAlchemyListingRepository(AsyncSessionLocal)


@lru_cache
def get_photo_repo() -> PhotoRepository:
    return SqlAlchemyPhotoRepository(AsyncSessionLocal)


@lru_cache
def get_idempotency_repo() -> IdempotencyRepository:
    return SqlAlchemyIdempotencyRepository(AsyncSessionLocal)


@lru_cache
def get_audit_repo() -> AuditLogRepository:
    return SqlAlchemyAuditLogRepository(AsyncSessionLocal)


@lru_cache
def get_blob_storage() -> BlobStorage:
    return LocalFileBlobStorage(settings.blob_storage_root)


@lru_cache
def get_event_publisher() -> EventPublisher:
    if settings.event_publishing_enabled:
        return RabbitMQPublisher(settings.rabbitmq_url)
    return NoOpEventPublisher()


# ---- Services --------------------------------------------------------------

def get_idempotency_coordinator(
    repo: IdempotencyRepository = Depends(get_idempotency_repo),
) -> IdempotencyCoordinator:
    return IdempotencyCoordinator(repo, ttl=timedelta(hours=settings.idempotency_ttl_hours))


def get_audit_emitter(
    audit_repo: AuditLogRepository = Depends(get_audit_repo),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> AuditEmitter:
    return AuditEmitter(audit_repo, failure_publisher=event_publisher)


# ---- Use-case dependencies -------------------------------------------------

def get_create_listing_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> CreateListing:
    return CreateListing(listing_repo, event_publisher)


def get_get_listing_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
) -> GetListing:
    return GetListing(listing_repo)


def get_list_listings_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
) -> ListListings:
    return ListListings(listing_repo)


def get_list_photos_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
    photo_repo: PhotoRepository = Depends(get_photo_repo),
) -> ListListingPhotos:
    return ListListingPhotos(listing_repo, photo_repo)


def get_publish_listing_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
    idempotency: IdempotencyCoordinator = Depends(get_idempotency_coordinator),
    audit_emitter: AuditEmitter = Depends(get_audit_emitter),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> PublishListing:
    return PublishListing(listing_repo, idempotency, audit_emitter, event_publisher)


def get_archive_listing_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
    audit_emitter: AuditEmitter = Depends(get_audit_emitter),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> ArchiveListing:
    return ArchiveListing(listing_repo, audit_emitter, event_publisher)


def get_upload_photos_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
    blob_storage: BlobStorage = Depends(get_blob_storage),
    audit_emitter: AuditEmitter = Depends(get_audit_emitter),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> UploadListingPhotos:
    return UploadListingPhotos(listing_repo, blob_storage, audit_emitter, event_publisher)
