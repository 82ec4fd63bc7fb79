import asyncio
from dataclasses import dataclass, field
from uuid import UUID

import structlog

from classifieds.application.interfaces.blob_storage import BlobStorage
from classifieds.application.interfaces.event_publisher import EventPublisher
from classifieds.application.interfaces.listing_repository import ListingRepository
from classifieds.application.services.audit_emitter import AuditEmitter, AuditFailure
from classifieds.domain.entities.listing_photo import ListingPhoto
from classifieds.domain.exceptions import (
    InvalidArgumentError,
    InvalidPhotoFormatError,
    ListingNotFoundError,
    PhotoLimitExceededError,
)
from classifieds.domain.value_objects.photo_metadata import PhotoMetadata

logger = structlog.get_logger(__name__)


@dataclass
class PhotoUpload:
    filename: str
    content_type: str
    size: int
    data: bytes
    # Listing the client says the file belongs to, if it said anything
    listing_id: UUID | None = None

    @classmethod
    def from_bytes(
        cls,
        filename: str,
        content_type: str,
        data: bytes,
        listing_id: UUID | None = None,
    ) -> "PhotoUpload":
        return cls(
            filename=filename,
            content_type=content_type,
            size=len(data),
            data=data,
            listing_id=listing_id,
        )


@dataclass
class UploadListingPhotosInput:
    listing_id: UUID
    files: list[PhotoUpload]


@dataclass
class UploadListingPhotosOutput:
    photos: list[ListingPhoto]
    audit_failures: list[AuditFailure] = field(default_factory=list)


class UploadListingPhotos:
    """
    Use case: Attach a batch of photos to a listing, all or nothing.

    The quota is checked once, up front, against the count that was read.
    Blobs are stored one by one; if anything fails before the single listing
    write has succeeded (validation, storage, the write itself, or
    cancellation) every blob stored by this batch is deleted again and the
    original error is re-raised. Audit entries are written only after the
    listing write.
    """

    def __init__(
        self,
        listing_repo: ListingRepository,
        blob_storage: BlobStorage,
        audit_emitter: AuditEmitter,
        event_publisher: EventPublisher,
    ) -> None:
        self._listing_repo = listing_repo
        self._blob_storage = blob_storage
        self._audit_emitter = audit_emitter
        self._event_publisher = event_publisher

    async def execute(self, input_data: UploadListingPhotosInput) -> UploadListingPhotosOutput:
        files = _accepted_files(input_data)

        listing = await self._listing_repo.get_by_id(input_data.listing_id)
        if listing is None:
            raise ListingNotFoundError(input_data.listing_id)

        if not listing.can_add_more_photos(len(files)):
            raise PhotoLimitExceededError(
                listing.max_photos_allowed, listing.photo_count, len(files)
            )

        stored_paths: list[str] = []
        photos: list[ListingPhoto] = []
        try:
            for upload in files:
                metadata = _validate(upload)
                storage_path = await self._blob_storage.put(upload.filename, upload.data)
                stored_paths.append(storage_path)

                photo = ListingPhoto.create(listing.id, metadata, storage_path)
                listing.add_photo(photo)
                photos.append(photo)

            await self._listing_repo.save(listing)
        except BaseException as exc:
            logger.warning(
                "photo_batch_aborted",
                listing_id=str(listing.id),
                stored=len(stored_paths),
                requested=len(files),
                error_type=type(exc).__name__,
            )
            # Shielded so a second cancellation cannot abandon stored blobs
            await asyncio.shield(self._compensate(listing.id, stored_paths))
            raise

        events = listing.collect_events()
        audit_failures = await self._audit_emitter.emit_many(events)
        await self._event_publisher.publish_many(events)

        logger.info(
            "listing_photos_uploaded",
            listing_id=str(listing.id),
            uploaded=len(photos),
            photo_count=listing.photo_count,
            audit_failures=len(audit_failures),
        )

        return UploadListingPhotosOutput(photos=photos, audit_failures=audit_failures)

    async def _compensate(self, listing_id: UUID, stored_paths: list[str]) -> None:
        for storage_path in stored_paths:
            try:
                await self._blob_storage.delete(storage_path)
            except Exception:
                logger.exception(
                    "photo_compensation_delete_failed",
                    listing_id=str(listing_id),
                    storage_path=storage_path,
                )
        if stored_paths:
            logger.info(
                "photo_batch_compensated",
                listing_id=str(listing_id),
                deleted=len(stored_paths),
            )


def _accepted_files(input_data: UploadListingPhotosInput) -> list[PhotoUpload]:
    files = [f for f in input_data.files or [] if f is not None and f.data]
    if not files:
        raise InvalidArgumentError("At least one non-empty file is required.")
    for upload in files:
        if upload.listing_id is not None and upload.listing_id != input_data.listing_id:
            raise InvalidArgumentError(
                f"File {upload.filename!r} targets listing {upload.listing_id}, "
                f"not {input_data.listing_id}."
            )
    return files


def _validate(upload: PhotoUpload) -> PhotoMetadata:
    metadata = PhotoMetadata(
        filename=upload.filename,
        content_type=upload.content_type,
        size=upload.size,
    )
    if upload.size != len(upload.data):
        raise InvalidPhotoFormatError(
            f"File {upload.filename!r} declares {upload.size} bytes but contains {len(upload.data)}."
        )
    return metadata
