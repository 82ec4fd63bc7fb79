"""
Error taxonomy shared by the domain, the workflows and the repository ports.

Every error carries a stable ``kind`` tag so callers (the HTTP layer in
particular) can branch on it without inspecting message text.
"""
from enum import Enum
from uuid import UUID


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    LISTING_NOT_FOUND = "LISTING_NOT_FOUND"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    PHOTO_LIMIT_EXCEEDED = "PHOTO_LIMIT_EXCEEDED"
    INVALID_PHOTO_FORMAT = "INVALID_PHOTO_FORMAT"
    IDEMPOTENCY_CONFLICT = "IDEMPOTENCY_CONFLICT"
    DUPLICATE_KEY = "DUPLICATE_KEY"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"
    STORAGE_FAILURE = "STORAGE_FAILURE"
    IDEMPOTENCY_RECORDING_FAILED = "IDEMPOTENCY_RECORDING_FAILED"


class ClassifiedsError(Exception):
    """Base class for every error raised by the core."""

    kind: ErrorKind
    retryable: bool = False

    def details(self) -> dict:  # type: ignore[type-arg]
        """Structured context for logs and error responses."""
        return {}


class InvalidArgumentError(ClassifiedsError, ValueError):
    """Malformed input caught before any side effect."""

    kind = ErrorKind.INVALID_ARGUMENT
    retryable = True


class ListingNotFoundError(ClassifiedsError):
    kind = ErrorKind.LISTING_NOT_FOUND

    def __init__(self, listing_id: UUID) -> None:
        self.listing_id = listing_id
        super().__init__(f"Listing {listing_id} not found.")

    def details(self) -> dict:  # type: ignore[type-arg]
        return {"listing_id": str(self.listing_id)}


class PhotoLimitExceededError(ClassifiedsError):
    kind = ErrorKind.PHOTO_LIMIT_EXCEEDED
    retryable = True

    def __init__(self, max_photos: int, current: int, attempted: int) -> None:
        self.max_photos = max_photos
        self.current = current
        self.attempted = attempted
        super().__init__(
            f"Cannot add {attempted} photo(s). Listing already has {current} photo(s) "
            f"and maximum allowed is {max_photos}."
        )

    def details(self) -> dict:  # type: ignore[type-arg]
        return {"max": self.max_photos, "current": self.current, "attempted": self.attempted}


class InvalidPhotoFormatError(ClassifiedsError):
    """Per-file validation failure (content type or size)."""

    kind = ErrorKind.INVALID_PHOTO_FORMAT
    retryable = True


class IdempotencyConflictError(ClassifiedsError):
    kind = ErrorKind.IDEMPOTENCY_CONFLICT

    def __init__(self, idempotency_key: str, listing_id: UUID) -> None:
        self.idempotency_key = idempotency_key
        self.listing_id = listing_id
        super().__init__(
            f"Operation with idempotency key '{idempotency_key}' "
            f"already processed for listing {listing_id}."
        )

    def details(self) -> dict:  # type: ignore[type-arg]
        return {"idempotency_key": self.idempotency_key, "listing_id": str(self.listing_id)}


class DuplicateKeyError(ClassifiedsError):
    """Uniqueness violation reported by the idempotency store."""

    kind = ErrorKind.DUPLICATE_KEY

    def __init__(self, idempotency_key: str) -> None:
        self.idempotency_key = idempotency_key
        super().__init__(f"A live idempotency record already exists for key '{idempotency_key}'.")

    def details(self) -> dict:  # type: ignore[type-arg]
        return {"idempotency_key": self.idempotency_key}


class ConcurrentModificationError(ClassifiedsError):
    """The stored listing version changed since it was read."""

    kind = ErrorKind.CONCURRENT_MODIFICATION
    retryable = True

    def __init__(self, listing_id: UUID, expected_version: int | None) -> None:
        self.listing_id = listing_id
        self.expected_version = expected_version
        super().__init__(
            f"Listing {listing_id} was modified concurrently "
            f"(expected version {expected_version}). Re-read and retry."
        )

    def details(self) -> dict:  # type: ignore[type-arg]
        return {"listing_id": str(self.listing_id), "expected_version": self.expected_version}


class StorageFailureError(ClassifiedsError):
    """Blob or audit I/O failure."""

    kind = ErrorKind.STORAGE_FAILURE
    retryable = True
