from dataclasses import dataclass

from classifieds.domain.exceptions import InvalidArgumentError, InvalidPhotoFormatError

ALLOWED_CONTENT_TYPES: tuple[str, ...] = ("image/jpeg", "image/png", "image/webp")
MAX_FILE_SIZE_BYTES = 2 * 1024 * 1024
MIN_FILE_SIZE_BYTES = 1
MAX_FILENAME_LENGTH = 255


@dataclass(frozen=True)
class PhotoMetadata:
    """Validated description of an uploaded photo; content type is stored lower-cased."""

    filename: str
    content_type: str
    size: int

    def __post_init__(self) -> None:
        if not self.filename or not self.filename.strip():
            raise InvalidArgumentError("Filename cannot be empty.")
        if len(self.filename) > MAX_FILENAME_LENGTH:
            raise InvalidArgumentError(
                f"Filename exceeds maximum length of {MAX_FILENAME_LENGTH} characters."
            )
        if any(ord(ch) < 32 or ord(ch) == 127 for ch in self.filename):
            raise InvalidArgumentError("Filename cannot contain control characters.")

        content_type = (self.content_type or "").strip().lower()
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise InvalidPhotoFormatError(
                f"Invalid content type {self.content_type!r}. "
                f"Allowed types: {', '.join(ALLOWED_CONTENT_TYPES)}"
            )
        object.__setattr__(self, "content_type", content_type)

        if self.size < MIN_FILE_SIZE_BYTES:
            raise InvalidPhotoFormatError("File size must be positive.")
        if self.size > MAX_FILE_SIZE_BYTES:
            raise InvalidPhotoFormatError(
                f"File size exceeds maximum allowed size of {MAX_FILE_SIZE_BYTES // 1024 // 1024}MB."
            )
