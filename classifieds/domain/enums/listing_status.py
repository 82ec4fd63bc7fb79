from enum import Enum


class ListingStatus(str, Enum):
    """All possible states in the listing lifecycle."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"

    @property
    def is_terminal(self) -> bool:
        """Terminal states cannot be transitioned out of."""
        return self is ListingStatus.ARCHIVED
