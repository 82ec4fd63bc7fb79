from datetime import datetime, timezone
from uuid import UUID, uuid4

from classifieds.domain.entities.listing_photo import ListingPhoto
from classifieds.domain.enums.category import Category
from classifieds.domain.enums.listing_status import ListingStatus
from classifieds.domain.events.domain_events import (
    DomainEvent,
    ListingArchivedEvent,
    ListingCreatedEvent,
    ListingPublishedEvent,
    PhotoUploadedEvent,
)
from classifieds.domain.exceptions import InvalidArgumentError, PhotoLimitExceededError
from classifieds.domain.state_machine.lifecycle_state_machine import LifecycleStateMachine
from classifieds.domain.value_objects.money import Money

MAX_PHOTOS = 10
MIN_TITLE_LENGTH = 3
MAX_TITLE_LENGTH = 120
MAX_DESCRIPTION_LENGTH = 5000

_state_machine = LifecycleStateMachine()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _normalize_title(title: str | None) -> str:
    if title is None or not title.strip():
        raise InvalidArgumentError("Title cannot be empty.")
    trimmed = title.strip()
    if not MIN_TITLE_LENGTH <= len(trimmed) <= MAX_TITLE_LENGTH:
        raise InvalidArgumentError(
            f"Title must be between {MIN_TITLE_LENGTH} and {MAX_TITLE_LENGTH} characters."
        )
    return trimmed


def _normalize_description(description: str | None) -> str:
    if description is None:
        return ""
    trimmed = description.strip()
    if len(trimmed) > MAX_DESCRIPTION_LENGTH:
        raise InvalidArgumentError(
            f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters."
        )
    return trimmed


def _require_price(price: Money | None) -> Money:
    if not isinstance(price, Money):
        raise InvalidArgumentError("Price is required.")
    return price


def _require_category(category: Category | None) -> Category:
    if not isinstance(category, Category):
        raise InvalidArgumentError("Category is required.")
    return category


class Listing:
    """
    Aggregate root for a classifieds listing and the photos it owns.

    State is read through properties and changed only through the named
    business operations below, each of which validates before mutating.
    Successful operations record domain events; callers are responsible for
    collecting and emitting them once the change has been persisted.

    ``version`` is the optimistic-concurrency stamp the listing was read at.
    It is ``None`` for a listing that has never been stored and is only ever
    advanced by the repository.
    """

    def __init__(
        self,
        *,
        id: UUID,
        title: str,
        description: str,
        price: Money,
        category: Category,
        status: ListingStatus,
        created_at: datetime,
        updated_at: datetime,
        version: int | None,
        photos: list[ListingPhoto] | None = None,
    ) -> None:
        self._id = id
        self._title = title
        self._description = description
        self._price = price
        self._category = category
        self._status = status
        self._created_at = created_at
        self._updated_at = updated_at
        self._version = version
        self._photos: list[ListingPhoto] = list(photos or [])
        # Pending domain events (collected and cleared by the application layer)
        self._events: list[DomainEvent] = []

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        *,
        title: str,
        description: str | None,
        price: Money,
        category: Category,
    ) -> "Listing":
        now = _utcnow()
        listing = cls(
            id=uuid4(),
            title=_normalize_title(title),
            description=_normalize_description(description),
            price=_require_price(price),
            category=_require_category(category),
            status=ListingStatus.DRAFT,
            created_at=now,
            updated_at=now,
            version=None,
        )
        listing._events.append(
            ListingCreatedEvent(
                listing_id=listing.id,
                title=listing.title,
                price_amount=listing.price.amount,
                price_currency=listing.price.currency.value,
                category=listing.category.value,
            )
        )
        return listing

    @classmethod
    def reconstitute(
        cls,
        *,
        id: UUID,
        title: str,
        description: str,
        price: Money,
        category: Category,
        status: ListingStatus,
        created_at: datetime,
        updated_at: datetime,
        version: int,
        photos: list[ListingPhoto] | None = None,
    ) -> "Listing":
        """Rebuild a stored listing. No business validation is re-run."""
        if id is None:
            raise InvalidArgumentError("ID cannot be None when reconstituting.")
        if status is None:
            raise InvalidArgumentError("Status cannot be None when reconstituting.")
        if created_at is None or updated_at is None:
            raise InvalidArgumentError("Timestamps cannot be None when reconstituting.")
        if version is None:
            raise InvalidArgumentError("Version cannot be None when reconstituting.")
        return cls(
            id=id,
            title=title,
            description=description,
            price=price,
            category=category,
            status=status,
            created_at=created_at,
            updated_at=updated_at,
            version=version,
            photos=photos,
        )

    def stored_as(self, version: int) -> "Listing":
        """Copy of this listing as a store holds it after writing it at version."""
        return Listing.reconstitute(
            id=self._id,
            title=self._title,
            description=self._description,
            price=self._price,
            category=self._category,
            status=self._status,
            created_at=self._created_at,
            updated_at=self._updated_at,
            version=version,
            photos=list(self._photos),
        )

    # -------------------------------------------------------------------------
    # Read-only state
    # -------------------------------------------------------------------------

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def title(self) -> str:
        return self._title

    @property
    def description(self) -> str:
        return self._description

    @property
    def price(self) -> Money:
        return self._price

    @property
    def category(self) -> Category:
        return self._category

    @property
    def status(self) -> ListingStatus:
        return self._status

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def version(self) -> int | None:
        return self._version

    @property
    def photos(self) -> tuple[ListingPhoto, ...]:
        return tuple(self._photos)

    @property
    def photo_count(self) -> int:
        return len(self._photos)

    @property
    def max_photos_allowed(self) -> int:
        return MAX_PHOTOS

    @property
    def is_draft(self) -> bool:
        return self._status is ListingStatus.DRAFT

    @property
    def is_published(self) -> bool:
        return self._status is ListingStatus.PUBLISHED

    @property
    def is_archived(self) -> bool:
        return self._status is ListingStatus.ARCHIVED

    def can_add_more_photos(self, count: int = 1) -> bool:
        return len(self._photos) + count <= MAX_PHOTOS

    # -------------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------------

    def publish(self) -> None:
        self._transition_to(ListingStatus.PUBLISHED)
        self._events.append(ListingPublishedEvent(listing_id=self._id, title=self._title))

    def archive(self) -> None:
        self._transition_to(ListingStatus.ARCHIVED)
        self._events.append(ListingArchivedEvent(listing_id=self._id, title=self._title))

    def _transition_to(self, new_status: ListingStatus) -> None:
        # May raise InvalidStateTransitionError, in which case nothing is mutated in that case
        _state_machine.validate_transition(self._status, new_status)
        self._status = new_status
        self._updated_at = _utcnow()

    # -------------------------------------------------------------------------
    # Photos
    # -------------------------------------------------------------------------

    def add_photo(self, photo: ListingPhoto) -> None:
        if photo is None:
            raise InvalidArgumentError("Photo is required.")
        if photo.listing_id != self._id:
            raise InvalidArgumentError(
                f"Photo {photo.id} belongs to listing {photo.listing_id}, not {self._id}."
            )
        if not self.can_add_more_photos():
            raise PhotoLimitExceededError(MAX_PHOTOS, len(self._photos), 1)

        self._photos.append(photo)
        self._updated_at = _utcnow()
        self._events.append(
            PhotoUploadedEvent(
                listing_id=self._id,
                photo_id=photo.id,
                filename=photo.filename,
                file_size=photo.size,
                storage_path=photo.storage_path,
            )
        )

    # -------------------------------------------------------------------------
    # Field updates (independent of status)
    # -------------------------------------------------------------------------

    def update_title(self, title: str) -> None:
        self._title = _normalize_title(title)
        self._updated_at = _utcnow()

    def update_description(self, description: str | None) -> None:
        self._description = _normalize_description(description)
        self._updated_at = _utcnow()

    def update_price(self, price: Money) -> None:
        self._price = _require_price(price)
        self._updated_at = _utcnow()

    def update_category(self, category: Category) -> None:
        self._category = _require_category(category)
        self._updated_at = _utcnow()

    # -------------------------------------------------------------------------
    # Event collection
    # -------------------------------------------------------------------------

    def collect_events(self) -> list[DomainEvent]:
        """Return pending events and clear the internal buffer."""
        events = list(self._events)
        self._events.clear()
        return events

    def __repr__(self) -> str:
        return (
            f"Listing(id={self._id}, status={self._status.value}, "
            f"version={self._version}, photos={len(self._photos)})"
        )
