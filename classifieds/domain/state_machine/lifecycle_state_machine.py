from classifieds.domain.enums.listing_status import ListingStatus
from classifieds.domain.exceptions import ClassifiedsError, ErrorKind


# Mapping of valid transitions: from_status -> set of allowed to_statuses
VALID_TRANSITIONS: dict[ListingStatus, frozenset[ListingStatus]] = {
    ListingStatus.DRAFT: frozenset({ListingStatus.PUBLISHED}),
    ListingStatus.PUBLISHED: frozenset({ListingStatus.ARCHIVED}),
    # Terminal state: no valid outgoing transitions
    ListingStatus.ARCHIVED: frozenset(),
}


class InvalidStateTransitionError(ClassifiedsError):
    """Raised when an invalid status transition is attempted."""

    kind = ErrorKind.INVALID_STATE_TRANSITION

    def __init__(self, from_status: ListingStatus, to_status: ListingStatus) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Cannot transition from {from_status.value} to {to_status.value}. "
            f"Allowed transitions: {sorted(s.value for s in VALID_TRANSITIONS.get(from_status, frozenset()))}"
        )

    def details(self) -> dict:  # type: ignore[type-arg]
        return {"from_status": self.from_status.value, "to_status": self.to_status.value}


class LifecycleStateMachine:
    """
    Validates and enforces status transitions for the listing lifecycle.

    Stateless. Call validate_transition() with explicit statuses.
    """

    def can_transition(self, from_status: ListingStatus, to_status: ListingStatus) -> bool:
        """Return True if transitioning from_status → to_status is permitted."""
        if from_status.is_terminal:
            return False
        return to_status in VALID_TRANSITIONS.get(from_status, frozenset())

    def validate_transition(self, from_status: ListingStatus, to_status: ListingStatus) -> None:
        """Raise InvalidStateTransitionError if the transition is not permitted."""
        if not self.can_transition(from_status, to_status):
            raise InvalidStateTransitionError(from_status, to_status)

    def get_allowed_transitions(self, from_status: ListingStatus) -> frozenset[ListingStatus]:
        """Return the set of statuses reachable from from_status."""
        return VALID_TRANSITIONS.get(from_status, frozenset())
