"""Exceptions raised by the booking draft store."""


class BookingError(Exception):
    """Base exception for booking orchestration errors."""


class DraftInvariantError(BookingError):
    """
    Raised when an update would break a draft invariant.

    Examples: committing a payment plan before a reservation exists, or
    committing a second, different reservation id onto the same draft.
    """


class DraftClosedError(BookingError):
    """Raised when an update reaches a draft whose wizard was torn down."""
