"""Seat allocation error taxonomy

All of these are expected outcomes of normal operation. They are raised by the
services, rolled back by the allocation engine and turned into JSON responses
by the handler registered in ``seating.main``.
"""

from typing import Optional


class SeatingError(Exception):
    """Base class for recoverable allocation failures"""

    status_code = 400
    kind = "seating_error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ConflictError(SeatingError):
    """A seat is already held by an active allocation for an overlapping window"""

    status_code = 409
    kind = "conflict"

    def __init__(self, message: str, seat_label: Optional[str] = None):
        self.seat_label = seat_label
        super().__init__(message)


class SeatsNoLongerAvailableError(ConflictError):
    """A stored seat preference option was taken since it was last evaluated"""

    kind = "seats_no_longer_available"


class PartySizeMismatchError(SeatingError):
    """Seat count does not match the occupant's party size"""

    status_code = 422
    kind = "party_size_mismatch"

    def __init__(self, expected: int, got: int):
        self.expected = expected
        self.got = got
        super().__init__(f"Need exactly {expected} seat(s), got {got}")


class NotFoundError(SeatingError):
    """Occupant, allocation or layout missing, or nothing in the required state"""

    status_code = 404
    kind = "not_found"


class ValidationError(SeatingError):
    """Malformed request: empty seat list, bad time window, unknown seat label"""

    status_code = 422
    kind = "validation_error"
