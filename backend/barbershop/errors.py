"""
Error taxonomy of the availability engine.

Every error carries the HTTP status the routers answer with. Only
IncompleteConfiguration and UnsupportedRegion are operator problems; the
rest are caller-facing.
"""


class BookingError(Exception):
    """Base class for all engine errors."""

    status_code = 500
    kind = "error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class UnsupportedRegion(BookingError):
    """Holiday calendar requested for an unknown region code."""

    kind = "unsupported_region"

    def __init__(self, region: str):
        super().__init__(f"Unsupported holiday region: {region!r}")
        self.region = region


class IncompleteConfiguration(BookingError):
    """A required configuration row is missing. Never defaulted."""

    kind = "incomplete_configuration"


class InvalidRequest(BookingError):
    status_code = 400
    kind = "invalid_request"


class SlotNoLongerAvailable(BookingError):
    """Benign race: the slot was taken or closed between listing and booking."""

    status_code = 409
    kind = "slot_no_longer_available"


class NotFound(BookingError):
    status_code = 404
    kind = "not_found"
