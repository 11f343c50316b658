class TripBoardError(Exception):
    """Base class for co-driver board errors."""


class TripApiError(TripBoardError):
    """The trip back end could not be reached or rejected the call."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class PlacesError(TripBoardError):
    """Places autocomplete/details lookup failed."""


class LocationUnavailable(TripBoardError):
    """Device location could not be determined."""

    DISABLED = "disabled"
    DENIED = "denied"
    NO_ADDRESS = "no_address"
    FAILED = "failed"

    def __init__(self, reason: str, message: str = ""):
        super().__init__(message or reason)
        self.reason = reason
