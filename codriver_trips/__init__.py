"""Top-level package for the Co-Driver Trip Board."""

from .models import (
    Trip,
    Owner,
    TripRequest,
    DriverStatus,
    FilterConfig,
    DateKind,
    DateSelector,
    TimeSlot,
    SortMode,
    RequestStatus,
    ApprovalStatus,
    PlaceSuggestion,
    PlaceDetails,
)

from .trip_filter import (
    parse_twelve_hour,
    upcoming_trips,
    time_slot_for,
    matches_filter,
    sort_trips,
    filter_and_sort,
    build_filter_config,
)

from .errors import (
    TripBoardError,
    TripApiError,
    PlacesError,
    LocationUnavailable,
)

from .api_client import TripApiClient
from .places import PlacesClient, SuggestionDebouncer
from .location import DeviceLocator, StaticPositionSource
from .board import BoardConfig, CoDriverBoard, Notice
from .utils import DateFormatter, trips_frame, print_board_summary

__all__ = [
    "Trip",
    "Owner",
    "TripRequest",
    "DriverStatus",
    "FilterConfig",
    "DateKind",
    "DateSelector",
    "TimeSlot",
    "SortMode",
    "RequestStatus",
    "ApprovalStatus",
    "PlaceSuggestion",
    "PlaceDetails",
    "parse_twelve_hour",
    "upcoming_trips",
    "time_slot_for",
    "matches_filter",
    "sort_trips",
    "filter_and_sort",
    "build_filter_config",
    "TripBoardError",
    "TripApiError",
    "PlacesError",
    "LocationUnavailable",
    "TripApiClient",
    "PlacesClient",
    "SuggestionDebouncer",
    "DeviceLocator",
    "StaticPositionSource",
    "BoardConfig",
    "CoDriverBoard",
    "Notice",
    "DateFormatter",
    "trips_frame",
    "print_board_summary",
]
