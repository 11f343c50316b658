"""
Co-Driver Trip Board - Board Controller
Holds the state behind the co-driver jobs screen and wires the trip API,
place suggestions and device location to the filtering engine
"""

import os
import threading
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Sequence

from dotenv import load_dotenv
import logging

from .api_client import TripApiClient
from .errors import LocationUnavailable, PlacesError, TripBoardError
from .models import (
    ApprovalStatus,
    DateSelector,
    DriverStatus,
    FilterConfig,
    PlaceSuggestion,
    SortMode,
    TimeSlot,
    Trip,
    TripRequest,
)
from .places import PlacesClient, SuggestionDebouncer
from .trip_filter import build_filter_config, filter_and_sort, upcoming_trips
from .utils import DateFormatter, build_requests_map, print_board_summary

logger = logging.getLogger(__name__)

FROM = 'from'
TO = 'to'


@dataclass
class BoardConfig:
    """Configuration for the co-driver board"""
    api_base_url: str
    api_token: Optional[str] = None
    places_api_key: Optional[str] = None
    region_codes: Sequence[str] = ("IN",)
    filter_kind: str = "co-driver-jobs"
    refresh_interval_seconds: float = 15.0
    suggestion_delay_seconds: float = 0.4
    min_suggestion_length: int = 4  # characters typed before suggestions are fetched
    request_timeout_seconds: float = 10.0
    timezone: Optional[str] = None  # e.g. "Asia/Kolkata"; trip dates are read in this zone

    @classmethod
    def from_env(cls, **overrides) -> 'BoardConfig':
        """Build a config from the environment (and a .env file, if present)"""
        load_dotenv()
        values = {
            'api_base_url': os.getenv("CODRIVER_API_URL", ""),
            'api_token': os.getenv("CODRIVER_API_TOKEN"),
            'places_api_key': os.getenv("GOOGLE_PLACES_API_KEY"),
            'timezone': os.getenv("CODRIVER_TIMEZONE"),
        }
        values.update(overrides)
        return cls(**values)


@dataclass
class Notice:
    """Dismissable message shown to the user"""
    title: str
    message: str


@dataclass
class ModalFilters:
    sort_mode: SortMode = SortMode.RELEVANCE
    time_slots: List[TimeSlot] = field(default_factory=list)


class CoDriverBoard:
    """Screen state for the co-driver jobs list"""

    def __init__(self, config: BoardConfig, user_id: str,
                 api: Optional[TripApiClient] = None,
                 places: Optional[PlacesClient] = None,
                 locator=None,
                 on_notice: Optional[Callable[[Notice], None]] = None,
                 timer_factory: Callable = threading.Timer,
                 clock: Callable[[], datetime] = datetime.now):
        self.config = config
        self.user_id = user_id
        self.api = api or TripApiClient(
            config.api_base_url,
            token=config.api_token,
            timeout=config.request_timeout_seconds,
            tz=config.timezone,
        )
        if places is None and config.places_api_key:
            places = PlacesClient(config.places_api_key, config.region_codes,
                                  timeout=config.request_timeout_seconds)
        self.places = places
        self.locator = locator
        self.on_notice = on_notice
        self.timer_factory = timer_factory
        self.clock = clock

        self.debouncer = None
        if self.places is not None:
            self.debouncer = SuggestionDebouncer(
                self.places,
                self._set_suggestions,
                delay=config.suggestion_delay_seconds,
                min_length=config.min_suggestion_length,
                timer_factory=timer_factory,
            )

        self.driver_status = DriverStatus()
        self.status_loading = True
        self.trips: List[Trip] = []
        self.requests_map: Dict[str, TripRequest] = {}
        self.loading = False
        self.refreshing = False

        self.from_text = ""
        self.to_text = ""
        self.date_selector = DateSelector.today()
        self.applied = ModalFilters()
        self.pending = ModalFilters()
        self.suggestions: Dict[str, List[PlaceSuggestion]] = {FROM: [], TO: []}

        self.notices: List[Notice] = []
        self._refresh_timer = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Notices                                                            #
    # ------------------------------------------------------------------ #
    def _notify(self, title: str, message: str) -> None:
        notice = Notice(title, message)
        self.notices.append(notice)
        if self.on_notice:
            self.on_notice(notice)

    # ------------------------------------------------------------------ #
    # Driver status & data loading                                       #
    # ------------------------------------------------------------------ #
    @property
    def is_approved(self) -> bool:
        return self.driver_status.approval_status == ApprovalStatus.APPROVED

    def check_status(self) -> DriverStatus:
        """Refresh the driver's registration/approval status (failures are only logged)"""
        try:
            self.driver_status = self.api.get_driver_status(self.user_id)
        except TripBoardError as e:
            logger.error(f"Failed to check status for {self.user_id}: {e}")
        finally:
            self.status_loading = False
        return self.driver_status

    def fetch_data(self, is_refresh: bool = False) -> bool:
        """
        Load trips and this driver's requests, replacing what the board holds.

        A failed explicit load raises a notice; a failed refresh is only logged.
        Returns True when both calls succeeded.
        """
        if not is_refresh:
            self.loading = True
        try:
            trips = self.api.list_trips(self.config.filter_kind, self.user_id)
            requests = self.api.list_driver_requests(self.user_id)
        except TripBoardError as e:
            logger.error(f"Failed to fetch dashboard data: {e}")
            if not is_refresh:
                self._notify("Error", "Could not fetch dashboard data.")
            return False
        finally:
            self.loading = False
            self.refreshing = False

        upcoming = upcoming_trips(trips, self.clock())
        with self._lock:
            self.trips = upcoming
            self.requests_map = build_requests_map(requests)
        logger.info(f"Board holds {len(upcoming)} upcoming of {len(trips)} trips")
        return True

    def refresh(self) -> bool:
        """Pull-to-refresh"""
        self.refreshing = True
        return self.fetch_data(is_refresh=True)

    def on_focus(self) -> None:
        """Screen came into view: check status, reset the To field, try to locate, load"""
        self.check_status()
        self.to_text = ""
        if self.locator is not None:
            self.use_current_location(is_auto=True)
        if self.is_approved:
            self.fetch_data()
            self.start_auto_refresh()

    # ------------------------------------------------------------------ #
    # Auto refresh                                                       #
    # ------------------------------------------------------------------ #
    def start_auto_refresh(self) -> None:
        """Silently refresh every ``refresh_interval_seconds`` while approved"""
        self.stop_auto_refresh()
        if not self.is_approved:
            return
        self._schedule_refresh()

    def _schedule_refresh(self) -> None:
        timer = self.timer_factory(self.config.refresh_interval_seconds, self._auto_refresh)
        timer.daemon = True
        self._refresh_timer = timer
        timer.start()

    def _auto_refresh(self) -> None:
        if self._refresh_timer is None:
            return
        self.fetch_data(is_refresh=True)
        if self._refresh_timer is not None and self.is_approved:
            self._schedule_refresh()

    def stop_auto_refresh(self) -> None:
        timer, self._refresh_timer = self._refresh_timer, None
        if timer is not None:
            timer.cancel()

    # ------------------------------------------------------------------ #
    # Location inputs                                                    #
    # ------------------------------------------------------------------ #
    def _set_suggestions(self, field: str, results: List[PlaceSuggestion]) -> None:
        self.suggestions[field] = list(results)

    def set_location_text(self, field: str, text: str) -> None:
        """Keystroke in the From/To input"""
        if field == FROM:
            self.from_text = text
        elif field == TO:
            self.to_text = text
        else:
            raise ValueError(f"Unknown location field '{field}'")
        if self.debouncer is not None:
            self.debouncer.on_text_changed(field, text)

    def select_suggestion(self, field: str, suggestion: PlaceSuggestion) -> None:
        """Use the suggestion text now, then upgrade it to the city name when details load"""
        self._set_location(field, suggestion.text)
        self.suggestions[field] = []
        if self.places is None:
            return

        try:
            details = self.places.place_details(suggestion.place_id)
        except PlacesError as e:
            logger.error(f"Details fetch error for {suggestion.place_id}: {e}")
            return
        if details and details.display_name:
            self._set_location(field, details.display_name)

    def _set_location(self, field: str, value: str) -> None:
        if field == FROM:
            self.from_text = value
        else:
            self.to_text = value

    def swap_locations(self) -> None:
        self.from_text, self.to_text = self.to_text, self.from_text

    def use_current_location(self, is_auto: bool = False) -> Optional[str]:
        """
        Fill the From field with the device's city.

        Problems are reported to the user only when they asked for it
        (``is_auto`` False); the automatic lookup on focus stays quiet.
        """
        if self.locator is None:
            return None
        try:
            city = self.locator.locate_city(prompt=not is_auto)
        except LocationUnavailable as e:
            logger.info(f"Location unavailable ({e.reason}): {e}")
            if not is_auto:
                titles = {
                    LocationUnavailable.DISABLED: "Location Disabled",
                    LocationUnavailable.DENIED: "Permission Denied",
                }
                self._notify(titles.get(e.reason, "Error"), str(e))
            return None
        except Exception as e:
            logger.error(f"Location error details: {e}", exc_info=True)
            if not is_auto:
                self._notify("Error", "Failed to get location. Please ensure GPS is on and you have an internet connection.")
            return None

        self.from_text = city
        return city

    # ------------------------------------------------------------------ #
    # Date & modal filters                                               #
    # ------------------------------------------------------------------ #
    def select_date(self, selector: DateSelector) -> None:
        self.date_selector = selector

    def open_filters(self) -> None:
        """Start editing from the applied values"""
        self.pending = ModalFilters(self.applied.sort_mode, list(self.applied.time_slots))

    def set_sort(self, sort_mode: SortMode) -> None:
        self.pending.sort_mode = sort_mode

    def toggle_time_slot(self, slot: TimeSlot) -> None:
        if slot in self.pending.time_slots:
            self.pending.time_slots.remove(slot)
        else:
            self.pending.time_slots.append(slot)

    def clear_filters(self) -> None:
        self.pending = ModalFilters()

    def apply_filters(self) -> None:
        self.applied = ModalFilters(self.pending.sort_mode, list(self.pending.time_slots))

    # ------------------------------------------------------------------ #
    # Output                                                             #
    # ------------------------------------------------------------------ #
    def filter_config(self, today: Optional[date] = None) -> FilterConfig:
        today = today or self.clock().date()
        return build_filter_config(
            today,
            self.date_selector,
            from_text=self.from_text,
            to_text=self.to_text,
            time_slots=self.applied.time_slots,
            sort_mode=self.applied.sort_mode,
        )

    def visible_trips(self, today: Optional[date] = None) -> List[Trip]:
        """Trips to show, filtered and sorted with the current inputs"""
        with self._lock:
            trips = list(self.trips)
        return filter_and_sort(trips, self.filter_config(today))

    def date_label(self, today: Optional[date] = None) -> str:
        """Label for the date picker, e.g. "Sun 18-Oct"."""
        return DateFormatter.format_date_display(self.filter_config(today).target_date)

    def request_for(self, trip: Trip) -> Optional[TripRequest]:
        return self.requests_map.get(trip.trip_id)

    def request_trip(self, trip: Trip) -> Optional[TripRequest]:
        """Apply as co-driver for ``trip``; a failure becomes a notice"""
        try:
            request = self.api.create_trip_request(self.user_id, trip)
        except TripBoardError as e:
            logger.error(f"Failed to request trip {trip.trip_id}: {e}")
            self._notify("Error", str(e) or "Failed to send request.")
            return None
        with self._lock:
            self.requests_map[trip.trip_id] = request
        self._notify("Success", "Request sent successfully!")
        return request

    def cancel_request(self, trip: Trip) -> bool:
        request = self.requests_map.get(trip.trip_id)
        if request is None or not request.request_id:
            return False
        try:
            self.api.cancel_trip_request(request.request_id)
        except TripBoardError as e:
            logger.error(f"Failed to cancel request {request.request_id}: {e}")
            self._notify("Error", str(e) or "Failed to cancel request.")
            return False
        with self._lock:
            self.requests_map.pop(trip.trip_id, None)
        self._notify("Success", "Request cancelled.")
        return True


def main() -> None:
    """Main entry point"""
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    config = BoardConfig.from_env()
    user_id = os.getenv("CODRIVER_USER_ID", "")
    board = CoDriverBoard(config, user_id)

    board.check_status()
    if not board.driver_status.is_registered:
        print("\n❌ Not registered as a driver / co-driver")
        return
    if not board.is_approved:
        print(f"\n⏳ Driver approval is {board.driver_status.approval_status.value}")
        return

    if board.fetch_data():
        print_board_summary(board.visible_trips(), board.requests_map, board.date_label())
    else:
        print("\n❌ Failed to load co-driver jobs")


if __name__ == "__main__":
    main()
