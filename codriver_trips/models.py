"""
Co-Driver Trip Board - Data Model
Trips, requests and the filter configuration the board works with
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import FrozenSet, Optional


class TimeSlot(Enum):
    """Fixed 6-hour buckets of the day used for filtering"""
    NIGHT = "night"
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class SortMode(Enum):
    RELEVANCE = "relevance"
    EARLIEST_DEPARTURE = "early"
    LATEST_DEPARTURE = "late"


class RequestStatus(Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ApprovalStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Owner:
    """Display profile of the person who posted a trip"""
    owner_id: Optional[str] = None
    name: Optional[str] = None
    profile_image: Optional[str] = None


@dataclass(frozen=True)
class Trip:
    """A posted ride with route, date, time and owner"""
    trip_id: str
    from_location: str
    to_location: str
    trip_date: date
    trip_time: Optional[str] = None  # e.g. "9:30 AM" or "21:00"
    owner: Optional[Owner] = None


@dataclass(frozen=True)
class TripRequest:
    """A co-driver's application against a specific trip"""
    request_id: Optional[str]
    trip_id: str
    status: RequestStatus = RequestStatus.PENDING


@dataclass(frozen=True)
class DriverStatus:
    is_registered: bool = False
    approval_status: ApprovalStatus = ApprovalStatus.PENDING


class DateKind(Enum):
    TODAY = "today"
    TOMORROW = "tomorrow"
    EXPLICIT = "explicit"


def _calendar_date(value: date) -> date:
    """Drop the time of day from a datetime; plain dates pass through"""
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass(frozen=True)
class DateSelector:
    """
    Which day the board shows: today, tomorrow, or an explicit date.
    Build one with ``DateSelector.today()``, ``DateSelector.tomorrow()``
    or ``DateSelector.explicit(some_date)``. A datetime given for an
    explicit date is cut down to its calendar day.
    """
    kind: DateKind
    value: Optional[date] = None

    @classmethod
    def today(cls) -> DateSelector:
        return cls(DateKind.TODAY)

    @classmethod
    def tomorrow(cls) -> DateSelector:
        return cls(DateKind.TOMORROW)

    @classmethod
    def explicit(cls, value: date) -> DateSelector:
        return cls(DateKind.EXPLICIT, value)

    def __post_init__(self):
        if not isinstance(self.kind, DateKind):
            raise ValueError(f"Unknown date selector '{self.kind}'")
        if self.kind == DateKind.EXPLICIT:
            if self.value is None:
                raise ValueError("Explicit date selector needs a date")
            object.__setattr__(self, 'value', _calendar_date(self.value))

    def resolve(self, today: date) -> date:
        """Turn the selector into a calendar date relative to ``today``"""
        today = _calendar_date(today)
        if self.kind == DateKind.TODAY:
            return today
        if self.kind == DateKind.TOMORROW:
            return today + timedelta(days=1)
        return self.value


@dataclass(frozen=True)
class FilterConfig:
    """Everything the engine needs to pick and order trips for display"""
    target_date: date
    from_text: str = ""
    to_text: str = ""
    time_slots: FrozenSet[TimeSlot] = field(default_factory=frozenset)
    sort_mode: SortMode = SortMode.RELEVANCE


@dataclass(frozen=True)
class PlaceSuggestion:
    place_id: str
    text: str
    main_text: Optional[str] = None
    secondary_text: Optional[str] = None


@dataclass(frozen=True)
class PlaceDetails:
    place_id: Optional[str]
    address: Optional[str]
    lat: Optional[float]
    lng: Optional[float]
    city: str = ""
    state: str = ""

    @property
    def display_name(self) -> Optional[str]:
        """City is preferred over the raw formatted address"""
        return self.city or self.address
