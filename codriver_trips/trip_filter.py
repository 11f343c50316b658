"""
Co-Driver Trip Board - Trip Filtering Engine
Decides which trips are upcoming, matches them against the board filters
and orders them for display. Everything here is pure: "now" is always
passed in and input lists are never modified.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from .models import FilterConfig, SortMode, TimeSlot, Trip

TWELVE_HOUR_PATTERN = re.compile(r'(\d+):(\d+)\s?(AM|PM)', re.IGNORECASE | re.ASCII)
LEADING_INT_PATTERN = re.compile(r'\s*([+-]?\d+)', re.ASCII)

# (start hour inclusive, end hour, end inclusive?, slot)
SLOT_BOUNDS = [
    (0, 6, False, TimeSlot.NIGHT),
    (6, 12, False, TimeSlot.MORNING),
    (12, 18, False, TimeSlot.AFTERNOON),
    (18, 24, True, TimeSlot.EVENING),
]


def parse_twelve_hour(time_str: Optional[str]) -> Optional[Tuple[int, int]]:
    """
    Parse an "H:MM AM/PM" time into (hour, minute) on a 24-hour clock.

    12 AM becomes hour 0 and 12 PM stays 12; any other PM hour gets 12 added.
    Minutes are taken as written. Returns None when there is no match.
    """
    if not time_str:
        return None
    match = TWELVE_HOUR_PATTERN.search(time_str)
    if not match:
        return None

    hours = int(match.group(1))
    minutes = int(match.group(2))
    modifier = match.group(3).upper()

    if hours == 12:
        hours = 12 if modifier == 'PM' else 0
    elif modifier == 'PM':
        hours += 12
    return hours, minutes


def departure_minutes(time_str: Optional[str]) -> int:
    """Minutes since midnight for sorting; anything unparseable counts as 0"""
    parsed = parse_twelve_hour(time_str)
    if parsed is None:
        return 0
    hours, minutes = parsed
    return hours * 60 + minutes


def is_upcoming(trip: Trip, now: datetime) -> bool:
    """True unless the trip is strictly in the past relative to ``now``"""
    today = now.date()
    if trip.trip_date < today:
        return False
    if trip.trip_date > today:
        return True

    if not trip.trip_time:
        return True
    parsed = parse_twelve_hour(trip.trip_time)
    if parsed is None:
        # Can't tell when it leaves, keep it
        return True

    hours, minutes = parsed
    departs_at = datetime.combine(today, datetime.min.time()) + timedelta(hours=hours, minutes=minutes)
    return departs_at > now.replace(tzinfo=None)


def upcoming_trips(trips: Iterable[Trip], now: datetime) -> List[Trip]:
    """Drop trips that have already departed, keeping the original order"""
    return [trip for trip in trips if is_upcoming(trip, now)]


def _hour_of_day(time_str: str) -> int:
    parsed = parse_twelve_hour(time_str)
    if parsed is not None:
        return parsed[0]

    # 24-hour text such as "22" or "22:30"
    first = time_str.split(':')[0]
    match = LEADING_INT_PATTERN.match(first)
    return int(match.group(1)) if match else 0


def time_slot_for(time_str: Optional[str]) -> Optional[TimeSlot]:
    """
    Classify a free-text departure time into a time slot.

    Returns None for a missing time or an hour outside 0-24. Text whose hour
    cannot be read at all is treated as hour 0, so it lands in the night slot.
    """
    if not time_str:
        return None

    hours = _hour_of_day(time_str)
    for start, end, end_inclusive, slot in SLOT_BOUNDS:
        if start <= hours < end or (end_inclusive and hours == end):
            return slot
    return None


def matches_filter(trip: Trip, config: FilterConfig) -> bool:
    """Check a single trip against locations, date and time slots"""
    matches_from = config.from_text.lower() in (trip.from_location or "").lower()
    matches_to = config.to_text.lower() in (trip.to_location or "").lower()
    matches_date = trip.trip_date == config.target_date

    matches_slot = True
    if config.time_slots:
        # A trip without a readable time never matches a slot filter
        matches_slot = time_slot_for(trip.trip_time) in config.time_slots

    return matches_from and matches_to and matches_date and matches_slot


def sort_trips(trips: Iterable[Trip], sort_mode: SortMode) -> List[Trip]:
    """Order trips for display; ties keep their incoming order"""
    trips = list(trips)
    if sort_mode == SortMode.EARLIEST_DEPARTURE:
        return sorted(trips, key=lambda t: departure_minutes(t.trip_time))
    if sort_mode == SortMode.LATEST_DEPARTURE:
        return sorted(trips, key=lambda t: departure_minutes(t.trip_time), reverse=True)
    return trips


def filter_and_sort(trips: Iterable[Trip], config: FilterConfig) -> List[Trip]:
    """Run the board filters and sort the survivors"""
    return sort_trips((t for t in trips if matches_filter(t, config)), config.sort_mode)


def build_filter_config(
    today: date,
    date_selector,
    from_text: str = "",
    to_text: str = "",
    time_slots: Iterable[TimeSlot] = (),
    sort_mode: SortMode = SortMode.RELEVANCE,
) -> FilterConfig:
    """Assemble a FilterConfig, resolving the date selector against ``today``"""
    return FilterConfig(
        target_date=date_selector.resolve(today),
        from_text=from_text or "",
        to_text=to_text or "",
        time_slots=frozenset(time_slots),
        sort_mode=sort_mode,
    )
