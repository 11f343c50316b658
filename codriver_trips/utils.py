"""
Co-Driver Trip Board - Utility Functions
Helper functions for date handling and turning API payloads into records
"""

from __future__ import annotations

from datetime import date, datetime
import pandas as pd
from typing import Any, Dict, List, Mapping, Optional, Sequence
import logging

from .models import (
    ApprovalStatus,
    DriverStatus,
    Owner,
    RequestStatus,
    Trip,
    TripRequest,
)

logger = logging.getLogger(__name__)


class DateFormatter:
    """Handles the date conversions used by the board"""

    DAY_ABBR = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']
    MONTH_ABBR = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
                  'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

    @staticmethod
    def parse_trip_date(value: Any, tz: Optional[str] = None) -> date:
        """
        Parse a trip date from the API into a calendar date.

        Accepts ISO strings ("2025-01-15", "2025-01-15T00:00:00.000Z"),
        datetimes and dates. Timezone-aware values are converted to ``tz``
        first when one is given, so the calendar day matches the rider's clock.
        Raises ValueError when the value cannot be read as a date.
        """
        if isinstance(value, date) and not isinstance(value, datetime):
            return value
        try:
            ts = pd.Timestamp(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid trip date '{value}': {e}") from e
        if pd.isna(ts):
            raise ValueError(f"Invalid trip date '{value}'")
        if tz and ts.tzinfo is not None:
            ts = ts.tz_convert(tz)
        return ts.date()

    @staticmethod
    def format_date_display(value: date) -> str:
        """
        Short label for the date picker
        Returns: "Sun 18-Oct"
        """
        day = DateFormatter.DAY_ABBR[value.weekday()]
        month = DateFormatter.MONTH_ABBR[value.month - 1]
        return f"{day} {value.day}-{month}"


def _ref_id(value: Any) -> Optional[str]:
    """Id of a reference that may be populated ({'_id': ...}) or a bare id"""
    if isinstance(value, Mapping):
        ref = value.get('_id') or value.get('id')
        return str(ref) if ref is not None else None
    return str(value) if value is not None else None


def owner_from_record(record: Any) -> Optional[Owner]:
    if record is None:
        return None
    if not isinstance(record, Mapping):
        return Owner(owner_id=str(record))
    return Owner(
        owner_id=_ref_id(record),
        name=record.get('name'),
        profile_image=record.get('profileImage'),
    )


def trip_from_record(record: Mapping, tz: Optional[str] = None) -> Trip:
    """Build a Trip from one entry of the ``trips`` list returned by the API"""
    return Trip(
        trip_id=_ref_id(record),
        from_location=record.get('fromLocation') or "",
        to_location=record.get('toLocation') or "",
        trip_date=DateFormatter.parse_trip_date(record.get('tripDate'), tz),
        trip_time=record.get('tripTime') or None,
        owner=owner_from_record(record.get('owner')),
    )


def trips_from_records(records: Sequence[Mapping], tz: Optional[str] = None) -> List[Trip]:
    """Convert trip records, skipping (and logging) any that can't be read"""
    trips = []
    for i, record in enumerate(records):
        try:
            trips.append(trip_from_record(record, tz))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Skipping trip record {i}: {e}")
    return trips


def request_from_record(record: Mapping) -> Optional[TripRequest]:
    """Build a TripRequest; returns None when it isn't tied to a trip"""
    trip_id = _ref_id(record.get('trip'))
    if not trip_id:
        return None
    try:
        status = RequestStatus(str(record.get('status', 'pending')).lower())
    except ValueError:
        logger.warning(f"Unknown request status '{record.get('status')}' for trip {trip_id}")
        status = RequestStatus.PENDING
    return TripRequest(
        request_id=_ref_id(record),
        trip_id=trip_id,
        status=status,
    )


def driver_status_from_record(record: Mapping) -> DriverStatus:
    try:
        approval = ApprovalStatus(str(record.get('approvalStatus', 'pending')).lower())
    except ValueError:
        logger.warning(f"Unknown approval status '{record.get('approvalStatus')}'")
        approval = ApprovalStatus.PENDING
    return DriverStatus(
        is_registered=bool(record.get('isRegistered', False)),
        approval_status=approval,
    )


def build_requests_map(requests: Sequence[TripRequest]) -> Dict[str, TripRequest]:
    """Map trip id -> request; a later request for the same trip wins"""
    return {req.trip_id: req for req in requests}


def trips_frame(trips: Sequence[Trip], requests_map: Optional[Dict[str, TripRequest]] = None) -> pd.DataFrame:
    """Tabulate trips (in the given order) with their request status"""
    requests_map = requests_map or {}
    rows = []
    for trip in trips:
        request = requests_map.get(trip.trip_id)
        rows.append({
            'Trip ID': trip.trip_id,
            'From': trip.from_location,
            'To': trip.to_location,
            'Date': trip.trip_date,
            'Time': trip.trip_time or '',
            'Owner': (trip.owner.name if trip.owner and trip.owner.name else 'Owner'),
            'Request': request.status.value if request else '',
        })
    return pd.DataFrame(rows, columns=['Trip ID', 'From', 'To', 'Date', 'Time', 'Owner', 'Request'])


def print_board_summary(trips: Sequence[Trip], requests_map: Optional[Dict[str, TripRequest]] = None,
                        date_label: Optional[str] = None) -> None:
    """Print the visible trips and a request status breakdown"""
    df = trips_frame(trips, requests_map)

    heading = f"Co-Driver Jobs for {date_label}" if date_label else "Co-Driver Jobs"
    print(f"\n🚗 {heading} ({len(df)} shown)")
    print("=" * 60)
    if df.empty:
        print("  No trips match the current filters")
        return

    for _, row in df.iterrows():
        status = f" [{row['Request'].upper()}]" if row['Request'] else ""
        print(f"  • {row['From']} → {row['To']}  {row['Date']:%a %b %d %Y} • {row['Time']}  ({row['Owner']}){status}")

    counts = df['Request'].replace('', 'none').value_counts()
    print("\n📨 Requests:")
    for status, count in counts.items():
        print(f"  • {status}: {count}")
