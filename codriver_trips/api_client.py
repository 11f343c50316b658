"""
Co-Driver Trip Board - Trip API Client
Talks to the trip back end over HTTP and returns board records.
No filtering or sorting happens here.
"""

from typing import Any, Dict, List, Optional

import logging
import requests

from .errors import TripApiError
from .models import DriverStatus, Trip, TripRequest
from .utils import (
    driver_status_from_record,
    request_from_record,
    trips_from_records,
)

logger = logging.getLogger(__name__)


class TripApiClient:
    """
    Client for the trips/requests/users endpoints.

    Every call is a single request/response: no retries, no caching.
    Failures raise TripApiError carrying the server's message when it sent one.
    """

    def __init__(self, base_url: str, token: Optional[str] = None,
                 timeout: float = 10.0, tz: Optional[str] = None):
        if not base_url:
            raise ValueError("Trip API base URL not set. Set CODRIVER_API_URL in the .env file.")
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.tz = tz  # timezone used to read trip dates

    def _headers(self) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if self.token:
            headers['Authorization'] = f"Bearer {self.token}"
        return headers

    def _call(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = requests.request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise TripApiError(f"{method} {path} failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok:
            message = data.get('message') if isinstance(data, dict) else None
            raise TripApiError(
                message or f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return data if isinstance(data, dict) else {}

    def list_trips(self, filter_kind: str, user_id: str) -> List[Trip]:
        """Fetch the trips of a listing (e.g. 'co-driver-jobs') for a user"""
        data = self._call('GET', '/trips/list', params={'type': filter_kind, 'userId': user_id})
        trips = trips_from_records(data.get('trips') or [], self.tz)
        logger.info(f"Loaded {len(trips)} '{filter_kind}' trips for user {user_id}")
        return trips

    def list_driver_requests(self, user_id: str) -> List[TripRequest]:
        data = self._call('GET', f'/requests/driver/{user_id}')
        requests_ = [request_from_record(r) for r in data.get('requests') or []]
        return [r for r in requests_ if r is not None]

    def get_driver_status(self, user_id: str) -> DriverStatus:
        data = self._call('GET', f'/users/status/{user_id}')
        return driver_status_from_record(data)

    def create_trip_request(self, driver_id: str, trip: Trip) -> TripRequest:
        """Apply as co-driver for ``trip``; returns the created request"""
        payload = {
            'driverId': driver_id,
            'tripId': trip.trip_id,
            'ownerId': trip.owner.owner_id if trip.owner else None,
        }
        data = self._call('POST', '/requests', json=payload)
        record = dict(data.get('request') or {})
        record.setdefault('trip', trip.trip_id)
        request = request_from_record(record)
        logger.info(f"Driver {driver_id} requested trip {trip.trip_id}")
        return request

    def cancel_trip_request(self, request_id: str) -> None:
        self._call('DELETE', f'/requests/{request_id}')
        logger.info(f"Cancelled request {request_id}")
