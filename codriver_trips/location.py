"""
Co-Driver Trip Board - Device Location
Finds the rider's current city to prefill the From filter
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import logging
from geopy.exc import GeopyError
from geopy.geocoders import Nominatim

from .errors import LocationUnavailable

logger = logging.getLogger(__name__)

# Address keys tried in order when naming a place
CITY_KEYS = ('city', 'town', 'village')
SUBREGION_KEYS = ('county', 'state_district')
DISTRICT_KEYS = ('suburb', 'city_district', 'neighbourhood')


@dataclass
class StaticPositionSource:
    """
    Position source for hosts without a GPS: a fixed coordinate.
    Set ``enabled``/``permission_granted`` to simulate a locked-down device.
    """
    latitude: float
    longitude: float
    enabled: bool = True
    permission_granted: bool = True

    def services_enabled(self) -> bool:
        return self.enabled

    def enable_services(self) -> bool:
        """Prompt to switch location services on; returns the new state"""
        return self.enabled

    def request_permission(self) -> bool:
        return self.permission_granted

    def current_position(self) -> Tuple[float, float]:
        return self.latitude, self.longitude


class DeviceLocator:
    """Checks services and permission, reads the position and reverse geocodes it"""

    def __init__(self, position_source, geocoder=None, timeout: float = 10.0):
        self.position_source = position_source
        self.geocoder = geocoder or Nominatim(user_agent="codriver_trips")
        self.timeout = timeout

    def check_enabled(self, prompt: bool = False) -> bool:
        enabled = self.position_source.services_enabled()
        if not enabled and prompt:
            enabled = self.position_source.enable_services()
        return enabled

    def request_permission(self) -> bool:
        return self.position_source.request_permission()

    def current_position(self) -> Tuple[float, float]:
        return self.position_source.current_position()

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[str]:
        """Best locality name for a coordinate, or None when nothing usable comes back"""
        try:
            place = self.geocoder.reverse((latitude, longitude), exactly_one=True, timeout=self.timeout)
        except GeopyError as e:
            raise LocationUnavailable(LocationUnavailable.FAILED, f"Reverse geocoding failed: {e}") from e
        if place is None:
            return None

        address = (place.raw or {}).get('address', {})
        for keys in (CITY_KEYS, SUBREGION_KEYS, DISTRICT_KEYS):
            for key in keys:
                if address.get(key):
                    return address[key]
        return (place.raw or {}).get('name') or None

    def locate_city(self, prompt: bool = True) -> str:
        """
        Run the whole lookup and return the current city name.

        ``prompt`` asks the device to switch location services on when they are
        off (only done for user-initiated lookups). Raises LocationUnavailable
        with the reason when any step fails.
        """
        if not self.check_enabled(prompt=prompt):
            raise LocationUnavailable(
                LocationUnavailable.DISABLED,
                "Please enable location services on your device.",
            )
        if not self.request_permission():
            raise LocationUnavailable(
                LocationUnavailable.DENIED,
                "Please allow location access to use this feature.",
            )

        latitude, longitude = self.current_position()
        name = self.reverse_geocode(latitude, longitude)
        if not name:
            raise LocationUnavailable(
                LocationUnavailable.NO_ADDRESS,
                "Could not determine your address from coordinates.",
            )
        logger.info(f"Located device at {latitude:.4f},{longitude:.4f} -> {name}")
        return name
