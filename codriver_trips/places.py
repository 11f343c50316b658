"""
Co-Driver Trip Board - Place Suggestions
Google Places (New) autocomplete/details and the debounced suggester
used by the From/To inputs.
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, List, Optional, Sequence

import logging
import requests

from .errors import PlacesError
from .models import PlaceDetails, PlaceSuggestion

logger = logging.getLogger(__name__)

PLACES_BASE_URL = "https://places.googleapis.com/v1"
DETAIL_FIELDS = ['id', 'formattedAddress', 'location', 'addressComponents']


class PlacesClient:
    """Thin wrapper over the Places autocomplete and details endpoints"""

    def __init__(self, api_key: str, region_codes: Sequence[str] = ("IN",),
                 base_url: str = PLACES_BASE_URL, timeout: float = 10.0):
        if not api_key:
            raise ValueError("Places API key not set. Set GOOGLE_PLACES_API_KEY in the .env file.")
        self.api_key = api_key
        self.region_codes = list(region_codes)
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            'Content-Type': 'application/json',
            'X-Goog-Api-Key': self.api_key,
        }
        if extra:
            headers.update(extra)
        return headers

    def suggest(self, text: str) -> List[PlaceSuggestion]:
        """Autocomplete suggestions for ``text``; empty list on any failure"""
        if not text or len(text) < 2:
            return []

        try:
            response = requests.post(
                f"{self.base_url}/places:autocomplete",
                json={'input': text, 'includedRegionCodes': self.region_codes},
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Places autocomplete failed for '{text}': {e}")
            return []

        suggestions = []
        for item in data.get('suggestions') or []:
            prediction = item.get('placePrediction')
            if not prediction:
                continue
            structured = prediction.get('structuredFormat') or {}
            suggestions.append(PlaceSuggestion(
                place_id=prediction.get('placeId'),
                text=(prediction.get('text') or {}).get('text', ''),
                main_text=(structured.get('mainText') or {}).get('text'),
                secondary_text=(structured.get('secondaryText') or {}).get('text'),
            ))
        return suggestions

    def place_details(self, place_id: str) -> Optional[PlaceDetails]:
        """
        Look up coordinates, city and state for a place.

        Returns None for an empty id. Raises PlacesError when the lookup fails.
        """
        if not place_id:
            return None

        try:
            response = requests.get(
                f"{self.base_url}/places/{place_id}",
                headers=self._headers({'X-Goog-FieldMask': ','.join(DETAIL_FIELDS)}),
                timeout=self.timeout,
            )
            response.raise_for_status()
            place = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Places details failed for '{place_id}': {e}")
            raise PlacesError(f"Could not load details for place {place_id}") from e

        location = place.get('location') or {}
        city = ''
        state = ''
        # locality -> city, administrative_area_level_1 -> state
        for component in place.get('addressComponents') or []:
            types = component.get('types') or []
            if 'locality' in types:
                city = component.get('longText', '')
            if 'administrative_area_level_1' in types:
                state = component.get('longText', '')

        return PlaceDetails(
            place_id=place.get('id'),
            address=place.get('formattedAddress'),
            lat=location.get('latitude'),
            lng=location.get('longitude'),
            city=city,
            state=state,
        )


class SuggestionDebouncer:
    """
    Fires one suggestion lookup after the user stops typing.

    There is only ever one pending timer: every keystroke cancels it and
    bumps a generation counter. A lookup whose generation is no longer
    current (its timer fired just as the user typed again) is dropped.
    Text shorter than ``min_length`` clears that field's suggestions
    instead of scheduling a lookup.
    """

    def __init__(self, client: PlacesClient,
                 on_results: Callable[[str, List[PlaceSuggestion]], None],
                 delay: float = 0.4, min_length: int = 4,
                 timer_factory: Callable = threading.Timer):
        self.client = client
        self.on_results = on_results
        self.delay = delay
        self.min_length = min_length
        self.timer_factory = timer_factory
        self._timer = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def cancel(self) -> None:
        with self._lock:
            self._generation += 1
            self._cancel_locked()

    def on_text_changed(self, field: str, text: str) -> None:
        """Call on every keystroke in the ``field`` ('from' or 'to') input"""
        with self._lock:
            self._generation += 1
            self._cancel_locked()
            if len(text) >= self.min_length:
                self._timer = self.timer_factory(
                    self.delay, self._lookup, args=(field, text, self._generation)
                )
                self._timer.daemon = True
                self._timer.start()
                return

        self.on_results(field, [])

    def _is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def _lookup(self, field: str, text: str, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None

        try:
            results = self.client.suggest(text)
        except Exception as e:
            logger.error(f"Autosuggest error for '{text}': {e}")
            results = []

        # The user kept typing while the lookup was in flight
        if not self._is_current(generation):
            return
        self.on_results(field, results)
