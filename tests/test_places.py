import pytest
import requests

import codriver_trips.places as places
from codriver_trips import PlaceSuggestion, PlacesClient, PlacesError, SuggestionDebouncer
from conftest import FakeHttpResponse

AUTOCOMPLETE = {
    "suggestions": [
        {
            "placePrediction": {
                "placeId": "p1",
                "text": {"text": "Pune, Maharashtra, India"},
                "structuredFormat": {
                    "mainText": {"text": "Pune"},
                    "secondaryText": {"text": "Maharashtra, India"},
                },
            }
        },
        {"queryPrediction": {"text": {"text": "pune food"}}},
        {"placePrediction": {"placeId": "p2", "text": {"text": "Pune Station"}}},
    ]
}

DETAILS = {
    "id": "p1",
    "formattedAddress": "Pune, Maharashtra, India",
    "location": {"latitude": 18.52, "longitude": 73.85},
    "addressComponents": [
        {"longText": "Pune", "types": ["locality", "political"]},
        {"longText": "Maharashtra", "types": ["administrative_area_level_1", "political"]},
    ],
}


def test_requires_api_key():
    with pytest.raises(ValueError):
        PlacesClient("")


def test_suggest_parses_place_predictions(monkeypatch):
    sent = {}

    def fake_post(url, json=None, headers=None, timeout=None):
        sent.update(url=url, json=json, headers=headers)
        return FakeHttpResponse(AUTOCOMPLETE)

    monkeypatch.setattr(places.requests, "post", fake_post)
    results = PlacesClient("key").suggest("Pune")

    assert results == [
        PlaceSuggestion("p1", "Pune, Maharashtra, India", "Pune", "Maharashtra, India"),
        PlaceSuggestion("p2", "Pune Station", None, None),
    ]
    assert sent["url"].endswith("/places:autocomplete")
    assert sent["json"] == {"input": "Pune", "includedRegionCodes": ["IN"]}
    assert sent["headers"]["X-Goog-Api-Key"] == "key"


def test_suggest_short_input_skips_call(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("should not be called")

    monkeypatch.setattr(places.requests, "post", fail)
    assert PlacesClient("key").suggest("P") == []
    assert PlacesClient("key").suggest("") == []


def test_suggest_failure_returns_empty(monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(places.requests, "post", fake_post)
    assert PlacesClient("key").suggest("Pune") == []

    monkeypatch.setattr(places.requests, "post", lambda *a, **k: FakeHttpResponse({}, 403))
    assert PlacesClient("key").suggest("Pune") == []


def test_place_details(monkeypatch):
    sent = {}

    def fake_get(url, headers=None, timeout=None):
        sent.update(url=url, headers=headers)
        return FakeHttpResponse(DETAILS)

    monkeypatch.setattr(places.requests, "get", fake_get)
    details = PlacesClient("key").place_details("p1")

    assert sent["url"].endswith("/places/p1")
    assert sent["headers"]["X-Goog-FieldMask"] == "id,formattedAddress,location,addressComponents"
    assert details.city == "Pune"
    assert details.state == "Maharashtra"
    assert details.lat == 18.52
    assert details.display_name == "Pune"


def test_place_details_without_city_uses_address(monkeypatch):
    payload = dict(DETAILS, addressComponents=[])
    monkeypatch.setattr(places.requests, "get", lambda *a, **k: FakeHttpResponse(payload))
    details = PlacesClient("key").place_details("p1")
    assert details.city == ""
    assert details.display_name == "Pune, Maharashtra, India"


def test_place_details_empty_id_and_failure(monkeypatch):
    assert PlacesClient("key").place_details("") is None

    monkeypatch.setattr(places.requests, "get", lambda *a, **k: FakeHttpResponse({}, 500))
    with pytest.raises(PlacesError):
        PlacesClient("key").place_details("p1")


class StubPlaces:
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.queries = []

    def suggest(self, text):
        self.queries.append(text)
        if self.error:
            raise self.error
        return self.results


def test_debouncer_only_last_keystroke_fires(timers):
    delivered = []
    stub = StubPlaces([PlaceSuggestion("p1", "Pune")])
    debouncer = SuggestionDebouncer(stub, lambda f, r: delivered.append((f, r)), timer_factory=timers)

    debouncer.on_text_changed("from", "Pune")
    debouncer.on_text_changed("from", "Pune ")
    debouncer.on_text_changed("from", "Pune S")

    assert len(timers.timers) == 3
    assert [t.cancelled for t in timers.timers] == [True, True, False]
    assert timers.timers[-1].interval == 0.4
    assert debouncer.pending

    timers.timers[-1].fire()
    assert stub.queries == ["Pune S"]
    assert delivered == [("from", [PlaceSuggestion("p1", "Pune")])]
    assert not debouncer.pending


def test_debouncer_short_text_clears(timers):
    delivered = []
    debouncer = SuggestionDebouncer(StubPlaces(), lambda f, r: delivered.append((f, r)), timer_factory=timers)

    debouncer.on_text_changed("to", "Mumb")
    debouncer.on_text_changed("to", "Mum")

    assert timers.timers[0].cancelled
    assert len(timers.timers) == 1
    assert delivered == [("to", [])]


def test_debouncer_lookup_failure_delivers_empty(timers):
    delivered = []
    stub = StubPlaces(error=RuntimeError("boom"))
    debouncer = SuggestionDebouncer(stub, lambda f, r: delivered.append((f, r)), timer_factory=timers)

    debouncer.on_text_changed("from", "Pune")
    timers.timers[0].fire()
    assert delivered == [("from", [])]


def test_debouncer_stale_timer_keeps_newer_one(timers):
    delivered = []
    stub = StubPlaces([PlaceSuggestion("p1", "Pune")])
    debouncer = SuggestionDebouncer(stub, lambda f, r: delivered.append((f, r)), timer_factory=timers)

    debouncer.on_text_changed("from", "Pune")
    debouncer.on_text_changed("from", "Punekar")

    # first timer's thread was already running when the user typed again
    timers.timers[0].fire()
    assert delivered == []
    assert stub.queries == []
    assert debouncer.pending

    debouncer.on_text_changed("from", "Punekarx")
    assert timers.timers[1].cancelled
    assert len(timers.live) == 1

    timers.live[0].fire()
    assert stub.queries == ["Punekarx"]
    assert delivered == [("from", [PlaceSuggestion("p1", "Pune")])]


def test_debouncer_drops_results_of_lookup_overtaken_by_typing(timers):
    delivered = []

    class TypingWhileLoading(StubPlaces):
        def suggest(self, text):
            debouncer.on_text_changed("from", "Pu")
            return super().suggest(text)

    debouncer = SuggestionDebouncer(
        TypingWhileLoading([PlaceSuggestion("p1", "Pune")]),
        lambda f, r: delivered.append((f, r)),
        timer_factory=timers,
    )
    debouncer.on_text_changed("from", "Pune")
    timers.timers[0].fire()

    assert delivered == [("from", [])]
