from unittest.mock import MagicMock

import pytest

from infrastructure.geocoding.nominatim_client import GeocodingError
from use_cases import location_flow
from use_cases.domain_models import LocationCandidate
from use_cases.location_flow import (
    Debouncer,
    DebouncedLocationSearch,
    GeolocationDenied,
    GeolocationUnavailable,
    GeolocationUnsupported,
    LocationLookupError,
)
from use_cases.report_flow import ReportDraft

MAIN_ST = {"display_name": "123 Main St, Springfield", "lat": "39.78", "lon": "-89.65", "place_id": 11}


class FakeTimer:
    """Timer that only fires when the test says so."""

    created = []

    def __init__(self, interval, function, args=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.cancelled = False
        self.started = False
        self.daemon = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def is_alive(self):
        return self.started and not self.cancelled

    def fire(self):
        if not self.cancelled:
            self.function(*self.args)


@pytest.fixture(autouse=True)
def _reset_timers():
    FakeTimer.created = []


@pytest.fixture
def geocoder():
    geocoder = MagicMock()
    geocoder.search.return_value = [MAIN_ST]
    geocoder.reverse.return_value = {"display_name": "Town Hall, Springfield", "place_id": 99}
    return geocoder


@pytest.mark.parametrize("query", ["", "   "])
def test_search_with_empty_query_makes_no_call(geocoder, query):
    assert location_flow.search_location(geocoder, query) == []
    geocoder.search.assert_not_called()


def test_search_maps_rows_to_candidates(geocoder):
    results = location_flow.search_location(geocoder, "123 Main")

    assert results == [LocationCandidate("123 Main St, Springfield", 39.78, -89.65, 11)]
    geocoder.search.assert_called_once_with("123 Main")


def test_search_failure_is_unavailable(geocoder):
    geocoder.search.side_effect = GeocodingError("HTTP 503")

    with pytest.raises(LocationLookupError) as exc_info:
        location_flow.search_location(geocoder, "123 Main")

    assert exc_info.value.kind == "UNAVAILABLE"
    assert exc_info.value.message == location_flow.SEARCH_FAILED_MESSAGE


def test_use_current_location_reverse_geocodes(geocoder):
    candidate = location_flow.use_current_location(geocoder, lambda: (39.8, -89.6))

    assert candidate.display_name == "Town Hall, Springfield"
    assert candidate.coordinates == (39.8, -89.6)
    geocoder.reverse.assert_called_once_with(39.8, -89.6)


@pytest.mark.parametrize(
    "error,kind,message",
    [
        (GeolocationDenied("denied"), "PERMISSION_DENIED", location_flow.LOCATION_DENIED_MESSAGE),
        (GeolocationUnavailable("timeout"), "UNAVAILABLE", location_flow.LOCATION_FAILED_MESSAGE),
        (GeolocationUnsupported("no api"), "UNAVAILABLE", location_flow.GEOLOCATION_UNSUPPORTED_MESSAGE),
    ],
)
def test_use_current_location_errors(geocoder, error, kind, message):
    def locate():
        raise error

    with pytest.raises(LocationLookupError) as exc_info:
        location_flow.use_current_location(geocoder, locate)

    assert exc_info.value.kind == kind
    assert exc_info.value.message == message
    geocoder.reverse.assert_not_called()


def test_use_current_location_reverse_failure(geocoder):
    geocoder.reverse.side_effect = GeocodingError("down")

    with pytest.raises(LocationLookupError) as exc_info:
        location_flow.use_current_location(geocoder, lambda: (1.0, 2.0))

    assert exc_info.value.kind == "UNAVAILABLE"


def test_select_and_clear_candidate():
    draft = ReportDraft(description="bins")
    candidate = LocationCandidate("123 Main St", 1.0, 2.0)

    location_flow.select_candidate(draft, candidate)
    assert draft.location_text == "123 Main St"
    assert draft.location_search == "123 Main St"

    location_flow.clear_location(draft)
    assert draft.location_text == ""
    assert draft.location_search == ""
    assert draft.description == "bins"


def test_debouncer_runs_only_trailing_call():
    calls = []
    debouncer = Debouncer(0.5, calls.append, timer_factory=FakeTimer)

    debouncer.trigger("1")
    debouncer.trigger("12")
    debouncer.trigger("123")
    assert debouncer.pending is True

    for timer in FakeTimer.created:
        timer.fire()

    assert calls == ["123"]
    assert FakeTimer.created[-1].interval == 0.5
    assert FakeTimer.created[-1].daemon is True


def test_debouncer_cancel():
    calls = []
    debouncer = Debouncer(0.5, calls.append, timer_factory=FakeTimer)
    debouncer.trigger("x")
    debouncer.cancel()

    FakeTimer.created[0].fire()

    assert calls == []
    assert debouncer.pending is False


def test_debounced_search_queries_geocoder_once_per_burst(geocoder):
    search = DebouncedLocationSearch(geocoder, timer_factory=FakeTimer)

    for query in ("1", "12", "123", "123 M", "123 Main"):
        search.update_query(query)
    assert search.searching is True

    for timer in FakeTimer.created:
        timer.fire()

    geocoder.search.assert_called_once_with("123 Main")
    assert search.searching is False
    assert search.results[0].display_name == "123 Main St, Springfield"


def test_debounced_search_empty_query_clears_results(geocoder):
    search = DebouncedLocationSearch(geocoder, timer_factory=FakeTimer)
    search.search_now("123 Main")
    assert search.results

    search.update_query("")

    assert search.results == []
    assert search.searching is False
    assert len(FakeTimer.created) == 0


def test_debounced_search_records_error(geocoder):
    geocoder.search.side_effect = GeocodingError("HTTP 500")
    search = DebouncedLocationSearch(geocoder, timer_factory=FakeTimer)

    search.search_now("123 Main")

    assert search.error == location_flow.SEARCH_FAILED_MESSAGE
    assert search.searching is False

    geocoder.search.side_effect = None
    search.search_now("123 Main")
    assert search.error is None
