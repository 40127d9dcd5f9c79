"""Location lookup for the report form: debounced search and "use my location"."""

import logging
import threading
from typing import Callable, List, Optional, Tuple

from infrastructure.geocoding.nominatim_client import GeocodingError
from use_cases.domain_models import LocationCandidate
from use_cases.report_flow import ReportDraft
from use_cases.results import ErrorKind

log = logging.getLogger(__name__)

SEARCH_DEBOUNCE_SECONDS = 0.5

SEARCH_FAILED_MESSAGE = "Failed to search locations. Please try again."
LOCATION_DENIED_MESSAGE = "Location access denied. Please enable location services."
LOCATION_FAILED_MESSAGE = "Failed to get your current location. Please try again."
GEOLOCATION_UNSUPPORTED_MESSAGE = "Geolocation is not supported by your browser"


class LocationLookupError(Exception):
    """User-visible location failure. Every one of them can be retried by the user."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class GeolocationDenied(Exception):
    pass


class GeolocationUnavailable(Exception):
    pass


class GeolocationUnsupported(Exception):
    pass


def _candidate_from_row(row: dict) -> LocationCandidate:
    return LocationCandidate(
        display_name=row.get("display_name", ""),
        lat=float(row.get("lat", 0.0)),
        lon=float(row.get("lon", 0.0)),
        place_id=row.get("place_id"),
    )


def search_location(geocoder, query: str) -> List[LocationCandidate]:
    if not query or not query.strip():
        return []
    try:
        rows = geocoder.search(query)
    except GeocodingError as e:
        log.error(f"Error searching location: {e}")
        raise LocationLookupError("UNAVAILABLE", SEARCH_FAILED_MESSAGE) from e
    return [_candidate_from_row(row) for row in rows]


def use_current_location(geocoder, locate: Callable[[], Tuple[float, float]]) -> LocationCandidate:
    """Ask the device for a position and reverse-geocode it."""
    try:
        lat, lon = locate()
    except GeolocationDenied as e:
        log.warning(f"Geolocation denied: {e}")
        raise LocationLookupError("PERMISSION_DENIED", LOCATION_DENIED_MESSAGE) from e
    except GeolocationUnsupported as e:
        raise LocationLookupError("UNAVAILABLE", GEOLOCATION_UNSUPPORTED_MESSAGE) from e
    except GeolocationUnavailable as e:
        log.warning(f"Geolocation error: {e}")
        raise LocationLookupError("UNAVAILABLE", LOCATION_FAILED_MESSAGE) from e

    try:
        row = geocoder.reverse(lat, lon)
    except GeocodingError as e:
        log.error(f"Error getting current location: {e}")
        raise LocationLookupError("UNAVAILABLE", LOCATION_FAILED_MESSAGE) from e
    return LocationCandidate(display_name=row.get("display_name", ""), lat=lat, lon=lon, place_id=row.get("place_id"))


def select_candidate(draft: ReportDraft, candidate: LocationCandidate) -> None:
    draft.location_text = candidate.display_name
    draft.location_search = candidate.display_name


def clear_location(draft: ReportDraft) -> None:
    draft.location_text = ""
    draft.location_search = ""


class Debouncer:
    """Calls `action` with the arguments of the last `trigger` once `quiet_period` passes without another one."""

    def __init__(self, quiet_period: float, action: Callable, timer_factory=threading.Timer):
        self.quiet_period = quiet_period
        self._action = action
        self._timer_factory = timer_factory
        self._timer = None
        self._lock = threading.Lock()

    def trigger(self, *args) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = self._timer_factory(self.quiet_period, self._action, args)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    @property
    def pending(self) -> bool:
        timer = self._timer
        return timer is not None and timer.is_alive()


class DebouncedLocationSearch:
    """Search-as-you-type. Only the trailing query of a burst reaches the geocoder.

    Responses are applied in the order they arrive, so a slow earlier response
    can still overwrite a faster later one.
    """

    def __init__(
        self,
        geocoder,
        quiet_period: float = SEARCH_DEBOUNCE_SECONDS,
        timer_factory=threading.Timer,
    ):
        self._geocoder = geocoder
        self._debouncer = Debouncer(quiet_period, self._run, timer_factory)
        self.results: List[LocationCandidate] = []
        self.error: Optional[str] = None
        self.searching = False

    def update_query(self, query: str) -> None:
        if not query or not query.strip():
            self._debouncer.cancel()
            self.results = []
            self.searching = False
            return
        self.searching = True
        self._debouncer.trigger(query)

    def search_now(self, query: str) -> None:
        """Skip the quiet period (Enter key)."""
        self._debouncer.cancel()
        self._run(query)

    def _run(self, query: str) -> None:
        self.searching = True
        self.error = None
        try:
            self.results = search_location(self._geocoder, query)
        except LocationLookupError as e:
            self.error = e.message
        finally:
            self.searching = False

    def clear(self) -> None:
        self._debouncer.cancel()
        self.results = []
        self.error = None
        self.searching = False
