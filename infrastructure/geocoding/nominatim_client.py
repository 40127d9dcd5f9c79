import logging

import requests

log = logging.getLogger(__name__)

DEFAULT_NOMINATIM_URL = "https://nominatim.openstreetmap.org"
DEFAULT_USER_AGENT = "TrashTracker/1.0"


class GeocodingError(RuntimeError):
    pass


class NominatimClient:
    """Forward and reverse geocoding against OpenStreetMap Nominatim (no API key)."""

    def __init__(self, base_url: str = DEFAULT_NOMINATIM_URL, user_agent: str = DEFAULT_USER_AGENT):
        self.base_url = base_url.rstrip("/")
        self.headers = {"User-Agent": user_agent, "Accept": "application/json"}

    def _get(self, endpoint: str, params: dict):
        try:
            resp = requests.get(f"{self.base_url}/{endpoint}", headers=self.headers, params=params, timeout=10)
        except requests.RequestException as e:
            log.error(f"❌ Network error calling Nominatim /{endpoint}: {e}")
            raise GeocodingError(f"Failed to fetch location data: {e}") from e
        if resp.status_code != 200:
            log.error(f"❌ Nominatim /{endpoint} failed: {resp.status_code} {resp.text}")
            raise GeocodingError(f"Failed to fetch location data: HTTP {resp.status_code}")
        try:
            return resp.json()
        except ValueError as e:
            raise GeocodingError("Failed to fetch location data: invalid response") from e

    def search(self, query: str, limit: int = 5) -> list[dict]:
        return self._get("search", {"format": "json", "q": query, "limit": limit})

    def reverse(self, lat: float, lon: float) -> dict:
        return self._get("reverse", {"format": "json", "lat": lat, "lon": lon})
