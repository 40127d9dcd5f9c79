"""Shared HTTP plumbing for the hosted backend (auth, rest, storage)."""

import logging
from typing import Optional

import requests

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 20


class RemoteServiceError(RuntimeError):
    """A collaborator answered with an error or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def build_headers(anon_key: str, access_token: Optional[str] = None, extra: Optional[dict] = None) -> dict:
    headers = {
        "apikey": anon_key or "",
        "Authorization": f"Bearer {access_token or anon_key or ''}",
        "Content-Type": "application/json",
    }
    if extra:
        headers.update(extra)
    return headers


def error_message(resp: requests.Response) -> str:
    """Pull the human readable message out of a backend error body."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if not isinstance(body, dict):
        return f"HTTP {resp.status_code}"
    for key in ("error_description", "msg", "message", "error"):
        value = body.get(key)
        if value:
            return str(value)
    return f"HTTP {resp.status_code}"


def send(method: str, url: str, **kwargs) -> requests.Response:
    """Perform a request, mapping transport failures and 4xx/5xx to RemoteServiceError."""
    kwargs.setdefault("timeout", DEFAULT_TIMEOUT)
    try:
        resp = requests.request(method, url, **kwargs)
    except requests.RequestException as e:
        log.error(f"❌ Network error calling {method} {url}: {e}")
        raise RemoteServiceError(f"Network error: {e}") from e
    if resp.status_code >= 400:
        message = error_message(resp)
        log.warning(f"⚠️ {method} {url} failed: HTTP {resp.status_code} {message}")
        raise RemoteServiceError(message, status_code=resp.status_code)
    return resp
