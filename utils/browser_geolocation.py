"""Bridge to `navigator.geolocation`.

Streamlit components cannot hand values back to the script, so the browser
writes the outcome into a short-lived cookie and reloads; the next session
reads it from the request cookies.

The reload starts a new Streamlit session. The report draft being composed is
parked in this process under a random token that travels in a second cookie,
and the new session takes it back before any widget is drawn.
"""

import secrets
import threading
from collections import OrderedDict
from urllib.parse import unquote

import streamlit as st
import streamlit.components.v1 as components

from use_cases.location_flow import GeolocationDenied, GeolocationUnavailable, GeolocationUnsupported

GEO_COOKIE = "tt_geo"
DRAFT_COOKIE = "tt_geo_draft"

# GeolocationPositionError.PERMISSION_DENIED
PERMISSION_DENIED_CODE = "1"

MAX_STASHED_DRAFTS = 100

_stashed_drafts = OrderedDict()
_stash_lock = threading.Lock()


def stash_draft(draft) -> str:
    token = secrets.token_urlsafe(16)
    with _stash_lock:
        _stashed_drafts[token] = draft
        while len(_stashed_drafts) > MAX_STASHED_DRAFTS:
            _stashed_drafts.popitem(last=False)
    return token


def take_stashed_draft(token):
    """Hand a parked draft back exactly once."""
    if not token:
        return None
    with _stash_lock:
        return _stashed_drafts.pop(token, None)


def request_position(draft_token=""):
    components.html(
        f"""
        <script>
        (function () {{
          function setCookie(name, value) {{
            var cookieStr = name + "=" + encodeURIComponent(value) + "; path=/; max-age=60; SameSite=Lax";
            document.cookie = cookieStr;
            try {{ window.parent.document.cookie = cookieStr; }} catch (e) {{}}
          }}
          function done(value) {{
            setCookie("{GEO_COOKIE}", value);
            setCookie("{DRAFT_COOKIE}", "{draft_token}");
            window.parent.location.reload();
          }}
          if (!navigator.geolocation) {{
            done("error:unsupported");
            return;
          }}
          navigator.geolocation.getCurrentPosition(
            function (pos) {{ done(pos.coords.latitude + "," + pos.coords.longitude); }},
            function (err) {{ done("error:" + err.code); }}
          );
        }})();
        </script>
        """,
        height=0,
    )


def _read_cookie(name):
    try:
        raw = st.context.cookies.get(name)
    except Exception:
        raw = None
    return unquote(raw) if raw else None


def pending_position_cookie():
    return _read_cookie(GEO_COOKIE)


def pending_draft_token():
    return _read_cookie(DRAFT_COOKIE)


def parse_position(raw: str):
    """Turn the cookie value into (lat, lon) or raise the matching geolocation error."""
    if raw.startswith("error:"):
        code = raw.split(":", 1)[1]
        if code == PERMISSION_DENIED_CODE:
            raise GeolocationDenied("permission denied")
        if code == "unsupported":
            raise GeolocationUnsupported("navigator.geolocation missing")
        raise GeolocationUnavailable(f"position unavailable (code {code})")
    try:
        lat_raw, lon_raw = raw.split(",", 1)
        return float(lat_raw), float(lon_raw)
    except ValueError as e:
        raise GeolocationUnavailable(f"malformed position {raw!r}") from e


def clear_position_cookie():
    components.html(
        f"""
        <script>
          ["{GEO_COOKIE}", "{DRAFT_COOKIE}"].forEach(function (name) {{
            var cookieStr = name + "=; path=/; max-age=0; SameSite=Lax";
            document.cookie = cookieStr;
            try {{ window.parent.document.cookie = cookieStr; }} catch (e) {{}}
          }});
        </script>
        """,
        height=0,
    )
