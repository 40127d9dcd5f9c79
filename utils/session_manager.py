import logging
from urllib.parse import unquote

import streamlit as st
import streamlit.components.v1 as components

import auth
from use_cases import bootstrap
from use_cases.bootstrap import StartupWatchdog
from use_cases.location_flow import DebouncedLocationSearch
from use_cases.report_flow import ReportDraft, ReportSubmissionFlow
from utils import browser_geolocation

log = logging.getLogger(__name__)

"""
SESSION STATE CONTRACT

This module owns the Streamlit session state of one browser tab.

st.session_state keys:

session_store: SessionStore | None
    who is signed in; built once per tab by bootstrap.run_startup
    owner: session_manager

startup_watchdog: StartupWatchdog
    flags a first mount that never finished
    owner: app

persisted_refresh_token: str | None
    refresh token last written to the browser cookie
    owner: session_manager

report_flow: ReportSubmissionFlow | None
    cached report list of the signed-in user
    owner: dashboard_view

report_draft: ReportDraft
    the report form being composed
    owner: dashboard_view

location_search: DebouncedLocationSearch | None
    debounced geocoder lookups for the report form
    owner: dashboard_view

location_error: str
    last location error shown under the location field
    owner: dashboard_view

profile: Profile | None
    profile row of the signed-in user
    owner: profile_view

confirm_sign_out: bool
    sign-out confirmation step is open
    owner: navbar

geo_consumed: bool
    the geolocation cookie of this tab has been applied to the draft
    owner: dashboard_view

session_diag_seen: bool
    prevents repeating the "could not restore session" warning
    owner: system
"""

REFRESH_COOKIE = "tt_refresh_token"
COOKIE_MAX_AGE = 2592000  # 30 days

DEFAULT_PAGE = "home"
PAGES = ("home", "login", "dashboard", "profile")


def init_session_state():
    if 'session_store' not in st.session_state:
        st.session_state.session_store = None
    if 'startup_watchdog' not in st.session_state:
        st.session_state.startup_watchdog = StartupWatchdog()
    if 'persisted_refresh_token' not in st.session_state:
        st.session_state.persisted_refresh_token = None
    if 'report_flow' not in st.session_state:
        st.session_state.report_flow = None
    if 'report_draft' not in st.session_state:
        # A geolocation round trip reloads the page; pick the parked draft back up.
        parked = browser_geolocation.take_stashed_draft(browser_geolocation.pending_draft_token())
        st.session_state.report_draft = parked or ReportDraft()
    if 'location_search' not in st.session_state:
        st.session_state.location_search = None
    if 'location_error' not in st.session_state:
        st.session_state.location_error = ""
    if 'profile' not in st.session_state:
        st.session_state.profile = None
    if 'confirm_sign_out' not in st.session_state:
        st.session_state.confirm_sign_out = False
    if "geo_consumed" not in st.session_state:
        st.session_state.geo_consumed = False
    if "session_diag_seen" not in st.session_state:
        st.session_state.session_diag_seen = False


def read_browser_refresh_token():
    try:
        token = st.context.cookies.get(REFRESH_COOKIE)
    except Exception:
        # During some tests contexts might not be fully available
        token = None
    return unquote(token) if token else None


def ensure_session_store():
    """Build and start the tab's session store on the first run, reuse it afterwards."""
    if st.session_state.session_store is None:
        cookie_token = read_browser_refresh_token()
        startup = bootstrap.run_startup(persisted_refresh_token=cookie_token)
        st.session_state.session_store = startup.store
        st.session_state.persisted_refresh_token = cookie_token
        if cookie_token and startup.store.current_session() is None and not st.session_state.session_diag_seen:
            st.warning("Could not restore your session. Please sign in again.")
            st.session_state.session_diag_seen = True
    return st.session_state.session_store


def get_report_flow() -> ReportSubmissionFlow:
    if st.session_state.report_flow is None:
        st.session_state.report_flow = ReportSubmissionFlow(auth.get_report_repo())
    return st.session_state.report_flow


def get_location_search() -> DebouncedLocationSearch:
    if st.session_state.location_search is None:
        st.session_state.location_search = DebouncedLocationSearch(auth.get_geocoder())
    return st.session_state.location_search


def write_browser_refresh_token(token):
    components.html(
        f"""
        <script>
          var cookieStr = "{REFRESH_COOKIE}=" + encodeURIComponent("{token}") + "; path=/; max-age={COOKIE_MAX_AGE}; SameSite=Lax";
          document.cookie = cookieStr;
          try {{ window.parent.document.cookie = cookieStr; }} catch (e) {{}}
        </script>
        """,
        height=0,
    )


def clear_browser_refresh_token():
    components.html(
        f"""
        <script>
          var cookieStr = "{REFRESH_COOKIE}=; path=/; max-age=0; SameSite=Lax";
          document.cookie = cookieStr;
          try {{ window.parent.document.cookie = cookieStr; }} catch (e) {{}}
        </script>
        """,
        height=0,
    )


def sync_browser_session(store):
    """Keep the refresh-token cookie in step with the store so a reload can restore the session."""
    session = store.current_session()
    current = session.refresh_token if session else None
    if current == st.session_state.persisted_refresh_token:
        return
    if current:
        write_browser_refresh_token(current)
    else:
        clear_browser_refresh_token()
    st.session_state.persisted_refresh_token = current


def current_page() -> str:
    page = st.query_params.get("page", DEFAULT_PAGE)
    return page if page in PAGES else DEFAULT_PAGE


def navigate(page):
    st.query_params["page"] = page
    st.rerun()


def reset_user_state():
    st.session_state.report_flow = None
    st.session_state.report_draft = ReportDraft()
    st.session_state.location_error = ""
    st.session_state.profile = None
    if st.session_state.location_search is not None:
        st.session_state.location_search.clear()


def logout():
    """Sign out locally right away and go home; the remote logout runs in the background."""
    st.session_state.confirm_sign_out = False
    st.session_state.session_store.sign_out()
    reset_user_state()
    # The cookie is cleared by sync_browser_session on the next run.
    navigate("home")
