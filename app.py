import logging

import streamlit as st

from infrastructure.observability import setup_observability
setup_observability()

import ui
from use_cases import auth_flow
from use_cases.bootstrap import STUCK_STARTUP_MESSAGE
from utils import session_manager
from views import dashboard_view, home_view, login_view, navbar, profile_view

log = logging.getLogger(__name__)

# --- PAGE SETUP ---
st.set_page_config(page_title="Trash Tracker", page_icon="♻️", layout="centered", initial_sidebar_state="expanded")

ui.setup_style()
session_manager.init_session_state()

# --- STARTUP WATCHDOG ---
watchdog = st.session_state.startup_watchdog
if watchdog.is_stuck():
    st.error(STUCK_STARTUP_MESSAGE)
    if st.button("Reload Page", key="watchdog_reload"):
        ui.reload_page()
if not watchdog.mounted:
    ui.arm_startup_watchdog(watchdog.deadline, STUCK_STARTUP_MESSAGE)


def _set_sentry_user(session):
    try:
        import sentry_sdk
        if sentry_sdk.Hub.current.client:
            sentry_sdk.set_user({"id": session.user_id} if session else None)
    except (ImportError, AttributeError):
        pass


def main():
    store = session_manager.ensure_session_store()
    session_manager.sync_browser_session(store)

    page = session_manager.current_page()
    gate = auth_flow.ensure_authenticated_session(store, page)
    if not watchdog.mounted:
        watchdog.mark_mounted()
        ui.mark_app_mounted()
    _set_sentry_user(store.current_session())

    navbar.render_navbar(store)

    if gate.status == "STOP":
        login_view.render_auth_screen(store)
        return

    if page == "login":
        if store.current_session() is not None:
            session_manager.navigate("dashboard")
        login_view.render_auth_screen(store)
    elif page == "dashboard":
        dashboard_view.render_dashboard(store)
    elif page == "profile":
        profile_view.render_profile(store)
    else:
        home_view.render_home(store)


try:
    main()
except Exception as e:
    log.exception(f"Unhandled error while rendering: {e}")
    ui.render_fatal_error(e)
