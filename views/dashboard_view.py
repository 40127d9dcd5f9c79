import pandas as pd
import streamlit as st

import auth
import ui
from infrastructure import connectivity
from use_cases import location_flow, profile_flow
from use_cases.location_flow import SEARCH_DEBOUNCE_SECONDS, LocationLookupError
from utils import browser_geolocation, session_manager

TAB_REPORT = "📝 Report Garbage"
TAB_HISTORY = "📋 My Reports"


def _form_key(name):
    return f"{name}_{st.session_state.get('report_form_generation', 0)}"


def _on_search_change():
    draft = st.session_state.report_draft
    query = st.session_state[_form_key("location_search")]
    draft.location_search = query
    session_manager.get_location_search().update_query(query)


def _choose_candidate(candidate):
    draft = st.session_state.report_draft
    location_flow.select_candidate(draft, candidate)
    st.session_state[_form_key("location_search")] = candidate.display_name
    session_manager.get_location_search().clear()
    st.session_state.location_chosen = True


def _clear_location():
    draft = st.session_state.report_draft
    location_flow.clear_location(draft)
    st.session_state[_form_key("location_search")] = ""
    session_manager.get_location_search().clear()


def _on_photos_change():
    photos = st.session_state[_form_key("photos")]
    st.session_state.report_draft.attachments = list(photos or [])


def _show_report_tab():
    st.session_state.dashboard_tab = TAB_REPORT


def _apply_pending_geolocation(draft):
    raw = browser_geolocation.pending_position_cookie()
    if not raw or st.session_state.geo_consumed:
        return
    st.session_state.geo_consumed = True
    browser_geolocation.clear_position_cookie()
    try:
        candidate = location_flow.use_current_location(
            auth.get_geocoder(),
            lambda: browser_geolocation.parse_position(raw),
        )
    except LocationLookupError as e:
        st.session_state.location_error = e.message
        return
    location_flow.select_candidate(draft, candidate)
    st.session_state[_form_key("location_search")] = candidate.display_name
    st.session_state.location_error = ""


def _render_location_results():
    if st.session_state.pop("location_chosen", False):
        # Fragment reruns leave the form above stale; redraw the whole page.
        st.rerun()
    search = session_manager.get_location_search()
    if search.searching:
        st.caption("Searching...")
    if search.error:
        st.error(search.error)
    for i, candidate in enumerate(search.results):
        st.button(
            f"📍 {candidate.display_name}",
            key=f"loc_candidate_{i}_{candidate.place_id}",
            on_click=_choose_candidate,
            args=(candidate,),
            use_container_width=True,
        )


def _render_report_form(flow, session):
    draft = st.session_state.report_draft
    _apply_pending_geolocation(draft)

    st.subheader("Location *")
    col_search, col_locate = st.columns([5, 1])
    with col_search:
        search_key = _form_key("location_search")
        if search_key not in st.session_state:
            st.session_state[search_key] = draft.location_search
        query = st.text_input(
            "Search for a location...",
            key=search_key,
            on_change=_on_search_change,
            label_visibility="collapsed",
            placeholder="Search for a location...",
        )
    with col_locate:
        if st.button("🎯", help="Use my current location"):
            st.session_state.location_error = ""
            browser_geolocation.request_position(browser_geolocation.stash_draft(draft))

    search = session_manager.get_location_search()
    if query and not search.results and not search.searching and st.button("🔍 Search", key="search_now"):
        search.search_now(query)

    if st.session_state.location_error:
        st.error(st.session_state.location_error)

    # Poll while a debounced lookup is pending so its results show up without another keystroke.
    st.fragment(run_every=SEARCH_DEBOUNCE_SECONDS if search.searching else None)(_render_location_results)()

    if draft.location_text:
        col_loc, col_clear = st.columns([5, 1])
        col_loc.success(f"📍 {draft.location_text}")
        col_clear.button("✖", key="clear_location", on_click=_clear_location, help="Clear location")

    description_key = _form_key("description")
    if description_key not in st.session_state:
        st.session_state[description_key] = draft.description
    draft.description = st.text_area(
        "Description *",
        key=description_key,
        height=120,
        placeholder="Describe the garbage issue in detail",
    )
    st.file_uploader(
        "Photos",
        type=["png", "jpg", "jpeg", "webp"],
        accept_multiple_files=True,
        key=_form_key("photos"),
        on_change=_on_photos_change,
    )
    if draft.attachments:
        st.caption(", ".join(f.name if len(f.name) <= 15 else f.name[:15] + "..." for f in draft.attachments))

    if st.button("Submit Report", type="primary"):
        with st.spinner("Submitting..."):
            result = flow.submit(draft, session)
        if result.ok:
            st.session_state.report_notice = result.message
            st.session_state.report_form_generation = st.session_state.get("report_form_generation", 0) + 1
            session_manager.get_location_search().clear()
            st.rerun()
        else:
            st.error(result.message)

    notice = st.session_state.pop("report_notice", None)
    if notice:
        st.success(notice)


def reports_frame(reports):
    return pd.DataFrame(
        [
            {
                "Location": r.location,
                "Description": r.description,
                "Status": r.status,
                "Submitted": pd.to_datetime(r.created_at, errors="coerce", utc=True),
            }
            for r in reports
        ],
        columns=["Location", "Description", "Status", "Submitted"],
    )


def _status_style(status):
    background, color = ui.status_colors(status)
    return f"background-color: {background}; color: {color}; font-weight: 600"


def _render_history(flow):
    if not flow.reports:
        st.info("You haven't submitted any reports yet.")
        st.button("Create Your First Report", on_click=_show_report_tab, type="primary")
        return

    df = reports_frame(flow.reports)
    st.dataframe(
        df.style.map(_status_style, subset=["Status"]),
        use_container_width=True,
        hide_index=True,
        column_config={
            "Submitted": st.column_config.DatetimeColumn(format="YYYY-MM-DD HH:mm"),
        },
    )


def render_dashboard(store):
    session = store.current_session()
    if not connectivity.is_online(auth.get_settings().supabase_url):
        ui.render_offline_prompt()
        return

    flow = session_manager.get_report_flow()
    flow.ensure_loaded(session)

    if st.session_state.profile is None:
        st.session_state.profile = profile_flow.load_profile(auth.get_profile_repo(), session)

    st.title(f"Welcome, {profile_flow.display_name(st.session_state.profile, session)}!")
    st.caption("Report garbage issues in your area and help keep our community clean.")

    if "dashboard_tab" not in st.session_state:
        st.session_state.dashboard_tab = TAB_REPORT
    tab = st.radio(
        "Dashboard",
        [TAB_REPORT, TAB_HISTORY],
        key="dashboard_tab",
        horizontal=True,
        label_visibility="collapsed",
    )

    if tab == TAB_REPORT:
        _render_report_form(flow, session)
    else:
        _render_history(flow)
