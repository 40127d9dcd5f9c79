import streamlit as st

import ui
from use_cases.session_models import avatar_initial
from utils import session_manager


def render_navbar(store):
    session = store.current_session()
    with st.sidebar:
        st.markdown("## ♻️ Trash Tracker")
        if session is None:
            return

        col_avatar, col_email = st.columns([1, 4])
        with col_avatar:
            ui.render_avatar(avatar_initial(session))
        col_email.caption(session.email)

        if st.button("📊 Dashboard", use_container_width=True):
            session_manager.navigate("dashboard")
        if st.button("👤 Profile", use_container_width=True):
            session_manager.navigate("profile")

        st.divider()
        if not st.session_state.confirm_sign_out:
            if st.button("🚪 Sign Out", key="signout_btn", use_container_width=True):
                st.session_state.confirm_sign_out = True
                st.rerun()
        else:
            st.markdown("**Sign Out Confirmation**")
            st.caption("Are you sure you want to sign out?")
            col_cancel, col_confirm = st.columns(2)
            if col_cancel.button("Cancel", key="signout_cancel"):
                st.session_state.confirm_sign_out = False
                st.rerun()
            if col_confirm.button("Sign Out", key="signout_confirm", type="primary"):
                session_manager.logout()
