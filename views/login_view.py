import streamlit as st

import auth
import ui
from use_cases import auth_flow
from use_cases.session_store import CONNECTION_ISSUE_MESSAGE
from utils import session_manager


def _render_connection_help():
    st.caption("This could be due to:")
    st.markdown(
        "- The backend service being temporarily unavailable\n"
        "- Network restrictions or firewall settings"
    )
    if st.button("Refresh Page", key="login_refresh"):
        ui.reload_page()


def render_auth_screen(store):
    st.title("♻️ Trash Tracker")
    tab_login, tab_register = st.tabs(["Login", "Create Account"])

    with tab_login:
        with st.form("login_form", clear_on_submit=False):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Login", type="primary")
        if submitted:
            if not email.strip() or not password:
                st.error("Please enter your email and password.")
            else:
                with st.spinner("Signing in..."):
                    result = store.sign_in(email.strip(), password)
                if result.ok:
                    session_manager.navigate("dashboard")
                st.error(auth_flow.sign_in_message(result))
                if result.message == CONNECTION_ISSUE_MESSAGE:
                    _render_connection_help()

    with tab_register:
        with st.form("register_form", clear_on_submit=False):
            name = st.text_input("Full Name *")
            reg_email = st.text_input("Email *")
            reg_password = st.text_input("Password *", type="password")
            reg_confirm = st.text_input("Confirm Password *", type="password")
            reg_submitted = st.form_submit_button("Create Account")
        if reg_submitted:
            if not all([name.strip(), reg_email.strip(), reg_password, reg_confirm]):
                st.error("Please fill in all required fields")
            else:
                with st.spinner("Creating your account..."):
                    result = auth_flow.register(
                        store,
                        auth.get_profile_repo(),
                        name.strip(),
                        reg_email.strip(),
                        reg_password,
                        reg_confirm,
                    )
                if result.ok:
                    st.success("Account created. Confirm your email if asked, then log in.")
                else:
                    st.error(result.message or "Failed to create account. Please try again.")
