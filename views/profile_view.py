import streamlit as st

import auth
import ui
from use_cases import profile_flow
from use_cases.session_models import avatar_initial


def _render_avatar_section(session, profile):
    if profile.avatar_url:
        st.image(profile.avatar_url, width=120)
    else:
        ui.render_avatar(avatar_initial(session))

    picture = st.file_uploader("Change profile picture", type=["png", "jpg", "jpeg", "webp"], key="avatar_upload")
    if picture is not None and st.button("Upload Picture", key="avatar_upload_btn"):
        with st.spinner("Uploading..."):
            result = profile_flow.upload_avatar(
                auth.get_storage(),
                auth.get_profile_repo(),
                session,
                picture.name,
                picture.getvalue(),
                picture.type or "application/octet-stream",
            )
        if result.ok:
            st.session_state.profile = None
            st.session_state.profile_notice = result.message
            st.rerun()
        st.error(result.message)


def render_profile(store):
    session = store.current_session()
    if st.session_state.profile is None:
        st.session_state.profile = profile_flow.load_profile(auth.get_profile_repo(), session)
    profile = st.session_state.profile

    st.title("👤 Profile")
    notice = st.session_state.pop("profile_notice", None)
    if notice:
        st.success(notice)

    _render_avatar_section(session, profile)

    st.divider()
    with st.form("profile_form"):
        name = st.text_input("Full Name", value=profile.name)
        st.text_input("Email", value=session.email, disabled=True)
        phone = st.text_input("Phone Number", value=profile.phone)
        saved = st.form_submit_button("Save Changes", type="primary")

    if saved:
        result = profile_flow.save_profile(auth.get_profile_repo(), session, name.strip(), phone.strip())
        if result.ok:
            st.session_state.profile = None
            st.session_state.profile_notice = result.message
            st.rerun()
        st.error(result.message)
