import streamlit as st

from utils import session_manager


def render_home(store):
    st.title("♻️ Trash Tracker")
    st.subheader("Report. Track. Keep your neighbourhood clean.")
    st.write(
        "Spotted an overflowing bin or an illegal dump? Pin it on the map, add a photo "
        "and follow its status until it is cleaned up."
    )

    col1, col2, col3 = st.columns(3)
    col1.markdown("**📍 Locate**  \nSearch an address or use your current position.")
    col2.markdown("**📸 Report**  \nDescribe the problem and attach photos.")
    col3.markdown("**✅ Track**  \nSee when your report is in progress or completed.")

    st.divider()
    if store.current_session() is not None:
        if st.button("Go to Dashboard", type="primary"):
            session_manager.navigate("dashboard")
    else:
        if st.button("Login / Register", type="primary"):
            session_manager.navigate("login")
