import html
import json

import streamlit as st
import streamlit.components.v1 as components

STATUS_COLORS = {
    "Completed": ("#dcfce7", "#166534"),
    "In Progress": ("#dbeafe", "#1e40af"),
}
DEFAULT_STATUS_COLORS = ("#fef9c3", "#854d0e")

STARTUP_WARNING_ID = "tt-startup-warning"


def setup_style():
    st.markdown("""
    <style>
        :root {
            --tt-green: #16a34a;
            --tt-green-dark: #166534;
            --tt-danger-bg: #ffebee;
            --tt-danger: #c62828;
        }

        h1, h2, h3 {
            color: var(--tt-green-dark);
            letter-spacing: -0.02em;
        }

        [data-testid="stSidebar"] {
            background: linear-gradient(180deg, #15803d 0%, #166534 100%);
        }

        [data-testid="stSidebar"] * {
            color: #ffffff !important;
        }

        .tt-avatar {
            width: 2.5rem;
            height: 2.5rem;
            border-radius: 9999px;
            background: #14532d;
            color: #fff;
            display: flex;
            align-items: center;
            justify-content: center;
            font-weight: 700;
        }

        .tt-fatal {
            padding: 20px;
            background-color: var(--tt-danger-bg);
            color: var(--tt-danger);
            border-radius: 5px;
        }
    </style>
    """, unsafe_allow_html=True)


def status_colors(status):
    return STATUS_COLORS.get(status, DEFAULT_STATUS_COLORS)


def render_avatar(initial):
    st.markdown(f'<div class="tt-avatar">{html.escape(initial)}</div>', unsafe_allow_html=True)


def reload_page():
    components.html("<script>window.parent.location.reload();</script>", height=0)


def render_fatal_error(message):
    st.markdown(
        f'<div class="tt-fatal"><h2>Something went wrong</h2><p>{html.escape(str(message))}</p></div>',
        unsafe_allow_html=True,
    )
    if st.button("Reload Page", key="fatal_reload", type="primary"):
        reload_page()


def render_offline_prompt():
    st.warning("📡 You are offline. Reports cannot be submitted until the connection is back.")
    if st.button("Retry", key="offline_retry", type="primary"):
        st.rerun()


def arm_startup_watchdog(deadline_seconds, message):
    """Show `message` over the page unless `mark_app_mounted` runs within the deadline.

    The timer lives in the browser, so it fires even while the script run that
    armed it is still blocked.
    """
    components.html(
        f"""
        <script>
          setTimeout(function () {{
            var doc = window.parent.document;
            if (doc.body.dataset.ttMounted === "1" || doc.getElementById("{STARTUP_WARNING_ID}")) return;
            var banner = doc.createElement("div");
            banner.id = "{STARTUP_WARNING_ID}";
            banner.textContent = {json.dumps(message)};
            banner.style.cssText = "position:fixed;top:0;left:0;right:0;z-index:1000000;padding:12px 20px;"
              + "background:#ffebee;color:#c62828;font-weight:600;text-align:center";
            doc.body.appendChild(banner);
          }}, {int(deadline_seconds * 1000)});
        </script>
        """,
        height=0,
    )


def mark_app_mounted():
    components.html(
        f"""
        <script>
          var doc = window.parent.document;
          doc.body.dataset.ttMounted = "1";
          var banner = doc.getElementById("{STARTUP_WARNING_ID}");
          if (banner) banner.remove();
        </script>
        """,
        height=0,
    )
