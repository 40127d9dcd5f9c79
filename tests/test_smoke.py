import importlib
import os
import subprocess
import sys
from unittest.mock import patch

import streamlit as st  # noqa: TID251


def test_imports():
    """Ensure core modules can be imported without crashing."""
    import auth  # noqa: F401
    import ui  # noqa: F401
    import infrastructure.auth.gotrue_client  # noqa: F401
    import infrastructure.geocoding.nominatim_client  # noqa: F401
    import use_cases  # noqa: F401
    import utils.browser_geolocation  # noqa: F401
    import views.dashboard_view  # noqa: F401
    import views.login_view  # noqa: F401
    import views.navbar  # noqa: F401
    import views.profile_view  # noqa: F401

    st.session_state.clear()
    if "app" in sys.modules:
        del sys.modules["app"]

    with patch("utils.session_manager.current_page", return_value="home"), patch(
        "auth.missing_settings", return_value=[]
    ), patch("auth.get_settings") as mock_settings:
        mock_settings.return_value = auth.BackendSettings(supabase_url="", supabase_anon_key="")
        importlib.import_module("app")


def test_each_entry_module_imports_first_in_fresh_interpreter():
    """Every layer must be importable on its own, whatever module is loaded first."""
    root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    modules = [
        "infrastructure.auth.gotrue_client",
        "auth",
        "use_cases",
        "use_cases.bootstrap",
        "use_cases.session_store",
        "utils.session_manager",
        "utils.browser_geolocation",
    ]
    for module in modules:
        proc = subprocess.run(
            [sys.executable, "-c", f"import {module}"],
            cwd=root,
            capture_output=True,
            text=True,
            timeout=60,
        )
        assert proc.returncode == 0, f"import {module} failed:\n{proc.stderr}"
