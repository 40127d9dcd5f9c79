import logging
import os
from dataclasses import dataclass
from typing import Optional

import streamlit as st

from infrastructure.auth.gotrue_client import SupabaseAuthClient
from infrastructure.geocoding.nominatim_client import DEFAULT_NOMINATIM_URL, DEFAULT_USER_AGENT, NominatimClient
from infrastructure.repositories.supabase_profile_repository import SupabaseProfileRepository
from infrastructure.repositories.supabase_report_repository import SupabaseReportRepository
from infrastructure.storage.supabase_storage import SupabaseStorage

log = logging.getLogger(__name__)

REQUIRED_SETTINGS = ("SUPABASE_URL", "SUPABASE_ANON_KEY")


def get_secret(key):
    try:
        return st.secrets.get(key)
    except FileNotFoundError:
        return None


def _setting(key, default=None):
    return get_secret(key) or os.getenv(key) or default


@dataclass(frozen=True)
class BackendSettings:
    supabase_url: str
    supabase_anon_key: str
    nominatim_url: str = DEFAULT_NOMINATIM_URL
    nominatim_user_agent: str = DEFAULT_USER_AGENT


def get_settings() -> BackendSettings:
    return BackendSettings(
        supabase_url=_setting("SUPABASE_URL", ""),
        supabase_anon_key=_setting("SUPABASE_ANON_KEY", ""),
        nominatim_url=_setting("NOMINATIM_URL", DEFAULT_NOMINATIM_URL),
        nominatim_user_agent=_setting("NOMINATIM_USER_AGENT", DEFAULT_USER_AGENT),
    )


def missing_settings() -> list:
    return [key for key in REQUIRED_SETTINGS if not _setting(key)]


def build_auth_client(persisted_refresh_token: Optional[str] = None) -> SupabaseAuthClient:
    # One client per browser session: it carries that user's tokens.
    settings = get_settings()
    return SupabaseAuthClient(settings.supabase_url, settings.supabase_anon_key, persisted_refresh_token)


_report_repo = None
_profile_repo = None
_storage = None
_geocoder = None


def get_report_repo() -> SupabaseReportRepository:
    global _report_repo
    if _report_repo is None:
        settings = get_settings()
        _report_repo = SupabaseReportRepository(settings.supabase_url, settings.supabase_anon_key)
    return _report_repo


def get_profile_repo() -> SupabaseProfileRepository:
    global _profile_repo
    if _profile_repo is None:
        settings = get_settings()
        _profile_repo = SupabaseProfileRepository(settings.supabase_url, settings.supabase_anon_key)
    return _profile_repo


def get_storage() -> SupabaseStorage:
    global _storage
    if _storage is None:
        settings = get_settings()
        _storage = SupabaseStorage(settings.supabase_url, settings.supabase_anon_key)
    return _storage


def get_geocoder() -> NominatimClient:
    global _geocoder
    if _geocoder is None:
        settings = get_settings()
        _geocoder = NominatimClient(settings.nominatim_url, settings.nominatim_user_agent)
    return _geocoder
