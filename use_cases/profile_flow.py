"""Profile page: read and update the `profiles` row, upload an avatar."""

import logging
import os
import secrets
from datetime import datetime, timezone
from typing import Optional

from infrastructure.supabase_api import RemoteServiceError
from use_cases.domain_models import Profile
from use_cases.results import FlowResult
from use_cases.session_models import UserSession

log = logging.getLogger(__name__)

AVATAR_BUCKET = "profiles"

PROFILE_SAVED_MESSAGE = "Profile updated successfully!"
PROFILE_SAVE_FAILED_MESSAGE = "Error updating profile. Please try again."
AVATAR_SAVED_MESSAGE = "Profile picture updated successfully!"
AVATAR_FAILED_MESSAGE = "Error uploading profile picture. Please try again."


def load_profile(profiles, session: UserSession) -> Profile:
    try:
        row = profiles.get(session.user_id, session.access_token)
    except RemoteServiceError as e:
        log.error(f"Error fetching profile: {e}")
        row = None
    return Profile.from_row(session.user_id, row)


def display_name(profile: Optional[Profile], session: Optional[UserSession]) -> str:
    if profile is not None and profile.name:
        return profile.name
    if session is not None and session.email:
        return session.email.split("@")[0]
    return "User"


def save_profile(profiles, session: UserSession, name: str, phone: str) -> FlowResult[None]:
    row = {
        "id": session.user_id,
        "name": name,
        "phone": phone,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    try:
        profiles.upsert(row, session.access_token)
    except RemoteServiceError as e:
        log.error(f"Error updating profile: {e}")
        return FlowResult.failure("REMOTE_REJECTED", PROFILE_SAVE_FAILED_MESSAGE)
    return FlowResult.success(None, PROFILE_SAVED_MESSAGE)


def avatar_path(user_id: str, file_name: str) -> str:
    ext = os.path.splitext(file_name)[1].lstrip(".") or "png"
    return f"avatars/{user_id}-{secrets.token_hex(6)}.{ext}"


def upload_avatar(
    storage,
    profiles,
    session: UserSession,
    file_name: str,
    content: bytes,
    content_type: str = "application/octet-stream",
) -> FlowResult[str]:
    """Store the picture, then point the profile at its public URL."""
    path = avatar_path(session.user_id, file_name)
    try:
        storage.upload(AVATAR_BUCKET, path, content, content_type, session.access_token)
        public_url = storage.get_public_url(AVATAR_BUCKET, path)
        profiles.upsert(
            {
                "id": session.user_id,
                "avatar_url": public_url,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            },
            session.access_token,
        )
    except RemoteServiceError as e:
        log.error(f"Error uploading avatar: {e}")
        return FlowResult.failure("REMOTE_REJECTED", AVATAR_FAILED_MESSAGE)
    return FlowResult.success(public_url, AVATAR_SAVED_MESSAGE)
