"""Authentication flow orchestration (application layer)."""

import logging
from dataclasses import dataclass
from typing import Literal, Optional

from infrastructure.supabase_api import RemoteServiceError
from use_cases.results import FlowResult
from use_cases.session_models import Credentials

log = logging.getLogger(__name__)

AuthFlowStatus = Literal["CONTINUE", "STOP"]

PROTECTED_PAGES = frozenset({"dashboard", "profile"})

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password. Please try again."
PASSWORD_MISMATCH_MESSAGE = "Passwords do not match"
NETWORK_ERROR_MESSAGE = "Network error. Please check your internet connection and try again."


@dataclass(frozen=True)
class AuthFlowResult:
    """Result contract for the auth gate in front of a page."""

    status: AuthFlowStatus
    reason: str
    page: str
    user_id: Optional[str] = None


def ensure_authenticated_session(store, page: str) -> AuthFlowResult:
    """Let public pages through; send anonymous visitors of protected pages to login."""
    session = store.current_session()
    if page not in PROTECTED_PAGES:
        return AuthFlowResult(
            status="CONTINUE",
            reason="public",
            page=page,
            user_id=session.user_id if session else None,
        )
    if session is None:
        return AuthFlowResult(status="STOP", reason="auth_required", page="login")
    return AuthFlowResult(status="CONTINUE", reason="authenticated", page=page, user_id=session.user_id)


def sign_in_message(result: FlowResult) -> str:
    if result.ok:
        return ""
    if result.error_kind == "REMOTE_REJECTED" and "invalid login" in result.message.lower():
        return INVALID_CREDENTIALS_MESSAGE
    return result.message or "Failed to sign in. Please try again."


def register(store, profiles, name: str, email: str, password: str, confirm_password: str) -> FlowResult[Credentials]:
    """Create the account, then its `profiles` row."""
    if password != confirm_password:
        return FlowResult.failure("VALIDATION", PASSWORD_MISMATCH_MESSAGE)

    signed_up = store.sign_up(email, password)
    if not signed_up.ok:
        return signed_up

    credentials = signed_up.value
    access_token = credentials.session.access_token if credentials.session else None
    try:
        profiles.insert({"id": credentials.user_id, "name": name}, access_token)
    except RemoteServiceError as e:
        log.error(f"Registration error: {e}")
        if e.status_code is None:
            return FlowResult.failure("NETWORK_UNREACHABLE", NETWORK_ERROR_MESSAGE)
        return FlowResult.failure("REMOTE_REJECTED", e.message)
    return FlowResult.success(credentials, "Success!")
