"""Session DTOs shared across application layers."""

from dataclasses import dataclass
from typing import Literal, Optional

SessionStatus = Literal["INITIALIZING", "AUTHENTICATED", "ANONYMOUS"]
AuthEventKind = Literal["INITIAL_SESSION", "SIGNED_IN", "SIGNED_OUT", "TOKEN_REFRESHED", "USER_UPDATED"]


@dataclass(frozen=True)
class UserSession:
    user_id: str
    email: str
    access_token: str = ""
    refresh_token: str = ""
    is_loading: bool = False


@dataclass(frozen=True)
class Credentials:
    """What a successful sign-up hands back. `session` is set only when no email confirmation is required."""

    user_id: str
    email: str
    session: Optional[UserSession] = None


@dataclass(frozen=True)
class AuthEvent:
    kind: AuthEventKind
    session: Optional[UserSession]


def session_from_payload(payload: dict) -> Optional[UserSession]:
    """Build a session from an auth token response (`access_token`, `refresh_token`, `user`)."""
    if not payload or not payload.get("access_token"):
        return None
    user = payload.get("user") or {}
    return UserSession(
        user_id=str(user.get("id", "")),
        email=user.get("email") or "",
        access_token=payload["access_token"],
        refresh_token=payload.get("refresh_token") or "",
    )


def avatar_initial(session: Optional[UserSession]) -> str:
    if session is None or not session.email:
        return "U"
    return session.email[0].upper()
