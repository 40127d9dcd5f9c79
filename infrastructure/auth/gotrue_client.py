import logging
import threading
from typing import Callable, Optional

from infrastructure.supabase_api import RemoteServiceError, build_headers, send
from use_cases.session_models import Credentials, UserSession, session_from_payload

log = logging.getLogger(__name__)

AuthListener = Callable[[str, Optional[UserSession]], None]


class Subscription:
    """Handle returned by `on_auth_state_change`. `unsubscribe()` may be called any number of times."""

    def __init__(self, client: "SupabaseAuthClient", listener: AuthListener):
        self._client = client
        self._listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._client._remove_listener(self._listener)


class SupabaseAuthClient:
    """Email/password auth against the hosted GoTrue API.

    Holds the current user's tokens in memory and notifies listeners with
    `(event_kind, session)` whenever they change.
    """

    def __init__(self, url: str, anon_key: str, persisted_refresh_token: Optional[str] = None):
        self.base_url = f"{url.rstrip('/')}/auth/v1" if url else "/auth/v1"
        self.anon_key = anon_key
        self._persisted_refresh_token = persisted_refresh_token
        self._session: Optional[UserSession] = None
        self._listeners: list[AuthListener] = []
        self._lock = threading.Lock()

    def on_auth_state_change(self, listener: AuthListener) -> Subscription:
        with self._lock:
            self._listeners.append(listener)
        return Subscription(self, listener)

    def _remove_listener(self, listener: AuthListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _emit(self, kind: str, session: Optional[UserSession]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(kind, session)
            except Exception:
                log.exception(f"Auth listener failed on {kind}")

    def get_session(self) -> Optional[UserSession]:
        """Current session, restoring it from a persisted refresh token on first use."""
        if self._session is not None:
            return self._session
        token = self._persisted_refresh_token
        if not token:
            return None
        self._persisted_refresh_token = None
        return self.restore_session(token)

    def restore_session(self, refresh_token: str) -> UserSession:
        resp = send(
            "POST",
            f"{self.base_url}/token",
            params={"grant_type": "refresh_token"},
            headers=build_headers(self.anon_key),
            json={"refresh_token": refresh_token},
        )
        session = session_from_payload(resp.json())
        if session is None:
            raise RemoteServiceError("Auth service returned no session")
        self._session = session
        log.info(f"🔄 Session restored for user {session.user_id}")
        self._emit("TOKEN_REFRESHED", session)
        return session

    def sign_up(self, email: str, password: str) -> Credentials:
        resp = send(
            "POST",
            f"{self.base_url}/signup",
            headers=build_headers(self.anon_key),
            json={"email": email, "password": password},
        )
        body = resp.json()
        session = session_from_payload(body)
        user = body.get("user") or body
        if not user.get("id"):
            raise RemoteServiceError("Auth service returned no user")
        return Credentials(user_id=str(user["id"]), email=user.get("email") or email, session=session)

    def sign_in_with_password(self, email: str, password: str) -> UserSession:
        resp = send(
            "POST",
            f"{self.base_url}/token",
            params={"grant_type": "password"},
            headers=build_headers(self.anon_key),
            json={"email": email, "password": password},
        )
        session = session_from_payload(resp.json())
        if session is None:
            raise RemoteServiceError("Auth service returned no session")
        self._session = session
        self._emit("SIGNED_IN", session)
        return session

    def end_session(self) -> Optional[UserSession]:
        """Drop the local session and notify listeners. Returns the session that was dropped."""
        with self._lock:
            session = self._session
            self._session = None
        self._emit("SIGNED_OUT", None)
        return session

    def revoke(self, session: UserSession) -> None:
        """Invalidate `session`'s refresh token remotely. Never touches the current local session."""
        send(
            "POST",
            f"{self.base_url}/logout",
            headers=build_headers(self.anon_key, session.access_token),
        )

    def sign_out(self) -> None:
        """Local sign-out first, then the remote logout of the dropped session."""
        session = self.end_session()
        if session is not None:
            self.revoke(session)
