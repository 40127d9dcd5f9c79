"""Single owner of "who is signed in" for the lifetime of an app session.

States: INITIALIZING -> AUTHENTICATED | ANONYMOUS, then back and forth as the
auth service reports changes. Notifications are queued and applied strictly in
arrival order; each one replaces the session wholesale.
"""

import logging
import queue
import threading
import weakref
from typing import Callable, Optional

from infrastructure.supabase_api import RemoteServiceError
from use_cases.deadline import DeadlineExceeded, run_in_background, with_deadline
from use_cases.results import FlowResult
from use_cases.session_models import AuthEvent, Credentials, SessionStatus, UserSession

log = logging.getLogger(__name__)

SIGN_UP_TIMEOUT_SECONDS = 15
SIGN_IN_TIMEOUT_SECONDS = 10

CONNECTION_ISSUE_MESSAGE = (
    "Server connection issue. This might be due to the service being unavailable. Please try again later."
)

SessionListener = Callable[[Optional[UserSession]], None]


class SessionStore:
    def __init__(
        self,
        auth_client,
        *,
        sign_up_timeout: float = SIGN_UP_TIMEOUT_SECONDS,
        sign_in_timeout: float = SIGN_IN_TIMEOUT_SECONDS,
    ):
        self._auth = auth_client
        self._sign_up_timeout = sign_up_timeout
        self._sign_in_timeout = sign_in_timeout
        self._events: "queue.Queue[AuthEvent]" = queue.Queue()
        self._lock = threading.RLock()
        self._status: SessionStatus = "INITIALIZING"
        self._session: Optional[UserSession] = None
        self._listeners: list[SessionListener] = []
        self._subscription = None
        self._release = None

    # --- lifecycle ---

    def start(self) -> "SessionStore":
        """Subscribe to auth changes, then resolve the initial session. Safe to call twice."""
        if self._subscription is not None:
            return self

        # The auth client must not keep the store alive, otherwise the
        # finalizer below never runs.
        store_ref = weakref.ref(self)

        def _forward(kind, session):
            store = store_ref()
            if store is not None:
                store._enqueue(AuthEvent(kind=kind, session=session))

        self._subscription = self._auth.on_auth_state_change(_forward)
        self._release = weakref.finalize(self, self._subscription.unsubscribe)

        try:
            initial = self._auth.get_session()
        except Exception as e:
            log.error(f"❌ Error getting session, continuing signed out: {e}")
            initial = None
        self._enqueue(AuthEvent(kind="INITIAL_SESSION", session=initial))
        return self

    def close(self) -> None:
        """Release the auth subscription. Runs at most once, including at interpreter exit."""
        if self._release is not None:
            self._release()

    @property
    def closed(self) -> bool:
        return self._release is not None and not self._release.alive

    def __enter__(self) -> "SessionStore":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- reads ---

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def is_loading(self) -> bool:
        return self._status == "INITIALIZING"

    def current_session(self) -> Optional[UserSession]:
        return self._session

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    # --- inbound channel ---

    def _enqueue(self, event: AuthEvent) -> None:
        self._events.put(event)
        self._drain()

    def _drain(self) -> None:
        with self._lock:
            while True:
                try:
                    event = self._events.get_nowait()
                except queue.Empty:
                    return
                self._apply(event)

    def _apply(self, event: AuthEvent) -> None:
        if self.closed:
            return
        self._session = event.session
        self._status = "AUTHENTICATED" if event.session is not None else "ANONYMOUS"
        user_id = event.session.user_id if event.session else None
        log.info(f"Auth state changed: {event.kind} {user_id}")
        for listener in list(self._listeners):
            listener(self._session)

    # --- remote operations ---

    def sign_up(self, email: str, password: str) -> FlowResult[Credentials]:
        """Create an account. The current session is left untouched either way."""
        try:
            credentials = with_deadline(
                lambda: self._auth.sign_up(email, password),
                self._sign_up_timeout,
                label="sign-up",
            )
        except DeadlineExceeded:
            return FlowResult.failure("TIMEOUT", CONNECTION_ISSUE_MESSAGE)
        except RemoteServiceError as e:
            log.error(f"Sign up error: {e}")
            return _classify_remote_error(e)
        return FlowResult.success(credentials)

    def sign_in(self, email: str, password: str) -> FlowResult[UserSession]:
        try:
            session = with_deadline(
                lambda: self._auth.sign_in_with_password(email, password),
                self._sign_in_timeout,
                label="sign-in",
            )
        except DeadlineExceeded:
            return FlowResult.failure("TIMEOUT", CONNECTION_ISSUE_MESSAGE)
        except RemoteServiceError as e:
            log.error(f"Sign in error: {e}")
            return _classify_remote_error(e)
        self._enqueue(AuthEvent(kind="SIGNED_IN", session=session))
        return FlowResult.success(session)

    def sign_out(self) -> FlowResult[None]:
        """Drop the local session now; the remote logout finishes in the background.

        Only the dropped session is revoked, so a sign-in made while that
        logout is still running stays signed in.
        """
        dropped = self._auth.end_session()
        self._enqueue(AuthEvent(kind="SIGNED_OUT", session=None))
        if dropped is not None:
            run_in_background(
                lambda: self._auth.revoke(dropped),
                on_error=lambda e: log.error(f"Error signing out: {e}"),
            )
        return FlowResult.success(None)


def _classify_remote_error(error: RemoteServiceError) -> FlowResult:
    if error.status_code is None:
        return FlowResult.failure("NETWORK_UNREACHABLE", CONNECTION_ISSUE_MESSAGE)
    return FlowResult.failure("REMOTE_REJECTED", error.message)
