"""Startup orchestration: configuration check and session store construction."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Literal, Optional, Tuple

import auth
from use_cases.session_store import SessionStore

log = logging.getLogger(__name__)

StartupStatus = Literal["CONTINUE", "STOP"]

STARTUP_WATCHDOG_SECONDS = 5
STUCK_STARTUP_MESSAGE = (
    "App is taking too long to load. There might be an issue with authentication or component rendering."
)


@dataclass(frozen=True)
class StartupResult:
    """Result contract for startup/bootstrap orchestration."""

    status: StartupStatus
    planned_steps: Tuple[str, ...]
    store: Optional[SessionStore] = None
    missing_settings: Tuple[str, ...] = ()


def run_startup(persisted_refresh_token: Optional[str] = None) -> StartupResult:
    """Check configuration and start a session store.

    Missing backend settings are logged but never halt startup: the clients are
    still built and every remote call fails when it is made.
    """
    executed_steps = []

    missing = tuple(auth.missing_settings())
    if missing:
        log.error(f"Missing backend credentials: {', '.join(missing)}. Check secrets.toml or the environment.")
    executed_steps.append("check_settings")

    client = auth.build_auth_client(persisted_refresh_token)
    executed_steps.append("build_auth_client")

    store = SessionStore(client).start()
    executed_steps.append("start_session_store")

    return StartupResult(
        status="CONTINUE",
        planned_steps=tuple(executed_steps),
        store=store,
        missing_settings=missing,
    )


class StartupWatchdog:
    """Flags a first mount that has not finished within the deadline.

    It only reports that startup looks stuck; it does not try to find out why.
    """

    def __init__(self, deadline: float = STARTUP_WATCHDOG_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.deadline = deadline
        self._clock = clock
        self._armed_at = clock()
        self.mounted = False

    def mark_mounted(self) -> None:
        if not self.mounted:
            log.info("App mounted")
        self.mounted = True

    def is_stuck(self) -> bool:
        if self.mounted:
            return False
        stuck = self._clock() - self._armed_at > self.deadline
        if stuck:
            log.warning("App is taking too long to load")
        return stuck
