"""Race a blocking remote call against a fixed deadline.

Every remote call that the UI waits on goes through `with_deadline`. Whichever
settles first decides the outcome. When the deadline wins, the call is *not*
cancelled: its daemon thread keeps running and whatever it eventually returns
or raises is dropped. Local state is never reconciled with such a late result.

Each call gets its own thread, so abandoned calls never delay the start of a
new one: the clock only runs while the call itself runs.
"""

import logging
import threading
from typing import Callable, Optional, TypeVar

T = TypeVar("T")

log = logging.getLogger(__name__)


class DeadlineExceeded(Exception):
    def __init__(self, label: str, seconds: float):
        super().__init__(f"{label} did not finish within {seconds:g}s")
        self.label = label
        self.seconds = seconds


def with_deadline(operation: Callable[[], T], seconds: float, *, label: str = "remote call") -> T:
    """Run `operation` on a daemon thread and wait at most `seconds` for it.

    Returns the operation's value or re-raises its exception if it settles in
    time, raises DeadlineExceeded otherwise.
    """
    outcome = {}
    settled = threading.Event()

    def _run():
        try:
            outcome["value"] = operation()
        except Exception as e:
            outcome["error"] = e
        finally:
            settled.set()

    threading.Thread(target=_run, daemon=True, name=f"deadline-{label}").start()
    if not settled.wait(seconds):
        log.warning(f"⏱️ {label} exceeded {seconds:g}s deadline, abandoning")
        raise DeadlineExceeded(label, seconds)
    if "error" in outcome:
        raise outcome["error"]
    return outcome.get("value")


def run_in_background(operation: Callable[[], object], on_error: Optional[Callable[[Exception], None]] = None) -> None:
    """Fire and forget. Errors go to `on_error` (or the log), never to the caller."""

    def background_call():
        try:
            operation()
        except Exception as e:
            if on_error is not None:
                on_error(e)
            else:
                log.error(f"❌ Background call failed: {e}")

    t = threading.Thread(target=background_call, daemon=True)
    t.start()
