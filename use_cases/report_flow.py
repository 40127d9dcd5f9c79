"""Report submission and the signed-in user's local report list."""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from infrastructure.supabase_api import RemoteServiceError
from use_cases.deadline import DeadlineExceeded, with_deadline
from use_cases.domain_models import Report
from use_cases.results import FlowResult
from use_cases.session_models import UserSession

log = logging.getLogger(__name__)

SUBMIT_TIMEOUT_SECONDS = 10

MISSING_FIELDS_MESSAGE = "Please fill in all required fields"
SUBMIT_TIMEOUT_MESSAGE = "Submission is taking too long. Please check your internet connection and try again."
SUBMIT_IN_PROGRESS_MESSAGE = "A report is already being submitted."
SUBMIT_SUCCESS_MESSAGE = "Report submitted successfully!"


@dataclass
class ReportDraft:
    """Form state of a report that has not been stored yet."""

    location_text: str = ""
    location_search: str = ""
    description: str = ""
    attachments: List[Any] = field(default_factory=list)

    def missing_fields(self) -> List[str]:
        missing = []
        if not self.location_text.strip():
            missing.append("location")
        if not self.description.strip():
            missing.append("description")
        return missing

    def clear(self) -> None:
        self.location_text = ""
        self.location_search = ""
        self.description = ""
        self.attachments = []


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ReportSubmissionFlow:
    """Owns the cached, newest-first list of one user's reports.

    The list only ever changes by a full reload for a new identity or by
    prepending the record the backend returned for a confirmed submission.
    """

    def __init__(
        self,
        repository,
        *,
        submit_timeout: float = SUBMIT_TIMEOUT_SECONDS,
        clock: Callable[[], str] = _utc_now_iso,
    ):
        self._repository = repository
        self._submit_timeout = submit_timeout
        self._clock = clock
        self._in_flight = threading.Lock()
        self.reports: List[Report] = []
        self.loaded_for: Optional[str] = None

    @property
    def is_submitting(self) -> bool:
        return self._in_flight.locked()

    def load_reports(self, user_id: str, access_token: Optional[str] = None) -> List[Report]:
        try:
            rows = self._repository.list_for_user(user_id, access_token)
            self.reports = [Report.from_row(row) for row in rows]
        except RemoteServiceError as e:
            log.error(f"Error fetching reports: {e}")
            self.reports = []
        self.loaded_for = user_id
        return self.reports

    def ensure_loaded(self, session: Optional[UserSession]) -> List[Report]:
        """Query once per identity; later calls for the same user reuse the cache."""
        if session is None:
            self.reports = []
            self.loaded_for = None
            return self.reports
        if self.loaded_for != session.user_id:
            self.load_reports(session.user_id, session.access_token)
        return self.reports

    def submit(self, draft: ReportDraft, session: UserSession) -> FlowResult[Report]:
        if draft.missing_fields():
            return FlowResult.failure("VALIDATION", MISSING_FIELDS_MESSAGE)
        if not self._in_flight.acquire(blocking=False):
            return FlowResult.failure("VALIDATION", SUBMIT_IN_PROGRESS_MESSAGE)
        try:
            row = {
                "location": draft.location_text,
                "description": draft.description,
                "user_id": session.user_id,
                "status": "pending",
                "created_at": self._clock(),
            }
            log.info(f"Submitting report for user {session.user_id}")
            try:
                stored = with_deadline(
                    lambda: self._repository.insert(row, session.access_token),
                    self._submit_timeout,
                    label="report submission",
                )
            except DeadlineExceeded:
                return FlowResult.failure("TIMEOUT", SUBMIT_TIMEOUT_MESSAGE)
            except RemoteServiceError as e:
                log.error(f"Submission error: {e}")
                return FlowResult.failure("REMOTE_REJECTED", f"Failed to submit report: {e.message}")

            report = Report.from_row(stored)
            self.reports = [report] + self.reports
            draft.clear()
            return FlowResult.success(report, SUBMIT_SUCCESS_MESSAGE)
        finally:
            self._in_flight.release()
