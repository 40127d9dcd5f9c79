"""Application layer contracts for orchestrating high-level flows.

`bootstrap` is not re-exported here: it wires the concrete clients from
`auth`, and those clients import this package's models.
"""

from .auth_flow import AuthFlowResult, AuthFlowStatus, ensure_authenticated_session, register
from .report_flow import ReportDraft, ReportSubmissionFlow
from .results import ErrorKind, FlowResult
from .session_models import AuthEvent, Credentials, SessionStatus, UserSession
from .session_store import SessionStore

__all__ = [
    "AuthEvent",
    "AuthFlowResult",
    "AuthFlowStatus",
    "Credentials",
    "ErrorKind",
    "FlowResult",
    "ReportDraft",
    "ReportSubmissionFlow",
    "SessionStatus",
    "SessionStore",
    "UserSession",
    "ensure_authenticated_session",
    "register",
]
