"""Result contract returned by every user-initiated flow."""

from dataclasses import dataclass
from typing import Generic, Literal, Optional, TypeVar

T = TypeVar("T")

ErrorKind = Literal[
    "VALIDATION",
    "TIMEOUT",
    "REMOTE_REJECTED",
    "NETWORK_UNREACHABLE",
    "PERMISSION_DENIED",
    "UNAVAILABLE",
]
FlowStatus = Literal["OK", "ERROR"]


@dataclass(frozen=True)
class FlowResult(Generic[T]):
    status: FlowStatus
    value: Optional[T] = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "OK"

    @classmethod
    def success(cls, value: Optional[T] = None, message: str = "") -> "FlowResult[T]":
        return cls(status="OK", value=value, message=message)

    @classmethod
    def failure(cls, error_kind: ErrorKind, message: str) -> "FlowResult[T]":
        return cls(status="ERROR", error_kind=error_kind, message=message)
