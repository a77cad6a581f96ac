"""Error types raised by the Jira client and record decoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class ErrorCode:
    """Machine-readable identifiers attached to Jira errors."""

    REQUEST_FAILED = "request_failed"
    MALFORMED_RECORD = "malformed_record"
    INVALID_RESPONSE = "invalid_response"


@dataclass
class JiraError(Exception):
    """Base exception for tracker failures.

    Attributes:
        error_code: Machine-readable error identifier.
        message: Human-readable description.
        details: Additional structured information for logging.
    """

    error_code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            result["details"] = dict(self.details)
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


@dataclass
class TrackerRequestError(JiraError):
    """The tracker answered with a status code of 300 or above."""

    error_code: str = field(default=ErrorCode.REQUEST_FAILED)
    message: str = field(default="Jira request failed")
    details: dict[str, Any] = field(default_factory=dict)

    status_code: int = field(default=0)
    error_messages: tuple[str, ...] = field(default=())

    @property
    def server_message(self) -> str:
        """Server supplied messages joined the way Jira lists them."""

        return ",".join(self.error_messages)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["status_code"] = self.status_code
        if self.error_messages:
            result["error_messages"] = list(self.error_messages)
        return result


@dataclass
class IssueDecodeError(JiraError):
    """An issue payload did not match the subset of the schema we consume."""

    error_code: str = field(default=ErrorCode.MALFORMED_RECORD)
    message: str = field(default="Issue payload is malformed")
    details: dict[str, Any] = field(default_factory=dict)

    key: str | None = field(default=None)
    path: str = field(default="")
