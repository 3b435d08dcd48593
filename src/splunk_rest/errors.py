"""
Error kinds surfaced by the Splunk REST client
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .messages import Message


class ErrorKind(Enum):
    MALFORMED_RESPONSE = "malformed_response"
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHENTICATION_FAILED = "authentication_failed"
    REQUEST_FAILED = "request_failed"

    @classmethod
    def from_status(cls, status: int) -> "ErrorKind":
        if status == 404:
            return cls.RESOURCE_NOT_FOUND
        if status in (401, 403):
            return cls.AUTHENTICATION_FAILED
        return cls.REQUEST_FAILED


@dataclass(frozen=True)
class RequestFailure:
    """Tagged description of a failed request, as returned by Response.failure()"""

    kind: ErrorKind
    status: int
    reason: str
    address: str
    messages: Tuple[Message, ...] = field(default_factory=tuple)


class SplunkError(Exception):
    """Raised for any failed Splunk REST operation; inspect ``kind`` to recover"""

    def __init__(
        self,
        kind: ErrorKind,
        detail: str,
        status: Optional[int] = None,
        reason: Optional[str] = None,
        address: Optional[str] = None,
        messages: Tuple[Message, ...] = (),
    ):
        self.kind = kind
        self.detail = detail
        self.status = status
        self.reason = reason
        self.address = address
        self.messages = tuple(messages)
        super().__init__(self._format())

    @classmethod
    def from_failure(cls, failure: RequestFailure) -> "SplunkError":
        return cls(
            failure.kind,
            f"{failure.status} {failure.reason}",
            status=failure.status,
            reason=failure.reason,
            address=failure.address,
            messages=failure.messages,
        )

    @classmethod
    def malformed(cls, detail: str, address: Optional[str] = None) -> "SplunkError":
        return cls(ErrorKind.MALFORMED_RESPONSE, detail, address=address)

    def _format(self) -> str:
        text = f"{self.kind.value}: {self.detail}"
        if self.address:
            text += f" ({self.address})"
        if self.messages:
            text += " -- " + "; ".join(str(m) for m in self.messages)
        return text
