"""Reporting errors — every failure a session can surface, by kind."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rpclient.reporting.models import AttemptOutcome


class ReportingError(Exception):
    """Base class for all reporting errors."""

    def __init__(self, message: str) -> None:
        """Initialize ReportingError with a message."""
        self.message = message
        super().__init__(message)


class TransportError(ReportingError):
    """No response was obtained (connection, timeout, DNS)."""


class RemoteRejected(ReportingError):
    """The service answered with a status code >= 400."""

    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f"request rejected with status {status}: {body[:500]}")


class DecodeError(ReportingError):
    """A successful response body could not be decoded."""


class RetriesExhausted(ReportingError):
    """Every attempt failed; wraps the last failure seen."""

    def __init__(
        self,
        last_error: TransportError | RemoteRejected | None,
        attempts: list[AttemptOutcome],
    ) -> None:
        self.last_error = last_error
        self.attempts = attempts
        detail = f": {last_error.message}" if last_error is not None else ""
        super().__init__(f"http max retries reached after {len(attempts)} attempts{detail}")


class NoLaunchStartedError(ReportingError):
    """A launch-level operation was called with no active launch."""

    def __init__(self, message: str = "launch is not started, no launch id") -> None:
        super().__init__(message)


class LogNotAttachableError(ReportingError):
    """A log was attempted with no open item to attach it to."""

    def __init__(
        self, message: str = "cannot attach log to launch item, only to test items"
    ) -> None:
        super().__init__(message)


class EmptyStackError(ReportingError):
    """The item tracker has no slot to peek or pop."""

    def __init__(self, message: str = "item tracker is empty") -> None:
        super().__init__(message)
