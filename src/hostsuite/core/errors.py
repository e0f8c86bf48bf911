"""Error types raised by the harness, the poller and host adapters."""
from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence


class HostsuiteError(Exception):
    """Base class for every hostsuite error."""


class RegistrationError(HostsuiteError):
    """Raised when the suite builder is used outside its contract."""


class PlanError(HostsuiteError):
    """Raised when a run plan cannot be loaded or resolved."""


class AssertionFailure(HostsuiteError, AssertionError):
    """An ``expect`` matcher did not hold."""

    def __init__(self, message: str, *, actual: Any = None, expected: Any = None) -> None:
        super().__init__(message)
        self.actual = actual
        self.expected = expected


class TestTimeoutError(HostsuiteError):
    """A test body or hook exceeded its time budget."""

    __test__ = False  # keep pytest from collecting this class

    def __init__(self, name: str, timeout: float) -> None:
        super().__init__(f"Timeout - '{name}' did not complete within {timeout:g}s")
        self.name = name
        self.timeout = timeout


class PollTimeoutError(HostsuiteError):
    """A polled status never converged on the expected shape."""

    def __init__(
        self,
        expected: Mapping[str, Any],
        last_snapshot: Optional[Mapping[str, Any]],
        attempts: int,
        mismatches: Sequence[str] = (),
    ) -> None:
        detail = "; ".join(mismatches) if mismatches else "no status observed"
        super().__init__(
            f"Status did not match {dict(expected)!r} after {attempts} attempt(s): {detail}"
        )
        self.expected = dict(expected)
        self.last_snapshot = dict(last_snapshot) if last_snapshot is not None else None
        self.attempts = attempts
        self.mismatches = tuple(mismatches)


class ExternalOperationError(HostsuiteError):
    """A host capability rejected an operation."""

    def __init__(self, operation: str, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.path = path


def error_kind(exc: BaseException) -> str:
    """Return a short, stable label for ``exc`` used in reports."""

    if isinstance(exc, AssertionFailure):
        return "assertion"
    if isinstance(exc, TestTimeoutError):
        return "timeout"
    if isinstance(exc, PollTimeoutError):
        return "poll_timeout"
    if isinstance(exc, ExternalOperationError):
        return "external"
    if isinstance(exc, AssertionError):
        return "assertion"
    return "exception"
