"""Core models and helpers exposed at the package level."""
from .builder import SuiteBuilder
from .errors import (
    AssertionFailure,
    ExternalOperationError,
    HostsuiteError,
    PlanError,
    PollTimeoutError,
    RegistrationError,
    TestTimeoutError,
)
from .expect import create_spy, expect, fail, object_containing, rejects
from .models import PollConfig, Suite, TestCase, Tolerance
from .poller import PollResult, Poller, retry_for_status, wait_for
from .results import CaseResult
from .runner import TestRunner

__all__ = [
    "AssertionFailure",
    "CaseResult",
    "ExternalOperationError",
    "HostsuiteError",
    "PlanError",
    "PollConfig",
    "PollResult",
    "PollTimeoutError",
    "Poller",
    "RegistrationError",
    "Suite",
    "SuiteBuilder",
    "TestCase",
    "TestRunner",
    "TestTimeoutError",
    "Tolerance",
    "create_spy",
    "expect",
    "fail",
    "object_containing",
    "rejects",
    "retry_for_status",
    "wait_for",
]
