"""Reporter interface and the fan-out manager used by the plan runner."""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence

from hostsuite.core.results import CaseResult

if TYPE_CHECKING:
    from hostsuite.plan.models import ExecutionPlan


class Reporter:
    """Receives run lifecycle events; override only the ones you render."""

    def on_start(self, plan: ExecutionPlan, total: int) -> None:
        return None

    def on_case_result(self, result: CaseResult, index: int, total: int) -> None:
        return None

    def on_complete(self, results: Sequence[CaseResult]) -> None:
        return None


class ReportManager:
    """Dispatches lifecycle callbacks to every reporter and tracks the outcome.

    ``handle_result`` matches the runner's ``on_result`` callback signature,
    so the manager can be handed to :class:`~hostsuite.core.runner.TestRunner`
    directly.
    """

    def __init__(self, reporters: Sequence[Reporter]) -> None:
        self.reporters: List[Reporter] = list(reporters)
        self.failing: List[CaseResult] = []

    def start(self, plan: ExecutionPlan, total: int) -> None:
        self.failing.clear()
        for reporter in self.reporters:
            reporter.on_start(plan, total)

    def handle_result(self, result: CaseResult, index: int, total: int) -> None:
        if result.failing:
            self.failing.append(result)
        for reporter in self.reporters:
            reporter.on_case_result(result, index, total)

    def complete(self, results: Sequence[CaseResult]) -> None:
        for reporter in self.reporters:
            reporter.on_complete(results)

    @property
    def exit_code(self) -> int:
        """0 when nothing failed, errored or timed out; 1 otherwise."""

        return 1 if self.failing else 0
