"""Terminal reporter streaming one line per case plus a summary."""
from __future__ import annotations

import time
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

import click
from colorama import just_fix_windows_console

from hostsuite.core.results import STATUSES, CaseResult, count_statuses

from .base import Reporter

if TYPE_CHECKING:
    from hostsuite.plan.models import ExecutionPlan

STATUS_COLORS = {
    "passed": "green",
    "failed": "red",
    "error": "yellow",
    "timeout": "magenta",
    "skipped": "bright_black",
}

_LABEL_WIDTH = max(len(status) for status in STATUSES)


class TerminalReporter(Reporter):
    """Human-readable reporter that streams to stdout."""

    def __init__(self, *, use_color: bool = True) -> None:
        self._use_color = use_color
        self._started = 0.0
        self._failures: List[Tuple[int, CaseResult]] = []
        if use_color:
            just_fix_windows_console()

    def on_start(self, plan: ExecutionPlan, total: int) -> None:
        self._started = time.perf_counter()
        self._failures = []
        click.echo(
            self._paint(
                f"hostsuite: {total} case(s) on host '{plan.host.type}' "
                f"[suites: {', '.join(plan.suites)}; timeout {plan.default_timeout:g}s"
                f"{'; fail-fast' if plan.fail_fast else ''}]",
                "cyan",
            )
        )

    def on_case_result(self, result: CaseResult, index: int, total: int) -> None:
        counter = f"[{index:>{len(str(total))}}/{total}]"
        label = self._paint(result.status.upper().ljust(_LABEL_WIDTH), STATUS_COLORS.get(result.status))
        click.echo(f"{counter} {label} {result.path} ({result.duration_s * 1000:.2f} ms)")
        if result.failing:
            self._failures.append((index, result))
        elif result.status == "skipped" and result.error:
            click.echo(f"    reason: {result.error}")

    def on_complete(self, results: Sequence[CaseResult]) -> None:
        elapsed = time.perf_counter() - self._started
        if self._failures:
            click.echo(self._paint("Failures:", "red"))
            for index, result in self._failures:
                click.echo(f"  {index}) {result.path}")
                for line in _detail_lines(result):
                    click.echo(f"       {line}")
        counts = count_statuses(results)
        parts = [f"{counts[status]} {status}" for status in STATUSES if counts[status]]
        colour = "red" if self._failures else "green"
        click.echo(self._paint(f"total={counts['total']}: {', '.join(parts) or 'nothing ran'} in {elapsed:.2f}s", colour))

    def _paint(self, text: str, colour: Optional[str]) -> str:
        if not self._use_color or colour is None:
            return text
        return click.style(text, fg=colour)


def _detail_lines(result: CaseResult) -> List[str]:
    lines: List[str] = []
    if result.synthetic:
        hook = result.name.split(" ")[0]
        lines.append(f"{hook} hook failed" + ("; the suite's tests were not run" if hook == "before_all" else ""))
    if result.error_kind:
        lines.append(f"kind: {result.error_kind}")
    lines.extend((result.error or "no error message recorded").splitlines())
    return lines
