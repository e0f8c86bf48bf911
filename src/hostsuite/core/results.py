"""Result data structures produced by the test runner."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

STATUSES = ("passed", "failed", "error", "timeout", "skipped")
FAILING_STATUSES = frozenset({"failed", "error", "timeout"})


@dataclass
class CaseResult:
    """Outcome of executing a single test case."""

    path: str
    name: str
    status: str
    duration_s: float
    error: Optional[str] = None
    error_kind: Optional[str] = None
    tags: Tuple[str, ...] = field(default_factory=tuple)
    synthetic: bool = False

    @property
    def passed(self) -> bool:
        return self.status == "passed"

    @property
    def failing(self) -> bool:
        return self.status in FAILING_STATUSES


def count_statuses(results) -> dict:
    counts = {status: 0 for status in STATUSES}
    for result in results:
        counts[result.status] = counts.get(result.status, 0) + 1
    counts["total"] = len(results)
    return counts
