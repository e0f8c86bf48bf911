"""JSON reporter writing a machine-readable run summary."""
from __future__ import annotations

import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

import click
from jsonschema import validate

from hostsuite.core.results import CaseResult, count_statuses

from .base import Reporter
from .schema import JSON_SCHEMA_V1, SCHEMA_VERSION

if TYPE_CHECKING:
    from hostsuite.plan.models import ExecutionPlan


class JsonReporter(Reporter):
    """Collects results and writes one JSON document on completion."""

    def __init__(self, *, path: str) -> None:
        self._path = Path(path)
        self._plan: Optional[ExecutionPlan] = None
        self._start_time = 0.0

    def on_start(self, plan: ExecutionPlan, total: int) -> None:
        self._plan = plan
        self._start_time = time.perf_counter()

    def on_complete(self, results: Sequence[CaseResult]) -> None:
        payload = self.build_payload(results, time.perf_counter() - self._start_time)
        validate(instance=payload, schema=JSON_SCHEMA_V1)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        click.echo(f"JSON report written to {self._path}")

    def build_payload(self, results: Sequence[CaseResult], duration: float) -> Dict[str, Any]:
        counts = count_statuses(results)
        plan = self._plan
        return {
            "schema_version": SCHEMA_VERSION,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "summary": {
                "total": counts["total"],
                "passed": counts["passed"],
                "failed": counts["failed"],
                "errors": counts["error"],
                "timeouts": counts["timeout"],
                "skipped": counts["skipped"],
                "host": plan.host.type if plan else "unknown",
                "suites": list(plan.suites) if plan else [],
                "duration_s": round(duration, 6),
            },
            "cases": [_case_record(result) for result in results],
        }


def _case_record(result: CaseResult) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "id": result.path,
        "name": result.name,
        "status": result.status,
        "duration_ms": round(result.duration_s * 1000, 3),
        "synthetic": result.synthetic,
        "tags": list(result.tags),
    }
    if result.error:
        record["error"] = result.error
    if result.error_kind:
        record["error_kind"] = result.error_kind
    return record
