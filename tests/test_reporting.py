from __future__ import annotations

import json
from pathlib import Path
from unittest import mock

import pytest
from jsonschema import ValidationError, validate

from hostsuite.core.results import CaseResult, count_statuses
from hostsuite.plan import parse_plan
from hostsuite.reporting import JsonReporter, ReportManager, TerminalReporter
from hostsuite.reporting.schema import JSON_SCHEMA_V1


def _results() -> list[CaseResult]:
    return [
        CaseResult(path="FileSystem > write", name="write", status="passed", duration_s=0.002),
        CaseResult(
            path="Audio instances > Audio.set_volume > sets the volume",
            name="sets the volume",
            status="failed",
            duration_s=0.01,
            error="Status did not match {'volume': 0.5} after 50 attempt(s)\nvolume: actual=1.0 expected=0.5",
            error_kind="poll_timeout",
            tags=("audio",),
        ),
        CaseResult(
            path='Audio instances > "before all" hook',
            name="before_all hook",
            status="error",
            duration_s=0.0,
            error="no device",
            error_kind="exception",
            synthetic=True,
        ),
        CaseResult(path="FileSystem > download", name="download", status="skipped", duration_s=0.0),
    ]


def test_count_statuses() -> None:
    counts = count_statuses(_results())
    assert counts == {"passed": 1, "failed": 1, "error": 1, "timeout": 0, "skipped": 1, "total": 4}


def test_json_reporter_writes_file(tmp_path) -> None:
    plan = parse_plan({"suites": ["filesystem", "audio"]}, tmp_path)
    output_path = Path("tmp") / "report_output.json"
    reporter = JsonReporter(path=str(output_path))
    reporter.on_start(plan, total=4)
    with mock.patch("pathlib.Path.mkdir") as mock_mkdir, mock.patch("pathlib.Path.write_text") as mock_write:
        reporter.on_complete(_results())
        mock_mkdir.assert_called()
        mock_write.assert_called_once()
        payload = json.loads(mock_write.call_args.args[0])
    assert payload["summary"]["total"] == 4
    assert payload["summary"]["errors"] == 1
    assert payload["summary"]["suites"] == ["filesystem", "audio"]
    assert payload["cases"][1]["error_kind"] == "poll_timeout"
    assert payload["cases"][2]["synthetic"] is True
    assert "error" not in payload["cases"][0]
    assert payload["generated_at"].endswith("+00:00")


def test_report_schema_rejects_unknown_status(tmp_path) -> None:
    reporter = JsonReporter(path=str(tmp_path / "r.json"))
    reporter.on_start(parse_plan({}, tmp_path), total=1)
    payload = reporter.build_payload(_results(), 0.5)
    validate(instance=payload, schema=JSON_SCHEMA_V1)
    payload["cases"][0]["status"] = "xfail"
    with pytest.raises(ValidationError):
        validate(instance=payload, schema=JSON_SCHEMA_V1)


def test_terminal_reporter_renders_failure_details(tmp_path, capsys) -> None:
    reporter = TerminalReporter(use_color=False)
    manager = ReportManager([reporter])
    manager.start(parse_plan({}, tmp_path), 4)
    results = _results()
    for index, result in enumerate(results, start=1):
        manager.handle_result(result, index, len(results))
    manager.complete(results)
    output = capsys.readouterr().out
    assert "hostsuite: 4 case(s) on host 'local' [suites: filesystem, audio; timeout 5s]" in output
    assert "[2/4] FAILED  Audio instances > Audio.set_volume > sets the volume (10.00 ms)" in output
    assert "  2) Audio instances > Audio.set_volume > sets the volume" in output
    assert "       kind: poll_timeout" in output
    assert "       volume: actual=1.0 expected=0.5" in output
    assert "before_all hook failed; the suite's tests were not run" in output
    assert "total=4: 1 passed, 1 failed, 1 error, 1 skipped in" in output
    assert "Failures:" in output
    assert "\x1b[" not in output
    assert manager.reporters == [reporter]
    assert [result.status for result in manager.failing] == ["failed", "error"]
    assert manager.exit_code == 1


def test_terminal_reporter_colors_statuses(tmp_path, capsys) -> None:
    reporter = TerminalReporter(use_color=True)
    reporter.on_case_result(_results()[0], 1, 1)
    # click strips ANSI codes when stdout is not a terminal, so check the painted text directly
    assert reporter._paint("PASSED", "green") != "PASSED"
    assert "PASSED" in capsys.readouterr().out
