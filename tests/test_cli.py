import json

import yaml
from click.testing import CliRunner

from hostsuite import __version__
from hostsuite.cli.main import cli, main


def _write_plan(tmp_path, **overrides) -> str:
    data = {
        "host": {"type": "local", "root": "sandbox", "options": {"load_latency": 0.0, "start_latency": 0.01}},
        "suites": ["filesystem"],
        "skip_tags": ["network"],
    }
    data.update(overrides)
    plan = tmp_path / "plan.yaml"
    plan.write_text(yaml.safe_dump(data), encoding="utf-8")
    return str(plan)


def test_cli_help_short_flag() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["-h"])
    assert result.exit_code == 0
    assert "Usage:" in result.output
    assert "run" in result.output
    assert "suites" in result.output


def test_cli_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == f"hostsuite {__version__}"


def test_cli_lists_suites() -> None:
    result = CliRunner().invoke(cli, ["suites"])
    assert result.exit_code == 0
    assert "filesystem\t" in result.output
    assert "audio\t" in result.output


def test_cli_run_plan(tmp_path) -> None:
    result = CliRunner().invoke(cli, ["run", "--plan", _write_plan(tmp_path), "--no-color"])
    assert result.exit_code == 0, result.output
    assert "total=8: 8 passed in" in result.output


def test_cli_run_list_with_filters(tmp_path) -> None:
    result = CliRunner().invoke(
        cli,
        ["run", "--config", _write_plan(tmp_path), "--list", "--cases", "*mkdir*,*move*"],
    )
    assert result.exit_code == 0, result.output
    lines = result.output.strip().splitlines()
    assert len(lines) == 3
    assert all(line.startswith("FileSystem > ") for line in lines)


def test_cli_run_json_report(tmp_path) -> None:
    report = tmp_path / "report.json"
    result = CliRunner().invoke(
        cli,
        [
            "run",
            "--plan",
            _write_plan(tmp_path),
            "--cases",
            "*out-of-scope*",
            "--report",
            "json",
            "--report-path",
            str(report),
        ],
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(report.read_text(encoding="utf-8"))
    assert payload["summary"]["total"] == 1
    assert payload["cases"][0]["status"] == "passed"


def test_cli_run_translates_plan_errors(tmp_path) -> None:
    plan = tmp_path / "plan.yaml"
    plan.write_text("suites: []\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["run", "--plan", str(plan)])
    assert result.exit_code == 1
    assert "Plan schema validation failed" in result.output


def test_cli_unknown_suite(tmp_path) -> None:
    result = CliRunner().invoke(cli, ["run", "--plan", _write_plan(tmp_path), "--suites", "nope"])
    assert result.exit_code == 1
    assert "Unknown suite 'nope'" in result.output


def test_main_returns_exit_code(tmp_path) -> None:
    assert main(["run", "--plan", _write_plan(tmp_path), "--list"]) == 0
