from pathlib import Path

import pytest
import yaml

from hostsuite.core import PlanError
from hostsuite.plan import default_plan, load_plan, parse_plan


def test_default_plan_runs_builtin_suites_on_local_host(tmp_path) -> None:
    plan = default_plan(tmp_path)
    assert plan.host.type == "local"
    assert plan.host.root == tmp_path / ".hostsuite-sandbox"
    assert tuple(plan.suites) == ("filesystem", "audio")
    assert plan.default_timeout == 5.0
    assert plan.poll.max_retries == 50
    assert plan.fail_fast is False


def test_load_plan_parses_every_section(tmp_path) -> None:
    plan_data = {
        "host": {"type": "local", "root": "sandbox", "options": {"sound_duration_ms": 2000}},
        "suites": ["audio"],
        "default_timeout": 2.5,
        "poll": {"interval": 0.01, "max_retries": 5, "max_duration": 1.0, "tolerance": {"abs": 0.1}},
        "tags": ["smoke"],
        "skip_tags": ["network"],
        "fail_fast": True,
    }
    plan_path = tmp_path / "plan.yaml"
    plan_path.write_text(yaml.safe_dump(plan_data), encoding="utf-8")
    plan = load_plan(str(plan_path))
    assert plan.host.root == (tmp_path / "sandbox").resolve()
    assert plan.host.factory_options() == {"sound_duration_ms": 2000, "root": str((tmp_path / "sandbox").resolve())}
    assert tuple(plan.suites) == ("audio",)
    assert plan.default_timeout == 2.5
    assert plan.poll.interval == 0.01
    assert plan.poll.max_duration == 1.0
    assert plan.poll.tolerance.absolute == 0.1
    assert tuple(plan.tags) == ("smoke",)
    assert tuple(plan.skip_tags) == ("network",)
    assert plan.fail_fast is True
    assert plan.plan_dir == plan_path.resolve().parent


def test_host_may_be_a_bare_type_name() -> None:
    plan = parse_plan({"host": "local"}, Path("/srv/plans"))
    assert plan.host.type == "local"
    assert plan.host.root == Path("/srv/plans/.hostsuite-sandbox")


@pytest.mark.parametrize(
    "raw, fragment",
    [
        ({"suites": []}, "suites"),
        ({"default_timeout": 0}, "default_timeout"),
        ({"poll": {"max_retries": 0}}, "poll/max_retries"),
        ({"unexpected": 1}, "Additional properties"),
        ({"suites": ["audio", "audio"]}, "duplicates"),
    ],
)
def test_invalid_plans_raise_plan_error(raw, fragment) -> None:
    with pytest.raises(PlanError) as excinfo:
        parse_plan(raw, Path("."))
    assert fragment in str(excinfo.value)


def test_invalid_yaml_is_reported(tmp_path) -> None:
    plan_path = tmp_path / "broken.yaml"
    plan_path.write_text("suites: [audio\n", encoding="utf-8")
    with pytest.raises(PlanError, match="not valid YAML"):
        load_plan(str(plan_path))


def test_top_level_must_be_a_mapping() -> None:
    with pytest.raises(PlanError, match="mapping"):
        parse_plan(["audio"], Path("."))
