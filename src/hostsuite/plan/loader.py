"""YAML loader and validation for run plans."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from jsonschema import Draft7Validator

from hostsuite.core.errors import PlanError
from hostsuite.core.models import PollConfig, Tolerance

from .models import ExecutionPlan, HostConfig

DEFAULT_SUITES = ("filesystem", "audio")
DEFAULT_TIMEOUT = 5.0

PLAN_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "hostsuite plan",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "host": {
            "oneOf": [
                {"type": "string", "minLength": 1},
                {
                    "type": "object",
                    "additionalProperties": False,
                    "properties": {
                        "type": {"type": "string", "minLength": 1},
                        "root": {"type": "string"},
                        "options": {"type": "object"},
                    },
                },
            ]
        },
        "suites": {"type": "array", "items": {"type": "string", "minLength": 1}, "minItems": 1},
        "default_timeout": {"type": "number", "exclusiveMinimum": 0},
        "poll": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "interval": {"type": "number", "exclusiveMinimum": 0},
                "max_retries": {"type": "integer", "minimum": 1},
                "max_duration": {"type": ["number", "null"], "exclusiveMinimum": 0},
                "tolerance": {
                    "type": "object",
                    "properties": {
                        "abs": {"type": "number", "minimum": 0},
                        "rel": {"type": "number", "minimum": 0},
                    },
                },
            },
        },
        "tags": {"type": "array", "items": {"type": "string"}},
        "skip_tags": {"type": "array", "items": {"type": "string"}},
        "fail_fast": {"type": "boolean"},
    },
}

_validator = Draft7Validator(PLAN_SCHEMA)


def load_plan(path: str) -> ExecutionPlan:
    """Load and validate a plan file."""
    plan_path = Path(path).expanduser().resolve()
    try:
        raw = yaml.safe_load(plan_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise PlanError(f"Plan file {plan_path} is not valid YAML: {exc}") from exc
    return parse_plan(raw, plan_path.parent)


def parse_plan(raw: Any, plan_dir: Path) -> ExecutionPlan:
    if not isinstance(raw, Mapping):
        raise PlanError("Plan file must contain a mapping at the top level")
    errors = sorted(_validator.iter_errors(raw), key=lambda e: list(e.path))
    if errors:
        messages = "; ".join(f"{'/'.join(map(str, err.path)) or 'root'}: {err.message}" for err in errors)
        raise PlanError(f"Plan schema validation failed: {messages}")
    host = _parse_host(raw.get("host"), plan_dir)
    suites = tuple(raw.get("suites") or DEFAULT_SUITES)
    if len(set(suites)) != len(suites):
        raise PlanError("suites must not contain duplicates")
    return ExecutionPlan(
        host=host,
        suites=suites,
        default_timeout=float(raw.get("default_timeout", DEFAULT_TIMEOUT)),
        poll=_parse_poll(raw.get("poll")),
        tags=tuple(raw.get("tags") or ()),
        skip_tags=tuple(raw.get("skip_tags") or ()),
        fail_fast=bool(raw.get("fail_fast", False)),
        plan_dir=plan_dir,
    )


def default_plan(plan_dir: Optional[Path] = None) -> ExecutionPlan:
    """Plan used when the CLI runs without a plan file."""

    return parse_plan({}, plan_dir or Path.cwd())


def _parse_host(raw: Any, base: Path) -> HostConfig:
    if raw is None:
        return HostConfig(root=base / ".hostsuite-sandbox")
    if isinstance(raw, str):
        return HostConfig(type=raw, root=base / ".hostsuite-sandbox")
    root = raw.get("root")
    root_path = (base / root).resolve() if root else base / ".hostsuite-sandbox"
    return HostConfig(
        type=str(raw.get("type", "local")),
        root=root_path,
        options=dict(raw.get("options") or {}),
    )


def _parse_poll(raw: Any) -> PollConfig:
    if not raw:
        return PollConfig()
    defaults = PollConfig()
    max_duration = raw.get("max_duration", defaults.max_duration)
    return PollConfig(
        interval=float(raw.get("interval", defaults.interval)),
        max_retries=int(raw.get("max_retries", defaults.max_retries)),
        max_duration=float(max_duration) if max_duration is not None else None,
        tolerance=Tolerance.from_mapping(raw.get("tolerance")),
    )
