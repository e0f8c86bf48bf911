"""Data models for run plans."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from hostsuite.core.models import PollConfig


@dataclass(frozen=True)
class HostConfig:
    type: str = "local"
    root: Optional[Path] = None
    options: Mapping[str, Any] = field(default_factory=dict)

    def factory_options(self) -> dict:
        options = dict(self.options)
        if self.root is not None:
            options["root"] = str(self.root)
        return options


@dataclass(frozen=True)
class ExecutionPlan:
    host: HostConfig
    suites: Sequence[str]
    default_timeout: float
    poll: PollConfig
    tags: Sequence[str]
    skip_tags: Sequence[str]
    fail_fast: bool
    plan_dir: Path


@dataclass(frozen=True)
class PlanOptions:
    suites: Sequence[str] = field(default_factory=tuple)
    cases: Sequence[str] = field(default_factory=tuple)
    tags: Sequence[str] = field(default_factory=tuple)
    skip_tags: Sequence[str] = field(default_factory=tuple)
    fail_fast: Optional[bool] = None
    default_timeout: Optional[float] = None
    list_only: bool = False
