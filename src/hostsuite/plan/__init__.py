"""Run plan loader and executor."""

from .loader import default_plan, load_plan, parse_plan
from .models import ExecutionPlan, HostConfig, PlanOptions
from .runner import run_plan

__all__ = [
    "ExecutionPlan",
    "HostConfig",
    "PlanOptions",
    "default_plan",
    "load_plan",
    "parse_plan",
    "run_plan",
]
