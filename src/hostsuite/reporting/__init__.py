"""Reporters rendering run results for people (terminal) and tools (JSON)."""
from .base import ReportManager, Reporter
from .json_reporter import JsonReporter
from .schema import JSON_SCHEMA_V1, SCHEMA_VERSION
from .terminal import STATUS_COLORS, TerminalReporter

__all__ = [
    "JSON_SCHEMA_V1",
    "JsonReporter",
    "ReportManager",
    "Reporter",
    "SCHEMA_VERSION",
    "STATUS_COLORS",
    "TerminalReporter",
]
