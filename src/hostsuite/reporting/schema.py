"""JSON schema for the report written by :class:`JsonReporter`."""
from __future__ import annotations

from hostsuite.core.results import STATUSES

SCHEMA_VERSION = "1.0.0"

_COUNT = {"type": "integer", "minimum": 0}

SUMMARY_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "required": ["total", "passed", "failed", "errors", "timeouts", "skipped", "host", "suites", "duration_s"],
    "properties": {
        "total": _COUNT,
        "passed": _COUNT,
        "failed": _COUNT,
        "errors": _COUNT,
        "timeouts": _COUNT,
        "skipped": _COUNT,
        "host": {"type": "string"},
        "suites": {"type": "array", "items": {"type": "string"}},
        "duration_s": {"type": "number", "minimum": 0},
    },
}

CASE_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "required": ["id", "name", "status", "duration_ms", "synthetic", "tags"],
    "properties": {
        "id": {"type": "string", "description": "Suite names and test name joined by ' > '."},
        "name": {"type": "string"},
        "status": {"enum": list(STATUSES)},
        "duration_ms": {"type": "number", "minimum": 0},
        "synthetic": {"type": "boolean", "description": "True for suite-hook failure markers."},
        "tags": {"type": "array", "items": {"type": "string"}},
        "error": {"type": "string"},
        "error_kind": {"enum": ["assertion", "timeout", "poll_timeout", "external", "exception"]},
    },
}

JSON_SCHEMA_V1 = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "hostsuite report",
    "type": "object",
    "additionalProperties": False,
    "required": ["schema_version", "generated_at", "summary", "cases"],
    "properties": {
        "schema_version": {"const": SCHEMA_VERSION},
        "generated_at": {"type": "string", "format": "date-time"},
        "summary": SUMMARY_SCHEMA,
        "cases": {"type": "array", "items": CASE_SCHEMA},
    },
}
