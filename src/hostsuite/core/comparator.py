"""Utilities for comparing polled status snapshots with expected shapes."""
from __future__ import annotations

import numbers
from dataclasses import dataclass, field
from typing import Any, List, Mapping

import numpy as np

from .models import Tolerance


class Matcher:
    """Base class for values that match by predicate instead of equality."""

    def matches(self, actual: Any) -> bool:  # pragma: no cover - interface
        raise NotImplementedError


@dataclass
class FieldComparisonResult:
    """Per-field comparison outcome."""

    name: str
    passed: bool
    actual: Any = None
    expected: Any = None
    abs_error: float | None = None
    detail: str | None = None

    def describe(self) -> str:
        if self.detail:
            return f"{self.name}: {self.detail}"
        text = f"{self.name}: actual={self.actual!r} expected={self.expected!r}"
        if self.abs_error is not None:
            text += f" abs_err={self.abs_error:.3e}"
        return text


@dataclass
class ComparisonResult:
    """Aggregated comparison outcome for a snapshot."""

    passed: bool
    fields: List[FieldComparisonResult] = field(default_factory=list)

    def mismatches(self) -> List[str]:
        return [item.describe() for item in self.fields if not item.passed]


def is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def numbers_close(actual: Any, expected: Any, tolerance: Tolerance) -> bool:
    return bool(np.isclose(float(actual), float(expected), atol=tolerance.absolute, rtol=tolerance.relative))


def values_equal(actual: Any, expected: Any) -> bool:
    """Deep equality that honours ``Matcher`` instances nested in ``expected``."""

    if isinstance(expected, Matcher):
        return expected.matches(actual)
    if isinstance(expected, Mapping):
        if not isinstance(actual, Mapping) or set(actual.keys()) != set(expected.keys()):
            return False
        return all(values_equal(actual[key], value) for key, value in expected.items())
    if isinstance(expected, (list, tuple)):
        if not isinstance(actual, (list, tuple)) or len(actual) != len(expected):
            return False
        return all(values_equal(a, e) for a, e in zip(actual, expected))
    if is_number(expected) and is_number(actual):
        return float(actual) == float(expected)
    return actual == expected


def compare_snapshot(
    snapshot: Mapping[str, Any],
    expected: Mapping[str, Any],
    tolerance: Tolerance | None = None,
) -> ComparisonResult:
    """Compare only the fields named in ``expected`` against ``snapshot``."""

    tolerance = tolerance or Tolerance()
    results: list[FieldComparisonResult] = []
    overall_passed = True
    for name, want in expected.items():
        if name not in snapshot:
            results.append(
                FieldComparisonResult(name=name, passed=False, expected=want, detail="field missing from status")
            )
            overall_passed = False
            continue
        got = snapshot[name]
        if is_number(want) and is_number(got):
            passed = numbers_close(got, want, tolerance)
            results.append(
                FieldComparisonResult(
                    name=name,
                    passed=passed,
                    actual=got,
                    expected=want,
                    abs_error=abs(float(got) - float(want)),
                )
            )
        else:
            passed = values_equal(got, want)
            results.append(FieldComparisonResult(name=name, passed=passed, actual=got, expected=want))
        if not passed:
            overall_passed = False
    return ComparisonResult(passed=overall_passed, fields=results)
