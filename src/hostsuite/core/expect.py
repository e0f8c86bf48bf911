"""Assertion vocabulary used inside test bodies.

``expect(actual)`` returns an :class:`Expectation`; every matcher raises
:class:`AssertionFailure` with a message naming the actual and expected values.
``expect(x).not_`` inverts the following matcher.
"""
from __future__ import annotations

import re
from typing import Any, Awaitable, List, Mapping, Optional, Pattern, Tuple, Union

from .comparator import Matcher, is_number, values_equal
from .errors import AssertionFailure


class ObjectContaining(Matcher):
    """Matches any mapping that holds at least the given entries."""

    def __init__(self, entries: Mapping[str, Any]) -> None:
        self.entries = dict(entries)

    def matches(self, actual: Any) -> bool:
        if not isinstance(actual, Mapping):
            return False
        for key, value in self.entries.items():
            if key not in actual or not values_equal(actual[key], value):
                return False
        return True

    def __repr__(self) -> str:
        return f"<object containing {self.entries!r}>"


class AnyOfType(Matcher):
    """Matches any instance of the given type."""

    def __init__(self, kind: type) -> None:
        self.kind = kind

    def matches(self, actual: Any) -> bool:
        return isinstance(actual, self.kind)

    def __repr__(self) -> str:
        return f"<any {self.kind.__name__}>"


def object_containing(entries: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> ObjectContaining:
    merged = dict(entries or {})
    merged.update(kwargs)
    return ObjectContaining(merged)


def any_of_type(kind: type) -> AnyOfType:
    return AnyOfType(kind)


class Spy:
    """Callable test double that records every call."""

    def __init__(self, name: str = "spy") -> None:
        self.name = name
        self.calls: List[Tuple[Tuple[Any, ...], dict]] = []

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self.calls.append((args, kwargs))

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def reset(self) -> None:
        self.calls.clear()

    def __repr__(self) -> str:
        return f"<spy {self.name} calls={self.call_count}>"


def create_spy(name: str = "spy") -> Spy:
    return Spy(name)


class Expectation:
    """Wraps an actual value and exposes matchers."""

    def __init__(self, actual: Any, *, negated: bool = False) -> None:
        self._actual = actual
        self._negated = negated

    @property
    def not_(self) -> "Expectation":
        return Expectation(self._actual, negated=not self._negated)

    def _check(self, passed: bool, description: str, expected: Any = None) -> None:
        if passed != self._negated:
            return
        prefix = "not " if self._negated else ""
        message = f"Expected {self._actual!r} {prefix}{description}"
        raise AssertionFailure(message, actual=self._actual, expected=expected)

    def to_be(self, expected: Any) -> None:
        if expected is None or isinstance(expected, bool):
            passed = self._actual is expected
        else:
            passed = type(self._actual) is type(expected) and self._actual == expected
        self._check(passed, f"to be {expected!r}", expected)

    def to_equal(self, expected: Any) -> None:
        self._check(values_equal(self._actual, expected), f"to equal {expected!r}", expected)

    def to_be_truthy(self) -> None:
        self._check(bool(self._actual), "to be truthy")

    def to_be_falsy(self) -> None:
        self._check(not self._actual, "to be falsy")

    def to_be_none(self) -> None:
        self._check(self._actual is None, "to be None")

    def to_be_defined(self) -> None:
        self._check(self._actual is not None, "to be defined")

    def to_match(self, pattern: Union[str, Pattern[str]]) -> None:
        regex = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)
        passed = regex.search(str(self._actual)) is not None
        self._check(passed, f"to match {regex.pattern!r}", regex.pattern)

    def to_contain(self, item: Any) -> None:
        try:
            passed = item in self._actual
        except TypeError:
            passed = False
        self._check(passed, f"to contain {item!r}", item)

    def to_be_close_to(self, expected: float, precision: int = 2) -> None:
        passed = is_number(self._actual) and abs(expected - self._actual) < (10 ** -precision) / 2
        self._check(passed, f"to be close to {expected!r} (precision {precision})", expected)

    def to_be_less_than(self, expected: float) -> None:
        passed = is_number(self._actual) and self._actual < expected
        self._check(passed, f"to be less than {expected!r}", expected)

    def to_be_greater_than(self, expected: float) -> None:
        passed = is_number(self._actual) and self._actual > expected
        self._check(passed, f"to be greater than {expected!r}", expected)

    def to_have_been_called(self) -> None:
        spy = self._require_spy()
        self._check(spy.call_count > 0, "to have been called")

    def to_have_been_called_with(self, *args: Any, **kwargs: Any) -> None:
        spy = self._require_spy()
        passed = any(
            values_equal(list(call_args), list(args)) and values_equal(call_kwargs, kwargs)
            for call_args, call_kwargs in spy.calls
        )
        rendered = ", ".join([repr(arg) for arg in args] + [f"{k}={v!r}" for k, v in kwargs.items()])
        self._check(passed, f"to have been called with ({rendered})", args)

    def _require_spy(self) -> Spy:
        if not isinstance(self._actual, Spy):
            raise AssertionFailure(f"Expected a spy, got {self._actual!r}", actual=self._actual)
        return self._actual


def expect(actual: Any) -> Expectation:
    return Expectation(actual)


def fail(message: str = "Failed") -> None:
    raise AssertionFailure(message)


async def rejects(operation: Awaitable[Any], match: Union[str, Pattern[str], None] = None) -> BaseException:
    """Await ``operation`` and return the exception it raised.

    Fails the current test when the operation resolves, or when ``match`` is
    given and the error message does not match it.
    """

    try:
        value = await operation
    except AssertionFailure:
        raise
    except Exception as exc:
        if match is not None:
            expect(str(exc)).to_match(match)
        return exc
    raise AssertionFailure(f"Expected operation to be rejected, but it resolved with {value!r}", actual=value)
