"""Core dataclasses shared across hostsuite subsystems."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Tuple, Union

Body = Callable[[], Union[Awaitable[None], None]]

PATH_SEPARATOR = " > "


@dataclass(frozen=True)
class Tolerance:
    """Numerical tolerance definition for status comparisons."""

    absolute: float = 1e-4
    relative: float = 1e-5

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "Tolerance":
        if not data:
            return cls()
        return cls(
            absolute=float(data.get("abs", data.get("absolute", 1e-4))),
            relative=float(data.get("rel", data.get("relative", 1e-5))),
        )


@dataclass(frozen=True)
class PollConfig:
    """Defaults used by the status poller."""

    interval: float = 0.05
    max_retries: int = 50
    max_duration: Optional[float] = None
    tolerance: Tolerance = field(default_factory=Tolerance)


@dataclass(frozen=True)
class Hook:
    """A setup or teardown callable attached to a suite."""

    kind: str
    body: Body


@dataclass(frozen=True)
class TestCase:
    """A single registered test."""

    __test__ = False

    name: str
    body: Body
    timeout: Optional[float] = None
    tags: Tuple[str, ...] = tuple()
    focused: bool = False
    skipped: bool = False


@dataclass
class Suite:
    """A named group of tests, nested suites and hooks."""

    name: str
    children: List[Union["Suite", TestCase]] = field(default_factory=list)
    hooks: List[Hook] = field(default_factory=list)
    tags: Tuple[str, ...] = tuple()
    focused: bool = False
    skipped: bool = False

    def hooks_of(self, kind: str) -> Tuple[Hook, ...]:
        return tuple(hook for hook in self.hooks if hook.kind == kind)

    def tests(self) -> Tuple[TestCase, ...]:
        """Return every test under this suite, depth-first."""

        found: list[TestCase] = []
        for child in self.children:
            if isinstance(child, Suite):
                found.extend(child.tests())
            else:
                found.append(child)
        return tuple(found)

    def has_focus(self) -> bool:
        if self.focused:
            return True
        for child in self.children:
            if isinstance(child, Suite):
                if child.has_focus():
                    return True
            elif child.focused:
                return True
        return False


def join_path(*parts: str) -> str:
    return PATH_SEPARATOR.join(part for part in parts if part)
