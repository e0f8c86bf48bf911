"""Polling helpers that wait for a host object's status to converge."""
from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional

import structlog

from .comparator import compare_snapshot
from .errors import PollTimeoutError
from .models import PollConfig, Tolerance

logger = structlog.get_logger()


@dataclass(frozen=True)
class PollResult:
    """The first snapshot that matched and how many attempts it took."""

    snapshot: Mapping[str, Any]
    attempts: int


async def read_status(target: Any) -> Mapping[str, Any]:
    status = target.get_status()
    if inspect.isawaitable(status):
        status = await status
    return MappingProxyType(dict(status))


async def retry_for_status(
    target: Any,
    expected: Mapping[str, Any],
    *,
    interval: float = 0.05,
    max_retries: int = 50,
    max_duration: Optional[float] = None,
    tolerance: Optional[Tolerance] = None,
) -> PollResult:
    """Poll ``target.get_status()`` until every field in ``expected`` matches.

    The first attempt happens immediately and later attempts are separated by
    ``interval`` seconds. Polling gives up after ``max_retries`` attempts or
    once ``max_duration`` seconds have passed since the first attempt.
    """

    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")
    loop = asyncio.get_running_loop()
    started = loop.time()
    last_snapshot: Optional[Mapping[str, Any]] = None
    mismatches: list[str] = []
    attempt = 0
    while True:
        attempt += 1
        last_snapshot = await read_status(target)
        comparison = compare_snapshot(last_snapshot, expected, tolerance)
        if comparison.passed:
            logger.debug("poller.matched", expected=dict(expected), attempts=attempt)
            return PollResult(snapshot=last_snapshot, attempts=attempt)
        mismatches = comparison.mismatches()
        if attempt >= max_retries:
            break
        if max_duration is not None and loop.time() - started >= max_duration:
            break
        await asyncio.sleep(interval)
    logger.debug("poller.exhausted", expected=dict(expected), attempts=attempt, mismatches=mismatches)
    raise PollTimeoutError(expected, last_snapshot, attempt, mismatches)


async def wait_for(seconds: float) -> None:
    """Suspend the calling test for ``seconds`` without blocking the loop."""

    await asyncio.sleep(seconds)


class Poller:
    """Binds run-level polling defaults to :func:`retry_for_status`."""

    def __init__(self, config: Optional[PollConfig] = None) -> None:
        self.config = config or PollConfig()

    async def retry_for_status(self, target: Any, expected: Mapping[str, Any], **overrides: Any) -> PollResult:
        options = {
            "interval": self.config.interval,
            "max_retries": self.config.max_retries,
            "max_duration": self.config.max_duration,
            "tolerance": self.config.tolerance,
        }
        options.update(overrides)
        return await retry_for_status(target, expected, **options)
