import asyncio

import pytest

from hostsuite.core import PollConfig, Poller, PollTimeoutError, Tolerance, retry_for_status, wait_for


class CountingTarget:
    """Reports ``ready`` from the n-th read onwards."""

    def __init__(self, ready_after: int, *, use_async: bool = True) -> None:
        self.reads = 0
        self.ready_after = ready_after
        self.use_async = use_async

    def _status(self) -> dict:
        self.reads += 1
        return {"ready": self.reads >= self.ready_after, "reads": self.reads}

    def get_status(self):
        if self.use_async:
            async def read() -> dict:
                return self._status()

            return read()
        return self._status()


@pytest.mark.asyncio
async def test_first_attempt_is_immediate() -> None:
    target = CountingTarget(ready_after=1)
    loop = asyncio.get_running_loop()
    started = loop.time()
    result = await retry_for_status(target, {"ready": True}, interval=1.0)
    assert result.attempts == 1
    assert loop.time() - started < 0.5


@pytest.mark.asyncio
async def test_converges_after_n_attempts() -> None:
    target = CountingTarget(ready_after=4, use_async=False)
    result = await retry_for_status(target, {"ready": True}, interval=0.001, max_retries=10)
    assert result.attempts == 4
    assert result.snapshot["reads"] == 4
    with pytest.raises(TypeError):
        result.snapshot["ready"] = False  # snapshots are read-only


@pytest.mark.asyncio
async def test_exhausting_retries_raises_with_last_snapshot() -> None:
    target = CountingTarget(ready_after=100)
    with pytest.raises(PollTimeoutError) as excinfo:
        await retry_for_status(target, {"ready": True}, interval=0.001, max_retries=3)
    error = excinfo.value
    assert error.attempts == 3
    assert target.reads == 3
    assert error.last_snapshot == {"ready": False, "reads": 3}
    assert error.mismatches == ("ready: actual=False expected=True",)
    assert "after 3 attempt(s)" in str(error)


@pytest.mark.asyncio
async def test_max_duration_bounds_polling() -> None:
    target = CountingTarget(ready_after=10_000)
    loop = asyncio.get_running_loop()
    started = loop.time()
    with pytest.raises(PollTimeoutError):
        await retry_for_status(target, {"ready": True}, interval=0.02, max_retries=10_000, max_duration=0.1)
    elapsed = loop.time() - started
    assert 0.1 <= elapsed < 1.0
    assert target.reads < 50


@pytest.mark.asyncio
async def test_rejects_non_positive_retry_count() -> None:
    with pytest.raises(ValueError):
        await retry_for_status(CountingTarget(1), {"ready": True}, max_retries=0)


@pytest.mark.asyncio
async def test_poller_applies_config_and_overrides() -> None:
    class Fixed:
        def get_status(self) -> dict:
            return {"rate": 1.49}

    poller = Poller(PollConfig(interval=0.001, max_retries=2, tolerance=Tolerance(absolute=0.05, relative=0.0)))
    result = await poller.retry_for_status(Fixed(), {"rate": 1.5})
    assert result.attempts == 1
    with pytest.raises(PollTimeoutError):
        await poller.retry_for_status(Fixed(), {"rate": 1.5}, tolerance=Tolerance(absolute=0.0, relative=0.0))


@pytest.mark.asyncio
async def test_wait_for_suspends() -> None:
    loop = asyncio.get_running_loop()
    started = loop.time()
    await wait_for(0.05)
    assert loop.time() - started >= 0.04
