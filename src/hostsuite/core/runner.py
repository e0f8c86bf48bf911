"""Test runner executing a suite tree on a single event loop."""
from __future__ import annotations

import asyncio
import inspect
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

import structlog

from .errors import ExternalOperationError, TestTimeoutError, error_kind
from .models import Body, Hook, Suite, TestCase, join_path
from .results import CaseResult

logger = structlog.get_logger()

Selector = Callable[[str, Tuple[str, ...]], bool]
ResultCallback = Callable[[CaseResult, int, int], None]


@dataclass(frozen=True)
class PlannedCase:
    """A test together with its suite chain and its scheduling decision."""

    case: TestCase
    chain: Tuple[Suite, ...]
    path: str
    tags: Tuple[str, ...]
    runnable: bool
    skip_reason: Optional[str] = None


def plan_cases(root: Suite, selector: Optional[Selector] = None) -> List[PlannedCase]:
    """Flatten ``root`` depth-first, applying skip, focus and selector rules.

    Tests rejected by ``selector`` are dropped; skipped or unfocused tests are
    kept so they can be reported as skipped.
    """

    focus_mode = root.has_focus()
    planned: List[PlannedCase] = []

    def visit(suite: Suite, chain: Tuple[Suite, ...], skipped: bool, focused: bool) -> None:
        chain = chain + (suite,)
        skipped = skipped or suite.skipped
        focused = focused or suite.focused
        for child in suite.children:
            if isinstance(child, Suite):
                visit(child, chain, skipped, focused)
                continue
            path = join_path(*(item.name for item in chain), child.name)
            tags = _merge_tags(chain, child)
            if selector is not None and not selector(path, tags):
                continue
            reason = None
            if skipped or child.skipped:
                reason = "skipped"
            elif focus_mode and not (focused or child.focused):
                reason = "not focused"
            planned.append(
                PlannedCase(
                    case=child,
                    chain=chain,
                    path=path,
                    tags=tags,
                    runnable=reason is None,
                    skip_reason=reason,
                )
            )

    visit(root, tuple(), False, False)
    return planned


def _merge_tags(chain: Sequence[Suite], case: TestCase) -> Tuple[str, ...]:
    merged: List[str] = []
    for tag in [tag for suite in chain for tag in suite.tags] + list(case.tags):
        if tag not in merged:
            merged.append(tag)
    return tuple(merged)


class TestRunner:
    """Executes a suite tree sequentially, one test body at a time."""

    __test__ = False

    def __init__(
        self,
        *,
        default_timeout: float = 5.0,
        fail_fast: bool = False,
        selector: Optional[Selector] = None,
    ) -> None:
        self._default_timeout = default_timeout
        self._fail_fast = fail_fast
        self._selector = selector
        self._abandoned: Set[asyncio.Future] = set()
        self._log = logger.bind(component="runner")

    def run(self, root: Suite, *, on_result: Optional[ResultCallback] = None) -> List[CaseResult]:
        return asyncio.run(self.run_async(root, on_result=on_result))

    async def run_async(self, root: Suite, *, on_result: Optional[ResultCallback] = None) -> List[CaseResult]:
        planned = plan_cases(root, self._selector)
        state = _RunState(planned=planned, on_result=on_result)
        try:
            await self._run_suite(root, tuple(), state)
        finally:
            await self._release_abandoned()
        return state.results

    async def _run_suite(self, suite: Suite, parents: Tuple[Suite, ...], state: "_RunState") -> None:
        chain = parents + (suite,)
        entries = state.entries_under(chain)
        if not entries:
            return
        if not any(entry.runnable for entry in entries) or state.stopped:
            for entry in entries:
                reason = "fail-fast stop" if state.stopped else entry.skip_reason or "skipped"
                state.emit(self._skipped(entry, reason), entry)
            return

        suite_path = join_path(*(item.name for item in chain))
        hook_error = await self._run_suite_hooks(suite, "before_all", suite_path, state)
        if hook_error is not None:
            for entry in entries:
                state.emit(self._skipped(entry, f"before_all hook failed: {hook_error}"), entry)
        else:
            for child in suite.children:
                if state.stopped:
                    break
                if isinstance(child, Suite):
                    await self._run_suite(child, chain, state)
                    continue
                entry = state.entry_for(child, chain)
                if entry is None:
                    continue
                if not entry.runnable:
                    state.emit(self._skipped(entry, entry.skip_reason or "skipped"), entry)
                    continue
                result = await self._execute_case(entry)
                state.emit(result, entry)
                if self._fail_fast and result.failing:
                    state.stopped = True
            if state.stopped:
                for entry in entries:
                    if not state.reported(entry):
                        state.emit(self._skipped(entry, "fail-fast stop"), entry)
        await self._run_suite_hooks(suite, "after_all", suite_path, state)

    async def _run_suite_hooks(
        self, suite: Suite, kind: str, suite_path: str, state: "_RunState"
    ) -> Optional[str]:
        start = time.perf_counter()
        for hook in suite.hooks_of(kind):
            try:
                await self._invoke(hook.body, self._default_timeout, f"{suite_path} {kind}")
            except Exception as exc:
                message = _message(exc)
                self._log.warning("runner.suite_hook_failed", suite=suite_path, hook=kind, error=message)
                state.emit(
                    CaseResult(
                        path=join_path(suite_path, f'"{kind.replace("_", " ")}" hook'),
                        name=f"{kind} hook",
                        status=_classify(exc),
                        duration_s=time.perf_counter() - start,
                        error=message,
                        error_kind=error_kind(exc),
                        synthetic=True,
                    )
                )
                return message
        return None

    async def _execute_case(self, entry: PlannedCase) -> CaseResult:
        case = entry.case
        timeout = case.timeout or self._default_timeout
        log = self._log.bind(case=entry.path)
        log.debug("runner.case_start", timeout=timeout)
        start = time.perf_counter()
        first_error: Optional[BaseException] = None
        messages: List[str] = []

        def record(exc: BaseException, where: Optional[str]) -> None:
            nonlocal first_error
            if first_error is None:
                first_error = exc
            text = _message(exc)
            messages.append(f"[{where}] {text}" if where else text)

        # before_each hooks and the body draw on one budget
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        for hook in _hooks(entry.chain, "before_each"):
            try:
                await self._invoke(hook.body, timeout, f"{entry.path} before_each", deadline=deadline)
            except Exception as exc:
                record(exc, "before_each")
                break
        if first_error is None:
            try:
                await self._invoke(case.body, timeout, entry.path, deadline=deadline)
            except Exception as exc:
                record(exc, None)
        # teardown gets what is left, or a fresh budget once it is spent
        if deadline - loop.time() <= 0:
            deadline = loop.time() + timeout
        for hook in _hooks(tuple(reversed(entry.chain)), "after_each"):
            try:
                await self._invoke(hook.body, timeout, f"{entry.path} after_each", deadline=deadline)
            except Exception as exc:
                record(exc, "after_each")

        duration = time.perf_counter() - start
        if first_error is None:
            log.debug("runner.case_passed", duration_s=duration)
            return CaseResult(path=entry.path, name=case.name, status="passed", duration_s=duration, tags=entry.tags)
        status = _classify(first_error)
        log.info("runner.case_finished", status=status, duration_s=duration)
        return CaseResult(
            path=entry.path,
            name=case.name,
            status=status,
            duration_s=duration,
            error="\n".join(messages),
            error_kind=error_kind(first_error),
            tags=entry.tags,
        )

    async def _invoke(self, body: Body, timeout: float, label: str, *, deadline: Optional[float] = None) -> None:
        outcome = body()
        if not inspect.isawaitable(outcome):
            return
        task = asyncio.ensure_future(outcome)
        wait = timeout if deadline is None else max(deadline - asyncio.get_running_loop().time(), 0.0)
        done, _ = await asyncio.wait({task}, timeout=wait)
        if task in done:
            if task.cancelled():
                # an awaited operation was cancelled; the run itself was not
                raise ExternalOperationError("cancelled", f"'{label}' was cancelled")
            task.result()
            return
        # The body keeps running but nobody waits on it any more.
        self._log.warning("runner.case_timeout", label=label, timeout=timeout)
        self._abandoned.add(task)
        task.add_done_callback(self._discard_late_outcome)
        raise TestTimeoutError(label, timeout)

    def _discard_late_outcome(self, task: asyncio.Future) -> None:
        self._abandoned.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        self._log.debug("runner.late_outcome_discarded", error=_message(exc) if exc else None)

    async def _release_abandoned(self) -> None:
        pending = [task for task in self._abandoned if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.wait(pending, timeout=1.0)
        self._abandoned.clear()

    def _skipped(self, entry: PlannedCase, reason: str) -> CaseResult:
        return CaseResult(
            path=entry.path,
            name=entry.case.name,
            status="skipped",
            duration_s=0.0,
            error=None if reason in {"skipped", "not focused"} else reason,
            tags=entry.tags,
        )


class _RunState:
    def __init__(self, *, planned: List[PlannedCase], on_result: Optional[ResultCallback]) -> None:
        self.planned = planned
        self.on_result = on_result
        self.results: List[CaseResult] = []
        self.total = len(planned)
        self.stopped = False
        self._reported: Set[int] = set()
        self._by_case: Dict[Tuple[int, Tuple[int, ...]], PlannedCase] = {
            (id(entry.case), tuple(id(s) for s in entry.chain)): entry for entry in planned
        }

    def entries_under(self, chain: Tuple[Suite, ...]) -> List[PlannedCase]:
        depth = len(chain)
        ids = tuple(id(s) for s in chain)
        return [
            entry
            for entry in self.planned
            if tuple(id(s) for s in entry.chain[:depth]) == ids and not self.reported(entry)
        ]

    def entry_for(self, case: TestCase, chain: Tuple[Suite, ...]) -> Optional[PlannedCase]:
        return self._by_case.get((id(case), tuple(id(s) for s in chain)))

    def reported(self, entry: PlannedCase) -> bool:
        return id(entry) in self._reported

    def emit(self, result: CaseResult, entry: Optional[PlannedCase] = None) -> None:
        if entry is None:
            self.total += 1
        else:
            self._reported.add(id(entry))
        self.results.append(result)
        if self.on_result:
            self.on_result(result, len(self.results), self.total)


def _hooks(chain: Sequence[Suite], kind: str) -> List[Hook]:
    return [hook for suite in chain for hook in suite.hooks_of(kind)]


def _classify(exc: BaseException) -> str:
    if isinstance(exc, TestTimeoutError):
        return "timeout"
    if isinstance(exc, AssertionError):
        return "failed"
    return "error"


def _message(exc: BaseException) -> str:
    text = str(exc)
    return text if text else exc.__class__.__name__
