"""Suite builder passed to suite modules during registration.

A suite module exposes ``register(t)`` and declares its tests through the
builder it receives::

    def register(t):
        def body():
            @t.it("writes then reads")
            async def _():
                await t.host.filesystem.write_as_string("a.txt", "x")
                t.expect(await t.host.filesystem.read_as_string("a.txt")).to_be("x")

        t.describe("FileSystem", body)

Nothing runs at registration time; the builder only records the tree.
"""
from __future__ import annotations

import inspect
from typing import Any, Callable, List, Optional, Sequence

from . import expect as expect_module
from .errors import ExternalOperationError, PollTimeoutError, RegistrationError
from .models import Body, Hook, PollConfig, Suite, TestCase
from .poller import Poller, wait_for


class SuiteBuilder:
    """Collects suites, tests and hooks into an explicit tree."""

    expect = staticmethod(expect_module.expect)
    fail = staticmethod(expect_module.fail)
    rejects = staticmethod(expect_module.rejects)
    create_spy = staticmethod(expect_module.create_spy)
    object_containing = staticmethod(expect_module.object_containing)
    any_of_type = staticmethod(expect_module.any_of_type)
    wait_for = staticmethod(wait_for)
    ExternalOperationError = ExternalOperationError
    PollTimeoutError = PollTimeoutError

    def __init__(
        self,
        *,
        host: Any = None,
        poll_config: Optional[PollConfig] = None,
        name: str = "",
    ) -> None:
        self.host = host
        self.poller = Poller(poll_config)
        self.root = Suite(name=name)
        self._stack: List[Suite] = [self.root]

    @property
    def retry_for_status(self) -> Callable[..., Any]:
        return self.poller.retry_for_status

    # -- suites -------------------------------------------------------------

    def describe(self, name: str, body: Callable[[], None], *, tags: Sequence[str] = ()) -> Suite:
        return self._describe(name, body, tags=tags)

    def fdescribe(self, name: str, body: Callable[[], None], *, tags: Sequence[str] = ()) -> Suite:
        return self._describe(name, body, tags=tags, focused=True)

    def xdescribe(self, name: str, body: Callable[[], None], *, tags: Sequence[str] = ()) -> Suite:
        return self._describe(name, body, tags=tags, skipped=True)

    def _describe(
        self,
        name: str,
        body: Callable[[], None],
        *,
        tags: Sequence[str],
        focused: bool = False,
        skipped: bool = False,
    ) -> Suite:
        if not name:
            raise RegistrationError("describe() requires a non-empty name")
        suite = Suite(name=name, tags=tuple(tags), focused=focused, skipped=skipped)
        self._current.children.append(suite)
        self._stack.append(suite)
        try:
            result = body()
            if inspect.isawaitable(result):
                if inspect.iscoroutine(result):
                    result.close()
                raise RegistrationError(f"describe('{name}') body must register tests synchronously")
        finally:
            self._stack.pop()
        return suite

    # -- tests --------------------------------------------------------------

    def it(
        self,
        name: str,
        body: Optional[Body] = None,
        timeout: Optional[float] = None,
        *,
        tags: Sequence[str] = (),
    ) -> Any:
        return self._it(name, body, timeout, tags=tags)

    def fit(
        self,
        name: str,
        body: Optional[Body] = None,
        timeout: Optional[float] = None,
        *,
        tags: Sequence[str] = (),
    ) -> Any:
        return self._it(name, body, timeout, tags=tags, focused=True)

    def xit(
        self,
        name: str,
        body: Optional[Body] = None,
        timeout: Optional[float] = None,
        *,
        tags: Sequence[str] = (),
    ) -> Any:
        return self._it(name, body, timeout, tags=tags, skipped=True)

    def _it(
        self,
        name: str,
        body: Optional[Body],
        timeout: Optional[float],
        *,
        tags: Sequence[str],
        focused: bool = False,
        skipped: bool = False,
    ) -> Any:
        if self._current is self.root:
            raise RegistrationError(f"it('{name}') must be declared inside describe()")
        if timeout is not None and timeout <= 0:
            raise RegistrationError(f"it('{name}') timeout must be positive")

        def register(func: Body) -> Body:
            self._current.children.append(
                TestCase(
                    name=name,
                    body=func,
                    timeout=timeout,
                    tags=tuple(tags),
                    focused=focused,
                    skipped=skipped,
                )
            )
            return func

        if body is None:
            return register
        return register(body)

    # -- hooks --------------------------------------------------------------

    def before_all(self, body: Body) -> Body:
        return self._hook("before_all", body)

    def before_each(self, body: Body) -> Body:
        return self._hook("before_each", body)

    def after_each(self, body: Body) -> Body:
        return self._hook("after_each", body)

    def after_all(self, body: Body) -> Body:
        return self._hook("after_all", body)

    def _hook(self, kind: str, body: Body) -> Body:
        if self._current is self.root:
            raise RegistrationError(f"{kind}() must be declared inside describe()")
        self._current.hooks.append(Hook(kind=kind, body=body))
        return body

    @property
    def _current(self) -> Suite:
        return self._stack[-1]

    def build(self) -> Suite:
        if len(self._stack) != 1:
            raise RegistrationError("build() called while a describe() body is still open")
        return self.root
