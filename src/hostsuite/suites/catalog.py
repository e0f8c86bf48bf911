"""Suite catalog mapping names to registration functions."""
from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import Callable, Dict, Iterable

from hostsuite.core.builder import SuiteBuilder
from hostsuite.core.errors import PlanError

RegisterFn = Callable[[SuiteBuilder], None]


@dataclass(frozen=True)
class SuiteEntry:
    """A named suite module."""

    name: str
    register: RegisterFn
    description: str = ""


_catalog: Dict[str, SuiteEntry] = {}
_builtins_loaded = False


def load_builtins() -> None:
    """Populate the catalog with the built-in suites."""

    global _builtins_loaded
    from . import audio, filesystem

    for module in (filesystem, audio):
        _catalog[module.NAME] = SuiteEntry(name=module.NAME, register=module.register, description=module.DESCRIPTION)
    _builtins_loaded = True


def register_suite(name: str, register: RegisterFn, description: str = "") -> SuiteEntry:
    if not _builtins_loaded:
        load_builtins()
    if name in _catalog:
        raise ValueError(f"Suite '{name}' already registered")
    entry = SuiteEntry(name=name, register=register, description=description)
    _catalog[name] = entry
    return entry


def resolve(reference: str) -> SuiteEntry:
    """Look up a catalog name, or import ``package.module[:function]``.

    A bare module reference uses the module's ``register`` function.
    """

    if not _builtins_loaded:
        load_builtins()
    if reference in _catalog:
        return _catalog[reference]
    module_name, _, attr = reference.partition(":")
    if "." not in module_name and not attr:
        raise PlanError(f"Unknown suite '{reference}'. Available: {', '.join(names())}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise PlanError(f"Cannot import suite module '{module_name}': {exc}") from exc
    register = getattr(module, attr or "register", None)
    if not callable(register):
        raise PlanError(f"Suite reference '{reference}' does not name a callable")
    name = getattr(module, "NAME", reference) if not attr else reference
    return SuiteEntry(name=name, register=register, description=getattr(module, "DESCRIPTION", ""))


def entries() -> Iterable[SuiteEntry]:
    if not _builtins_loaded:
        load_builtins()
    return tuple(_catalog.values())


def names() -> Iterable[str]:
    return tuple(entry.name for entry in entries())
