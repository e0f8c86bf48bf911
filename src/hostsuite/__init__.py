"""hostsuite: behavior-driven integration suites for host capabilities."""
from __future__ import annotations

import importlib
import os
from typing import List

import structlog

from .core.errors import PlanError
from .hosts import register_builtin_hosts
from .suites import load_builtins
from .version import __version__

__all__ = [
    "PLUGINS_ENV",
    "__version__",
    "bootstrap",
    "loaded_plugins",
]

PLUGINS_ENV = "HOSTSUITE_PLUGINS"

logger = structlog.get_logger()

_BOOTSTRAPPED = False
_plugins: List[str] = []


def bootstrap() -> None:
    """Register built-in hosts and suites, then load plugins once.

    ``HOSTSUITE_PLUGINS`` is a comma-separated list of modules exposing a
    ``register()`` function, which usually calls
    :func:`hostsuite.suites.register_suite` or ``host_manager.register``.
    """

    global _BOOTSTRAPPED
    if _BOOTSTRAPPED:
        return
    register_builtin_hosts()
    load_builtins()
    for module_name in _plugin_modules(os.environ.get(PLUGINS_ENV, "")):
        _load_plugin(module_name)
    _BOOTSTRAPPED = True


def loaded_plugins() -> List[str]:
    return list(_plugins)


def _plugin_modules(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _load_plugin(module_name: str) -> None:
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise PlanError(f"Cannot import plugin '{module_name}' listed in {PLUGINS_ENV}: {exc}") from exc
    register = getattr(module, "register", None)
    if not callable(register):
        raise PlanError(f"Plugin '{module_name}' does not define register()")
    register()
    _plugins.append(module_name)
    logger.debug("plugins.loaded", plugin=module_name)
