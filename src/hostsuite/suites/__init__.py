"""Built-in integration suites and the suite catalog."""

from .catalog import SuiteEntry, entries, load_builtins, names, register_suite, resolve

__all__ = [
    "SuiteEntry",
    "entries",
    "load_builtins",
    "names",
    "register_suite",
    "resolve",
]
