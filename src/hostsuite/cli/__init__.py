"""Command line interface for hostsuite."""
from .main import cli, main

__all__ = ["cli", "main"]
