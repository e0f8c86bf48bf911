"""CLI entry point for hostsuite."""
from __future__ import annotations

import sys
from typing import Any, Callable, Optional, Tuple

import click

from hostsuite import __version__, bootstrap
from hostsuite.core.errors import HostsuiteError
from hostsuite.log_config import configure_logging
from hostsuite.plan import PlanOptions, default_plan, load_plan, run_plan
from hostsuite.suites import catalog

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _selection_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options narrowing which suites and cases a run touches."""

    options = [
        click.option("--suites", "suite_filters", help="Comma-separated suite names or module[:function] references."),
        click.option("--cases", "case_filters", help="Comma-separated case path globs, e.g. 'FileSystem > *move*'."),
        click.option("--tags", "tag_filters", help="Comma-separated tags to include."),
        click.option("--skip-tags", "skip_tag_filters", help="Comma-separated tags to skip (e.g. network)."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("--verbose", is_flag=True, help="Log harness, poller and host events to stderr.")
@click.version_option(__version__, "--version", prog_name="hostsuite", message="%(prog)s %(version)s")
def cli(verbose: bool) -> None:
    """Run behavior suites against a host's filesystem and audio modules."""

    configure_logging(verbose)
    try:
        bootstrap()
    except HostsuiteError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command()
@click.option(
    "--plan",
    "--config",
    "plan_path",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML run plan. Without one the built-in suites run on the local host.",
)
@_selection_options
@click.option("--fail-fast/--no-fail-fast", default=None, help="Stop after the first failing case.")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="Default per-test timeout in seconds.")
@click.option("--list", "list_only", is_flag=True, help="Print the selected case paths without running them.")
@click.option(
    "--report",
    "report_format",
    type=click.Choice(["terminal", "json"]),
    default="terminal",
    show_default=True,
)
@click.option("--report-path", help="Output file for --report json.")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors in terminal output.")
def run(
    plan_path: Optional[str],
    suite_filters: Optional[str],
    case_filters: Optional[str],
    tag_filters: Optional[str],
    skip_tag_filters: Optional[str],
    fail_fast: Optional[bool],
    timeout: Optional[float],
    list_only: bool,
    report_format: str,
    report_path: Optional[str],
    no_color: bool,
) -> None:
    """Execute the suites selected by the plan and filters.

    Exits with 0 when every case passed or was skipped, 1 otherwise.
    """

    options = PlanOptions(
        suites=_split_csv(suite_filters),
        cases=_split_csv(case_filters),
        tags=_split_csv(tag_filters),
        skip_tags=_split_csv(skip_tag_filters),
        fail_fast=fail_fast,
        default_timeout=timeout,
        list_only=list_only,
    )
    try:
        plan = load_plan(plan_path) if plan_path else default_plan()
        exit_code = run_plan(
            plan,
            options,
            report_format=report_format,
            report_path=report_path,
            use_color=not no_color,
        )
    except HostsuiteError as exc:
        raise click.ClickException(str(exc)) from exc
    raise click.exceptions.Exit(exit_code)


@cli.command("suites")
def list_suites() -> None:
    """List the suites known to the catalog."""

    for entry in catalog.entries():
        click.echo(f"{entry.name}\t{entry.description}")


def main(argv: Optional[list[str]] = None) -> int:
    """Program entry point for console_scripts shim."""

    try:
        cli.main(args=argv if argv is not None else sys.argv[1:], prog_name="hostsuite", standalone_mode=True)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0 if exc.code is None else 1
    return 0


def _split_csv(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return tuple()
    return tuple(part.strip() for part in value.split(",") if part.strip())


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
