"""Executor turning a run plan into a suite tree and a report."""
from __future__ import annotations

import fnmatch
from typing import List, Optional, Sequence, Tuple

import click
import structlog

from hostsuite.core.builder import SuiteBuilder
from hostsuite.core.errors import HostsuiteError, PlanError
from hostsuite.core.models import Suite
from hostsuite.core.runner import Selector, TestRunner, plan_cases
from hostsuite.hosts import Host, host_manager, register_builtin_hosts
from hostsuite.reporting import JsonReporter, ReportManager, Reporter, TerminalReporter
from hostsuite.suites import catalog

from .models import ExecutionPlan, PlanOptions

logger = structlog.get_logger()

DEFAULT_JSON_REPORT = "hostsuite-report.json"


def run_plan(
    plan: ExecutionPlan,
    options: PlanOptions,
    *,
    report_format: str = "terminal",
    report_path: str | None = None,
    use_color: bool = True,
) -> int:
    """Execute the plan; returns process exit code (0 success, 1 failures)."""

    host = create_host(plan)
    root = build_suite_tree(plan, options, host)
    selector = build_selector(plan, options)
    planned = plan_cases(root, selector)
    if options.list_only:
        for entry in planned:
            click.echo(entry.path)
        return 0
    if not planned:
        click.echo("No cases matched the provided filters.")
        return 1

    fail_fast = plan.fail_fast if options.fail_fast is None else options.fail_fast
    timeout = options.default_timeout or plan.default_timeout
    manager = ReportManager(_reporters(report_format, report_path, use_color))
    manager.start(plan, len(planned))
    runner = TestRunner(default_timeout=timeout, fail_fast=fail_fast, selector=selector)
    logger.info("plan.run_start", host=host.name, cases=len(planned), timeout=timeout)
    results = runner.run(root, on_result=manager.handle_result)
    manager.complete(results)
    return manager.exit_code


def create_host(plan: ExecutionPlan) -> Host:
    register_builtin_hosts()
    try:
        return host_manager.create(plan.host.type, plan.host.factory_options())
    except KeyError as exc:
        available = ", ".join(host_manager.kinds())
        raise PlanError(f"Unknown host type '{plan.host.type}'. Available: {available}") from exc


def build_suite_tree(plan: ExecutionPlan, options: PlanOptions, host: Host) -> Suite:
    builder = SuiteBuilder(host=host, poll_config=plan.poll)
    for reference in select_suites(plan, options):
        entry = catalog.resolve(reference)
        logger.debug("plan.register_suite", suite=entry.name)
        try:
            entry.register(builder)
        except HostsuiteError:
            raise
        except Exception as exc:
            raise PlanError(f"Suite '{entry.name}' failed to register: {exc}") from exc
    return builder.build()


def select_suites(plan: ExecutionPlan, options: PlanOptions) -> Tuple[str, ...]:
    if not options.suites:
        return tuple(plan.suites)
    selected = [name for name in plan.suites if name in options.suites]
    extra = [name for name in options.suites if name not in plan.suites]
    return tuple(selected + extra)


def build_selector(plan: ExecutionPlan, options: PlanOptions) -> Optional[Selector]:
    patterns = tuple(options.cases)
    tags = set(plan.tags) | set(options.tags)
    skip_tags = (set(plan.skip_tags) | set(options.skip_tags)) - set(options.tags)
    if not patterns and not tags and not skip_tags:
        return None

    def selector(path: str, case_tags: Tuple[str, ...]) -> bool:
        if patterns and not any(fnmatch.fnmatchcase(path, pattern) for pattern in patterns):
            return False
        if tags and not tags & set(case_tags):
            return False
        if skip_tags and skip_tags & set(case_tags):
            return False
        return True

    return selector


def _reporters(report_format: str, report_path: Optional[str], use_color: bool) -> Sequence[Reporter]:
    reporters: List[Reporter] = []
    if report_format == "json":
        reporters.append(JsonReporter(path=report_path or DEFAULT_JSON_REPORT))
    else:
        reporters.append(TerminalReporter(use_color=use_color))
    return reporters
