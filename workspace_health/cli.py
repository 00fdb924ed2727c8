"""CLI entry point: ws-health.

Subcommands:
    ws-health health                         # all checks, terminal report
    ws-health health --check git,version     # selected checks only
    ws-health health --json                  # canonical JSON on stdout
    ws-health health -o HEALTH.md            # also write a Markdown report
    ws-health check-versions                 # version consistency only
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click
import structlog

from workspace_health.checks.runner import run_health_check
from workspace_health.core.config import Settings
from workspace_health.core.logging import setup_logging
from workspace_health.exceptions import ScanError
from workspace_health.models import CheckKind
from workspace_health.report import render_json, render_markdown, render_terminal
from workspace_health.scanner import WorkspaceScanner, find_workspace_root
from workspace_health.versioning import DependencyGraph, VersionConsistencyAnalyzer

log = structlog.get_logger("workspace_health.cli")

_VALID_KINDS = ", ".join(k.value for k in CheckKind)


def _resolve_workspace_root(explicit: Path | None, prefix: str) -> Path:
    if explicit is not None:
        return explicit
    cwd = Path.cwd()
    return find_workspace_root(cwd, prefix) or cwd


def _select_kinds(values: tuple[str, ...]) -> list[CheckKind] | None:
    """Parse ``--check`` values; None means every kind.

    Unknown names are dropped with a warning, so the selection is the
    intersection of the request with the known kinds.
    """
    if not values:
        return None
    kinds: list[CheckKind] = []
    for raw in values:
        for name in raw.split(","):
            if not name.strip():
                continue
            try:
                kinds.append(CheckKind.parse(name))
            except ValueError:
                log.warning("cli.unknown_check", check=name.strip(), valid=_VALID_KINDS)
    return CheckKind.ordered(kinds)


@click.group()
def main() -> None:
    """Workspace health: audit a multi-repo Cargo workspace for drift."""


@main.command("health")
@click.option(
    "--workspace-root",
    type=click.Path(path_type=Path),
    default=None,
    help="Workspace root directory (default: detected from the current directory)",
)
@click.option("--prefix", default=None, help="Package name prefix of workspace members")
@click.option("-v", "--verbose", is_flag=True, help="Show detailed information")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON instead of terminal text")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write a Markdown report to this file",
)
@click.option(
    "--check",
    "checks",
    multiple=True,
    help=f"Run specific checks only ({_VALID_KINDS}); repeatable or comma-separated",
)
@click.option("--jobs", type=click.IntRange(min=1), default=None, help="Concurrent cargo runs")
@click.option("--timeout", type=float, default=None, help="Per-invocation timeout in seconds")
def health(
    workspace_root: Path | None,
    prefix: str | None,
    verbose: bool,
    as_json: bool,
    output: Path | None,
    checks: tuple[str, ...],
    jobs: int | None,
    timeout: float | None,
) -> None:
    """Check workspace health (git status, versions, tests, docs, specs)."""
    setup_logging(verbose)
    settings = Settings.from_env().override(
        prefix=prefix, max_workers=jobs, command_timeout=timeout
    )
    root = _resolve_workspace_root(workspace_root, settings.prefix)
    kinds = _select_kinds(checks)

    if not as_json:
        click.echo(
            f"{click.style('Analyzing:', fg='cyan', bold=True)} "
            f"Checking workspace health in {root}...",
            err=True,
        )

    try:
        report = asyncio.run(
            run_health_check(root, kinds=kinds, settings=settings, verbose=verbose)
        )
    except ScanError as e:
        click.echo(f"{click.style('Error:', fg='red', bold=True)} {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(render_json(report))
    else:
        click.echo(render_terminal(report))

    if output is not None:
        try:
            output.write_text(render_markdown(report), encoding="utf-8")
        except OSError as e:
            click.echo(
                f"{click.style('Error:', fg='red', bold=True)} Failed to write report: {e}",
                err=True,
            )
            sys.exit(1)
        click.echo(
            f"{click.style('Saved:', fg='green', bold=True)} Report written to {output}",
            err=True,
        )

    sys.exit(report.exit_code)


@main.command("check-versions")
@click.option(
    "--workspace-root",
    type=click.Path(path_type=Path),
    default=None,
    help="Workspace root directory (default: detected from the current directory)",
)
@click.option("--prefix", default=None, help="Package name prefix of workspace members")
@click.option("-v", "--verbose", is_flag=True, help="List every package version")
def check_versions(workspace_root: Path | None, prefix: str | None, verbose: bool) -> None:
    """Check version consistency across packages."""
    setup_logging(verbose)
    settings = Settings.from_env().override(prefix=prefix)
    root = _resolve_workspace_root(workspace_root, settings.prefix)

    click.echo(click.style("Checking version consistency...", fg="cyan", bold=True))
    try:
        snapshot = WorkspaceScanner(root, prefix=settings.prefix).scan()
    except ScanError as e:
        click.echo(f"{click.style('Error:', fg='red', bold=True)} {e}", err=True)
        sys.exit(1)

    report = VersionConsistencyAnalyzer(DependencyGraph.build(snapshot)).analyze()
    click.echo(
        f"\n{click.style('Scanned:', fg='blue', bold=True)} "
        f"{report.total_packages} package(s) scanned"
    )

    if verbose:
        click.echo(f"\n{click.style('Package Versions:', fg='blue', bold=True)}")
        for package in snapshot.packages:
            click.echo(f"  {package.name} {package.version}")

    if not report.has_issues():
        click.echo(f"\n{click.style('✓', fg='green', bold=True)} All versions are consistent!")
        sys.exit(0)

    if report.drift:
        click.echo(f"\n{click.style('Version Drift:', fg='red', bold=True)}")
        for line in report.drift.describe():
            click.echo(f"  {click.style('•', fg='red')} {line}")

    if report.mismatches:
        click.echo(f"\n{click.style('Dependency Inconsistencies:', fg='yellow', bold=True)}")
        for mismatch in report.mismatches:
            click.echo(f"  {click.style('•', fg='yellow')} {mismatch.describe()}")

    sys.exit(1)


if __name__ == "__main__":
    main()
