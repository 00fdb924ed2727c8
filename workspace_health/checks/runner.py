"""CheckRunner: run the requested checks concurrently against one snapshot."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from pathlib import Path
from typing import TypeVar

import structlog

from workspace_health.checks.aggregate import build_report
from workspace_health.checks.collaborators import Collaborators
from workspace_health.checks.pool import bounded_map
from workspace_health.core.config import Settings
from workspace_health.models import (
    CheckKind,
    CheckOutcome,
    HealthReport,
    Status,
    WorkspaceSnapshot,
)
from workspace_health.scanner import WorkspaceScanner
from workspace_health.versioning import DependencyGraph, VersionConsistencyAnalyzer

log = structlog.get_logger("workspace_health.checks")

COULD_NOT_RUN = "check could not run"

T = TypeVar("T")


class CheckRunner:
    """Dispatch one task per check kind and join them all.

    Checks only read the snapshot. A check that raises is reported as a
    Fail for its own kind; sibling checks keep running. External tool
    invocations from all checks share one ``max_workers`` limit.
    """

    def __init__(
        self,
        snapshot: WorkspaceSnapshot,
        collaborators: Collaborators,
        *,
        max_workers: int = 4,
        verbose: bool = False,
    ) -> None:
        self.snapshot = snapshot
        self.collaborators = collaborators
        self.max_workers = max(1, max_workers)
        self.verbose = verbose
        self._tool_slots = asyncio.Semaphore(self.max_workers)
        self._handlers: dict[CheckKind, Callable[[], Awaitable[CheckOutcome]]] = {
            CheckKind.GIT: self.check_git,
            CheckKind.VERSION: self.check_version,
            CheckKind.TESTS: self.check_tests,
            CheckKind.DOCS: self.check_docs,
            CheckKind.SPECS: self.check_specs,
        }

    async def run(self, kinds: Iterable[CheckKind] | None = None) -> list[CheckOutcome]:
        """Run *kinds* (default: all) and return outcomes in check-kind order."""
        selected = CheckKind.ordered(list(CheckKind) if kinds is None else kinds)
        log.info("checks.dispatch", kinds=[k.value for k in selected])
        tasks = [
            asyncio.create_task(self._guarded(kind), name=f"check-{kind.value}")
            for kind in selected
        ]
        outcomes = await asyncio.gather(*tasks)
        return sorted(outcomes, key=lambda o: o.kind.rank)

    async def _guarded(self, kind: CheckKind) -> CheckOutcome:
        try:
            outcome = await self._handlers[kind]()
        except Exception as e:
            log.exception("checks.crashed", kind=kind.value)
            return CheckOutcome(
                kind=kind,
                status=Status.FAIL,
                message=f"{kind.value} {COULD_NOT_RUN}",
                details=(f"{COULD_NOT_RUN}: {e}",),
            )
        log.info("checks.completed", kind=kind.value, status=outcome.status.value)
        return outcome

    def _limited(self, fn: Callable[[Path], Awaitable[T]]) -> Callable[[Path], Awaitable[T]]:
        """Wrap a collaborator call so it holds one of the shared tool slots."""

        async def call(path: Path) -> T:
            async with self._tool_slots:
                return await fn(path)

        return call

    def _display(self, path: Path) -> str:
        try:
            rel = path.relative_to(self.snapshot.root)
        except ValueError:
            return str(path)
        return str(rel) if rel.parts else path.resolve().name

    # ── git ──────────────────────────────────────────────────────────────

    async def check_git(self) -> CheckOutcome:
        repos = list(self.snapshot.repositories)
        results = await bounded_map(
            repos, self._limited(self.collaborators.git.status), self.max_workers
        )

        dirty_repos = 0
        details: list[str] = []
        warnings: list[str] = []
        errors: list[str] = []

        for r in results:
            name = self._display(r.item)
            if not r.ok:
                errors.append(f"{name}: {COULD_NOT_RUN}: {r.error}")
                continue
            status = r.value
            if status.is_dirty:
                dirty_repos += 1
                details.append(
                    f"{name}: {len(status.dirty_files)} dirty file(s) on branch {status.branch}"
                )
                if self.verbose:
                    details.extend(f"  - {f}" for f in status.dirty_files)
            if not status.has_upstream:
                warnings.append(f"{name}: no upstream configured for {status.branch}")
            elif status.ahead or status.behind:
                warnings.append(
                    f"{name}: {status.ahead} ahead, {status.behind} behind upstream "
                    f"on {status.branch}"
                )

        if errors:
            status_ = Status.FAIL
            message = f"Could not check {len(errors)} of {len(repos)} repositories"
        elif dirty_repos:
            status_ = Status.FAIL
            message = f"Found {dirty_repos} repositories with uncommitted changes"
        elif warnings:
            status_ = Status.WARN
            message = f"All repositories clean, {len(warnings)} warning(s)"
        else:
            status_ = Status.PASS
            message = f"All {len(repos)} repositories are clean and synced"

        return CheckOutcome(
            kind=CheckKind.GIT,
            status=status_,
            message=message,
            details=tuple(errors + details + warnings),
        )

    # ── version ──────────────────────────────────────────────────────────

    async def check_version(self) -> CheckOutcome:
        graph = DependencyGraph.build(self.snapshot)
        report = VersionConsistencyAnalyzer(graph).analyze()
        log.debug(
            "checks.version_analyzed",
            edges=len(graph),
            mismatches=len(report.mismatches),
            drifted=len(report.drift.members),
        )
        return report.to_outcome()

    # ── tests ────────────────────────────────────────────────────────────

    async def check_tests(self) -> CheckOutcome:
        packages = list(self.snapshot.packages)
        results = await bounded_map(
            [p.path for p in packages],
            self._limited(self.collaborators.tests.run),
            self.max_workers,
        )

        passed = failed = 0
        details: list[str] = []
        for package, r in zip(packages, results):
            if not r.ok:
                failed += 1
                details.append(f"{package.name}: {COULD_NOT_RUN}: {r.error}")
                continue
            if r.value.passed:
                passed += 1
                continue
            failed += 1
            details.append(f"{package.name}: tests failed")
            if r.value.failure_detail:
                details.extend(f"  {line}" for line in r.value.failure_detail.splitlines())

        return CheckOutcome(
            kind=CheckKind.TESTS,
            status=Status.FAIL if failed else Status.PASS,
            message=f"Tests: {passed} passed, {failed} failed out of {len(packages)} packages",
            details=tuple(details),
        )

    # ── docs ─────────────────────────────────────────────────────────────

    async def check_docs(self) -> CheckOutcome:
        packages = list(self.snapshot.packages)
        results = await bounded_map(
            [p.path for p in packages],
            self._limited(self.collaborators.docs.build),
            self.max_workers,
        )

        clean = warned = errored = 0
        details: list[str] = []
        for package, r in zip(packages, results):
            if not r.ok:
                errored += 1
                details.append(f"{package.name}: {COULD_NOT_RUN}: {r.error}")
            elif r.value.warning_count > 0:
                warned += 1
                details.append(
                    f"{package.name}: {r.value.warning_count} documentation warning(s)"
                )
            else:
                clean += 1

        if errored:
            status = Status.FAIL
        elif warned:
            status = Status.WARN
        else:
            status = Status.PASS

        message = (
            f"Documentation: {clean} clean, {warned} with warnings out of "
            f"{len(packages)} packages"
        )
        if errored:
            message += f" ({errored} could not be built)"
        return CheckOutcome(
            kind=CheckKind.DOCS, status=status, message=message, details=tuple(details)
        )

    # ── specs ────────────────────────────────────────────────────────────

    async def _spec_files(self, package_path: Path) -> int | None:
        """Spec file count, or None when the spec directory is missing."""
        specs = self.collaborators.specs
        if not await specs.has_spec_dir(package_path):
            return None
        return await specs.count_spec_files(package_path)

    async def check_specs(self) -> CheckOutcome:
        packages = list(self.snapshot.packages)
        results = await bounded_map(
            [p.path for p in packages], self._spec_files, self.max_workers
        )

        with_specs = 0
        details: list[str] = []
        for package, r in zip(packages, results):
            if not r.ok:
                details.append(f"{package.name}: spec scan failed: {r.error}")
            elif r.value is None:
                details.append(f"{package.name}: missing specs/ directory")
            else:
                with_specs += 1
                if r.value > 0:
                    details.append(f"{package.name}: {r.value} spec file(s)")

        total = len(packages)
        coverage = (with_specs / total) * 100.0 if total else 0.0
        # Spec coverage is advisory; it never fails the run.
        status = Status.WARN if with_specs < total else Status.PASS
        return CheckOutcome(
            kind=CheckKind.SPECS,
            status=status,
            message=(
                f"Spec coverage: {coverage:.1f}% ({with_specs}/{total} packages with specs/)"
            ),
            details=tuple(details),
        )


async def run_health_check(
    workspace_root: Path,
    *,
    kinds: Iterable[CheckKind] | None = None,
    settings: Settings | None = None,
    collaborators: Collaborators | None = None,
    verbose: bool = False,
) -> HealthReport:
    """Scan, run the checks and build the report.

    Raises :class:`~workspace_health.exceptions.ScanError` before any
    check is dispatched when the workspace cannot be scanned.
    """
    settings = settings or Settings.from_env()
    snapshot = WorkspaceScanner(workspace_root, prefix=settings.prefix).scan()
    if collaborators is None:
        collaborators = Collaborators.default(
            timeout=settings.command_timeout, spec_dir=settings.spec_dir
        )
    runner = CheckRunner(
        snapshot, collaborators, max_workers=settings.max_workers, verbose=verbose
    )
    outcomes = await runner.run(kinds)
    return build_report(snapshot.root, outcomes)
