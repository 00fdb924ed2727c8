"""Interfaces to the external tools the checks delegate to.

Each method either returns a result (which may be negative: failing
tests, doc warnings) or raises :class:`CollaboratorError` when the tool
could not be invoked at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class GitStatus:
    repo_path: Path
    branch: str
    is_dirty: bool = False
    ahead: int = 0
    behind: int = 0
    has_upstream: bool = True
    dirty_files: tuple[str, ...] = ()


@dataclass(frozen=True)
class TestRunResult:
    __test__ = False  # keep pytest from collecting it

    passed: bool
    failure_detail: str | None = None


@dataclass(frozen=True)
class DocResult:
    warning_count: int = 0


@runtime_checkable
class GitStatusProvider(Protocol):
    async def status(self, repo_path: Path) -> GitStatus: ...


@runtime_checkable
class PackageTestRunner(Protocol):
    async def run(self, package_path: Path) -> TestRunResult: ...


@runtime_checkable
class DocBuilder(Protocol):
    async def build(self, package_path: Path) -> DocResult: ...


@runtime_checkable
class SpecScanner(Protocol):
    async def has_spec_dir(self, package_path: Path) -> bool: ...

    async def count_spec_files(self, package_path: Path) -> int: ...


@dataclass(frozen=True)
class Collaborators:
    """The four tool handles a :class:`CheckRunner` needs."""

    git: GitStatusProvider
    tests: PackageTestRunner
    docs: DocBuilder
    specs: SpecScanner

    @classmethod
    def default(cls, timeout: float = 900.0, spec_dir: str = "specs") -> Collaborators:
        from workspace_health.checks.cargo import CargoDocBuilder, CargoTestRunner
        from workspace_health.checks.git import GitCliStatusProvider
        from workspace_health.checks.specs import FilesystemSpecScanner

        return cls(
            git=GitCliStatusProvider(timeout=timeout),
            tests=CargoTestRunner(timeout=timeout),
            docs=CargoDocBuilder(timeout=timeout),
            specs=FilesystemSpecScanner(spec_dir=spec_dir),
        )
