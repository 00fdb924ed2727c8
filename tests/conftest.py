"""Shared pytest fixtures for workspace-health tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from workspace_health.checks.collaborators import (
    Collaborators,
    DocResult,
    GitStatus,
    TestRunResult,
)
from workspace_health.exceptions import CollaboratorError


def write_package(
    root: Path,
    dirname: str,
    name: str | None,
    version: str | None,
    deps: dict[str, str | dict] | None = None,
    *,
    specs: int | None = None,
) -> Path:
    """Create ``root/dirname/Cargo.toml``; *specs* adds a specs/ dir with that many files."""
    pkg = root / dirname
    pkg.mkdir(parents=True, exist_ok=True)
    lines = ["[package]"]
    if name is not None:
        lines.append(f'name = "{name}"')
    if version is not None:
        lines.append(f'version = "{version}"')
    lines.append('edition = "2021"')
    lines.append("")
    lines.append("[dependencies]")
    for dep, spec in (deps or {}).items():
        if isinstance(spec, dict):
            inner = ", ".join(f'{k} = "{v}"' for k, v in spec.items())
            lines.append(f"{dep} = {{ {inner} }}")
        else:
            lines.append(f'{dep} = "{spec}"')
    (pkg / "Cargo.toml").write_text("\n".join(lines) + "\n")
    if specs is not None:
        spec_dir = pkg / "specs"
        spec_dir.mkdir(exist_ok=True)
        for i in range(specs):
            (spec_dir / f"spec{i}.md").write_text(f"# Spec {i}\n")
    return pkg


@pytest.fixture
def workspace(tmp_path):
    """Two consistent packages, one with specs, one without."""
    write_package(
        tmp_path,
        "embeddenator-core",
        "embeddenator-core",
        "0.20.0-alpha.1",
        specs=1,
    )
    write_package(
        tmp_path,
        "embeddenator-io",
        "embeddenator-io",
        "0.20.0-alpha.1",
        {"embeddenator-core": "0.20.0-alpha.1", "serde": "1.0"},
    )
    return tmp_path


# ── fake collaborators ───────────────────────────────────────────────────


class FakeGit:
    def __init__(self, statuses: dict[str, GitStatus] | None = None, error: str | None = None):
        self.statuses = statuses or {}
        self.error = error
        self.calls: list[Path] = []

    async def status(self, repo_path: Path) -> GitStatus:
        self.calls.append(repo_path)
        if self.error:
            raise CollaboratorError("git", self.error)
        return self.statuses.get(repo_path.name, GitStatus(repo_path=repo_path, branch="main"))


class FakeTests:
    def __init__(
        self,
        results: dict[str, TestRunResult] | None = None,
        errors: dict[str, str] | None = None,
    ):
        self.results = results or {}
        self.errors = errors or {}
        self.calls: list[Path] = []

    async def run(self, package_path: Path) -> TestRunResult:
        self.calls.append(package_path)
        if package_path.name in self.errors:
            raise CollaboratorError("cargo", self.errors[package_path.name])
        return self.results.get(package_path.name, TestRunResult(passed=True))


class FakeDocs:
    def __init__(
        self,
        warnings: dict[str, int] | None = None,
        errors: dict[str, str] | None = None,
    ):
        self.warnings = warnings or {}
        self.errors = errors or {}

    async def build(self, package_path: Path) -> DocResult:
        if package_path.name in self.errors:
            raise CollaboratorError("cargo", self.errors[package_path.name])
        return DocResult(warning_count=self.warnings.get(package_path.name, 0))


class FakeSpecs:
    def __init__(self, present: set[str] | None = None, error: str | None = None):
        self.present = present
        self.error = error

    async def has_spec_dir(self, package_path: Path) -> bool:
        if self.error:
            raise CollaboratorError("specs", self.error)
        if self.present is None:
            return (package_path / "specs").is_dir()
        return package_path.name in self.present

    async def count_spec_files(self, package_path: Path) -> int:
        return 1


def make_collaborators(**overrides) -> Collaborators:
    parts = {
        "git": FakeGit(),
        "tests": FakeTests(),
        "docs": FakeDocs(),
        "specs": FakeSpecs(),
    }
    parts.update(overrides)
    return Collaborators(**parts)


@pytest.fixture
def fakes():
    return make_collaborators
