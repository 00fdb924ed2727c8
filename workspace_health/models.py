"""Domain models shared by the scanner, the checks and the renderers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from workspace_health.semver import Version


@dataclass(frozen=True)
class Package:
    """One workspace package, as declared by its Cargo.toml."""

    name: str
    version: Version
    path: Path
    manifest_path: Path
    # dependency name -> raw requirement string, in-workspace entries only
    dependencies: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependencies", MappingProxyType(dict(self.dependencies)))


@dataclass(frozen=True)
class WorkspaceSnapshot:
    """Every package found under *root* at one point in time.

    Built once per run by :class:`~workspace_health.scanner.WorkspaceScanner`
    and handed, read-only, to every check.
    """

    root: Path
    packages: tuple[Package, ...]
    repositories: tuple[Path, ...] = ()
    prefix: str = ""

    def __post_init__(self) -> None:
        names = [p.name for p in self.packages]
        if len(names) != len(set(names)):
            raise ValueError("package names in a snapshot must be unique")
        ordered = tuple(sorted(self.packages, key=lambda p: p.name))
        object.__setattr__(self, "packages", ordered)
        object.__setattr__(self, "_by_name", MappingProxyType({p.name: p for p in ordered}))

    def get(self, name: str) -> Package | None:
        return self._by_name.get(name)  # type: ignore[attr-defined]

    def names(self) -> list[str]:
        return [p.name for p in self.packages]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name  # type: ignore[attr-defined]

    def __len__(self) -> int:
        return len(self.packages)


class CheckKind(str, Enum):
    """Health check kinds, declared in report order."""

    GIT = "git"
    VERSION = "version"
    TESTS = "tests"
    DOCS = "docs"
    SPECS = "specs"

    @classmethod
    def parse(cls, text: str) -> CheckKind:
        try:
            return cls(text.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown health check type: {text}") from None

    @classmethod
    def ordered(cls, kinds: object) -> list[CheckKind]:
        """De-duplicate *kinds* and sort them into report order."""
        wanted = set(kinds)  # type: ignore[call-overload]
        return [k for k in cls if k in wanted]

    @property
    def rank(self) -> int:
        return list(CheckKind).index(self)


class Status(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"

    @property
    def severity(self) -> int:
        return {"pass": 0, "warn": 1, "fail": 2}[self.value]

    @property
    def is_critical(self) -> bool:
        return self is Status.FAIL


@dataclass(frozen=True)
class CheckOutcome:
    """Result of a single check kind."""

    kind: CheckKind
    status: Status
    message: str
    details: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "details", tuple(self.details))


@dataclass(frozen=True)
class HealthReport:
    """Terminal value of a run; renderers only read it."""

    timestamp: str
    workspace_root: Path
    overall_status: Status
    checks: tuple[CheckOutcome, ...] = ()

    def has_failures(self) -> bool:
        return any(c.status.is_critical for c in self.checks)

    @property
    def exit_code(self) -> int:
        return 1 if self.overall_status is Status.FAIL else 0

    def check(self, kind: CheckKind) -> CheckOutcome | None:
        for outcome in self.checks:
            if outcome.kind is kind:
                return outcome
        return None
