"""Version consistency analysis: requirement mismatches and major-version drift."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

import structlog

from workspace_health.exceptions import ConstraintError
from workspace_health.models import CheckKind, CheckOutcome, Status
from workspace_health.semver import Constraint
from workspace_health.versioning.graph import DependencyGraph

log = structlog.get_logger("workspace_health.versioning")

UNSATISFIED = "unsatisfied"
CANNOT_PARSE = "cannot-parse-constraint"


@dataclass(frozen=True)
class Mismatch:
    dependent: str
    dependency: str
    constraint: str
    actual: str
    reason: str = UNSATISFIED

    def describe(self) -> str:
        if self.reason == CANNOT_PARSE:
            return (
                f"{self.dependent} depends on {self.dependency}: "
                f"cannot parse constraint '{self.constraint}' (actual: {self.actual})"
            )
        return (
            f"{self.dependent} depends on {self.dependency} {self.constraint} "
            f"(actual: {self.actual})"
        )


@dataclass(frozen=True)
class DriftGroup:
    """Packages whose major version differs from the workspace majority."""

    majority_major: int | None
    members: tuple[tuple[str, int], ...] = ()

    def __bool__(self) -> bool:
        return bool(self.members)

    def names(self) -> list[str]:
        return [name for name, _ in self.members]

    def describe(self) -> list[str]:
        return [
            f"Version drift: {name} is on major version {major} "
            f"(workspace majority: {self.majority_major})"
            for name, major in self.members
        ]


@dataclass(frozen=True)
class VersionReport:
    total_packages: int
    mismatches: tuple[Mismatch, ...] = ()
    drift: DriftGroup = field(default_factory=lambda: DriftGroup(majority_major=None))

    @property
    def drift_detected(self) -> bool:
        return bool(self.drift)

    def has_issues(self) -> bool:
        return self.drift_detected or bool(self.mismatches)

    def details(self) -> list[str]:
        return [m.describe() for m in self.mismatches] + self.drift.describe()

    def to_outcome(self) -> CheckOutcome:
        if self.has_issues():
            return CheckOutcome(
                kind=CheckKind.VERSION,
                status=Status.FAIL,
                message=(
                    f"Version inconsistencies detected: {len(self.drift.members)} drifted "
                    f"package(s), {len(self.mismatches)} dependency mismatch(es)"
                ),
                details=tuple(self.details()),
            )
        return CheckOutcome(
            kind=CheckKind.VERSION,
            status=Status.PASS,
            message=f"All {self.total_packages} packages have consistent versions",
        )


def majority_major(majors: list[int]) -> int | None:
    """Most common major version; ties go to the lowest value."""
    if not majors:
        return None
    counts = Counter(majors)
    return min(counts, key=lambda major: (-counts[major], major))


class VersionConsistencyAnalyzer:
    """Walk a :class:`DependencyGraph` and classify drift and mismatches."""

    def __init__(self, graph: DependencyGraph) -> None:
        self.graph = graph

    def analyze(self) -> VersionReport:
        return VersionReport(
            total_packages=len(self.graph.packages),
            mismatches=tuple(self.find_mismatches()),
            drift=self.find_drift(),
        )

    def find_mismatches(self) -> list[Mismatch]:
        mismatches: list[Mismatch] = []
        for edge in self.graph.edges:
            actual = edge.dependency.version
            try:
                ok = Constraint.parse(edge.constraint).matches(actual)
                reason = UNSATISFIED
            except ConstraintError as e:
                log.debug(
                    "versioning.bad_constraint",
                    dependent=edge.dependent.name,
                    dependency=edge.dependency.name,
                    error=str(e),
                )
                ok = False
                reason = CANNOT_PARSE
            if not ok:
                mismatches.append(
                    Mismatch(
                        dependent=edge.dependent.name,
                        dependency=edge.dependency.name,
                        constraint=edge.constraint,
                        actual=str(actual),
                        reason=reason,
                    )
                )
        mismatches.sort(key=lambda m: (m.dependent, m.dependency))
        return mismatches

    def find_drift(self) -> DriftGroup:
        packages = self.graph.packages
        majority = majority_major([p.version.major for p in packages])
        members = tuple(
            sorted(
                (p.name, p.version.major) for p in packages if p.version.major != majority
            )
        )
        return DriftGroup(majority_major=majority, members=members)
