"""Tests for the dependency graph and version consistency analysis."""

from __future__ import annotations

from pathlib import Path

from workspace_health.models import CheckKind, Package, Status, WorkspaceSnapshot
from workspace_health.semver import Version
from workspace_health.versioning import DependencyGraph, VersionConsistencyAnalyzer
from workspace_health.versioning.analyzer import CANNOT_PARSE, UNSATISFIED, majority_major


def _pkg(name: str, version: str, deps: dict[str, str] | None = None) -> Package:
    path = Path("/ws") / name
    return Package(
        name=name,
        version=Version.parse(version),
        path=path,
        manifest_path=path / "Cargo.toml",
        dependencies=deps or {},
    )


def _analyze(*packages: Package):
    snapshot = WorkspaceSnapshot(root=Path("/ws"), packages=packages)
    return VersionConsistencyAnalyzer(DependencyGraph.build(snapshot)).analyze()


class TestDependencyGraph:
    def test_edges_only_between_members(self):
        snapshot = WorkspaceSnapshot(
            root=Path("/ws"),
            packages=(
                _pkg("b", "1.0.0", {"a": "1.0", "serde": "1.0"}),
                _pkg("a", "1.0.0"),
            ),
        )
        graph = DependencyGraph.build(snapshot)
        assert len(graph) == 1
        edge = graph.edges[0]
        assert (edge.dependent.name, edge.dependency.name, edge.constraint) == ("b", "a", "1.0")
        assert graph.dependents_of("a") == [edge]
        assert graph.dependencies_of("a") == []

    def test_packages_and_edges_are_hashable(self):
        snapshot = WorkspaceSnapshot(
            root=Path("/ws"),
            packages=(_pkg("b", "1.0.0", {"a": "1.0"}), _pkg("a", "1.0.0")),
        )
        edge = DependencyGraph.build(snapshot).edges[0]
        assert {edge, edge} == {edge}
        assert len(set(snapshot.packages)) == 2
        # equality still looks at the requirements
        assert _pkg("b", "1.0.0", {"a": "1.0"}) != _pkg("b", "1.0.0", {"a": "2.0"})

    def test_empty(self):
        graph = DependencyGraph.build(WorkspaceSnapshot(root=Path("/ws"), packages=()))
        assert list(graph) == []
        assert graph.packages == ()


class TestMismatches:
    def test_satisfied_requirement(self):
        report = _analyze(
            _pkg("embeddenator-core", "0.20.0-alpha.1"),
            _pkg("embeddenator-io", "0.20.0-alpha.1", {"embeddenator-core": "0.20.0-alpha.1"}),
        )
        assert not report.has_issues()
        outcome = report.to_outcome()
        assert outcome.kind is CheckKind.VERSION
        assert outcome.status is Status.PASS
        assert outcome.message == "All 2 packages have consistent versions"

    def test_mismatch_even_on_same_major(self):
        report = _analyze(
            _pkg("a", "1.0.0"),
            _pkg("b", "1.3.0", {"a": "^1.1"}),
        )
        assert not report.drift
        assert len(report.mismatches) == 1
        m = report.mismatches[0]
        assert (m.dependent, m.dependency, m.constraint, m.actual) == ("b", "a", "^1.1", "1.0.0")
        assert m.reason == UNSATISFIED
        assert m.describe() == "b depends on a ^1.1 (actual: 1.0.0)"
        outcome = report.to_outcome()
        assert outcome.status is Status.FAIL
        assert outcome.details == ("b depends on a ^1.1 (actual: 1.0.0)",)

    def test_wildcard_requirement_is_satisfied(self):
        report = _analyze(
            _pkg("a", "0.20.3"),
            _pkg("b", "0.20.0", {"a": "0.20.*"}),
        )
        assert report.mismatches == ()

    def test_unparsable_constraint_is_reported(self):
        report = _analyze(
            _pkg("a", "1.0.0"),
            _pkg("b", "1.0.0", {"a": "not-a-version"}),
        )
        assert [m.reason for m in report.mismatches] == [CANNOT_PARSE]
        assert "cannot parse constraint 'not-a-version'" in report.mismatches[0].describe()

    def test_sorted_by_dependent_then_dependency(self):
        report = _analyze(
            _pkg("a", "1.0.0"),
            _pkg("b", "1.0.0"),
            _pkg("d", "1.0.0", {"b": "2.0", "a": "2.0"}),
            _pkg("c", "1.0.0", {"a": "2.0"}),
        )
        pairs = [(m.dependent, m.dependency) for m in report.mismatches]
        assert pairs == [("c", "a"), ("d", "a"), ("d", "b")]


class TestDrift:
    def test_no_drift_on_single_major(self):
        report = _analyze(_pkg("a", "0.1.0"), _pkg("b", "0.9.0"))
        assert not report.drift_detected
        assert report.drift.majority_major == 0

    def test_minority_major_is_flagged(self):
        report = _analyze(_pkg("a", "0.20.0"), _pkg("b", "0.21.0"), _pkg("c", "1.0.0"))
        assert report.drift.majority_major == 0
        assert report.drift.names() == ["c"]
        outcome = report.to_outcome()
        assert outcome.status is Status.FAIL
        assert outcome.message == (
            "Version inconsistencies detected: 1 drifted package(s), 0 dependency mismatch(es)"
        )
        assert outcome.details == (
            "Version drift: c is on major version 1 (workspace majority: 0)",
        )

    def test_tie_goes_to_lowest_major(self):
        assert majority_major([2, 1, 2, 1]) == 1
        report = _analyze(_pkg("a", "1.0.0"), _pkg("b", "2.0.0"))
        assert report.drift.names() == ["b"]

    def test_empty_workspace(self):
        report = _analyze()
        assert report.total_packages == 0
        assert not report.has_issues()
        assert majority_major([]) is None
        assert report.to_outcome().message == "All 0 packages have consistent versions"

    def test_mismatch_details_come_before_drift(self):
        report = _analyze(
            _pkg("a", "1.0.0"),
            _pkg("b", "1.0.0", {"c": "1.0"}),
            _pkg("c", "2.0.0"),
        )
        details = report.details()
        assert details[0].startswith("b depends on c 1.0")
        assert details[1].startswith("Version drift: c")
