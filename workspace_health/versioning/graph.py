"""Directed graph of declared version requirements between workspace packages."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from workspace_health.models import Package, WorkspaceSnapshot


@dataclass(frozen=True)
class DependencyEdge:
    """``dependent`` requires ``dependency`` at ``constraint``."""

    dependent: Package
    dependency: Package
    constraint: str


class DependencyGraph:
    """Edges between snapshot members; requirements on outside crates are ignored."""

    def __init__(
        self,
        packages: Iterable[Package] = (),
        edges: Iterable[DependencyEdge] = (),
    ) -> None:
        self.packages = tuple(sorted(packages, key=lambda p: p.name))
        self._edges = tuple(
            sorted(edges, key=lambda e: (e.dependent.name, e.dependency.name))
        )

    @classmethod
    def build(cls, snapshot: WorkspaceSnapshot) -> DependencyGraph:
        edges: list[DependencyEdge] = []
        for package in snapshot.packages:
            for dep_name, constraint in package.dependencies.items():
                target = snapshot.get(dep_name)
                if target is None:
                    continue
                edges.append(
                    DependencyEdge(dependent=package, dependency=target, constraint=constraint)
                )
        return cls(snapshot.packages, edges)

    @property
    def edges(self) -> tuple[DependencyEdge, ...]:
        return self._edges

    def dependencies_of(self, name: str) -> list[DependencyEdge]:
        return [e for e in self._edges if e.dependent.name == name]

    def dependents_of(self, name: str) -> list[DependencyEdge]:
        return [e for e in self._edges if e.dependency.name == name]

    def __len__(self) -> int:
        return len(self._edges)

    def __iter__(self) -> Iterator[DependencyEdge]:
        return iter(self._edges)
