"""Workspace version consistency: dependency graph + drift/mismatch analysis."""

from workspace_health.versioning.analyzer import (
    DriftGroup,
    Mismatch,
    VersionConsistencyAnalyzer,
    VersionReport,
)
from workspace_health.versioning.graph import DependencyEdge, DependencyGraph

__all__ = [
    "DependencyEdge",
    "DependencyGraph",
    "DriftGroup",
    "Mismatch",
    "VersionConsistencyAnalyzer",
    "VersionReport",
]
