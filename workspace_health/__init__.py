"""workspace-health: drift auditing for a multi-repo Cargo workspace."""

__version__ = "0.1.0"

from workspace_health.checks.runner import CheckRunner, run_health_check
from workspace_health.exceptions import CollaboratorError, ScanError, WorkspaceHealthError
from workspace_health.models import CheckKind, CheckOutcome, HealthReport, Status
from workspace_health.scanner import WorkspaceScanner
from workspace_health.versioning import DependencyGraph, VersionConsistencyAnalyzer

__all__ = [
    "CheckKind",
    "CheckOutcome",
    "CheckRunner",
    "CollaboratorError",
    "DependencyGraph",
    "HealthReport",
    "ScanError",
    "Status",
    "VersionConsistencyAnalyzer",
    "WorkspaceHealthError",
    "WorkspaceScanner",
    "run_health_check",
]
