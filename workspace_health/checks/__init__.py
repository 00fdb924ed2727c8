"""Health checks: concurrent execution of independent workspace checks."""

from workspace_health.checks.aggregate import aggregate, build_report
from workspace_health.checks.collaborators import Collaborators
from workspace_health.checks.runner import CheckRunner, run_health_check

__all__ = ["CheckRunner", "Collaborators", "aggregate", "build_report", "run_health_check"]
