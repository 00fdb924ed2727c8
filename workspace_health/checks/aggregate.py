"""Reduce per-check outcomes to one report."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from workspace_health.models import CheckOutcome, HealthReport, Status


def aggregate(outcomes: Iterable[CheckOutcome]) -> Status:
    """Worst-of: any Fail wins, then any Warn, else Pass (also when empty)."""
    worst = Status.PASS
    for outcome in outcomes:
        if outcome.status.severity > worst.severity:
            worst = outcome.status
    return worst


def build_report(
    workspace_root: Path,
    outcomes: Iterable[CheckOutcome],
    timestamp: str | None = None,
) -> HealthReport:
    """Sort *outcomes* into check-kind order and derive the overall status."""
    ordered = tuple(sorted(outcomes, key=lambda o: o.kind.rank))
    kinds = [o.kind for o in ordered]
    if len(kinds) != len(set(kinds)):
        raise ValueError("at most one outcome per check kind")
    return HealthReport(
        timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
        workspace_root=Path(workspace_root),
        overall_status=aggregate(ordered),
        checks=ordered,
    )
