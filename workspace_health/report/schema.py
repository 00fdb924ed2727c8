"""JSON report schema.

Field order and enum spelling are a compatibility contract for CI
consumers; do not reorder.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict

from workspace_health.models import CheckKind, CheckOutcome, HealthReport, Status

StatusLiteral = Literal["pass", "warn", "fail"]


class CheckSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    check_type: str
    status: StatusLiteral
    message: str
    details: list[str]

    @classmethod
    def from_outcome(cls, outcome: CheckOutcome) -> CheckSchema:
        return cls(
            check_type=outcome.kind.value,
            status=outcome.status.value,
            message=outcome.message,
            details=list(outcome.details),
        )

    def to_outcome(self) -> CheckOutcome:
        return CheckOutcome(
            kind=CheckKind.parse(self.check_type),
            status=Status(self.status),
            message=self.message,
            details=tuple(self.details),
        )


class ReportSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timestamp: str
    workspace_root: str
    overall_status: StatusLiteral
    checks: list[CheckSchema]

    @classmethod
    def from_report(cls, report: HealthReport) -> ReportSchema:
        return cls(
            timestamp=report.timestamp,
            workspace_root=str(report.workspace_root),
            overall_status=report.overall_status.value,
            checks=[CheckSchema.from_outcome(c) for c in report.checks],
        )

    def to_report(self) -> HealthReport:
        return HealthReport(
            timestamp=self.timestamp,
            workspace_root=Path(self.workspace_root),
            overall_status=Status(self.overall_status),
            checks=tuple(c.to_outcome() for c in self.checks),
        )
