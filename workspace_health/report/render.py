"""Pure renderers from :class:`HealthReport` to text.

All three views carry the same facts: timestamp, workspace root, overall
status, and every check's status, message and details.
"""

from __future__ import annotations

import click

from workspace_health.models import HealthReport, Status
from workspace_health.report.schema import ReportSchema

_RULE = "═" * 80

_MD_ICONS = {
    Status.PASS: "✅",
    Status.WARN: "⚠️",
    Status.FAIL: "❌",
}

_TERM_ICONS = {
    Status.PASS: ("✓", "green"),
    Status.WARN: ("⚠", "yellow"),
    Status.FAIL: ("✗", "red"),
}


def _label(status: Status) -> str:
    return status.value.capitalize()


def render_json(report: HealthReport, indent: int | None = 2) -> str:
    return ReportSchema.from_report(report).model_dump_json(indent=indent)


def parse_json(text: str) -> HealthReport:
    """Inverse of :func:`render_json`."""
    return ReportSchema.model_validate_json(text).to_report()


def render_markdown(report: HealthReport) -> str:
    lines: list[str] = []
    lines.append("# Workspace Health Report")
    lines.append("")
    lines.append(f"**Generated:** {report.timestamp}  ")
    lines.append(f"**Workspace:** `{report.workspace_root}`")
    lines.append("")
    lines.append(
        f"**Overall Status:** {_MD_ICONS[report.overall_status]} "
        f"{_label(report.overall_status)}"
    )
    lines.append("")
    lines.append("## Check Results")
    lines.append("")

    if not report.checks:
        lines.append("_No checks were run._")
        lines.append("")

    for check in report.checks:
        lines.append(f"### {_MD_ICONS[check.status]} {check.kind.value} Check")
        lines.append("")
        lines.append(f"**Status:** {_label(check.status)}")
        lines.append("")
        lines.append(check.message)
        lines.append("")
        if check.details:
            lines.append("**Details:**")
            lines.append("")
            for detail in check.details:
                lines.append(f"- {detail}")
            lines.append("")

    return "\n".join(lines)


def render_terminal(report: HealthReport, color: bool = True) -> str:
    """Colourised console view; ``color=False`` yields plain text."""

    def style(text: str, **kwargs: object) -> str:
        return click.style(text, **kwargs) if color else text  # type: ignore[arg-type]

    lines: list[str] = []
    lines.append("")
    lines.append(style(_RULE, fg="bright_black"))
    lines.append(style("Workspace Health Report", fg="bright_white", bold=True))
    lines.append(style(_RULE, fg="bright_black"))
    lines.append(f"{style('Generated:', fg='cyan')} {report.timestamp}")
    lines.append(f"{style('Workspace:', fg='cyan')} {report.workspace_root}")

    _, overall_fg = _TERM_ICONS[report.overall_status]
    overall = style(report.overall_status.value.upper(), fg=overall_fg, bold=True)
    lines.append(f"{style('Overall Status:', fg='cyan')} {overall}")
    lines.append("")

    if not report.checks:
        lines.append(style("No checks were run.", dim=True))
        lines.append("")

    for check in report.checks:
        icon, fg = _TERM_ICONS[check.status]
        lines.append(
            f"{style(icon, fg=fg)} {style(check.kind.value, fg='bright_white', bold=True)} "
            f"{style(f'[{_label(check.status)}]', dim=True)}"
        )
        lines.append(f"  {check.message}")
        for detail in check.details:
            lines.append(f"    • {style(detail, dim=True)}")
        lines.append("")

    lines.append(style(_RULE, fg="bright_black"))
    return "\n".join(lines)
