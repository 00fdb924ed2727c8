"""Report rendering: terminal, JSON and Markdown views of one HealthReport."""

from workspace_health.report.render import parse_json, render_json, render_markdown, render_terminal

__all__ = ["parse_json", "render_json", "render_markdown", "render_terminal"]
