"""Custom exceptions for workspace-health."""

from __future__ import annotations

from pathlib import Path


class WorkspaceHealthError(Exception):
    """Base exception for all workspace-health errors."""


class ScanError(WorkspaceHealthError):
    """Raised when the workspace cannot be turned into a snapshot.

    Always fatal: no check is dispatched once a scan has failed.
    """

    UNREADABLE_ROOT = "unreadable-root"
    MALFORMED_MANIFEST = "malformed-manifest"
    DUPLICATE_NAME = "duplicate-name"

    def __init__(self, kind: str, path: Path, message: str):
        self.kind = kind
        self.path = path
        super().__init__(f"{kind}: {path}: {message}")


class CollaboratorError(WorkspaceHealthError):
    """Raised when an external tool could not be invoked at all.

    A tool that runs and reports a negative result (failed tests, doc
    warnings) is not an error.
    """

    def __init__(self, tool: str, message: str):
        self.tool = tool
        super().__init__(f"{tool}: {message}")


class VersionError(WorkspaceHealthError, ValueError):
    """Raised when a semantic version string cannot be parsed."""


class ConstraintError(WorkspaceHealthError, ValueError):
    """Raised when a version requirement string cannot be parsed."""
