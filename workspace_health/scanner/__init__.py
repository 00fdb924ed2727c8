"""Workspace scanner: discover packages and parse their manifests."""

from workspace_health.scanner.manifest import CargoManifest, load_manifest
from workspace_health.scanner.scanner import WorkspaceScanner, find_workspace_root

__all__ = ["CargoManifest", "WorkspaceScanner", "find_workspace_root", "load_manifest"]
