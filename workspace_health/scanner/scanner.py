"""WorkspaceScanner: build an immutable snapshot from the manifests on disk."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import structlog

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from workspace_health.core.config import DEFAULT_PREFIX
from workspace_health.exceptions import ScanError, VersionError
from workspace_health.models import Package, WorkspaceSnapshot
from workspace_health.scanner.manifest import CargoManifest, load_manifest
from workspace_health.semver import Version

log = structlog.get_logger("workspace_health.scanner")

MANIFEST_NAME = "Cargo.toml"

# Build output, VCS metadata and nested member crates never hold workspace packages.
_SKIP_DIRS = frozenset({"target", ".git", "node_modules", ".cargo", "crates"})


def find_workspace_root(start: Path, prefix: str = DEFAULT_PREFIX) -> Path | None:
    """Walk up from *start* to the first directory that looks like the workspace root."""
    current = start.resolve()
    for candidate in (current, *current.parents):
        if (candidate / "update_all.sh").exists() or (candidate / prefix).is_dir():
            return candidate
    return None


class WorkspaceScanner:
    """Discover ``<prefix>*`` packages below *root*.

    Scanning is read-only and all-or-nothing: any malformed or duplicate
    manifest raises :class:`ScanError`.
    """

    def __init__(self, root: Path | str, prefix: str = DEFAULT_PREFIX) -> None:
        self.root = Path(root)
        self.prefix = prefix

    def scan(self) -> WorkspaceSnapshot:
        if not self.root.is_dir() or not os.access(self.root, os.R_OK | os.X_OK):
            raise ScanError(
                ScanError.UNREADABLE_ROOT, self.root, "workspace root is not a readable directory"
            )

        packages: dict[str, Package] = {}
        for manifest_path in self.find_manifests():
            manifest = self._load(manifest_path)
            if manifest is None:
                continue
            package = self._to_package(manifest)
            previous = packages.get(package.name)
            if previous is not None:
                raise ScanError(
                    ScanError.DUPLICATE_NAME,
                    manifest_path,
                    f"package {package.name!r} already declared in {previous.manifest_path}",
                )
            packages[package.name] = package
            log.debug("scanner.package_found", package=package.name, version=str(package.version))

        # Keep only requirements that point at other workspace members.
        members = set(packages)
        resolved = [
            Package(
                name=p.name,
                version=p.version,
                path=p.path,
                manifest_path=p.manifest_path,
                dependencies={
                    dep: req for dep, req in p.dependencies.items() if dep in members
                },
            )
            for p in packages.values()
        ]

        snapshot = WorkspaceSnapshot(
            root=self.root,
            packages=tuple(resolved),
            repositories=tuple(self.find_repositories()),
            prefix=self.prefix,
        )
        log.info(
            "scanner.snapshot_built",
            root=str(self.root),
            packages=len(snapshot.packages),
            repositories=len(snapshot.repositories),
        )
        return snapshot

    def find_manifests(self) -> list[Path]:
        """All Cargo.toml files below the root, outside skipped directories."""
        found: list[Path] = []

        def _onerror(err: OSError) -> None:
            if Path(err.filename or "") == self.root:
                raise ScanError(ScanError.UNREADABLE_ROOT, self.root, str(err))
            log.warning("scanner.unreadable_dir", path=err.filename, error=str(err))

        for dirpath, dirnames, filenames in os.walk(self.root, onerror=_onerror):
            dirnames[:] = sorted(d for d in dirnames if d not in _SKIP_DIRS)
            if MANIFEST_NAME in filenames:
                found.append(Path(dirpath) / MANIFEST_NAME)
        return found

    def find_repositories(self) -> list[Path]:
        """Git repositories at the root or one level below it."""
        repos: list[Path] = []
        candidates = [self.root]
        try:
            candidates.extend(
                sorted(
                    p for p in self.root.iterdir() if p.is_dir() and p.name not in _SKIP_DIRS
                )
            )
        except OSError as e:
            raise ScanError(ScanError.UNREADABLE_ROOT, self.root, str(e)) from e
        for candidate in candidates:
            if (candidate / ".git").exists():
                repos.append(candidate)
        return repos

    # ── helpers ──────────────────────────────────────────────────────────

    def _is_candidate_dir(self, manifest_path: Path) -> bool:
        return manifest_path.parent.name.startswith(self.prefix)

    def _load(self, manifest_path: Path) -> CargoManifest | None:
        """Parse a manifest; None when it is not a workspace package at all."""
        dir_matches = self._is_candidate_dir(manifest_path)
        try:
            manifest = load_manifest(manifest_path)
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
            if dir_matches:
                raise ScanError(ScanError.MALFORMED_MANIFEST, manifest_path, str(e)) from e
            log.warning("scanner.manifest_skipped", path=str(manifest_path), error=str(e))
            return None

        name_matches = manifest.name is not None and manifest.name.startswith(self.prefix)
        if not (dir_matches or name_matches):
            log.debug("scanner.not_a_member", path=str(manifest_path), name=manifest.name)
            return None
        if dir_matches and not manifest.has_package_table:
            # Virtual workspace manifest ([workspace] only) living in a prefixed dir.
            log.debug("scanner.virtual_manifest", path=str(manifest_path))
            return None
        return manifest

    def _to_package(self, manifest: CargoManifest) -> Package:
        if not manifest.name:
            raise ScanError(ScanError.MALFORMED_MANIFEST, manifest.path, "missing package.name")
        if not manifest.version:
            raise ScanError(
                ScanError.MALFORMED_MANIFEST, manifest.path, "missing package.version"
            )
        try:
            version = Version.parse(manifest.version)
        except VersionError as e:
            raise ScanError(ScanError.MALFORMED_MANIFEST, manifest.path, str(e)) from e
        return Package(
            name=manifest.name,
            version=version,
            path=manifest.path.parent,
            manifest_path=manifest.path,
            dependencies=manifest.dependencies,
        )
