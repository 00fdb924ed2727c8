"""Parser for Rust Cargo.toml files."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

_DEP_SECTIONS = ("dependencies", "dev-dependencies", "build-dependencies")


def _parse_version(spec: str | dict) -> str | None:
    """Extract version constraint from a dependency spec."""
    if isinstance(spec, str):
        return spec
    if isinstance(spec, dict):
        version = spec.get("version")
        return version if isinstance(version, str) else None
    return None


@dataclass
class CargoManifest:
    """The parts of a Cargo.toml the health checks look at.

    ``name`` and ``version`` are None when the manifest does not declare
    them; the scanner decides whether that is fatal.
    """

    path: Path
    name: str | None
    version: str | None
    # dependency name -> requirement string; entries without a version are dropped
    dependencies: dict[str, str] = field(default_factory=dict)
    has_package_table: bool = False


def load_manifest(file_path: Path, content: str | None = None) -> CargoManifest:
    """Parse *file_path* (or *content* when given).

    Raises ``tomllib.TOMLDecodeError`` on invalid TOML and ``OSError``
    when the file cannot be read.
    """
    if content is None:
        content = file_path.read_text(encoding="utf-8")
    data = tomllib.loads(content)

    package = data.get("package")
    has_package = isinstance(package, dict)
    name = package.get("name") if has_package else None
    version = package.get("version") if has_package else None

    deps: dict[str, str] = {}
    for section in _DEP_SECTIONS:
        dep_table = data.get(section, {})
        if not isinstance(dep_table, dict):
            continue
        for dep_name, spec in dep_table.items():
            if dep_name in deps:
                continue
            constraint = _parse_version(spec)
            if constraint is not None:
                deps[dep_name] = constraint

    return CargoManifest(
        path=file_path,
        name=name if isinstance(name, str) else None,
        # `version.workspace = true` and friends are not plain strings
        version=version if isinstance(version, str) else None,
        dependencies=deps,
        has_package_table=has_package,
    )
