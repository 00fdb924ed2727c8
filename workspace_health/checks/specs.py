"""Filesystem spec scanner: looks for a conventional ``specs/`` directory."""

from __future__ import annotations

import asyncio
from pathlib import Path

from workspace_health.exceptions import CollaboratorError

SPEC_SUFFIXES = (".md", ".txt")


class FilesystemSpecScanner:
    def __init__(self, spec_dir: str = "specs") -> None:
        self.spec_dir = spec_dir

    async def has_spec_dir(self, package_path: Path) -> bool:
        return (package_path / self.spec_dir).is_dir()

    async def count_spec_files(self, package_path: Path) -> int:
        return await asyncio.to_thread(self._count, package_path / self.spec_dir)

    @staticmethod
    def _count(specs_dir: Path) -> int:
        try:
            return sum(
                1 for p in specs_dir.rglob("*") if p.is_file() and p.suffix in SPEC_SUFFIXES
            )
        except OSError as e:
            raise CollaboratorError("specs", f"cannot read {specs_dir}: {e}") from e
