"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

DEFAULT_PREFIX = "embeddenator"


def _env_int(key: str, default: int) -> int:
    return int(os.environ.get(key, default))


def _env_float(key: str, default: float) -> float:
    return float(os.environ.get(key, default))


@dataclass(frozen=True)
class Settings:
    """Knobs shared by the scanner, the check runner and the CLI.

    Environment variables:
        WSHEALTH_PACKAGE_PREFIX:  package name prefix (default: embeddenator)
        WSHEALTH_MAX_WORKERS:     git/cargo invocations in flight, all checks (default: 4)
        WSHEALTH_COMMAND_TIMEOUT: seconds before a tool invocation is abandoned (default: 900)
        WSHEALTH_SPEC_DIR:        per-package spec directory name (default: specs)
    """

    prefix: str = DEFAULT_PREFIX
    max_workers: int = 4
    command_timeout: float = 900.0
    spec_dir: str = "specs"

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            prefix=os.environ.get("WSHEALTH_PACKAGE_PREFIX", DEFAULT_PREFIX),
            max_workers=max(1, _env_int("WSHEALTH_MAX_WORKERS", 4)),
            command_timeout=_env_float("WSHEALTH_COMMAND_TIMEOUT", 900.0),
            spec_dir=os.environ.get("WSHEALTH_SPEC_DIR", "specs"),
        )

    def override(self, **changes: object) -> Settings:
        """Return a copy with every non-None value in *changes* applied."""
        applied = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **applied)
