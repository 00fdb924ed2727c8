"""Semantic versions and Cargo-style version requirements.

Only the subset of the Cargo requirement grammar the workspace uses is
understood: caret (bare or ``^``), tilde, exact, plain comparisons, the
``*`` wildcard, bare ``1.*`` / ``1.2.x`` wildcards, and comma-separated
conjunctions of those.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering

from workspace_health.exceptions import ConstraintError, VersionError

_VERSION_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)

# Partial versions are allowed on the right-hand side of a requirement: "1", "1.2".
_PARTIAL_RE = re.compile(
    r"^(\d+)(?:\.(\d+)(?:\.(\d+)(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?)?)?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)

# Bare wildcard requirements: "1.*", "1.2.*", "1.x", "1.2.X".
_WILDCARD_RE = re.compile(r"^(\d+)(?:\.(\d+))?\.[*xX]$")

_OPERATORS = (">=", "<=", ">", "<", "=", "^", "~")


def _identifier_key(ident: str) -> tuple[int, int, str]:
    # Numeric identifiers sort numerically and below alphanumeric ones.
    if ident.isdigit():
        return (0, int(ident), "")
    return (1, 0, ident)


@total_ordering
@dataclass(frozen=True)
class Version:
    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: str = ""

    @classmethod
    def parse(cls, text: str) -> Version:
        m = _VERSION_RE.match(text.strip())
        if not m:
            raise VersionError(f"invalid semantic version: {text!r}")
        major, minor, patch, pre, build = m.groups()
        return cls(
            major=int(major),
            minor=int(minor),
            patch=int(patch),
            prerelease=tuple(pre.split(".")) if pre else (),
            build=build or "",
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def precedence_key(self) -> tuple:
        """Sort key implementing semver precedence (build metadata ignored)."""
        if not self.prerelease:
            # A release sorts after every prerelease of the same triple.
            pre_key: tuple = (1,)
        else:
            pre_key = (0, tuple(_identifier_key(p) for p in self.prerelease))
        return (self.major, self.minor, self.patch, pre_key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.precedence_key() == other.precedence_key()

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.precedence_key() < other.precedence_key()

    def __hash__(self) -> int:
        return hash(self.precedence_key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + self.build
        return text


@dataclass(frozen=True)
class Comparator:
    """One ``op version`` term; missing minor/patch are ``None``."""

    op: str
    major: int
    minor: int | None
    patch: int | None
    prerelease: tuple[str, ...] = ()

    def _floor(self) -> Version:
        return Version(self.major, self.minor or 0, self.patch or 0, self.prerelease)

    def matches(self, version: Version) -> bool:
        floor = self._floor()
        if self.op == "^":
            if version < floor:
                return False
            if self.major != 0:
                return version.major == self.major
            if self.minor is None:
                return version.major == 0
            return version.major == 0 and version.minor == self.minor
        if self.op == "~":
            if version < floor:
                return False
            if self.minor is None:
                return version.major == self.major
            return version.major == self.major and version.minor == self.minor
        if self.op == "=":
            if self.minor is None:
                return version.major == self.major
            if self.patch is None:
                return version.major == self.major and version.minor == self.minor
            return version == floor
        if self.op == ">=":
            return version >= floor
        if self.op == ">":
            return version > floor
        if self.op == "<=":
            return version <= floor
        if self.op == "<":
            return version < floor
        raise ConstraintError(f"unknown operator {self.op!r}")


@dataclass(frozen=True)
class Constraint:
    """A parsed version requirement: every comparator must match."""

    raw: str
    comparators: tuple[Comparator, ...]

    @classmethod
    def parse(cls, text: str) -> Constraint:
        raw = text.strip()
        if not raw:
            raise ConstraintError("empty version requirement")
        if raw == "*":
            return cls(raw=raw, comparators=())
        comparators = tuple(_parse_comparator(part) for part in raw.split(","))
        return cls(raw=raw, comparators=comparators)

    def matches(self, version: Version) -> bool:
        return all(c.matches(version) for c in self.comparators)

    def __str__(self) -> str:
        return self.raw


def _parse_comparator(text: str) -> Comparator:
    term = text.strip()
    op = "^"
    for candidate in _OPERATORS:
        if term.startswith(candidate):
            op = candidate
            term = term[len(candidate):].strip()
            break
    else:
        wildcard = _WILDCARD_RE.match(term)
        if wildcard:
            # "1.*" is "=1", "1.2.x" is "=1.2"
            major, minor = wildcard.groups()
            return Comparator(
                op="=",
                major=int(major),
                minor=int(minor) if minor is not None else None,
                patch=None,
            )
    m = _PARTIAL_RE.match(term)
    if not m:
        raise ConstraintError(f"cannot parse version requirement {text.strip()!r}")
    major, minor, patch, pre = m.groups()
    return Comparator(
        op=op,
        major=int(major),
        minor=int(minor) if minor is not None else None,
        patch=int(patch) if patch is not None else None,
        prerelease=tuple(pre.split(".")) if pre else (),
    )


def satisfies(version: Version | str, constraint: Constraint | str) -> bool:
    """Return True when *version* meets *constraint*.

    Raises ``VersionError`` / ``ConstraintError`` when either side does
    not parse.
    """
    if isinstance(version, str):
        version = Version.parse(version)
    if isinstance(constraint, str):
        constraint = Constraint.parse(constraint)
    return constraint.matches(version)
