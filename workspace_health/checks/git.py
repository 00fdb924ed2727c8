"""Git status collaborator backed by the ``git`` CLI."""

from __future__ import annotations

import re
from pathlib import Path

from workspace_health.checks.collaborators import GitStatus
from workspace_health.checks.process import run_process
from workspace_health.exceptions import CollaboratorError

# "## main...origin/main [ahead 1, behind 2]"
_BRANCH_RE = re.compile(
    r"^## (?P<branch>.+?)(?:\.\.\.(?P<upstream>\S+))?(?: \[(?P<track>[^\]]*)\])?$"
)
_AHEAD_RE = re.compile(r"ahead (\d+)")
_BEHIND_RE = re.compile(r"behind (\d+)")


def parse_porcelain(repo_path: Path, output: str) -> GitStatus:
    """Parse ``git status --porcelain=v1 --branch`` output."""
    lines = [line for line in output.splitlines() if line.strip()]
    if not lines or not lines[0].startswith("## "):
        raise CollaboratorError("git", f"unexpected status output for {repo_path}")

    header = lines[0]
    branch = "(detached)"
    has_upstream = False
    ahead = behind = 0

    if header.startswith("## No commits yet on "):
        branch = header[len("## No commits yet on "):].strip()
    elif header.startswith("## HEAD (no branch)"):
        branch = "(detached)"
    else:
        m = _BRANCH_RE.match(header)
        if m is None:
            raise CollaboratorError("git", f"cannot parse branch line {header!r}")
        branch = m.group("branch")
        track = m.group("track") or ""
        # "[gone]" means the configured upstream was deleted
        has_upstream = m.group("upstream") is not None and track != "gone"
        if a := _AHEAD_RE.search(track):
            ahead = int(a.group(1))
        if b := _BEHIND_RE.search(track):
            behind = int(b.group(1))

    dirty_files = tuple(line[3:] for line in lines[1:])
    return GitStatus(
        repo_path=repo_path,
        branch=branch,
        is_dirty=bool(dirty_files),
        ahead=ahead,
        behind=behind,
        has_upstream=has_upstream,
        dirty_files=dirty_files,
    )


class GitCliStatusProvider:
    """Ask ``git status`` for branch, upstream and working-tree state."""

    def __init__(self, timeout: float | None = 60.0) -> None:
        self.timeout = timeout

    async def status(self, repo_path: Path) -> GitStatus:
        result = await run_process(
            ["git", "-C", str(repo_path), "status", "--porcelain=v1", "--branch"],
            timeout=self.timeout,
        )
        if not result.ok:
            raise CollaboratorError(
                "git",
                f"git status failed (exit {result.returncode}): {result.stderr.strip()}",
            )
        return parse_porcelain(repo_path, result.stdout)
