"""Cargo-backed test runner and documentation builder."""

from __future__ import annotations

from pathlib import Path

from workspace_health.checks.collaborators import DocResult, TestRunResult
from workspace_health.checks.process import run_process


def summarize_test_failure(stderr: str, stdout: str = "") -> str | None:
    """Keep the lines of cargo's output that say what failed."""
    lines = [
        line.strip()
        for line in (stdout + "\n" + stderr).splitlines()
        if "test result:" in line or "FAILED" in line or line.startswith("error")
    ]
    return "\n".join(lines) if lines else None


def count_doc_warnings(stderr: str) -> int:
    return sum(
        1 for line in stderr.splitlines() if "warning:" in line or "missing documentation" in line
    )


class CargoTestRunner:
    """``cargo test`` for one package."""

    def __init__(self, timeout: float | None = 900.0) -> None:
        self.timeout = timeout

    async def run(self, package_path: Path) -> TestRunResult:
        result = await run_process(
            [
                "cargo",
                "test",
                "--manifest-path",
                str(package_path / "Cargo.toml"),
                "--all-features",
                "--",
                "--test-threads=1",
                "--quiet",
            ],
            cwd=package_path,
            timeout=self.timeout,
        )
        if result.ok:
            return TestRunResult(passed=True)
        return TestRunResult(
            passed=False,
            failure_detail=summarize_test_failure(result.stderr, result.stdout),
        )


class CargoDocBuilder:
    """``cargo rustdoc`` with warnings denied, counting what it complains about."""

    def __init__(self, timeout: float | None = 900.0) -> None:
        self.timeout = timeout

    async def build(self, package_path: Path) -> DocResult:
        result = await run_process(
            [
                "cargo",
                "rustdoc",
                "--manifest-path",
                str(package_path / "Cargo.toml"),
                "--",
                "-D",
                "warnings",
                "--document-private-items",
            ],
            cwd=package_path,
            timeout=self.timeout,
        )
        if result.ok:
            return DocResult(warning_count=0)
        # -D warnings turns the first warning into an error; count at least one.
        return DocResult(warning_count=max(1, count_doc_warnings(result.stderr)))
