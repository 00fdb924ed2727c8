"""Tests for the workspace scanner and Cargo.toml parsing."""

from __future__ import annotations

import pytest

from conftest import write_package
from workspace_health.exceptions import ScanError
from workspace_health.scanner import WorkspaceScanner, find_workspace_root, load_manifest


class TestLoadManifest:
    def test_merges_dependency_sections(self, tmp_path):
        path = tmp_path / "Cargo.toml"
        path.write_text(
            '[package]\nname = "x"\nversion = "1.0.0"\n\n'
            '[dependencies]\na = "1.0"\nb = { version = "2.0", features = ["f"] }\n'
            'c = { path = "../c" }\n\n'
            '[dev-dependencies]\nd = "0.1"\na = "9.9"\n\n'
            '[build-dependencies]\ne = { git = "https://example.com/e" }\n'
        )
        m = load_manifest(path)
        assert m.name == "x"
        assert m.version == "1.0.0"
        # path/git-only entries carry no requirement; first section wins
        assert m.dependencies == {"a": "1.0", "b": "2.0", "d": "0.1"}

    def test_workspace_inherited_version_is_none(self, tmp_path):
        path = tmp_path / "Cargo.toml"
        path.write_text('[package]\nname = "x"\nversion.workspace = true\n')
        assert load_manifest(path).version is None

    def test_virtual_manifest(self, tmp_path):
        path = tmp_path / "Cargo.toml"
        path.write_text('[workspace]\nmembers = ["a"]\n')
        m = load_manifest(path)
        assert not m.has_package_table
        assert m.name is None


class TestWorkspaceScanner:
    def test_builds_sorted_snapshot(self, workspace):
        snapshot = WorkspaceScanner(workspace).scan()
        assert snapshot.names() == ["embeddenator-core", "embeddenator-io"]
        io = snapshot.get("embeddenator-io")
        assert str(io.version) == "0.20.0-alpha.1"
        assert io.path == workspace / "embeddenator-io"

    def test_keeps_only_workspace_dependencies(self, workspace):
        io = WorkspaceScanner(workspace).scan().get("embeddenator-io")
        assert dict(io.dependencies) == {"embeddenator-core": "0.20.0-alpha.1"}

    def test_package_name_prefix_outside_prefixed_dir(self, tmp_path):
        write_package(tmp_path, "pkg1", "embeddenator-pkg1", "1.0.0")
        write_package(tmp_path, "third-party", "serde", "1.0.0")
        assert WorkspaceScanner(tmp_path).scan().names() == ["embeddenator-pkg1"]

    def test_skips_target_and_nested_crates(self, tmp_path):
        write_package(tmp_path, "embeddenator", "embeddenator", "1.0.0")
        write_package(tmp_path, "embeddenator/crates/inner", "embeddenator-inner", "1.0.0")
        write_package(tmp_path, "embeddenator/target/pkg", "embeddenator-built", "1.0.0")
        assert WorkspaceScanner(tmp_path).scan().names() == ["embeddenator"]

    def test_virtual_manifest_in_prefixed_dir_is_skipped(self, tmp_path):
        (tmp_path / "embeddenator").mkdir()
        (tmp_path / "embeddenator" / "Cargo.toml").write_text('[workspace]\nmembers = []\n')
        assert len(WorkspaceScanner(tmp_path).scan()) == 0

    def test_custom_prefix(self, tmp_path):
        write_package(tmp_path, "acme-a", "acme-a", "1.0.0")
        write_package(tmp_path, "embeddenator-b", "embeddenator-b", "1.0.0")
        assert WorkspaceScanner(tmp_path, prefix="acme").scan().names() == ["acme-a"]

    def test_finds_repositories(self, workspace):
        (workspace / "embeddenator-core" / ".git").mkdir()
        (workspace / ".git").mkdir()
        snapshot = WorkspaceScanner(workspace).scan()
        assert snapshot.repositories == (workspace, workspace / "embeddenator-core")

    def test_empty_workspace_is_valid(self, tmp_path):
        snapshot = WorkspaceScanner(tmp_path).scan()
        assert len(snapshot) == 0
        assert snapshot.repositories == ()


class TestScanErrors:
    def test_missing_root(self, tmp_path):
        with pytest.raises(ScanError) as exc:
            WorkspaceScanner(tmp_path / "nope").scan()
        assert exc.value.kind == ScanError.UNREADABLE_ROOT

    def test_missing_version(self, tmp_path):
        write_package(tmp_path, "embeddenator-a", "embeddenator-a", None)
        with pytest.raises(ScanError) as exc:
            WorkspaceScanner(tmp_path).scan()
        assert exc.value.kind == ScanError.MALFORMED_MANIFEST
        assert "package.version" in str(exc.value)

    def test_missing_name(self, tmp_path):
        write_package(tmp_path, "embeddenator-a", None, "1.0.0")
        with pytest.raises(ScanError) as exc:
            WorkspaceScanner(tmp_path).scan()
        assert exc.value.kind == ScanError.MALFORMED_MANIFEST

    def test_invalid_semver(self, tmp_path):
        write_package(tmp_path, "embeddenator-a", "embeddenator-a", "1.0")
        with pytest.raises(ScanError) as exc:
            WorkspaceScanner(tmp_path).scan()
        assert exc.value.kind == ScanError.MALFORMED_MANIFEST

    def test_invalid_toml(self, tmp_path):
        pkg = tmp_path / "embeddenator-a"
        pkg.mkdir()
        (pkg / "Cargo.toml").write_text("[package\nname = ")
        with pytest.raises(ScanError) as exc:
            WorkspaceScanner(tmp_path).scan()
        assert exc.value.kind == ScanError.MALFORMED_MANIFEST

    def test_invalid_toml_outside_workspace_is_ignored(self, tmp_path):
        other = tmp_path / "vendor"
        other.mkdir()
        (other / "Cargo.toml").write_text("not toml = = =")
        write_package(tmp_path, "embeddenator-a", "embeddenator-a", "1.0.0")
        assert WorkspaceScanner(tmp_path).scan().names() == ["embeddenator-a"]

    def test_duplicate_name(self, tmp_path):
        write_package(tmp_path, "embeddenator-a", "embeddenator-a", "1.0.0")
        write_package(tmp_path, "embeddenator-a-copy", "embeddenator-a", "1.0.0")
        with pytest.raises(ScanError) as exc:
            WorkspaceScanner(tmp_path).scan()
        assert exc.value.kind == ScanError.DUPLICATE_NAME


class TestFindWorkspaceRoot:
    def test_marker_script(self, tmp_path):
        (tmp_path / "update_all.sh").write_text("#!/bin/sh\n")
        nested = tmp_path / "embeddenator-a" / "src"
        nested.mkdir(parents=True)
        assert find_workspace_root(nested) == tmp_path.resolve()

    def test_prefix_directory(self, tmp_path):
        (tmp_path / "embeddenator").mkdir()
        assert find_workspace_root(tmp_path) == tmp_path.resolve()

    def test_not_found(self, tmp_path):
        assert find_workspace_root(tmp_path, prefix="no-such-prefix-xyz") is None
