"""Tests for ubergen.discovery."""

from __future__ import annotations

import pytest

from ubergen.discovery import LibraryDiscovery, short_name_for


def test_discover_keeps_only_participating_libraries(workspace) -> None:
    workspace.add_library("core")
    workspace.add_library("aws-s3")
    workspace.add_library("secret", private=True)
    workspace.add_library("old", deprecated=True)
    workspace.add_library("plain")
    (workspace.libraries_root / "plain" / "package.json").write_text(
        '{"name": "@aws-cdk/plain", "version": "1.0.0"}\n', encoding="utf-8"
    )
    (workspace.libraries_root / "empty-dir").mkdir()

    discovery = LibraryDiscovery(workspace.libraries_root)
    libraries = discovery.discover()

    assert [lib.short_name for lib in libraries] == ["aws-s3", "core"]
    assert [lib.name for lib in libraries] == ["@aws-cdk/aws-s3", "@aws-cdk/core"]
    assert libraries[1].root == workspace.libraries_root / "core"
    assert dict(discovery.skipped) == {
        "@aws-cdk/secret": "private",
        "@aws-cdk/old": "deprecated",
        "@aws-cdk/plain": "not jsii-enabled",
        "empty-dir": "no package.json",
    }


def test_discover_is_deterministic(workspace) -> None:
    for name in ("zeta", "alpha", "mid"):
        workspace.add_library(name)

    first = LibraryDiscovery(workspace.libraries_root).discover()
    second = LibraryDiscovery(workspace.libraries_root).discover()

    assert [lib.short_name for lib in first] == ["alpha", "mid", "zeta"]
    assert first == second


def test_discover_rejects_missing_root(tmp_path) -> None:
    missing = tmp_path / "missing"
    with pytest.raises(FileNotFoundError, match="missing"):
        LibraryDiscovery(missing).discover()


def test_short_name_strips_scope() -> None:
    assert short_name_for("@aws-cdk/aws-ec2", "@aws-cdk/") == "aws-ec2"
    assert short_name_for("@other/thing", "@aws-cdk/") == "thing"
    assert short_name_for("unscoped", "@aws-cdk/") == "unscoped"
