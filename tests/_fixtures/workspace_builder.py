"""Helper utilities for constructing a throwaway monorepo in tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, Mapping

from ubergen.config import UbergenConfig, load_config

SCOPE = "@aws-cdk"
UBER_NAME = "aws-cdk-lib"


class WorkspaceBuilder:
    """Writes a workspace with scoped libraries and an uber package under tmp_path.

    Layout mirrors a yarn monorepo::

        repo/package.json                    workspace descriptor
        repo/packages/@aws-cdk/<lib>/...     candidate libraries
        repo/packages/aws-cdk-lib/           the uber package
    """

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "repo"
        self.libraries_root = self.root / "packages" / SCOPE
        self.uber_root = self.root / "packages" / UBER_NAME
        self.libraries_root.mkdir(parents=True)
        self.uber_root.mkdir(parents=True)
        self.write_workspace({"private": True, "workspaces": {"packages": ["packages/*"]}})
        self.write_uber_manifest(
            {
                "name": UBER_NAME,
                "version": "1.0.0",
                "jsii": {
                    "targets": {
                        "dotnet": {"namespace": "Amazon.CDK"},
                        "java": {"package": "software.amazon.awscdk"},
                        "python": {"module": "aws_cdk"},
                    }
                },
                "devDependencies": {},
            }
        )

    def add_library(
        self,
        short_name: str,
        files: Mapping[str, str] | None = None,
        **manifest: Any,
    ) -> Path:
        """Create ``@aws-cdk/<short_name>`` with a manifest and optional source files."""
        directory = self.libraries_root / short_name
        directory.mkdir(parents=True, exist_ok=True)
        payload: dict[str, Any] = {
            "name": f"{SCOPE}/{short_name}",
            "version": "1.0.0",
            "types": "lib/index.d.ts",
            "jsii": {"targets": {}},
        }
        payload.update(manifest)
        _write_json(directory / "package.json", payload)
        self.write(directory, files or {})
        return directory

    def write(self, directory: Path, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries below ``directory``."""
        for relative, content in files.items():
            path = directory / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def write_workspace(self, payload: Mapping[str, Any]) -> None:
        _write_json(self.root / "package.json", payload)

    def write_uber_manifest(self, payload: Mapping[str, Any]) -> None:
        _write_json(self.uber_root / "package.json", payload)

    def workspace(self) -> dict[str, Any]:
        return json.loads((self.root / "package.json").read_text(encoding="utf-8"))

    def uber_manifest(self) -> dict[str, Any]:
        return json.loads((self.uber_root / "package.json").read_text(encoding="utf-8"))

    def write_config(self, text: str) -> None:
        (self.uber_root / ".ubergen.yml").write_text(textwrap.dedent(text), encoding="utf-8")

    def config(self) -> UbergenConfig:
        """Load the uber package config; defaults already point at this layout."""
        return load_config(self.uber_root)

    @property
    def output_root(self) -> Path:
        return self.uber_root / "lib"


def _write_json(path: Path, payload: Mapping[str, Any]) -> None:
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


__all__ = ["SCOPE", "UBER_NAME", "WorkspaceBuilder"]
