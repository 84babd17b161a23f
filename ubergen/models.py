"""Core data models shared across ubergen components."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class Manifest:
    """Read-only view over a parsed package.json document."""

    data: Mapping[str, Any]

    @property
    def name(self) -> str:
        return str(self.data.get("name", ""))

    @property
    def version(self) -> str:
        return str(self.data.get("version", ""))

    @property
    def types(self) -> str:
        return str(self.data.get("types", "lib/index.d.ts"))

    @property
    def private(self) -> bool:
        return bool(self.data.get("private"))

    @property
    def deprecated(self) -> bool:
        return bool(self.data.get("deprecated"))

    @property
    def dependencies(self) -> Dict[str, str]:
        return dict(self.data.get("dependencies") or {})

    @property
    def dev_dependencies(self) -> Dict[str, str]:
        return dict(self.data.get("devDependencies") or {})

    @property
    def bundled_dependencies(self) -> List[str]:
        """Names to embed; ``bundleDependencies`` wins over ``bundledDependencies``."""
        bundled = self.data.get("bundleDependencies")
        if bundled is None:
            bundled = self.data.get("bundledDependencies")
        return list(bundled or [])

    @property
    def jsii(self) -> Optional[Mapping[str, Any]]:
        return self.data.get("jsii")

    @property
    def targets(self) -> Optional[Mapping[str, Any]]:
        jsii = self.jsii
        if not jsii:
            return None
        return jsii.get("targets")


@dataclass(frozen=True)
class LibraryReference:
    """One participating library and where its sources live."""

    manifest: Manifest
    root: Path
    short_name: str

    @property
    def name(self) -> str:
        return self.manifest.name

    def matches(self, specifier: str) -> bool:
        """Return True when a module specifier names this library or a sub-path of it."""
        return specifier == self.name or specifier.startswith(f"{self.name}/")
