"""Discovery of the libraries that take part in the uber-package."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from .fileio import read_json
from .logging import get_logger
from .models import LibraryReference, Manifest

MANIFEST_FILENAME = "package.json"


def skip_reason(manifest: Manifest) -> Optional[str]:
    """Return why a library does not participate, or None when it does."""
    if manifest.private:
        return "private"
    if manifest.deprecated:
        return "deprecated"
    if manifest.jsii is None:
        return "not jsii-enabled"
    return None


def short_name_for(name: str, scope: str) -> str:
    if scope and name.startswith(scope):
        return name[len(scope):]
    if name.startswith("@") and "/" in name:
        return name.split("/", 1)[1]
    return name


class LibraryDiscovery:
    """Walks the candidate root and keeps the libraries eligible for merging."""

    def __init__(self, libraries_root: Path, scope: str = "@aws-cdk/") -> None:
        self.libraries_root = libraries_root
        self.scope = scope
        self.skipped: List[Tuple[str, str]] = []
        self.logger = get_logger("discovery")

    def discover(self) -> List[LibraryReference]:
        """Return participating libraries in sorted directory order."""
        self.logger.info("Discovering libraries that need packaging...")
        root = self.libraries_root
        if not root.exists():
            raise FileNotFoundError(f"Libraries root not found: {root}")
        if not root.is_dir():
            raise NotADirectoryError(f"Libraries root is not a directory: {root}")

        self.skipped = []
        result: List[LibraryReference] = []
        for directory in sorted(path for path in root.iterdir() if path.is_dir()):
            manifest_path = directory / MANIFEST_FILENAME
            if not manifest_path.is_file():
                self._skip(directory.name, "no package.json")
                continue

            manifest = Manifest(read_json(manifest_path))
            reason = skip_reason(manifest)
            if reason is not None:
                self._skip(manifest.name or directory.name, reason)
                continue

            result.append(
                LibraryReference(
                    manifest=manifest,
                    root=directory,
                    short_name=short_name_for(manifest.name, self.scope),
                )
            )

        self.logger.info("Found %d relevant packages!", len(result))
        return result

    def _skip(self, name: str, reason: str) -> None:
        self.skipped.append((name, reason))
        self.logger.info("Skipping (%s): %s", reason, name)


__all__ = ["LibraryDiscovery", "MANIFEST_FILENAME", "short_name_for", "skip_reason"]
