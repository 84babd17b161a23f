"""Rendering of the synthetic entry points, root shims and aggregate index."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from ..fileio import atomic_write_text, write_json
from ..models import LibraryReference
from ..targets import TARGET_CONFIG_FILENAME

INDEX_FILENAME = "index.ts"

_TYPES_SUFFIX = re.compile(r"(/index)?(\.d)?\.ts$")
_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9_$]")


@dataclass(frozen=True)
class IndexEntry:
    short_name: str
    alias: str
    flat: bool


def namespace_alias(short_name: str) -> str:
    """Return an identifier-safe namespace for a library's short name."""
    return _NON_IDENTIFIER.sub("_", short_name)


def entry_module_path(types: str) -> str:
    """Strip ``/index`` and ``.d.ts``/``.ts`` from a manifest ``types`` path."""
    return _TYPES_SUFFIX.sub("", types)


class IndexEmitter:
    """Writes the generated TypeScript glue around the assembled libraries."""

    def __init__(self, output_root: Path, templates_dir: Path | None = None) -> None:
        self.output_root = output_root
        self._env = self._create_env(templates_dir)

    def render_entrypoint(self, library: LibraryReference) -> str:
        return self._render(
            "entrypoint.ts.j2", module_path=entry_module_path(library.manifest.types)
        )

    def render_shim(self, library: LibraryReference) -> str:
        return self._render(
            "shim.ts.j2", output_dir=self.output_root.name, short_name=library.short_name
        )

    def render_index(self, libraries: Sequence[LibraryReference], root_library: str) -> str:
        entries = [
            IndexEntry(
                short_name=library.short_name,
                alias=namespace_alias(library.short_name),
                flat=library.short_name == root_library,
            )
            for library in libraries
        ]
        return self._render("index.ts.j2", entries=entries)

    def write_entrypoint(self, library: LibraryReference) -> Path:
        path = self.output_root / library.short_name / INDEX_FILENAME
        atomic_write_text(path, self.render_entrypoint(library))
        return path

    def write_shim(self, library: LibraryReference) -> Path:
        path = self.output_root.parent / f"{library.short_name}.ts"
        atomic_write_text(path, self.render_shim(library))
        return path

    def write_target_config(
        self, library: LibraryReference, targets: Optional[Mapping[str, Any]]
    ) -> Path:
        path = self.output_root / library.short_name / TARGET_CONFIG_FILENAME
        payload: Dict[str, Any] = {}
        if targets is not None:
            payload["targets"] = targets
        write_json(path, payload)
        return path

    def write_index(self, libraries: Sequence[LibraryReference], root_library: str) -> Path:
        path = self.output_root / INDEX_FILENAME
        atomic_write_text(path, self.render_index(libraries, root_library))
        return path

    def _render(self, template_name: str, **context: Any) -> str:
        return self._env.get_template(template_name).render(**context)

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        loader = FileSystemLoader(directories)
        return Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )


__all__ = ["INDEX_FILENAME", "IndexEmitter", "entry_module_path", "namespace_alias"]
