"""Assembly of each library's source tree into the merged output directory."""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path
from typing import AbstractSet, Iterable, Optional

from .fileio import atomic_copy, atomic_write_text
from .logging import get_logger
from .rewriter import ImportRewriter

IGNORED_FILE_NAMES = frozenset(
    {
        ".eslintrc.js",
        ".gitignore",
        ".jest.config.js",
        ".jsii",
        ".npmignore",
        "node_modules",
        "package.json",
        "test",
        "tsconfig.json",
        "tsconfig.tsbuildinfo",
        "LICENSE",
        "NOTICE",
    }
)

SOURCE_SUFFIX = ".ts"
_GENERATED_SUFFIX = re.compile(r"\.(d\.ts|js)$")


@dataclass
class AssemblyStats:
    """Counters updated from the event loop thread only."""

    rewritten: int = 0
    copied: int = 0
    skipped: int = 0


def source_counterpart(name: str) -> Optional[str]:
    """Return the ``.ts`` name a generated ``.d.ts``/``.js`` file was compiled from."""
    if not _GENERATED_SUFFIX.search(name):
        return None
    return _GENERATED_SUFFIX.sub(SOURCE_SUFFIX, name)


class SourceTreeAssembler:
    """Mirrors a library directory, rewriting TypeScript sources on the way."""

    def __init__(
        self,
        rewriter: ImportRewriter,
        *,
        extra_ignored: Iterable[str] = (),
    ) -> None:
        self.rewriter = rewriter
        self.ignored: AbstractSet[str] = IGNORED_FILE_NAMES | frozenset(extra_ignored)
        self.stats = AssemblyStats()
        self.logger = get_logger("assembler")

    async def copy_tree(self, source: Path, destination: Path) -> None:
        """Copy ``source`` into ``destination``; sibling entries are handled concurrently."""
        await asyncio.to_thread(destination.mkdir, parents=True, exist_ok=True)
        names = sorted(await asyncio.to_thread(lambda: [entry.name for entry in source.iterdir()]))
        await asyncio.gather(*(self._copy_entry(source, destination, name) for name in names))

    async def _copy_entry(self, source_dir: Path, destination_dir: Path, name: str) -> None:
        if name in self.ignored:
            self.stats.skipped += 1
            return

        counterpart = source_counterpart(name)
        if counterpart is not None and await asyncio.to_thread((source_dir / counterpart).exists):
            self.stats.skipped += 1
            return

        source = source_dir / name
        destination = destination_dir / name

        if await asyncio.to_thread(source.is_dir):
            await self.copy_tree(source, destination)
            return

        if name.endswith(SOURCE_SUFFIX):
            text = (await asyncio.to_thread(source.read_bytes)).decode("utf-8")
            rewritten = self.rewriter.rewrite(text, destination_dir, filename=str(source))
            await asyncio.to_thread(atomic_write_text, destination, rewritten)
            self.stats.rewritten += 1
        else:
            await asyncio.to_thread(atomic_copy, source, destination)
            self.stats.copied += 1


__all__ = ["AssemblyStats", "IGNORED_FILE_NAMES", "SourceTreeAssembler", "source_counterpart"]
