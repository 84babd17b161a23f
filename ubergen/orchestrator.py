"""Pipeline orchestration for the verify and build flows."""

from __future__ import annotations

import asyncio
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .assembler import AssemblyStats, SourceTreeAssembler
from .config import UbergenConfig
from .discovery import LibraryDiscovery
from .emit import IndexEmitter
from .errors import ManifestCorrectedError
from .fileio import read_json, write_json
from .logging import get_logger
from .models import LibraryReference, Manifest
from .reconciler import (
    DependencyReconciler,
    ReconcilePlan,
    apply_manifest_corrections,
    apply_workspace_corrections,
)
from .rewriter import ImportRewriter
from .targets import translate_targets


@dataclass
class VerifyOutcome:
    """Libraries found and the reconciliation plan that was checked."""

    libraries: List[LibraryReference]
    manifest: Dict[str, Any]
    plan: ReconcilePlan


@dataclass
class BuildOutcome:
    """Result of a full assembly run."""

    libraries: List[LibraryReference]
    output_root: Path
    stats: AssemblyStats


class Orchestrator:
    """Coordinates discovery, reconciliation and assembly of the uber-package."""

    def __init__(
        self,
        config: UbergenConfig,
        discovery: LibraryDiscovery | None = None,
        reconciler: DependencyReconciler | None = None,
        emitter: IndexEmitter | None = None,
    ) -> None:
        self.config = config
        self.discovery = discovery or LibraryDiscovery(config.libraries_root, config.scope)
        self.reconciler = reconciler or DependencyReconciler()
        self.emitter = emitter or IndexEmitter(config.output_dir)
        self.logger = get_logger("orchestrator")

    def run_verify(self) -> VerifyOutcome:
        """Discover libraries and make sure the manifests agree with them.

        A corrected workspace descriptor is written and the run continues. A
        corrected uber manifest is written and :class:`ManifestCorrectedError`
        is raised so the next run starts from the verified file.
        """
        libraries = self.discovery.discover()
        manifest = read_json(self.config.manifest_path)
        workspace = read_json(self.config.workspace_path)

        plan = self.reconciler.plan(libraries, manifest, workspace)

        if plan.workspace_changed:
            write_json(
                self.config.workspace_path,
                apply_workspace_corrections(workspace, plan.workspace),
            )
            self.logger.info(
                "Updated the yarn workspace configuration. Re-run \"yarn install\", and commit the changes."
            )

        if plan.manifest_changed:
            write_json(
                self.config.manifest_path,
                apply_manifest_corrections(manifest, plan.manifest),
            )
            raise ManifestCorrectedError(
                "Fixed dependency inconsistencies. Commit the updated package.json file."
            )

        self.logger.info("Dependencies are correct!")
        return VerifyOutcome(libraries=libraries, manifest=manifest, plan=plan)

    def run_build(self) -> BuildOutcome:
        """Run the whole pipeline and return what was assembled."""
        verified = self.run_verify()
        stats = asyncio.run(self.prepare_source_files(verified.libraries, verified.manifest))
        return BuildOutcome(
            libraries=verified.libraries,
            output_root=self.config.output_dir,
            stats=stats,
        )

    async def prepare_source_files(
        self, libraries: Sequence[LibraryReference], manifest: Mapping[str, Any]
    ) -> AssemblyStats:
        self.logger.info("Preparing source files...")
        output_root = self.config.output_dir
        if output_root.exists():
            await asyncio.to_thread(shutil.rmtree, output_root)

        rewriter = ImportRewriter(libraries, output_root, strict=self.config.strict_parse)
        assembler = SourceTreeAssembler(rewriter, extra_ignored=self.config.ignore)
        uber_targets = _targets_of(manifest)

        for library in libraries:
            await self.assemble_library(library, assembler, uber_targets)

        self.emitter.write_index(libraries, self.config.root_library)
        self.logger.info(
            "Success! %d files rewritten, %d copied, %d skipped",
            assembler.stats.rewritten,
            assembler.stats.copied,
            assembler.stats.skipped,
        )
        return assembler.stats

    async def assemble_library(
        self,
        library: LibraryReference,
        assembler: SourceTreeAssembler,
        uber_targets: Optional[Mapping[str, Any]],
    ) -> None:
        destination = self.config.output_dir / library.short_name
        self.logger.debug("Assembling %s into %s", library.name, destination)
        await assembler.copy_tree(library.root, destination)
        self.emitter.write_entrypoint(library)

        if library.short_name == self.config.root_library:
            return

        targets = translate_targets(
            uber_targets,
            library.manifest.targets,
            python_module_prefix=self.config.python_module_prefix,
        )
        self.emitter.write_target_config(library, targets)
        self.emitter.write_shim(library)


def _targets_of(manifest: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    return Manifest(manifest).targets


__all__ = ["BuildOutcome", "Orchestrator", "VerifyOutcome"]
