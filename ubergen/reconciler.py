"""Dependency reconciliation between libraries, the uber manifest and the workspace.

Planning is pure: :meth:`DependencyReconciler.plan` inspects the documents and
returns the corrections they need. Applying a correction set yields a new
document, leaving persistence (and the decision to abort) to the caller.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from .errors import DependencyConflictError
from .logging import get_logger
from .models import LibraryReference

WILDCARD_VERSION = "*"


@dataclass
class ManifestCorrections:
    """Edits the uber-package manifest needs before assembly can proceed."""

    dev_dependencies: Dict[str, str] = field(default_factory=dict)
    bundled_additions: List[str] = field(default_factory=list)
    dependencies: Dict[str, str] = field(default_factory=dict)
    pruned: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.dev_dependencies or self.bundled_additions or self.dependencies or self.pruned)


@dataclass
class WorkspaceCorrections:
    """No-hoist entries missing from the workspace descriptor."""

    nohoist: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.nohoist)


@dataclass
class ReconcilePlan:
    to_bundle: Dict[str, str]
    manifest: ManifestCorrections
    workspace: WorkspaceCorrections

    @property
    def manifest_changed(self) -> bool:
        return bool(self.manifest)

    @property
    def workspace_changed(self) -> bool:
        return bool(self.workspace)


def sort_mapping(mapping: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: mapping[key] for key in sorted(mapping)}


class DependencyReconciler:
    """Checks that the uber manifest and workspace agree with the participating libraries."""

    def __init__(self) -> None:
        self.logger = get_logger("reconciler")

    def collect_bundled(self, libraries: Iterable[LibraryReference]) -> Dict[str, str]:
        """Aggregate every library's bundled dependencies into one name -> range map."""
        to_bundle: Dict[str, str] = {}
        for library in libraries:
            manifest = library.manifest
            dev = manifest.dev_dependencies
            runtime = manifest.dependencies
            for dep_name in manifest.bundled_dependencies:
                required = dev.get(dep_name)
                if required is None:
                    required = runtime.get(dep_name, WILDCARD_VERSION)
                existing = to_bundle.get(dep_name)
                if existing is not None and existing != required:
                    raise DependencyConflictError(dep_name, existing, required)
                to_bundle[dep_name] = required
        return to_bundle

    def plan(
        self,
        libraries: Sequence[LibraryReference],
        uber_manifest: Mapping[str, Any],
        workspace: Mapping[str, Any],
    ) -> ReconcilePlan:
        """Compute the corrections needed; raises on conflicting bundled versions."""
        self.logger.info("Verifying dependencies are complete...")
        to_bundle = self.collect_bundled(libraries)
        manifest_fix = ManifestCorrections()
        workspace_fix = WorkspaceCorrections()

        dev_dependencies = uber_manifest.get("devDependencies") or {}
        for library in libraries:
            expected = library.manifest.version
            if library.name not in dev_dependencies:
                self.logger.warning("Missing dependency: %s", library.name)
                manifest_fix.dev_dependencies[library.name] = expected
            elif dev_dependencies[library.name] != expected:
                self.logger.warning(
                    "Incorrect dependency: %s (expected %s, found %s)",
                    library.name,
                    expected,
                    dev_dependencies[library.name],
                )
                manifest_fix.dev_dependencies[library.name] = expected

        uber_name = str(uber_manifest.get("name", ""))
        nohoist = set(_nohoist_entries(workspace))
        bundled = list(uber_manifest.get("bundledDependencies") or [])
        dependencies = uber_manifest.get("dependencies") or {}

        for name, version in to_bundle.items():
            entry = f"{uber_name}/{name}"
            if entry not in nohoist:
                self.logger.warning("Missing yarn workspace nohoist: %s", entry)
                workspace_fix.nohoist.extend([entry, f"{entry}/**"])

            if name not in bundled:
                self.logger.warning("Missing bundled dependency: %s at %s", name, version)
                manifest_fix.bundled_additions.append(name)

            if dependencies.get(name) != version:
                self.logger.warning("Missing or incorrect dependency: %s at %s", name, version)
                manifest_fix.dependencies[name] = version

        manifest_fix.pruned = [name for name in bundled if name not in to_bundle]
        for name in manifest_fix.pruned:
            self.logger.warning("Spurious bundled dependency: %s", name)

        return ReconcilePlan(to_bundle=to_bundle, manifest=manifest_fix, workspace=workspace_fix)


def apply_manifest_corrections(
    uber_manifest: Mapping[str, Any], corrections: ManifestCorrections
) -> Dict[str, Any]:
    """Return a corrected copy of the uber manifest."""
    result = copy.deepcopy(dict(uber_manifest))

    if corrections.dev_dependencies:
        dev = dict(result.get("devDependencies") or {})
        dev.update(corrections.dev_dependencies)
        result["devDependencies"] = sort_mapping(dev)

    if corrections.bundled_additions:
        bundled = list(result.get("bundledDependencies") or [])
        bundled.extend(name for name in corrections.bundled_additions if name not in bundled)
        result["bundledDependencies"] = sorted(bundled)

    if corrections.dependencies:
        deps = dict(result.get("dependencies") or {})
        deps.update(corrections.dependencies)
        result["dependencies"] = sort_mapping(deps)

    if corrections.pruned:
        pruned = set(corrections.pruned)
        if "bundledDependencies" in result:
            result["bundledDependencies"] = [
                name for name in result["bundledDependencies"] if name not in pruned
            ]
        deps = result.get("dependencies")
        if isinstance(deps, dict):
            for name in pruned:
                deps.pop(name, None)

    return result


def apply_workspace_corrections(
    workspace: Mapping[str, Any], corrections: WorkspaceCorrections
) -> Dict[str, Any]:
    """Return a copy of the workspace descriptor with the missing no-hoist entries added."""
    result = copy.deepcopy(dict(workspace))
    if not corrections:
        return result
    workspaces = result.get("workspaces")
    if isinstance(workspaces, list):
        workspaces = {"packages": workspaces}
    elif not isinstance(workspaces, dict):
        workspaces = {}
    workspaces["nohoist"] = sorted(set(workspaces.get("nohoist") or []) | set(corrections.nohoist))
    result["workspaces"] = workspaces
    return result


def _nohoist_entries(workspace: Mapping[str, Any]) -> List[str]:
    workspaces = workspace.get("workspaces")
    if isinstance(workspaces, dict):
        return list(workspaces.get("nohoist") or [])
    return []


__all__ = [
    "DependencyReconciler",
    "ManifestCorrections",
    "ReconcilePlan",
    "WorkspaceCorrections",
    "apply_manifest_corrections",
    "apply_workspace_corrections",
    "sort_mapping",
]
