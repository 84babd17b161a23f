"""Tree-sitter powered rewriting of cross-library module specifiers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Iterator, List, Optional, Sequence

from tree_sitter import Language, Node, Parser
import tree_sitter_typescript

from .errors import SourceParseError
from .logging import get_logger
from .models import LibraryReference

TYPESCRIPT_LANGUAGE = Language(tree_sitter_typescript.language_typescript())

# Statements whose ``source`` field names a module.
_SOURCE_STATEMENTS = {"import_statement", "export_statement"}
_REQUIRE_CLAUSE = "import_require_clause"

REWRITE_NOTE = "Automatically re-written from"


@dataclass(frozen=True)
class _Edit:
    start: int
    end: int
    replacement: bytes


@dataclass(frozen=True)
class ModuleReference:
    """A string literal naming a module, and the statement it belongs to."""

    literal: Node
    statement: Node


class ImportRewriter:
    """Points references to participating libraries at their place in the merged tree."""

    def __init__(
        self,
        libraries: Sequence[LibraryReference],
        output_root: Path,
        *,
        strict: bool = False,
    ) -> None:
        self.libraries = list(libraries)
        self.output_root = output_root
        self.strict = strict
        self._parser = Parser(TYPESCRIPT_LANGUAGE)
        self.logger = get_logger("rewriter")

    def resolve(self, specifier: str, target_dir: Path) -> Optional[str]:
        """Return the relative specifier replacing ``specifier``, or None to leave it alone."""
        library = next((lib for lib in self.libraries if lib.matches(specifier)), None)
        if library is None:
            return None

        library_root = self.output_root / library.short_name
        if specifier == library.name:
            imported = library_root / "index"
        else:
            imported = library_root / specifier[len(library.name) + 1:]

        relative = PurePath(os.path.relpath(imported, target_dir)).as_posix()
        if not relative.startswith("."):
            relative = f"./{relative}"
        return relative

    def rewrite(self, source: str, target_dir: Path, *, filename: str = "<source>") -> str:
        """Return ``source`` with every matching module specifier rewritten."""
        source_bytes = source.encode("utf-8")
        tree = self._parser.parse(source_bytes)
        if tree.root_node.has_error:
            if self.strict:
                raise SourceParseError(f"Failed to parse {filename}")
            self.logger.warning("Syntax errors in %s; imports inside them are left as-is", filename)

        edits: List[_Edit] = []
        for reference in iter_module_references(tree.root_node):
            original = _node_text(reference.literal, source_bytes)
            specifier = original[1:-1]
            replacement = self.resolve(specifier, target_dir)
            if replacement is None:
                continue
            quote = original[0]
            self.logger.debug("%s: %s -> %s", filename, specifier, replacement)
            edits.append(
                _Edit(
                    reference.literal.start_byte,
                    reference.literal.end_byte,
                    f"{quote}{replacement}{quote}".encode("utf-8"),
                )
            )
            end = reference.statement.end_byte
            edits.append(_Edit(end, end, _note(original, source_bytes, end).encode("utf-8")))

        if not edits:
            return source

        result = bytearray(source_bytes)
        for edit in sorted(edits, key=lambda item: (item.start, item.end), reverse=True):
            result[edit.start:edit.end] = edit.replacement
        return result.decode("utf-8")


def iter_module_references(root: Node) -> Iterator[ModuleReference]:
    """Yield module-naming string literals in document order, skipping error subtrees."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR":
            continue
        if node.type in _SOURCE_STATEMENTS:
            literal = node.child_by_field_name("source")
            if literal is not None and literal.type == "string":
                yield ModuleReference(literal=literal, statement=node)
                continue
            if node.type == "export_statement":
                reference = _exported_require(node)
                if reference is not None:
                    yield reference
                    continue
        elif node.type == _REQUIRE_CLAUSE:
            literal = node.child_by_field_name("source")
            if literal is not None and node.parent is not None:
                yield ModuleReference(literal=literal, statement=node.parent)
            continue
        stack.extend(reversed(node.children))


def _exported_require(statement: Node) -> Optional[ModuleReference]:
    """Recover the literal of ``export import x = require('...')``.

    The grammar reads this form as an ``import_alias`` of ``require`` whose
    ``;`` is missing, followed by a parenthesized string.
    """
    alias = next((child for child in statement.named_children if child.type == "import_alias"), None)
    if alias is None or not alias.named_children:
        return None
    if alias.named_children[-1].text != b"require":
        return None

    for candidate in (alias.next_named_sibling, statement.next_named_sibling):
        if candidate is None:
            continue
        container = candidate
        if candidate.type in ("expression_statement", "ERROR") and candidate.named_children:
            candidate = candidate.named_children[0]
        if candidate.type != "parenthesized_expression":
            continue
        inner = candidate.named_children
        if len(inner) != 1 or inner[0].type != "string":
            continue
        owner = statement if container.parent == statement else container
        return ModuleReference(literal=inner[0], statement=owner)
    return None


def _note(original: str, source_bytes: bytes, position: int) -> str:
    line_end = source_bytes.find(b"\n", position)
    rest = source_bytes[position:] if line_end == -1 else source_bytes[position:line_end]
    if rest.strip():
        return f" /* {REWRITE_NOTE} {original} */"
    return f" // {REWRITE_NOTE} {original}"


def _node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8")


__all__ = ["ImportRewriter", "ModuleReference", "REWRITE_NOTE", "iter_module_references"]
