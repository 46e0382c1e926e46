"""
Adapter protocol and tree-sitter node helpers shared by every language.

Adapters share the declaration model and these node utilities, never their
traversal logic: each grammar is walked by its own module.
"""

import logging
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Tuple, TypeVar, runtime_checkable

from tree_sitter import Node, Tree

from codemap.models import Declaration, Enum, ExtractOptions, Function, Import, Language, Location, Struct

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Exceptions a single malformed declaration may raise while being read.
# Anything else is a programming error and propagates.
DECLARATION_ERRORS: Tuple[type, ...] = (AttributeError, IndexError, KeyError, TypeError, ValueError)


@runtime_checkable
class LanguageAdapter(Protocol):
    """Capability every per-language extractor implements.

    Adapters capture every declaration regardless of visibility; reducing a
    codemap to its public view is done by the caller.
    """

    languages: Tuple[Language, ...]

    def extract_imports(self, tree: Tree, source: bytes) -> List[Import]:
        """Return the file's imports in source order."""
        ...

    def extract_declarations(
        self, tree: Tree, source: bytes, options: ExtractOptions
    ) -> List[Declaration]:
        """Return top-level declarations in source order."""
        ...


def node_text(node: Optional[Node], source: bytes) -> str:
    """Get the text content of a node, or "" for None."""
    if node is None:
        return ""
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def location_of(node: Node) -> Location:
    """1-indexed inclusive line span of a node.

    A node ending at column 0 stops on the previous line; the newline it
    swallowed does not start a new line of the declaration.
    """
    start = node.start_point.row + 1
    end_row, end_column = node.end_point
    if end_column == 0 and end_row > node.start_point.row:
        end_row -= 1
    return Location(start, max(start, end_row + 1))


def find_child_by_type(node: Node, child_type: str) -> Optional[Node]:
    """Find the first direct child of a specific type."""
    for child in node.children:
        if child.type == child_type:
            return child
    return None


def header_has_error(node: Node, body: Optional[Node] = None) -> bool:
    """Check whether anything outside the body of a declaration failed to parse.

    Args:
        node: The declaration node.
        body: The body node, which is excluded from the check.

    Returns:
        True if a header child is or contains an ERROR or missing node.
    """
    if node.is_error or node.is_missing:
        return True
    for child in node.children:
        if body is not None and child.start_byte >= body.start_byte:
            break
        if child.is_error or child.is_missing or child.has_error:
            return True
    return False


def guarded(extract: Callable[..., Optional[T]], node: Node, *args) -> Optional[T]:
    """Run a per-declaration extractor, skipping the node if it fails.

    Args:
        extract: Function taking ``node`` followed by ``args``.
        node: The node being extracted.

    Returns:
        The extractor's result, or None if it raised one of
        ``DECLARATION_ERRORS``.
    """
    try:
        return extract(node, *args)
    except DECLARATION_ERRORS as e:
        logger.debug(f"Skipping {node.type} at line {node.start_point.row + 1}: {e}")
        return None


class MethodIndex:
    """Member functions collected from implementation blocks, keyed by type name.

    Blocks may appear before or after the type they belong to, so methods
    are accumulated for the whole file first and attached in one pass once
    traversal is complete.
    """

    def __init__(self) -> None:
        self._methods: Dict[str, List[Function]] = {}

    def add(self, type_name: str, methods: Iterable[Function]) -> None:
        self._methods.setdefault(type_name, []).extend(methods)

    def __contains__(self, type_name: str) -> bool:
        return type_name in self._methods

    def __len__(self) -> int:
        return len(self._methods)

    def attach(self, declarations: List[Declaration]) -> List[Declaration]:
        """Return declarations with collected methods merged into their types.

        Only the first struct or enum of a given name receives methods.
        Methods for names with no such declaration in the file are dropped.
        """
        attached = set()
        merged: List[Declaration] = []
        for decl in declarations:
            if isinstance(decl, (Struct, Enum)) and decl.name in self._methods and decl.name not in attached:
                methods = decl.methods + tuple(self._methods[decl.name])
                decl = replace(decl, methods=methods)
                attached.add(decl.name)
            merged.append(decl)

        for orphan in sorted(set(self._methods) - attached):
            logger.debug(
                f"Dropping {len(self._methods[orphan])} method(s) for '{orphan}': "
                f"no type declared in this file"
            )
        return merged
