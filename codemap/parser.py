"""
Tree-sitter parser initialization and source parsing utilities.

This module maps every supported Language to its tree-sitter grammar and
provides functions to parse source text into syntax trees.
"""

import logging
from typing import Dict, Iterator, Optional, Union

import tree_sitter_go as tsgo
import tree_sitter_javascript as tsjs
import tree_sitter_python as tspython
import tree_sitter_rust as tsrust
import tree_sitter_typescript as tsts
from tree_sitter import Language as Grammar
from tree_sitter import Node, Parser, Tree

from codemap.errors import ParseFailure
from codemap.models import Language

# Configure logging
logger = logging.getLogger(__name__)

# Module-level grammar constants
RUST_GRAMMAR = Grammar(tsrust.language())
TYPESCRIPT_GRAMMAR = Grammar(tsts.language_typescript())
TSX_GRAMMAR = Grammar(tsts.language_tsx())
JAVASCRIPT_GRAMMAR = Grammar(tsjs.language())
PYTHON_GRAMMAR = Grammar(tspython.language())
GO_GRAMMAR = Grammar(tsgo.language())

# The JavaScript grammar accepts JSX natively
GRAMMARS: Dict[Language, Grammar] = {
    Language.RUST: RUST_GRAMMAR,
    Language.TYPESCRIPT: TYPESCRIPT_GRAMMAR,
    Language.TSX: TSX_GRAMMAR,
    Language.JAVASCRIPT: JAVASCRIPT_GRAMMAR,
    Language.JSX: JAVASCRIPT_GRAMMAR,
    Language.PYTHON: PYTHON_GRAMMAR,
    Language.GO: GO_GRAMMAR,
}


def create_parser(language: Union[Language, str]) -> Parser:
    """Create and configure a tree-sitter parser for a language.

    Parsers are cheap to build and are not shared between threads, so a
    fresh one is created per call.

    Args:
        language: Language or its string tag.

    Returns:
        A Parser instance configured with the language's grammar.

    Raises:
        UnsupportedLanguageError: If the language is unknown.

    Example:
        >>> parser = create_parser(Language.RUST)
        >>> tree = parser.parse(b"fn main() {}")
    """
    language = Language.coerce(language)
    parser = Parser(GRAMMARS[language])
    logger.debug("Created tree-sitter %s parser", language.value)
    return parser


def parse_bytes(source: bytes, language: Union[Language, str]) -> Tree:
    """Parse raw UTF-8 bytes of source code.

    Tree-sitter always produces a tree; malformed input yields ERROR and
    missing nodes rather than a refusal.

    Args:
        source: UTF-8 encoded source code.
        language: Language to parse as.

    Returns:
        A Tree object representing the parsed syntax tree.

    Raises:
        TypeError: If source is not bytes.

    Example:
        >>> tree = parse_bytes(b"def foo(): pass", Language.PYTHON)
        >>> tree.root_node.type
        'module'
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    parser = create_parser(language)
    tree = parser.parse(source)

    if tree.root_node.has_error:
        logger.debug("Parsed tree contains syntax errors")

    logger.debug("Parsed %d bytes of %s code", len(source), Language.coerce(language).value)
    return tree


def parse_source(text: str, language: Union[Language, str]) -> Tree:
    """Parse source text, raising ParseFailure when no tree can be produced.

    Args:
        text: Source code as a string.
        language: Language to parse as.

    Returns:
        The parsed Tree (possibly containing error nodes).

    Raises:
        ParseFailure: If the text cannot be encoded as UTF-8 or the parser
            returns no tree.
    """
    try:
        source = text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ParseFailure(f"source is not valid UTF-8: {e.reason}") from e

    tree = parse_bytes(source, language)
    if tree is None or tree.root_node is None:
        raise ParseFailure("parser returned no syntax tree")
    return tree


def _walk_error_nodes(node: Node) -> Iterator[Node]:
    """Yield ERROR and missing nodes in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.is_error or current.is_missing:
            yield current
            continue
        if current.has_error:
            stack.extend(reversed(current.children))


def count_error_nodes(tree: Tree) -> int:
    """Count ERROR and missing nodes in a parsed tree.

    Args:
        tree: A parsed Tree.

    Returns:
        Number of error nodes (0 for a clean parse).
    """
    return sum(1 for _ in _walk_error_nodes(tree.root_node))


def first_error_line(tree: Tree) -> Optional[int]:
    """Return the 1-indexed line of the first error node, or None."""
    for node in _walk_error_nodes(tree.root_node):
        return node.start_point.row + 1
    return None


def syntax_failure(tree: Tree) -> Optional[ParseFailure]:
    """Describe the syntax errors of a best-effort tree, or None if clean."""
    if not tree.root_node.has_error:
        return None
    return ParseFailure("syntax error", first_error_line(tree))
