"""
Documentation extraction.

Comment-based languages document a declaration with contiguous doc-marked
comments directly above it. Python documents it with a string literal as
the first statement of the body. Absence of documentation is None, which
callers must keep distinct from an empty string.
"""

from typing import FrozenSet, List, Optional, Tuple

from tree_sitter import Node

from codemap.config import PYTHON_QUOTES, PYTHON_STRING_PREFIX_CHARS


def is_doc_comment(comment_text: str, prefixes: Tuple[str, ...]) -> bool:
    """Check if a comment carries one of the documentation markers.

    ``////`` and ``/**/`` are ordinary comments even though they share a
    prefix with ``///`` and ``/**``.

    Args:
        comment_text: The text content of the comment.
        prefixes: Accepted documentation markers.

    Returns:
        True if the comment is a documentation comment.
    """
    stripped = comment_text.strip()
    if stripped.startswith("////") or stripped == "/**/":
        return False
    return any(stripped.startswith(prefix) for prefix in prefixes)


def clean_doc_comment(comment_text: str) -> str:
    """Strip comment delimiters and leading asterisks.

    Removes ``///``, ``//!``, ``//``, ``/**``, ``/*`` and ``*/`` markers and
    the ``*`` gutter of block comments. Internal blank lines are preserved;
    leading and trailing blank lines are dropped.

    Args:
        comment_text: Raw comment text with delimiters.

    Returns:
        Cleaned comment text.
    """
    lines = comment_text.strip().split("\n")
    cleaned_lines: List[str] = []
    is_block = lines[0].lstrip().startswith("/*")

    for idx, line in enumerate(lines):
        stripped = line.strip()

        if idx == 0:
            for marker in ("///", "//!", "//", "/**", "/*!", "/*"):
                if stripped.startswith(marker):
                    stripped = stripped[len(marker):]
                    break
        elif not is_block:
            for marker in ("///", "//!", "//"):
                if stripped.startswith(marker):
                    stripped = stripped[len(marker):]
                    break

        stripped = stripped.strip()

        if is_block:
            if stripped.endswith("*/"):
                stripped = stripped[:-2].rstrip()
            if idx > 0 and stripped.startswith("*"):
                stripped = stripped[1:].lstrip()

        cleaned_lines.append(stripped)

    while cleaned_lines and not cleaned_lines[0]:
        cleaned_lines.pop(0)
    while cleaned_lines and not cleaned_lines[-1]:
        cleaned_lines.pop()
    return "\n".join(cleaned_lines)


def _last_row(node: Node) -> int:
    """Row of the last character of a node.

    Some grammars include the trailing newline in line comments, which puts
    the end point at column 0 of the following row.
    """
    row, column = node.end_point
    if column == 0 and row > node.start_point.row:
        return row - 1
    return row


def get_preceding_doc(
    node: Node,
    source: bytes,
    comment_types: FrozenSet[str],
    prefixes: Tuple[str, ...],
    skip_types: FrozenSet[str] = frozenset(),
    directive_prefixes: Tuple[str, ...] = (),
) -> Optional[str]:
    """Collect the doc comments immediately preceding a declaration node.

    Walks backward through siblings while they are doc comments on adjacent
    lines. A blank line or an ordinary comment ends the run. Nodes whose type
    is in ``skip_types`` (such as attributes) are stepped over, and so are
    comments starting with one of ``directive_prefixes`` (such as ``//go:``
    compiler directives).

    Args:
        node: The declaration node (or its outermost wrapper).
        source: Raw source bytes.
        comment_types: Node types that are comments in this grammar.
        prefixes: Accepted documentation markers.
        skip_types: Node types allowed between the comments and the node.
        directive_prefixes: Comment prefixes that mark tool directives rather
            than documentation.

    Returns:
        Cleaned documentation text, or None if there is none.
    """
    comments: List[str] = []
    sibling = node.prev_sibling
    expected_row = node.start_point.row

    while sibling is not None:
        gap = expected_row - _last_row(sibling)
        if gap > 1:
            break

        if sibling.type in skip_types:
            expected_row = sibling.start_point.row
            sibling = sibling.prev_sibling
            continue

        if sibling.type not in comment_types:
            break

        comment_text = source[sibling.start_byte:sibling.end_byte].decode("utf-8", errors="replace")
        if directive_prefixes and comment_text.startswith(directive_prefixes):
            expected_row = sibling.start_point.row
            sibling = sibling.prev_sibling
            continue

        if not is_doc_comment(comment_text, prefixes):
            break

        comments.append(comment_text)
        expected_row = sibling.start_point.row
        sibling = sibling.prev_sibling

    if not comments:
        return None

    # Reverse to get source order
    comments.reverse()
    return "\n".join(clean_doc_comment(c) for c in comments)


def strip_string_quotes(literal: str) -> str:
    """Remove the prefix letters and quoting from a Python string literal."""
    text = literal.lstrip(PYTHON_STRING_PREFIX_CHARS)
    for quote in PYTHON_QUOTES:
        if text.startswith(quote) and text.endswith(quote) and len(text) >= 2 * len(quote):
            return text[len(quote):-len(quote)]
    return text


def get_python_docstring(body: Optional[Node], source: bytes) -> Optional[str]:
    """Extract the leading string-literal statement of a Python body.

    Args:
        body: The ``block`` node of a function or class.
        source: Raw source bytes.

    Returns:
        The docstring with quoting removed and surrounding whitespace
        trimmed, or None if the body does not start with a string.
    """
    if body is None:
        return None

    for statement in body.named_children:
        if statement.type == "comment":
            continue
        if statement.type != "expression_statement" or not statement.named_children:
            return None
        expr = statement.named_children[0]
        if expr.type != "string":
            return None
        literal = source[expr.start_byte:expr.end_byte].decode("utf-8", errors="replace")
        return strip_string_quotes(literal).strip()
    return None
