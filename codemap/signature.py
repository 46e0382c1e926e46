"""
Signature formatting.

Renders the declared-but-not-defined form of a callable or type from its
syntax tree span. Everything from the body onward is dropped and whitespace
is collapsed to single spaces. A where/constraint clause is kept as a
separate segment, joined to the head with a newline, so a renderer can
choose to place it on its own line.
"""

import re
from typing import Iterable, List, Optional, Tuple

from tree_sitter import Node

SEGMENT_SEPARATOR = "\n"

_SPACE_RE = re.compile(r"\s+")
_OPEN_SPACE_RE = re.compile(r"([(\[])\s+")
_CLOSE_SPACE_RE = re.compile(r"\s+([)\]])")
# Quoted literals are copied verbatim. A lifetime such as 'a is not a quote.
_LITERAL_RE = re.compile(
    r"""'[A-Za-z_]\w*(?![\w'])"""
    r"""|(?P<literal>"(?:\\.|[^"\\])*"|'(?:\\.|[^'\\])*'|`(?:\\.|[^`\\])*`)"""
)


def _tidy(code: str) -> str:
    code = _SPACE_RE.sub(" ", code)
    code = _OPEN_SPACE_RE.sub(r"\1", code)
    return _CLOSE_SPACE_RE.sub(r"\1", code)


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace and tidy spacing inside brackets.

    String literals are left untouched, so default values keep their exact
    text.

    Example:
        >>> collapse_whitespace("fn foo(\\n    a: i32,\\n) -> i32")
        'fn foo(a: i32,) -> i32'
        >>> collapse_whitespace('def f(sep="( ")')
        'def f(sep="( ")'
    """
    text = text.strip()
    pieces: List[str] = []
    code_start = 0
    for match in _LITERAL_RE.finditer(text):
        if match.group("literal") is None:
            continue
        pieces.append(_tidy(text[code_start:match.start()]))
        pieces.append(match.group("literal"))
        code_start = match.end()
    pieces.append(_tidy(text[code_start:]))
    return "".join(pieces)


def _slice(source: bytes, start: int, end: int) -> str:
    return source[start:end].decode("utf-8", errors="replace")


def _strip_suffixes(text: str, suffixes: Iterable[str]) -> str:
    changed = True
    while changed and text:
        changed = False
        for suffix in suffixes:
            if suffix and text.endswith(suffix):
                text = text[: -len(suffix)].rstrip()
                changed = True
    return text


def format_signature(
    node: Node,
    source: bytes,
    body: Optional[Node] = None,
    start: Optional[Node] = None,
    constraint: Optional[Node] = None,
    strip_suffixes: Tuple[str, ...] = (),
) -> str:
    """Render a declaration's signature with its body removed.

    Args:
        node: The declaration node.
        source: Raw source bytes.
        body: The body node; the signature ends where it starts. When None
            the whole node is used.
        start: Node to start the signature at (e.g. an enclosing export
            statement). Defaults to ``node``.
        constraint: A where/constraint clause kept as its own segment.
        strip_suffixes: Trailing tokens to drop (e.g. ``":"`` or ``"=>"``).

    Returns:
        Normalized signature text.
    """
    begin = (start or node).start_byte
    end = body.start_byte if body is not None else node.end_byte

    if constraint is not None and begin <= constraint.start_byte < end:
        head = collapse_whitespace(_slice(source, begin, constraint.start_byte))
        clause = collapse_whitespace(_slice(source, constraint.start_byte, end))
        head = _strip_suffixes(head, strip_suffixes)
        clause = _strip_suffixes(clause, strip_suffixes + (",",))
        return f"{head}{SEGMENT_SEPARATOR}{clause}"

    head = collapse_whitespace(_slice(source, begin, end))
    return _strip_suffixes(head, strip_suffixes)


def signature_from_text(text: str, strip_suffixes: Tuple[str, ...] = (";", ",")) -> str:
    """Normalize already-sliced signature text such as a trait method item."""
    return _strip_suffixes(collapse_whitespace(text), strip_suffixes)


def split_signature(signature: str) -> Tuple[str, Optional[str]]:
    """Split a signature into its head and optional constraint segment."""
    head, sep, clause = signature.partition(SEGMENT_SEPARATOR)
    return head, (clause if sep else None)
