"""
Rendering of codemaps to markdown text and JSON records.

The markdown form is what token counts are computed over. JSON output is a
list of records where every declaration is tagged by its ``kind``.
"""

import json
from typing import Any, Dict, List, Sequence

from codemap.models import (
    Class,
    Codemap,
    Const,
    Declaration,
    Enum,
    Function,
    Import,
    Interface,
    Language,
    Location,
    Struct,
    Trait,
    TypeAlias,
    Visibility,
)
from codemap.signature import split_signature

INDENT = "    "


def format_location(location: Location) -> str:
    """``line N`` for a single line, ``lines N-M`` otherwise."""
    if location.start_line == location.end_line:
        return f"line {location.start_line}"
    return f"lines {location.start_line}-{location.end_line}"


def format_import(imported: Import, language: Language) -> str:
    """Render an import in the source language's own statement form."""
    items = imported.items
    if language is Language.RUST:
        return f"use {imported.source}::{{{', '.join(items)}}}" if items else f"use {imported.source}"
    if language is Language.PYTHON:
        return f"from {imported.source} import {', '.join(items)}" if items else f"import {imported.source}"
    if language is Language.GO:
        return f'import . "{imported.source}"' if imported.is_wildcard else f'import "{imported.source}"'

    if not items:
        return f'import "{imported.source}"'
    clauses = [Import.WILDCARD_IMPORT] if imported.is_wildcard else []
    named = [item for item in items if item != Import.WILDCARD_IMPORT]
    if named:
        clauses.append(f"{{ {', '.join(named)} }}")
    return f'import {", ".join(clauses)} from "{imported.source}"'


def _signature_lines(signature: str, location: Location, bullet: str, prefix: str) -> List[str]:
    head, clause = split_signature(signature)
    lines = [f"{prefix}{bullet}{head} ({format_location(location)})"]
    if clause:
        lines.append(f"{prefix}{INDENT}{clause}")
    return lines


def _doc_lines(doc, prefix: str) -> List[str]:
    if doc is None:
        return []
    return [f"{prefix}{line}" if line else "" for line in doc.split("\n")]


def _declaration_lines(decl: Declaration, public_only: bool, depth: int = 0) -> List[str]:
    prefix = INDENT * depth
    heading = f"{prefix}#### "
    lines: List[str] = []

    if isinstance(decl, Function):
        lines.extend(_signature_lines(decl.signature, decl.location, "#### ", prefix))
        lines.extend(_doc_lines(decl.doc, prefix))

    elif isinstance(decl, Struct):
        lines.append(f"{heading}struct {decl.name} ({format_location(decl.location)})")
        lines.extend(_doc_lines(decl.doc, prefix))
        fields = [f for f in decl.fields if not public_only or f.visibility is Visibility.PUBLIC]
        if fields:
            lines.append(f"{prefix}Fields:")
            for f in fields:
                marker = "pub " if f.visibility is Visibility.PUBLIC else ""
                type_text = f": {f.type}" if f.type else ""
                lines.append(f"{prefix}- {marker}{f.name}{type_text}")
        lines.extend(_method_lines(decl.methods, public_only, prefix))

    elif isinstance(decl, Enum):
        lines.append(f"{heading}enum {decl.name} ({format_location(decl.location)})")
        lines.extend(_doc_lines(decl.doc, prefix))
        lines.append(f"{prefix}Variants: {', '.join(decl.variants)}")
        lines.extend(_method_lines(decl.methods, public_only, prefix))

    elif isinstance(decl, Trait):
        lines.append(f"{heading}trait {decl.name} ({format_location(decl.location)})")
        lines.extend(_doc_lines(decl.doc, prefix))
        if decl.methods:
            lines.append(f"{prefix}Methods:")
            for method in decl.methods:
                head, clause = split_signature(method)
                lines.append(f"{prefix}- {head}")
                if clause:
                    lines.append(f"{prefix}{INDENT}{clause}")

    elif isinstance(decl, TypeAlias):
        lines.append(f"{heading}type {decl.name} = {decl.target} ({format_location(decl.location)})")

    elif isinstance(decl, Const):
        type_text = f": {decl.type}" if decl.type else ""
        lines.append(f"{heading}const {decl.name}{type_text} ({format_location(decl.location)})")

    elif isinstance(decl, Interface):
        lines.append(f"{heading}interface {decl.name} ({format_location(decl.location)})")
        lines.extend(_doc_lines(decl.doc, prefix))
        if decl.members:
            lines.append(f"{prefix}Members:")
            lines.extend(f"{prefix}- {member}" for member in decl.members)

    elif isinstance(decl, Class):
        lines.append(f"{heading}class {decl.name} ({format_location(decl.location)})")
        lines.extend(_doc_lines(decl.doc, prefix))
        for member in decl.members:
            if public_only and not member.is_public:
                continue
            lines.append("")
            lines.extend(_declaration_lines(member, public_only, depth + 1))

    return lines


def _method_lines(methods: Sequence[Function], public_only: bool, prefix: str) -> List[str]:
    visible = [m for m in methods if not public_only or m.is_public]
    if not visible:
        return []
    lines = [f"{prefix}Methods:"]
    for method in visible:
        lines.extend(_signature_lines(method.signature, method.location, "- ", prefix))
    return lines


def render_codemap(codemap: Codemap, public_only: bool = False) -> str:
    """Render a codemap as compact markdown.

    Args:
        codemap: The codemap to render.
        public_only: Hide non-Public declarations, members and fields.

    Returns:
        Markdown text ending with a newline.
    """
    lines: List[str] = [f"## {codemap.path}", ""]

    if codemap.parse_error:
        lines.extend([f"**Parse error:** {codemap.parse_error}", ""])

    if codemap.imports:
        lines.append("### Imports")
        for imported in codemap.imports:
            lines.append(f"- {format_import(imported, codemap.language)}")
        lines.append("")

    declarations = [d for d in codemap.declarations if not public_only or d.is_public]
    if declarations:
        lines.append("### Declarations")
        lines.append("")
        for decl in declarations:
            lines.extend(_declaration_lines(decl, public_only))
            lines.append("")

    return "\n".join(lines).rstrip("\n") + "\n"


def render_codemaps(codemaps: Sequence[Codemap], public_only: bool = False) -> str:
    """Render several codemaps separated by horizontal rules."""
    return "\n---\n\n".join(render_codemap(c, public_only) for c in codemaps)


def codemap_records(codemaps: Sequence[Codemap], public_only: bool = False) -> List[Dict[str, Any]]:
    """Tagged-record form of codemaps."""
    return [(c.public_only() if public_only else c).to_dict() for c in codemaps]


def codemap_to_json(codemaps: Sequence[Codemap], public_only: bool = False, indent: int = 2) -> str:
    """Serialize codemaps to a JSON document with a token total."""
    document = {
        "codemaps": codemap_records(codemaps, public_only),
        "total_tokens": sum(c.token_count for c in codemaps),
    }
    return json.dumps(document, indent=indent, ensure_ascii=False)
