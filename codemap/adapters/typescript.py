"""
TypeScript and TSX declaration extraction.

Top-level visibility is export-based: a declaration is Public only when it
sits inside an ``export`` statement (including ``export default``). Class
members are Public unless marked ``private``/``protected`` or named with a
``#`` prefix.
"""

from typing import List, Optional, Tuple

from tree_sitter import Node, Tree

from codemap.adapters.base import (
    find_child_by_type,
    guarded,
    header_has_error,
    location_of,
    node_text,
)
from codemap.config import (
    FUNCTION_VALUE_NODES,
    JS_COMMENT_NODES,
    JSDOC_PREFIXES,
    TS_CLASS_NODES,
    TS_FUNCTION_NODES,
    TS_METHOD_NODES,
    TS_PRIVATE_MODIFIERS,
)
from codemap.docs import get_preceding_doc
from codemap.models import (
    Class,
    Const,
    Declaration,
    Enum,
    ExtractOptions,
    Function,
    Import,
    Interface,
    Language,
    TypeAlias,
    Visibility,
)
from codemap.signature import collapse_whitespace, format_signature, signature_from_text
from codemap.visibility import export_visibility

_INTERFACE_MEMBER_NODES = frozenset(
    {
        "property_signature",
        "method_signature",
        "call_signature",
        "construct_signature",
        "index_signature",
    }
)


def _doc(node: Node, source: bytes, options: ExtractOptions) -> Optional[str]:
    if not options.include_docs:
        return None
    return get_preceding_doc(node, source, JS_COMMENT_NODES, JSDOC_PREFIXES, frozenset({"decorator"}))


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"`":
        return text[1:-1]
    return text


def parse_import_statement(node: Node, source: bytes) -> Optional[Import]:
    """Build an Import from an ES module ``import`` statement.

    ``import React from "react"`` yields the default sentinel,
    ``import * as path from "path"`` the wildcard sentinel, and named
    specifiers yield their imported names (aliases dropped). A side-effect
    import has no items.
    """
    source_node = node.child_by_field_name("source")
    if source_node is None:
        return None

    items: List[str] = []
    clause = find_child_by_type(node, "import_clause")
    if clause is not None:
        for part in clause.named_children:
            if part.type == "identifier":
                items.append(Import.DEFAULT_IMPORT)
            elif part.type == "namespace_import":
                items.append(Import.WILDCARD_IMPORT)
            elif part.type == "named_imports":
                for spec in part.named_children:
                    if spec.type != "import_specifier":
                        continue
                    name = spec.child_by_field_name("name")
                    if name is not None:
                        items.append(node_text(name, source))

    return Import(source=_unquote(node_text(source_node, source)), items=tuple(items))


def member_visibility(node: Node, source: bytes) -> Visibility:
    """Visibility of a class member from its accessibility modifier or ``#`` name."""
    modifier = find_child_by_type(node, "accessibility_modifier")
    if modifier is not None and node_text(modifier, source).strip() in TS_PRIVATE_MODIFIERS:
        return Visibility.PRIVATE
    name = node.child_by_field_name("name")
    if name is not None and (name.type == "private_property_identifier" or node_text(name, source).startswith("#")):
        return Visibility.PRIVATE
    return Visibility.PUBLIC


def _is_async(node: Node) -> bool:
    return find_child_by_type(node, "async") is not None


def _function(
    node: Node,
    source: bytes,
    options: ExtractOptions,
    outer: Node,
    is_exported: bool,
) -> Optional[Function]:
    name_node = node.child_by_field_name("name")
    body = node.child_by_field_name("body")
    if name_node is None or header_has_error(node, body):
        return None

    return Function(
        name=node_text(name_node, source),
        signature=format_signature(node, source, body=body, start=outer, strip_suffixes=(";",)),
        visibility=export_visibility(is_exported),
        location=location_of(outer),
        is_async=_is_async(node),
        doc=_doc(outer, source, options),
    )


def _method(node: Node, source: bytes, options: ExtractOptions) -> Optional[Function]:
    name_node = node.child_by_field_name("name")
    body = node.child_by_field_name("body")
    if name_node is None or header_has_error(node, body):
        return None

    return Function(
        name=node_text(name_node, source),
        signature=format_signature(node, source, body=body, strip_suffixes=(";", ",")),
        visibility=member_visibility(node, source),
        location=location_of(node),
        is_async=_is_async(node),
        doc=_doc(node, source, options),
    )


def class_members(body: Optional[Node], source: bytes, options: ExtractOptions) -> Tuple[Function, ...]:
    """Methods declared in a class body, in source order."""
    if body is None:
        return ()
    members: List[Function] = []
    for child in body.named_children:
        if child.type not in TS_METHOD_NODES:
            continue
        method = guarded(_method, child, source, options)
        if method is not None:
            members.append(method)
    return tuple(members)


def _class(
    node: Node,
    source: bytes,
    options: ExtractOptions,
    outer: Node,
    is_exported: bool,
) -> Optional[Class]:
    name_node = node.child_by_field_name("name")
    body = node.child_by_field_name("body")
    if name_node is None or header_has_error(node, body):
        return None

    return Class(
        name=node_text(name_node, source),
        visibility=export_visibility(is_exported),
        location=location_of(outer),
        members=class_members(body, source, options),
        doc=_doc(outer, source, options),
    )


def _interface(
    node: Node,
    source: bytes,
    options: ExtractOptions,
    outer: Node,
    is_exported: bool,
) -> Optional[Interface]:
    name_node = node.child_by_field_name("name")
    body = node.child_by_field_name("body")
    if name_node is None or header_has_error(node, body):
        return None

    members: List[str] = []
    if body is not None:
        for child in body.named_children:
            if child.type in _INTERFACE_MEMBER_NODES and not child.has_error:
                members.append(signature_from_text(node_text(child, source)))

    return Interface(
        name=node_text(name_node, source),
        visibility=export_visibility(is_exported),
        location=location_of(outer),
        members=tuple(members),
        doc=_doc(outer, source, options),
    )


def _type_alias(
    node: Node,
    source: bytes,
    options: ExtractOptions,
    outer: Node,
    is_exported: bool,
) -> Optional[TypeAlias]:
    name_node = node.child_by_field_name("name")
    if name_node is None or header_has_error(node):
        return None

    return TypeAlias(
        name=node_text(name_node, source),
        visibility=export_visibility(is_exported),
        location=location_of(outer),
        target=collapse_whitespace(node_text(node.child_by_field_name("value"), source)),
    )


def _enum(
    node: Node,
    source: bytes,
    options: ExtractOptions,
    outer: Node,
    is_exported: bool,
) -> Optional[Enum]:
    name_node = node.child_by_field_name("name")
    body = node.child_by_field_name("body")
    if name_node is None or header_has_error(node, body):
        return None

    variants: List[str] = []
    if body is not None:
        for child in body.named_children:
            if child.type in JS_COMMENT_NODES:
                continue
            variants.append(collapse_whitespace(node_text(child, source)))

    return Enum(
        name=node_text(name_node, source),
        visibility=export_visibility(is_exported),
        location=location_of(outer),
        variants=tuple(variants),
        doc=_doc(outer, source, options),
    )


def _annotation_text(node: Optional[Node], source: bytes) -> str:
    text = collapse_whitespace(node_text(node, source))
    if text.startswith(":"):
        text = text[1:].lstrip()
    return text


def variable_declarations(
    node: Node,
    source: bytes,
    options: ExtractOptions,
    outer: Node,
    is_exported: bool,
    typed: bool = True,
) -> List[Declaration]:
    """Declarations bound by a ``const``/``let``/``var`` statement.

    Bindings whose value is a function or arrow function are Functions.
    Other ``const`` bindings to a plain identifier are Consts. ``let`` and
    ``var`` bindings to non-function values are skipped.

    Args:
        node: The ``lexical_declaration`` or ``variable_declaration`` node.
        source: Raw source bytes.
        options: Extraction options.
        outer: Outermost node of the statement (the export statement when
            exported).
        is_exported: Whether an export marker is present.
        typed: Whether type annotations exist in this grammar.
    """
    declarators = [c for c in node.named_children if c.type == "variable_declarator"]
    if not declarators:
        return []

    keyword = node_text(node.child_by_field_name("kind"), source) or node_text(node.children[0], source)
    prefix = collapse_whitespace(source[outer.start_byte:declarators[0].start_byte].decode("utf-8", errors="replace"))
    visibility = export_visibility(is_exported)
    doc = _doc(outer, source, options)

    declarations: List[Declaration] = []
    for declarator in declarators:
        name_node = declarator.child_by_field_name("name")
        if name_node is None or name_node.type != "identifier":
            continue
        value = declarator.child_by_field_name("value")

        if value is not None and value.type in FUNCTION_VALUE_NODES:
            body = value.child_by_field_name("body")
            if header_has_error(declarator, value) or header_has_error(value, body):
                continue
            head = format_signature(declarator, source, body=body, strip_suffixes=("=>",))
            declarations.append(
                Function(
                    name=node_text(name_node, source),
                    signature=f"{prefix} {head}",
                    visibility=visibility,
                    location=location_of(outer),
                    is_async=_is_async(value),
                    doc=doc,
                )
            )
        elif keyword == "const" and not declarator.has_error:
            annotation = declarator.child_by_field_name("type") if typed else None
            declarations.append(
                Const(
                    name=node_text(name_node, source),
                    visibility=visibility,
                    location=location_of(outer),
                    type=_annotation_text(annotation, source),
                )
            )
    return declarations


class TypeScriptAdapter:
    """Extracts imports and declarations from TypeScript and TSX syntax trees."""

    languages = (Language.TYPESCRIPT, Language.TSX)

    def extract_imports(self, tree: Tree, source: bytes) -> List[Import]:
        imports: List[Import] = []
        for child in tree.root_node.children:
            if child.type != "import_statement" or child.has_error:
                continue
            imported = parse_import_statement(child, source)
            if imported is not None:
                imports.append(imported)
        return imports

    def extract_declarations(
        self, tree: Tree, source: bytes, options: ExtractOptions
    ) -> List[Declaration]:
        declarations: List[Declaration] = []
        for child in tree.root_node.children:
            if child.type == "export_statement":
                inner = child.child_by_field_name("declaration")
                if inner is None:
                    continue
                declarations.extend(self._declaration(inner, source, options, child, True))
            else:
                declarations.extend(self._declaration(child, source, options, child, False))
        return declarations

    def _declaration(
        self,
        node: Node,
        source: bytes,
        options: ExtractOptions,
        outer: Node,
        is_exported: bool,
    ) -> List[Declaration]:
        node_type = node.type
        if node_type in ("lexical_declaration", "variable_declaration"):
            found = guarded(variable_declarations, node, source, options, outer, is_exported)
            return found or []

        if node_type in TS_FUNCTION_NODES or node_type == "function_signature":
            extract = _function
        elif node_type in TS_CLASS_NODES:
            extract = _class
        elif node_type == "interface_declaration":
            extract = _interface
        elif node_type == "type_alias_declaration":
            extract = _type_alias
        elif node_type == "enum_declaration":
            extract = _enum
        else:
            return []

        decl = guarded(extract, node, source, options, outer, is_exported)
        return [decl] if decl is not None else []
