"""
Rust declaration extraction.

Visibility is explicit (``pub`` / ``pub(crate)``). Methods live in separate
``impl`` blocks and are merged into the struct or enum they target once the
whole file has been traversed.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from tree_sitter import Node, Tree

from codemap.adapters.base import (
    MethodIndex,
    find_child_by_type,
    guarded,
    header_has_error,
    location_of,
    node_text,
)
from codemap.config import (
    RUST_ATTRIBUTE_NODES,
    RUST_COMMENT_NODES,
    RUST_CONST_NODES,
    RUST_DOC_PREFIXES,
)
from codemap.docs import get_preceding_doc
from codemap.models import (
    Const,
    Declaration,
    Enum,
    ExtractOptions,
    Field,
    Function,
    Import,
    Language,
    Struct,
    Trait,
    TypeAlias,
)
from codemap.signature import collapse_whitespace, format_signature
from codemap.visibility import keyword_visibility

logger = logging.getLogger(__name__)

# Nodes inside field and variant lists that are not fields or variants
_NON_MEMBER_NODES = RUST_COMMENT_NODES | RUST_ATTRIBUTE_NODES


def _visibility(node: Node, source: bytes):
    return keyword_visibility(node_text(find_child_by_type(node, "visibility_modifier"), source))


def _doc(node: Node, source: bytes, options: ExtractOptions) -> Optional[str]:
    if not options.include_docs:
        return None
    return get_preceding_doc(node, source, RUST_COMMENT_NODES, RUST_DOC_PREFIXES, RUST_ATTRIBUTE_NODES)


def split_use_items(text: str) -> List[str]:
    """Split the inside of a use-tree brace group on top-level commas.

    Example:
        >>> split_use_items("a, b::{c, d}, e as f")
        ['a', 'b::{c, d}', 'e as f']
    """
    items: List[str] = []
    depth = 0
    current = []
    for ch in text:
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        if ch == "," and depth == 0:
            items.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    items.append("".join(current).strip())
    return [item for item in items if item]


def parse_use_tree(text: str) -> Import:
    """Build an Import from the argument of a ``use`` declaration.

    ``std::collections::HashMap`` becomes source ``std::collections`` with
    item ``HashMap``. Brace groups keep nested groups and aliases as written.
    """
    text = collapse_whitespace(text)
    brace = text.find("{")
    if brace >= 0:
        source = text[:brace].rstrip()
        if source.endswith("::"):
            source = source[:-2]
        close = text.rfind("}")
        inner = text[brace + 1:close] if close > brace else text[brace + 1:]
        return Import(source=source, items=tuple(split_use_items(inner)))

    if "::" in text:
        source, item = text.rsplit("::", 1)
        return Import(source=source, items=(item.strip(),))

    return Import(source=text)


def resolve_impl_target(type_node: Optional[Node], source: bytes) -> Optional[str]:
    """Name of the type an ``impl`` block is for.

    Generic arguments, module paths and references are stripped, so
    ``impl<T> Stack<T>`` and ``impl fmt::Display for crate::Point`` resolve
    to ``Stack`` and ``Point``.
    """
    node = type_node
    while node is not None:
        if node.type in ("type_identifier", "primitive_type"):
            return node_text(node, source)
        if node.type == "scoped_type_identifier":
            node = node.child_by_field_name("name")
        elif node.type in ("generic_type", "reference_type", "pointer_type"):
            node = node.child_by_field_name("type")
        else:
            return None
    return None


def _function(node: Node, source: bytes, options: ExtractOptions) -> Optional[Function]:
    name_node = node.child_by_field_name("name")
    body = node.child_by_field_name("body")
    if name_node is None or header_has_error(node, body):
        return None

    modifiers = find_child_by_type(node, "function_modifiers")
    is_async = modifiers is not None and find_child_by_type(modifiers, "async") is not None

    return Function(
        name=node_text(name_node, source),
        signature=format_signature(
            node,
            source,
            body=body,
            constraint=find_child_by_type(node, "where_clause"),
            strip_suffixes=(";",),
        ),
        visibility=_visibility(node, source),
        location=location_of(node),
        is_async=is_async,
        doc=_doc(node, source, options),
    )


def _fields(body: Optional[Node], source: bytes) -> Tuple[Field, ...]:
    if body is None:
        return ()

    fields: List[Field] = []
    if body.type == "field_declaration_list":
        for child in body.named_children:
            if child.type != "field_declaration":
                continue
            name_node = child.child_by_field_name("name")
            if name_node is None:
                continue
            fields.append(
                Field(
                    name=node_text(name_node, source),
                    type=collapse_whitespace(node_text(child.child_by_field_name("type"), source)),
                    visibility=_visibility(child, source),
                )
            )
    elif body.type == "ordered_field_declaration_list":
        # Tuple struct: fields are named by position
        pending_visibility = None
        for child in body.named_children:
            if child.type in _NON_MEMBER_NODES:
                continue
            if child.type == "visibility_modifier":
                pending_visibility = node_text(child, source)
                continue
            fields.append(
                Field(
                    name=str(len(fields)),
                    type=collapse_whitespace(node_text(child, source)),
                    visibility=keyword_visibility(pending_visibility),
                )
            )
            pending_visibility = None
    return tuple(fields)


def _struct(node: Node, source: bytes, options: ExtractOptions) -> Optional[Struct]:
    name_node = node.child_by_field_name("name")
    body = node.child_by_field_name("body")
    if name_node is None or header_has_error(node, body):
        return None

    return Struct(
        name=node_text(name_node, source),
        visibility=_visibility(node, source),
        location=location_of(node),
        fields=_fields(body, source),
        doc=_doc(node, source, options),
    )


def _enum(node: Node, source: bytes, options: ExtractOptions) -> Optional[Enum]:
    name_node = node.child_by_field_name("name")
    body = node.child_by_field_name("body")
    if name_node is None or header_has_error(node, body):
        return None

    variants: List[str] = []
    if body is not None:
        for child in body.named_children:
            if child.type == "enum_variant":
                variants.append(collapse_whitespace(node_text(child, source)))

    return Enum(
        name=node_text(name_node, source),
        visibility=_visibility(node, source),
        location=location_of(node),
        variants=tuple(variants),
        doc=_doc(node, source, options),
    )


def _trait(node: Node, source: bytes, options: ExtractOptions) -> Optional[Trait]:
    name_node = node.child_by_field_name("name")
    body = node.child_by_field_name("body")
    if name_node is None or header_has_error(node, body):
        return None

    methods: List[str] = []
    if body is not None:
        for item in body.named_children:
            if item.type not in ("function_signature_item", "function_item"):
                continue
            if header_has_error(item, item.child_by_field_name("body")):
                continue
            # Default methods contribute only their signature
            methods.append(
                format_signature(
                    item,
                    source,
                    body=item.child_by_field_name("body"),
                    constraint=find_child_by_type(item, "where_clause"),
                    strip_suffixes=(";",),
                )
            )

    return Trait(
        name=node_text(name_node, source),
        visibility=_visibility(node, source),
        location=location_of(node),
        methods=tuple(methods),
        doc=_doc(node, source, options),
    )


def _type_alias(node: Node, source: bytes, options: ExtractOptions) -> Optional[TypeAlias]:
    name_node = node.child_by_field_name("name")
    if name_node is None or header_has_error(node):
        return None

    return TypeAlias(
        name=node_text(name_node, source),
        visibility=_visibility(node, source),
        location=location_of(node),
        target=collapse_whitespace(node_text(node.child_by_field_name("type"), source)),
    )


def _const(node: Node, source: bytes, options: ExtractOptions) -> Optional[Const]:
    name_node = node.child_by_field_name("name")
    if name_node is None or header_has_error(node, node.child_by_field_name("value")):
        return None

    return Const(
        name=node_text(name_node, source),
        visibility=_visibility(node, source),
        location=location_of(node),
        type=collapse_whitespace(node_text(node.child_by_field_name("type"), source)),
    )


def _impl(node: Node, source: bytes, options: ExtractOptions) -> Optional[Tuple[str, List[Function]]]:
    body = node.child_by_field_name("body")
    if header_has_error(node, body):
        return None

    target = resolve_impl_target(node.child_by_field_name("type"), source)
    if target is None:
        logger.debug(f"impl block at line {node.start_point.row + 1} has no resolvable target type")
        return None

    methods: List[Function] = []
    if body is not None:
        for item in body.named_children:
            if item.type != "function_item":
                continue
            method = guarded(_function, item, source, options)
            if method is not None:
                methods.append(method)
    return target, methods


_EXTRACTORS: Dict[str, Callable[[Node, bytes, ExtractOptions], Optional[Declaration]]] = {
    "function_item": _function,
    "struct_item": _struct,
    "enum_item": _enum,
    "trait_item": _trait,
    "type_item": _type_alias,
}
_EXTRACTORS.update({node_type: _const for node_type in RUST_CONST_NODES})


class RustAdapter:
    """Extracts imports and declarations from a Rust syntax tree."""

    languages = (Language.RUST,)

    def extract_imports(self, tree: Tree, source: bytes) -> List[Import]:
        imports: List[Import] = []
        for child in tree.root_node.children:
            if child.type != "use_declaration" or child.has_error:
                continue
            argument = child.child_by_field_name("argument")
            if argument is None:
                continue
            imports.append(parse_use_tree(node_text(argument, source)))
        return imports

    def extract_declarations(
        self, tree: Tree, source: bytes, options: ExtractOptions
    ) -> List[Declaration]:
        declarations: List[Declaration] = []
        impls = MethodIndex()

        for child in tree.root_node.children:
            if child.type == "impl_item":
                result = guarded(_impl, child, source, options)
                if result is not None:
                    impls.add(*result)
                continue

            extract = _EXTRACTORS.get(child.type)
            if extract is None:
                continue
            decl = guarded(extract, child, source, options)
            if decl is not None:
                declarations.append(decl)

        return impls.attach(declarations)
