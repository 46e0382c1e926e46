"""
Go declaration extraction.

Visibility comes from the first character of the identifier. Methods are
recognized by their receiver and merged into the struct named by the
receiver's base type, exactly as Rust ``impl`` blocks are.
"""

import logging
from typing import List, Optional, Tuple

from tree_sitter import Node, Tree

from codemap.adapters.base import (
    MethodIndex,
    find_child_by_type,
    guarded,
    header_has_error,
    location_of,
    node_text,
)
from codemap.config import GO_COMMENT_NODES, GO_DIRECTIVE_PREFIXES, GO_DOC_PREFIXES, GO_INTERFACE_ELEMENTS
from codemap.docs import get_preceding_doc
from codemap.models import (
    Const,
    Declaration,
    ExtractOptions,
    Field,
    Function,
    Import,
    Interface,
    Language,
    Struct,
    TypeAlias,
)
from codemap.signature import collapse_whitespace, format_signature
from codemap.visibility import case_visibility

logger = logging.getLogger(__name__)


def _doc(node: Node, source: bytes, options: ExtractOptions) -> Optional[str]:
    if not options.include_docs:
        return None
    return get_preceding_doc(
        node, source, GO_COMMENT_NODES, GO_DOC_PREFIXES, directive_prefixes=GO_DIRECTIVE_PREFIXES
    )


def base_type_name(type_node: Optional[Node], source: bytes) -> Optional[str]:
    """Unqualified name of a type with pointers and type arguments removed.

    ``*Stack[T]`` resolves to ``Stack`` and ``*pkg.Reader`` to ``Reader``.
    """
    node = type_node
    while node is not None:
        if node.type == "type_identifier":
            return node_text(node, source)
        if node.type == "qualified_type":
            node = node.child_by_field_name("name")
        elif node.type == "pointer_type":
            node = node.named_children[0] if node.named_children else None
        elif node.type == "generic_type":
            node = node.child_by_field_name("type")
        elif node.type == "parenthesized_type":
            node = node.named_children[0] if node.named_children else None
        else:
            return None
    return None


def receiver_type_name(receiver: Optional[Node], source: bytes) -> Optional[str]:
    """Base type name of a method receiver such as ``(s *Stack[T])``."""
    if receiver is None:
        return None
    for param in receiver.named_children:
        if param.type == "parameter_declaration":
            return base_type_name(param.child_by_field_name("type"), source)
    return None


def _import_spec(node: Node, source: bytes) -> Optional[Import]:
    path = node.child_by_field_name("path")
    if path is None:
        return None
    name = node.child_by_field_name("name")
    items: Tuple[str, ...] = ()
    if name is not None and name.type == "dot":
        items = (Import.WILDCARD_IMPORT,)
    return Import(source=node_text(path, source).strip('"`'), items=items)


def _function(node: Node, source: bytes, options: ExtractOptions) -> Optional[Function]:
    name_node = node.child_by_field_name("name")
    body = node.child_by_field_name("body")
    if name_node is None or header_has_error(node, body):
        return None

    name = node_text(name_node, source)
    return Function(
        name=name,
        signature=format_signature(node, source, body=body),
        visibility=case_visibility(name),
        location=location_of(node),
        is_async=False,
        doc=_doc(node, source, options),
    )


def _struct_fields(struct_type: Node, source: bytes) -> Tuple[Field, ...]:
    field_list = find_child_by_type(struct_type, "field_declaration_list")
    if field_list is None:
        return ()

    fields: List[Field] = []
    for decl in field_list.named_children:
        if decl.type != "field_declaration":
            continue
        type_node = decl.child_by_field_name("type")
        type_text = collapse_whitespace(node_text(type_node, source))
        names = decl.children_by_field_name("name")
        if not names:
            # Embedded field: named by its type, pointer marker kept in the type
            if type_node is not None:
                raw = source[decl.start_byte:type_node.end_byte].decode("utf-8", errors="replace")
                type_text = collapse_whitespace(raw)
            embedded = base_type_name(type_node, source) or type_text.lstrip("*")
            fields.append(Field(name=embedded, type=type_text, visibility=case_visibility(embedded)))
            continue
        for name_node in names:
            if name_node.type != "field_identifier":
                continue
            name = node_text(name_node, source)
            fields.append(Field(name=name, type=type_text, visibility=case_visibility(name)))
    return tuple(fields)


def _type_spec(spec: Node, source: bytes, options: ExtractOptions, outer: Node) -> Optional[Declaration]:
    name_node = spec.child_by_field_name("name")
    type_node = spec.child_by_field_name("type")
    if name_node is None or type_node is None or spec.has_error:
        return None

    name = node_text(name_node, source)
    visibility = case_visibility(name)
    location = location_of(outer)
    doc = _doc(outer, source, options)

    if spec.type == "type_spec" and type_node.type == "struct_type":
        return Struct(
            name=name,
            visibility=visibility,
            location=location,
            fields=_struct_fields(type_node, source),
            doc=doc,
        )

    if spec.type == "type_spec" and type_node.type == "interface_type":
        members = tuple(
            collapse_whitespace(node_text(child, source))
            for child in type_node.named_children
            if child.type in GO_INTERFACE_ELEMENTS
        )
        return Interface(name=name, visibility=visibility, location=location, members=members, doc=doc)

    return TypeAlias(
        name=name,
        visibility=visibility,
        location=location,
        target=collapse_whitespace(node_text(type_node, source)),
    )


def _value_specs(node: Node) -> List[Node]:
    """const_spec / var_spec nodes of a declaration, including grouped lists."""
    specs: List[Node] = []
    for child in node.named_children:
        if child.type in ("const_spec", "var_spec"):
            specs.append(child)
        elif child.type == "var_spec_list":
            specs.extend(c for c in child.named_children if c.type == "var_spec")
    return specs


def _constants(node: Node, source: bytes, options: ExtractOptions) -> List[Const]:
    specs = _value_specs(node)
    constants: List[Const] = []
    for spec in specs:
        if spec.has_error:
            continue
        outer = node if len(specs) == 1 else spec
        type_text = collapse_whitespace(node_text(spec.child_by_field_name("type"), source))
        for name_node in spec.children_by_field_name("name"):
            if name_node.type != "identifier":
                continue
            name = node_text(name_node, source)
            if name == "_":
                continue
            constants.append(
                Const(name=name, visibility=case_visibility(name), location=location_of(outer), type=type_text)
            )
    return constants


class GoAdapter:
    """Extracts imports and declarations from a Go syntax tree."""

    languages = (Language.GO,)

    def extract_imports(self, tree: Tree, source: bytes) -> List[Import]:
        imports: List[Import] = []
        for child in tree.root_node.children:
            if child.type != "import_declaration":
                continue
            spec_list = find_child_by_type(child, "import_spec_list")
            container = spec_list if spec_list is not None else child
            for spec in container.named_children:
                if spec.type != "import_spec" or spec.has_error:
                    continue
                imported = _import_spec(spec, source)
                if imported is not None:
                    imports.append(imported)
        return imports

    def extract_declarations(
        self, tree: Tree, source: bytes, options: ExtractOptions
    ) -> List[Declaration]:
        declarations: List[Declaration] = []
        methods = MethodIndex()

        for child in tree.root_node.children:
            if child.type == "function_declaration":
                decl = guarded(_function, child, source, options)
                if decl is not None:
                    declarations.append(decl)
            elif child.type == "method_declaration":
                method = guarded(_function, child, source, options)
                receiver = receiver_type_name(child.child_by_field_name("receiver"), source)
                if method is None:
                    continue
                if receiver is None:
                    logger.debug(f"Method '{method.name}' has no resolvable receiver type")
                    continue
                methods.add(receiver, [method])
            elif child.type == "type_declaration":
                specs = [c for c in child.named_children if c.type in ("type_spec", "type_alias")]
                for spec in specs:
                    outer = child if len(specs) == 1 else spec
                    decl = guarded(_type_spec, spec, source, options, outer)
                    if decl is not None:
                        declarations.append(decl)
            elif child.type in ("const_declaration", "var_declaration"):
                declarations.extend(guarded(_constants, child, source, options) or [])

        return methods.attach(declarations)
