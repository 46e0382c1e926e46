"""
Python declaration extraction.

Visibility follows the underscore naming convention. Documentation is the
docstring: the string literal opening a function or class body.
"""

import re
from typing import List, Optional, Tuple

from tree_sitter import Node, Tree

from codemap.adapters.base import guarded, header_has_error, location_of, node_text
from codemap.docs import get_python_docstring
from codemap.models import Class, Const, Declaration, ExtractOptions, Function, Import, Language
from codemap.signature import collapse_whitespace, format_signature
from codemap.visibility import underscore_visibility

_CONSTANT_NAME_RE = re.compile(r"^_*[A-Z][A-Z0-9_]*$")


def _unwrap(node: Node) -> Tuple[Node, Node]:
    """Return (definition, outer) for a possibly decorated definition."""
    if node.type == "decorated_definition":
        definition = node.child_by_field_name("definition")
        if definition is not None:
            return definition, node
    return node, node


def _imported_name(node: Node, source: bytes) -> str:
    if node.type == "aliased_import":
        return node_text(node.child_by_field_name("name"), source)
    return node_text(node, source)


def _function(node: Node, source: bytes, options: ExtractOptions) -> Optional[Function]:
    definition, outer = _unwrap(node)
    if definition.type != "function_definition":
        return None
    name_node = definition.child_by_field_name("name")
    body = definition.child_by_field_name("body")
    if name_node is None or header_has_error(outer, definition) or header_has_error(definition, body):
        return None

    name = node_text(name_node, source)
    return Function(
        name=name,
        signature=format_signature(definition, source, body=body, strip_suffixes=(":",)),
        visibility=underscore_visibility(name),
        location=location_of(outer),
        is_async=any(child.type == "async" for child in definition.children),
        doc=get_python_docstring(body, source) if options.include_docs else None,
    )


def _class(node: Node, source: bytes, options: ExtractOptions) -> Optional[Class]:
    definition, outer = _unwrap(node)
    if definition.type != "class_definition":
        return None
    name_node = definition.child_by_field_name("name")
    body = definition.child_by_field_name("body")
    if name_node is None or header_has_error(outer, definition) or header_has_error(definition, body):
        return None

    members: List[Function] = []
    if body is not None:
        for child in body.named_children:
            inner, _ = _unwrap(child)
            if inner.type != "function_definition":
                continue
            method = guarded(_function, child, source, options)
            if method is not None:
                members.append(method)

    name = node_text(name_node, source)
    return Class(
        name=name,
        visibility=underscore_visibility(name),
        location=location_of(outer),
        members=tuple(members),
        doc=get_python_docstring(body, source) if options.include_docs else None,
    )


def _constant(node: Node, source: bytes, options: ExtractOptions) -> Optional[Const]:
    """Module-level UPPER_CASE assignment."""
    if not node.named_children or node.has_error:
        return None
    assignment = node.named_children[0]
    if assignment.type != "assignment":
        return None
    left = assignment.child_by_field_name("left")
    if left is None or left.type != "identifier":
        return None
    name = node_text(left, source)
    if not _CONSTANT_NAME_RE.match(name):
        return None

    return Const(
        name=name,
        visibility=underscore_visibility(name),
        location=location_of(node),
        type=collapse_whitespace(node_text(assignment.child_by_field_name("type"), source)),
    )


class PythonAdapter:
    """Extracts imports and declarations from a Python syntax tree."""

    languages = (Language.PYTHON,)

    def extract_imports(self, tree: Tree, source: bytes) -> List[Import]:
        imports: List[Import] = []
        for child in tree.root_node.children:
            if child.has_error:
                continue
            if child.type == "import_statement":
                # import a, b.c as d -> one Import per module
                for name in child.children_by_field_name("name"):
                    imports.append(Import(source=_imported_name(name, source)))
            elif child.type in ("import_from_statement", "future_import_statement"):
                module = child.child_by_field_name("module_name")
                module_text = node_text(module, source) if module is not None else "__future__"
                if any(c.type == "wildcard_import" for c in child.children):
                    items: Tuple[str, ...] = (Import.WILDCARD_IMPORT,)
                else:
                    items = tuple(_imported_name(n, source) for n in child.children_by_field_name("name"))
                imports.append(Import(source=module_text, items=items))
        return imports

    def extract_declarations(
        self, tree: Tree, source: bytes, options: ExtractOptions
    ) -> List[Declaration]:
        declarations: List[Declaration] = []
        for child in tree.root_node.children:
            definition, _ = _unwrap(child)
            if definition.type == "function_definition":
                decl = guarded(_function, child, source, options)
            elif definition.type == "class_definition":
                decl = guarded(_class, child, source, options)
            elif child.type == "expression_statement":
                decl = guarded(_constant, child, source, options)
            else:
                continue
            if decl is not None:
                declarations.append(decl)
        return declarations
