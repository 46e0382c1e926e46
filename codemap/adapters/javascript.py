"""
JavaScript and JSX declaration extraction.

Uses the JavaScript grammar, which accepts JSX. Visibility follows the same
export rule as TypeScript; wherever TypeScript would carry a type annotation
the JavaScript output carries an empty string.
"""

from typing import List, Optional

from tree_sitter import Node, Tree

from codemap.adapters.base import guarded, header_has_error, location_of, node_text
from codemap.adapters.typescript import class_members, parse_import_statement, variable_declarations
from codemap.config import JS_COMMENT_NODES, JSDOC_PREFIXES
from codemap.docs import get_preceding_doc
from codemap.models import Class, Declaration, ExtractOptions, Function, Import, Language
from codemap.signature import format_signature
from codemap.visibility import export_visibility

_FUNCTION_NODES = frozenset({"function_declaration", "generator_function_declaration"})


def _doc(node: Node, source: bytes, options: ExtractOptions) -> Optional[str]:
    if not options.include_docs:
        return None
    return get_preceding_doc(node, source, JS_COMMENT_NODES, JSDOC_PREFIXES)


def _function(node: Node, source: bytes, options: ExtractOptions, outer: Node, is_exported: bool) -> Optional[Function]:
    name_node = node.child_by_field_name("name")
    body = node.child_by_field_name("body")
    if name_node is None or header_has_error(node, body):
        return None

    return Function(
        name=node_text(name_node, source),
        signature=format_signature(node, source, body=body, start=outer),
        visibility=export_visibility(is_exported),
        location=location_of(outer),
        is_async=any(child.type == "async" for child in node.children),
        doc=_doc(outer, source, options),
    )


def _class(node: Node, source: bytes, options: ExtractOptions, outer: Node, is_exported: bool) -> Optional[Class]:
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


class JavaScriptAdapter:
    """Extracts imports and declarations from JavaScript and JSX syntax trees."""

    languages = (Language.JAVASCRIPT, Language.JSX)

    def extract_imports(self, tree: Tree, source: bytes) -> List[Import]:
        imports: List[Import] = []
        for child in tree.root_node.children:
            if child.type == "import_statement" and not child.has_error:
                imported = parse_import_statement(child, source)
                if imported is not None:
                    imports.append(imported)
        return imports

    def extract_declarations(
        self, tree: Tree, source: bytes, options: ExtractOptions
    ) -> List[Declaration]:
        declarations: List[Declaration] = []

        for child in tree.root_node.children:
            outer, node, is_exported = child, child, False
            if child.type == "export_statement":
                node = child.child_by_field_name("declaration")
                is_exported = True
                if node is None:
                    continue

            if node.type in _FUNCTION_NODES:
                decl = guarded(_function, node, source, options, outer, is_exported)
            elif node.type == "class_declaration":
                decl = guarded(_class, node, source, options, outer, is_exported)
            elif node.type in ("lexical_declaration", "variable_declaration"):
                found = guarded(variable_declarations, node, source, options, outer, is_exported, False)
                declarations.extend(found or [])
                continue
            else:
                continue

            if decl is not None:
                declarations.append(decl)

        return declarations
