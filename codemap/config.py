"""
Configuration constants for declaration extraction.

Defines file extensions, tree-sitter node type strings, and doc-comment
markers for every supported language.
"""

from typing import Dict, FrozenSet, Set, Tuple

# File extension -> language tag
EXTENSION_MAP: Dict[str, str] = {
    ".rs": "rust",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "jsx",
    ".py": "python",
    ".pyi": "python",
    ".go": "go",
}

# Directories never descended into during discovery
SKIP_DIRECTORIES: Set[str] = {
    "build",
    "dist",
    "out",
    "target",
    "vendor",
    "node_modules",
    "venv",
    "__pycache__",
}

# Extraction policy defaults
DEFAULT_INCLUDE_DOCS: bool = False
DEFAULT_INCLUDE_PRIVATE: bool = True
DEFAULT_ENCODING: str = "cl100k_base"

# ---------------------------------------------------------------------------
# Rust
# ---------------------------------------------------------------------------

RUST_COMMENT_NODES: FrozenSet[str] = frozenset({"line_comment", "block_comment"})
RUST_DOC_PREFIXES: Tuple[str, ...] = ("///", "/**")
# Attributes may sit between a doc comment and the item it documents
RUST_ATTRIBUTE_NODES: FrozenSet[str] = frozenset({"attribute_item"})
RUST_CONST_NODES: FrozenSet[str] = frozenset({"const_item", "static_item"})
RUST_RESTRICTED_MARKERS: Tuple[str, ...] = ("(crate)", "(super)", "(self)", "(in ")

# ---------------------------------------------------------------------------
# TypeScript / JavaScript
# ---------------------------------------------------------------------------

JS_COMMENT_NODES: FrozenSet[str] = frozenset({"comment"})
JSDOC_PREFIXES: Tuple[str, ...] = ("/**",)
TS_CLASS_NODES: FrozenSet[str] = frozenset({"class_declaration", "abstract_class_declaration"})
TS_FUNCTION_NODES: FrozenSet[str] = frozenset(
    {"function_declaration", "generator_function_declaration"}
)
# Values of a variable declarator that make the binding a function
FUNCTION_VALUE_NODES: FrozenSet[str] = frozenset(
    {"arrow_function", "function_expression", "function", "generator_function"}
)
TS_METHOD_NODES: FrozenSet[str] = frozenset(
    {"method_definition", "method_signature", "abstract_method_signature"}
)
TS_PRIVATE_MODIFIERS: FrozenSet[str] = frozenset({"private", "protected"})

# ---------------------------------------------------------------------------
# Python
# ---------------------------------------------------------------------------

PYTHON_STRING_PREFIX_CHARS: str = "rRbBuUfF"
PYTHON_QUOTES: Tuple[str, ...] = ('"""', "'''", '"', "'")

# ---------------------------------------------------------------------------
# Go
# ---------------------------------------------------------------------------

GO_COMMENT_NODES: FrozenSet[str] = frozenset({"comment"})
GO_DOC_PREFIXES: Tuple[str, ...] = ("//", "/*")
GO_DIRECTIVE_PREFIXES: Tuple[str, ...] = ("//go:", "//nolint", "//line ", "//export ")
GO_INTERFACE_ELEMENTS: FrozenSet[str] = frozenset({"method_elem", "method_spec", "type_elem"})
