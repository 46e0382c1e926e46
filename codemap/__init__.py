"""
Declaration extraction engine.

Tree-sitter-based extractor producing a normalized codemap (imports and
declarations with signatures, visibility, locations and optional docs) for
Rust, TypeScript/TSX, JavaScript/JSX, Python and Go sources.
"""

from codemap.errors import CodemapError, ParseFailure, UnsupportedLanguageError
from codemap.models import (
    Class,
    Codemap,
    Const,
    Declaration,
    Enum,
    ExtractOptions,
    Field,
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
from codemap.parser import create_parser, parse_bytes, parse_source, count_error_nodes
from codemap.adapters import get_adapter
from codemap.render import codemap_to_json, render_codemap, render_codemaps
from codemap.tokens import TokenCounter, count_tokens
from codemap.extractor import (
    extract_codemap,
    extract_file,
    extract_directory,
    extract_to_dict_list,
    discover_source_files,
    ExtractionStats,
)

__all__ = [
    # Data models
    "Class",
    "Codemap",
    "Const",
    "Declaration",
    "Enum",
    "ExtractOptions",
    "ExtractionStats",
    "Field",
    "Function",
    "Import",
    "Interface",
    "Language",
    "Location",
    "Struct",
    "Trait",
    "TypeAlias",
    "Visibility",
    # Errors
    "CodemapError",
    "ParseFailure",
    "UnsupportedLanguageError",
    # Low-level parsing
    "create_parser",
    "parse_bytes",
    "parse_source",
    "count_error_nodes",
    # Mid-level extraction
    "get_adapter",
    "extract_codemap",
    # Rendering and tokens
    "codemap_to_json",
    "render_codemap",
    "render_codemaps",
    "TokenCounter",
    "count_tokens",
    # High-level orchestration
    "extract_file",
    "extract_directory",
    "extract_to_dict_list",
    "discover_source_files",
]
