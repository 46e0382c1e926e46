"""
Data models for extracted declarations.

Every language adapter populates the same set of frozen dataclasses so that
downstream consumers (renderers, token budgeters) never depend on which
grammar produced a codemap.
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, fields, replace
from typing import Any, ClassVar, Dict, Optional, Tuple, Union

from codemap.config import EXTENSION_MAP
from codemap.errors import UnsupportedLanguageError


class Language(str, enum.Enum):
    """Source language tag, fixed once a file is classified."""

    RUST = "rust"
    TYPESCRIPT = "typescript"
    TSX = "tsx"
    JAVASCRIPT = "javascript"
    JSX = "jsx"
    PYTHON = "python"
    GO = "go"

    @classmethod
    def coerce(cls, value: Union["Language", str]) -> "Language":
        """Return ``value`` as a Language, accepting the lowercase string tag.

        Raises:
            UnsupportedLanguageError: If the value names no known language.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnsupportedLanguageError(f"Unsupported language: {value!r}") from None

    @classmethod
    def from_path(cls, path: str) -> Optional["Language"]:
        """Detect the language from a file extension, or None if unknown."""
        ext = os.path.splitext(str(path))[1].lower()
        tag = EXTENSION_MAP.get(ext)
        return cls(tag) if tag else None

    def __str__(self) -> str:
        return self.value


class Visibility(str, enum.Enum):
    """Shared four-way exposure classification."""

    PUBLIC = "public"
    PRIVATE = "private"
    CRATE = "crate"
    PROTECTED = "protected"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Location:
    """1-indexed, inclusive line span of a declaration."""

    start_line: int
    end_line: int

    def __post_init__(self) -> None:
        if self.start_line < 1 or self.end_line < self.start_line:
            raise ValueError(
                f"Invalid location: start_line={self.start_line}, end_line={self.end_line}"
            )

    @classmethod
    def single_line(cls, line: int) -> "Location":
        return cls(line, line)

    def to_dict(self) -> Dict[str, int]:
        return {"start_line": self.start_line, "end_line": self.end_line}


@dataclass(frozen=True)
class Field:
    """A field of a struct, captured with its type as written."""

    name: str
    type: str
    visibility: Visibility = Visibility.PRIVATE

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "type": self.type, "visibility": self.visibility.value}


@dataclass(frozen=True)
class Import:
    """An import statement, source kept exactly as written.

    ``items`` is empty for a whole-module import. A default import is
    recorded as ``DEFAULT_IMPORT`` and a wildcard/namespace import as
    ``WILDCARD_IMPORT`` so the two stay distinguishable.
    """

    DEFAULT_IMPORT: ClassVar[str] = "default"
    WILDCARD_IMPORT: ClassVar[str] = "*"

    source: str
    items: Tuple[str, ...] = ()

    @property
    def is_module_import(self) -> bool:
        return not self.items

    @property
    def is_default(self) -> bool:
        return self.DEFAULT_IMPORT in self.items

    @property
    def is_wildcard(self) -> bool:
        return self.WILDCARD_IMPORT in self.items

    def to_dict(self) -> Dict[str, Any]:
        return {"source": self.source, "items": list(self.items)}


class _DeclarationMixin:
    """Behaviour shared by every declaration variant."""

    kind: ClassVar[str] = ""

    @property
    def is_public(self) -> bool:
        return self.visibility is Visibility.PUBLIC  # type: ignore[attr-defined]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a record tagged by ``kind``."""
        record: Dict[str, Any] = {"kind": self.kind}
        for item in fields(self):  # type: ignore[arg-type]
            record[item.name] = _to_plain(getattr(self, item.name))
        return record


def _to_plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, tuple):
        return [_to_plain(v) for v in value]
    return value


@dataclass(frozen=True)
class Function(_DeclarationMixin):
    """A function or method with its body removed from ``signature``."""

    kind: ClassVar[str] = "function"

    name: str
    signature: str
    visibility: Visibility
    location: Location
    is_async: bool = False
    doc: Optional[str] = None


@dataclass(frozen=True)
class Struct(_DeclarationMixin):
    """A struct, with methods merged in from separate implementation blocks."""

    kind: ClassVar[str] = "struct"

    name: str
    visibility: Visibility
    location: Location
    fields: Tuple[Field, ...] = ()
    methods: Tuple[Function, ...] = ()
    doc: Optional[str] = None


@dataclass(frozen=True)
class Enum(_DeclarationMixin):
    """An enum; variants are literal text including associated data."""

    kind: ClassVar[str] = "enum"

    name: str
    visibility: Visibility
    location: Location
    variants: Tuple[str, ...] = ()
    methods: Tuple[Function, ...] = ()
    doc: Optional[str] = None


@dataclass(frozen=True)
class Trait(_DeclarationMixin):
    kind: ClassVar[str] = "trait"

    name: str
    visibility: Visibility
    location: Location
    methods: Tuple[str, ...] = ()
    doc: Optional[str] = None


@dataclass(frozen=True)
class TypeAlias(_DeclarationMixin):
    kind: ClassVar[str] = "type_alias"

    name: str
    visibility: Visibility
    location: Location
    target: str = ""


@dataclass(frozen=True)
class Const(_DeclarationMixin):
    kind: ClassVar[str] = "const"

    name: str
    visibility: Visibility
    location: Location
    type: str = ""


@dataclass(frozen=True)
class Interface(_DeclarationMixin):
    kind: ClassVar[str] = "interface"

    name: str
    visibility: Visibility
    location: Location
    members: Tuple[str, ...] = ()
    doc: Optional[str] = None


@dataclass(frozen=True)
class Class(_DeclarationMixin):
    kind: ClassVar[str] = "class"

    name: str
    visibility: Visibility
    location: Location
    members: Tuple[Function, ...] = ()
    doc: Optional[str] = None


Declaration = Union[Function, Struct, Enum, Trait, TypeAlias, Const, Interface, Class]

DECLARATION_KINDS: Dict[str, type] = {
    cls.kind: cls
    for cls in (Function, Struct, Enum, Trait, TypeAlias, Const, Interface, Class)
}


def public_declarations(declarations: Tuple[Declaration, ...]) -> Tuple[Declaration, ...]:
    """Keep only Public declarations, recursively trimming members and fields."""
    kept = []
    for decl in declarations:
        if not decl.is_public:
            continue
        if isinstance(decl, (Struct, Enum)):
            methods = tuple(m for m in decl.methods if m.is_public)
            if isinstance(decl, Struct):
                kept_fields = tuple(
                    f for f in decl.fields if f.visibility is Visibility.PUBLIC
                )
                decl = replace(decl, fields=kept_fields, methods=methods)
            else:
                decl = replace(decl, methods=methods)
        elif isinstance(decl, Class):
            decl = replace(decl, members=tuple(m for m in decl.members if m.is_public))
        kept.append(decl)
    return tuple(kept)


@dataclass(frozen=True)
class ExtractOptions:
    """Extraction switches.

    Attributes:
        include_docs: Run the documentation extractor. When False it is not
            invoked at all.
        include_private: Capture every item regardless of visibility. When
            False the codemap is reduced to its public view.
    """

    include_docs: bool = False
    include_private: bool = True

    @classmethod
    def with_docs(cls) -> "ExtractOptions":
        return cls(include_docs=True, include_private=True)

    @classmethod
    def public_api(cls) -> "ExtractOptions":
        return cls(include_docs=False, include_private=False)


@dataclass(frozen=True)
class Codemap:
    """Normalized per-file extraction result.

    Attributes:
        path: File path as supplied by the caller.
        language: Language the file was parsed as.
        imports: Imports in source order.
        declarations: Top-level declarations in source order.
        token_count: Tokens in the rendered form of this codemap.
        parse_error: Diagnostic when tree acquisition failed, else None.
    """

    path: str
    language: Language
    imports: Tuple[Import, ...] = ()
    declarations: Tuple[Declaration, ...] = ()
    token_count: int = 0
    parse_error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.token_count < 0:
            raise ValueError(f"token_count must be non-negative, got {self.token_count}")

    @classmethod
    def with_error(cls, path: str, language: Language, error: str) -> "Codemap":
        return cls(path=path, language=language, parse_error=error)

    def public_only(self) -> "Codemap":
        """Return the public view of this codemap."""
        return replace(self, declarations=public_declarations(self.declarations))

    def with_token_count(self, token_count: int) -> "Codemap":
        return replace(self, token_count=token_count)

    def declaration_count(self) -> int:
        """Count declarations including nested member functions."""
        total = 0
        for decl in self.declarations:
            total += 1
            if isinstance(decl, (Struct, Enum)):
                total += len(decl.methods)
            elif isinstance(decl, Class):
                total += len(decl.members)
        return total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "language": self.language.value,
            "imports": [i.to_dict() for i in self.imports],
            "declarations": [d.to_dict() for d in self.declarations],
            "token_count": self.token_count,
            "parse_error": self.parse_error,
        }


__all__ = [
    "Class",
    "Codemap",
    "Const",
    "DECLARATION_KINDS",
    "Declaration",
    "Enum",
    "ExtractOptions",
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
    "public_declarations",
]
