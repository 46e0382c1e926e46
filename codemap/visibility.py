"""
Visibility resolution.

Each source convention is implemented exactly once:

- keyword-based (Rust): ``pub`` / ``pub(crate)`` style modifiers
- export-based (TypeScript, JavaScript): an ``export`` marker
- underscore convention (Python): leading underscores in the name
- case convention (Go): capitalization of the first character
"""

from typing import Callable, Dict, Optional, Union

from codemap.config import RUST_RESTRICTED_MARKERS
from codemap.models import Language, Visibility


def keyword_visibility(modifier: Optional[str]) -> Visibility:
    """Map a Rust visibility modifier to Visibility.

    No modifier is Private, a restricted-scope modifier such as
    ``pub(crate)`` is Crate, and a bare ``pub`` is Public.
    """
    if not modifier:
        return Visibility.PRIVATE
    text = "".join(modifier.split())
    if not text.startswith("pub"):
        return Visibility.PRIVATE
    if any(marker.replace(" ", "") in text for marker in RUST_RESTRICTED_MARKERS):
        return Visibility.CRATE
    return Visibility.PUBLIC


def export_visibility(is_exported: bool) -> Visibility:
    """Public only when an export marker is present."""
    return Visibility.PUBLIC if is_exported else Visibility.PRIVATE


def underscore_visibility(name: str) -> Visibility:
    """Map a Python name to Visibility by its leading underscores.

    ``_name`` is Protected. Any name with two or more leading underscores,
    dunders included, is Private. Everything else is Public.
    """
    if name.startswith("__"):
        return Visibility.PRIVATE
    if name.startswith("_"):
        return Visibility.PROTECTED
    return Visibility.PUBLIC


def case_visibility(name: str) -> Visibility:
    """Go exports identifiers whose first character is uppercase."""
    if name and name[0].isupper():
        return Visibility.PUBLIC
    return Visibility.PRIVATE


_RESOLVERS: Dict[Language, Callable[..., Visibility]] = {
    Language.RUST: keyword_visibility,
    Language.TYPESCRIPT: export_visibility,
    Language.TSX: export_visibility,
    Language.JAVASCRIPT: export_visibility,
    Language.JSX: export_visibility,
    Language.PYTHON: underscore_visibility,
    Language.GO: case_visibility,
}


def resolve_visibility(language: Union[Language, str], signal: Union[str, bool, None]) -> Visibility:
    """Resolve a language-specific visibility signal.

    Args:
        language: Source language.
        signal: The modifier text (Rust), export flag (TS/JS), or
            identifier name (Python, Go).

    Returns:
        The shared Visibility value.
    """
    return _RESOLVERS[Language.coerce(language)](signal)
