"""
Language adapter registry.

One adapter per grammar family, selected by the Language tag before
extraction begins.
"""

from typing import Dict, Union

from codemap.adapters.base import LanguageAdapter
from codemap.adapters.go import GoAdapter
from codemap.adapters.javascript import JavaScriptAdapter
from codemap.adapters.python import PythonAdapter
from codemap.adapters.rust import RustAdapter
from codemap.adapters.typescript import TypeScriptAdapter
from codemap.models import Language

_ADAPTERS: Dict[Language, LanguageAdapter] = {}
for _adapter in (RustAdapter(), TypeScriptAdapter(), JavaScriptAdapter(), PythonAdapter(), GoAdapter()):
    for _language in _adapter.languages:
        _ADAPTERS[_language] = _adapter


def get_adapter(language: Union[Language, str]) -> LanguageAdapter:
    """Return the adapter for a language.

    Raises:
        UnsupportedLanguageError: If the language is unknown.
    """
    return _ADAPTERS[Language.coerce(language)]


def supported_languages():
    return tuple(_ADAPTERS)


__all__ = [
    "GoAdapter",
    "JavaScriptAdapter",
    "LanguageAdapter",
    "PythonAdapter",
    "RustAdapter",
    "TypeScriptAdapter",
    "get_adapter",
    "supported_languages",
]
