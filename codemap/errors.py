"""
Exception types raised by the extraction engine.
"""

from typing import Optional


class CodemapError(Exception):
    """Base class for extraction engine errors."""


class UnsupportedLanguageError(CodemapError, ValueError):
    """Raised when a caller asks for a language the engine cannot handle.

    This is rejected before any parsing happens and is distinct from a parse
    failure, which is reported inside the resulting codemap instead.
    """


class ParseFailure(CodemapError):
    """Raised when a syntax tree cannot be acquired for a source text.

    Attributes:
        message: Human-readable description of the failure.
        line: 1-indexed line of the first problem, when known.
    """

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        self.message = message
        self.line = line
        super().__init__(self.describe())

    def describe(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} at line {self.line}"
