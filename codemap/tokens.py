"""Token counting with tiktoken.

Counts tokens of rendered codemaps for context budgeting. Encodings are
loaded once per process and reused. When an encoding cannot be loaded (no
network access to fetch its ranks, for example) counting falls back to a
heuristic of roughly four bytes per token, so counting never fails.
"""

import logging
from functools import lru_cache
from typing import Iterable, List, Optional

import tiktoken

from codemap.config import DEFAULT_ENCODING

logger = logging.getLogger(__name__)

SUPPORTED_ENCODINGS = ("cl100k_base", "o200k_base")

_ENCODING_ALIASES = {
    "cl100k": "cl100k_base",
    "cl100k_base": "cl100k_base",
    "o200k": "o200k_base",
    "o200k_base": "o200k_base",
}


def normalize_encoding(name: Optional[str]) -> str:
    """Resolve an encoding name or alias to its canonical tiktoken name.

    Raises:
        ValueError: If the name is not a supported encoding.
    """
    if not name:
        return DEFAULT_ENCODING
    key = name.strip().lower()
    if key not in _ENCODING_ALIASES:
        raise ValueError(f"Unknown encoding: {name!r} (expected one of {', '.join(SUPPORTED_ENCODINGS)})")
    return _ENCODING_ALIASES[key]


@lru_cache(maxsize=None)
def _load_encoding(name: str) -> Optional[tiktoken.Encoding]:
    try:
        return tiktoken.get_encoding(name)
    except (KeyError, OSError, ValueError) as e:
        logger.warning(f"Could not load tiktoken encoding {name}, using heuristic token counts: {e}")
        return None


def fallback_count(text: str) -> int:
    """Approximate token count: about four bytes per token, rounded up."""
    return (len(text.encode("utf-8")) + 3) // 4


def count_tokens(text: str, encoding: str = DEFAULT_ENCODING) -> int:
    """Count tokens in text.

    Args:
        text: Text to count.
        encoding: Encoding name or alias.

    Returns:
        Non-negative token count; 0 for empty text.

    Example:
        >>> count_tokens("")
        0
    """
    if not text:
        return 0
    bpe = _load_encoding(normalize_encoding(encoding))
    if bpe is None:
        return fallback_count(text)
    return len(bpe.encode_ordinary(text))


class TokenCounter:
    """Token counter bound to one encoding.

    Callable, so an instance can be handed to the extractor as its
    ``token_counter``.

    Example:
        >>> counter = TokenCounter("o200k")
        >>> counter.encoding
        'o200k_base'
    """

    def __init__(self, encoding: str = DEFAULT_ENCODING) -> None:
        self.encoding = normalize_encoding(encoding)

    def __call__(self, text: str) -> int:
        return self.count(text)

    def count(self, text: str) -> int:
        return count_tokens(text, self.encoding)

    def count_batch(self, texts: Iterable[str]) -> List[int]:
        return [self.count(text) for text in texts]

    def total(self, texts: Iterable[str]) -> int:
        return sum(self.count_batch(texts))

    @property
    def uses_fallback(self) -> bool:
        """True when tiktoken could not load this encoding."""
        return _load_encoding(self.encoding) is None
