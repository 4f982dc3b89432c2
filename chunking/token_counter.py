"""
Token Counter for the Chunking Pipeline

Uses tiktoken with the cl100k_base encoding, the encoding of the
text-embedding-ada-002 model the chunks are embedded with. Chunk-size
guarantees depend on it, so a failure to load the encoding is fatal:
there is no character-count fallback.

Usage:
    from chunking.token_counter import get_token_counter, count_tokens

    counter = get_token_counter()
    n = counter.count("This is an example sentence.")
    head = counter.truncate(long_text, 128)
    n = count_tokens("Shorthand for the shared counter.")
"""

from __future__ import annotations

import threading
from typing import Optional

import tiktoken

from .exceptions import ConfigurationError

DEFAULT_ENCODING = "cl100k_base"


class TokenCounter:
    """
    Counts, truncates and slices text by tokens of a fixed encoding.

    Instances are read-only after construction and safe to share between
    threads.
    """

    def __init__(self, encoding_name: str = DEFAULT_ENCODING):
        self.encoding_name = encoding_name
        try:
            self._encoding = tiktoken.get_encoding(encoding_name)
        except Exception as e:
            raise ConfigurationError(
                f"Tokenizer encoding '{encoding_name}' could not be loaded",
                details=str(e),
            ) from e

    def encode(self, text: str) -> list[int]:
        if not text:
            return []
        return self._encoding.encode(text, disallowed_special=())

    def count(self, text: str) -> int:
        """Return the number of tokens in ``text``."""
        return len(self.encode(text))

    def truncate(self, text: str, max_tokens: int) -> str:
        """
        Decode the first ``max_tokens`` tokens of ``text``.

        This is a token-boundary cut, not a character prefix: it may end
        in the middle of a word.
        """
        if max_tokens <= 0:
            return ""
        tokens = self.encode(text)
        if len(tokens) <= max_tokens:
            return text
        return self._encoding.decode(tokens[:max_tokens])

    def tail(self, text: str, max_tokens: int) -> str:
        """
        Return the suffix of ``text`` made of its last ``max_tokens`` tokens.

        The result is always a real suffix of ``text``. When the token cut
        falls inside a multi-byte character, leading tokens are dropped until
        the bytes decode cleanly, so fewer than ``max_tokens`` tokens may be
        returned.
        """
        if max_tokens <= 0:
            return ""
        tokens = self.encode(text)
        if len(tokens) <= max_tokens:
            return text
        window = tokens[-max_tokens:]
        while window:
            try:
                return self._encoding.decode_bytes(window).decode("utf-8")
            except UnicodeDecodeError:
                window = window[1:]
        return ""


# Shared counter - loaded once per process, read-only afterwards.
_counter: Optional[TokenCounter] = None
_counter_lock = threading.Lock()


def get_token_counter() -> TokenCounter:
    """Get or initialize the shared TokenCounter (singleton)."""
    global _counter
    if _counter is None:
        with _counter_lock:
            if _counter is None:
                _counter = TokenCounter()
    return _counter


def count_tokens(text: str) -> int:
    """
    Count the number of tokens in a text string.

    Args:
        text: The text to tokenize.

    Returns:
        Number of tokens.
    """
    return get_token_counter().count(text)
