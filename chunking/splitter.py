"""
Text Splitter - token-budgeted recursive splitting with overlap

Algorithm:
1. Short documents (fewer tokens than the budget) are returned unsplit.
2. The text is cut recursively at an ordered list of separators: sentence
   endings first, then word breaks. A piece is cut further only while it is
   larger than the body budget (chunk_size - chunk_overlap). A piece with no
   separator left is an atomic unit and is kept whole, even if oversized.
3. The pieces are packed serially into chunks of at most the body budget
   (see chunking.merger).
4. Every chunk after the first is prefixed with the last chunk_overlap
   tokens of the chunk before it. The prefix shrinks when needed so the
   chunk stays within chunk_size; oversized chunks get no prefix.

Pieces always concatenate back to the input, so no text is lost or
reordered; chunks only differ from the input by the repeated overlap.

Usage:
    from chunking.splitter import TextSplitter

    splitter = TextSplitter(chunk_size=256, chunk_overlap=20)
    for text, token_count in splitter.split_text(content):
        ...
"""

import logging
from typing import Optional

from .merger import merge_chunks_serially
from .token_counter import TokenCounter, get_token_counter

logger = logging.getLogger(__name__)

SENTENCE_ENDINGS = [".", "!", "?"]
WORDS_BREAKS = list(reversed([",", ";", ":", " ", "(", ")", "[", "]", "{", "}", "\t", "\n"]))

TEXT_SEPARATORS = SENTENCE_ENDINGS + WORDS_BREAKS

MARKDOWN_SEPARATORS = [
    "\n# ",
    "\n## ",
    "\n### ",
    "\n#### ",
    "\n##### ",
    "\n###### ",
    "\n```",
] + TEXT_SEPARATORS

CODE_SEPARATORS = [
    "\nclass ",
    "\ndef ",
    "\n\tdef ",
] + TEXT_SEPARATORS


def split_on_separator(text: str, separator: str) -> list[str]:
    """
    Cut ``text`` at every occurrence of ``separator``.

    The separator stays with the piece before the cut. Multi-character
    separators that begin with a newline mark the start of a block: the cut
    falls right after the newline, so the next piece starts with the marker.
    """
    keep = 1 if len(separator) > 1 and separator.startswith("\n") else len(separator)
    pieces: list[str] = []
    start = 0
    idx = text.find(separator)
    while idx != -1:
        cut = idx + keep
        pieces.append(text[start:cut])
        start = cut
        idx = text.find(separator, cut)
    if start < len(text):
        pieces.append(text[start:])
    return pieces


class TextSplitter:
    """
    Splits long text into overlapping chunks of at most ``chunk_size`` tokens,
    preferring sentence and word boundaries.
    """

    def __init__(
        self,
        chunk_size: int,
        chunk_overlap: int = 0,
        separators: Optional[list[str]] = None,
        token_counter: Optional[TokenCounter] = None,
    ):
        if chunk_size < 0 or chunk_overlap < 0:
            raise ValueError("chunk_size and chunk_overlap must not be negative")
        if chunk_size and chunk_overlap >= chunk_size:
            raise ValueError(
                f"chunk_overlap ({chunk_overlap}) must be less than chunk_size ({chunk_size})"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.separators = list(separators if separators is not None else TEXT_SEPARATORS)
        self.token_counter = token_counter or get_token_counter()

    @property
    def body_size(self) -> int:
        """Token budget for a chunk's own text, leaving room for the overlap."""
        return self.chunk_size - self.chunk_overlap

    def split_text(self, text: str) -> list[tuple[str, int]]:
        """
        Split ``text`` into chunks.

        Returns:
            List of (chunk_text, token_count) tuples in document order.
        """
        total_tokens = self.token_counter.count(text)
        # chunk_size 0 means unbounded
        if not self.chunk_size or total_tokens < self.chunk_size:
            return [(text, total_tokens)]

        fragments = self._fragment(text, self.separators)
        bodies = merge_chunks_serially(fragments, self.body_size, self.token_counter)

        chunks: list[tuple[str, int]] = []
        previous: Optional[str] = None
        for body, _ in bodies:
            if not body.strip():
                continue
            chunk = body if previous is None else self._with_overlap(previous, body)
            chunks.append((chunk, self.token_counter.count(chunk)))
            previous = chunk

        logger.debug(
            "Split %d tokens into %d chunks (chunk_size=%d, overlap=%d)",
            total_tokens, len(chunks), self.chunk_size, self.chunk_overlap,
        )
        return chunks

    def _fragment(self, text: str, separators: list[str]) -> list[str]:
        if self.token_counter.count(text) <= self.body_size:
            return [text]

        for i, separator in enumerate(separators):
            if separator not in text:
                continue
            remaining = separators[i + 1:]
            fragments: list[str] = []
            for piece in split_on_separator(text, separator):
                fragments.extend(self._fragment(piece, remaining))
            return fragments

        # Atomic unit: nothing left to cut at.
        return [text]

    def _with_overlap(self, previous: str, body: str) -> str:
        room = self.chunk_size - self.token_counter.count(body)
        overlap = min(self.chunk_overlap, room)
        while overlap > 0:
            prefix = self.token_counter.tail(previous, overlap)
            chunk = prefix + body
            if self.token_counter.count(chunk) <= self.chunk_size:
                return chunk
            overlap -= 1
        return body


def split_text(
    content: str,
    chunk_size: int,
    chunk_overlap: int = 0,
    separators: Optional[list[str]] = None,
    token_counter: Optional[TokenCounter] = None,
) -> list[tuple[str, int]]:
    """Split ``content`` with a one-off TextSplitter."""
    splitter = TextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        separators=separators,
        token_counter=token_counter,
    )
    return splitter.split_text(content)
