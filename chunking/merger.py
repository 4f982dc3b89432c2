"""
Chunk Merger - packs small adjacent fragments into budget-sized chunks.

Token counts are summed per fragment. The reported size of a merged chunk is
that running sum, which is at least the token count of the joined text for
fragments cut at separator boundaries.
"""

from typing import Iterable, Optional

from .token_counter import TokenCounter, get_token_counter


def merge_chunks_serially(
    fragments: Iterable[str],
    num_tokens: int,
    token_counter: Optional[TokenCounter] = None,
) -> list[tuple[str, int]]:
    """
    Greedily merge consecutive fragments up to ``num_tokens`` tokens.

    A new chunk starts whenever the next fragment would push the running
    total over the budget. A single fragment larger than the budget is
    passed through on its own. The last buffer is always flushed.

    Returns:
        List of (text, token_count) tuples, in input order.
    """
    counter = token_counter or get_token_counter()
    merged: list[tuple[str, int]] = []
    current: list[str] = []
    total_size = 0

    for fragment in fragments:
        size = counter.count(fragment)
        if total_size > 0 and total_size + size > num_tokens:
            merged.append(("".join(current), total_size))
            current = []
            total_size = 0
        current.append(fragment)
        total_size += size

    if total_size > 0:
        merged.append(("".join(current), total_size))

    return merged
