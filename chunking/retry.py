"""
Embedding Retrier - fixed-count, fixed-delay retry around an embedding call

The retry loop is a small explicit state machine:

    ATTEMPTING(n) --success--> SUCCEEDED
    ATTEMPTING(n) --failure, n < max_attempts--> sleep(delay) --> ATTEMPTING(n+1)
    ATTEMPTING(n) --failure, n = max_attempts--> EXHAUSTED

Every exception from the embedding call counts as a failed attempt. The delay
is constant (no backoff, no jitter) and is only slept between attempts,
never after the last one. An optional should_cancel callable is checked
before each sleep; cancelling ends in EXHAUSTED with the attempts made so far.

Usage:
    from chunking.retry import EmbeddingRetrier

    retrier = EmbeddingRetrier(max_attempts=5, delay_seconds=30.0)
    vector = retrier.embed(embedder.embed, chunk_text)
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional

from .exceptions import EmbeddingExhaustedError

logger = logging.getLogger(__name__)

RETRY_COUNT = 5
RETRY_DELAY_SECONDS = 30.0

EmbedFunction = Callable[[str], list[float]]


class RetryState(str, Enum):
    """States of one embedding retry loop."""
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


class EmbeddingRetrier:
    """
    Calls an embedding function until it succeeds or the attempts run out.

    The retrier itself holds no per-call state, so one instance can serve
    several worker threads. Tests inject ``sleep`` to avoid real delays.
    """

    def __init__(
        self,
        max_attempts: int = RETRY_COUNT,
        delay_seconds: float = RETRY_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        should_cancel: Optional[Callable[[], bool]] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if delay_seconds < 0:
            raise ValueError("delay_seconds must not be negative")
        self.max_attempts = max_attempts
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self._should_cancel = should_cancel

    def embed(self, embed_fn: EmbedFunction, text: str) -> list[float]:
        """
        Embed ``text`` with ``embed_fn``, retrying on any exception.

        Raises:
            EmbeddingExhaustedError: No attempt succeeded (or the loop was
                cancelled); carries the chunk text, the number of attempts
                and the last error.
        """
        state = RetryState.ATTEMPTING
        attempt = 0
        last_error: Optional[Exception] = None
        vector: list[float] = []

        while state is RetryState.ATTEMPTING:
            attempt += 1
            try:
                vector = embed_fn(text)
                state = RetryState.SUCCEEDED
            except Exception as e:
                last_error = e
                if attempt >= self.max_attempts:
                    state = RetryState.EXHAUSTED
                elif self._should_cancel is not None and self._should_cancel():
                    logger.warning(f"Embedding cancelled after {attempt} attempts")
                    state = RetryState.EXHAUSTED
                else:
                    logger.warning(
                        f"Embedding attempt {attempt}/{self.max_attempts} failed: {e}; "
                        f"retrying in {self.delay_seconds}s"
                    )
                    self._sleep(self.delay_seconds)

        if state is RetryState.EXHAUSTED:
            raise EmbeddingExhaustedError(text, attempt, last_error) from last_error

        if attempt > 1:
            logger.info(f"Embedding succeeded on attempt {attempt}")
        return vector
