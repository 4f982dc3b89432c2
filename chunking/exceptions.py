"""
Custom Exceptions for the Chunking Pipeline.

Exception Hierarchy:
    ChunkingError (base)
    ├── UnsupportedFormatError
    ├── ExtractionFailureError
    ├── EmbeddingExhaustedError
    └── ConfigurationError

Per-file errors (everything except ConfigurationError) are caught at the
file boundary by ChunkPipeline and turned into result counters unless strict
mode is requested. ConfigurationError is fatal for the whole run.

Usage:
    from chunking.exceptions import ChunkingError, UnsupportedFormatError

    try:
        result = pipeline.chunk_file("notes.xyz")
    except UnsupportedFormatError as e:
        print(f"Skipped: {e.file_name}")
    except ChunkingError as e:
        print(f"Chunking failed: {e}")
"""

from __future__ import annotations

from typing import Optional


# =============================================================================
# BASE EXCEPTION
# =============================================================================


class ChunkingError(Exception):
    """
    Base exception for all chunking-related errors.

    Attributes:
        message: Human-readable error description
        details: Additional technical details (optional)
    """

    def __init__(
        self,
        message: str = "A chunking error occurred",
        details: Optional[str] = None,
    ):
        self.message = message
        self.details = details

        full_message = message
        if details:
            full_message = f"{message} | Details: {details}"

        super().__init__(full_message)


# =============================================================================
# PER-FILE ERRORS
# =============================================================================


class UnsupportedFormatError(ChunkingError):
    """
    Raised when a file's extension is not recognized or not enabled.

    Attributes:
        file_name: Name of the skipped file
    """

    def __init__(self, file_name: str, message: Optional[str] = None):
        self.file_name = file_name
        super().__init__(message or f"{file_name} is not supported")


class ExtractionFailureError(ChunkingError):
    """
    Raised when content or structural extraction of a file fails.

    Attributes:
        file_name: The file being extracted
        original_error: The underlying error (layout service, decoding, ...)
    """

    def __init__(
        self,
        file_name: str,
        original_error: Optional[Exception] = None,
        message: Optional[str] = None,
    ):
        self.file_name = file_name
        self.original_error = original_error
        details = str(original_error) if original_error else None
        super().__init__(
            message or f"Failed to extract content from {file_name}",
            details,
        )


class EmbeddingExhaustedError(ChunkingError):
    """
    Raised when a chunk could not be embedded within the retry budget.

    Attributes:
        chunk_text: The chunk that could not be embedded
        attempts: Number of attempts that were made
        original_error: The error raised by the last attempt
    """

    def __init__(
        self,
        chunk_text: str,
        attempts: int,
        original_error: Optional[Exception] = None,
    ):
        self.chunk_text = chunk_text
        self.attempts = attempts
        self.original_error = original_error
        preview = chunk_text if len(chunk_text) <= 80 else chunk_text[:77] + "..."
        details = str(original_error) if original_error else None
        super().__init__(
            f"Error getting embedding for chunk={preview!r} after {attempts} attempts",
            details,
        )


# =============================================================================
# FATAL ERRORS
# =============================================================================


class ConfigurationError(ChunkingError):
    """
    Raised when the pipeline cannot run at all.

    Examples: the tokenizer encoding fails to load, or PDF files must be
    processed but no layout analyzer was provided.
    """

    def __init__(
        self,
        message: str = "Invalid chunking configuration",
        details: Optional[str] = None,
    ):
        super().__init__(message, details)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def format_error_chain(error: Exception) -> str:
    """
    Format an exception and its chain for logging.

    Returns a multi-line string showing the error hierarchy.
    """
    lines = []
    current = error
    depth = 0

    while current is not None:
        prefix = "  " * depth + ("└─ " if depth > 0 else "")
        lines.append(f"{prefix}{type(current).__name__}: {current}")

        if getattr(current, "original_error", None):
            current = current.original_error
            depth += 1
        elif current.__cause__:
            current = current.__cause__
            depth += 1
        else:
            break

    return "\n".join(lines)
