"""
Chunking Module - token-bounded document chunking for retrieval indexing

Turns text, Markdown, HTML, Python source and layout-analyzed PDFs into
overlapping chunks of at most chunk_size tokens (tiktoken cl100k_base),
preferring sentence and word boundaries, ready for embedding.

Quick Start:
    from chunking import ChunkPipeline, ChunkingConfig
    from layout import PyMuPDFLayoutAnalyzer

    pipeline = ChunkPipeline(
        ChunkingConfig(chunk_size=512, token_overlap=64, use_layout=True),
        analyzer=PyMuPDFLayoutAnalyzer(),
    )
    result = pipeline.chunk_directory("data/docs")
    print(result.total_files, len(result.chunks))
"""

__version__ = "1.0.0"

from .config import ChunkingServiceConfig
from .exceptions import (
    ChunkingError,
    ConfigurationError,
    EmbeddingExhaustedError,
    ExtractionFailureError,
    UnsupportedFormatError,
)
from .formats import DocumentFormat, get_file_format, split_content
from .merger import merge_chunks_serially
from .models import ChunkingConfig, ChunkingResult, Document, RawChunk
from .pipeline import ChunkPipeline
from .retry import EmbeddingRetrier, RetryState
from .service import ChunkingService
from .splitter import TextSplitter, split_text
from .token_counter import TokenCounter, count_tokens, get_token_counter

__all__ = [
    "__version__",
    "ChunkPipeline",
    "ChunkingService",
    "ChunkingServiceConfig",
    "ChunkingConfig",
    "ChunkingResult",
    "Document",
    "RawChunk",
    "DocumentFormat",
    "get_file_format",
    "split_content",
    "TextSplitter",
    "split_text",
    "merge_chunks_serially",
    "EmbeddingRetrier",
    "RetryState",
    "TokenCounter",
    "get_token_counter",
    "count_tokens",
    "ChunkingError",
    "ConfigurationError",
    "EmbeddingExhaustedError",
    "ExtractionFailureError",
    "UnsupportedFormatError",
]
