"""
Data Models for the Chunking Pipeline

Defines:
1. ChunkingConfig - chunk size, overlap, filtering and run options
2. Document - a single chunk record, ready for embedding and indexing
3. RawChunk - a chunk in progress, before size filtering
4. ChunkingResult - chunks plus per-run counters
5. ChunkRequest / ChunkResponse - HTTP API payloads

Design Principles:
- Pydantic v2 for validation and serialization
- ChunkingResult is immutable; results are combined, never appended to
- Document ids are assigned by whoever writes the chunks out, not here

Usage:
    config = ChunkingConfig(chunk_size=512, token_overlap=64)
    result = pipeline.chunk_directory("data/")
    print(result.total_files, len(result.chunks))
"""

import json
from typing import Any, Iterable, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .formats import FILE_FORMATS


class ChunkingConfig(BaseModel):
    """
    Configuration for the chunking pipeline.

    chunk_size = 0 disables splitting: every document becomes one chunk.
    """
    chunk_size: int = Field(
        1024,
        description="Maximum tokens per chunk (0 = unbounded)",
        ge=0,
    )
    token_overlap: int = Field(
        128,
        description="Tokens of trailing context repeated at the head of the next chunk",
        ge=0,
    )
    min_chunk_size: int = Field(
        10,
        description="Chunks with fewer tokens are dropped and counted as skipped",
        ge=0,
    )
    use_layout: bool = Field(
        False,
        description="Analyze PDFs in layout mode (headings and tables) instead of read mode",
    )
    add_embeddings: bool = Field(
        False,
        description="Attach an embedding vector to every chunk",
    )
    strict: bool = Field(
        False,
        description="Raise on unsupported or failing files instead of counting them",
    )
    url_prefix: Optional[str] = Field(
        None,
        description="Prefix joined with the relative file path to build chunk URLs",
    )
    extensions_to_process: list[str] = Field(
        default_factory=lambda: list(FILE_FORMATS),
        description="File extensions (without dot) that are chunked",
    )
    njobs: int = Field(
        1,
        description="Worker threads for directory chunking",
        ge=1,
    )

    @model_validator(mode="after")
    def _check_overlap(self) -> "ChunkingConfig":
        if self.chunk_size and self.token_overlap >= self.chunk_size:
            raise ValueError(
                f"token_overlap ({self.token_overlap}) must be less than "
                f"chunk_size ({self.chunk_size})"
            )
        return self


class Document(BaseModel):
    """
    A chunk record as it is written to the search index.

    Only content_vector changes after the pipeline hands the record over.
    """
    content: str = Field(..., description="Chunk text")
    id: str = Field("", description="Assigned at write time")
    title: str = Field("", description="Title of the source document")
    filepath: str = Field("", description="Source path relative to the chunked directory")
    url: str = Field("", description="Source URL")
    metadata: dict[str, Any] = Field(default_factory=dict)
    content_vector: Optional[list[float]] = Field(
        None,
        description="Embedding of content, present only when embedding succeeded",
    )

    def to_index_record(self) -> dict[str, Any]:
        """Serialize with the search index field names."""
        record: dict[str, Any] = {
            "id": self.id,
            "content": self.content,
            "title": self.title,
            "filepath": self.filepath,
            "url": self.url,
            "metadata": json.dumps(self.metadata, ensure_ascii=False),
        }
        if self.content_vector is not None:
            record["contentVector"] = self.content_vector
        return record


class RawChunk(NamedTuple):
    """A chunk before size filtering: its text, token count and source document."""
    text: str
    token_count: int
    document: Document


class ChunkingResult(BaseModel):
    """
    Chunks and counters for one file or a whole run.

    Counters always add up, also when files fail: total_files counts every
    attempted file.
    """
    model_config = ConfigDict(frozen=True)

    chunks: list[Document] = Field(default_factory=list)
    total_files: int = 0
    num_unsupported_format_files: int = 0
    num_files_with_errors: int = 0
    skipped_chunks: int = 0

    @classmethod
    def unsupported(cls) -> "ChunkingResult":
        return cls(total_files=1, num_unsupported_format_files=1)

    @classmethod
    def failed(cls) -> "ChunkingResult":
        return cls(total_files=1, num_files_with_errors=1)

    @classmethod
    def combine(cls, results: Iterable["ChunkingResult"]) -> "ChunkingResult":
        """Reduce many results into one, keeping chunk order."""
        chunks: list[Document] = []
        totals = {
            "total_files": 0,
            "num_unsupported_format_files": 0,
            "num_files_with_errors": 0,
            "skipped_chunks": 0,
        }
        for result in results:
            chunks.extend(result.chunks)
            for key in totals:
                totals[key] += getattr(result, key)
        return cls(chunks=chunks, **totals)


# =============================================================================
# API MODELS
# =============================================================================


class ChunkRequest(BaseModel):
    """Chunk a directory on the server and write the chunks as JSONL."""
    directory_path: str = Field(..., description="Directory to chunk recursively")
    output_name: Optional[str] = Field(None, description="JSONL file name in the data directory")


class ChunkResponse(BaseModel):
    output_path: str
    total_files: int
    num_unsupported_format_files: int
    num_files_with_errors: int
    skipped_chunks: int
    total_chunks: int


class ContentChunkRequest(BaseModel):
    """Chunk content sent in the request body."""
    content: str
    file_name: Optional[str] = Field(None, description="Selects the format; omitted means plain text")
    url: str = ""


class ContentChunkResponse(BaseModel):
    chunks: list[Document]
    skipped_chunks: int
