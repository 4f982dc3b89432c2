"""
Data Models for the Vector Store

Defines:
1. StoreConfig - ChromaDB collection and embedding provider settings
2. SourceBlob - one scraped source document as delivered by blob storage
3. IndexStats - outcome of indexing one blob

Design Principles:
- Pydantic v2 for validation (consistent with chunking and layout)
- The store keeps index records flat: ChromaDB metadata only holds scalars
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


class StoreConfig(BaseModel):
    """Configuration for the index store and its embedder."""
    collection_name: str = Field(
        "documents",
        description="ChromaDB collection name",
    )
    persist_directory: str = Field(
        "./chroma_db",
        description="Directory for ChromaDB persistent storage",
    )
    distance_metric: str = Field(
        "cosine",
        description="Distance metric for ChromaDB (cosine, l2, ip)",
    )
    embedding_provider: Literal["ollama", "openai"] = Field(
        "openai",
        description="Embedding service used for chunk vectors",
    )
    embedding_model: str = Field(
        "text-embedding-ada-002",
        description="Embedding model (OpenAI model or Ollama model name)",
    )
    ollama_base_url: str = Field(
        "http://localhost:11434",
        description="Ollama API base URL",
    )
    azure_endpoint: Optional[str] = Field(
        None,
        description="Azure OpenAI endpoint; plain OpenAI is used when unset",
    )
    azure_deployment: Optional[str] = Field(
        None,
        description="Azure OpenAI embedding deployment name",
    )
    api_version: str = Field(
        "2024-02-01",
        description="Azure OpenAI API version",
    )


class SourceBlob(BaseModel):
    """
    A scraped page as stored by the crawler.

    metadata must carry the page's ``url`` and ``lastUpdated`` timestamp.
    """
    name: str = Field(..., description="Blob name, used as filepath and fallback title")
    content: Union[str, bytes] = Field(..., description="Raw HTML")
    metadata: dict[str, str] = Field(default_factory=dict)

    @field_validator("metadata")
    @classmethod
    def _require_source_keys(cls, value: dict[str, str]) -> dict[str, str]:
        missing = [key for key in ("url", "lastUpdated") if not value.get(key)]
        if missing:
            raise ValueError(f"metadata is missing {', '.join(missing)}")
        return value

    @property
    def url(self) -> str:
        return self.metadata["url"]

    @property
    def last_updated(self) -> str:
        return self.metadata["lastUpdated"]

    def text(self) -> str:
        if isinstance(self.content, bytes):
            return self.content.decode("utf-8", errors="replace")
        return self.content


class IndexStats(BaseModel):
    """Statistics from indexing one source blob."""
    url: str
    title: str = ""
    chunks_stored: int = 0
    chunks_deleted: int = 0
    chunk_ids: list[str] = Field(default_factory=list)
