"""
Vector Store Module - embedding clients and the ChromaDB chunk index

Embeds chunk records and keeps them in a ChromaDB collection, replacing all
chunks of a source URL whenever that source is re-indexed.

Quick Start:
    from vector_store import ChromaIndexStore, SourceBlob, SourceIndexer, StoreConfig, create_embedder

    config = StoreConfig()
    embedder = create_embedder(config)
    store = ChromaIndexStore(config)

    indexer = SourceIndexer(store, embedder)
    stats = indexer.index_blob(SourceBlob(
        name="entry.html",
        content=html,
        metadata={"url": "https://example.com/entry", "lastUpdated": "2024-01-01"},
    ))
"""

__version__ = "1.0.0"

from .embedder import OllamaEmbedder, OpenAIEmbedder, create_embedder
from .indexer import SourceIndexer
from .models import IndexStats, SourceBlob, StoreConfig
from .store import ChromaIndexStore

__all__ = [
    "__version__",
    "ChromaIndexStore",
    "SourceIndexer",
    "OllamaEmbedder",
    "OpenAIEmbedder",
    "create_embedder",
    "StoreConfig",
    "SourceBlob",
    "IndexStats",
]
