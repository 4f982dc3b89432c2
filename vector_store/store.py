"""
Index Store - ChromaDB-backed storage for chunk records

Holds chunk Documents (content, title, url, filepath, metadata and vector)
in a ChromaDB collection:
- Upsert: store records by id, replacing records with the same id
- Delete: remove every record whose field matches a value, used to replace
  all chunks of a source URL before re-indexing it
- Inspect: count and look up records by URL

Design:
- PersistentClient on disk by default; tests pass an EphemeralClient
- Records must carry a content vector, or an embedder must be given to
  compute the missing ones
- Document.metadata is stored as a JSON string (ChromaDB metadata is flat)

Usage:
    from vector_store import ChromaIndexStore

    store = ChromaIndexStore()
    store.delete_by_url("https://example.com/page")
    store.upsert(chunks)
"""

import json
import logging
from typing import Callable, Iterable, Optional

import chromadb

from chunking.models import Document

from .models import StoreConfig

logger = logging.getLogger(__name__)

# ChromaDB has a batch size limit
BATCH_SIZE = 500


class ChromaIndexStore:
    """Search index over chunk records, backed by ChromaDB."""

    def __init__(
        self,
        config: Optional[StoreConfig] = None,
        chroma_client: Optional[chromadb.ClientAPI] = None,
        embedder: Optional[Callable[[str], list[float]]] = None,
    ):
        """
        Initialize the index store.

        Args:
            config: Store configuration. Uses defaults if not provided.
            chroma_client: Optional pre-created ChromaDB client (for testing).
            embedder: Computes vectors for records that have none.
        """
        self.config = config or StoreConfig()
        self._embedder = embedder
        if chroma_client is not None:
            self._client = chroma_client
        else:
            self._client = chromadb.PersistentClient(path=self.config.persist_directory)
        self._collection = self._client.get_or_create_collection(
            name=self.config.collection_name,
            metadata={"hnsw:space": self.config.distance_metric},
        )

    def count(self) -> int:
        return self._collection.count()

    def upsert(self, documents: Iterable[Document]) -> int:
        """
        Store documents by id.

        Returns:
            Number of records written.

        Raises:
            ValueError: A document has no id, or no vector and no embedder
                is configured.
        """
        ids: list[str] = []
        texts: list[str] = []
        embeddings: list[list[float]] = []
        metadatas: list[dict] = []

        for document in documents:
            if not document.id:
                raise ValueError("Documents need an id before they can be stored")
            ids.append(document.id)
            texts.append(document.content)
            embeddings.append(self._vector(document))
            metadatas.append(self._flatten_metadata(document))

        for i in range(0, len(ids), BATCH_SIZE):
            end = min(i + BATCH_SIZE, len(ids))
            self._collection.upsert(
                ids=ids[i:end],
                embeddings=embeddings[i:end],
                documents=texts[i:end],
                metadatas=metadatas[i:end],
            )

        logger.info(f"Upserted {len(ids)} records into '{self.config.collection_name}'")
        return len(ids)

    def ids_where(self, field: str, value: str) -> list[str]:
        return self._collection.get(where={field: value}, include=[])["ids"]

    def delete_where(self, field: str, value: str) -> int:
        """
        Delete every record whose ``field`` equals ``value``.

        Returns:
            Number of records deleted.
        """
        ids = self.ids_where(field, value)
        if ids:
            self._collection.delete(ids=ids)
            logger.info(f"Deleted {len(ids)} records where {field}={value!r}")
        return len(ids)

    def delete_by_url(self, url: str) -> int:
        """Delete all chunks of the source at ``url``."""
        return self.delete_where("url", url)

    def get_by_url(self, url: str) -> list[Document]:
        """Load the stored chunks of a source URL (without vectors)."""
        records = self._collection.get(where={"url": url}, include=["documents", "metadatas"])
        documents = []
        for chunk_id, text, meta in zip(records["ids"], records["documents"], records["metadatas"]):
            documents.append(
                Document(
                    id=chunk_id,
                    content=text,
                    title=meta.get("title", ""),
                    url=meta.get("url", ""),
                    filepath=meta.get("filepath", ""),
                    metadata=json.loads(meta.get("metadata") or "{}"),
                )
            )
        return documents

    def _vector(self, document: Document) -> list[float]:
        if document.content_vector is not None:
            return document.content_vector
        if self._embedder is None:
            raise ValueError(f"Document {document.id} has no content vector and no embedder is set")
        return self._embedder(document.content)

    @staticmethod
    def _flatten_metadata(document: Document) -> dict:
        return {
            "title": document.title,
            "url": document.url,
            "filepath": document.filepath,
            "metadata": json.dumps(document.metadata, ensure_ascii=False),
        }
