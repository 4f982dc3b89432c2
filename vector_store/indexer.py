"""
Source Indexer - replace-by-URL indexing of one scraped page

Flow for one SourceBlob (raw HTML plus url/lastUpdated metadata):
1. Title: the page's <title>; without one, the title is guessed from the
   body text (first "title: " line or first alphanumeric line), falling
   back to the blob name
2. Body: visible text of <body>, whitespace-normalized
3. Split the body into overlapping token-bounded chunks
4. Embed every chunk through the EmbeddingRetrier
5. Give each chunk a fresh uuid4 id and {"chunk_id": id} metadata
6. Delete all previously stored chunks of the same URL, then upsert

Embedding happens before the delete, so a page whose embedding fails keeps
its old chunks.

Usage:
    from vector_store import SourceBlob, SourceIndexer

    indexer = SourceIndexer(store, embedder)
    stats = indexer.index_blob(SourceBlob(name="p.html", content=html,
                                          metadata={"url": url, "lastUpdated": ts}))
"""

import logging
import uuid
from typing import Callable, Optional

from bs4 import BeautifulSoup

from chunking.cleaner import cleanup_content, extract_html_body, extract_text_title
from chunking.models import Document
from chunking.retry import EmbeddingRetrier
from chunking.splitter import TextSplitter
from chunking.token_counter import TokenCounter

from .models import IndexStats, SourceBlob
from .store import ChromaIndexStore

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024
DEFAULT_TOKEN_OVERLAP = 128


def _html_title(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    if soup.title is None:
        return ""
    return soup.title.get_text().strip()


class SourceIndexer:
    """Indexes scraped pages into a ChromaIndexStore, one URL at a time."""

    def __init__(
        self,
        store: ChromaIndexStore,
        embedder: Callable[[str], list[float]],
        retrier: Optional[EmbeddingRetrier] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        token_overlap: int = DEFAULT_TOKEN_OVERLAP,
        token_counter: Optional[TokenCounter] = None,
    ):
        self.store = store
        self.embedder = embedder
        self.retrier = retrier or EmbeddingRetrier()
        self.splitter = TextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=token_overlap,
            token_counter=token_counter,
        )

    def build_documents(self, blob: SourceBlob) -> list[Document]:
        """Turn a blob into embedded chunk records with fresh ids."""
        html = blob.text()
        body = cleanup_content(extract_html_body(html))
        title = _html_title(html) or extract_text_title(body, fallback=blob.name)

        documents = []
        for text, _ in self.splitter.split_text(body):
            if not text.strip():
                continue
            chunk_id = str(uuid.uuid4())
            documents.append(
                Document(
                    id=chunk_id,
                    content=text,
                    title=title,
                    filepath=blob.name,
                    url=blob.url,
                    metadata={"chunk_id": chunk_id},
                    content_vector=self.retrier.embed(self.embedder, text),
                )
            )
        return documents

    def index_blob(self, blob: SourceBlob) -> IndexStats:
        """
        Replace the stored chunks of ``blob.url`` with fresh ones.

        Raises:
            EmbeddingExhaustedError: A chunk could not be embedded; the
                store is left untouched.
        """
        logger.info(f"Indexing {blob.name} (url: {blob.url}, lastUpdated: {blob.last_updated})")
        documents = self.build_documents(blob)

        deleted = self.store.delete_by_url(blob.url)
        stored = self.store.upsert(documents)

        return IndexStats(
            url=blob.url,
            title=documents[0].title if documents else "",
            chunks_stored=stored,
            chunks_deleted=deleted,
            chunk_ids=[document.id for document in documents],
        )
