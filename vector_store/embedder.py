"""
Embedders - text embedding clients for chunk vectors

Two interchangeable clients, both usable as ``Callable[[str], list[float]]``
(the shape ChunkPipeline and the EmbeddingRetrier expect):

- OpenAIEmbedder: OpenAI or Azure OpenAI embeddings
  (text-embedding-ada-002, 1536 dimensions)
- OllamaEmbedder: a local Ollama embedding model

Design:
- Thin wrappers; no retry here. Retrying is the EmbeddingRetrier's job
- Failures surface as ConnectionError / RuntimeError with the cause chained
- No ChromaDB dependency, pure embedding logic

Usage:
    from vector_store.embedder import create_embedder

    embedder = create_embedder(StoreConfig())
    vector = embedder.embed("An example sentence")
"""

import logging
import os
from typing import Optional

import ollama
from openai import AzureOpenAI, OpenAI
from openai import APIConnectionError as OpenAIConnectionError
from openai import OpenAIError

from .models import StoreConfig

logger = logging.getLogger(__name__)

ADA_002_DIMENSIONS = 1536


class OpenAIEmbedder:
    """
    Generates embeddings with the OpenAI embeddings API.

    Pass ``azure_endpoint`` (and a deployment name) to use an Azure OpenAI
    resource instead of api.openai.com.
    """

    def __init__(
        self,
        model: str = "text-embedding-ada-002",
        api_key: Optional[str] = None,
        azure_endpoint: Optional[str] = None,
        azure_deployment: Optional[str] = None,
        api_version: str = "2024-02-01",
        client: Optional[OpenAI] = None,
    ):
        """
        Initialize the embedder.

        Args:
            model: Embedding model name
            api_key: API key (defaults to AZURE_OPENAI_API_KEY or
                OPENAI_API_KEY from the environment)
            azure_endpoint: Azure OpenAI endpoint URL
            azure_deployment: Azure deployment to call (defaults to model)
            api_version: Azure OpenAI API version
            client: Pre-built client (for testing)
        """
        self.model = model
        self.azure_endpoint = azure_endpoint or os.getenv("AZURE_OPENAI_ENDPOINT")
        self._dimensions: Optional[int] = None

        if client is not None:
            self._client = client
        elif self.azure_endpoint:
            self.model = azure_deployment or model
            self._client = AzureOpenAI(
                api_key=api_key or os.getenv("AZURE_OPENAI_API_KEY"),
                azure_endpoint=self.azure_endpoint,
                azure_deployment=self.model,
                api_version=api_version,
            )
        else:
            api_key = api_key or os.getenv("OPENAI_API_KEY")
            if not api_key:
                raise ValueError("OpenAI API key required. Set OPENAI_API_KEY environment variable.")
            self._client = OpenAI(api_key=api_key)

    @property
    def dimensions(self) -> Optional[int]:
        """Return the embedding dimensions (available after first embed call)."""
        return self._dimensions

    def embed(self, text: str) -> list[float]:
        """
        Generate an embedding for a single text.

        Raises:
            ValueError: Empty text
            ConnectionError: The API is not reachable
            RuntimeError: The API rejected the request
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        try:
            response = self._client.embeddings.create(model=self.model, input=[text])
        except OpenAIConnectionError as e:
            raise ConnectionError(f"Cannot connect to the embeddings API: {e}") from e
        except OpenAIError as e:
            raise RuntimeError(f"Embedding failed for model '{self.model}': {e}") from e

        embedding = list(response.data[0].embedding)
        self._dimensions = len(embedding)
        return embedding

    __call__ = embed


class OllamaEmbedder:
    """Generates text embeddings using a local Ollama model."""

    def __init__(
        self,
        model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434",
    ):
        self.model = model
        self.base_url = base_url
        self._client = ollama.Client(host=base_url)
        self._dimensions: Optional[int] = None

    @property
    def dimensions(self) -> Optional[int]:
        return self._dimensions

    def embed(self, text: str) -> list[float]:
        """
        Generate an embedding for a single text.

        Raises:
            ValueError: Empty text
            ConnectionError: Ollama is not reachable
            RuntimeError: Embedding generation failed
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        try:
            response = self._client.embed(model=self.model, input=text)
        except ollama.ResponseError as e:
            raise RuntimeError(
                f"Ollama embedding failed for model '{self.model}': {e}"
            ) from e
        except Exception as e:
            if "Connection" in type(e).__name__ or "refused" in str(e).lower():
                raise ConnectionError(
                    f"Cannot connect to Ollama at {self.base_url}. "
                    f"Is Ollama running? Start it with: ollama serve"
                ) from e
            raise RuntimeError(f"Embedding generation failed: {e}") from e

        embedding = response["embeddings"][0]
        self._dimensions = len(embedding)
        return embedding

    __call__ = embed

    def health_check(self) -> dict[str, bool | str]:
        """
        Check if Ollama is running and the embedding model is available.

        Returns:
            Dict with 'healthy', 'ollama_running', 'model_available',
            'model' and 'error'.
        """
        result = {
            "healthy": False,
            "ollama_running": False,
            "model_available": False,
            "model": self.model,
            "error": "",
        }

        try:
            models = self._client.list()
            result["ollama_running"] = True

            # "nomic-embed-text" matches "nomic-embed-text:latest"
            model_names = [m.model for m in models.models]
            result["model_available"] = any(m.startswith(self.model) for m in model_names)

            if result["model_available"]:
                result["healthy"] = True
            else:
                result["error"] = (
                    f"Model '{self.model}' not found. Pull it with: ollama pull {self.model}"
                )
        except Exception as e:
            result["error"] = f"Cannot connect to Ollama: {e}"

        return result


def create_embedder(config: StoreConfig):
    """Build the embedder selected by ``config.embedding_provider``."""
    if config.embedding_provider == "ollama":
        return OllamaEmbedder(model=config.embedding_model, base_url=config.ollama_base_url)
    return OpenAIEmbedder(
        model=config.embedding_model,
        azure_endpoint=config.azure_endpoint,
        azure_deployment=config.azure_deployment,
        api_version=config.api_version,
    )
