"""
Ollama Embedder - Remote embedding generation via the Ollama API

Wraps the Ollama Python client for the external embedding provider.

Design:
- Thin wrapper around ollama.Client.embed() (available since ollama 0.4+)
- Optional bearer token for hosted Ollama endpoints
- Per-call timeout; every transport or API failure becomes ProviderCallError

Usage:
    from retrieval.embedder import OllamaEmbedder

    embedder = OllamaEmbedder(model="nomic-embed-text", timeout=30.0)
    vector = embedder.embed("Reset a forgotten password")
"""

import logging
from typing import Optional

import ollama

from .exceptions import EmptyInputError, ProviderCallError

logger = logging.getLogger(__name__)

# Remote models reject very long inputs; the original integration cut at 8000.
MAX_INPUT_CHARS = 8000


class OllamaEmbedder:
    """
    Generates text embeddings using a (possibly remote) Ollama model.
    """

    def __init__(
        self,
        model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434",
        api_key: str = "",
        timeout: float = 30.0,
    ):
        """
        Initialize the embedder.

        Args:
            model: Ollama model name for embeddings.
            base_url: Ollama API base URL.
            api_key: Bearer token sent with each request (optional).
            timeout: Per-request timeout in seconds.
        """
        self.model = model
        self.base_url = base_url
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
        self._client = ollama.Client(host=base_url, headers=headers, timeout=timeout)
        self._dimensions: Optional[int] = None

    @property
    def dimensions(self) -> Optional[int]:
        """Return the embedding dimensions (available after first embed call)."""
        return self._dimensions

    def embed(self, text: str) -> list[float]:
        """
        Generate an embedding for a single text.

        Raises:
            EmptyInputError: If the text is blank.
            ProviderCallError: If the API call fails or times out.
        """
        if not text or not text.strip():
            raise EmptyInputError("Cannot embed empty text")

        try:
            response = self._client.embed(model=self.model, input=text[:MAX_INPUT_CHARS])
            embedding = [float(v) for v in response["embeddings"][0]]
        except ollama.ResponseError as e:
            raise ProviderCallError(
                f"Embedding request rejected for model '{self.model}'",
                provider="ollama",
                original_error=e,
            ) from e
        except Exception as e:
            if "Timeout" in type(e).__name__:
                message = f"Embedding request to {self.base_url} timed out"
            elif "Connect" in type(e).__name__ or "refused" in str(e).lower():
                message = f"Cannot connect to embedding API at {self.base_url}"
            else:
                message = "Embedding generation failed"
            raise ProviderCallError(message, provider="ollama", original_error=e) from e

        self._dimensions = len(embedding)
        return embedding

    def health_check(self) -> dict[str, bool | str]:
        """
        Check if the API is reachable and the embedding model is available.

        Returns:
            Dict with 'healthy', 'reachable', 'model_available', 'model'
            and 'error'.
        """
        result = {
            "healthy": False,
            "reachable": False,
            "model_available": False,
            "model": self.model,
            "error": "",
        }

        try:
            models = self._client.list()
            result["reachable"] = True

            model_names = [m.model for m in models.models]
            # Match by prefix (e.g., "nomic-embed-text" matches "nomic-embed-text:latest")
            result["model_available"] = any(
                m.startswith(self.model) for m in model_names
            )

            if not result["model_available"]:
                result["error"] = (
                    f"Model '{self.model}' not found. Available: {model_names}"
                )
            else:
                result["healthy"] = True

        except Exception as e:
            logger.warning(f"Embedding API health check failed: {e}")
            result["error"] = f"Cannot connect to embedding API: {e}"

        return result
