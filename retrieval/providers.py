"""
Embedding Providers - One interface over the local and external embedders

The active provider is chosen once at startup from EngineConfig and passed to
every component that needs it:

    LOCAL     LocalHashVectorizer, always ready, no I/O
    EXTERNAL  OllamaEmbedder against a configured endpoint, ready only when
              credentials are present

Both variants expose the same capabilities: embed, is_ready, model_id,
generate_answer and health_check.

Usage:
    from retrieval.config import EngineConfig
    from retrieval.providers import create_provider

    provider = create_provider(EngineConfig.from_env())
    vector = provider.embed("How do I reset my password?")
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional
from urllib.parse import urlparse

from generation.context_builder import build_answer_context
from generation.extractive import extractive_answer
from generation.ollama_client import chat
from generation.postprocess import postprocess_answer
from generation.prompts import SYSTEM_PROMPT, USER_PROMPT_TEMPLATE

from .config import PROVIDER_EXTERNAL, PROVIDER_LOCAL, EngineConfig
from .embedder import OllamaEmbedder
from .exceptions import ConfigurationError, EmptyInputError, ProviderCallError
from .local_embedder import LocalHashVectorizer
from .models import Document

logger = logging.getLogger(__name__)

_LOOPBACK_HOSTS = {"localhost", "127.0.0.1", "::1"}


class ProviderKind(str, Enum):
    LOCAL = PROVIDER_LOCAL
    EXTERNAL = PROVIDER_EXTERNAL


class EmbeddingProvider(ABC):
    """Capability interface shared by all provider variants."""

    kind: ProviderKind

    def embed(self, text: str) -> list[float]:
        """
        Embed ``text`` with the active model.

        Raises:
            EmptyInputError: If the text is blank (checked before dispatch).
            ConfigurationError: If the provider is not usable.
            ProviderCallError: If a remote call fails.
        """
        if not text or not text.strip():
            raise EmptyInputError("Text cannot be empty")
        if not self.is_ready():
            raise ConfigurationError(
                f"Embedding provider '{self.kind.value}' is not configured",
                details="Set the external embedding URL and API key, or use the local provider",
            )
        return self._embed(text)

    @property
    @abstractmethod
    def model_id(self) -> str:
        """Identifier stored with every vector this provider produces."""

    @abstractmethod
    def is_ready(self) -> bool:
        pass

    @abstractmethod
    def generate_answer(self, query: str, documents: list[Document]) -> str:
        pass

    @abstractmethod
    def health_check(self) -> dict:
        """Report whether the embedding backend can serve requests right now."""

    @abstractmethod
    def _embed(self, text: str) -> list[float]:
        pass


class LocalProvider(EmbeddingProvider):
    kind = ProviderKind.LOCAL

    def __init__(self, dimensions: int = 256, model_id: str = "local-hash-v2"):
        self._vectorizer = LocalHashVectorizer(dimensions=dimensions)
        self._model_id = model_id

    @property
    def model_id(self) -> str:
        return self._model_id

    @property
    def dimensions(self) -> int:
        return self._vectorizer.dimensions

    def is_ready(self) -> bool:
        return True

    def generate_answer(self, query: str, documents: list[Document]) -> str:
        return extractive_answer(query, documents)

    def health_check(self) -> dict:
        return {"healthy": True, "model": self.model_id, "dimensions": self.dimensions}

    def _embed(self, text: str) -> list[float]:
        return self._vectorizer.embed(text)


class ExternalProvider(EmbeddingProvider):
    kind = ProviderKind.EXTERNAL

    def __init__(self, config: EngineConfig, embedder: Optional[OllamaEmbedder] = None):
        self.config = config
        self._embedder = embedder or OllamaEmbedder(
            model=config.external_model,
            base_url=config.external_base_url,
            api_key=config.external_api_key,
            timeout=config.external_timeout,
        )

    @property
    def model_id(self) -> str:
        return self.config.external_model

    @property
    def embedder(self) -> OllamaEmbedder:
        return self._embedder

    def health_check(self) -> dict:
        if not self.is_ready():
            return {
                "healthy": False,
                "model": self.model_id,
                "dimensions": None,
                "error": "External embedding provider is not configured",
            }
        result = dict(self.embedder.health_check())
        # Known only once the model has embedded something.
        result["dimensions"] = self.embedder.dimensions
        return result

    def is_ready(self) -> bool:
        if not self.config.external_base_url or not self.config.external_model:
            return False
        if self.config.external_api_key:
            return True
        # A local Ollama needs no credentials.
        host = urlparse(self.config.external_base_url).hostname or ""
        return host in _LOOPBACK_HOSTS

    def generate_answer(self, query: str, documents: list[Document]) -> str:
        if not self.config.generation_model or not documents:
            return extractive_answer(query, documents)
        try:
            answer = self._generate(query, documents)
        except ProviderCallError as e:
            logger.warning(f"Generative answer failed, using extractive answer: {e}")
            return extractive_answer(query, documents)
        if not answer:
            logger.warning("Generative answer was empty, using extractive answer")
            return extractive_answer(query, documents)
        return answer

    def _generate(self, query: str, documents: list[Document]) -> str:
        context = build_answer_context(
            query=query,
            documents=documents,
            max_context_tokens=self.config.max_context_tokens,
            system_prompt=SYSTEM_PROMPT,
            user_template=USER_PROMPT_TEMPLATE,
        )
        user_prompt = USER_PROMPT_TEMPLATE.format(query=query, context=context.context_text)
        try:
            content = chat(
                base_url=self.config.external_base_url,
                model=self.config.generation_model,
                system_prompt=SYSTEM_PROMPT,
                user_prompt=user_prompt,
                temperature=self.config.generation_temperature,
                output_tokens=self.config.generation_output_tokens,
                api_key=self.config.external_api_key,
                timeout=self.config.external_timeout,
            )
        except Exception as e:
            raise ProviderCallError(
                f"Chat request failed for model '{self.config.generation_model}'",
                provider="ollama",
                original_error=e,
            ) from e
        return postprocess_answer(content)

    def _embed(self, text: str) -> list[float]:
        return self._embedder.embed(text)


def create_provider(config: EngineConfig) -> EmbeddingProvider:
    """Build the provider variant named by ``config.embedding_provider``."""
    kind = ProviderKind(config.embedding_provider)
    if kind is ProviderKind.LOCAL:
        provider: EmbeddingProvider = LocalProvider(
            dimensions=config.local_dimensions,
            model_id=config.local_model_id,
        )
    else:
        provider = ExternalProvider(config)
    logger.info(
        f"Embedding provider: {kind.value} (model={provider.model_id}, ready={provider.is_ready()})"
    )
    return provider
