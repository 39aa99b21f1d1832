"""
Retrieval engine for knowledge-base search.

Deterministic local embeddings (or an external embedding API), an embedding
index store, hybrid semantic + keyword ranking and a batch indexing pipeline.

Quick Start:
    from retrieval import EngineConfig, InMemoryDocumentSource, KnowledgeSearchService

    service = KnowledgeSearchService(EngineConfig(), InMemoryDocumentSource(documents))
    service.index_all_documents()
    response = service.search("mongodb connection refused")
"""

__version__ = "1.0.0"

from .config import EngineConfig
from .exceptions import (
    ConfigurationError,
    DimensionMismatchError,
    EmptyInputError,
    NotFoundError,
    ProviderCallError,
    RetrievalError,
)
from .models import (
    Document,
    EmbeddingRecord,
    IndexAllResult,
    IndexOutcome,
    IndexStatus,
    RankedResult,
    SearchResponse,
)
from .local_embedder import LocalHashVectorizer
from .providers import EmbeddingProvider, ExternalProvider, LocalProvider, ProviderKind, create_provider
from .storage import EmbeddingIndexStore
from .ranking import HybridRanker, cosine_similarity
from .documents import DocumentSource, InMemoryDocumentSource, JsonlDocumentSource
from .indexing import IndexingPipeline, build_embedding_text
from .service import KnowledgeSearchService

__all__ = [
    "__version__",
    "EngineConfig",
    "RetrievalError",
    "ConfigurationError",
    "EmptyInputError",
    "DimensionMismatchError",
    "ProviderCallError",
    "NotFoundError",
    "Document",
    "EmbeddingRecord",
    "RankedResult",
    "SearchResponse",
    "IndexOutcome",
    "IndexAllResult",
    "IndexStatus",
    "LocalHashVectorizer",
    "EmbeddingProvider",
    "LocalProvider",
    "ExternalProvider",
    "ProviderKind",
    "create_provider",
    "EmbeddingIndexStore",
    "HybridRanker",
    "cosine_similarity",
    "DocumentSource",
    "InMemoryDocumentSource",
    "JsonlDocumentSource",
    "IndexingPipeline",
    "build_embedding_text",
    "KnowledgeSearchService",
]
