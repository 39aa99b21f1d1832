import logging
import threading
from typing import Optional

from generation.synthesizer import AnswerSynthesizer

from .bm25_index import BM25Index
from .config import EngineConfig
from .documents import DocumentSource
from .exceptions import (
    ConfigurationError,
    DimensionMismatchError,
    EmptyInputError,
    RetrievalError,
)
from .indexing import IndexingPipeline
from .models import (
    AlternativeItem,
    IndexAllResult,
    IndexOutcome,
    IndexStatus,
    KeywordSearchResponse,
    RankedResult,
    RecentlyIndexed,
    SearchResponse,
    SourceItem,
)
from .providers import EmbeddingProvider, create_provider
from .ranking import HybridRanker
from .storage import EmbeddingIndexStore

logger = logging.getLogger(__name__)

EMPTY_QUERY_MESSAGE = "Please provide a search query"
UNAVAILABLE_MESSAGE = (
    "Search service is not configured. Set the embedding provider credentials "
    "or use keyword search."
)
NOT_INDEXED_MESSAGE = "No indexed articles found. Please index articles first."
NOT_FOUND_MESSAGE = (
    "No relevant articles found for your query. Try rephrasing, or submit "
    "this solution to the knowledge base once resolved."
)
MIXED_MODELS_MESSAGE = (
    "The search index mixes embeddings from different models. Re-index all "
    "documents with the current provider."
)
RECENTLY_INDEXED_LIMIT = 10
KEYWORD_ALTERNATIVES = 3
SNIPPET_CHARS = 200


class KnowledgeSearchService:
    def __init__(
        self,
        config: EngineConfig,
        documents: DocumentSource,
        store: Optional[EmbeddingIndexStore] = None,
        provider: Optional[EmbeddingProvider] = None,
    ):
        self.config = config
        self.documents = documents
        self.store = store if store is not None else EmbeddingIndexStore(config.data_dir)
        self.provider = provider or create_provider(config)
        self.ranker = HybridRanker(config)
        self.synthesizer = AnswerSynthesizer(self.provider, use_generative=config.generative_enabled)
        self.pipeline = IndexingPipeline(self.documents, self.provider, self.store)

    # ------------------------------------------------------------------
    # Query path: never raises, every failure becomes a response status.
    # ------------------------------------------------------------------

    def search(self, query: str) -> SearchResponse:
        if not query or not query.strip():
            return SearchResponse(status="rejected", message=EMPTY_QUERY_MESSAGE)
        if not self.provider.is_ready():
            return SearchResponse(
                status="unavailable",
                message=UNAVAILABLE_MESSAGE,
                fallback_available=True,
            )

        try:
            query_vector = self.provider.embed(query)
            approved = {doc.id: doc for doc in self.documents.list_approved_documents()}
            candidates = list(self.store.scan_all(approved.get))
            if not candidates:
                return SearchResponse(
                    status="not_found",
                    message=NOT_INDEXED_MESSAGE,
                    needs_indexing=True,
                )
            ranked = self.ranker.rank(query, query_vector, candidates, top_k=self.config.top_k)
        except EmptyInputError:
            return SearchResponse(status="rejected", message=EMPTY_QUERY_MESSAGE)
        except ConfigurationError as e:
            logger.error(f"Search unavailable: {e}")
            return SearchResponse(status="unavailable", message=UNAVAILABLE_MESSAGE, fallback_available=True)
        except DimensionMismatchError as e:
            logger.error(f"Search failed for {query!r}: {e}")
            return SearchResponse(status="error", message=MIXED_MODELS_MESSAGE, needs_indexing=True)
        except RetrievalError as e:
            logger.error(f"Search failed for {query!r}: {e}")
            return SearchResponse(status="error", message=f"Error performing search: {e.message}")
        except Exception as e:
            logger.exception(f"Unexpected search failure for {query!r}")
            return SearchResponse(status="error", message=f"Error performing search: {e}")

        self._log_top_results(query, ranked)

        if not self.ranker.passes_floor(ranked):
            return SearchResponse(status="not_found", message=NOT_FOUND_MESSAGE)

        count = self.config.source_count
        answer = self.synthesizer.synthesize(query, ranked[:count])
        return SearchResponse(
            status="ok",
            found=True,
            answer=answer,
            sources=[_source_item(result) for result in ranked[:count]],
            alternatives=[_alternative_item(result) for result in ranked[count:]],
        )

    def keyword_search(self, query: str) -> KeywordSearchResponse:
        """Lexical search over approved documents; needs no embeddings."""
        if not query or not query.strip():
            return KeywordSearchResponse(status="rejected", message=EMPTY_QUERY_MESSAGE)

        index = BM25Index()
        index.build(self.documents.list_approved_documents())
        hits = index.search(query, top_k=1 + KEYWORD_ALTERNATIVES)
        if not hits:
            return KeywordSearchResponse(
                status="not_found",
                message=(
                    "No approved knowledge article found for this issue. "
                    "Try using different keywords."
                ),
            )
        return KeywordSearchResponse(
            status="ok",
            found=True,
            document=hits[0].document,
            alternatives=[
                AlternativeItem(
                    document_id=hit.document.id,
                    title=hit.document.title,
                    category=hit.document.category or "Uncategorized",
                )
                for hit in hits[1:]
            ],
        )

    # ------------------------------------------------------------------
    # Indexing path: single-document errors raise, batch errors collect.
    # ------------------------------------------------------------------

    def index_document(self, document_id: str) -> IndexOutcome:
        return self.pipeline.index_one(document_id)

    def index_all_documents(
        self,
        skip_unchanged: bool = False,
        cancel_event: Optional[threading.Event] = None,
    ) -> IndexAllResult:
        return self.pipeline.index_all(skip_unchanged=skip_unchanged, cancel_event=cancel_event)

    def delete_document(self, document_id: str) -> None:
        self.store.delete(document_id)
        logger.info(f"Removed document {document_id} from the index")

    def index_status(self) -> IndexStatus:
        approved = {doc.id: doc for doc in self.documents.list_approved_documents()}
        records = self.store.list_records()

        indexed_ids = {record.document_id for record in records}
        stale = sum(
            1
            for record in records
            if record.document_id in approved
            and self.pipeline.is_stale(approved[record.document_id], record)
        )
        recent = [
            RecentlyIndexed(
                document_id=record.document_id,
                title=approved[record.document_id].title,
                updated_at=record.updated_at,
                model_id=record.model_id,
            )
            for record in records
            if record.document_id in approved
        ][:RECENTLY_INDEXED_LIMIT]

        return IndexStatus(
            configured=self.provider.is_ready(),
            provider=self.provider.kind.value,
            model_id=self.provider.model_id,
            total_approved_count=len(approved),
            total_indexed_count=len(records),
            pending_count=sum(1 for doc_id in approved if doc_id not in indexed_ids),
            stale_count=stale,
            recently_indexed=recent,
        )

    @staticmethod
    def _log_top_results(query: str, ranked: list[RankedResult]) -> None:
        summary = ", ".join(
            f"{result.document.title[:50]!r} {result.similarity_percent}%" for result in ranked[:3]
        )
        logger.info(f"Search {query!r}: {summary or 'no results'}")


def _source_item(result: RankedResult) -> SourceItem:
    document = result.document
    return SourceItem(
        document_id=document.id,
        title=document.title,
        category=document.category or "Uncategorized",
        excerpt_snippet=document.excerpt or document.body[:SNIPPET_CHARS].strip(),
        similarity_percent=result.similarity_percent,
        tags=list(document.tags),
    )


def _alternative_item(result: RankedResult) -> AlternativeItem:
    return AlternativeItem(
        document_id=result.document.id,
        title=result.document.title,
        category=result.document.category or "Uncategorized",
        similarity_percent=result.similarity_percent,
    )
