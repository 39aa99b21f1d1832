"""
Indexing Pipeline - keeps the embedding index in step with approved documents

For each document the pipeline:
1. Builds the embedding text (title, excerpt, body, then attachment text)
2. Embeds it with the active provider
3. Upserts the record into the EmbeddingIndexStore

A failure on one document (blank body, provider error, timeout) is recorded
and the batch moves on; one malformed document must never block the rest.

Usage:
    pipeline = IndexingPipeline(documents, provider, store)
    outcome = pipeline.index_one("doc-42")      # raises on failure
    summary = pipeline.index_all()              # collects failures
"""

import logging
import threading
import time
from typing import Callable, Optional

from .documents import DocumentSource
from .exceptions import ConfigurationError, EmptyInputError, NotFoundError
from .models import Document, EmbeddingRecord, IndexAllResult, IndexFailure, IndexOutcome
from .providers import EmbeddingProvider
from .storage import EmbeddingIndexStore

logger = logging.getLogger(__name__)

ATTACHMENT_SEPARATOR = "\n\n--- Attachment Content ---\n"

ProgressCallback = Callable[[int, int, str], None]


def build_embedding_text(document: Document) -> str:
    """
    Concatenate the indexable text of a document.

    The attachment text goes last behind a fixed separator so it can be cut
    off again when only article text should count.

    Raises:
        EmptyInputError: If the document body is blank.
    """
    if not document.body or not document.body.strip():
        raise EmptyInputError(f"Document '{document.id}' has an empty body")
    text = f"{document.title}\n\n{document.excerpt or ''}\n\n{document.body}"
    if document.attachment_text and document.attachment_text.strip():
        text += ATTACHMENT_SEPARATOR + document.attachment_text
    return text


class IndexingPipeline:
    def __init__(
        self,
        documents: DocumentSource,
        provider: EmbeddingProvider,
        store: EmbeddingIndexStore,
    ):
        self.documents = documents
        self.provider = provider
        self.store = store

    def index_one(self, document_id: str) -> IndexOutcome:
        """
        Index a single approved document.

        Raises:
            ConfigurationError: If the provider is not usable.
            NotFoundError: If the document is missing or not approved.
            EmptyInputError: If the document body is blank.
            ProviderCallError: If the embedding call fails.
        """
        self._require_ready()
        document = self.documents.get_document(document_id)
        record = self._index_document(document)
        logger.info(f"Indexed document {document.id} ({record.model_id})")
        return IndexOutcome(document_id=document.id, title=document.title, model_id=record.model_id)

    def index_all(
        self,
        skip_unchanged: bool = False,
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> IndexAllResult:
        """
        Index every approved document, collecting per-document failures.

        Args:
            skip_unchanged: Leave documents whose stored record already
                matches their current text and model.
            cancel_event: Checked between documents; once set, the batch
                stops and the result is flagged as cancelled.
            progress_callback: Optional callback(current, total, status).

        Raises:
            ConfigurationError: If the provider is not usable (nothing is
                attempted in that case).
        """
        self._require_ready()
        start = time.time()
        documents = self.documents.list_approved_documents()
        result = IndexAllResult(total=len(documents))

        # One index write for the whole run.
        with self.store.batch():
            for position, document in enumerate(documents, start=1):
                if cancel_event is not None and cancel_event.is_set():
                    logger.warning(f"Indexing cancelled after {position - 1}/{len(documents)} documents")
                    result.cancelled = True
                    break

                if skip_unchanged and not self._needs_indexing(document):
                    result.skipped += 1
                else:
                    try:
                        self._index_document(document)
                        result.indexed += 1
                    except Exception as e:
                        logger.warning(f"Failed to index document {document.id}: {e}")
                        result.failed += 1
                        result.errors.append(
                            IndexFailure(document_id=document.id, title=document.title, message=str(e))
                        )

                if progress_callback:
                    progress_callback(position, len(documents), f"Processed {document.id}")

        logger.info(
            f"Indexing finished in {time.time() - start:.1f}s: "
            f"{result.indexed} indexed, {result.failed} failed, {result.skipped} skipped"
        )
        return result

    def is_stale(self, document: Document, record: EmbeddingRecord) -> bool:
        """A record is stale when its text or model no longer matches."""
        if record.model_id != self.provider.model_id:
            return True
        try:
            return record.source_text != build_embedding_text(document)
        except EmptyInputError:
            return True

    def _needs_indexing(self, document: Document) -> bool:
        try:
            record = self.store.get(document.id)
        except NotFoundError:
            return True
        return self.is_stale(document, record)

    def _index_document(self, document: Document) -> EmbeddingRecord:
        text = build_embedding_text(document)
        vector = self.provider.embed(text)
        return self.store.upsert(
            document_id=document.id,
            vector=vector,
            source_text=text,
            model_id=self.provider.model_id,
        )

    def _require_ready(self) -> None:
        if not self.provider.is_ready():
            raise ConfigurationError(
                "Embedding service is not configured",
                details=f"provider={self.provider.kind.value}",
            )
