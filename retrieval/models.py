"""
Data Models for the Retrieval Engine

Defines:
1. Document - Approved knowledge-base article as read from the document source
2. EmbeddingRecord - Indexed state of one document
3. IndexedDocument / RankedResult - Transient query-time views
4. Service responses - search, indexing and index status payloads

Design Principles:
- Pydantic v2 for validation (consistent with generation)
- Records never own documents; they reference them by id
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Document(BaseModel):
    """A knowledge-base document owned by the document collaborator."""
    id: str = Field(..., min_length=1)
    title: str = ""
    body: str = ""
    excerpt: str = ""
    attachment_text: Optional[str] = Field(
        None,
        description="Text extracted from an attached file, if any",
    )
    category: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    status: str = "approved"
    approved_at: Optional[datetime] = None

    @property
    def is_approved(self) -> bool:
        return self.status.lower() == "approved"


class EmbeddingRecord(BaseModel):
    """The indexed state of one document."""
    document_id: str = Field(..., min_length=1)
    vector: list[float] = Field(
        ...,
        description="Embedding vector; length is fixed per model_id",
    )
    model_id: str = Field(
        ...,
        description="Provider/model that produced the vector",
    )
    source_text: str = Field(
        ...,
        description="Exact text that was embedded",
    )
    updated_at: datetime = Field(default_factory=utc_now)


class IndexedDocument(BaseModel):
    """An embedding record joined with its live source document."""
    record: EmbeddingRecord
    document: Document


class RankedResult(BaseModel):
    """A candidate document with its computed scores. Never cached."""
    document: Document
    model_id: str
    semantic_score: float
    keyword_score: float
    hybrid_score: float
    rank: int = 0

    @property
    def similarity_percent(self) -> float:
        return round(self.hybrid_score * 100, 1)


# =============================================================================
# SEARCH
# =============================================================================


SearchStatus = Literal["ok", "not_found", "rejected", "unavailable", "error"]


class SearchRequest(BaseModel):
    query: str = ""


class SourceItem(BaseModel):
    document_id: str
    title: str
    category: str = "Uncategorized"
    excerpt_snippet: str = ""
    similarity_percent: float
    tags: list[str] = Field(default_factory=list)


class AlternativeItem(BaseModel):
    document_id: str
    title: str
    category: str = "Uncategorized"
    similarity_percent: Optional[float] = None


class SearchResponse(BaseModel):
    status: SearchStatus
    found: bool = False
    message: str = ""
    answer: Optional[str] = None
    sources: list[SourceItem] = Field(default_factory=list)
    alternatives: list[AlternativeItem] = Field(default_factory=list)
    needs_indexing: bool = False
    fallback_available: bool = False


class KeywordSearchResponse(BaseModel):
    status: SearchStatus
    found: bool = False
    message: str = ""
    document: Optional[Document] = None
    alternatives: list[AlternativeItem] = Field(default_factory=list)


# =============================================================================
# INDEXING
# =============================================================================


class IndexOutcome(BaseModel):
    success: bool = True
    document_id: str
    title: str
    model_id: str


class IndexFailure(BaseModel):
    document_id: str
    title: str = ""
    message: str


class IndexAllResult(BaseModel):
    indexed: int = 0
    failed: int = 0
    skipped: int = 0
    total: int = 0
    cancelled: bool = False
    errors: list[IndexFailure] = Field(default_factory=list)


class RecentlyIndexed(BaseModel):
    document_id: str
    title: str
    updated_at: datetime
    model_id: str


class IndexStatus(BaseModel):
    configured: bool
    provider: str
    model_id: str
    total_approved_count: int
    total_indexed_count: int
    pending_count: int
    stale_count: int
    recently_indexed: list[RecentlyIndexed] = Field(default_factory=list)
