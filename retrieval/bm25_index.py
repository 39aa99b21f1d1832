"""Keyword-only document search used when embeddings are unavailable.

NOTE: Okapi IDF turns negative for terms present in more than half of a small
corpus, so the BM25 score alone cannot decide whether anything matched. A
document only counts as a hit when it shares at least one query keyword; BM25
then orders hits with the same overlap.
"""

from __future__ import annotations

from dataclasses import dataclass

from rank_bm25 import BM25Okapi

from .models import Document
from .text import extract_keywords, tokenize


@dataclass
class KeywordHit:
    document: Document
    overlap: int
    score: float


def _document_text(document: Document) -> str:
    parts = [document.title, document.excerpt, document.body, " ".join(document.tags)]
    if document.category:
        parts.append(document.category)
    return " ".join(p for p in parts if p)


def _recency(document: Document) -> float:
    return document.approved_at.timestamp() if document.approved_at else float("-inf")


class BM25Index:
    def __init__(self, k1: float = 1.5, b: float = 0.75):
        self.k1 = k1
        self.b = b
        self._bm25: BM25Okapi | None = None
        self._documents: list[Document] = []
        self._tokens: list[set[str]] = []

    def build(self, documents: list[Document]) -> None:
        self._documents = list(documents)
        corpus = [tokenize(_document_text(doc)) for doc in self._documents]
        self._tokens = [set(tokens) for tokens in corpus]
        # BM25Okapi divides by the corpus size; keep it unset for an empty corpus.
        self._bm25 = BM25Okapi(corpus, k1=self.k1, b=self.b) if self._documents else None

    def search(self, query: str, top_k: int) -> list[KeywordHit]:
        if not self._bm25 or not self._documents:
            return []
        keywords = extract_keywords(query)
        if not keywords:
            return []
        scores = self._bm25.get_scores(keywords)
        hits = []
        for idx, score in enumerate(scores):
            overlap = sum(1 for keyword in keywords if keyword in self._tokens[idx])
            if overlap == 0:
                continue
            hits.append(KeywordHit(document=self._documents[idx], overlap=overlap, score=float(score)))
        hits.sort(key=lambda h: (h.overlap, h.score, _recency(h.document)), reverse=True)
        return hits[:top_k]
