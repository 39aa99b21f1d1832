"""
Hybrid ranking - cosine similarity blended with keyword overlap

    hybrid = semantic_weight * cosine(query, document) + keyword_weight * keyword_score

The keyword score rewards query keywords found in the title far more than
keywords found in the body or excerpt. A per-model similarity floor decides
whether the best result is good enough to report at all: hashing-based local
vectors produce much lower absolute cosine values than dense neural embeddings,
so one global threshold does not fit both.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

import numpy as np

from .config import EngineConfig
from .exceptions import DimensionMismatchError
from .models import Document, IndexedDocument, RankedResult
from .text import extract_keywords

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two equal-length vectors.

    Returns 0.0 when either vector has zero norm.

    Raises:
        DimensionMismatchError: If the vectors differ in length.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))
    left = np.asarray(a, dtype=np.float64)
    right = np.asarray(b, dtype=np.float64)
    norm = float(np.linalg.norm(left)) * float(np.linalg.norm(right))
    if norm == 0.0:
        return 0.0
    return float(np.dot(left, right) / norm)


def is_zero_vector(vector: Sequence[float]) -> bool:
    return not any(vector)


def keyword_score(
    keywords: Sequence[str],
    document: Document,
    title_weight: float = 0.5,
    content_weight: float = 0.1,
) -> float:
    if not keywords:
        return 0.0
    title_text = document.title.lower()
    content_text = f"{document.body} {document.excerpt}".lower()
    score = 0.0
    for keyword in keywords:
        if keyword in title_text:
            score += title_weight
        if keyword in content_text:
            score += content_weight
    return score / len(keywords)


def _recency_key(document: Document) -> float:
    # Documents without an approval date sort after dated ones.
    if document.approved_at is None:
        return float("inf")
    return -document.approved_at.timestamp()


class HybridRanker:
    def __init__(self, config: EngineConfig | None = None):
        self.config = config or EngineConfig()

    def rank(
        self,
        query_text: str,
        query_vector: Sequence[float],
        candidates: Iterable[IndexedDocument],
        top_k: int,
    ) -> list[RankedResult]:
        """
        Score candidates and return the ``top_k`` best, highest first.

        Ties are broken by approval recency, then by input order.

        Raises:
            DimensionMismatchError: If a candidate vector's length differs
                from the query vector's.
        """
        keywords = extract_keywords(query_text)
        query_is_zero = is_zero_vector(query_vector)
        cfg = self.config

        scored: list[RankedResult] = []
        for candidate in candidates:
            vector = candidate.record.vector
            if len(vector) != len(query_vector):
                raise DimensionMismatchError(len(query_vector), len(vector))
            if is_zero_vector(vector):
                continue
            semantic = 0.0 if query_is_zero else cosine_similarity(query_vector, vector)
            lexical = keyword_score(
                keywords,
                candidate.document,
                title_weight=cfg.title_keyword_weight,
                content_weight=cfg.content_keyword_weight,
            )
            scored.append(
                RankedResult(
                    document=candidate.document,
                    model_id=candidate.record.model_id,
                    semantic_score=semantic,
                    keyword_score=lexical,
                    hybrid_score=cfg.semantic_weight * semantic + cfg.keyword_weight * lexical,
                )
            )

        scored.sort(key=lambda r: (-r.hybrid_score, _recency_key(r.document)))
        top = scored[: max(top_k, 0)]
        for position, result in enumerate(top, start=1):
            result.rank = position
        return top

    def floor_for(self, model_id: str) -> float:
        cfg = self.config
        if model_id in cfg.similarity_floors:
            return cfg.similarity_floors[model_id]
        if model_id == cfg.local_model_id:
            return cfg.local_similarity_floor
        return cfg.external_similarity_floor

    def passes_floor(self, results: Sequence[RankedResult]) -> bool:
        """True when the top result clears the floor of the model that produced it."""
        if not results:
            return False
        top = results[0]
        floor = self.floor_for(top.model_id)
        if top.hybrid_score < floor:
            logger.info(
                f"Top score {top.hybrid_score:.3f} below floor {floor:.3f} for model {top.model_id}"
            )
            return False
        return True
