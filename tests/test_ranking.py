"""Tests for retrieval.ranking: cosine similarity, keyword score and HybridRanker."""

import math

import pytest

from retrieval.config import EngineConfig
from retrieval.exceptions import DimensionMismatchError
from retrieval.models import EmbeddingRecord, IndexedDocument
from retrieval.ranking import HybridRanker, cosine_similarity, keyword_score


def candidate(document, vector, model_id="local-hash-v2"):
    record = EmbeddingRecord(
        document_id=document.id,
        vector=vector,
        model_id=model_id,
        source_text=document.body,
    )
    return IndexedDocument(record=record, document=document)


# ---------------------------------------------------------------------------
# Cosine similarity
# ---------------------------------------------------------------------------

class TestCosineSimilarity:
    def test_self_similarity_is_one(self):
        v = [0.3, -1.2, 4.0, 0.5]
        assert math.isclose(cosine_similarity(v, v), 1.0, rel_tol=1e-9)

    def test_symmetric(self):
        a, b = [1.0, 2.0, 3.0], [-2.0, 0.5, 1.0]
        assert cosine_similarity(a, b) == cosine_similarity(b, a)

    def test_orthogonal(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0

    def test_zero_vector_gives_zero(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0

    def test_length_mismatch_raises(self):
        with pytest.raises(DimensionMismatchError) as exc_info:
            cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])
        assert exc_info.value.left_dim == 2
        assert exc_info.value.right_dim == 3


# ---------------------------------------------------------------------------
# Keyword score
# ---------------------------------------------------------------------------

class TestKeywordScore:
    def test_title_and_body_match(self, make_doc):
        doc = make_doc("d1", "MongoDB Connection", "mongodb refuses connections")
        assert keyword_score(["mongodb"], doc) == pytest.approx(0.6)

    def test_body_only(self, make_doc):
        doc = make_doc("d1", "Database help", "mongodb refuses connections")
        assert keyword_score(["mongodb"], doc) == pytest.approx(0.1)

    def test_averaged_over_keywords(self, make_doc):
        doc = make_doc("d1", "MongoDB", "nothing relevant")
        assert keyword_score(["mongodb", "nginx"], doc) == pytest.approx(0.25)

    def test_no_keywords(self, make_doc):
        assert keyword_score([], make_doc("d1", "Title", "Body")) == 0.0


# ---------------------------------------------------------------------------
# HybridRanker
# ---------------------------------------------------------------------------

class TestHybridRanker:
    @pytest.fixture
    def ranker(self):
        return HybridRanker(EngineConfig())

    def test_orders_by_hybrid_score(self, ranker, make_doc):
        close = make_doc("close", "Other", "body")
        far = make_doc("far", "Other", "body")
        results = ranker.rank(
            "query",
            [1.0, 0.0],
            [candidate(far, [0.0, 1.0]), candidate(close, [1.0, 0.1])],
            top_k=5,
        )
        assert [r.document.id for r in results] == ["close", "far"]
        assert [r.rank for r in results] == [1, 2]

    def test_hybrid_formula(self, ranker, make_doc):
        doc = make_doc("d1", "MongoDB", "body text")
        result = ranker.rank("mongodb", [1.0, 0.0], [candidate(doc, [1.0, 0.0])], top_k=1)[0]
        assert result.semantic_score == pytest.approx(1.0)
        assert result.keyword_score == pytest.approx(0.5)
        assert result.hybrid_score == pytest.approx(0.6 * 1.0 + 0.4 * 0.5)
        assert result.similarity_percent == 80.0

    def test_weights_are_configurable(self, make_doc):
        ranker = HybridRanker(EngineConfig(semantic_weight=1.0, keyword_weight=0.0))
        doc = make_doc("d1", "MongoDB", "body")
        result = ranker.rank("mongodb", [1.0, 0.0], [candidate(doc, [1.0, 0.0])], top_k=1)[0]
        assert result.hybrid_score == pytest.approx(1.0)

    def test_ties_broken_by_recency(self, ranker, make_doc):
        older = make_doc("older", "Same", "body", days_ago=10)
        newer = make_doc("newer", "Same", "body", days_ago=1)
        results = ranker.rank(
            "query",
            [1.0, 1.0],
            [candidate(older, [1.0, 1.0]), candidate(newer, [1.0, 1.0])],
            top_k=2,
        )
        assert [r.document.id for r in results] == ["newer", "older"]

    def test_idempotent(self, ranker, make_doc):
        candidates = [
            candidate(make_doc(f"d{i}", "Title", "body", days_ago=i), [1.0, float(i)])
            for i in range(5)
        ]
        first = ranker.rank("title", [1.0, 2.0], candidates, top_k=5)
        second = ranker.rank("title", [1.0, 2.0], candidates, top_k=5)
        assert [r.document.id for r in first] == [r.document.id for r in second]

    def test_top_k(self, ranker, make_doc):
        candidates = [candidate(make_doc(f"d{i}", "T", "b"), [1.0, float(i)]) for i in range(6)]
        assert len(ranker.rank("q", [1.0, 0.0], candidates, top_k=3)) == 3

    def test_skips_zero_vector_candidates(self, ranker, make_doc):
        results = ranker.rank(
            "q",
            [1.0, 0.0],
            [candidate(make_doc("empty", "T", "b"), [0.0, 0.0])],
            top_k=5,
        )
        assert results == []

    def test_zero_query_vector_uses_keywords_only(self, ranker, make_doc):
        doc = make_doc("d1", "MongoDB", "body")
        result = ranker.rank("mongodb", [0.0, 0.0], [candidate(doc, [1.0, 0.0])], top_k=1)[0]
        assert result.semantic_score == 0.0
        assert result.hybrid_score == pytest.approx(0.4 * 0.5)

    def test_dimension_mismatch_raises(self, ranker, make_doc):
        candidates = [
            candidate(make_doc("a", "T", "b"), [1.0, 0.0], model_id="model-a"),
            candidate(make_doc("b", "T", "b"), [1.0, 0.0, 0.0], model_id="model-b"),
        ]
        with pytest.raises(DimensionMismatchError):
            ranker.rank("q", [1.0, 0.0], candidates, top_k=5)

    def test_cross_model_same_length_still_ranks(self, ranker, make_doc):
        candidates = [
            candidate(make_doc("a", "T", "b"), [1.0, 0.0], model_id="model-a"),
            candidate(make_doc("b", "T", "b"), [0.0, 1.0], model_id="model-b"),
        ]
        results = ranker.rank("q", [1.0, 0.0], candidates, top_k=5)
        assert {r.model_id for r in results} == {"model-a", "model-b"}


class TestSimilarityFloors:
    def test_local_floor(self):
        assert HybridRanker(EngineConfig()).floor_for("local-hash-v2") == 0.05

    def test_external_floor_for_other_models(self):
        assert HybridRanker(EngineConfig()).floor_for("nomic-embed-text") == 0.5

    def test_override_wins(self):
        ranker = HybridRanker(EngineConfig(similarity_floors={"nomic-embed-text": 0.3}))
        assert ranker.floor_for("nomic-embed-text") == 0.3

    def test_passes_floor_uses_top_result_model(self, make_doc):
        ranker = HybridRanker(EngineConfig())
        doc = make_doc("d1", "Title", "body")
        results = ranker.rank("zzz", [1.0, 0.0], [candidate(doc, [1.0, 0.2], model_id="remote")], top_k=1)
        # semantic ~0.98 * 0.6 is above the 0.5 external floor
        assert ranker.passes_floor(results)

        low = ranker.rank("zzz", [1.0, 0.0], [candidate(doc, [0.2, 1.0], model_id="remote")], top_k=1)
        assert not ranker.passes_floor(low)

    def test_no_results_fail_floor(self):
        assert not HybridRanker(EngineConfig()).passes_floor([])
