"""Tests for retrieval.local_embedder."""

import math

import pytest

from retrieval.local_embedder import LocalHashVectorizer, fnv1a_32


class TestFnv1a:
    def test_empty_is_offset_basis(self):
        assert fnv1a_32("") == 0x811C9DC5

    def test_known_value(self):
        assert fnv1a_32("a") == 0xE40C292C

    def test_fits_32_bits(self):
        assert 0 <= fnv1a_32("a much longer feature string") < 2**32


class TestLocalHashVectorizer:
    @pytest.fixture
    def vectorizer(self):
        return LocalHashVectorizer(dimensions=256)

    def test_length(self, vectorizer):
        assert len(vectorizer.embed("mongodb connection refused")) == 256

    def test_deterministic(self, vectorizer):
        text = "nginx returns 502 bad gateway"
        assert vectorizer.embed(text) == LocalHashVectorizer(dimensions=256).embed(text)

    def test_unit_norm(self, vectorizer):
        vector = vectorizer.embed("renew an expired certificate")
        assert math.isclose(math.sqrt(sum(v * v for v in vector)), 1.0, rel_tol=1e-9)

    def test_no_features_gives_zero_vector(self, vectorizer):
        assert vectorizer.embed("the a an") == [0.0] * 256

    def test_custom_dimensions(self):
        assert len(LocalHashVectorizer(dimensions=32).embed("docker container")) == 32

    def test_invalid_dimensions(self):
        with pytest.raises(ValueError):
            LocalHashVectorizer(dimensions=0)

    def test_similar_texts_score_higher(self, vectorizer):
        base = vectorizer.embed("mongodb connection refused")
        close = vectorizer.embed("mongodb connection refused on port 27017")
        far = vectorizer.embed("renew expired certificate")
        dot_close = sum(a * b for a, b in zip(base, close))
        dot_far = sum(a * b for a, b in zip(base, far))
        assert dot_close > dot_far
