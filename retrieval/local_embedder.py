"""
Local Hash Embedder - Deterministic embeddings without any external service

Projects unigram and bigram features of a text into a fixed-size vector with
the hashing trick. Each feature lands on three positions (one primary hash and
two salted hashes with damped weights) so that collisions on one slot are
smoothed by the others.

Design:
- FNV-1a 32-bit hashing (Python's built-in hash() is randomized per process)
- Log-scaled term frequency weights
- L2-normalized output; a text without features yields the zero vector

Usage:
    from retrieval.local_embedder import LocalHashVectorizer

    vectorizer = LocalHashVectorizer(dimensions=256)
    vector = vectorizer.embed("MongoDB connection refused")
"""

import math
from collections import Counter

import numpy as np

from .text import tokenize_with_bigrams

_FNV_OFFSET = 0x811C9DC5
_FNV_PRIME = 0x01000193

# (salt suffix, weight multiplier) per hash position.
HASH_SLOTS: tuple[tuple[str, float], ...] = (
    ("", 1.0),
    ("_alt", 0.5),
    ("_alt2", 0.25),
)


def fnv1a_32(text: str) -> int:
    """32-bit FNV-1a hash of the UTF-8 bytes of ``text``."""
    value = _FNV_OFFSET
    for byte in text.encode("utf-8"):
        value ^= byte
        value = (value * _FNV_PRIME) & 0xFFFFFFFF
    return value


class LocalHashVectorizer:
    """Hashing-trick text embedder with no I/O."""

    def __init__(self, dimensions: int = 256):
        if dimensions <= 0:
            raise ValueError(f"dimensions must be positive, got {dimensions}")
        self.dimensions = dimensions

    def embed(self, text: str) -> list[float]:
        """
        Embed a text into a vector of length ``dimensions``.

        Returns:
            The L2-normalized vector, or all zeros when the text has no
            recognized features.
        """
        features = Counter(tokenize_with_bigrams(text))
        vector = np.zeros(self.dimensions, dtype=np.float64)

        for feature, freq in features.items():
            weight = math.log1p(freq)
            for salt, multiplier in HASH_SLOTS:
                index = fnv1a_32(feature + salt) % self.dimensions
                vector[index] += weight * multiplier

        norm = float(np.linalg.norm(vector))
        if norm > 0:
            vector /= norm
        return vector.tolist()
