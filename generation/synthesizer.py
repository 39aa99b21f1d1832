from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from .extractive import extractive_answer

if TYPE_CHECKING:
    from retrieval.models import Document, RankedResult

logger = logging.getLogger(__name__)

GENERATIVE_CONTEXT_DOCUMENTS = 3


class AnswerProvider(Protocol):
    def generate_answer(self, query: str, documents: list[Document]) -> str:
        ...


class AnswerSynthesizer:
    """
    Turns ranked documents into a response text.

    The extractive answer is always available and deterministic. When
    ``use_generative`` is set, the provider's generative path is tried first
    with the top documents; any failure there falls back to the extractive
    answer so it never becomes a query failure.
    """

    def __init__(self, provider: AnswerProvider | None = None, use_generative: bool = False):
        self.provider = provider
        self.use_generative = use_generative and provider is not None

    def synthesize(self, query: str, ranked: list[RankedResult]) -> str:
        documents = [result.document for result in ranked]
        if not documents or not self.use_generative:
            return extractive_answer(query, documents)

        try:
            answer = self.provider.generate_answer(query, documents[:GENERATIVE_CONTEXT_DOCUMENTS])
        except Exception as e:
            logger.warning(f"Generative synthesis failed, using extractive answer: {e}")
            return extractive_answer(query, documents)
        return answer or extractive_answer(query, documents)
