"""Deterministic extractive answers built from ranked documents."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from retrieval.models import Document

NO_INFORMATION_MESSAGE = "I couldn't find relevant information to answer your question."
FULL_ARTICLE_NOTE = (
    "Please refer to the full article for complete details and step-by-step instructions."
)
PREVIEW_CHARS = 300
MAX_RELATED = 2


def extractive_answer(query: str, documents: list[Document]) -> str:
    """
    Quote the top document and list related titles.

    The query is accepted for interface symmetry with the generative path;
    the extractive answer depends only on the ranked documents.
    """
    if not documents:
        return NO_INFORMATION_MESSAGE

    top = documents[0]
    parts = [f'Based on the article "{top.title}":']

    if top.excerpt.strip():
        parts.append(top.excerpt.strip())
    else:
        parts.append(top.body[:PREVIEW_CHARS].strip() + "...")

    parts.append(FULL_ARTICLE_NOTE)

    related = documents[1 : 1 + MAX_RELATED]
    if related:
        lines = ["Also check out these related articles:"]
        lines.extend(f"{idx}. {doc.title}" for idx, doc in enumerate(related, start=2))
        parts.append("\n".join(lines))

    return "\n\n".join(parts)
