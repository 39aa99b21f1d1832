from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .token_counter import count_tokens, truncate_to_tokens

if TYPE_CHECKING:
    from retrieval.models import Document

MAX_CONTEXT_DOCUMENTS = 3


@dataclass
class ContextBuildResult:
    context_text: str
    selected_documents: list[Document]
    available_tokens: int
    used_tokens: int


def _document_block(idx: int, document: Document) -> str:
    lines = [f"Document {idx} - {document.title}:", document.body.strip()]
    if document.excerpt.strip():
        lines.append(f"Summary: {document.excerpt.strip()}")
    lines.append("---")
    return "\n".join(lines)


def build_answer_context(
    query: str,
    documents: list[Document],
    max_context_tokens: int,
    system_prompt: str,
    user_template: str,
) -> ContextBuildResult:
    system_tokens = count_tokens(system_prompt)
    base_user = user_template.format(query=query, context="")
    base_tokens = count_tokens(base_user)

    available = max_context_tokens - system_tokens - base_tokens
    if available < 0:
        available = 0

    parts: list[str] = []
    selected: list[Document] = []
    used = 0

    for idx, document in enumerate(documents[:MAX_CONTEXT_DOCUMENTS], start=1):
        block = _document_block(idx, document)
        block_tokens = count_tokens(block)
        if block_tokens <= available:
            parts.append(block)
            selected.append(document)
            available -= block_tokens
            used += block_tokens
            continue

        if not parts and available > 0:
            # Nothing fits: keep a truncated prefix of the best document.
            prefix = truncate_to_tokens(block, available)
            parts.append(prefix)
            selected.append(document)
            used += count_tokens(prefix)
            available = 0
        break

    return ContextBuildResult(
        context_text="\n\n".join(parts).strip(),
        selected_documents=selected,
        available_tokens=available,
        used_tokens=used,
    )
