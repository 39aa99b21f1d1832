"""
Token Counter for answer-context budgeting

Uses tiktoken with the cl100k_base encoding as a conservative approximation
for Ollama chat models (LLaMA, Mistral, etc.).

Usage:
    from generation.token_counter import count_tokens

    n = count_tokens("How do I rotate the API key?")
"""

import tiktoken

# Singleton encoder - initialized once, reused across calls.
_encoder: tiktoken.Encoding | None = None


def _get_encoder() -> tiktoken.Encoding:
    """Get or initialize the tiktoken encoder (singleton)."""
    global _encoder
    if _encoder is None:
        _encoder = tiktoken.get_encoding("cl100k_base")
    return _encoder


def count_tokens(text: str) -> int:
    """Count the number of tokens in a text string."""
    if not text:
        return 0
    return len(_get_encoder().encode(text))


def truncate_to_tokens(text: str, max_tokens: int) -> str:
    """Cut ``text`` to at most ``max_tokens`` tokens."""
    if max_tokens <= 0 or not text:
        return ""
    encoder = _get_encoder()
    tokens = encoder.encode(text)
    if len(tokens) <= max_tokens:
        return text
    return encoder.decode(tokens[:max_tokens])
