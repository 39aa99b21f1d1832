"""
Custom Exceptions for the Knowledge-Base Retrieval Engine.

Exception Hierarchy:
    RetrievalError (base)
    ├── ConfigurationError
    ├── EmptyInputError
    ├── DimensionMismatchError
    ├── ProviderCallError
    └── NotFoundError

Usage:
    from retrieval.exceptions import ConfigurationError, RetrievalError

    try:
        outcome = service.index_document("doc-1")
    except ConfigurationError:
        ...  # report "service unavailable"
    except RetrievalError as e:
        print(f"Indexing failed: {e}")
"""

from __future__ import annotations

from typing import Optional


# =============================================================================
# BASE EXCEPTION
# =============================================================================


class RetrievalError(Exception):
    """
    Base exception for all retrieval-engine errors.

    Attributes:
        message: Human-readable error description
        details: Additional technical details (optional)
    """

    def __init__(
        self,
        message: str = "A retrieval error occurred",
        details: Optional[str] = None,
    ):
        self.message = message
        self.details = details

        full_message = message
        if details:
            full_message = f"{message} | Details: {details}"

        super().__init__(full_message)


# =============================================================================
# SPECIFIC ERRORS
# =============================================================================


class ConfigurationError(RetrievalError):
    """Raised when no usable embedding provider is configured."""

    def __init__(
        self,
        message: str = "Embedding provider is not configured",
        details: Optional[str] = None,
    ):
        super().__init__(message, details)


class EmptyInputError(RetrievalError):
    """Raised when a query or text to embed is blank."""

    def __init__(self, message: str = "Text cannot be empty"):
        super().__init__(message)


class DimensionMismatchError(RetrievalError):
    """
    Raised when two vectors of different lengths are compared.

    This means the index holds embeddings from more than one model;
    re-index with a single model to resolve it.

    Attributes:
        left_dim: Length of the first vector
        right_dim: Length of the second vector
    """

    def __init__(self, left_dim: int, right_dim: int):
        self.left_dim = left_dim
        self.right_dim = right_dim
        super().__init__(
            message=f"Vector dimensions differ: {left_dim} vs {right_dim}",
            details="Index contains embeddings from different models; re-index all documents",
        )


class ProviderCallError(RetrievalError):
    """
    Raised when an external embedding or generation API call fails.

    Attributes:
        provider: Name of the provider that failed
        original_error: The underlying client exception, if any
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.provider = provider
        self.original_error = original_error
        details = str(original_error) if original_error else None
        if provider:
            message = f"{message} [{provider}]"
        super().__init__(message, details)


class NotFoundError(RetrievalError):
    """
    Raised when a document or index record does not exist.

    Attributes:
        document_id: The identifier that was looked up
    """

    def __init__(self, document_id: str, what: str = "Document"):
        self.document_id = document_id
        super().__init__(f"{what} not found: {document_id}")


# =============================================================================
# UTILITIES
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Only provider call failures are worth retrying."""
    return isinstance(error, ProviderCallError)


def format_error_chain(error: Exception) -> str:
    """Render an exception and its causes as a single line."""
    parts: list[str] = []
    current: Optional[BaseException] = error
    while current is not None:
        parts.append(f"{type(current).__name__}: {current}")
        current = current.__cause__
    return " <- ".join(parts)
