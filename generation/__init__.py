"""
Answer generation for knowledge-base search.

Builds an extractive answer from ranked documents, or a generated one via an
Ollama chat model when configured.
"""

__version__ = "1.0.0"

from .context_builder import ContextBuildResult, build_answer_context
from .extractive import NO_INFORMATION_MESSAGE, extractive_answer
from .synthesizer import AnswerSynthesizer

__all__ = [
    "__version__",
    "AnswerSynthesizer",
    "ContextBuildResult",
    "NO_INFORMATION_MESSAGE",
    "build_answer_context",
    "extractive_answer",
]
