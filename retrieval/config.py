from dataclasses import dataclass, field
import os

from .exceptions import ConfigurationError


PROVIDER_LOCAL = "local"
PROVIDER_EXTERNAL = "external"


@dataclass
class EngineConfig:
    data_dir: str = "data/retrieval"
    documents_path: str = "data/documents.jsonl"
    embedding_provider: str = PROVIDER_LOCAL
    local_dimensions: int = 256
    local_model_id: str = "local-hash-v2"
    external_base_url: str = "http://localhost:11434"
    external_api_key: str = ""
    external_model: str = "nomic-embed-text"
    external_timeout: float = 30.0
    local_similarity_floor: float = 0.05
    external_similarity_floor: float = 0.5
    similarity_floors: dict[str, float] = field(default_factory=dict)
    semantic_weight: float = 0.6
    keyword_weight: float = 0.4
    title_keyword_weight: float = 0.5
    content_keyword_weight: float = 0.1
    top_k: int = 5
    source_count: int = 3
    generation_model: str = ""
    generation_temperature: float = 0.7
    generation_output_tokens: int = 500
    max_context_tokens: int = 2048

    def __post_init__(self) -> None:
        if self.embedding_provider not in {PROVIDER_LOCAL, PROVIDER_EXTERNAL}:
            raise ConfigurationError(
                f"Unsupported embedding provider: {self.embedding_provider}",
                details=f"Use '{PROVIDER_LOCAL}' or '{PROVIDER_EXTERNAL}'",
            )
        if self.local_dimensions <= 0:
            raise ConfigurationError(
                f"Local embedding dimensions must be positive, got {self.local_dimensions}"
            )

    @property
    def generative_enabled(self) -> bool:
        return bool(self.generation_model)

    @classmethod
    def from_env(cls) -> "EngineConfig":
        def _int(name: str, default: int) -> int:
            value = os.environ.get(name)
            return int(value) if value else default

        def _float(name: str, default: float) -> float:
            value = os.environ.get(name)
            return float(value) if value else default

        return cls(
            data_dir=os.environ.get("RETRIEVAL_DATA_DIR", cls.data_dir),
            documents_path=os.environ.get("RETRIEVAL_DOCUMENTS_PATH", cls.documents_path),
            embedding_provider=os.environ.get("EMBEDDING_PROVIDER", cls.embedding_provider).strip().lower(),
            local_dimensions=_int("LOCAL_EMBEDDING_DIMENSIONS", cls.local_dimensions),
            local_model_id=os.environ.get("LOCAL_EMBEDDING_MODEL_ID", cls.local_model_id),
            external_base_url=os.environ.get("EXTERNAL_EMBEDDING_BASE_URL", cls.external_base_url),
            external_api_key=os.environ.get("EXTERNAL_EMBEDDING_API_KEY", cls.external_api_key),
            external_model=os.environ.get("EXTERNAL_EMBEDDING_MODEL", cls.external_model),
            external_timeout=_float("EXTERNAL_EMBEDDING_TIMEOUT", cls.external_timeout),
            local_similarity_floor=_float("LOCAL_SIMILARITY_FLOOR", cls.local_similarity_floor),
            external_similarity_floor=_float("EXTERNAL_SIMILARITY_FLOOR", cls.external_similarity_floor),
            similarity_floors=parse_floor_overrides(os.environ.get("SIMILARITY_FLOORS", "")),
            semantic_weight=_float("HYBRID_SEMANTIC_WEIGHT", cls.semantic_weight),
            keyword_weight=_float("HYBRID_KEYWORD_WEIGHT", cls.keyword_weight),
            title_keyword_weight=_float("HYBRID_TITLE_WEIGHT", cls.title_keyword_weight),
            content_keyword_weight=_float("HYBRID_CONTENT_WEIGHT", cls.content_keyword_weight),
            top_k=_int("SEARCH_TOP_K", cls.top_k),
            source_count=_int("SEARCH_SOURCE_COUNT", cls.source_count),
            generation_model=os.environ.get("GENERATION_MODEL", cls.generation_model),
            generation_temperature=_float("GENERATION_TEMPERATURE", cls.generation_temperature),
            generation_output_tokens=_int("GENERATION_OUTPUT_TOKENS", cls.generation_output_tokens),
            max_context_tokens=_int("GENERATION_MAX_CONTEXT_TOKENS", cls.max_context_tokens),
        )


def parse_floor_overrides(raw: str) -> dict[str, float]:
    """Parse ``model=0.3,other-model=0.45`` into a floor mapping."""
    floors: dict[str, float] = {}
    for part in (raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        model_id, sep, value = part.rpartition("=")
        if not sep or not model_id.strip():
            raise ConfigurationError(f"Invalid similarity floor entry: {part!r}")
        try:
            floors[model_id.strip()] = float(value)
        except ValueError as e:
            raise ConfigurationError(f"Invalid similarity floor value: {part!r}") from e
    return floors
