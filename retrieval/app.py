from fastapi import FastAPI, HTTPException

from .config import EngineConfig
from .documents import DocumentSource, JsonlDocumentSource
from .exceptions import ConfigurationError, EmptyInputError, NotFoundError, RetrievalError
from .models import (
    IndexAllResult,
    IndexOutcome,
    IndexStatus,
    KeywordSearchResponse,
    SearchRequest,
    SearchResponse,
)
from .service import KnowledgeSearchService

_SEARCH_STATUS_CODES = {"rejected": 400, "unavailable": 503, "error": 500}


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, EmptyInputError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ConfigurationError):
        return HTTPException(status_code=503, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


def create_app(
    config: EngineConfig | None = None,
    documents: DocumentSource | None = None,
) -> FastAPI:
    cfg = config or EngineConfig.from_env()
    source = documents or JsonlDocumentSource(cfg.documents_path)
    service = KnowledgeSearchService(cfg, source)

    app = FastAPI(
        title="Knowledge Search Service",
        version="1.0.0",
        description="Hybrid semantic and keyword search over approved knowledge-base articles.",
    )
    app.state.service = service

    @app.get("/health")
    def health() -> dict:
        embedding = service.provider.health_check()
        return {
            "status": "ok" if embedding.get("healthy") else "degraded",
            "provider": service.provider.kind.value,
            "configured": service.provider.is_ready(),
            "embedding": embedding,
        }

    @app.post("/search", response_model=SearchResponse)
    def search(request: SearchRequest) -> SearchResponse:
        response = service.search(request.query)
        status_code = _SEARCH_STATUS_CODES.get(response.status)
        if status_code:
            raise HTTPException(status_code=status_code, detail=response.message)
        return response

    @app.post("/search/keyword", response_model=KeywordSearchResponse)
    def keyword_search(request: SearchRequest) -> KeywordSearchResponse:
        response = service.keyword_search(request.query)
        if response.status == "rejected":
            raise HTTPException(status_code=400, detail=response.message)
        return response

    @app.get("/index/status", response_model=IndexStatus)
    def index_status() -> IndexStatus:
        return service.index_status()

    @app.post("/index", response_model=IndexAllResult)
    def index_all(skip_unchanged: bool = False) -> IndexAllResult:
        try:
            return service.index_all_documents(skip_unchanged=skip_unchanged)
        except RetrievalError as exc:
            raise _http_error(exc) from exc

    @app.post("/index/{document_id}", response_model=IndexOutcome)
    def index_document(document_id: str) -> IndexOutcome:
        try:
            return service.index_document(document_id)
        except RetrievalError as exc:
            raise _http_error(exc) from exc
        except Exception as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc

    @app.delete("/index/{document_id}")
    def delete_document(document_id: str) -> dict:
        try:
            service.delete_document(document_id)
        except RetrievalError as exc:
            raise _http_error(exc) from exc
        return {"success": True, "document_id": document_id}

    return app
