"""
Pytest fixtures for the knowledge-base search engine tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from retrieval import (
    Document,
    EmbeddingIndexStore,
    EngineConfig,
    InMemoryDocumentSource,
    KnowledgeSearchService,
    LocalProvider,
)

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_document(doc_id: str, title: str, body: str, days_ago: int = 0, **kwargs) -> Document:
    """Build an approved document approved ``days_ago`` days before BASE_TIME."""
    return Document(
        id=doc_id,
        title=title,
        body=body,
        approved_at=BASE_TIME - timedelta(days=days_ago),
        **kwargs,
    )


@pytest.fixture(autouse=True)
def fake_token_counter(monkeypatch):
    """Count whitespace-separated words instead of loading the tiktoken encoding."""
    monkeypatch.setattr(
        "generation.context_builder.count_tokens",
        lambda text: len(text.split()) if text else 0,
    )
    monkeypatch.setattr(
        "generation.context_builder.truncate_to_tokens",
        lambda text, max_tokens: " ".join(text.split()[:max_tokens]),
    )


@pytest.fixture
def sample_documents():
    """Six approved support articles."""
    return [
        make_document(
            "kb-mongo",
            "MongoDB Connection Refused Error",
            "When the application cannot reach MongoDB the driver reports "
            "ECONNREFUSED. Check that mongod is running and listening on port 27017.",
            days_ago=3,
            excerpt="Start mongod and verify the port before reconnecting.",
            category="Database",
            tags=["mongodb", "connection"],
        ),
        make_document(
            "kb-password",
            "Reset a Forgotten Password",
            "Open the login page, choose forgot password and follow the emailed link "
            "to set a new password.",
            days_ago=10,
            category="Accounts",
            tags=["login"],
        ),
        make_document(
            "kb-nginx",
            "Nginx Returns 502 Bad Gateway",
            "A 502 from nginx means the upstream server did not answer. Restart the "
            "upstream service and inspect the proxy_pass target.",
            days_ago=5,
            category="Infrastructure",
        ),
        make_document(
            "kb-cors",
            "Browser Blocks Request Because of CORS",
            "Add the Access-Control-Allow-Origin header on the server so the browser "
            "accepts cross origin responses.",
            days_ago=1,
            category="Web",
        ),
        make_document(
            "kb-docker",
            "Docker Container Exits Immediately",
            "Inspect the container logs and make sure the entrypoint runs a foreground "
            "process instead of exiting.",
            days_ago=7,
        ),
        make_document(
            "kb-ssl",
            "Renew an Expired TLS Certificate",
            "Request a new certificate from the certificate authority and reload the "
            "web server configuration.",
            days_ago=2,
            category="Security",
        ),
    ]


@pytest.fixture
def document_source(sample_documents):
    return InMemoryDocumentSource(sample_documents)


@pytest.fixture
def engine_config(tmp_path):
    """Local-provider configuration writing into a temporary directory."""
    return EngineConfig(data_dir=str(tmp_path / "index"))


@pytest.fixture
def local_provider(engine_config):
    return LocalProvider(
        dimensions=engine_config.local_dimensions,
        model_id=engine_config.local_model_id,
    )


@pytest.fixture
def memory_store():
    """Store without a backing file."""
    return EmbeddingIndexStore()


@pytest.fixture
def service(engine_config, document_source, memory_store):
    return KnowledgeSearchService(engine_config, document_source, store=memory_store)


@pytest.fixture
def indexed_service(service):
    """Service with every sample document indexed."""
    result = service.index_all_documents()
    assert result.failed == 0
    return service


@pytest.fixture
def make_doc():
    """Factory for extra documents in individual tests."""
    return make_document
