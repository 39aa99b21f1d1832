"""
Document sources - read access to approved knowledge-base documents

The engine does not own documents. It reads them through the DocumentSource
protocol, which the host application implements over its own persistence.
Two implementations ship with the engine:

- InMemoryDocumentSource: a list of Document objects (tests, embedding hosts)
- JsonlDocumentSource: one JSON document per line, re-read on every call so
  edits made by the owning application are picked up
"""

import json
from pathlib import Path
from typing import Iterable, Protocol

from .exceptions import NotFoundError
from .models import Document


class DocumentSource(Protocol):
    def list_approved_documents(self) -> list[Document]:
        ...

    def get_document(self, document_id: str) -> Document:
        """Return the approved document or raise NotFoundError."""
        ...


class InMemoryDocumentSource:
    def __init__(self, documents: Iterable[Document] = ()):
        self._documents: dict[str, Document] = {doc.id: doc for doc in documents}

    def put(self, document: Document) -> None:
        self._documents[document.id] = document

    def remove(self, document_id: str) -> None:
        self._documents.pop(document_id, None)

    def list_approved_documents(self) -> list[Document]:
        return [doc for doc in self._documents.values() if doc.is_approved]

    def get_document(self, document_id: str) -> Document:
        document = self._documents.get(document_id)
        if document is None or not document.is_approved:
            raise NotFoundError(document_id)
        return document


class JsonlDocumentSource:
    def __init__(self, path: str):
        self.path = Path(path)

    def _load(self) -> list[Document]:
        if not self.path.exists():
            return []
        documents = []
        with self.path.open("r", encoding="utf-8") as handle:
            for line in handle:
                line = line.strip()
                if not line:
                    continue
                documents.append(Document.model_validate(json.loads(line)))
        return documents

    def list_approved_documents(self) -> list[Document]:
        return [doc for doc in self._load() if doc.is_approved]

    def get_document(self, document_id: str) -> Document:
        for document in self._load():
            if document.id == document_id and document.is_approved:
                return document
        raise NotFoundError(document_id)
