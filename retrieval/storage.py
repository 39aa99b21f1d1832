"""
Embedding Index Store - one embedding record per document

Records live in memory (the corpus is expected to be thousands of documents)
and are optionally persisted to ``<data_dir>/embeddings.jsonl``. Every write
goes through a temporary file and ``os.replace`` so a crash never leaves a
half-written index. Inside ``batch()`` writes are deferred and the file is
rewritten once when the batch ends.

A failed write rolls the in-memory state back, so memory and file never
disagree.

Usage:
    store = EmbeddingIndexStore("data/retrieval")
    with store.batch():
        store.upsert("doc-1", vector, source_text, "local-hash-v2")
        store.upsert("doc-2", vector, source_text, "local-hash-v2")
    for item in store.scan_all(documents_by_id.get):
        ...
"""

import json
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional

from pydantic import ValidationError

from .exceptions import DimensionMismatchError, NotFoundError
from .models import Document, EmbeddingRecord, IndexedDocument, utc_now

logger = logging.getLogger(__name__)

DocumentLookup = Callable[[str], Optional[Document]]


class EmbeddingIndexStore:
    def __init__(self, data_dir: Optional[str] = None):
        self._records: dict[str, EmbeddingRecord] = {}
        self._lock = threading.RLock()
        self._batch_depth = 0
        self._dirty = False
        self.index_file: Optional[Path] = None
        if data_dir is not None:
            directory = Path(data_dir)
            directory.mkdir(parents=True, exist_ok=True)
            self.index_file = directory / "embeddings.jsonl"
            self._load()

    def upsert(
        self,
        document_id: str,
        vector: list[float],
        source_text: str,
        model_id: str,
    ) -> EmbeddingRecord:
        """
        Create or replace the record for ``document_id`` (last write wins).

        Raises:
            DimensionMismatchError: If another record of the same model has a
                different vector length.
        """
        record = EmbeddingRecord(
            document_id=document_id,
            vector=list(vector),
            model_id=model_id,
            source_text=source_text,
            updated_at=utc_now(),
        )
        with self._lock:
            expected = self._dimension_of(model_id, exclude=document_id)
            if expected is not None and expected != len(record.vector):
                raise DimensionMismatchError(expected, len(record.vector))

            previous = self._records.get(document_id)
            self._records[document_id] = record
            try:
                self._write()
            except Exception:
                if previous is None:
                    del self._records[document_id]
                else:
                    self._records[document_id] = previous
                raise
        return record

    def get(self, document_id: str) -> EmbeddingRecord:
        with self._lock:
            record = self._records.get(document_id)
        if record is None:
            raise NotFoundError(document_id, what="Embedding record")
        return record

    def delete(self, document_id: str) -> None:
        with self._lock:
            if document_id not in self._records:
                raise NotFoundError(document_id, what="Embedding record")
            previous = self._records.pop(document_id)
            try:
                self._write()
            except Exception:
                self._records[document_id] = previous
                raise

    @contextmanager
    def batch(self) -> Iterator["EmbeddingIndexStore"]:
        """
        Defer persistence until the outermost batch exits.

        If the final write fails, every change made inside the batch is
        rolled back before the error propagates.
        """
        with self._lock:
            outermost = self._batch_depth == 0
            snapshot = dict(self._records) if outermost else {}
            self._batch_depth += 1
        try:
            yield self
        finally:
            with self._lock:
                self._batch_depth -= 1
                if outermost and self._dirty:
                    self._dirty = False
                    try:
                        self._persist()
                    except Exception:
                        self._records = snapshot
                        raise

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def list_records(self) -> list[EmbeddingRecord]:
        """All records, most recently updated first."""
        with self._lock:
            records = list(self._records.values())
        return sorted(records, key=lambda r: r.updated_at, reverse=True)

    def scan_all(self, lookup: DocumentLookup) -> Iterator[IndexedDocument]:
        """
        Lazily join records with their live documents.

        ``lookup`` returns the current document, or None when it is missing or
        no longer eligible (e.g. unapproved); such records are skipped. The
        scan iterates over a snapshot taken when iteration starts.
        """
        with self._lock:
            snapshot = list(self._records.values())
        for record in snapshot:
            document = lookup(record.document_id)
            if document is None:
                continue
            yield IndexedDocument(record=record, document=document)

    def _dimension_of(self, model_id: str, exclude: str) -> Optional[int]:
        for record in self._records.values():
            if record.model_id == model_id and record.document_id != exclude:
                return len(record.vector)
        return None

    def _write(self) -> None:
        if self._batch_depth:
            self._dirty = True
        else:
            self._persist()

    def _load(self) -> None:
        if self.index_file is None or not self.index_file.exists():
            return
        skipped = 0
        with self.index_file.open("r", encoding="utf-8") as handle:
            for line_number, line in enumerate(handle, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    record = EmbeddingRecord.model_validate_json(line)
                except ValidationError as e:
                    skipped += 1
                    logger.warning(
                        f"Skipping corrupt record at {self.index_file}:{line_number}: "
                        f"{e.error_count()} validation error(s)"
                    )
                    continue
                self._records[record.document_id] = record
        logger.info(
            f"Loaded {len(self._records)} embedding records from {self.index_file}"
            + (f" ({skipped} corrupt lines skipped)" if skipped else "")
        )

    def _persist(self) -> None:
        if self.index_file is None:
            return
        tmp_file = self.index_file.with_suffix(".jsonl.tmp")
        with tmp_file.open("w", encoding="utf-8") as handle:
            for record in self._records.values():
                handle.write(json.dumps(record.model_dump(mode="json"), ensure_ascii=False) + "\n")
        os.replace(tmp_file, self.index_file)
