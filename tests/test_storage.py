"""Tests for retrieval.storage.EmbeddingIndexStore."""

import os
from unittest.mock import patch

import pytest

from retrieval.exceptions import DimensionMismatchError, NotFoundError
from retrieval.storage import EmbeddingIndexStore


def test_upsert_then_get_returns_same_vector(memory_store) -> None:
    vector = [0.125, -0.333333333333, 0.9999999]
    memory_store.upsert("doc-1", vector, "title body", "local-hash-v2")
    record = memory_store.get("doc-1")
    assert record.vector == vector
    assert record.source_text == "title body"
    assert record.model_id == "local-hash-v2"


def test_upsert_replaces_existing_record(memory_store) -> None:
    memory_store.upsert("doc-1", [1.0], "old", "model-a")
    memory_store.upsert("doc-1", [2.0, 3.0], "new", "model-b")
    record = memory_store.get("doc-1")
    assert record.vector == [2.0, 3.0]
    assert record.model_id == "model-b"
    assert memory_store.count() == 1


def test_get_missing_raises(memory_store) -> None:
    with pytest.raises(NotFoundError, match="doc-404"):
        memory_store.get("doc-404")


def test_delete(memory_store) -> None:
    memory_store.upsert("doc-1", [1.0], "text", "m")
    memory_store.delete("doc-1")
    assert memory_store.count() == 0
    with pytest.raises(NotFoundError):
        memory_store.delete("doc-1")


def test_list_records_newest_first(memory_store) -> None:
    memory_store.upsert("first", [1.0], "a", "m")
    memory_store.upsert("second", [1.0], "b", "m")
    memory_store.upsert("first", [1.0], "a2", "m")
    assert [r.document_id for r in memory_store.list_records()] == ["first", "second"]


def test_scan_all_skips_documents_lookup_rejects(memory_store, make_doc) -> None:
    docs = {"keep": make_doc("keep", "Keep", "body")}
    memory_store.upsert("keep", [1.0], "a", "m")
    memory_store.upsert("gone", [1.0], "b", "m")
    items = list(memory_store.scan_all(docs.get))
    assert [item.document.id for item in items] == ["keep"]
    assert items[0].record.document_id == "keep"


def test_scan_all_is_lazy(memory_store) -> None:
    memory_store.upsert("doc-1", [1.0], "a", "m")
    calls = []

    def lookup(document_id):
        calls.append(document_id)
        return None

    scan = memory_store.scan_all(lookup)
    assert calls == []
    list(scan)
    assert calls == ["doc-1"]


def test_persists_to_jsonl_and_reloads(tmp_path) -> None:
    store = EmbeddingIndexStore(str(tmp_path))
    vector = [0.1, 0.2, 0.30000000000000004]
    store.upsert("doc-1", vector, "text", "local-hash-v2")
    store.upsert("doc-2", [1.0], "other", "other-model")
    store.delete("doc-2")

    assert (tmp_path / "embeddings.jsonl").exists()
    assert not (tmp_path / "embeddings.jsonl.tmp").exists()

    reloaded = EmbeddingIndexStore(str(tmp_path))
    assert reloaded.count() == 1
    assert reloaded.get("doc-1").vector == vector


def test_creates_data_dir(tmp_path) -> None:
    target = tmp_path / "nested" / "index"
    EmbeddingIndexStore(str(target))
    assert target.is_dir()


def test_vector_length_fixed_per_model(memory_store) -> None:
    memory_store.upsert("a", [1.0, 0.0], "x", "m")
    with pytest.raises(DimensionMismatchError):
        memory_store.upsert("b", [1.0, 0.0, 0.0], "y", "m")
    assert memory_store.count() == 1


def test_other_model_may_use_other_length(memory_store) -> None:
    memory_store.upsert("a", [1.0, 0.0], "x", "m")
    memory_store.upsert("b", [1.0, 0.0, 0.0], "y", "other")
    assert memory_store.count() == 2


def test_sole_record_of_model_may_change_length(memory_store) -> None:
    memory_store.upsert("a", [1.0, 0.0], "x", "m")
    memory_store.upsert("a", [1.0, 0.0, 0.0], "x", "m")
    assert len(memory_store.get("a").vector) == 3


def test_failed_write_rolls_back_upsert(tmp_path) -> None:
    store = EmbeddingIndexStore(str(tmp_path))
    store.upsert("a", [1.0], "old", "m")
    with patch.object(store, "_persist", side_effect=OSError("disk full")):
        with pytest.raises(OSError):
            store.upsert("b", [1.0], "new", "m")
        with pytest.raises(OSError):
            store.upsert("a", [2.0], "changed", "m")
    with pytest.raises(NotFoundError):
        store.get("b")
    assert store.get("a").source_text == "old"
    assert EmbeddingIndexStore(str(tmp_path)).count() == store.count() == 1


def test_failed_write_rolls_back_delete(tmp_path) -> None:
    store = EmbeddingIndexStore(str(tmp_path))
    store.upsert("a", [1.0], "text", "m")
    with patch.object(store, "_persist", side_effect=OSError("read-only")):
        with pytest.raises(OSError):
            store.delete("a")
    assert store.get("a").source_text == "text"


def test_batch_writes_once(tmp_path) -> None:
    store = EmbeddingIndexStore(str(tmp_path))
    with patch("retrieval.storage.os.replace", wraps=os.replace) as mock_replace:
        with store.batch():
            for i in range(20):
                store.upsert(f"doc-{i}", [1.0, float(i)], "text", "m")
            assert mock_replace.call_count == 0
    assert mock_replace.call_count == 1
    assert EmbeddingIndexStore(str(tmp_path)).count() == 20


def test_nested_batch_writes_on_outer_exit(tmp_path) -> None:
    store = EmbeddingIndexStore(str(tmp_path))
    with patch("retrieval.storage.os.replace", wraps=os.replace) as mock_replace:
        with store.batch():
            with store.batch():
                store.upsert("a", [1.0], "text", "m")
            assert mock_replace.call_count == 0
    assert mock_replace.call_count == 1


def test_batch_without_changes_does_not_write(tmp_path) -> None:
    store = EmbeddingIndexStore(str(tmp_path))
    with patch("retrieval.storage.os.replace") as mock_replace:
        with store.batch():
            pass
    mock_replace.assert_not_called()


def test_failed_batch_write_rolls_back(tmp_path) -> None:
    store = EmbeddingIndexStore(str(tmp_path))
    store.upsert("keep", [1.0], "text", "m")
    with patch.object(store, "_persist", side_effect=OSError("disk full")):
        with pytest.raises(OSError):
            with store.batch():
                store.upsert("new", [1.0], "text", "m")
                store.delete("keep")
    assert [r.document_id for r in store.list_records()] == ["keep"]


def test_corrupt_line_is_skipped(tmp_path) -> None:
    store = EmbeddingIndexStore(str(tmp_path))
    store.upsert("a", [1.0], "text", "m")
    with (tmp_path / "embeddings.jsonl").open("a", encoding="utf-8") as handle:
        handle.write('{"document_id": "broken", "vector": "oops"}\n')
        handle.write("not json at all\n")

    reloaded = EmbeddingIndexStore(str(tmp_path))

    assert reloaded.count() == 1
    assert reloaded.get("a").vector == [1.0]
