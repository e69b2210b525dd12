# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""Tests for the in-memory stores and JSON catalog loading."""

from __future__ import annotations

import json
import threading

import pytest
from nisq_analyzer.models import ExecutionResult, ExecutionResultStatus
from nisq_analyzer.storage import (
    CatalogProtocol,
    ExecutionStoreProtocol,
    InMemoryCatalog,
    InMemoryExecutionStore,
    load_catalog,
    parse_catalog,
)
from nisq_analyzer.storage.errors import (
    CatalogError,
    ExecutionNotFoundError,
    ImplementationNotFoundError,
)

from conftest import make_implementation, make_qpu


@pytest.fixture
def record() -> ExecutionResult:
    return ExecutionResult(
        id="exec-1",
        status=ExecutionResultStatus.INITIALIZED,
        status_code="Passing execution to executor plugin.",
        qpu=make_qpu(),
        implementation=make_implementation(),
    )


class TestInMemoryCatalog:
    def test_satisfies_protocol(self, catalog):
        assert isinstance(catalog, CatalogProtocol)

    def test_find_implementations_keeps_order(self, catalog):
        ids = [i.id for i in catalog.find_implementations("shor")]

        assert ids == ["shor-n", "shor-fixed"]

    def test_unknown_algorithm_is_empty(self, catalog):
        assert catalog.find_implementations("qaoa") == []

    def test_get_implementation_missing_raises(self, catalog):
        with pytest.raises(ImplementationNotFoundError) as exc_info:
            catalog.get_implementation("nope")

        assert exc_info.value.implementation_id == "nope"

    def test_find_qpu(self, catalog):
        assert catalog.find_qpu("small").qubit_count == 6
        assert catalog.find_qpu("nope") is None

    def test_remove_qpu(self, catalog):
        catalog.remove_qpu("small")
        catalog.remove_qpu("small")

        assert [q.id for q in catalog.list_qpus()] == ["large", "forest"]


class TestInMemoryExecutionStore:
    def test_satisfies_protocol(self, store):
        assert isinstance(store, ExecutionStoreProtocol)

    def test_save_and_get(self, store, record):
        store.save(record)

        assert store.get("exec-1") == record

    def test_get_missing_raises(self, store):
        with pytest.raises(ExecutionNotFoundError):
            store.get("missing")

    def test_list_filters_by_implementation(self, store, record):
        store.save(record)

        assert store.list() == [record]
        assert store.list("impl") == [record]
        assert store.list("other") == []

    def test_compare_and_set_applies_on_match(self, store, record):
        store.save(record)

        ok = store.compare_and_set(
            "exec-1",
            ExecutionResultStatus.INITIALIZED,
            status=ExecutionResultStatus.RUNNING,
            status_code="Running.",
        )

        assert ok is True
        updated = store.get("exec-1")
        assert updated.status is ExecutionResultStatus.RUNNING
        assert updated.status_code == "Running."
        assert updated.created_at == record.created_at

    def test_compare_and_set_rejects_on_mismatch(self, store, record):
        """A finalized record is never overwritten."""
        store.save(record)
        store.compare_and_set(
            "exec-1",
            ExecutionResultStatus.INITIALIZED,
            status=ExecutionResultStatus.FINISHED,
            result=42,
        )

        ok = store.compare_and_set(
            "exec-1",
            {ExecutionResultStatus.INITIALIZED, ExecutionResultStatus.RUNNING},
            status=ExecutionResultStatus.FAILED,
        )

        assert ok is False
        assert store.get("exec-1").status is ExecutionResultStatus.FINISHED
        assert store.get("exec-1").result == 42

    def test_compare_and_set_accepts_status_strings(self, store, record):
        store.save(record)

        store.compare_and_set("exec-1", ExecutionResultStatus.INITIALIZED, status="FAILED")

        assert store.get("exec-1").status is ExecutionResultStatus.FAILED

    def test_compare_and_set_refuses_identity_changes(self, store, record):
        store.save(record)

        with pytest.raises(ValueError, match="Cannot change id"):
            store.compare_and_set("exec-1", ExecutionResultStatus.INITIALIZED, id="x")

    def test_compare_and_set_unknown_id(self, store):
        with pytest.raises(ExecutionNotFoundError):
            store.compare_and_set("missing", ExecutionResultStatus.INITIALIZED)

    def test_concurrent_finalizers_single_winner(self, store, record):
        """Exactly one of many racing transitions succeeds."""
        store.save(record)
        barrier = threading.Barrier(8)
        outcomes: list[bool] = []
        lock = threading.Lock()

        def _finalize(i: int) -> None:
            barrier.wait()
            ok = store.compare_and_set(
                "exec-1",
                ExecutionResultStatus.INITIALIZED,
                status=ExecutionResultStatus.FINISHED,
                result=i,
            )
            with lock:
                outcomes.append(ok)

        threads = [threading.Thread(target=_finalize, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count(True) == 1
        assert store.get("exec-1").status is ExecutionResultStatus.FINISHED


class TestCatalogFile:
    def test_load_round_trip(self, catalog_file, catalog):
        loaded = load_catalog(catalog_file)

        assert loaded.list_qpus() == catalog.list_qpus()
        assert loaded.list_implementations() == catalog.list_implementations()

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError, match="Cannot read catalog"):
            load_catalog(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(CatalogError, match="not valid JSON"):
            load_catalog(path)

    def test_document_must_be_object(self):
        with pytest.raises(CatalogError):
            parse_catalog(["qpus"])

    def test_invalid_entry_reports_index(self):
        document = {"qpus": [{"id": "ok", "qubit_count": 5}, {"id": "broken"}]}

        with pytest.raises(CatalogError, match="qpu entry #1"):
            parse_catalog(document)

    def test_empty_document(self):
        catalog = parse_catalog(json.loads("{}"))

        assert isinstance(catalog, InMemoryCatalog)
        assert catalog.list_qpus() == []
