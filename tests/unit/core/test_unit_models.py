# tests/unit/core/test_unit_models.py - v2
"""Tests for core/models.py: boundary typing, index map, bulk result, signals."""

from __future__ import annotations

import pytest

from docwrite.core.constants import Msg
from docwrite.core.errors import DocumentValidationError
from docwrite.core.models import (
    BulkResult,
    CacheSignal,
    Document,
    IndexedId,
    IntentIndexMap,
    ItemError,
    ReconciledBatch,
    CommittedWrite,
    WriteErrorDetail,
)


class TestDocumentParse:
    def test_returns_plain_dict_with_extras(self):
        doc = Document.parse({"date": 1700000000000, "sgv": 120, "nested": {"a": 1}})
        assert doc == {"date": 1700000000000, "sgv": 120, "nested": {"a": 1}}

    def test_unset_fields_not_added(self):
        doc = Document.parse({"device": "pump"})
        assert "identifier" not in doc
        assert "srvCreated" not in doc

    def test_client_id_is_stripped(self):
        doc = Document.parse({"_id": "abc", "device": "pump"})
        assert "_id" not in doc

    def test_non_object_rejected(self):
        with pytest.raises(DocumentValidationError) as exc:
            Document.parse(["not", "a", "dict"])
        assert exc.value.message == Msg.BAD_DOCUMENT
        assert exc.value.http_status == 400

    @pytest.mark.parametrize(
        ("field", "value", "message"),
        [
            ("identifier", 42, Msg.BAD_FIELD_IDENTIFIER),
            ("date", [1], Msg.BAD_FIELD_DATE),
            ("utcOffset", "60", Msg.BAD_FIELD_UTC),
            ("app", 7, Msg.BAD_FIELD_APP),
        ],
    )
    def test_wrong_core_type_maps_to_field_message(self, field, value, message):
        with pytest.raises(DocumentValidationError) as exc:
            Document.parse({field: value})
        assert exc.value.message == message

    def test_other_core_field_gets_generic_message(self):
        with pytest.raises(DocumentValidationError) as exc:
            Document.parse({"isValid": "no"})
        assert "isValid" in exc.value.message

    def test_date_accepts_string(self):
        assert Document.parse({"date": "2023-11-14T22:13:20Z"})["date"] == "2023-11-14T22:13:20Z"


class TestIntentIndexMap:
    def test_add_returns_sequential_intent_indices(self):
        index_map = IntentIndexMap()
        assert index_map.add(0) == 0
        assert index_map.add(2, existing_id="x") == 1
        assert index_map.add(5) == 2
        assert len(index_map) == 3

    def test_maps_back_to_batch_positions(self):
        index_map = IntentIndexMap()
        index_map.add(1)
        index_map.add(3, existing_id="oid")
        assert index_map.original_index(0) == 1
        assert index_map.original_index(1) == 3
        assert index_map.slot(1).existing_id == "oid"


class TestBulkResult:
    def test_id_lookup_by_intent_index(self):
        result = BulkResult(
            inserted_ids=[IndexedId(index=0, id="a"), IndexedId(index=2, id="c")],
            upserted_ids=[IndexedId(index=1, id="b")],
        )
        assert result.inserted_id_for(2) == "c"
        assert result.inserted_id_for(1) is None
        assert result.upserted_id_for(1) == "b"

    def test_write_error_indices(self):
        result = BulkResult(
            write_errors=[WriteErrorDetail(index=3, code=11000, message="dup")]
        )
        assert result.write_error_indices() == {3}


class TestItemError:
    def test_body_uses_camel_case_and_drops_none(self):
        error = ItemError(
            original_index=2, identifier="id-1", message="bad",
            http_status=400, operation_type="insert",
        )
        assert error.to_body() == {
            "originalIndex": 2,
            "identifier": "id-1",
            "message": "bad",
            "httpStatus": 400,
            "operationType": "insert",
        }


class TestReconciledBatch:
    def test_split_by_operation(self):
        batch = ReconciledBatch(
            committed=[
                CommittedWrite(0, 0, "insert", {}),
                CommittedWrite(1, 1, "replace", {}),
                CommittedWrite(2, 3, "insert", {}),
            ]
        )
        assert [c.intent_index for c in batch.committed_inserts] == [0, 2]
        assert [c.intent_index for c in batch.committed_replaces] == [1]


class TestCacheSignal:
    def test_payload_excludes_event_name(self):
        signal = CacheSignal(
            event="data-update", collection="entries", op="update",
            kind="insert", changes=[{"identifier": "x"}],
        )
        assert signal.payload() == {
            "collection": "entries",
            "op": "update",
            "kind": "insert",
            "changes": [{"identifier": "x"}],
        }

    def test_batch_complete_payload(self):
        signal = CacheSignal(event="data-received", collection="entries")
        assert signal.payload() == {"collection": "entries", "changes": []}
