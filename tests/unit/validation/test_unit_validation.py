# tests/unit/validation/test_unit_validation.py - v1
"""Tests for validation/: common, create and update rules."""

from __future__ import annotations

import pytest

from docwrite.core.constants import MIN_TIMESTAMP, Msg
from docwrite.validation.common import ValidationLimits, is_blank, validate_common
from docwrite.validation.create import validate_create
from docwrite.validation.update import is_read_only, validate_update


def _valid(**overrides):
    doc = {
        "identifier": "id-1",
        "date": 1700000000000,
        "utcOffset": 0,
        "app": "xdrip",
        "device": "xdrip",
    }
    doc.update(overrides)
    return doc


class TestCommon:
    def test_valid_document(self):
        assert validate_common(_valid()) is None

    @pytest.mark.parametrize("date", [MIN_TIMESTAMP, 0, "1700000000000", None, True])
    def test_bad_date(self, date):
        failure = validate_common(_valid(date=date))
        assert failure.message == Msg.BAD_FIELD_DATE
        assert failure.http_status == 400

    @pytest.mark.parametrize("offset", [-1441, 1441, None, "0"])
    def test_bad_utc_offset(self, offset):
        assert validate_common(_valid(utcOffset=offset)).message == Msg.BAD_FIELD_UTC

    @pytest.mark.parametrize("app", ["", "   ", None])
    def test_blank_app(self, app):
        assert validate_common(_valid(app=app)).message == Msg.BAD_FIELD_APP

    def test_patching_checks_present_fields_only(self):
        assert validate_common({"sgv": 1}, is_patching=True) is None
        assert validate_common({"app": ""}, is_patching=True).message == Msg.BAD_FIELD_APP

    def test_custom_limits(self):
        limits = ValidationLimits(min_utc_offset=-60, max_utc_offset=60)
        assert validate_common(_valid(utcOffset=120), limits).message == Msg.BAD_FIELD_UTC

    def test_is_blank(self):
        assert is_blank(None)
        assert is_blank(" ")
        assert not is_blank("x")


class TestCreate:
    def test_valid(self):
        assert validate_create(_valid()) is None

    @pytest.mark.parametrize("identifier", [None, "", "  "])
    def test_identifier_required(self, identifier):
        assert validate_create(_valid(identifier=identifier)).message == Msg.BAD_FIELD_IDENTIFIER


class TestUpdate:
    def test_identical_document_allowed(self):
        stored = _valid(srvCreated=1, _id="x")
        assert validate_update(_valid(), stored) is None

    @pytest.mark.parametrize("flag", ["isReadOnly", "readOnly", "readonly"])
    def test_read_only_record(self, flag):
        stored = _valid(**{flag: True})
        assert is_read_only(stored)
        failure = validate_update(_valid(), stored)
        assert failure.http_status == 422
        assert failure.message == Msg.READONLY_MODIFICATION

    @pytest.mark.parametrize(
        ("field", "value"),
        [("date", 1700000060000), ("device", "other"), ("app", "other"),
         ("eventType", "Note"), ("utcOffset", 60)],
    )
    def test_immutable_field_changed(self, field, value):
        failure = validate_update(_valid(**{field: value}), _valid())
        assert failure.http_status == 400
        assert failure.message == Msg.IMMUTABLE_FIELD.format(field)

    def test_identifier_exempt_in_dedup(self):
        doc = _valid(identifier="new-id")
        assert validate_update(doc, _valid(), is_deduplication=True) is None
        failure = validate_update(doc, _valid())
        assert failure.message == Msg.IMMUTABLE_FIELD.format("identifier")

    def test_soft_deleted_record_unrestricted(self):
        stored = _valid(isValid=False)
        assert validate_update(_valid(device="other", isValid=True), stored) is None

    def test_absent_field_is_not_a_change(self):
        doc = _valid()
        del doc["device"]
        assert validate_update(doc, _valid()) is None

    def test_common_rules_still_apply(self):
        stored = _valid(app="")
        assert validate_update(_valid(app=""), stored).message == Msg.BAD_FIELD_APP
