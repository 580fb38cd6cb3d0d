# src/validation/update.py - v1
"""Validation of a document about to replace a stored record.

Order of checks:
  1. read-only stored record -> 422
  2. immutable fields (skipped entirely for soft-deleted records;
     ``identifier`` exempt in dedup-driven replaces) -> 400
  3. common field rules -> 400
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from docwrite.core.constants import IMMUTABLE_FIELDS, READ_ONLY_FLAGS, Msg
from docwrite.validation.common import ValidationFailure, ValidationLimits, validate_common


def is_read_only(stored: dict[str, Any]) -> bool:
    return any(stored.get(flag) is True for flag in READ_ONLY_FLAGS)


def validate_update(
    doc: dict[str, Any],
    stored: dict[str, Any],
    limits: ValidationLimits | None = None,
    is_deduplication: bool = False,
    is_patching: bool = False,
) -> ValidationFailure | None:
    """Check that ``doc`` may replace ``stored``."""
    if is_read_only(stored):
        return ValidationFailure(
            Msg.READONLY_MODIFICATION, HTTPStatus.UNPROCESSABLE_ENTITY
        )

    # Deleted documents may be changed without restriction.
    if stored.get("isValid") is not False:
        for field_name in IMMUTABLE_FIELDS:
            if field_name == "identifier" and is_deduplication:
                continue
            if field_name in doc and doc[field_name] != stored.get(field_name):
                return ValidationFailure(Msg.IMMUTABLE_FIELD.format(field_name))

    return validate_common(doc, limits, is_patching=is_patching)
