# src/validation/create.py - v1
"""Validation of a document about to be inserted."""

from __future__ import annotations

from typing import Any

from docwrite.core.constants import Msg
from docwrite.validation.common import (
    ValidationFailure,
    ValidationLimits,
    is_blank,
    validate_common,
)


def validate_create(
    doc: dict[str, Any], limits: ValidationLimits | None = None
) -> ValidationFailure | None:
    """Require a non-blank identifier, then apply the common rules."""
    if is_blank(doc.get("identifier")):
        return ValidationFailure(Msg.BAD_FIELD_IDENTIFIER)

    return validate_common(doc, limits)
