# src/validation/common.py - v1
"""Field rules shared by create and update validation.

Validators return None on success or a ValidationFailure describing the
first broken rule.
"""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from docwrite.core.constants import MAX_UTC_OFFSET, MIN_TIMESTAMP, MIN_UTC_OFFSET, Msg

if TYPE_CHECKING:
    from docwrite.config.settings import Settings


@dataclass(frozen=True)
class ValidationFailure:
    """Reason a document was rejected."""

    message: str
    http_status: int = HTTPStatus.BAD_REQUEST


@dataclass(frozen=True)
class ValidationLimits:
    """Numeric bounds used by the common rules."""

    min_timestamp: int = MIN_TIMESTAMP
    min_utc_offset: int = MIN_UTC_OFFSET
    max_utc_offset: int = MAX_UTC_OFFSET

    @classmethod
    def from_settings(cls, settings: Settings) -> ValidationLimits:
        return cls(
            min_timestamp=settings.min_timestamp,
            min_utc_offset=settings.min_utc_offset,
            max_utc_offset=settings.max_utc_offset,
        )


def validate_common(
    doc: dict[str, Any],
    limits: ValidationLimits | None = None,
    is_patching: bool = False,
) -> ValidationFailure | None:
    """Check date, utcOffset and app.

    When patching, only fields present in ``doc`` are checked.
    """
    limits = limits or ValidationLimits()

    if _applies("date", doc, is_patching):
        date = doc.get("date")
        if not is_number(date) or date <= limits.min_timestamp:
            return ValidationFailure(Msg.BAD_FIELD_DATE)

    if _applies("utcOffset", doc, is_patching):
        offset = doc.get("utcOffset")
        if (
            not is_number(offset)
            or offset < limits.min_utc_offset
            or offset > limits.max_utc_offset
        ):
            return ValidationFailure(Msg.BAD_FIELD_UTC)

    if _applies("app", doc, is_patching):
        if is_blank(doc.get("app")):
            return ValidationFailure(Msg.BAD_FIELD_APP)

    return None


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_blank(value: Any) -> bool:
    """True for anything that is not a string with visible characters."""
    return not isinstance(value, str) or not value.strip()


def _applies(field_name: str, doc: dict[str, Any], is_patching: bool) -> bool:
    return not is_patching or field_name in doc
