# src/api/models.py - v2
"""API-level models: the batch response returned by process_batch."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from docwrite.core.models import ItemError


class BatchResponse(BaseModel):
    """Outcome of one batch, ready to serialise for the boundary layer.

    ``status`` is one of 200, 207, 400 or 500. Counts come from the bulk
    result and stay at zero when the bulk call never ran or failed.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: int
    message: str | None = None
    inserted_count: int = 0
    replaced_count: int = 0
    matched_count: int = 0
    upserted_count: int = 0
    errors: list[ItemError] = Field(default_factory=list)

    @property
    def committed_any(self) -> bool:
        return self.inserted_count + self.replaced_count + self.upserted_count > 0

    def to_body(self) -> dict[str, Any]:
        """camelCase wire body; ``message`` omitted when unset."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
