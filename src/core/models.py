# src/core/models.py - v2
"""Shared Pydantic domain models used across the write path.

Documents, caller context, write intents, bulk results and the signals
derived from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from docwrite.core.constants import Msg
from docwrite.core.errors import DocumentValidationError
from docwrite.dedup.filters import IdentifyingFilter

OperationType = Literal["insert", "replace", "unknown"]

_FIELD_MESSAGES: dict[str, str] = {
    "identifier": Msg.BAD_FIELD_IDENTIFIER,
    "date": Msg.BAD_FIELD_DATE,
    "utcOffset": Msg.BAD_FIELD_UTC,
    "app": Msg.BAD_FIELD_APP,
}


# === DOCUMENTS ===


class Document(BaseModel):
    """One incoming record: typed core fields plus open domain fields.

    Types are checked strictly at the boundary; semantic rules (timestamp
    guard, offset range, blank strings) live in docwrite.validation.
    """

    model_config = ConfigDict(extra="allow", strict=True)

    identifier: str | None = None
    date: int | float | str | None = None
    utcOffset: int | float | None = None  # noqa: N815
    device: str | None = None
    eventType: str | None = None  # noqa: N815
    app: str | None = None
    created_at: str | None = None
    srvCreated: int | None = None  # noqa: N815
    srvModified: int | None = None  # noqa: N815
    subject: str | None = None
    isValid: bool | None = None  # noqa: N815

    @classmethod
    def parse(cls, raw: Any) -> dict[str, Any]:
        """Validate a raw item and return it as a plain storage dict.

        Raises:
            DocumentValidationError: If the item is not an object or a core
                field has the wrong type.
        """
        if not isinstance(raw, dict):
            raise DocumentValidationError(Msg.BAD_DOCUMENT)
        # DB-internal ids are assigned by storage, never by the client.
        cleaned = {k: v for k, v in raw.items() if k != "_id"}
        try:
            parsed = cls.model_validate(cleaned)
        except ValidationError as e:
            loc = e.errors()[0]["loc"]
            name = str(loc[0]) if loc else ""
            raise DocumentValidationError(
                _FIELD_MESSAGES.get(name, f"Bad field {name}")
            ) from e
        return parsed.model_dump(exclude_unset=True)


class CallerContext(BaseModel):
    """Authenticated caller as seen by the write path."""

    subject: str | None = None
    permissions: list[str] = Field(default_factory=list)
    if_unmodified_since: datetime | None = None
    request_id: str | None = None


# === WRITE INTENTS ===


class InsertIntent(BaseModel):
    """Store a new record."""

    kind: Literal["insert"] = "insert"
    document: dict[str, Any]


class ReplaceIntent(BaseModel):
    """Replace the record matched by the identifying filter."""

    kind: Literal["replace"] = "replace"
    identifying_filter: IdentifyingFilter
    document: dict[str, Any]
    upsert: bool = False


WriteIntent = Annotated[InsertIntent | ReplaceIntent, Field(discriminator="kind")]


class ItemError(BaseModel):
    """Failure of one input document, from preparation or from storage."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    original_index: int | None = None
    operation_index: int | None = None
    identifier: str | None = None
    message: str
    http_status: int
    operation_type: OperationType = "unknown"
    code: int | str | None = None

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# === BULK RESULT ===


class WriteErrorDetail(BaseModel):
    """Per-index error reported by the bulk write."""

    index: int
    code: int | str | None = None
    message: str = ""


class IndexedId(BaseModel):
    """DB-assigned id for the intent at ``index``."""

    index: int
    id: Any


class BulkResult(BaseModel):
    """Outcome of one unordered bulk write.

    Every ``index`` refers to the position in the submitted intent list.
    """

    inserted_count: int = 0
    replaced_count: int = 0
    matched_count: int = 0
    upserted_count: int = 0
    write_errors: list[WriteErrorDetail] = Field(default_factory=list)
    inserted_ids: list[IndexedId] = Field(default_factory=list)
    upserted_ids: list[IndexedId] = Field(default_factory=list)

    def write_error_indices(self) -> set[int]:
        return {e.index for e in self.write_errors}

    def inserted_id_for(self, index: int) -> Any:
        return _lookup_id(self.inserted_ids, index)

    def upserted_id_for(self, index: int) -> Any:
        return _lookup_id(self.upserted_ids, index)


def _lookup_id(ids: list[IndexedId], index: int) -> Any:
    for item in ids:
        if item.index == index:
            return item.id
    return None


# === INDEX MAPPING ===


@dataclass(frozen=True)
class IntentSlot:
    """Joins one intent-list position to its input-batch position."""

    intent_index: int
    original_index: int
    existing_id: Any = None


@dataclass
class IntentIndexMap:
    """Mapping table between the intent index space and the batch index space."""

    slots: list[IntentSlot] = field(default_factory=list)

    def add(self, original_index: int, existing_id: Any = None) -> int:
        """Register the next intent and return its intent index."""
        slot = IntentSlot(
            intent_index=len(self.slots),
            original_index=original_index,
            existing_id=existing_id,
        )
        self.slots.append(slot)
        return slot.intent_index

    def slot(self, intent_index: int) -> IntentSlot:
        return self.slots[intent_index]

    def original_index(self, intent_index: int) -> int:
        return self.slots[intent_index].original_index

    def __len__(self) -> int:
        return len(self.slots)


@dataclass
class PreparedBatch:
    """Orchestrator output: intents in batch order plus pre-check errors."""

    intents: list[InsertIntent | ReplaceIntent] = field(default_factory=list)
    index_map: IntentIndexMap = field(default_factory=IntentIndexMap)
    errors: list[ItemError] = field(default_factory=list)


@dataclass
class CommittedWrite:
    """A write the bulk result confirmed, in its post-write shape."""

    intent_index: int
    original_index: int
    operation: Literal["insert", "replace"]
    document: dict[str, Any]
    db_id: Any = None
    upserted: bool = False


@dataclass
class ReconciledBatch:
    """Committed and failed intents; every intent index is in exactly one."""

    committed: list[CommittedWrite] = field(default_factory=list)
    failed: list[ItemError] = field(default_factory=list)

    @property
    def committed_inserts(self) -> list[CommittedWrite]:
        return [c for c in self.committed if c.operation == "insert"]

    @property
    def committed_replaces(self) -> list[CommittedWrite]:
        return [c for c in self.committed if c.operation == "replace"]


# === SIGNALS ===


class CacheSignal(BaseModel):
    """One record published to the event bus after a committed write."""

    event: Literal[
        "data-update",
        "data-remove",
        "data-received",
        "storage-socket-create",
        "storage-socket-update",
    ]
    collection: str
    op: Literal["update", "remove"] | None = None
    kind: Literal["insert", "replace"] | None = None
    changes: list[Any] = Field(default_factory=list)

    def payload(self) -> dict[str, Any]:
        return self.model_dump(exclude={"event"}, exclude_none=True)
