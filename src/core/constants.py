# src/core/constants.py - v1
"""Write-path constants: status codes, client-facing messages, field groups."""

from __future__ import annotations

from http import HTTPStatus

# Epoch milliseconds of 2000-01-01T00:00:00Z; older timestamps are rejected.
MIN_TIMESTAMP = 946684800000
MIN_UTC_OFFSET = -1440
MAX_UTC_OFFSET = 1440

# Mongo duplicate key error code, also used by the in-memory store.
DUPLICATE_KEY_CODE = 11000

# Fields that may not change once a record is stored.
IMMUTABLE_FIELDS: tuple[str, ...] = (
    "identifier",
    "date",
    "utcOffset",
    "eventType",
    "device",
    "app",
    "srvCreated",
    "subject",
    "srvModified",
    "modifiedBy",
    "isValid",
)

READ_ONLY_FLAGS: tuple[str, ...] = ("isReadOnly", "readOnly", "readonly")


class Msg:
    """Client-facing messages."""

    BAD_REQUEST_BODY = "Bad or missing request body"
    BAD_REQUEST_BODY_EMPTY_ARRAY = "Request body cannot be an empty array"
    BAD_FIELD_IDENTIFIER = "Bad or missing identifier field"
    BAD_FIELD_DATE = "Bad or missing date field"
    BAD_FIELD_UTC = "Bad or missing utcOffset field"
    BAD_FIELD_APP = "Bad or missing app field"
    BAD_DOCUMENT = "Input is not a valid object"
    IMMUTABLE_FIELD = "Field {0} cannot be modified by the client"
    READONLY_MODIFICATION = "Trying to modify read-only document"
    MISSING_PERMISSION = "Missing permission {0}"
    MODIFIED_SINCE = "Document modified since last read"
    STORAGE_ERROR = "Database error"
    PRE_PROCESSING_FAILED = "Documents failed pre-processing."
    NO_OPERATIONS = "No operations to perform based on input."


HTTP_OK = HTTPStatus.OK
HTTP_MULTI_STATUS = HTTPStatus.MULTI_STATUS
HTTP_BAD_REQUEST = HTTPStatus.BAD_REQUEST
HTTP_FORBIDDEN = HTTPStatus.FORBIDDEN
HTTP_CONFLICT = HTTPStatus.CONFLICT
HTTP_PRECONDITION_FAILED = HTTPStatus.PRECONDITION_FAILED
HTTP_UNPROCESSABLE_ENTITY = HTTPStatus.UNPROCESSABLE_ENTITY
HTTP_INTERNAL_ERROR = HTTPStatus.INTERNAL_SERVER_ERROR
