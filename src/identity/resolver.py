# src/identity/resolver.py - v1
"""Content-based document identity.

identifier = uuid5(namespace, "<device>_<date>[_<eventType>]")

A caller-supplied identifier that disagrees with the computed one is kept
(externally identified records stay addressable) and only logged.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

logger = logging.getLogger(__name__)

# Fixed namespace so identifiers stay stable across deployments and match
# identifiers computed by existing uploaders.
IDENTIFIER_NAMESPACE = uuid.UUID(bytes=b"NightscoutRocks!")


def calculate_identifier(doc: dict[str, Any] | None) -> str | None:
    """Compute the identifier from the identity-key fields."""
    if not doc:
        return None

    key = f"{_key_part(doc.get('device'))}_{_key_part(doc.get('date'))}"
    if doc.get("eventType"):
        key += f"_{_key_part(doc['eventType'])}"

    return str(uuid.uuid5(IDENTIFIER_NAMESPACE, key))


def resolve_identifier(doc: dict[str, Any]) -> str | None:
    """Ensure ``doc`` carries an identifier; return it.

    Sets the computed value when absent. On mismatch, warns and keeps the
    caller's value.
    """
    computed = calculate_identifier(doc)
    supplied = doc.get("identifier")

    if supplied:
        if supplied != computed:
            logger.warning(
                "Identifier mismatch (expected: %s, received: %s)",
                computed, supplied,
            )
        return supplied

    doc["identifier"] = computed
    return computed


def _key_part(value: Any) -> str:
    """String form of one key field, stable for ints stored as floats."""
    if value is None:
        return "undefined"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
