# src/security/authorizer.py - v1
"""Authorization collaborators consumed as a yes/no capability check.

Permissions are colon-separated Shiro-style strings such as
``api:entries:create``. A ``*`` part matches any value and a granted
permission with fewer parts implies everything below it, so ``api`` and
``api:*`` both grant ``api:entries:create``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from docwrite.core.constants import Msg
from docwrite.core.errors import PermissionDeniedError
from docwrite.core.models import CallerContext

logger = logging.getLogger(__name__)


class BaseAuthorizer(ABC):
    """Unified interface for permission checks."""

    @abstractmethod
    async def has_permission(
        self,
        caller: CallerContext,
        action: str,
        resource_identifier: str | None = None,
        resource_snapshot: dict[str, Any] | None = None,
    ) -> bool:
        """Return True if ``caller`` may perform ``action``."""

    async def demand_permission(
        self,
        caller: CallerContext,
        action: str,
        resource_identifier: str | None = None,
        resource_snapshot: dict[str, Any] | None = None,
    ) -> None:
        """Raise PermissionDeniedError unless ``action`` is allowed."""
        allowed = await self.has_permission(
            caller, action, resource_identifier, resource_snapshot
        )
        if not allowed:
            logger.info(
                "Permission %s denied for %s (resource=%s)",
                action, caller.subject, resource_identifier,
            )
            raise PermissionDeniedError(Msg.MISSING_PERMISSION.format(action))


class AllowAllAuthorizer(BaseAuthorizer):
    """Grants everything. For trusted in-process callers and tooling."""

    async def has_permission(
        self,
        caller: CallerContext,
        action: str,
        resource_identifier: str | None = None,
        resource_snapshot: dict[str, Any] | None = None,
    ) -> bool:
        return True


class PermissionAuthorizer(BaseAuthorizer):
    """Checks the permission strings carried by the caller context."""

    async def has_permission(
        self,
        caller: CallerContext,
        action: str,
        resource_identifier: str | None = None,
        resource_snapshot: dict[str, Any] | None = None,
    ) -> bool:
        return any(permission_implies(granted, action) for granted in caller.permissions)


def permission_implies(granted: str, requested: str) -> bool:
    """Shiro wildcard semantics for one granted permission."""
    granted_parts = [p.split(",") for p in granted.strip().split(":")]
    requested_parts = requested.strip().split(":")

    for i, requested_part in enumerate(requested_parts):
        if i >= len(granted_parts):
            return True
        options = granted_parts[i]
        if "*" not in options and requested_part not in options:
            return False

    # Any extra granted parts must be wildcards.
    return all("*" in part for part in granted_parts[len(requested_parts):])
