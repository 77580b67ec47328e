"""Application-layer value objects for the permissions bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared_kernel.authorization.types import Permission, PermissionTuple, Relation
from shared_kernel.middleware.request_context import RequestContext

__all__ = [
    "AccessDecision",
    "EffectivePermissions",
    "PermissionPage",
    "RequestContext",
]


@dataclass(frozen=True)
class AccessDecision:
    """Read-only view of a single access check."""

    allowed: bool
    reason: str


@dataclass(frozen=True)
class EffectivePermissions:
    """Read-only view of a user's effective permissions on a resource.

    permissions are ordered by wire code.
    """

    permissions: list[Permission]
    highest_relation: Relation | None


@dataclass(frozen=True)
class PermissionPage:
    """One page of an administrative permission listing."""

    items: list[PermissionTuple]
    total: int
    page: int
    page_size: int
