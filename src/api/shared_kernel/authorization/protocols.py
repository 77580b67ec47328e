"""Permission store protocol for the authorization engine.

Defines the capability the engine and the permission service need from
durable storage, allowing swappable implementations (PostgreSQL, in-memory
fakes in tests).
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from shared_kernel.authorization.types import (
    PermissionTuple,
    Relation,
    ResourceType,
    SubjectType,
)


@runtime_checkable
class PermissionStore(Protocol):
    """Protocol for permission tuple persistence.

    The primary implementation is PostgresPermissionStore. Implementations
    raise PermissionStoreError when the underlying storage fails.
    """

    async def has_permission(
        self,
        tenant_id: int,
        resource_type: ResourceType,
        resource_id: str,
        subject_type: SubjectType,
        subject_id: str,
    ) -> PermissionTuple | None:
        """Look up a tuple granted to a subject on a resource.

        Args:
            tenant_id: Tenant the resource belongs to
            resource_type: Type of the resource
            resource_id: Identifier of the resource
            subject_type: Type of the subject (user, role or tenant)
            subject_id: Identifier of the subject

        Returns:
            The first matching tuple, or None if the subject holds no grant
        """
        ...

    async def list_resources_by_subject(
        self,
        tenant_id: int,
        subject_type: SubjectType,
        subject_id: str,
        resource_type: ResourceType,
    ) -> set[str]:
        """List the ids of resources on which a subject holds any tuple."""
        ...

    async def create_permission(
        self,
        tenant_id: int,
        resource_type: ResourceType,
        resource_id: str,
        relation: Relation,
        subject_type: SubjectType,
        subject_id: str,
        granted_by: str | None,
        expires_at: datetime | None,
    ) -> PermissionTuple:
        """Create a tuple, or update granter and expiry of an existing one.

        Returns:
            The stored tuple
        """
        ...

    async def delete_permission(
        self,
        tenant_id: int,
        resource_type: ResourceType,
        resource_id: str,
        subject_type: SubjectType,
        subject_id: str,
        relation: Relation | None = None,
    ) -> int:
        """Delete a subject's tuples on a resource.

        Args:
            relation: Only delete this relation; all relations when None

        Returns:
            Number of deleted tuples
        """
        ...

    async def delete_all_for_resource(
        self,
        tenant_id: int,
        resource_type: ResourceType,
        resource_id: str,
    ) -> int:
        """Delete every tuple on a resource. Returns the number deleted."""
        ...

    async def get_direct_permissions(
        self,
        tenant_id: int,
        resource_type: ResourceType,
        resource_id: str,
    ) -> list[PermissionTuple]:
        """List every tuple on a resource, newest first."""
        ...

    async def list_permissions_filtered(
        self,
        tenant_id: int,
        resource_type: ResourceType | None,
        resource_id: str | None,
        subject_type: SubjectType | None,
        subject_id: str | None,
        page: int,
        page_size: int,
    ) -> tuple[list[PermissionTuple], int]:
        """List a page of a tenant's tuples matching the given filters.

        Returns:
            Tuple of (tuples on the page, total number of matching tuples)
        """
        ...
