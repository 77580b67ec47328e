"""Permission checker facade for bookmarks.

The checker is the surface callers depend on: permission-named entry points
that raise PermissionDeniedError on denial, plus the derived views.
"""

from __future__ import annotations

from collections.abc import Sequence

from shared_kernel.authorization.engine import AuthorizationEngine, CheckContext
from shared_kernel.authorization.exceptions import PermissionDeniedError
from shared_kernel.authorization.types import Permission, Relation, ResourceType


class PermissionChecker:
    """Bookmark-oriented wrapper around the authorization engine."""

    def __init__(self, engine: AuthorizationEngine):
        self._engine = engine

    @property
    def engine(self) -> AuthorizationEngine:
        """The underlying engine, for callers that need the full check result."""
        return self._engine

    async def require_permission(
        self,
        tenant_id: int,
        user_id: str,
        resource_id: str,
        permission: Permission,
        role_ids: Sequence[str] = (),
    ) -> None:
        """Ensure the user holds a permission on a bookmark.

        Raises:
            PermissionDeniedError: If the engine denies the permission
        """
        result = await self._engine.check(
            CheckContext(
                tenant_id=tenant_id,
                user_id=user_id,
                resource_type=ResourceType.BOOKMARK,
                resource_id=resource_id,
                permission=permission,
            ),
            role_ids,
        )
        if not result.allowed:
            raise PermissionDeniedError(result.reason)

    async def can_read(
        self,
        tenant_id: int,
        user_id: str,
        resource_id: str,
        role_ids: Sequence[str] = (),
    ) -> None:
        await self.require_permission(
            tenant_id, user_id, resource_id, Permission.READ, role_ids
        )

    async def can_write(
        self,
        tenant_id: int,
        user_id: str,
        resource_id: str,
        role_ids: Sequence[str] = (),
    ) -> None:
        await self.require_permission(
            tenant_id, user_id, resource_id, Permission.WRITE, role_ids
        )

    async def can_delete(
        self,
        tenant_id: int,
        user_id: str,
        resource_id: str,
        role_ids: Sequence[str] = (),
    ) -> None:
        await self.require_permission(
            tenant_id, user_id, resource_id, Permission.DELETE, role_ids
        )

    async def can_share(
        self,
        tenant_id: int,
        user_id: str,
        resource_id: str,
        role_ids: Sequence[str] = (),
    ) -> None:
        await self.require_permission(
            tenant_id, user_id, resource_id, Permission.SHARE, role_ids
        )

    async def list_accessible_bookmarks(
        self,
        tenant_id: int,
        user_id: str,
        role_ids: Sequence[str] = (),
    ) -> set[str]:
        """List ids of bookmarks the user can reach through any grant."""
        return await self._engine.list_accessible_resources(
            tenant_id, user_id, ResourceType.BOOKMARK, role_ids
        )

    async def get_effective_permissions(
        self,
        tenant_id: int,
        user_id: str,
        resource_id: str,
        role_ids: Sequence[str] = (),
    ) -> tuple[set[Permission], Relation | None]:
        """Compute the user's effective permissions on a bookmark."""
        return await self._engine.get_effective_permissions(
            CheckContext(
                tenant_id=tenant_id,
                user_id=user_id,
                resource_type=ResourceType.BOOKMARK,
                resource_id=resource_id,
                permission=Permission.READ,
            ),
            role_ids,
        )
