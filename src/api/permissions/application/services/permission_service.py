"""Permission application service.

Orchestrates granting, revoking and inspecting bookmark permissions on behalf
of an authenticated caller. Decoding of wire codes happens here, before any
store call, so malformed requests are reported as InvalidArgumentError rather
than as denials.
"""

from __future__ import annotations

from datetime import datetime
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from permissions.application.observability import (
    DefaultPermissionServiceProbe,
    PermissionServiceProbe,
)
from permissions.application.value_objects import (
    AccessDecision,
    EffectivePermissions,
    PermissionPage,
    RequestContext,
)
from shared_kernel.authorization.checker import PermissionChecker
from shared_kernel.authorization.engine import CheckContext
from shared_kernel.authorization.exceptions import (
    InvalidArgumentError,
    PermissionDeniedError,
)
from shared_kernel.authorization.protocols import PermissionStore
from shared_kernel.authorization.types import (
    Permission,
    PermissionTuple,
    Relation,
    ResourceType,
    SubjectType,
)

MAX_IDENTIFIER_LENGTH = 36

_CodedT = TypeVar("_CodedT", Relation, Permission, ResourceType, SubjectType)


class PermissionService:
    """Application service for bookmark permission management.

    Every mutation requires the caller to hold Share on the resource. The
    service owns the database transaction: the store never commits.
    """

    def __init__(
        self,
        session: AsyncSession,
        store: PermissionStore,
        checker: PermissionChecker,
        probe: PermissionServiceProbe | None = None,
        default_page_size: int = 20,
        max_page_size: int = 100,
    ):
        """Initialize PermissionService with dependencies.

        Args:
            session: Database session for transaction management
            store: Permission tuple persistence
            checker: Checker facade used for authorization decisions
            probe: Optional domain probe for observability
            default_page_size: Page size used when the caller sends none
            max_page_size: Upper bound on the page size
        """
        self._session = session
        self._store = store
        self._checker = checker
        self._probe = probe or DefaultPermissionServiceProbe()
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    async def grant_access(
        self,
        ctx: RequestContext,
        resource_type: int,
        resource_id: str,
        relation: int,
        subject_type: int,
        subject_id: str,
        expires_at: datetime | None = None,
    ) -> PermissionTuple:
        """Grant a relation on a resource to a subject.

        Re-granting an existing tuple updates its granter and expiry.

        Args:
            ctx: The calling user's request context
            resource_type: Wire code of the resource type
            resource_id: Identifier of the resource
            relation: Wire code of the relation to grant
            subject_type: Wire code of the subject type
            subject_id: Identifier of the subject
            expires_at: Optional expiration instant of the grant

        Returns:
            The stored tuple

        Raises:
            InvalidArgumentError: If a code or identifier is malformed
            PermissionDeniedError: If the caller cannot share the resource
            PermissionStoreError: If the store fails
        """
        operation = "grant_access"
        decoded_resource_type = self._decode(
            ResourceType, resource_type, "resource_type", operation
        )
        decoded_relation = self._decode(Relation, relation, "relation", operation)
        decoded_subject_type = self._decode(
            SubjectType, subject_type, "subject_type", operation
        )
        self._validate_identifier(resource_id, "resource_id", operation)
        self._validate_identifier(subject_id, "subject_id", operation)

        await self._require_share(ctx, resource_id, operation)

        permission_tuple = await self._store.create_permission(
            ctx.tenant_id,
            decoded_resource_type,
            resource_id,
            decoded_relation,
            decoded_subject_type,
            subject_id,
            ctx.user_id,
            expires_at,
        )
        await self._session.commit()

        self._probe.access_granted(
            resource_id=resource_id,
            relation=decoded_relation.as_str(),
            subject=f"{decoded_subject_type.as_str()}:{subject_id}",
            granted_by=ctx.user_id,
        )
        return permission_tuple

    async def revoke_access(
        self,
        ctx: RequestContext,
        resource_type: int,
        resource_id: str,
        subject_type: int,
        subject_id: str,
        relation: int | None = None,
    ) -> int:
        """Revoke a subject's access to a resource.

        When relation is omitted or unmapped, every relation the subject holds
        on the resource is revoked.

        Returns:
            Number of revoked tuples

        Raises:
            InvalidArgumentError: If a code or identifier is malformed
            PermissionDeniedError: If the caller cannot share the resource
            PermissionStoreError: If the store fails
        """
        operation = "revoke_access"
        decoded_resource_type = self._decode(
            ResourceType, resource_type, "resource_type", operation
        )
        decoded_subject_type = self._decode(
            SubjectType, subject_type, "subject_type", operation
        )
        decoded_relation = Relation.from_proto(relation)
        self._validate_identifier(resource_id, "resource_id", operation)
        self._validate_identifier(subject_id, "subject_id", operation)

        await self._require_share(ctx, resource_id, operation)

        count = await self._store.delete_permission(
            ctx.tenant_id,
            decoded_resource_type,
            resource_id,
            decoded_subject_type,
            subject_id,
            decoded_relation,
        )
        await self._session.commit()

        self._probe.access_revoked(
            resource_id=resource_id,
            subject=f"{decoded_subject_type.as_str()}:{subject_id}",
            relation=decoded_relation.as_str() if decoded_relation else None,
            count=count,
        )
        return count

    async def list_permissions(
        self,
        ctx: RequestContext,
        resource_type: int | None = None,
        resource_id: str | None = None,
        subject_type: int | None = None,
        subject_id: str | None = None,
        page: int | None = None,
        page_size: int | None = None,
    ) -> PermissionPage:
        """List the caller's tenant tuples, newest first.

        Unmapped type codes and empty identifiers are treated as no filter.
        The page is clamped to at least 1 and the page size to the configured
        maximum.
        """
        effective_page = max(page or 1, 1)
        effective_page_size = page_size if page_size and page_size > 0 else (
            self._default_page_size
        )
        effective_page_size = min(effective_page_size, self._max_page_size)

        items, total = await self._store.list_permissions_filtered(
            ctx.tenant_id,
            ResourceType.from_proto(resource_type),
            resource_id or None,
            SubjectType.from_proto(subject_type),
            subject_id or None,
            effective_page,
            effective_page_size,
        )
        self._probe.permissions_listed(
            count=len(items), total=total, page=effective_page
        )
        return PermissionPage(
            items=items,
            total=total,
            page=effective_page,
            page_size=effective_page_size,
        )

    async def check_access(
        self,
        ctx: RequestContext,
        resource_type: int,
        permission: int,
        user_id: str,
        resource_id: str,
    ) -> AccessDecision:
        """Check whether a user holds a permission, using the caller's roles.

        Raises:
            InvalidArgumentError: If a code or identifier is malformed
        """
        operation = "check_access"
        decoded_resource_type = self._decode(
            ResourceType, resource_type, "resource_type", operation
        )
        decoded_permission = self._decode(
            Permission, permission, "permission", operation
        )
        self._validate_identifier(user_id, "user_id", operation)
        self._validate_identifier(resource_id, "resource_id", operation)

        result = await self._checker.engine.check(
            CheckContext(
                tenant_id=ctx.tenant_id,
                user_id=user_id,
                resource_type=decoded_resource_type,
                resource_id=resource_id,
                permission=decoded_permission,
            ),
            ctx.role_ids,
        )
        return AccessDecision(allowed=result.allowed, reason=result.reason)

    async def list_accessible_resources(
        self,
        ctx: RequestContext,
        resource_type: int,
        user_id: str,
    ) -> list[str]:
        """List the bookmarks a user can reach, using the caller's roles.

        Raises:
            InvalidArgumentError: If the resource type code or user id is
                malformed
            PermissionStoreError: If the store cannot enumerate grants
        """
        operation = "list_accessible_resources"
        self._decode(ResourceType, resource_type, "resource_type", operation)
        self._validate_identifier(user_id, "user_id", operation)
        resource_ids = await self._checker.list_accessible_bookmarks(
            ctx.tenant_id, user_id, ctx.role_ids
        )
        return sorted(resource_ids)

    async def get_effective_permissions(
        self,
        ctx: RequestContext,
        user_id: str,
        resource_id: str,
    ) -> EffectivePermissions:
        """Compute a user's effective permissions on a bookmark.

        Raises:
            InvalidArgumentError: If an identifier is malformed
        """
        operation = "get_effective_permissions"
        self._validate_identifier(user_id, "user_id", operation)
        self._validate_identifier(resource_id, "resource_id", operation)
        permissions, highest = await self._checker.get_effective_permissions(
            ctx.tenant_id, user_id, resource_id, ctx.role_ids
        )
        return EffectivePermissions(
            permissions=sorted(permissions, key=Permission.to_proto),
            highest_relation=highest,
        )

    async def register_resource_owner(
        self,
        ctx: RequestContext,
        resource_id: str,
    ) -> PermissionTuple:
        """Make the caller the owner of a bookmark they just created."""
        self._validate_identifier(resource_id, "resource_id", "register_resource_owner")
        permission_tuple = await self._store.create_permission(
            ctx.tenant_id,
            ResourceType.BOOKMARK,
            resource_id,
            Relation.OWNER,
            SubjectType.USER,
            ctx.user_id,
            ctx.user_id,
            None,
        )
        await self._session.commit()

        self._probe.resource_owner_registered(
            resource_id=resource_id, owner_id=ctx.user_id
        )
        return permission_tuple

    async def remove_resource(self, ctx: RequestContext, resource_id: str) -> int:
        """Remove every permission on a bookmark that is being deleted."""
        self._validate_identifier(resource_id, "resource_id", "remove_resource")
        count = await self._store.delete_all_for_resource(
            ctx.tenant_id, ResourceType.BOOKMARK, resource_id
        )
        await self._session.commit()

        self._probe.resource_removed(resource_id=resource_id, count=count)
        return count

    async def _require_share(
        self, ctx: RequestContext, resource_id: str, operation: str
    ) -> None:
        try:
            await self._checker.can_share(
                ctx.tenant_id, ctx.user_id, resource_id, ctx.role_ids
            )
        except PermissionDeniedError as e:
            self._probe.access_denied(
                operation=operation, resource_id=resource_id, reason=e.reason
            )
            raise

    def _decode(
        self,
        enum_cls: type[_CodedT],
        code: int,
        field_name: str,
        operation: str,
    ) -> _CodedT:
        decoded = enum_cls.from_proto(code)
        if decoded is None:
            message = f"invalid {field_name}"
            self._probe.invalid_argument(operation=operation, message=message)
            raise InvalidArgumentError(message)
        return decoded

    def _validate_identifier(
        self, value: str, field_name: str, operation: str
    ) -> None:
        if not value:
            message = f"{field_name} is required"
        elif len(value) > MAX_IDENTIFIER_LENGTH:
            message = f"{field_name} must be at most {MAX_IDENTIFIER_LENGTH} characters"
        else:
            return
        self._probe.invalid_argument(operation=operation, message=message)
        raise InvalidArgumentError(message)
