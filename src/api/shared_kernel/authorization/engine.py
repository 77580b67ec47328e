"""Authorization decision engine.

Turns a (tenant, subject, resource, permission) request into an allow/deny
decision by matching stored permission tuples, and derives the
accessible-resource and effective-permission views from them.

The engine is stateless: it holds only a handle to the permission store and
issues a fresh set of lookups for every decision.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace

from shared_kernel.authorization.exceptions import PermissionStoreError
from shared_kernel.authorization.observability import (
    AuthorizationProbe,
    DefaultAuthorizationProbe,
)
from shared_kernel.authorization.protocols import PermissionStore
from shared_kernel.authorization.types import (
    TENANT_WIDE_SUBJECT_ID,
    Permission,
    PermissionTuple,
    Relation,
    ResourceType,
    SubjectType,
    highest_relation,
)

REASON_DIRECT = "direct permission"
REASON_EXPIRED = "permission expired"
REASON_NOT_FOUND = "no permission found"


@dataclass(frozen=True)
class CheckContext:
    """A single permission question.

    Attributes:
        tenant_id: Tenant the resource belongs to
        user_id: Acting user
        resource_type: Type of the resource
        resource_id: Identifier of the resource
        permission: Permission being tested
    """

    tenant_id: int
    user_id: str
    resource_type: ResourceType
    resource_id: str
    permission: Permission


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a permission check.

    Attributes:
        allowed: Whether the permission is granted
        relation: The relation that granted it, if allowed
        reason: Human-readable reason for the decision
    """

    allowed: bool
    relation: Relation | None
    reason: str

    @classmethod
    def allow(cls, relation: Relation) -> CheckResult:
        return cls(allowed=True, relation=relation, reason=REASON_DIRECT)

    @classmethod
    def deny(cls, reason: str) -> CheckResult:
        return cls(allowed=False, relation=None, reason=reason)


class AuthorizationEngine:
    """Matches stored permission tuples against permission requests."""

    def __init__(
        self,
        store: PermissionStore,
        probe: AuthorizationProbe | None = None,
    ):
        self._store = store
        self._probe = probe or DefaultAuthorizationProbe()

    async def check(
        self,
        context: CheckContext,
        role_ids: Sequence[str] = (),
    ) -> CheckResult:
        """Decide whether the acting user holds a permission on a resource.

        Subjects are consulted in order: the user, each role in the given
        order, then the tenant-wide subject. The first grant wins. An expired
        grant held by the user itself denies immediately.

        Store failures never raise from here: a failed lookup is logged and
        treated as no grant for that subject.

        Args:
            context: The permission question
            role_ids: Roles the acting user belongs to

        Returns:
            The decision with its reason and, on allow, the granting relation
        """
        result = await self._decide(context, role_ids)
        self._probe.permission_checked(
            tenant_id=context.tenant_id,
            resource_id=context.resource_id,
            permission=context.permission.as_str(),
            user_id=context.user_id,
            allowed=result.allowed,
            reason=result.reason,
        )
        return result

    async def _decide(
        self,
        context: CheckContext,
        role_ids: Sequence[str],
    ) -> CheckResult:
        user_tuple = await self._lookup(context, SubjectType.USER, context.user_id)
        if user_tuple is not None:
            if user_tuple.is_expired():
                self._probe.permission_expired(
                    tenant_id=context.tenant_id,
                    resource_id=context.resource_id,
                    subject_type=SubjectType.USER.as_str(),
                    subject_id=context.user_id,
                )
                return CheckResult.deny(REASON_EXPIRED)
            relation = self._granting_relation(context, user_tuple)
            if relation is not None:
                return CheckResult.allow(relation)

        for role_id in role_ids:
            role_tuple = await self._lookup(context, SubjectType.ROLE, role_id)
            if role_tuple is None or role_tuple.is_expired():
                continue
            relation = self._granting_relation(context, role_tuple)
            if relation is not None:
                return CheckResult.allow(relation)

        tenant_tuple = await self._lookup(
            context, SubjectType.TENANT, TENANT_WIDE_SUBJECT_ID
        )
        if tenant_tuple is not None and not tenant_tuple.is_expired():
            relation = self._granting_relation(context, tenant_tuple)
            if relation is not None:
                return CheckResult.allow(relation)

        return CheckResult.deny(REASON_NOT_FOUND)

    async def _lookup(
        self,
        context: CheckContext,
        subject_type: SubjectType,
        subject_id: str,
    ) -> PermissionTuple | None:
        try:
            return await self._store.has_permission(
                context.tenant_id,
                context.resource_type,
                context.resource_id,
                subject_type,
                subject_id,
            )
        except Exception as e:
            self._probe.permission_lookup_failed(
                tenant_id=context.tenant_id,
                resource_id=context.resource_id,
                subject_type=subject_type.as_str(),
                subject_id=subject_id,
                error=e,
            )
            return None

    def _granting_relation(
        self,
        context: CheckContext,
        permission_tuple: PermissionTuple,
    ) -> Relation | None:
        relation = permission_tuple.resolved_relation
        if relation is None:
            self._probe.unknown_relation(
                tenant_id=context.tenant_id,
                resource_id=context.resource_id,
                relation=permission_tuple.relation,
            )
            return None
        if relation.grants(context.permission):
            return relation
        return None

    async def list_accessible_resources(
        self,
        tenant_id: int,
        user_id: str,
        resource_type: ResourceType,
        role_ids: Sequence[str] = (),
    ) -> set[str]:
        """List resources on which the user, a role, or the tenant holds a grant.

        Any relation counts, whether or not it grants a particular permission.

        Raises:
            PermissionStoreError: If any enumeration fails
        """
        subjects = [(SubjectType.USER, user_id)]
        subjects.extend((SubjectType.ROLE, role_id) for role_id in role_ids)
        subjects.append((SubjectType.TENANT, TENANT_WIDE_SUBJECT_ID))

        resources: set[str] = set()
        try:
            for subject_type, subject_id in subjects:
                resources |= await self._store.list_resources_by_subject(
                    tenant_id, subject_type, subject_id, resource_type
                )
        except Exception as e:
            self._probe.accessible_resources_list_failed(
                tenant_id=tenant_id,
                user_id=user_id,
                error=e,
            )
            if isinstance(e, PermissionStoreError):
                raise
            raise PermissionStoreError(
                f"Failed to list accessible resources: {e}"
            ) from e

        self._probe.accessible_resources_listed(
            tenant_id=tenant_id,
            user_id=user_id,
            role_count=len(role_ids),
            resource_count=len(resources),
        )
        return resources

    async def get_effective_permissions(
        self,
        context: CheckContext,
        role_ids: Sequence[str] = (),
    ) -> tuple[set[Permission], Relation | None]:
        """Compute every permission the user holds on a resource.

        Runs one independent check per permission, since different
        permissions may be granted through different subjects. The permission
        on the given context is ignored.

        Returns:
            Tuple of (granted permissions, highest granting relation or None)
        """
        permissions: set[Permission] = set()
        granting_relations: list[Relation] = []
        for permission in Permission:
            result = await self.check(replace(context, permission=permission), role_ids)
            if not result.allowed:
                continue
            permissions.add(permission)
            if result.relation is not None:
                granting_relations.append(result.relation)
        highest = highest_relation(granting_relations)

        self._probe.effective_permissions_computed(
            tenant_id=context.tenant_id,
            resource_id=context.resource_id,
            user_id=context.user_id,
            permissions=sorted(p.as_str() for p in permissions),
            highest_relation=highest.as_str() if highest else None,
        )
        return permissions, highest
