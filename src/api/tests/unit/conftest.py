"""Unit test fixtures with an in-memory permission store."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import Mock

import pytest

from shared_kernel.authorization.types import (
    PermissionTuple,
    Relation,
    ResourceType,
    SubjectType,
)

TENANT_ID = 7
BOOKMARK_ID = "bm-1"


class InMemoryPermissionStore:
    """PermissionStore fake keeping tuples in a list.

    Lookups for subjects listed in ``failing_subjects`` raise, to exercise
    fail-closed behavior.
    """

    def __init__(self) -> None:
        self.tuples: list[PermissionTuple] = []
        self.failing_subjects: set[tuple[SubjectType, str]] = set()
        self.lookups: list[tuple[SubjectType, str]] = []
        self._next_id = 0

    def add(
        self,
        relation: Relation | str,
        subject_type: SubjectType,
        subject_id: str,
        resource_id: str = BOOKMARK_ID,
        tenant_id: int = TENANT_ID,
        expires_at: datetime | None = None,
    ) -> PermissionTuple:
        self._next_id += 1
        permission_tuple = PermissionTuple(
            id=f"perm-{self._next_id}",
            tenant_id=tenant_id,
            resource_type=ResourceType.BOOKMARK,
            resource_id=resource_id,
            relation=relation.as_str() if isinstance(relation, Relation) else relation,
            subject_type=subject_type,
            subject_id=subject_id,
            granted_by=None,
            expires_at=expires_at,
            created_at=datetime.now(UTC),
        )
        self.tuples.append(permission_tuple)
        return permission_tuple

    def _matches(self, t, tenant_id, resource_type, resource_id=None):
        return (
            t.tenant_id == tenant_id
            and t.resource_type == resource_type
            and (resource_id is None or t.resource_id == resource_id)
        )

    async def has_permission(
        self, tenant_id, resource_type, resource_id, subject_type, subject_id
    ):
        self.lookups.append((subject_type, subject_id))
        if (subject_type, subject_id) in self.failing_subjects:
            raise TimeoutError("store timed out")
        for t in self.tuples:
            if (
                self._matches(t, tenant_id, resource_type, resource_id)
                and t.subject_type == subject_type
                and t.subject_id == subject_id
            ):
                return t
        return None

    async def list_resources_by_subject(
        self, tenant_id, subject_type, subject_id, resource_type
    ):
        if (subject_type, subject_id) in self.failing_subjects:
            raise TimeoutError("store timed out")
        return {
            t.resource_id
            for t in self.tuples
            if self._matches(t, tenant_id, resource_type)
            and t.subject_type == subject_type
            and t.subject_id == subject_id
        }

    async def create_permission(
        self,
        tenant_id,
        resource_type,
        resource_id,
        relation,
        subject_type,
        subject_id,
        granted_by,
        expires_at,
    ):
        return self.add(
            relation, subject_type, subject_id, resource_id, tenant_id, expires_at
        )

    async def delete_permission(
        self,
        tenant_id,
        resource_type,
        resource_id,
        subject_type,
        subject_id,
        relation=None,
    ):
        kept = [
            t
            for t in self.tuples
            if not (
                self._matches(t, tenant_id, resource_type, resource_id)
                and t.subject_type == subject_type
                and t.subject_id == subject_id
                and (relation is None or t.relation == relation.as_str())
            )
        ]
        deleted = len(self.tuples) - len(kept)
        self.tuples = kept
        return deleted

    async def delete_all_for_resource(self, tenant_id, resource_type, resource_id):
        kept = [
            t
            for t in self.tuples
            if not self._matches(t, tenant_id, resource_type, resource_id)
        ]
        deleted = len(self.tuples) - len(kept)
        self.tuples = kept
        return deleted

    async def get_direct_permissions(self, tenant_id, resource_type, resource_id):
        return [
            t
            for t in reversed(self.tuples)
            if self._matches(t, tenant_id, resource_type, resource_id)
        ]

    async def list_permissions_filtered(
        self,
        tenant_id,
        resource_type,
        resource_id,
        subject_type,
        subject_id,
        page,
        page_size,
    ):
        matching = [
            t
            for t in reversed(self.tuples)
            if t.tenant_id == tenant_id
            and (resource_type is None or t.resource_type == resource_type)
            and (resource_id is None or t.resource_id == resource_id)
            and (subject_type is None or t.subject_type == subject_type)
            and (subject_id is None or t.subject_id == subject_id)
        ]
        start = (page - 1) * page_size
        return matching[start : start + page_size], len(matching)


@pytest.fixture
def store() -> InMemoryPermissionStore:
    """Provide an empty in-memory permission store."""
    return InMemoryPermissionStore()


@pytest.fixture
def mock_authorization_probe() -> Mock:
    """Provide a mock authorization probe."""
    return Mock()


@pytest.fixture
def engine(store, mock_authorization_probe):
    """Provide an engine over the in-memory store."""
    from shared_kernel.authorization.engine import AuthorizationEngine

    return AuthorizationEngine(store=store, probe=mock_authorization_probe)


@pytest.fixture
def checker(engine):
    """Provide a checker over the engine."""
    from shared_kernel.authorization.checker import PermissionChecker

    return PermissionChecker(engine)


@pytest.fixture
def past() -> datetime:
    """Provide an instant one hour ago."""
    return datetime.now(UTC) - timedelta(hours=1)


@pytest.fixture
def future() -> datetime:
    """Provide an instant one hour from now."""
    return datetime.now(UTC) + timedelta(hours=1)
