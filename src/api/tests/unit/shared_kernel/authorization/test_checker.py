"""Unit tests for the PermissionChecker facade."""

from __future__ import annotations

from unittest.mock import AsyncMock, create_autospec

import pytest

from shared_kernel.authorization.checker import PermissionChecker
from shared_kernel.authorization.engine import (
    AuthorizationEngine,
    CheckContext,
    CheckResult,
)
from shared_kernel.authorization.exceptions import PermissionDeniedError
from shared_kernel.authorization.types import (
    TENANT_WIDE_SUBJECT_ID,
    Permission,
    Relation,
    ResourceType,
    SubjectType,
)

TENANT_ID = 7
BOOKMARK_ID = "bm-1"


class TestCanMethods:
    """Tests for the permission-named entry points."""

    @pytest.mark.asyncio
    async def test_allowed_returns_none(self, checker, store):
        store.add(Relation.OWNER, SubjectType.USER, "alice")

        assert await checker.can_read(TENANT_ID, "alice", BOOKMARK_ID) is None
        assert await checker.can_write(TENANT_ID, "alice", BOOKMARK_ID) is None
        assert await checker.can_delete(TENANT_ID, "alice", BOOKMARK_ID) is None
        assert await checker.can_share(TENANT_ID, "alice", BOOKMARK_ID) is None

    @pytest.mark.asyncio
    async def test_denial_raises_with_reason(self, checker):
        with pytest.raises(PermissionDeniedError) as exc_info:
            await checker.can_read(TENANT_ID, "alice", BOOKMARK_ID)

        assert exc_info.value.reason == "no permission found"
        assert str(exc_info.value) == "access denied: no permission found"

    @pytest.mark.asyncio
    async def test_expired_denial_carries_reason(self, checker, store, past):
        store.add(Relation.OWNER, SubjectType.USER, "alice", expires_at=past)

        with pytest.raises(PermissionDeniedError, match="permission expired"):
            await checker.can_write(TENANT_ID, "alice", BOOKMARK_ID)

    @pytest.mark.asyncio
    async def test_editor_cannot_share_but_sharer_can(self, checker, store):
        store.add(Relation.EDITOR, SubjectType.USER, "alice")
        store.add(Relation.SHARER, SubjectType.USER, "bob")

        with pytest.raises(PermissionDeniedError):
            await checker.can_share(TENANT_ID, "alice", BOOKMARK_ID)
        await checker.can_share(TENANT_ID, "bob", BOOKMARK_ID)

    @pytest.mark.asyncio
    async def test_role_ids_are_forwarded(self, checker, store):
        store.add(Relation.EDITOR, SubjectType.ROLE, "editors")

        await checker.can_write(TENANT_ID, "alice", BOOKMARK_ID, ["editors"])

    @pytest.mark.asyncio
    async def test_builds_bookmark_context(self):
        engine = create_autospec(AuthorizationEngine, instance=True)
        engine.check = AsyncMock(return_value=CheckResult.allow(Relation.OWNER))
        checker = PermissionChecker(engine)

        await checker.can_delete(TENANT_ID, "alice", BOOKMARK_ID, ["admins"])

        engine.check.assert_awaited_once_with(
            CheckContext(
                tenant_id=TENANT_ID,
                user_id="alice",
                resource_type=ResourceType.BOOKMARK,
                resource_id=BOOKMARK_ID,
                permission=Permission.DELETE,
            ),
            ["admins"],
        )


class TestForwardedViews:
    """Tests for listing and aggregation forwarded to the engine."""

    @pytest.mark.asyncio
    async def test_list_accessible_bookmarks(self, checker, store):
        store.add(Relation.VIEWER, SubjectType.USER, "alice", resource_id="bm-1")
        store.add(
            Relation.VIEWER,
            SubjectType.TENANT,
            TENANT_WIDE_SUBJECT_ID,
            resource_id="bm-2",
        )

        assert await checker.list_accessible_bookmarks(TENANT_ID, "alice") == {
            "bm-1",
            "bm-2",
        }

    @pytest.mark.asyncio
    async def test_get_effective_permissions(self, checker, store):
        store.add(Relation.VIEWER, SubjectType.USER, "alice")
        store.add(Relation.EDITOR, SubjectType.ROLE, "editors")

        permissions, highest = await checker.get_effective_permissions(
            TENANT_ID, "alice", BOOKMARK_ID, ["editors"]
        )

        assert permissions == {Permission.READ, Permission.WRITE}
        assert highest == Relation.EDITOR

    def test_exposes_engine(self, engine):
        assert PermissionChecker(engine).engine is engine
