"""Unit tests for PermissionService.

The service runs over the in-memory store with a real engine and checker;
only the session and the probe are mocked.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from permissions.application.services import PermissionService
from permissions.application.value_objects import RequestContext
from shared_kernel.authorization.exceptions import (
    InvalidArgumentError,
    PermissionDeniedError,
)
from shared_kernel.authorization.types import (
    TENANT_WIDE_SUBJECT_ID,
    Permission,
    Relation,
    ResourceType,
    SubjectType,
)

TENANT_ID = 7
BOOKMARK = ResourceType.BOOKMARK.to_proto()
USER = SubjectType.USER.to_proto()
ROLE = SubjectType.ROLE.to_proto()


@pytest.fixture
def mock_session():
    """Create mock async session."""
    return AsyncMock()


@pytest.fixture
def mock_probe():
    return Mock()


@pytest.fixture
def service(mock_session, store, checker, mock_probe):
    return PermissionService(
        session=mock_session,
        store=store,
        checker=checker,
        probe=mock_probe,
        default_page_size=2,
        max_page_size=3,
    )


@pytest.fixture
def alice():
    return RequestContext(tenant_id=TENANT_ID, user_id="alice")


class TestGrantAccess:
    """Tests for grant_access."""

    @pytest.mark.asyncio
    async def test_sharer_can_grant(self, service, store, alice, mock_session):
        store.add(Relation.SHARER, SubjectType.USER, "alice")

        granted = await service.grant_access(
            alice, BOOKMARK, "bm-1", Relation.VIEWER.to_proto(), USER, "bob"
        )

        assert granted.resolved_relation == Relation.VIEWER
        assert granted.subject_id == "bob"
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_records_caller_as_granter(self, mock_session, alice):
        recording_store = AsyncMock()
        service = PermissionService(
            session=mock_session, store=recording_store, checker=AsyncMock()
        )

        await service.grant_access(
            alice, BOOKMARK, "bm-1", Relation.EDITOR.to_proto(), ROLE, "editors"
        )

        recording_store.create_permission.assert_awaited_once_with(
            TENANT_ID,
            ResourceType.BOOKMARK,
            "bm-1",
            Relation.EDITOR,
            SubjectType.ROLE,
            "editors",
            "alice",
            None,
        )

    @pytest.mark.asyncio
    async def test_editor_cannot_grant(
        self, service, store, alice, mock_session, mock_probe
    ):
        store.add(Relation.EDITOR, SubjectType.USER, "alice")

        with pytest.raises(PermissionDeniedError):
            await service.grant_access(
                alice, BOOKMARK, "bm-1", Relation.VIEWER.to_proto(), USER, "bob"
            )

        mock_session.commit.assert_not_awaited()
        mock_probe.access_denied.assert_called_once_with(
            operation="grant_access",
            resource_id="bm-1",
            reason="no permission found",
        )

    @pytest.mark.asyncio
    async def test_grant_through_caller_role(self, service, store, mock_session):
        store.add(Relation.OWNER, SubjectType.ROLE, "admins")
        ctx = RequestContext(tenant_id=TENANT_ID, user_id="carol", role_ids=("admins",))

        await service.grant_access(
            ctx, BOOKMARK, "bm-1", Relation.VIEWER.to_proto(), USER, "bob"
        )

        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("resource_type", "relation", "subject_type", "message"),
        [
            (0, 1, 1, "invalid resource_type"),
            (1, 0, 1, "invalid relation"),
            (1, 9, 1, "invalid relation"),
            (1, 1, 4, "invalid subject_type"),
        ],
    )
    async def test_rejects_unmapped_codes(
        self, service, alice, resource_type, relation, subject_type, message
    ):
        with pytest.raises(InvalidArgumentError, match=message):
            await service.grant_access(
                alice, resource_type, "bm-1", relation, subject_type, "bob"
            )

    @pytest.mark.asyncio
    async def test_invalid_code_reported_before_authorization(
        self, service, store, alice, mock_probe
    ):
        with pytest.raises(InvalidArgumentError):
            await service.grant_access(alice, BOOKMARK, "bm-1", 0, USER, "bob")

        assert store.lookups == []
        mock_probe.invalid_argument.assert_called_once_with(
            operation="grant_access", message="invalid relation"
        )

    @pytest.mark.asyncio
    async def test_rejects_empty_subject_id(self, service, alice):
        with pytest.raises(InvalidArgumentError, match="subject_id is required"):
            await service.grant_access(
                alice, BOOKMARK, "bm-1", Relation.VIEWER.to_proto(), USER, ""
            )

    @pytest.mark.asyncio
    async def test_rejects_long_resource_id(self, service, alice):
        with pytest.raises(
            InvalidArgumentError, match="resource_id must be at most 36 characters"
        ):
            await service.grant_access(
                alice, BOOKMARK, "x" * 37, Relation.VIEWER.to_proto(), USER, "bob"
            )


class TestRevokeAccess:
    """Tests for revoke_access."""

    @pytest.mark.asyncio
    async def test_revokes_every_relation_when_omitted(
        self, service, store, alice, mock_session
    ):
        store.add(Relation.OWNER, SubjectType.USER, "alice")
        store.add(Relation.VIEWER, SubjectType.USER, "bob")
        store.add(Relation.SHARER, SubjectType.USER, "bob")

        count = await service.revoke_access(alice, BOOKMARK, "bm-1", USER, "bob")

        assert count == 2
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_revokes_single_relation(self, service, store, alice):
        store.add(Relation.OWNER, SubjectType.USER, "alice")
        store.add(Relation.VIEWER, SubjectType.USER, "bob")
        store.add(Relation.SHARER, SubjectType.USER, "bob")

        count = await service.revoke_access(
            alice, BOOKMARK, "bm-1", USER, "bob", Relation.SHARER.to_proto()
        )

        assert count == 1
        assert [t.relation for t in store.tuples if t.subject_id == "bob"] == [
            "RELATION_VIEWER"
        ]

    @pytest.mark.asyncio
    async def test_unmapped_relation_revokes_everything(self, service, store, alice):
        store.add(Relation.OWNER, SubjectType.USER, "alice")
        store.add(Relation.VIEWER, SubjectType.USER, "bob")

        assert (
            await service.revoke_access(alice, BOOKMARK, "bm-1", USER, "bob", 0) == 1
        )

    @pytest.mark.asyncio
    async def test_requires_share(self, service, store, alice):
        store.add(Relation.VIEWER, SubjectType.USER, "alice")
        store.add(Relation.VIEWER, SubjectType.USER, "bob")

        with pytest.raises(PermissionDeniedError):
            await service.revoke_access(alice, BOOKMARK, "bm-1", USER, "bob")

        assert len(store.tuples) == 2


class TestListPermissions:
    """Tests for list_permissions."""

    @pytest.mark.asyncio
    async def test_uses_default_page_size(self, service, store, alice):
        for i in range(5):
            store.add(Relation.VIEWER, SubjectType.USER, f"user-{i}")

        page = await service.list_permissions(alice)

        assert page.total == 5
        assert page.page == 1
        assert page.page_size == 2
        assert [t.subject_id for t in page.items] == ["user-4", "user-3"]

    @pytest.mark.asyncio
    async def test_clamps_page_and_page_size(self, service, store, alice):
        for i in range(5):
            store.add(Relation.VIEWER, SubjectType.USER, f"user-{i}")

        page = await service.list_permissions(alice, page=-4, page_size=50)

        assert page.page == 1
        assert page.page_size == 3
        assert len(page.items) == 3

    @pytest.mark.asyncio
    async def test_unmapped_codes_and_empty_ids_do_not_filter(
        self, service, store, alice
    ):
        store.add(Relation.VIEWER, SubjectType.USER, "bob")
        store.add(Relation.VIEWER, SubjectType.ROLE, "editors", resource_id="bm-2")

        page = await service.list_permissions(
            alice, resource_type=0, resource_id="", subject_type=99, subject_id=""
        )

        assert page.total == 2

    @pytest.mark.asyncio
    async def test_filters_by_subject(self, service, store, alice):
        store.add(Relation.VIEWER, SubjectType.USER, "bob")
        store.add(Relation.VIEWER, SubjectType.ROLE, "editors")

        page = await service.list_permissions(alice, subject_type=ROLE)

        assert [t.subject_id for t in page.items] == ["editors"]

    @pytest.mark.asyncio
    async def test_scoped_to_caller_tenant(self, service, store, alice):
        store.add(Relation.VIEWER, SubjectType.USER, "bob", tenant_id=8)

        page = await service.list_permissions(alice)

        assert page.total == 0


class TestCheckAccess:
    """Tests for check_access."""

    @pytest.mark.asyncio
    async def test_allowed(self, service, store, alice):
        store.add(Relation.EDITOR, SubjectType.USER, "bob")

        decision = await service.check_access(
            alice, BOOKMARK, Permission.WRITE.to_proto(), "bob", "bm-1"
        )

        assert decision.allowed is True
        assert decision.reason == "direct permission"

    @pytest.mark.asyncio
    async def test_uses_caller_roles(self, service, store):
        store.add(Relation.VIEWER, SubjectType.ROLE, "readers")
        ctx = RequestContext(tenant_id=TENANT_ID, user_id="alice", role_ids=("readers",))

        decision = await service.check_access(
            ctx, BOOKMARK, Permission.READ.to_proto(), "bob", "bm-1"
        )

        assert decision.allowed is True

    @pytest.mark.asyncio
    async def test_denied_is_a_result_not_an_error(self, service, alice):
        decision = await service.check_access(
            alice, BOOKMARK, Permission.DELETE.to_proto(), "bob", "bm-1"
        )

        assert decision.allowed is False
        assert decision.reason == "no permission found"

    @pytest.mark.asyncio
    async def test_rejects_unmapped_permission(self, service, alice):
        with pytest.raises(InvalidArgumentError, match="invalid permission"):
            await service.check_access(alice, BOOKMARK, 0, "bob", "bm-1")


class TestReadViews:
    """Tests for accessible resources and effective permissions."""

    @pytest.mark.asyncio
    async def test_accessible_resources_are_sorted(self, service, store, alice):
        store.add(Relation.VIEWER, SubjectType.USER, "bob", resource_id="bm-3")
        store.add(
            Relation.VIEWER,
            SubjectType.TENANT,
            TENANT_WIDE_SUBJECT_ID,
            resource_id="bm-1",
        )

        assert await service.list_accessible_resources(alice, BOOKMARK, "bob") == [
            "bm-1",
            "bm-3",
        ]

    @pytest.mark.asyncio
    async def test_accessible_resources_rejects_unmapped_type(self, service, alice):
        with pytest.raises(InvalidArgumentError):
            await service.list_accessible_resources(alice, 2, "bob")

    @pytest.mark.asyncio
    async def test_effective_permissions_ordered_by_code(self, service, store, alice):
        store.add(Relation.SHARER, SubjectType.USER, "bob")

        effective = await service.get_effective_permissions(alice, "bob", "bm-1")

        assert effective.permissions == [Permission.READ, Permission.SHARE]
        assert effective.highest_relation == Relation.SHARER

    @pytest.mark.asyncio
    async def test_effective_permissions_empty(self, service, alice):
        effective = await service.get_effective_permissions(alice, "bob", "bm-1")

        assert effective.permissions == []
        assert effective.highest_relation is None


class TestResourceLifecycle:
    """Tests for the bookmark lifecycle hooks."""

    @pytest.mark.asyncio
    async def test_register_owner_makes_caller_owner(
        self, service, store, alice, checker, mock_session
    ):
        owner = await service.register_resource_owner(alice, "bm-9")

        assert owner.resolved_relation == Relation.OWNER
        assert owner.subject_type == SubjectType.USER
        await checker.can_delete(TENANT_ID, "alice", "bm-9")
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_remove_resource_clears_every_tuple(
        self, service, store, alice, mock_probe
    ):
        store.add(Relation.OWNER, SubjectType.USER, "alice")
        store.add(Relation.VIEWER, SubjectType.ROLE, "readers")
        store.add(Relation.VIEWER, SubjectType.USER, "bob", resource_id="bm-2")

        assert await service.remove_resource(alice, "bm-1") == 2
        assert [t.resource_id for t in store.tuples] == ["bm-2"]
        mock_probe.resource_removed.assert_called_once_with(
            resource_id="bm-1", count=2
        )


class TestIdentifierValidation:
    """Identifiers are rejected before any store call on every operation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("user_id", "resource_id", "message"),
        [
            ("", "bm-1", "user_id is required"),
            ("bob", "", "resource_id is required"),
            ("bob", "x" * 200, "resource_id must be at most 36 characters"),
        ],
    )
    async def test_check_access(
        self, service, store, alice, user_id, resource_id, message
    ):
        with pytest.raises(InvalidArgumentError, match=message):
            await service.check_access(
                alice, BOOKMARK, Permission.READ.to_proto(), user_id, resource_id
            )

        assert store.lookups == []

    @pytest.mark.asyncio
    async def test_list_accessible_resources(self, service, store, alice):
        store.failing_subjects.add((SubjectType.USER, ""))

        with pytest.raises(InvalidArgumentError, match="user_id is required"):
            await service.list_accessible_resources(alice, BOOKMARK, "")

    @pytest.mark.asyncio
    async def test_get_effective_permissions(
        self, service, store, alice, mock_probe
    ):
        with pytest.raises(
            InvalidArgumentError, match="user_id must be at most 36 characters"
        ):
            await service.get_effective_permissions(alice, "u" * 37, "bm-1")

        assert store.lookups == []
        mock_probe.invalid_argument.assert_called_once_with(
            operation="get_effective_permissions",
            message="user_id must be at most 36 characters",
        )

    @pytest.mark.asyncio
    async def test_remove_resource(self, service, store, alice, mock_session):
        store.add(Relation.OWNER, SubjectType.USER, "alice")

        with pytest.raises(InvalidArgumentError, match="resource_id is required"):
            await service.remove_resource(alice, "")

        assert len(store.tuples) == 1
        mock_session.commit.assert_not_awaited()
