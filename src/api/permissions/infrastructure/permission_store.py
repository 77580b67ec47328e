"""PostgreSQL implementation of the PermissionStore protocol.

Persists permission tuples in the bookmark_permissions table. The store never
commits: the calling service owns the transaction.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from ulid import ULID

from permissions.infrastructure.models import PermissionModel
from permissions.infrastructure.observability import (
    DefaultPermissionStoreProbe,
    PermissionStoreProbe,
)
from shared_kernel.authorization.exceptions import PermissionStoreError
from shared_kernel.authorization.protocols import PermissionStore
from shared_kernel.authorization.types import (
    PermissionTuple,
    Relation,
    ResourceType,
    SubjectType,
)


class PostgresPermissionStore(PermissionStore):
    """PostgreSQL-backed store for permission tuples."""

    def __init__(
        self, session: AsyncSession, probe: PermissionStoreProbe | None = None
    ) -> None:
        """Initialize store with database session and probe.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultPermissionStoreProbe()

    def _failure(
        self, operation: str, tenant_id: int, error: Exception
    ) -> PermissionStoreError:
        self._probe.store_operation_failed(
            operation=operation, tenant_id=tenant_id, error=error
        )
        return PermissionStoreError(f"Failed to {operation}: {error}")

    async def has_permission(
        self,
        tenant_id: int,
        resource_type: ResourceType,
        resource_id: str,
        subject_type: SubjectType,
        subject_id: str,
    ) -> PermissionTuple | None:
        """Return the first tuple held by the subject on the resource."""
        stmt = (
            select(PermissionModel)
            .where(
                PermissionModel.tenant_id == tenant_id,
                PermissionModel.resource_type == resource_type.as_str(),
                PermissionModel.resource_id == resource_id,
                PermissionModel.subject_type == subject_type.as_str(),
                PermissionModel.subject_id == subject_id,
            )
            .limit(1)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise self._failure("look up permission", tenant_id, e) from e

        model = result.scalars().first()
        if model is None:
            return None
        return _to_tuple(model)

    async def list_resources_by_subject(
        self,
        tenant_id: int,
        subject_type: SubjectType,
        subject_id: str,
        resource_type: ResourceType,
    ) -> set[str]:
        """Return the distinct resource ids on which the subject holds a tuple."""
        stmt = (
            select(PermissionModel.resource_id)
            .where(
                PermissionModel.tenant_id == tenant_id,
                PermissionModel.subject_type == subject_type.as_str(),
                PermissionModel.subject_id == subject_id,
                PermissionModel.resource_type == resource_type.as_str(),
            )
            .distinct()
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise self._failure("list resources by subject", tenant_id, e) from e

        return set(result.scalars().all())

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
        """Insert a tuple, updating granter and expiry when it already exists."""
        insert_stmt = insert(PermissionModel).values(
            id=str(ULID()),
            tenant_id=tenant_id,
            resource_type=resource_type.as_str(),
            resource_id=resource_id,
            relation=relation.as_str(),
            subject_type=subject_type.as_str(),
            subject_id=subject_id,
            granted_by=granted_by,
            expires_at=expires_at,
        )
        stmt = insert_stmt.on_conflict_do_update(
            constraint="uq_bookmark_permissions_tuple",
            set_={
                "granted_by": insert_stmt.excluded.granted_by,
                "expires_at": insert_stmt.excluded.expires_at,
            },
        ).returning(PermissionModel)
        try:
            result = await self._session.execute(stmt)
            model = result.scalar_one()
        except SQLAlchemyError as e:
            raise self._failure("create permission", tenant_id, e) from e

        self._probe.permission_saved(
            tenant_id=tenant_id,
            resource_id=resource_id,
            relation=relation.as_str(),
            subject=f"{subject_type.as_str()}:{subject_id}",
        )
        return _to_tuple(model)

    async def delete_permission(
        self,
        tenant_id: int,
        resource_type: ResourceType,
        resource_id: str,
        subject_type: SubjectType,
        subject_id: str,
        relation: Relation | None = None,
    ) -> int:
        """Delete the subject's tuples on the resource, optionally by relation."""
        stmt = delete(PermissionModel).where(
            PermissionModel.tenant_id == tenant_id,
            PermissionModel.resource_type == resource_type.as_str(),
            PermissionModel.resource_id == resource_id,
            PermissionModel.subject_type == subject_type.as_str(),
            PermissionModel.subject_id == subject_id,
        )
        if relation is not None:
            stmt = stmt.where(PermissionModel.relation == relation.as_str())
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise self._failure("delete permission", tenant_id, e) from e

        self._probe.permissions_deleted(
            tenant_id=tenant_id,
            resource_id=resource_id,
            subject=f"{subject_type.as_str()}:{subject_id}",
            relation=relation.as_str() if relation else None,
            count=result.rowcount,
        )
        return result.rowcount

    async def delete_all_for_resource(
        self,
        tenant_id: int,
        resource_type: ResourceType,
        resource_id: str,
    ) -> int:
        """Delete every tuple on the resource."""
        stmt = delete(PermissionModel).where(
            PermissionModel.tenant_id == tenant_id,
            PermissionModel.resource_type == resource_type.as_str(),
            PermissionModel.resource_id == resource_id,
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise self._failure("delete resource permissions", tenant_id, e) from e

        self._probe.resource_permissions_cleared(
            tenant_id=tenant_id,
            resource_id=resource_id,
            count=result.rowcount,
        )
        return result.rowcount

    async def get_direct_permissions(
        self,
        tenant_id: int,
        resource_type: ResourceType,
        resource_id: str,
    ) -> list[PermissionTuple]:
        """Return every tuple on the resource, newest first."""
        stmt = (
            select(PermissionModel)
            .where(
                PermissionModel.tenant_id == tenant_id,
                PermissionModel.resource_type == resource_type.as_str(),
                PermissionModel.resource_id == resource_id,
            )
            .order_by(PermissionModel.created_at.desc())
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise self._failure("get direct permissions", tenant_id, e) from e

        return [_to_tuple(model) for model in result.scalars().all()]

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
        """Return one page of the tenant's tuples and the total match count.

        Filters left as None are not applied. Pages are 1-based and ordered
        newest first.
        """
        conditions: list[ColumnElement[bool]] = [
            PermissionModel.tenant_id == tenant_id
        ]
        if resource_type is not None:
            conditions.append(PermissionModel.resource_type == resource_type.as_str())
        if resource_id is not None:
            conditions.append(PermissionModel.resource_id == resource_id)
        if subject_type is not None:
            conditions.append(PermissionModel.subject_type == subject_type.as_str())
        if subject_id is not None:
            conditions.append(PermissionModel.subject_id == subject_id)

        count_stmt = select(func.count()).select_from(PermissionModel).where(*conditions)
        page_stmt = (
            select(PermissionModel)
            .where(*conditions)
            .order_by(PermissionModel.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        try:
            total = (await self._session.execute(count_stmt)).scalar_one()
            result = await self._session.execute(page_stmt)
        except SQLAlchemyError as e:
            raise self._failure("list permissions", tenant_id, e) from e

        return [_to_tuple(model) for model in result.scalars().all()], total


def _to_tuple(model: PermissionModel) -> PermissionTuple:
    return PermissionTuple(
        id=model.id,
        tenant_id=model.tenant_id,
        resource_type=ResourceType.from_str(model.resource_type),
        resource_id=model.resource_id,
        relation=model.relation,
        subject_type=SubjectType.from_str(model.subject_type),
        subject_id=model.subject_id,
        granted_by=model.granted_by,
        expires_at=model.expires_at,
        created_at=model.created_at,
    )
