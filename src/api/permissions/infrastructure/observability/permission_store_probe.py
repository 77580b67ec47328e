"""Domain probe for permission store operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events of permission tuple persistence.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class PermissionStoreProbe(Protocol):
    """Domain probe for permission store operations."""

    def permission_saved(
        self,
        tenant_id: int,
        resource_id: str,
        relation: str,
        subject: str,
    ) -> None:
        """Record that a permission tuple was created or updated."""
        ...

    def permissions_deleted(
        self,
        tenant_id: int,
        resource_id: str,
        subject: str,
        relation: str | None,
        count: int,
    ) -> None:
        """Record that a subject's tuples on a resource were deleted."""
        ...

    def resource_permissions_cleared(
        self,
        tenant_id: int,
        resource_id: str,
        count: int,
    ) -> None:
        """Record that every tuple on a resource was deleted."""
        ...

    def store_operation_failed(
        self,
        operation: str,
        tenant_id: int,
        error: Exception,
    ) -> None:
        """Record that a store operation failed."""
        ...

    def with_context(self, context: ObservationContext) -> PermissionStoreProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPermissionStoreProbe:
    """Default implementation of PermissionStoreProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging.

        Every event logs tenant_id explicitly, so the context copy is dropped.
        """
        if self._context is None:
            return {}
        context = self._context.as_dict()
        context.pop("tenant_id", None)
        return context

    def with_context(self, context: ObservationContext) -> DefaultPermissionStoreProbe:
        """Create a new probe with observation context bound."""
        return DefaultPermissionStoreProbe(logger=self._logger, context=context)

    def permission_saved(
        self,
        tenant_id: int,
        resource_id: str,
        relation: str,
        subject: str,
    ) -> None:
        """Record that a permission tuple was created or updated."""
        self._logger.info(
            "permission_saved",
            tenant_id=tenant_id,
            resource_id=resource_id,
            relation=relation,
            subject=subject,
            **self._get_context_kwargs(),
        )

    def permissions_deleted(
        self,
        tenant_id: int,
        resource_id: str,
        subject: str,
        relation: str | None,
        count: int,
    ) -> None:
        """Record that a subject's tuples on a resource were deleted."""
        self._logger.info(
            "permissions_deleted",
            tenant_id=tenant_id,
            resource_id=resource_id,
            subject=subject,
            relation=relation,
            count=count,
            **self._get_context_kwargs(),
        )

    def resource_permissions_cleared(
        self,
        tenant_id: int,
        resource_id: str,
        count: int,
    ) -> None:
        """Record that every tuple on a resource was deleted."""
        self._logger.info(
            "resource_permissions_cleared",
            tenant_id=tenant_id,
            resource_id=resource_id,
            count=count,
            **self._get_context_kwargs(),
        )

    def store_operation_failed(
        self,
        operation: str,
        tenant_id: int,
        error: Exception,
    ) -> None:
        """Record that a store operation failed."""
        self._logger.error(
            "permission_store_operation_failed",
            operation=operation,
            tenant_id=tenant_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
