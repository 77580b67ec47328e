"""Domain probe for permission service operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events of granting, revoking and inspecting access.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class PermissionServiceProbe(Protocol):
    """Domain probe for permission service operations."""

    def access_granted(
        self,
        resource_id: str,
        relation: str,
        subject: str,
        granted_by: str,
    ) -> None:
        """Record that access was granted on a resource."""
        ...

    def access_revoked(
        self,
        resource_id: str,
        subject: str,
        relation: str | None,
        count: int,
    ) -> None:
        """Record that access was revoked on a resource."""
        ...

    def access_denied(
        self,
        operation: str,
        resource_id: str,
        reason: str,
    ) -> None:
        """Record that the caller was denied an operation."""
        ...

    def invalid_argument(self, operation: str, message: str) -> None:
        """Record that a request was rejected as malformed."""
        ...

    def permissions_listed(self, count: int, total: int, page: int) -> None:
        """Record that a page of permissions was listed."""
        ...

    def resource_owner_registered(self, resource_id: str, owner_id: str) -> None:
        """Record that the creator of a resource was made its owner."""
        ...

    def resource_removed(self, resource_id: str, count: int) -> None:
        """Record that the permissions of a deleted resource were removed."""
        ...

    def with_context(self, context: ObservationContext) -> PermissionServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPermissionServiceProbe:
    """Default implementation of PermissionServiceProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultPermissionServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultPermissionServiceProbe(logger=self._logger, context=context)

    def access_granted(
        self,
        resource_id: str,
        relation: str,
        subject: str,
        granted_by: str,
    ) -> None:
        """Record that access was granted on a resource."""
        self._logger.info(
            "access_granted",
            resource_id=resource_id,
            relation=relation,
            subject=subject,
            granted_by=granted_by,
            **self._get_context_kwargs(),
        )

    def access_revoked(
        self,
        resource_id: str,
        subject: str,
        relation: str | None,
        count: int,
    ) -> None:
        """Record that access was revoked on a resource."""
        self._logger.info(
            "access_revoked",
            resource_id=resource_id,
            subject=subject,
            relation=relation,
            count=count,
            **self._get_context_kwargs(),
        )

    def access_denied(
        self,
        operation: str,
        resource_id: str,
        reason: str,
    ) -> None:
        """Record that the caller was denied an operation."""
        self._logger.warning(
            "access_denied",
            operation=operation,
            resource_id=resource_id,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def invalid_argument(self, operation: str, message: str) -> None:
        """Record that a request was rejected as malformed."""
        self._logger.warning(
            "invalid_argument",
            operation=operation,
            message=message,
            **self._get_context_kwargs(),
        )

    def permissions_listed(self, count: int, total: int, page: int) -> None:
        """Record that a page of permissions was listed."""
        self._logger.debug(
            "permissions_listed",
            count=count,
            total=total,
            page=page,
            **self._get_context_kwargs(),
        )

    def resource_owner_registered(self, resource_id: str, owner_id: str) -> None:
        """Record that the creator of a resource was made its owner."""
        self._logger.info(
            "resource_owner_registered",
            resource_id=resource_id,
            owner_id=owner_id,
            **self._get_context_kwargs(),
        )

    def resource_removed(self, resource_id: str, count: int) -> None:
        """Record that the permissions of a deleted resource were removed."""
        self._logger.info(
            "resource_removed",
            resource_id=resource_id,
            count=count,
            **self._get_context_kwargs(),
        )
