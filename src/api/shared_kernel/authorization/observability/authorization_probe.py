"""Domain probe for authorization decisions.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events of the decision engine: checks, absorbed lookup
failures, expired grants and derived views.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthorizationProbe(Protocol):
    """Domain probe for authorization decisions."""

    def permission_checked(
        self,
        tenant_id: int,
        resource_id: str,
        permission: str,
        user_id: str,
        allowed: bool,
        reason: str,
    ) -> None:
        """Record the outcome of a permission check."""
        ...

    def permission_lookup_failed(
        self,
        tenant_id: int,
        resource_id: str,
        subject_type: str,
        subject_id: str,
        error: Exception,
    ) -> None:
        """Record that a point lookup failed and was treated as no grant."""
        ...

    def permission_expired(
        self,
        tenant_id: int,
        resource_id: str,
        subject_type: str,
        subject_id: str,
    ) -> None:
        """Record that an expired grant was found."""
        ...

    def unknown_relation(
        self,
        tenant_id: int,
        resource_id: str,
        relation: str,
    ) -> None:
        """Record that a stored relation could not be decoded."""
        ...

    def accessible_resources_listed(
        self,
        tenant_id: int,
        user_id: str,
        role_count: int,
        resource_count: int,
    ) -> None:
        """Record that accessible resources were listed."""
        ...

    def accessible_resources_list_failed(
        self,
        tenant_id: int,
        user_id: str,
        error: Exception,
    ) -> None:
        """Record that listing accessible resources failed."""
        ...

    def effective_permissions_computed(
        self,
        tenant_id: int,
        resource_id: str,
        user_id: str,
        permissions: list[str],
        highest_relation: str | None,
    ) -> None:
        """Record that effective permissions were computed."""
        ...

    def with_context(self, context: ObservationContext) -> AuthorizationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuthorizationProbe:
    """Default implementation of AuthorizationProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultAuthorizationProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuthorizationProbe(logger=self._logger, context=context)

    def permission_checked(
        self,
        tenant_id: int,
        resource_id: str,
        permission: str,
        user_id: str,
        allowed: bool,
        reason: str,
    ) -> None:
        """Record the outcome of a permission check."""
        self._logger.debug(
            "authorization_permission_checked",
            tenant_id=tenant_id,
            resource_id=resource_id,
            permission=permission,
            subject_user_id=user_id,
            allowed=allowed,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def permission_lookup_failed(
        self,
        tenant_id: int,
        resource_id: str,
        subject_type: str,
        subject_id: str,
        error: Exception,
    ) -> None:
        """Record that a point lookup failed and was treated as no grant."""
        self._logger.warning(
            "authorization_permission_lookup_failed",
            tenant_id=tenant_id,
            resource_id=resource_id,
            subject_type=subject_type,
            subject_id=subject_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def permission_expired(
        self,
        tenant_id: int,
        resource_id: str,
        subject_type: str,
        subject_id: str,
    ) -> None:
        """Record that an expired grant was found."""
        self._logger.info(
            "authorization_permission_expired",
            tenant_id=tenant_id,
            resource_id=resource_id,
            subject_type=subject_type,
            subject_id=subject_id,
            **self._get_context_kwargs(),
        )

    def unknown_relation(
        self,
        tenant_id: int,
        resource_id: str,
        relation: str,
    ) -> None:
        """Record that a stored relation could not be decoded."""
        self._logger.warning(
            "authorization_unknown_relation",
            tenant_id=tenant_id,
            resource_id=resource_id,
            relation=relation,
            **self._get_context_kwargs(),
        )

    def accessible_resources_listed(
        self,
        tenant_id: int,
        user_id: str,
        role_count: int,
        resource_count: int,
    ) -> None:
        """Record that accessible resources were listed."""
        self._logger.debug(
            "authorization_accessible_resources_listed",
            tenant_id=tenant_id,
            subject_user_id=user_id,
            role_count=role_count,
            resource_count=resource_count,
            **self._get_context_kwargs(),
        )

    def accessible_resources_list_failed(
        self,
        tenant_id: int,
        user_id: str,
        error: Exception,
    ) -> None:
        """Record that listing accessible resources failed."""
        self._logger.error(
            "authorization_accessible_resources_list_failed",
            tenant_id=tenant_id,
            subject_user_id=user_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def effective_permissions_computed(
        self,
        tenant_id: int,
        resource_id: str,
        user_id: str,
        permissions: list[str],
        highest_relation: str | None,
    ) -> None:
        """Record that effective permissions were computed."""
        self._logger.debug(
            "authorization_effective_permissions_computed",
            tenant_id=tenant_id,
            resource_id=resource_id,
            subject_user_id=user_id,
            permissions=permissions,
            highest_relation=highest_relation,
            **self._get_context_kwargs(),
        )
