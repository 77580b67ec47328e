"""Domain probe for request context extraction.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events of resolving the caller identity from the
x-md-global-* request metadata headers.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RequestContextProbe(Protocol):
    """Domain probe for request context extraction."""

    def context_resolved(
        self,
        tenant_id: int,
        user_id: str,
        role_count: int,
    ) -> None:
        """Record that a request context was resolved from headers."""
        ...

    def tenant_missing(self, raw_value: str | None) -> None:
        """Record that a non-admin request carried no valid tenant id."""
        ...

    def user_missing(self, tenant_id: int) -> None:
        """Record that a request carried no user id."""
        ...

    def with_context(self, context: ObservationContext) -> RequestContextProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRequestContextProbe:
    """Default implementation of RequestContextProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging.

        Events log the resolved tenant and user explicitly.
        """
        if self._context is None:
            return {}
        context = self._context.as_dict()
        context.pop("tenant_id", None)
        context.pop("user_id", None)
        return context

    def with_context(self, context: ObservationContext) -> DefaultRequestContextProbe:
        """Create a new probe with observation context bound."""
        return DefaultRequestContextProbe(logger=self._logger, context=context)

    def context_resolved(
        self,
        tenant_id: int,
        user_id: str,
        role_count: int,
    ) -> None:
        """Record that a request context was resolved from headers."""
        self._logger.debug(
            "request_context_resolved",
            tenant_id=tenant_id,
            user_id=user_id,
            role_count=role_count,
            **self._get_context_kwargs(),
        )

    def tenant_missing(self, raw_value: str | None) -> None:
        """Record that a non-admin request carried no valid tenant id."""
        self._logger.warning(
            "request_context_tenant_missing",
            raw_value=raw_value,
            **self._get_context_kwargs(),
        )

    def user_missing(self, tenant_id: int) -> None:
        """Record that a request carried no user id."""
        self._logger.warning(
            "request_context_user_missing",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )
