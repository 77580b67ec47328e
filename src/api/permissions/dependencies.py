"""FastAPI dependencies for the permissions bounded context.

Builds the object graph behind the permission routes and resolves the caller
identity from the x-md-global-* metadata headers propagated by upstream
services.

Usage in FastAPI routes:
    @router.post("/example")
    async def example(
        ctx: Annotated[RequestContext, Depends(get_request_context)],
        service: Annotated[PermissionService, Depends(get_permission_service)],
    ):
        ...
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.dependencies import get_read_session, get_write_session
from infrastructure.settings import AuthzSettings, get_authz_settings
from permissions.application.observability import (
    DefaultPermissionServiceProbe,
    PermissionServiceProbe,
)
from permissions.application.services import PermissionService
from permissions.infrastructure import PostgresPermissionStore
from shared_kernel.authorization.checker import PermissionChecker
from shared_kernel.authorization.engine import AuthorizationEngine
from shared_kernel.authorization.observability import (
    AuthorizationProbe,
    DefaultAuthorizationProbe,
)
from shared_kernel.authorization.protocols import PermissionStore
from shared_kernel.middleware.observability import (
    DefaultRequestContextProbe,
    RequestContextProbe,
)
from shared_kernel.middleware.request_context import RequestContext


def resolve_request_context(
    tenant_id_header: str | None,
    user_id_header: str | None,
    username_header: str | None,
    roles_header: str | None,
    platform_admin_roles: Iterable[str],
    probe: RequestContextProbe,
) -> RequestContext:
    """Build the caller's request context from raw header values.

    A missing or non-numeric tenant id resolves to 0, which only platform
    admins may use.

    Args:
        tenant_id_header: Raw x-md-global-tenant-id value
        user_id_header: Raw x-md-global-user-id value
        username_header: Raw x-md-global-username value
        roles_header: Raw comma-separated x-md-global-roles value
        platform_admin_roles: Roles exempt from the tenant requirement
        probe: Domain probe for observability

    Returns:
        The resolved RequestContext

    Raises:
        HTTPException 401: If the tenant or user id is missing
    """
    try:
        tenant_id = int(tenant_id_header) if tenant_id_header else 0
    except ValueError:
        tenant_id = 0

    role_ids = tuple(role for role in (roles_header or "").split(",") if role)
    is_platform_admin = any(role in platform_admin_roles for role in role_ids)

    if tenant_id == 0 and not is_platform_admin:
        probe.tenant_missing(raw_value=tenant_id_header)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="missing or invalid tenant_id",
        )

    if not user_id_header:
        probe.user_missing(tenant_id=tenant_id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="missing user_id",
        )

    probe.context_resolved(
        tenant_id=tenant_id,
        user_id=user_id_header,
        role_count=len(role_ids),
    )
    return RequestContext(
        tenant_id=tenant_id,
        user_id=user_id_header,
        username=username_header or None,
        role_ids=role_ids,
    )


def get_request_context_probe() -> RequestContextProbe:
    """Get RequestContextProbe instance."""
    return DefaultRequestContextProbe()


def get_request_context(
    settings: Annotated[AuthzSettings, Depends(get_authz_settings)],
    probe: Annotated[RequestContextProbe, Depends(get_request_context_probe)],
    x_md_global_tenant_id: Annotated[str | None, Header()] = None,
    x_md_global_user_id: Annotated[str | None, Header()] = None,
    x_md_global_username: Annotated[str | None, Header()] = None,
    x_md_global_roles: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """FastAPI dependency resolving the caller from x-md-global-* headers."""
    return resolve_request_context(
        tenant_id_header=x_md_global_tenant_id,
        user_id_header=x_md_global_user_id,
        username_header=x_md_global_username,
        roles_header=x_md_global_roles,
        platform_admin_roles=settings.platform_admin_roles,
        probe=probe,
    )


def get_authorization_probe() -> AuthorizationProbe:
    """Get AuthorizationProbe instance."""
    return DefaultAuthorizationProbe()


def get_permission_service_probe() -> PermissionServiceProbe:
    """Get PermissionServiceProbe instance."""
    return DefaultPermissionServiceProbe()


def get_permission_store(
    session: Annotated[AsyncSession, Depends(get_write_session)],
) -> PermissionStore:
    """Get the PostgreSQL permission store bound to the request session."""
    return PostgresPermissionStore(session=session)


def get_permission_checker(
    store: Annotated[PermissionStore, Depends(get_permission_store)],
    probe: Annotated[AuthorizationProbe, Depends(get_authorization_probe)],
) -> PermissionChecker:
    """Get a PermissionChecker backed by the request's permission store."""
    return PermissionChecker(AuthorizationEngine(store=store, probe=probe))


def get_permission_service(
    session: Annotated[AsyncSession, Depends(get_write_session)],
    store: Annotated[PermissionStore, Depends(get_permission_store)],
    checker: Annotated[PermissionChecker, Depends(get_permission_checker)],
    probe: Annotated[PermissionServiceProbe, Depends(get_permission_service_probe)],
    settings: Annotated[AuthzSettings, Depends(get_authz_settings)],
) -> PermissionService:
    """Get PermissionService instance.

    The store, the checker and the service share one session through
    FastAPI dependency caching.
    """
    return PermissionService(
        session=session,
        store=store,
        checker=checker,
        probe=probe,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )


def get_read_permission_service(
    session: Annotated[AsyncSession, Depends(get_read_session)],
    authorization_probe: Annotated[
        AuthorizationProbe, Depends(get_authorization_probe)
    ],
    probe: Annotated[PermissionServiceProbe, Depends(get_permission_service_probe)],
    settings: Annotated[AuthzSettings, Depends(get_authz_settings)],
) -> PermissionService:
    """Get a PermissionService bound to the read session.

    Used by routes that only look up or list grants, so decision traffic runs
    on the read pool.
    """
    store = PostgresPermissionStore(session=session)
    return PermissionService(
        session=session,
        store=store,
        checker=PermissionChecker(
            AuthorizationEngine(store=store, probe=authorization_probe)
        ),
        probe=probe,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )
