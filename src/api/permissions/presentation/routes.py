"""HTTP routes for bookmark permission management."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from permissions.application.services import PermissionService
from permissions.dependencies import (
    get_permission_service,
    get_read_permission_service,
    get_request_context,
)
from permissions.presentation.models import (
    CheckAccessRequest,
    CheckAccessResponse,
    EffectivePermissionsRequest,
    EffectivePermissionsResponse,
    GrantAccessRequest,
    ListAccessibleResourcesRequest,
    ListAccessibleResourcesResponse,
    ListPermissionsResponse,
    PermissionResponse,
    RevokeAccessRequest,
    RevokeAccessResponse,
)
from shared_kernel.authorization.exceptions import (
    InvalidArgumentError,
    PermissionDeniedError,
    PermissionStoreError,
)
from shared_kernel.middleware.request_context import RequestContext

router = APIRouter(
    prefix="/v1/permissions",
    tags=["permissions"],
)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Grant access",
    responses={
        201: {"description": "Access granted"},
        400: {"description": "Malformed code or identifier"},
        401: {"description": "Missing tenant or user"},
        403: {"description": "Caller cannot share the resource"},
        500: {"description": "Internal server error"},
    },
)
async def grant_access(
    request: GrantAccessRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[PermissionService, Depends(get_permission_service)],
) -> PermissionResponse:
    """Grant a relation on a resource to a user, role or the whole tenant.

    The caller must hold Share on the resource. Re-granting updates the
    granter and expiry of the existing grant.

    Raises:
        HTTPException: 400 if a code or identifier is malformed
        HTTPException: 403 if the caller cannot share the resource
        HTTPException: 500 for store failures
    """
    try:
        permission_tuple = await service.grant_access(
            ctx,
            resource_type=request.resource_type,
            resource_id=request.resource_id,
            relation=request.relation,
            subject_type=request.subject_type,
            subject_id=request.subject_id,
            expires_at=request.expires_at,
        )
        return PermissionResponse.from_domain(permission_tuple)

    except InvalidArgumentError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except PermissionDeniedError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e),
        )
    except PermissionStoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to grant access",
        )


@router.delete("", summary="Revoke access")
async def revoke_access(
    request: RevokeAccessRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[PermissionService, Depends(get_permission_service)],
) -> RevokeAccessResponse:
    """Revoke a subject's access to a resource.

    Revokes a single relation when one is given, otherwise every relation
    the subject holds on the resource. The caller must hold Share.

    Raises:
        HTTPException: 400 if a code or identifier is malformed
        HTTPException: 403 if the caller cannot share the resource
        HTTPException: 500 for store failures
    """
    try:
        revoked = await service.revoke_access(
            ctx,
            resource_type=request.resource_type,
            resource_id=request.resource_id,
            subject_type=request.subject_type,
            subject_id=request.subject_id,
            relation=request.relation,
        )
        return RevokeAccessResponse(revoked=revoked)

    except InvalidArgumentError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except PermissionDeniedError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e),
        )
    except PermissionStoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to revoke access",
        )


@router.get("", summary="List permissions")
async def list_permissions(
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[PermissionService, Depends(get_read_permission_service)],
    resource_type: Annotated[int | None, Query()] = None,
    resource_id: Annotated[str | None, Query()] = None,
    subject_type: Annotated[int | None, Query()] = None,
    subject_id: Annotated[str | None, Query()] = None,
    page: Annotated[int | None, Query()] = None,
    page_size: Annotated[int | None, Query()] = None,
) -> ListPermissionsResponse:
    """List the grants of the caller's tenant, newest first."""
    try:
        permission_page = await service.list_permissions(
            ctx,
            resource_type=resource_type,
            resource_id=resource_id,
            subject_type=subject_type,
            subject_id=subject_id,
            page=page,
            page_size=page_size,
        )
        return ListPermissionsResponse.from_domain(permission_page)

    except PermissionStoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list permissions",
        )


@router.post("/check", summary="Check access")
async def check_access(
    request: CheckAccessRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[PermissionService, Depends(get_read_permission_service)],
) -> CheckAccessResponse:
    """Check whether a user holds a permission, using the caller's roles.

    A denial is a normal response (allowed=false), not an error.
    """
    try:
        decision = await service.check_access(
            ctx,
            resource_type=request.resource_type,
            permission=request.permission,
            user_id=request.user_id,
            resource_id=request.resource_id,
        )
        return CheckAccessResponse.from_domain(decision)

    except InvalidArgumentError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.post("/accessible", summary="List accessible resources")
async def list_accessible_resources(
    request: ListAccessibleResourcesRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[PermissionService, Depends(get_read_permission_service)],
) -> ListAccessibleResourcesResponse:
    """List resources a user reaches through any grant."""
    try:
        resource_ids = await service.list_accessible_resources(
            ctx,
            resource_type=request.resource_type,
            user_id=request.user_id,
        )
        return ListAccessibleResourcesResponse(
            resource_ids=resource_ids,
            total=len(resource_ids),
        )

    except InvalidArgumentError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except PermissionStoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list accessible resources",
        )


@router.post("/effective", summary="Get effective permissions")
async def get_effective_permissions(
    request: EffectivePermissionsRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[PermissionService, Depends(get_read_permission_service)],
) -> EffectivePermissionsResponse:
    """Compute a user's effective permissions on a bookmark.

    Raises:
        HTTPException: 400 if an identifier is malformed
    """
    try:
        effective = await service.get_effective_permissions(
            ctx,
            user_id=request.user_id,
            resource_id=request.resource_id,
        )
        return EffectivePermissionsResponse.from_domain(effective)

    except InvalidArgumentError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
