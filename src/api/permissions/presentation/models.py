"""Pydantic models for permission API requests and responses.

Enumerations travel as their wire codes (small positive integers); 0 means
unset. Codes are decoded by the service so that malformed values are reported
as 400 rather than as validation errors.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from permissions.application.value_objects import (
    AccessDecision,
    EffectivePermissions,
    PermissionPage,
)
from shared_kernel.authorization.types import PermissionTuple


class GrantAccessRequest(BaseModel):
    """Request model for granting a relation on a resource."""

    resource_type: int = Field(..., description="Resource type code (1=bookmark)")
    resource_id: str = Field(..., description="Resource ID")
    relation: int = Field(
        ..., description="Relation code (1=owner, 2=editor, 3=viewer, 4=sharer)"
    )
    subject_type: int = Field(
        ..., description="Subject type code (1=user, 2=role, 3=tenant)"
    )
    subject_id: str = Field(..., description="Subject ID ('all' for tenant-wide)")
    expires_at: datetime | None = Field(
        default=None, description="Optional expiration instant"
    )


class RevokeAccessRequest(BaseModel):
    """Request model for revoking a subject's access to a resource."""

    resource_type: int = Field(..., description="Resource type code")
    resource_id: str = Field(..., description="Resource ID")
    subject_type: int = Field(..., description="Subject type code")
    subject_id: str = Field(..., description="Subject ID")
    relation: int | None = Field(
        default=None, description="Relation to revoke; all relations when omitted"
    )


class RevokeAccessResponse(BaseModel):
    """Response model for a revocation."""

    revoked: int = Field(..., description="Number of revoked grants")


class PermissionResponse(BaseModel):
    """Response model for a stored permission grant."""

    id: str = Field(..., description="Grant ID (ULID format)")
    tenant_id: int
    resource_type: int = Field(
        ..., description="Resource type code, 0 if unrecognized"
    )
    resource_id: str
    relation: int = Field(..., description="Relation code, 0 if unrecognized")
    subject_type: int = Field(
        ..., description="Subject type code, 0 if unrecognized"
    )
    subject_id: str
    granted_by: str | None = None
    expires_at: datetime | None = None
    created_at: datetime

    @classmethod
    def from_domain(cls, permission_tuple: PermissionTuple) -> PermissionResponse:
        """Convert a PermissionTuple to an API response."""
        relation = permission_tuple.resolved_relation
        resource_type = permission_tuple.resource_type
        subject_type = permission_tuple.subject_type
        return cls(
            id=permission_tuple.id,
            tenant_id=permission_tuple.tenant_id,
            resource_type=resource_type.to_proto() if resource_type else 0,
            resource_id=permission_tuple.resource_id,
            relation=relation.to_proto() if relation else 0,
            subject_type=subject_type.to_proto() if subject_type else 0,
            subject_id=permission_tuple.subject_id,
            granted_by=permission_tuple.granted_by,
            expires_at=permission_tuple.expires_at,
            created_at=permission_tuple.created_at,
        )


class ListPermissionsResponse(BaseModel):
    """Response model for a page of permission grants."""

    permissions: list[PermissionResponse]
    total: int
    page: int
    page_size: int

    @classmethod
    def from_domain(cls, page: PermissionPage) -> ListPermissionsResponse:
        """Convert a PermissionPage to an API response."""
        return cls(
            permissions=[PermissionResponse.from_domain(item) for item in page.items],
            total=page.total,
            page=page.page,
            page_size=page.page_size,
        )


class CheckAccessRequest(BaseModel):
    """Request model for checking a single permission."""

    resource_type: int = Field(..., description="Resource type code")
    permission: int = Field(
        ..., description="Permission code (1=read, 2=write, 3=delete, 4=share)"
    )
    user_id: str = Field(..., description="User whose access is checked")
    resource_id: str = Field(..., description="Resource ID")


class CheckAccessResponse(BaseModel):
    """Response model for a permission check."""

    allowed: bool
    reason: str

    @classmethod
    def from_domain(cls, decision: AccessDecision) -> CheckAccessResponse:
        return cls(allowed=decision.allowed, reason=decision.reason)


class ListAccessibleResourcesRequest(BaseModel):
    """Request model for listing resources a user can reach."""

    resource_type: int = Field(..., description="Resource type code")
    user_id: str = Field(..., description="User whose resources are listed")


class ListAccessibleResourcesResponse(BaseModel):
    """Response model for accessible resources."""

    resource_ids: list[str]
    total: int


class EffectivePermissionsRequest(BaseModel):
    """Request model for computing effective permissions."""

    user_id: str = Field(..., description="User whose permissions are computed")
    resource_id: str = Field(..., description="Bookmark ID")


class EffectivePermissionsResponse(BaseModel):
    """Response model for effective permissions."""

    permissions: list[int] = Field(..., description="Granted permission codes")
    highest_relation: int = Field(..., description="Highest relation code, 0 if none")

    @classmethod
    def from_domain(
        cls, effective: EffectivePermissions
    ) -> EffectivePermissionsResponse:
        highest = effective.highest_relation
        return cls(
            permissions=[permission.to_proto() for permission in effective.permissions],
            highest_relation=highest.to_proto() if highest else 0,
        )
