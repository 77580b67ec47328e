"""Application services for the permissions bounded context."""

from permissions.application.services.permission_service import PermissionService

__all__ = [
    "PermissionService",
]
