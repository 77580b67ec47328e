"""SQLAlchemy ORM models for the permissions bounded context."""

from permissions.infrastructure.models.permission import PermissionModel

__all__ = [
    "PermissionModel",
]
