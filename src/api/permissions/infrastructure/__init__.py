"""Infrastructure layer for the permissions bounded context."""

from permissions.infrastructure.permission_store import PostgresPermissionStore

__all__ = [
    "PostgresPermissionStore",
]
