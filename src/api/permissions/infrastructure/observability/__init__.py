"""Domain-Oriented Observability for permissions infrastructure."""

from permissions.infrastructure.observability.permission_store_probe import (
    DefaultPermissionStoreProbe,
    PermissionStoreProbe,
)

__all__ = [
    "DefaultPermissionStoreProbe",
    "PermissionStoreProbe",
]
