"""Domain-Oriented Observability for the permissions application layer."""

from permissions.application.observability.permission_service_probe import (
    DefaultPermissionServiceProbe,
    PermissionServiceProbe,
)

__all__ = [
    "DefaultPermissionServiceProbe",
    "PermissionServiceProbe",
]
