"""Authorization primitives for tenant-scoped bookmark permissions.

This module provides the permission model, the decision engine and the
checker facade shared across bounded contexts.
"""

from shared_kernel.authorization.checker import PermissionChecker
from shared_kernel.authorization.engine import (
    AuthorizationEngine,
    CheckContext,
    CheckResult,
)
from shared_kernel.authorization.exceptions import (
    AuthorizationError,
    InvalidArgumentError,
    PermissionDeniedError,
    PermissionStoreError,
)
from shared_kernel.authorization.protocols import PermissionStore
from shared_kernel.authorization.types import (
    TENANT_WIDE_SUBJECT_ID,
    Permission,
    PermissionTuple,
    Relation,
    ResourceType,
    SubjectType,
    highest_relation,
)

__all__ = [
    "AuthorizationEngine",
    "AuthorizationError",
    "CheckContext",
    "CheckResult",
    "InvalidArgumentError",
    "Permission",
    "PermissionChecker",
    "PermissionDeniedError",
    "PermissionStore",
    "PermissionStoreError",
    "PermissionTuple",
    "Relation",
    "ResourceType",
    "SubjectType",
    "TENANT_WIDE_SUBJECT_ID",
    "highest_relation",
]
