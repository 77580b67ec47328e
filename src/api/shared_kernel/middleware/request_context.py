"""Request context value object for the authenticated caller.

This module contains the pure value object carrying the caller identity
propagated by upstream services in request metadata. It is
framework-agnostic and safe for the shared kernel.

Extraction from headers lives in the permissions bounded context's
dependency layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RequestContext:
    """Identity of the caller for the current request.

    The caller has already been authenticated upstream; role_ids are trusted
    as given.

    Attributes:
        tenant_id: Tenant the request is scoped to. 0 only for platform admins.
        user_id: The acting user's identifier.
        username: The acting user's name, if propagated.
        role_ids: Roles the acting user belongs to, in header order.
    """

    tenant_id: int
    user_id: str
    username: str | None = None
    role_ids: tuple[str, ...] = field(default_factory=tuple)
