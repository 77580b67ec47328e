"""Authorization type definitions for bookmark permissions.

Defines the closed enumerations of the permission model (relations,
permissions, resource and subject types), their storage and wire encodings,
and the permission tuple value object read back from the permission store.

Every enumeration has two codecs:

* ``as_str`` / ``from_str``: the string stored in the ``bookmark_permissions``
  table (e.g. ``RELATION_OWNER``).
* ``to_proto`` / ``from_proto``: the small positive integer used on the wire.
  Zero means "unset" and, like any other unmapped value, decodes to None.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

# Subject id of the pseudo-subject that stands for every user in a tenant.
TENANT_WIDE_SUBJECT_ID = "all"


class _CodedEnum(Enum):
    """Enum whose members carry a storage string and a wire code."""

    def __init__(self, storage: str, code: int):
        self._storage = storage
        self._code = code

    def as_str(self) -> str:
        return self._storage

    def to_proto(self) -> int:
        return self._code

    @classmethod
    def from_str(cls, value: str | None):
        for member in cls:
            if member._storage == value:
                return member
        return None

    @classmethod
    def from_proto(cls, value: int | None):
        for member in cls:
            if member._code == value:
                return member
        return None

    def __str__(self) -> str:
        return self._storage


class ResourceType(_CodedEnum):
    """Kinds of resource that permissions can be granted on."""

    BOOKMARK = ("RESOURCE_TYPE_BOOKMARK", 1)


class SubjectType(_CodedEnum):
    """Kinds of subject a permission can be granted to.

    A TENANT subject with id ``"all"`` is a tenant-wide grant.
    """

    USER = ("SUBJECT_TYPE_USER", 1)
    ROLE = ("SUBJECT_TYPE_ROLE", 2)
    TENANT = ("SUBJECT_TYPE_TENANT", 3)


class Permission(_CodedEnum):
    """Atomic actions that can be authorized on a resource."""

    READ = ("PERMISSION_READ", 1)
    WRITE = ("PERMISSION_WRITE", 2)
    DELETE = ("PERMISSION_DELETE", 3)
    SHARE = ("PERMISSION_SHARE", 4)


class Relation(_CodedEnum):
    """Named relations a subject can hold on a resource.

    Each relation grants a fixed set of permissions (see ``granted_permissions``).
    The hierarchy level only ranks relations that are already granted; it is
    not a permission superset order. SHARER sits below EDITOR yet grants
    SHARE, which EDITOR does not.
    """

    OWNER = ("RELATION_OWNER", 1)
    EDITOR = ("RELATION_EDITOR", 2)
    VIEWER = ("RELATION_VIEWER", 3)
    SHARER = ("RELATION_SHARER", 4)

    @property
    def hierarchy_level(self) -> int:
        """Rank of the relation: OWNER 4, EDITOR 3, SHARER 2, VIEWER 1."""
        return _HIERARCHY_LEVELS[self]

    @property
    def granted_permissions(self) -> frozenset[Permission]:
        """Permissions this relation grants."""
        return _GRANTED_PERMISSIONS[self]

    def grants(self, permission: Permission) -> bool:
        """Check whether this relation grants the given permission.

        Args:
            permission: The permission under test

        Returns:
            True if the relation's permission set contains the permission
        """
        return permission in _GRANTED_PERMISSIONS[self]

    def is_at_least(self, other: Relation) -> bool:
        """Check whether this relation ranks at or above another."""
        return self.hierarchy_level >= other.hierarchy_level


_HIERARCHY_LEVELS: dict[Relation, int] = {
    Relation.OWNER: 4,
    Relation.EDITOR: 3,
    Relation.SHARER: 2,
    Relation.VIEWER: 1,
}

_GRANTED_PERMISSIONS: dict[Relation, frozenset[Permission]] = {
    Relation.OWNER: frozenset(
        {Permission.READ, Permission.WRITE, Permission.DELETE, Permission.SHARE}
    ),
    Relation.EDITOR: frozenset({Permission.READ, Permission.WRITE}),
    Relation.SHARER: frozenset({Permission.READ, Permission.SHARE}),
    Relation.VIEWER: frozenset({Permission.READ}),
}


def highest_relation(relations: Iterable[Relation]) -> Relation | None:
    """Return the highest-ranked relation, keeping the first one on ties.

    Args:
        relations: Relations to rank

    Returns:
        The top-ranked relation, or None if no relation was given

    Example:
        >>> highest_relation([Relation.VIEWER, Relation.EDITOR])
        <Relation.EDITOR: ...>
    """
    best: Relation | None = None
    for relation in relations:
        if best is None or relation.hierarchy_level > best.hierarchy_level:
            best = relation
    return best


@dataclass(frozen=True)
class PermissionTuple:
    """A single stored grant of a relation to a subject over a resource.

    ``relation`` keeps the raw stored string so that an unknown value decodes
    to "no grant" through ``resolved_relation`` instead of failing on read.
    Unrecognized stored resource and subject types decode to None.
    """

    id: str
    tenant_id: int
    resource_type: ResourceType | None
    resource_id: str
    relation: str
    subject_type: SubjectType | None
    subject_id: str
    granted_by: str | None
    expires_at: datetime | None
    created_at: datetime

    @property
    def resolved_relation(self) -> Relation | None:
        return Relation.from_str(self.relation)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the grant has passed its expiration instant."""
        if self.expires_at is None:
            return False
        return self.expires_at < (now or datetime.now(UTC))
