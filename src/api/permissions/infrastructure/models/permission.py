"""SQLAlchemy ORM model for the bookmark_permissions table.

Each row is one permission tuple: a relation granted to a subject (user, role
or the tenant-wide "all" subject) over a resource within a tenant.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, CreatedAtMixin


class PermissionModel(Base, CreatedAtMixin):
    """ORM model for bookmark_permissions table.

    Notes:
    - Enumerations are stored as their string codes (e.g. RELATION_OWNER)
    - resource_id and subject_id are VARCHAR(36)
    - granted_by holds the id of the user who made the grant
    - At most one row per (tenant, resource, relation, subject); re-grants
      update granted_by and expires_at in place
    """

    __tablename__ = "bookmark_permissions"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    resource_type: Mapped[str] = mapped_column(String(50), nullable=False)
    resource_id: Mapped[str] = mapped_column(String(36), nullable=False)
    relation: Mapped[str] = mapped_column(String(50), nullable=False)
    subject_type: Mapped[str] = mapped_column(String(50), nullable=False)
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False)
    granted_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint(
            "tenant_id",
            "resource_type",
            "resource_id",
            "relation",
            "subject_type",
            "subject_id",
            name="uq_bookmark_permissions_tuple",
        ),
        Index("idx_perms_resource", "tenant_id", "resource_type", "resource_id"),
        Index("idx_perms_subject", "subject_type", "subject_id"),
        Index("idx_perms_tenant", "tenant_id"),
        Index("idx_perms_expires", "expires_at"),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<PermissionModel(id={self.id}, tenant_id={self.tenant_id}, "
            f"resource_id={self.resource_id}, relation={self.relation}, "
            f"subject={self.subject_type}:{self.subject_id})>"
        )
