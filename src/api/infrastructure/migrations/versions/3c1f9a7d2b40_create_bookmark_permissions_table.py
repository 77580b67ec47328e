"""create bookmark_permissions table

Revision ID: 3c1f9a7d2b40
Revises:
Create Date: 2026-10-18 09:12:03.418552

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "3c1f9a7d2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "bookmark_permissions",
        sa.Column("id", sa.String(length=26), nullable=False),  # ULID
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("resource_type", sa.String(length=50), nullable=False),
        sa.Column("resource_id", sa.String(length=36), nullable=False),
        sa.Column("relation", sa.String(length=50), nullable=False),
        sa.Column("subject_type", sa.String(length=50), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("granted_by", sa.String(length=36), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "tenant_id",
            "resource_type",
            "resource_id",
            "relation",
            "subject_type",
            "subject_id",
            name="uq_bookmark_permissions_tuple",
        ),
    )
    op.create_index(
        "idx_perms_resource",
        "bookmark_permissions",
        ["tenant_id", "resource_type", "resource_id"],
        unique=False,
    )
    op.create_index(
        "idx_perms_subject",
        "bookmark_permissions",
        ["subject_type", "subject_id"],
        unique=False,
    )
    op.create_index(
        "idx_perms_tenant", "bookmark_permissions", ["tenant_id"], unique=False
    )
    op.create_index(
        "idx_perms_expires", "bookmark_permissions", ["expires_at"], unique=False
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_perms_expires", table_name="bookmark_permissions")
    op.drop_index("idx_perms_tenant", table_name="bookmark_permissions")
    op.drop_index("idx_perms_subject", table_name="bookmark_permissions")
    op.drop_index("idx_perms_resource", table_name="bookmark_permissions")
    op.drop_table("bookmark_permissions")
