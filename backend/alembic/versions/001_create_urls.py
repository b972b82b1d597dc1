"""Create urls table.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the slug store table."""
    op.create_table(
        "urls",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("slug", sa.String(500), nullable=False),
        sa.Column("owner_type", sa.String(50), nullable=False, server_default="self"),
        sa.Column("owner_id", sa.String(64), nullable=True),
        sa.Column("type", sa.String(20), nullable=False, server_default="entity"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("redirect_to", sa.String(500), nullable=True),
        sa.Column("redirect_code", sa.Integer(), nullable=True),
        sa.Column("meta", sa.JSON(), nullable=True),
        sa.Column("visits", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_visited_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_modified_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("slug", name="uq_urls_slug"),
        sa.UniqueConstraint("owner_type", "owner_id", name="uq_urls_owner"),
        sa.CheckConstraint(
            "redirect_code IS NULL OR redirect_code IN (301, 302, 307, 308)",
            name="ck_urls_redirect_code",
        ),
        sa.CheckConstraint(
            "status IN ('active', 'redirect', 'inactive')",
            name="ck_urls_status",
        ),
        sa.CheckConstraint(
            "type IN ('entity', 'category', 'seller', 'menu', 'brand', 'page', 'blog', 'redirect')",
            name="ck_urls_type",
        ),
    )
    op.create_index("ix_urls_status_type", "urls", ["status", "type"])
    op.create_index("ix_urls_redirect_to", "urls", ["redirect_to"])


def downgrade() -> None:
    """Drop the slug store table."""
    op.drop_index("ix_urls_redirect_to", table_name="urls")
    op.drop_index("ix_urls_status_type", table_name="urls")
    op.drop_table("urls")
