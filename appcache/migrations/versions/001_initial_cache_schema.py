"""Initial schema — records partition (cached_apps) and metadata partition (cache_metadata).

Revision ID: 001_initial_cache
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial_cache"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "cached_apps",
        sa.Column("cache_key", sa.String(1024), primary_key=True),
        sa.Column("tenant_user", sa.String(512), nullable=False),
        sa.Column("app_id", sa.String(255), nullable=False),
        sa.Column("name", sa.String(1024), nullable=False),
        sa.Column("data", sa.JSON, nullable=True),
        sa.Column("updated_at", sa.String(64), nullable=True),
        sa.Column("cached_at", sa.BigInteger, nullable=False),
        sa.Column("space_id", sa.String(255), nullable=True),
    )
    op.create_index("ix_cached_apps_tenant_user", "cached_apps", ["tenant_user"])
    op.create_index("ix_cached_apps_app_id", "cached_apps", ["app_id"])

    op.create_table(
        "cache_metadata",
        sa.Column("key", sa.String(512), primary_key=True),
        sa.Column("last_sync_at", sa.BigInteger, nullable=False),
        sa.Column("app_ids", sa.JSON, nullable=False),
    )


def downgrade() -> None:
    op.drop_table("cache_metadata")
    op.drop_index("ix_cached_apps_app_id", table_name="cached_apps")
    op.drop_index("ix_cached_apps_tenant_user", table_name="cached_apps")
    op.drop_table("cached_apps")
