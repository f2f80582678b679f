"""Create users and authorities tables for form login.

Revision ID: 20250301000000
Revises:
Create Date: 2025-03-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20250301000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("password", sa.String(length=500), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("username"),
    )
    op.create_table(
        "authorities",
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("authority", sa.String(length=50), nullable=False),
        sa.ForeignKeyConstraint(
            ["username"], ["users.username"], name="fk_authorities_users"
        ),
    )
    op.create_index(
        "ix_auth_username",
        "authorities",
        ["username", "authority"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("ix_auth_username", table_name="authorities")
    op.drop_table("authorities")
    op.drop_table("users")
