"""create users, profiles and refresh sessions

Revision ID: 4c1e7b9a2d10
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4c1e7b9a2d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("is_active", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.String(length=26), nullable=True),
        sa.Column("updated_at", sa.String(length=26), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_users_email"), ["email"], unique=True)

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("monthly_salary", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False),
        sa.Column("monthly_savings_percentage", sa.Float(), nullable=False),
        sa.Column("created_at", sa.String(length=26), nullable=True),
        sa.Column("updated_at", sa.String(length=26), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("profiles", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_profiles_user_id"), ["user_id"], unique=True)

    op.create_table(
        "refresh_sessions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("refresh_secret", sa.String(length=128), nullable=False),
        sa.Column("created_at", sa.String(length=26), nullable=False),
        sa.Column("expires_at", sa.String(length=26), nullable=False),
        sa.Column("is_revoked", sa.Integer(), nullable=False),
        sa.Column("revoked_at", sa.String(length=26), nullable=True),
        sa.Column("replaced_by_token", sa.String(length=128), nullable=True),
        sa.Column("device_id", sa.String(length=255), nullable=False),
        sa.Column("device_name", sa.String(length=255), nullable=False),
        sa.Column("platform", sa.String(length=10), nullable=False),
        sa.Column("app_version", sa.String(length=50), nullable=True),
        sa.Column("os_version", sa.String(length=50), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.String(length=255), nullable=True),
        sa.Column("last_used_at", sa.String(length=26), nullable=True),
        sa.Column("usage_count", sa.Integer(), nullable=False),
        sa.Column("suspicious_activity", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("refresh_sessions", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_refresh_sessions_user_id"), ["user_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_refresh_sessions_refresh_secret"), ["refresh_secret"], unique=True)
        batch_op.create_index(batch_op.f("ix_refresh_sessions_replaced_by_token"), ["replaced_by_token"], unique=False)
        batch_op.create_index("ix_refresh_sessions_user_active", ["user_id", "is_revoked", "expires_at"], unique=False)
        batch_op.create_index("ix_refresh_sessions_user_device", ["user_id", "device_id"], unique=False)
        batch_op.create_index("ix_refresh_sessions_expires_at", ["expires_at"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table("refresh_sessions", schema=None) as batch_op:
        batch_op.drop_index("ix_refresh_sessions_expires_at")
        batch_op.drop_index("ix_refresh_sessions_user_device")
        batch_op.drop_index("ix_refresh_sessions_user_active")
        batch_op.drop_index(batch_op.f("ix_refresh_sessions_replaced_by_token"))
        batch_op.drop_index(batch_op.f("ix_refresh_sessions_refresh_secret"))
        batch_op.drop_index(batch_op.f("ix_refresh_sessions_user_id"))
    op.drop_table("refresh_sessions")

    with op.batch_alter_table("profiles", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_profiles_user_id"))
    op.drop_table("profiles")

    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_users_email"))
    op.drop_table("users")
