"""create products and savings logs

Revision ID: 9b3f6d2e8a41
Revises: 4c1e7b9a2d10
Create Date: 2026-10-20 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "9b3f6d2e8a41"
down_revision: Union[str, Sequence[str], None] = "4c1e7b9a2d10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "products",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("monthly_savings", sa.Float(), nullable=False),
        sa.Column("is_wishlisted", sa.Integer(), nullable=False),
        sa.Column("saved_amount", sa.Float(), nullable=False),
        sa.Column("created_at", sa.String(length=26), nullable=True),
        sa.Column("updated_at", sa.String(length=26), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("products", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_products_user_id"), ["user_id"], unique=False)
        batch_op.create_index("ix_products_user_created", ["user_id", "created_at"], unique=False)

    op.create_table(
        "savings_logs",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("product_id", sa.String(length=36), nullable=True),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("type", sa.String(length=10), nullable=False),
        sa.Column("note", sa.String(length=500), nullable=True),
        sa.Column("date", sa.String(length=26), nullable=False),
        sa.Column("created_at", sa.String(length=26), nullable=True),
        sa.Column("updated_at", sa.String(length=26), nullable=True),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("savings_logs", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_savings_logs_user_id"), ["user_id"], unique=False)
        batch_op.create_index("ix_savings_logs_user_date", ["user_id", "date"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table("savings_logs", schema=None) as batch_op:
        batch_op.drop_index("ix_savings_logs_user_date")
        batch_op.drop_index(batch_op.f("ix_savings_logs_user_id"))
    op.drop_table("savings_logs")

    with op.batch_alter_table("products", schema=None) as batch_op:
        batch_op.drop_index("ix_products_user_created")
        batch_op.drop_index(batch_op.f("ix_products_user_id"))
    op.drop_table("products")
