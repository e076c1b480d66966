"""add monthly budgets

Revision ID: 202501081500
Revises: 202501061200
Create Date: 2025-01-08 15:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


revision = "202501081500"
down_revision = "202501061200"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "budgets",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("month", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount >= 0", name="ck_budgets_amount_nonnegative"),
    )
    op.create_index("ix_budgets_month_category", "budgets", ["month", "category"])


def downgrade():
    op.drop_index("ix_budgets_month_category", table_name="budgets")
    op.drop_table("budgets")
