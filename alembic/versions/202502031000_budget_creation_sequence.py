"""order budgets by an insertion sequence

Revision ID: 202502031000
Revises: 202501081500
Create Date: 2025-02-03 10:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


revision = "202502031000"
down_revision = "202501081500"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "budgets_new",
        sa.Column("seq", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("id", sa.String(length=36), nullable=False, unique=True),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("month", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount >= 0", name="ck_budgets_amount_nonnegative"),
    )
    # Existing rows get seq values in their previous listing order.
    op.execute(
        """
        INSERT INTO budgets_new (id, category, amount, month, created_at, updated_at)
        SELECT id, category, amount, month, created_at, updated_at
        FROM budgets
        ORDER BY created_at, id
        """
    )
    op.drop_index("ix_budgets_month_category", table_name="budgets")
    op.drop_table("budgets")
    op.rename_table("budgets_new", "budgets")
    op.create_index("ix_budgets_month_category", "budgets", ["month", "category"])


def downgrade():
    op.create_table(
        "budgets_old",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("month", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount >= 0", name="ck_budgets_amount_nonnegative"),
    )
    op.execute(
        """
        INSERT INTO budgets_old (id, category, amount, month, created_at, updated_at)
        SELECT id, category, amount, month, created_at, updated_at
        FROM budgets
        ORDER BY seq
        """
    )
    op.drop_index("ix_budgets_month_category", table_name="budgets")
    op.drop_table("budgets")
    op.rename_table("budgets_old", "budgets")
    op.create_index("ix_budgets_month_category", "budgets", ["month", "category"])
