"""initial schema

Revision ID: 5f1c2a9d3e7b
Revises:
Create Date: 2025-09-02 10:12:44.218530

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5f1c2a9d3e7b'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "app_users",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_app_users_email", "app_users", ["email"], unique=True)

    op.create_table(
        "user_profiles",
        sa.Column("user_id", sa.String(), sa.ForeignKey("app_users.id"), primary_key=True),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("dependents", sa.Integer(), nullable=True),
        sa.Column("filing_status", sa.String(), nullable=True),
        sa.Column("credit_score", sa.Integer(), nullable=True),
        sa.Column("credit_band", sa.String(), nullable=True),
        sa.Column("credit_provider", sa.String(), nullable=True),
        sa.Column("credit_retrieved_at", sa.DateTime(), nullable=True),
        sa.Column("credit_source", sa.String(), nullable=True),
    )

    op.create_table(
        "income_entries",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("app_users.id"), nullable=False),
        sa.Column("source", sa.String(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("frequency", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_income_entries_user_id", "income_entries", ["user_id"])

    op.create_table(
        "expense_entries",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("app_users.id"), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("level", sa.String(), nullable=True),
    )
    op.create_index("ix_expense_entries_user_id", "expense_entries", ["user_id"])
    op.create_index("ix_expense_entries_date", "expense_entries", ["date"])

    op.create_table(
        "budget_allocations",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("app_users.id"), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("monthly_amount", sa.Float(), nullable=False),
    )
    op.create_index("ix_budget_allocations_user_id", "budget_allocations", ["user_id"])

    op.create_table(
        "user_goals",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("app_users.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("target_amount", sa.Float(), nullable=False),
        sa.Column("target_date", sa.Date(), nullable=False),
    )
    op.create_index("ix_user_goals_user_id", "user_goals", ["user_id"])

def downgrade():
    op.drop_index("ix_user_goals_user_id", table_name="user_goals")
    op.drop_table("user_goals")
    op.drop_index("ix_budget_allocations_user_id", table_name="budget_allocations")
    op.drop_table("budget_allocations")
    op.drop_index("ix_expense_entries_date", table_name="expense_entries")
    op.drop_index("ix_expense_entries_user_id", table_name="expense_entries")
    op.drop_table("expense_entries")
    op.drop_index("ix_income_entries_user_id", table_name="income_entries")
    op.drop_table("income_entries")
    op.drop_table("user_profiles")
    op.drop_index("ix_app_users_email", table_name="app_users")
    op.drop_table("app_users")
