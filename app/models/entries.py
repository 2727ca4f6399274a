from sqlmodel import SQLModel, Field
from uuid import uuid4
import datetime as dt
from typing import Optional


def _new_id() -> str:
    return str(uuid4())


class IncomeRow(SQLModel, table=True):
    __tablename__ = "income_entries"
    id: str = Field(default_factory=_new_id, primary_key=True)
    user_id: str = Field(foreign_key="app_users.id", index=True)
    source: str
    amount: float
    frequency: str = Field(default="monthly")
    created_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)


class ExpenseRow(SQLModel, table=True):
    __tablename__ = "expense_entries"
    id: str = Field(default_factory=_new_id, primary_key=True)
    user_id: str = Field(foreign_key="app_users.id", index=True)
    category: str
    amount: float
    date: dt.date = Field(index=True)
    description: Optional[str] = None
    level: Optional[str] = None


class BudgetRow(SQLModel, table=True):
    __tablename__ = "budget_allocations"
    id: str = Field(default_factory=_new_id, primary_key=True)
    user_id: str = Field(foreign_key="app_users.id", index=True)
    category: str
    monthly_amount: float


class GoalRow(SQLModel, table=True):
    __tablename__ = "user_goals"
    id: str = Field(default_factory=_new_id, primary_key=True)
    user_id: str = Field(foreign_key="app_users.id", index=True)
    name: str
    target_amount: float
    target_date: dt.date
