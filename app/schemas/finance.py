from datetime import date as dt_date, datetime
from typing import List, Optional

from pydantic import Field

from app.schemas.base import CamelModel


class ProfileIn(CamelModel):
    full_name: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = None
    dependents: Optional[int] = Field(default=None, ge=0)
    filing_status: Optional[str] = None
    credit_score: Optional[int] = Field(default=None, ge=0)
    credit_band: Optional[str] = None
    credit_provider: Optional[str] = None
    credit_retrieved_at: Optional[datetime] = None
    credit_source: Optional[str] = None


class Profile(ProfileIn):
    user_id: str


class IncomeIn(CamelModel):
    source: str
    amount: float = Field(gt=0)
    frequency: str = "monthly"


class IncomeEntry(IncomeIn):
    id: str
    user_id: str
    created_at: datetime


class ExpenseIn(CamelModel):
    category: str
    amount: float = Field(ge=0)
    date: dt_date
    description: Optional[str] = None
    level: Optional[str] = None


class ExpenseEntry(ExpenseIn):
    id: str
    user_id: str


class BudgetIn(CamelModel):
    category: str
    monthly_amount: float = Field(ge=0)


class BudgetAllocation(BudgetIn):
    id: str
    user_id: str


class GoalIn(CamelModel):
    name: str
    target_amount: float = Field(gt=0)
    target_date: dt_date


class Goal(GoalIn):
    id: str
    user_id: str


class UserContext(CamelModel):
    """Everything the prompt builder knows about one user."""

    profile: Optional[Profile] = None
    income: List[IncomeEntry] = []
    expenses: List[ExpenseEntry] = []
    budget: List[BudgetAllocation] = []
    goals: List[Goal] = []
