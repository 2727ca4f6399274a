from app.models.user import User
from app.models.profile import UserProfile
from app.models.entries import BudgetRow, ExpenseRow, GoalRow, IncomeRow

__all__ = ["User", "UserProfile", "IncomeRow", "ExpenseRow", "BudgetRow", "GoalRow"]
