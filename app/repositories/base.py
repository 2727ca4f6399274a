from abc import ABC, abstractmethod
from typing import List, Optional

from app.schemas.finance import BudgetAllocation, ExpenseEntry, Goal, IncomeEntry, Profile, UserContext
from app.schemas.user import UserRecord


class Repository(ABC):
    """
    Storage for users and their financial records. Every record other than
    the user itself is scoped to one user id.

    ``set_budget`` and ``set_goals`` replace the whole collection: either the
    new set is stored, or the old one is left untouched and an error is raised.
    """

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[UserRecord]: ...

    @abstractmethod
    def get_user_by_id(self, user_id: str) -> Optional[UserRecord]: ...

    @abstractmethod
    def create_user(self, user: UserRecord) -> None: ...

    @abstractmethod
    def upsert_profile(self, profile: Profile) -> None: ...

    @abstractmethod
    def get_profile(self, user_id: str) -> Optional[Profile]: ...

    @abstractmethod
    def add_income(self, entry: IncomeEntry) -> None: ...

    @abstractmethod
    def list_income(self, user_id: str, month: Optional[str] = None) -> List[IncomeEntry]: ...

    @abstractmethod
    def add_expense(self, entry: ExpenseEntry) -> None: ...

    @abstractmethod
    def list_expenses(self, user_id: str, month: Optional[str] = None) -> List[ExpenseEntry]: ...

    @abstractmethod
    def set_budget(self, user_id: str, allocations: List[BudgetAllocation]) -> None: ...

    @abstractmethod
    def get_budget(self, user_id: str) -> List[BudgetAllocation]: ...

    @abstractmethod
    def set_goals(self, user_id: str, goals: List[Goal]) -> None: ...

    @abstractmethod
    def get_goals(self, user_id: str) -> List[Goal]: ...

    def load_context(self, user_id: str) -> UserContext:
        return UserContext(
            profile=self.get_profile(user_id),
            income=self.list_income(user_id),
            expenses=self.list_expenses(user_id),
            budget=self.get_budget(user_id),
            goals=self.get_goals(user_id),
        )
