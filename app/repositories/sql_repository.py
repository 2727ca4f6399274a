import datetime as dt
import logging
from typing import List, Optional, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from app.core.exceptions import RepositoryError
from app.models import BudgetRow, ExpenseRow, GoalRow, IncomeRow, User, UserProfile
from app.repositories.base import Repository
from app.schemas.finance import BudgetAllocation, ExpenseEntry, Goal, IncomeEntry, Profile
from app.schemas.user import UserRecord
from app.utils.months import month_window

logger = logging.getLogger(__name__)


class SqlRepository(Repository):
    """Repository backed by the SQLModel tables in ``app.models``."""

    def __init__(self, engine):
        self.engine = engine

    # Users

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        with Session(self.engine) as session:
            user = self._run(lambda: session.exec(select(User).where(User.email == email)).first(), "fetch user")
            return UserRecord.model_validate(user) if user else None

    def get_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        with Session(self.engine) as session:
            user = self._run(lambda: session.get(User, user_id), "fetch user")
            return UserRecord.model_validate(user) if user else None

    def create_user(self, user: UserRecord) -> None:
        with Session(self.engine) as session:
            session.add(User(**user.model_dump()))
            self._commit(session, "create user")

    # Profile

    def upsert_profile(self, profile: Profile) -> None:
        with Session(self.engine) as session:
            row = self._run(lambda: session.get(UserProfile, profile.user_id), "fetch profile")
            data = profile.model_dump()
            if row is None:
                row = UserProfile(**data)
            else:
                for key, value in data.items():
                    setattr(row, key, value)
            session.add(row)
            self._commit(session, "upsert profile")

    def get_profile(self, user_id: str) -> Optional[Profile]:
        with Session(self.engine) as session:
            row = self._run(lambda: session.get(UserProfile, user_id), "fetch profile")
            return Profile.model_validate(row) if row else None

    # Income

    def add_income(self, entry: IncomeEntry) -> None:
        with Session(self.engine) as session:
            session.add(IncomeRow(**entry.model_dump()))
            self._commit(session, "add income")

    def list_income(self, user_id: str, month: Optional[str] = None) -> List[IncomeEntry]:
        query = select(IncomeRow).where(IncomeRow.user_id == user_id)
        if month:
            start, end = month_window(month)
            query = query.where(
                IncomeRow.created_at >= dt.datetime.combine(start, dt.time.min),
                IncomeRow.created_at < dt.datetime.combine(end, dt.time.min),
            )
        query = query.order_by(IncomeRow.created_at)
        return self._list(query, IncomeEntry, "list income")

    # Expenses

    def add_expense(self, entry: ExpenseEntry) -> None:
        with Session(self.engine) as session:
            session.add(ExpenseRow(**entry.model_dump()))
            self._commit(session, "add expense")

    def list_expenses(self, user_id: str, month: Optional[str] = None) -> List[ExpenseEntry]:
        query = select(ExpenseRow).where(ExpenseRow.user_id == user_id)
        if month:
            start, end = month_window(month)
            query = query.where(ExpenseRow.date >= start, ExpenseRow.date < end)
        query = query.order_by(ExpenseRow.date)
        return self._list(query, ExpenseEntry, "list expenses")

    # Budget / goals (full replace)

    def set_budget(self, user_id: str, allocations: List[BudgetAllocation]) -> None:
        rows = [BudgetRow(**{**a.model_dump(), "user_id": user_id}) for a in allocations]
        self._replace(BudgetRow, user_id, rows, "set budget")

    def get_budget(self, user_id: str) -> List[BudgetAllocation]:
        query = select(BudgetRow).where(BudgetRow.user_id == user_id)
        return self._list(query, BudgetAllocation, "fetch budget")

    def set_goals(self, user_id: str, goals: List[Goal]) -> None:
        rows = [GoalRow(**{**g.model_dump(), "user_id": user_id}) for g in goals]
        self._replace(GoalRow, user_id, rows, "set goals")

    def get_goals(self, user_id: str) -> List[Goal]:
        query = select(GoalRow).where(GoalRow.user_id == user_id).order_by(GoalRow.target_date)
        return self._list(query, Goal, "fetch goals")

    # Helpers

    def _replace(self, table: Type[SQLModel], user_id: str, rows: List[SQLModel], action: str) -> None:
        """Delete and insert in one transaction; a failure keeps the previous set."""
        with Session(self.engine) as session:
            try:
                for old in session.exec(select(table).where(table.user_id == user_id)).all():
                    session.delete(old)
                session.flush()
                session.add_all(rows)
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error("Failed to %s for user %s: %s", action, user_id, exc)
                raise RepositoryError(f"Failed to {action}") from exc

    def _list(self, query, schema, action: str):
        with Session(self.engine) as session:
            rows = self._run(lambda: session.exec(query).all(), action)
            return [schema.model_validate(row) for row in rows]

    def _commit(self, session: Session, action: str) -> None:
        try:
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Failed to %s: %s", action, exc)
            raise RepositoryError(f"Failed to {action}") from exc

    @staticmethod
    def _run(fn, action: str):
        try:
            return fn()
        except SQLAlchemyError as exc:
            logger.error("Failed to %s: %s", action, exc)
            raise RepositoryError(f"Failed to {action}") from exc
