import copy
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import List, Optional, Union

from app.core.exceptions import RepositoryError
from app.repositories.base import Repository
from app.schemas.finance import BudgetAllocation, ExpenseEntry, Goal, IncomeEntry, Profile
from app.schemas.user import UserRecord
from app.utils.months import in_window, month_window

logger = logging.getLogger(__name__)

_SECTIONS = ("users", "profiles", "income", "expenses", "budgets", "goals")


class JsonRepository(Repository):
    """
    Dict-backed repository in the layout of the legacy ``data.json`` file:

        {"users": {id: user}, "profiles": {user_id: profile},
         "income": {user_id: [...]}, "expenses": {...}, "budgets": {...}, "goals": {...}}

    With a ``path`` every write is persisted by writing a temp file and
    renaming it over the original; without one the data lives in memory.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self._lock = threading.Lock()
        self._data = self._load()

    def _load(self) -> dict:
        data = {}
        if self.path and self.path.exists():
            with self.path.open(encoding="utf-8") as fh:
                data = json.load(fh)
        for section in _SECTIONS:
            data.setdefault(section, {})
        return data

    def _commit(self, data: dict) -> None:
        if self.path:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            try:
                fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh, indent=2)
                os.replace(tmp, self.path)
            except OSError as exc:
                logger.error("Failed to write %s: %s", self.path, exc)
                raise RepositoryError("Failed to write data file") from exc
        self._data = data

    def _write(self, mutate) -> None:
        with self._lock:
            data = copy.deepcopy(self._data)
            mutate(data)
            self._commit(data)

    # Users

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        for user in self._data["users"].values():
            if user.get("email") == email:
                return UserRecord.model_validate(user)
        return None

    def get_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        user = self._data["users"].get(user_id)
        return UserRecord.model_validate(user) if user else None

    def create_user(self, user: UserRecord) -> None:
        if self.get_user_by_email(user.email):
            raise RepositoryError("Failed to create user", details="Email already registered")

        def mutate(data):
            data["users"][user.id] = user.model_dump(mode="json")

        self._write(mutate)

    # Profile

    def upsert_profile(self, profile: Profile) -> None:
        def mutate(data):
            data["profiles"][profile.user_id] = profile.model_dump(mode="json")

        self._write(mutate)

    def get_profile(self, user_id: str) -> Optional[Profile]:
        profile = self._data["profiles"].get(user_id)
        return Profile.model_validate(profile) if profile else None

    # Income

    def add_income(self, entry: IncomeEntry) -> None:
        self._append("income", entry.user_id, entry.model_dump(mode="json"))

    def list_income(self, user_id: str, month: Optional[str] = None) -> List[IncomeEntry]:
        entries = [IncomeEntry.model_validate(e) for e in self._data["income"].get(user_id, [])]
        if month:
            window = month_window(month)
            entries = [e for e in entries if in_window(e.created_at.date(), window)]
        return sorted(entries, key=lambda e: e.created_at)

    # Expenses

    def add_expense(self, entry: ExpenseEntry) -> None:
        self._append("expenses", entry.user_id, entry.model_dump(mode="json"))

    def list_expenses(self, user_id: str, month: Optional[str] = None) -> List[ExpenseEntry]:
        entries = [ExpenseEntry.model_validate(e) for e in self._data["expenses"].get(user_id, [])]
        if month:
            window = month_window(month)
            entries = [e for e in entries if in_window(e.date, window)]
        return sorted(entries, key=lambda e: e.date)

    # Budget / goals (full replace)

    def set_budget(self, user_id: str, allocations: List[BudgetAllocation]) -> None:
        rows = [{**a.model_dump(mode="json"), "user_id": user_id} for a in allocations]
        self._replace("budgets", user_id, rows)

    def get_budget(self, user_id: str) -> List[BudgetAllocation]:
        return [BudgetAllocation.model_validate(b) for b in self._data["budgets"].get(user_id, [])]

    def set_goals(self, user_id: str, goals: List[Goal]) -> None:
        rows = [{**g.model_dump(mode="json"), "user_id": user_id} for g in goals]
        self._replace("goals", user_id, rows)

    def get_goals(self, user_id: str) -> List[Goal]:
        goals = [Goal.model_validate(g) for g in self._data["goals"].get(user_id, [])]
        return sorted(goals, key=lambda g: g.target_date)

    # Helpers

    def _append(self, section: str, user_id: str, row: dict) -> None:
        def mutate(data):
            data[section].setdefault(user_id, []).append(row)

        self._write(mutate)

    def _replace(self, section: str, user_id: str, rows: List[dict]) -> None:
        def mutate(data):
            data[section][user_id] = rows

        self._write(mutate)

    def dump(self) -> dict:
        """Deep copy of the raw store, used by the export script."""
        return copy.deepcopy(self._data)
