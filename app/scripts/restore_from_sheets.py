"""
Rebuild one user's records from the spreadsheet mirror.

    python -m app.scripts.restore_from_sheets <user_id>

The spreadsheet is best-effort, so this is a recovery tool only: rows that do
not validate are skipped, and entries whose id is already stored are left alone.
"""
import argparse
import logging
from datetime import datetime
from typing import Callable, List, Optional, Type
from uuid import uuid4

from pydantic import BaseModel, ValidationError

from app.core.config import Settings
from app.core.logging import configure_logging
from app.repositories import Repository, build_repository
from app.schemas.finance import BudgetAllocation, ExpenseEntry, Goal, IncomeEntry, Profile
from app.services.sheets_mirror import build_mirror

logger = logging.getLogger(__name__)


def _parse(schema: Type[BaseModel], rows: List[dict], user_id: str, extra: Optional[Callable[[], dict]] = None) -> List:
    parsed = []
    for row in rows:
        data = {**row, "user_id": user_id, "id": row.get("id") or str(uuid4())}
        if extra:
            data.update(extra())
        try:
            parsed.append(schema.model_validate(data))
        except ValidationError as exc:
            logger.warning("Skipping invalid %s row for %s: %s", schema.__name__, user_id, exc.errors())
    return parsed


def restore_user(repo: Repository, mirror, user_id: str) -> bool:
    """Returns False when the spreadsheet holds no profile for ``user_id``."""
    snapshot = mirror.get_user_financial_data(user_id)
    if snapshot is None:
        return False

    try:
        repo.upsert_profile(Profile.model_validate({**snapshot["profile"], "user_id": user_id}))
    except ValidationError as exc:
        logger.warning("Skipping invalid profile for %s: %s", user_id, exc.errors())

    now = datetime.utcnow()
    known_income = {e.id for e in repo.list_income(user_id)}
    for entry in _parse(IncomeEntry, snapshot["income"], user_id, lambda: {"created_at": now}):
        if entry.id not in known_income:
            repo.add_income(entry)

    known_expenses = {e.id for e in repo.list_expenses(user_id)}
    for entry in _parse(ExpenseEntry, snapshot["expenses"], user_id):
        if entry.id not in known_expenses:
            repo.add_expense(entry)

    budget = _parse(BudgetAllocation, snapshot["budget"], user_id)
    if budget:
        repo.set_budget(user_id, budget)
    goals = _parse(Goal, snapshot["goals"], user_id)
    if goals:
        repo.set_goals(user_id, goals)
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("user_id")
    args = parser.parse_args(argv)

    configure_logging()
    settings = Settings.from_env()

    mirror = build_mirror(settings)
    if mirror is None:
        print("Google Sheets is not configured (GOOGLE_SHEETS_ID / GOOGLE_SERVICE_ACCOUNT_KEY)")
        return 1

    try:
        restored = restore_user(build_repository(settings), mirror, args.user_id)
    finally:
        mirror.close()
    if not restored:
        print(f"No spreadsheet data found for user {args.user_id}")
        return 1
    print(f"✅ Restored data for user {args.user_id}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
