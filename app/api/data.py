from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request

from app.core.security import require_user_id
from app.repositories import Repository, get_repository
from app.schemas.finance import (
    BudgetAllocation,
    BudgetIn,
    ExpenseEntry,
    ExpenseIn,
    Goal,
    GoalIn,
    IncomeEntry,
    IncomeIn,
    Profile,
    ProfileIn,
)
from app.services.sheets_mirror import SheetsMirror, replicate

router = APIRouter(prefix="/data", tags=["data"])


def get_mirror(request: Request) -> Optional[SheetsMirror]:
    return request.app.state.mirror


def _new_id() -> str:
    return str(uuid4())


@router.post("/profile")
def save_profile(
    body: ProfileIn,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(require_user_id),
    repo: Repository = Depends(get_repository),
    mirror: Optional[SheetsMirror] = Depends(get_mirror),
):
    profile = Profile(user_id=user_id, **body.model_dump())
    repo.upsert_profile(profile)
    background_tasks.add_task(replicate, mirror, "update_user_profile", user_id, profile)
    return {"ok": True}


@router.post("/income")
def add_income(
    items: List[IncomeIn],
    background_tasks: BackgroundTasks,
    user_id: str = Depends(require_user_id),
    repo: Repository = Depends(get_repository),
    mirror: Optional[SheetsMirror] = Depends(get_mirror),
):
    now = datetime.utcnow()
    entries = [IncomeEntry(id=_new_id(), user_id=user_id, created_at=now, **it.model_dump()) for it in items]
    for entry in entries:
        repo.add_income(entry)
    background_tasks.add_task(replicate, mirror, "add_income_entries", user_id, entries)
    return {"ok": True}


@router.get("/income", response_model=List[IncomeEntry])
def list_income(
    month: Optional[str] = Query(None, description="YYYY-MM"),
    user_id: str = Depends(require_user_id),
    repo: Repository = Depends(get_repository),
):
    return repo.list_income(user_id, month)


@router.post("/expense")
def add_expense(
    items: List[ExpenseIn],
    background_tasks: BackgroundTasks,
    user_id: str = Depends(require_user_id),
    repo: Repository = Depends(get_repository),
    mirror: Optional[SheetsMirror] = Depends(get_mirror),
):
    entries = [ExpenseEntry(id=_new_id(), user_id=user_id, **it.model_dump()) for it in items]
    for entry in entries:
        repo.add_expense(entry)
    background_tasks.add_task(replicate, mirror, "add_expense_entries", user_id, entries)
    return {"ok": True}


@router.get("/expenses", response_model=List[ExpenseEntry])
def list_expenses(
    month: Optional[str] = Query(None, description="YYYY-MM"),
    user_id: str = Depends(require_user_id),
    repo: Repository = Depends(get_repository),
):
    return repo.list_expenses(user_id, month)


@router.post("/budget")
def save_budget(
    items: List[BudgetIn],
    background_tasks: BackgroundTasks,
    user_id: str = Depends(require_user_id),
    repo: Repository = Depends(get_repository),
    mirror: Optional[SheetsMirror] = Depends(get_mirror),
):
    """Replaces the user's whole budget with ``items``."""
    allocations = [BudgetAllocation(id=_new_id(), user_id=user_id, **it.model_dump()) for it in items]
    repo.set_budget(user_id, allocations)
    background_tasks.add_task(replicate, mirror, "add_budget_entries", user_id, allocations)
    return {"ok": True}


@router.post("/goal")
def save_goals(
    items: List[GoalIn],
    background_tasks: BackgroundTasks,
    user_id: str = Depends(require_user_id),
    repo: Repository = Depends(get_repository),
    mirror: Optional[SheetsMirror] = Depends(get_mirror),
):
    """Replaces the user's whole goal list with ``items``."""
    goals = [Goal(id=_new_id(), user_id=user_id, **it.model_dump()) for it in items]
    repo.set_goals(user_id, goals)
    background_tasks.add_task(replicate, mirror, "add_goal_entries", user_id, goals)
    return {"ok": True}
