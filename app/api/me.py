import logging
from typing import Optional

from fastapi import APIRouter, Depends

from app.core.security import get_session_user_id
from app.repositories import Repository, get_repository
from app.schemas.user import UserRead

logger = logging.getLogger(__name__)

router = APIRouter(tags=["me"])
debug_router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("/me")
def read_me(
    user_id: Optional[str] = Depends(get_session_user_id),
    repo: Repository = Depends(get_repository),
):
    """
    Current user with profile, budget, goals and income. No session is not an
    error: the response is ``{"user": null}`` with status 200.
    """
    if not user_id:
        return {"user": None}

    user = repo.get_user_by_id(user_id)
    profile = repo.get_profile(user_id)
    budget = repo.get_budget(user_id)
    goals = repo.get_goals(user_id)
    income = repo.list_income(user_id)

    name = (
        (profile.full_name if profile else None)
        or (user.name if user else None)
        or (user.email.split("@")[0] if user else None)
        or "User"
    )
    return {
        "user": UserRead(id=user_id, name=name, email=user.email if user else None),
        "profile": profile,
        "budget": budget,
        "goals": goals,
        "income": income,
    }


@debug_router.get("/session")
def debug_session(
    user_id: Optional[str] = Depends(get_session_user_id),
    repo: Repository = Depends(get_repository),
):
    if not user_id:
        return {"error": "No session found", "userId": None, "authenticated": False}

    user = repo.get_user_by_id(user_id)
    profile = repo.get_profile(user_id)
    income = repo.list_income(user_id)
    expenses = repo.list_expenses(user_id)
    budget = repo.get_budget(user_id)
    goals = repo.get_goals(user_id)
    logger.info(
        "Debug session for %s: profile=%s income=%d expenses=%d budget=%d goals=%d",
        user_id, profile is not None, len(income), len(expenses), len(budget), len(goals),
    )

    return {
        "authenticated": True,
        "userId": user_id,
        "repositoryType": type(repo).__name__,
        "data": {
            "user": UserRead(id=user.id, email=user.email, name=user.name or "") if user else None,
            "profile": profile,
            "incomeEntries": len(income),
            "expenseEntries": len(expenses),
            "budgetCategories": len(budget),
            "goals": len(goals),
            "sampleIncome": income[:2],
            "sampleExpenses": expenses[:2],
        },
    }
