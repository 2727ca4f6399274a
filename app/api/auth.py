import logging
from datetime import datetime
from uuid import uuid4

from fastapi import APIRouter, Depends, Response

from app.core.config import Settings
from app.core.exceptions import InvalidRequestError, UnauthorizedError
from app.core.security import (
    clear_session,
    get_password_hash,
    get_settings,
    set_session_user_id,
    verify_password,
)
from app.repositories import Repository, get_repository
from app.schemas.user import UserCreate, UserLogin, UserRead, UserRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _public(user: UserRecord) -> dict:
    name = user.name or user.email.split("@")[0]
    return UserRead(id=user.id, email=user.email, name=name).model_dump(by_alias=True)


# Registration
@router.post("/register")
def register(
    user_create: UserCreate,
    response: Response,
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    email = user_create.email.lower()
    if repo.get_user_by_email(email):
        raise InvalidRequestError("Email already registered")

    user = UserRecord(
        id=str(uuid4()),
        email=email,
        password_hash=get_password_hash(user_create.password),
        name=user_create.name,
        created_at=datetime.utcnow(),
    )
    repo.create_user(user)
    logger.info("Registered user %s", user.id)

    set_session_user_id(response, user.id, settings)
    return {"ok": True, "user": _public(user)}


# Login
@router.post("/login")
def login(
    credentials: UserLogin,
    response: Response,
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    user = repo.get_user_by_email(credentials.email.lower())
    if not user or not verify_password(credentials.password, user.password_hash):
        raise UnauthorizedError("Invalid credentials")

    set_session_user_id(response, user.id, settings)
    return {"ok": True, "user": _public(user)}


@router.post("/logout")
def logout(response: Response, settings: Settings = Depends(get_settings)):
    clear_session(response, settings)
    return {"ok": True}
