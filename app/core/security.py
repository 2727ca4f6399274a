import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request, Response
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import Settings
from app.core.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def create_session_token(user_id: str, settings: Settings) -> str:
    expire = datetime.now(timezone.utc) + timedelta(days=settings.session_max_age_days)
    return jwt.encode({"sub": user_id, "exp": expire}, settings.secret_key, algorithm=settings.algorithm)


def decode_session_token(token: str, settings: Settings) -> Optional[str]:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    user_id = payload.get("sub")
    return user_id if isinstance(user_id, str) and user_id else None


def get_session_user_id(request: Request) -> Optional[str]:
    """
    Resolve the session cookie to a user id. No cookie, an expired cookie and
    a tampered cookie all resolve to ``None``.
    """
    settings = get_settings(request)
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    user_id = decode_session_token(token, settings)
    if user_id is None:
        logger.info("Ignoring invalid session cookie")
    return user_id


def require_user_id(user_id: Optional[str] = Depends(get_session_user_id)) -> str:
    if not user_id:
        raise UnauthorizedError()
    return user_id


def set_session_user_id(response: Response, user_id: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=create_session_token(user_id, settings),
        max_age=settings.session_max_age_days * 24 * 60 * 60,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )
    logger.info("Session set for user %s", user_id)


def clear_session(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )
