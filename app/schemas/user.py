from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from app.schemas.base import CamelModel


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: Optional[str] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserRecord(CamelModel):
    id: str
    email: str
    password_hash: str
    name: Optional[str] = None
    created_at: datetime


class UserRead(CamelModel):
    id: str
    email: Optional[str] = None
    name: str
