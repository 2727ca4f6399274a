from sqlmodel import SQLModel, Field
from datetime import datetime
from typing import Optional

class UserProfile(SQLModel, table=True):
    __tablename__ = "user_profiles"
    # One profile per user: the user id is the primary key
    user_id: str = Field(foreign_key="app_users.id", primary_key=True)
    full_name: Optional[str] = None
    age: Optional[int] = None
    location: Optional[str] = None
    dependents: Optional[int] = None
    filing_status: Optional[str] = None
    credit_score: Optional[int] = None
    credit_band: Optional[str] = None
    credit_provider: Optional[str] = None
    credit_retrieved_at: Optional[datetime] = None
    credit_source: Optional[str] = None
