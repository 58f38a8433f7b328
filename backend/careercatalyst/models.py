import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    username: str = Field(index=True, unique=True, nullable=False)
    email: str = Field(index=True, unique=True, nullable=False)
    password_hash: str = Field(nullable=False)
    user_type: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)


class ScheduledInterview(SQLModel, table=True):
    """One row per confirmation email that actually went out."""
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True)
    email: str
    interview_date: str
    interview_time: str
    interview_link: str
    message_id: str
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
