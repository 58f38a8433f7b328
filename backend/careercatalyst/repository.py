from typing import List

from sqlalchemy.exc import IntegrityError
from sqlmodel import select, or_

from .db import get_session
from .exceptions import AuthenticationError, ConflictError
from .models import User, ScheduledInterview
from .security import hash_password, verify_password

CONFLICT_MESSAGE = "User already exists with this username or email"


def create_user(username: str, email: str, password: str, user_type: str | None = None) -> User:
    with get_session() as s:
        stmt = select(User).where(or_(User.username == username, User.email == email))
        if s.exec(stmt).first() is not None:
            raise ConflictError(CONFLICT_MESSAGE)

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            user_type=user_type,
        )
        s.add(user)
        try:
            s.commit()
        except IntegrityError:
            # someone else got the same username/email between the check and the insert
            s.rollback()
            raise ConflictError(CONFLICT_MESSAGE)
        s.refresh(user)
        return user


def authenticate_user(username: str, password: str) -> User:
    with get_session() as s:
        user = s.exec(select(User).where(User.username == username)).first()
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid username or password")
    return user


def get_user_by_id(user_id: str) -> User | None:
    with get_session() as s:
        return s.get(User, user_id)


def record_interview(
    username: str,
    email: str,
    interview_date: str,
    interview_time: str,
    interview_link: str,
    message_id: str,
) -> ScheduledInterview:
    with get_session() as s:
        obj = ScheduledInterview(
            username=username,
            email=email,
            interview_date=interview_date,
            interview_time=interview_time,
            interview_link=interview_link,
            message_id=message_id,
        )
        s.add(obj)
        s.commit()
        s.refresh(obj)
        return obj


def list_interviews(username: str | None = None, limit: int = 20) -> List[ScheduledInterview]:
    with get_session() as s:
        stmt = select(ScheduledInterview)
        if username:
            stmt = stmt.where(ScheduledInterview.username == username)
        stmt = stmt.order_by(ScheduledInterview.created_at.desc(), ScheduledInterview.id.desc()).limit(limit)
        return list(s.exec(stmt))
