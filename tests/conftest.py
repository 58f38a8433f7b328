import os

# settings are read when the app module is imported, so this has to come first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_USER"] = ""
os.environ["EMAIL_PASS"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from careercatalyst import db, models  # noqa: F401
from careercatalyst.exceptions import DeliveryFailedError
from careercatalyst.main import app, get_clock, get_mailer

T = 1_700_000_000_000


class FixedClock:
    def __init__(self, now: int = T):
        self.now = now

    def __call__(self) -> int:
        return self.now


class FakeMailer:
    """Stands in for ConfirmationMailer, keeps every call."""

    def __init__(self):
        self.sent = []
        self.fail_with = None
        self.crash_with = None

    def send_confirmation(self, **kwargs) -> str:
        if self.crash_with:
            raise self.crash_with
        if self.fail_with:
            raise DeliveryFailedError(self.fail_with)
        self.sent.append(kwargs)
        return f"<msg-{len(self.sent)}@careercatalyst.test>"


@pytest.fixture
def engine(monkeypatch):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    monkeypatch.setattr(db, "engine", engine)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(engine, clock, mailer):
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
