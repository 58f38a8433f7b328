from pathlib import Path

from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.engine import make_url

from .config import get_settings


def build_engine(database_url: str):
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(database_url, echo=False)

    # by default the sqlite file lives in backend/data, so I make sure the folder exists
    if url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(
        database_url, echo=False, connect_args={"check_same_thread": False}
    )


engine = build_engine(get_settings().database_url)


def create_db_and_tables():
    # the table classes have to be registered before create_all runs
    from . import models  # noqa: F401
    SQLModel.metadata.create_all(engine)


def get_session() -> Session:
    return Session(engine)
