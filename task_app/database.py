"""
Database engine and sessions for the Task Manager app.
"""

from collections.abc import Iterator

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from .config import Settings


def create_engine_from_settings(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine described by settings.

    SQLite connections are shared with FastAPI's worker threads, so the
    same-thread check is turned off for them.
    """
    connect_args = {}
    if settings.database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(settings.database_url, echo=settings.echo_sql, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    """Create the tasks table and its indexes if missing."""
    SQLModel.metadata.create_all(engine)


def get_session(request: Request) -> Iterator[Session]:
    """FastAPI dependency: one session per request, bound to the app's engine."""
    with Session(request.app.state.engine) as session:
        yield session
