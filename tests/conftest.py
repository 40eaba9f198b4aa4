# tests/conftest.py

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from task_app.config import Settings
from task_app.database import create_engine_from_settings, init_db
from task_app.main import create_app
from task_app.models import Task, to_utc


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a fresh SQLite file per test."""
    return Settings(database_url=f"sqlite:///{tmp_path / 'tasks.sqlite3'}")


@pytest.fixture()
def engine(settings: Settings):
    engine = create_engine_from_settings(settings)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine) -> Session:
    with Session(engine) as session:
        yield session


@pytest.fixture()
def client(settings: Settings, engine) -> TestClient:
    app = create_app(settings, engine=engine)
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def make_task(session: Session) -> Callable[..., str]:
    """
    Insert a row directly with controlled timestamps.

    Each call is one minute after the previous one unless created_at is
    given, so default ordering is predictable.
    """
    base = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    counter = {"n": 0}

    def _make(title: str, *, created_at: datetime | None = None, **fields) -> str:
        counter["n"] += 1
        ts = to_utc(created_at) if created_at else base + timedelta(minutes=counter["n"])
        if fields.get("due_date") is not None:
            fields["due_date"] = to_utc(fields["due_date"])
        task = Task(title=title, created_at=ts, updated_at=ts, **fields)
        session.add(task)
        session.commit()
        return task.id

    return _make
