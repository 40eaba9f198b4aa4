# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from task_app.config import DEFAULT_DATABASE_URL, load_settings

ENV_VARS = [
    "TASKS_DATABASE_URL",
    "TASKS_ECHO_SQL",
    "TASKS_LOG_LEVEL",
    "TASKS_LOG_DIR",
    "TASKS_HOST",
    "TASKS_PORT",
    "DATABASE_HOST",
    "DATABASE_PORT",
    "DATABASE_USER",
    "DATABASE_PASSWORD",
    "DATABASE_NAME",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    s = load_settings(use_dotenv=False)

    assert s.database_url == DEFAULT_DATABASE_URL
    assert s.echo_sql is False
    assert s.log_level == "INFO"
    assert s.log_dir is None
    assert s.host == "127.0.0.1"
    assert s.port == 8000


def test_explicit_values(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKS_DATABASE_URL", "sqlite:///custom.db")
    monkeypatch.setenv("TASKS_ECHO_SQL", "yes")
    monkeypatch.setenv("TASKS_LOG_LEVEL", "debug")
    monkeypatch.setenv("TASKS_LOG_DIR", str(tmp_path))
    monkeypatch.setenv("TASKS_HOST", "0.0.0.0")
    monkeypatch.setenv("TASKS_PORT", "9001")

    s = load_settings(use_dotenv=False)

    assert s.database_url == "sqlite:///custom.db"
    assert s.echo_sql is True
    assert s.log_level == "DEBUG"
    assert s.log_dir == tmp_path
    assert s.host == "0.0.0.0"
    assert s.port == 9001


def test_bad_port_falls_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKS_PORT", "eighty")
    assert load_settings(use_dotenv=False).port == 8000


def test_postgres_url_from_database_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_HOST", "db")
    monkeypatch.setenv("DATABASE_PORT", "6543")
    monkeypatch.setenv("DATABASE_USER", "app")
    monkeypatch.setenv("DATABASE_PASSWORD", "secret")
    monkeypatch.setenv("DATABASE_NAME", "tasks")

    s = load_settings(use_dotenv=False)

    assert s.database_url == "postgresql+psycopg://app:secret@db:6543/tasks"


def test_database_url_wins_over_database_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_HOST", "db")
    monkeypatch.setenv("TASKS_DATABASE_URL", "sqlite:///x.db")
    assert load_settings(use_dotenv=False).database_url == "sqlite:///x.db"
