"""
Settings for the Task Manager app, loaded from environment variables (+ optional .env).

Build one Settings object at startup with load_settings() and pass it to
create_app(); nothing in the package reads the environment on import.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy.engine import URL

ENV_PREFIX = "TASKS"
DEFAULT_DATABASE_URL = "sqlite:///./tasks.db"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return default
    return v.strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _database_url() -> str:
    """
    Resolve the database URL.

    TASKS_DATABASE_URL wins. Otherwise, if DATABASE_HOST is set, a PostgreSQL
    URL is assembled from the DATABASE_* variables. Falls back to a local
    SQLite file.
    """
    url = _env(_k("DATABASE_URL"))
    if url:
        return url

    host = _env("DATABASE_HOST")
    if host:
        return URL.create(
            "postgresql+psycopg",
            username=_env("DATABASE_USER"),
            password=_env("DATABASE_PASSWORD"),
            host=host,
            port=_env_int("DATABASE_PORT", 5432),
            database=_env("DATABASE_NAME"),
        ).render_as_string(hide_password=False)

    return DEFAULT_DATABASE_URL


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    echo_sql: bool = False
    log_level: str = "INFO"
    log_dir: Path | None = None
    host: str = "127.0.0.1"
    port: int = 8000


def load_settings(*, use_dotenv: bool = True) -> Settings:
    """
    Read settings from the environment.

    Args:
        use_dotenv: Load a local .env first (existing variables win).

    Returns:
        A frozen Settings instance.
    """
    if use_dotenv:
        load_dotenv(override=False)

    log_dir = _env(_k("LOG_DIR"))
    return Settings(
        database_url=_database_url(),
        echo_sql=_env_bool(_k("ECHO_SQL"), False),
        log_level=(_env(_k("LOG_LEVEL"), "INFO") or "INFO").upper(),
        log_dir=Path(log_dir).expanduser() if log_dir else None,
        host=_env(_k("HOST"), "127.0.0.1") or "127.0.0.1",
        port=_env_int(_k("PORT"), 8000),
    )
