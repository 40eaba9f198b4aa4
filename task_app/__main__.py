"""
Run the Task Manager API with uvicorn.

    python -m task_app --port 8000
"""

import argparse
from typing import Optional

import uvicorn

from .config import load_settings
from .logging_setup import setup_logging


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="task-app",
        description="Task Manager API (FastAPI + SQLModel).",
    )
    p.add_argument("--host", help="Bind address (default: TASKS_HOST or 127.0.0.1).")
    p.add_argument("--port", type=int, help="Bind port (default: TASKS_PORT or 8000).")
    p.add_argument("--reload", action="store_true", help="Reload on code changes (development).")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    ns = build_parser().parse_args(argv)
    settings = load_settings()
    setup_logging(level=settings.log_level, log_dir=settings.log_dir)

    uvicorn.run(
        "task_app.main:create_app",
        factory=True,
        host=ns.host or settings.host,
        port=ns.port or settings.port,
        reload=ns.reload,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
