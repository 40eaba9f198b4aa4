# tests/test_cli.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

import task_app.__main__ as cli
from task_app.logging_setup import setup_logging


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def test_main_runs_uvicorn_with_app_factory(monkeypatch: pytest.MonkeyPatch, restore_root_logging) -> None:
    calls = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kw: calls.append((app, kw)))
    monkeypatch.delenv("TASKS_PORT", raising=False)
    monkeypatch.delenv("TASKS_LOG_DIR", raising=False)

    assert cli.main(["--port", "9100"]) == 0

    app, kw = calls[0]
    assert app == "task_app.main:create_app"
    assert kw["factory"] is True
    assert kw["port"] == 9100
    assert kw["reload"] is False


def test_setup_logging_writes_file(tmp_path: Path, restore_root_logging) -> None:
    setup_logging(level="debug", log_dir=tmp_path)

    logging.getLogger("task_app.test").info("hello from test")
    for h in logging.getLogger().handlers:
        h.flush()

    assert "hello from test" in (tmp_path / "tasks.log").read_text(encoding="utf-8")
