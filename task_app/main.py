"""
FastAPI application for the Task Manager app.

This is the main entry point that:
- Builds the database engine from explicit Settings
- Creates the tasks table on startup
- Exposes the /api/v1/tasks CRUD endpoints
"""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from .config import Settings, load_settings
from .database import create_engine_from_settings, get_session, init_db
from .models import (
    DeleteResult,
    TaskCreate,
    TaskPage,
    TaskPriority,
    TaskQuery,
    TaskRecord,
    TaskStatus,
    TaskUpdate,
)
from .tools import TaskNotFoundError, create_task, delete_task, get_task, list_tasks, update_task

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"])


@router.post("", response_model=TaskRecord, response_model_exclude_none=True, status_code=201)
def create_task_endpoint(data: TaskCreate, session: Session = Depends(get_session)):
    """Create a task. Status defaults to PENDING."""
    return create_task(session, data)


@router.get("", response_model=TaskPage, response_model_exclude_none=True)
def list_tasks_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    status: TaskStatus | None = None,
    priority: TaskPriority | None = None,
    search: str | None = None,
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    session: Session = Depends(get_session),
):
    """List tasks with optional filters, sorting and pagination."""
    query = TaskQuery(
        page=page,
        limit=limit,
        status=status,
        priority=priority,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return list_tasks(session, query)


@router.get("/{task_id}", response_model=TaskRecord, response_model_exclude_none=True)
def get_task_endpoint(task_id: str, session: Session = Depends(get_session)):
    return get_task(session, task_id)


@router.put("/{task_id}", response_model=TaskRecord, response_model_exclude_none=True)
def update_task_endpoint(task_id: str, data: TaskUpdate, session: Session = Depends(get_session)):
    """Replace a task. Omitted optional fields are cleared; omitted status is kept."""
    return update_task(session, task_id, data)


@router.delete("/{task_id}", response_model=DeleteResult)
def delete_task_endpoint(task_id: str, session: Session = Depends(get_session)):
    return delete_task(session, task_id)


async def _task_not_found(request: Request, exc: TaskNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def _validation_failed(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


async def _store_failed(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Database error"})


def create_app(settings: Settings | None = None, engine: Engine | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Explicit settings. Defaults to load_settings().
        engine: Pre-built engine (tests). Defaults to one built from settings.

    Returns:
        Configured FastAPI app; the engine is kept on app.state.engine.
    """
    settings = settings or load_settings()
    engine = engine or create_engine_from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan - create tables on startup."""
        init_db(engine)
        logger.info("Database ready (%s)", engine.dialect.name)
        yield
        engine.dispose()

    app = FastAPI(
        title="Task Manager API",
        description="Create, list, filter, sort, update and delete tasks",
        version="1.0.0",
        docs_url="/api/docs",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine

    app.include_router(router)
    app.add_exception_handler(TaskNotFoundError, _task_not_found)
    app.add_exception_handler(RequestValidationError, _validation_failed)
    app.add_exception_handler(SQLAlchemyError, _store_failed)

    @app.get("/")
    async def root():
        return {"message": "Task Manager API", "docs": "/api/docs"}

    @app.get("/api/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "database": engine.dialect.name}

    return app
