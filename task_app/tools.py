"""
Task services for the Task Manager app.

Query side builds a filtered, sorted, paginated view of the tasks table.
Mutation side creates, reads, replaces and deletes single tasks.
Every function takes the database session as its first argument.
"""

import logging

from sqlalchemy import case
from sqlmodel import Session, func, select

from .models import (
    DeleteResult,
    PageMeta,
    Task,
    TaskCreate,
    TaskPage,
    TaskPriority,
    TaskQuery,
    TaskRecord,
    TaskStatus,
    TaskUpdate,
    format_datetime,
    to_utc,
    utcnow,
)

logger = logging.getLogger(__name__)

# Enum columns sort by declaration rank, not alphabetically.
_STATUS_RANK = case({s: i for i, s in enumerate(TaskStatus)}, value=Task.status)
_PRIORITY_RANK = case({p: i for i, p in enumerate(TaskPriority)}, value=Task.priority)

# API sort field -> (column, sort expression)
SORT_FIELDS = {
    "title": (Task.title, Task.title),
    "status": (Task.status, _STATUS_RANK),
    "priority": (Task.priority, _PRIORITY_RANK),
    "dueDate": (Task.due_date, Task.due_date),
    "createdAt": (Task.created_at, Task.created_at),
}
NULLABLE_SORT_FIELDS = {"priority", "dueDate"}
SORT_ORDERS = {"asc", "desc"}


class TaskNotFoundError(LookupError):
    """No task exists with the given id."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task with id {task_id} not found")


def to_record(task: Task) -> TaskRecord:
    """
    Translate a stored row into the API record shape.

    Args:
        task: Row loaded from the tasks table.

    Returns:
        TaskRecord with ISO-8601 timestamps.
    """
    return TaskRecord(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,
        priority=task.priority,
        due_date=format_datetime(task.due_date) if task.due_date else None,
        created_at=format_datetime(task.created_at),
        updated_at=format_datetime(task.updated_at),
    )


def _filters(query: TaskQuery) -> list:
    conditions = []
    if query.status:
        conditions.append(Task.status == query.status)
    if query.priority:
        conditions.append(Task.priority == query.priority)
    if query.search:
        conditions.append(Task.title.icontains(query.search, autoescape=True))
    return conditions


def _ordering(sort_by: str | None, sort_order: str | None) -> list:
    """
    Build ORDER BY clauses.

    Nullable keys get a leading "is null" key in the same direction, so nulls
    come last ascending and first descending. Ties are broken by id.
    """
    order = (sort_order or "asc").lower()
    if sort_by not in SORT_FIELDS or order not in SORT_ORDERS:
        return [Task.created_at.desc(), Task.id.asc()]

    column, expression = SORT_FIELDS[sort_by]
    clauses = []
    if sort_by in NULLABLE_SORT_FIELDS:
        is_null = case((column.is_(None), 1), else_=0)
        clauses.append(is_null.asc() if order == "asc" else is_null.desc())
    clauses.append(expression.asc() if order == "asc" else expression.desc())
    clauses.append(Task.id.asc())
    return clauses


def list_tasks(session: Session, query: TaskQuery | None = None) -> TaskPage:
    """
    List tasks matching the query's filters, sorted and paginated.

    Args:
        session: Database session.
        query: Filter/sort/page descriptor. Defaults to page 1, limit 10.

    Returns:
        TaskPage with at most `limit` records and the unpaginated total.
    """
    query = query or TaskQuery()
    conditions = _filters(query)

    total = session.exec(select(func.count()).select_from(Task).where(*conditions)).one()

    # Offset and limit stay below total; huge page/limit values never reach the database.
    offset = (query.page - 1) * query.limit
    tasks = []
    if offset < total:
        statement = (
            select(Task)
            .where(*conditions)
            .order_by(*_ordering(query.sort_by, query.sort_order))
            .offset(offset)
            .limit(min(query.limit, total - offset))
        )
        tasks = session.exec(statement).all()

    logger.debug(
        "Listed %d of %d task(s) (page=%d limit=%d)", len(tasks), total, query.page, query.limit
    )
    return TaskPage(
        data=[to_record(t) for t in tasks],
        meta=PageMeta(page=query.page, limit=query.limit, total=total),
    )


def _get_or_raise(session: Session, task_id: str) -> Task:
    task = session.get(Task, task_id)
    if task is None:
        logger.info("Task %s not found", task_id)
        raise TaskNotFoundError(task_id)
    return task


def create_task(session: Session, data: TaskCreate) -> TaskRecord:
    """
    Create a new task.

    Args:
        session: Database session.
        data: Validated input. A missing status defaults to PENDING.

    Returns:
        The stored task, with generated id and equal created/updated times.
    """
    now = utcnow()
    task = Task(
        title=data.title,
        description=data.description,
        status=data.status or TaskStatus.PENDING,
        priority=data.priority,
        due_date=data.due_date,
        created_at=now,
        updated_at=now,
    )
    session.add(task)
    session.commit()
    session.refresh(task)

    logger.info("Created task %s", task.id)
    return to_record(task)


def get_task(session: Session, task_id: str) -> TaskRecord:
    """
    Fetch a single task.

    Raises:
        TaskNotFoundError: If no task has this id.
    """
    return to_record(_get_or_raise(session, task_id))


def update_task(session: Session, task_id: str, data: TaskUpdate) -> TaskRecord:
    """
    Replace a task's fields.

    title, description, priority and due_date are always overwritten, so
    leaving one out clears it. status is only overwritten when given.

    Args:
        session: Database session.
        task_id: ID of the task to update.
        data: Validated input.

    Returns:
        The updated task.

    Raises:
        TaskNotFoundError: If no task has this id.
    """
    task = _get_or_raise(session, task_id)

    task.title = data.title
    task.description = data.description
    if data.status is not None:
        task.status = data.status
    task.priority = data.priority
    task.due_date = data.due_date
    task.updated_at = max(utcnow(), to_utc(task.created_at))

    session.add(task)
    session.commit()
    session.refresh(task)

    logger.info("Updated task %s", task.id)
    return to_record(task)


def delete_task(session: Session, task_id: str) -> DeleteResult:
    """
    Permanently delete a task.

    Raises:
        TaskNotFoundError: If no task has this id.
    """
    task = _get_or_raise(session, task_id)
    session.delete(task)
    session.commit()

    logger.info("Deleted task %s", task_id)
    return DeleteResult(success=True, message=f"Task with id {task_id} deleted successfully")
