"""
Database and API models for the Task Manager app.

One enum set per concept (status, priority) is shared by the table model and
the request/response schemas.
"""

from datetime import date, datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field as PydanticField, field_validator
from pydantic.alias_generators import to_camel
from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel


class TaskStatus(str, Enum):
    """Lifecycle state of a task. Declaration order is the sort rank."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TaskPriority(str, Enum):
    """Optional importance of a task. Declaration order is the sort rank."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime (the storage convention)."""
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Convert to aware UTC. Naive values (SQLite reads them back that way) are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: str) -> datetime:
    """
    Parse an ISO-8601 date or date-time string.

    Args:
        value: String like '2024-12-31', '2024-12-31T10:00:00' or
            '2024-12-31T10:00:00.000Z'.

    Returns:
        Aware UTC datetime. A bare date becomes midnight UTC.

    Raises:
        ValueError: If the string is not ISO-8601.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return to_utc(datetime.fromisoformat(text))
    except ValueError as e:
        raise ValueError(f"Invalid date '{value}'. Use ISO-8601, e.g. 2024-12-31.") from e


def format_datetime(value: datetime) -> str:
    """Render a stored datetime as ISO-8601 UTC with milliseconds and 'Z'."""
    return to_utc(value).replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


class Task(SQLModel, table=True):
    """
    A task record.

    Attributes:
        id: Opaque unique identifier (UUID4 string), generated on create.
        title: Short title, 1-255 characters.
        description: Optional free text.
        status: Current status, never null.
        priority: Optional priority; None means "no priority".
        due_date: Optional due date/time (UTC).
        created_at: Set once at creation.
        updated_at: Refreshed on every mutation.
    """

    __tablename__ = "tasks"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True, max_length=36)
    title: str = Field(max_length=255)
    description: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    status: TaskStatus = Field(default=TaskStatus.PENDING, index=True)
    priority: TaskPriority | None = Field(default=None, index=True)
    due_date: datetime | None = Field(default=None, sa_type=DateTime(timezone=True), index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class ApiModel(BaseModel):
    """Base for request/response schemas: camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskCreate(ApiModel):
    """Schema for creating a new task."""

    title: str = PydanticField(min_length=1, max_length=255)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, value):
        if isinstance(value, str):
            return parse_datetime(value)
        if isinstance(value, datetime):
            return to_utc(value)
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        if value is None:
            return None
        raise ValueError("dueDate must be an ISO-8601 date string")


class TaskUpdate(TaskCreate):
    """
    Schema for replacing a task.

    Same shape as TaskCreate: every field is written back, except that a
    missing status keeps the stored one.
    """


class TaskRecord(ApiModel):
    """A task as returned by the API."""

    id: str
    title: str
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority | None = None
    due_date: str | None = None
    created_at: str
    updated_at: str


class TaskQuery(ApiModel):
    """
    Filter/sort/page descriptor for listing tasks.

    sort_by and sort_order are kept as plain strings: unknown values fall
    back to the default ordering instead of being rejected.
    """

    page: int = PydanticField(default=1, ge=1)
    limit: int = PydanticField(default=10, ge=1)
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    search: str | None = None
    sort_by: str | None = None
    sort_order: str | None = None


class PageMeta(ApiModel):
    page: int
    limit: int
    total: int


class TaskPage(ApiModel):
    """One page of tasks plus the pre-pagination total."""

    data: list[TaskRecord]
    meta: PageMeta


class DeleteResult(ApiModel):
    success: bool
    message: str
