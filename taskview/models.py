"""Core models for taskview.

This module defines the snapshot records the views are derived from:
- Task, Ticket, Project, User: frozen dataclasses as received from the API
- TaskStatus, ProjectStatus, TicketStatus, Priority: ordered enums
- Unresolved / Resolved: the two shapes of a reference field

Status and priority fields hold an enum member when the value is known and
the raw string otherwise, so that records from partially-migrated data can
still be loaded and are simply left out of the views.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Generic, Optional, Type, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E", bound=Enum)


class TaskStatus(Enum):
    """Task workflow status, in board column order."""

    TO_DO = "to_do"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    DONE = "done"


class ProjectStatus(Enum):
    """Project lifecycle status, in lifecycle order."""

    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TicketStatus(Enum):
    """Ticket resolution status."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class Priority(Enum):
    """Priority levels, most pressing first."""

    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TicketIssueType(Enum):
    CHANGE_REQUEST = "change_request"
    DEV_BUG = "dev_bug"


class TicketCategory(Enum):
    CONTENT = "content"
    DESIGN = "design"
    LAYOUT = "layout"


STATUS_LABELS: Dict[TaskStatus, str] = {
    TaskStatus.TO_DO: "TO DO",
    TaskStatus.IN_PROGRESS: "IN PROGRESS",
    TaskStatus.IN_REVIEW: "IN REVIEW",
    TaskStatus.DONE: "DONE",
}


def coerce_enum(enum_cls: Type[E], value: Any) -> Union[E, str, None]:
    """Return the enum member for ``value``, or the raw string if unknown.

    Args:
        enum_cls: Enum class to look the value up in
        value: Raw value from a record (member, string or None)

    Returns:
        Enum member, the original string when it is not a known value,
        or None when value is None or empty
    """
    if value is None or value == "":
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return str(value)


def enum_value(value: Any) -> Any:
    """Return the underlying value of an enum member, or value unchanged."""
    return value.value if isinstance(value, Enum) else value


def as_utc(moment: datetime) -> datetime:
    """Return an aware datetime, taking naive values to be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


@dataclass(frozen=True)
class Unresolved:
    """A reference that only carries the target's identifier."""

    id: str


@dataclass(frozen=True)
class Resolved(Generic[T]):
    """A reference whose target record was populated by the API."""

    entity: T

    @property
    def id(self) -> str:
        return self.entity.id  # type: ignore[attr-defined]


Reference = Union[Unresolved, Resolved]


def resolve_reference(raw: Any, factory: Callable[[Dict[str, Any]], T]) -> Optional[Reference]:
    """Build a reference from a populated-object-or-id field.

    Args:
        raw: Either a nested record (dict), a bare identifier, or None
        factory: Callable turning a nested record into an entity

    Returns:
        Resolved for nested records, Unresolved for identifiers,
        None when the field is absent
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, dict):
        return Resolved(factory(raw))
    return Unresolved(str(raw))


def reference_id(ref: Optional[Reference]) -> Optional[str]:
    if ref is None:
        return None
    return ref.id


def reference_name(ref: Optional[Reference]) -> str:
    """Display name of a referenced entity; empty for unresolved references."""
    if isinstance(ref, Resolved):
        return getattr(ref.entity, "name", "") or ""
    return ""


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str = ""
    role: str = "user"
    department: str = ""
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class Project:
    """Project snapshot.

    Attributes:
        id: Backend identifier
        name: Project name
        client_name: Name of the client the project is delivered to
        status: ProjectStatus member, or raw string when unknown
        start_date: Planned start
        delivery_date: Planned delivery deadline
        tasks_count: Number of tasks attached to the project
        completed_tasks: Number of those tasks that are done
        total_tickets: Tickets raised across the project's tasks
    """

    id: str
    name: str
    client_name: str = ""
    status: Union[ProjectStatus, str] = ProjectStatus.DRAFT
    start_date: Optional[datetime] = None
    delivery_date: Optional[datetime] = None
    tasks_count: int = 0
    completed_tasks: int = 0
    total_tickets: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Task:
    """Task snapshot.

    Attributes:
        id: Backend identifier
        name: Task name
        created_at: Creation timestamp
        updated_at: Last update timestamp
        project: Reference to the owning project
        assignee: Reference to the assigned developer, if any
        status: TaskStatus member, or raw string when unknown
        priority: Priority member, raw string when unknown, None when absent
        ticket_used: Tickets raised against this task so far
        max_tickets: Ticket allowance for this task
        start_date: Optional planned start
        due_date: Optional deadline
    """

    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    project: Optional[Reference] = None
    assignee: Optional[Reference] = None
    status: Union[TaskStatus, str] = TaskStatus.TO_DO
    priority: Union[Priority, str, None] = None
    ticket_used: int = 0
    max_tickets: int = 0
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None

    def __post_init__(self):
        if self.ticket_used < 0 or self.max_tickets < 0:
            raise ValueError("ticket counters must be non-negative")

    @property
    def is_exhausted(self) -> bool:
        """True once every allowed ticket has been used."""
        return self.ticket_used >= self.max_tickets

    @property
    def project_id(self) -> Optional[str]:
        return reference_id(self.project)


@dataclass(frozen=True)
class TaskRef:
    """The subset of a task the API populates on tickets.

    Ticket routes only select ``taskName`` (and sometimes ``projectId``)
    when populating ``taskId``, so timestamps and counters are absent.
    """

    id: str
    name: str = ""
    project: Optional[Reference] = None

    @property
    def project_id(self) -> Optional[str]:
        return reference_id(self.project)


@dataclass(frozen=True)
class Ticket:
    id: str
    description: str
    created_at: datetime
    task: Optional[Reference] = None
    requester: Optional[Reference] = None
    issue_type: Union[TicketIssueType, str] = TicketIssueType.CHANGE_REQUEST
    category: Union[TicketCategory, str] = TicketCategory.CONTENT
    priority: Union[Priority, str, None] = None
    status: Union[TicketStatus, str] = TicketStatus.OPEN
    updated_at: Optional[datetime] = None


def ticket_badge(used: int, maximum: int) -> str:
    """Classify ticket usage for the usage badge.

    Returns:
        "exhausted" when used >= maximum, "warning" when one ticket is
        left, "available" otherwise
    """
    if used >= maximum:
        return "exhausted"
    if used == maximum - 1:
        return "warning"
    return "available"


def progress_percentage(value: int, maximum: int) -> float:
    if maximum <= 0:
        return 0.0
    return value / maximum * 100


def progress_level(percentage: float) -> str:
    """Bucket a completion percentage into the progress bar's colour band."""
    if percentage >= 100:
        return "complete"
    if percentage >= 75:
        return "high"
    if percentage >= 50:
        return "medium"
    if percentage >= 25:
        return "low"
    return "none"
