"""Storage layer for taskview.

This module provides an abstract storage interface and a JSON file
implementation for snapshots of the tracker's API payloads. Records are
kept in the API's shape (``_id``, ``taskName``, ``projectId``...) on disk
and converted to the models on load.
"""

import fcntl
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

from taskview.config import get_settings
from taskview.errors import SnapshotError
from taskview.models import (
    Priority,
    Project,
    ProjectStatus,
    Resolved,
    Task,
    TaskRef,
    TaskStatus,
    Ticket,
    TicketCategory,
    TicketIssueType,
    TicketStatus,
    Unresolved,
    User,
    as_utc,
    coerce_enum,
    enum_value,
    resolve_reference,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Snapshot:
    """Everything fetched from the API in one go."""

    tasks: List[Task] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)
    tickets: List[Ticket] = field(default_factory=list)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an API timestamp string.

    Accepts ISO 8601 with or without a trailing ``Z``. Naive values are
    taken to be UTC.

    Returns:
        Aware datetime, or None for an empty value
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    return as_utc(parsed)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _required_timestamp(raw: Dict[str, Any], key: str) -> datetime:
    value = parse_timestamp(raw[key])
    if value is None:
        raise ValueError(f"{key} is empty")
    return value


def _record_id(raw: Dict[str, Any]) -> str:
    record_id = raw.get("_id", raw.get("id"))
    if record_id is None:
        raise KeyError("_id")
    return str(record_id)


def user_from_record(raw: Dict[str, Any]) -> User:
    return User(
        id=_record_id(raw),
        name=raw.get("name", ""),
        email=raw.get("email", ""),
        role=raw.get("role", "user"),
        department=raw.get("department", ""),
        avatar_url=raw.get("avatar_url") or raw.get("avatar"),
    )


def project_from_record(raw: Dict[str, Any]) -> Project:
    return Project(
        id=_record_id(raw),
        name=raw.get("name", ""),
        client_name=raw.get("clientName", ""),
        status=coerce_enum(ProjectStatus, raw.get("status", ProjectStatus.DRAFT.value)),
        start_date=parse_timestamp(raw.get("startDate")),
        delivery_date=parse_timestamp(raw.get("deliveryDate")),
        tasks_count=int(raw.get("tasksCount", 0)),
        completed_tasks=int(raw.get("completedTasks", 0)),
        total_tickets=int(raw.get("totalTickets", 0)),
        created_at=parse_timestamp(raw.get("createdAt")),
        updated_at=parse_timestamp(raw.get("updatedAt")),
    )


def task_from_record(raw: Dict[str, Any]) -> Task:
    return Task(
        id=_record_id(raw),
        name=raw["taskName"],
        project=resolve_reference(raw.get("projectId"), project_from_record),
        assignee=resolve_reference(raw.get("assignedDeveloper"), user_from_record),
        status=coerce_enum(TaskStatus, raw.get("status", TaskStatus.TO_DO.value)),
        priority=coerce_enum(Priority, raw.get("priority")),
        ticket_used=int(raw.get("ticketUsed", 0)),
        max_tickets=int(raw.get("maxTickets", 0)),
        created_at=_required_timestamp(raw, "createdAt"),
        updated_at=_required_timestamp(raw, "updatedAt"),
        start_date=parse_timestamp(raw.get("startDate")),
        due_date=parse_timestamp(raw.get("dueDate")),
    )


def task_ref_from_record(raw: Dict[str, Any]) -> TaskRef:
    return TaskRef(
        id=_record_id(raw),
        name=raw.get("taskName", ""),
        project=resolve_reference(raw.get("projectId"), project_from_record),
    )


def ticket_from_record(raw: Dict[str, Any]) -> Ticket:
    return Ticket(
        id=_record_id(raw),
        description=raw.get("description", ""),
        task=resolve_reference(raw.get("taskId"), task_ref_from_record),
        requester=resolve_reference(raw.get("requestedBy"), user_from_record),
        issue_type=coerce_enum(TicketIssueType, raw.get("issueType", TicketIssueType.CHANGE_REQUEST.value)),
        category=coerce_enum(TicketCategory, raw.get("category", TicketCategory.CONTENT.value)),
        priority=coerce_enum(Priority, raw.get("priority")),
        status=coerce_enum(TicketStatus, raw.get("status", TicketStatus.OPEN.value)),
        created_at=_required_timestamp(raw, "createdAt"),
        updated_at=parse_timestamp(raw.get("updatedAt")),
    )


def _reference_to_record(ref, to_record: Callable[[Any], Dict[str, Any]]) -> Any:
    if isinstance(ref, Resolved):
        return to_record(ref.entity)
    if isinstance(ref, Unresolved):
        return ref.id
    return None


def user_to_record(user: User) -> Dict[str, Any]:
    return {
        "_id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "department": user.department,
        "avatar_url": user.avatar_url,
    }


def project_to_record(project: Project) -> Dict[str, Any]:
    return {
        "_id": project.id,
        "name": project.name,
        "clientName": project.client_name,
        "status": enum_value(project.status),
        "startDate": format_timestamp(project.start_date),
        "deliveryDate": format_timestamp(project.delivery_date),
        "tasksCount": project.tasks_count,
        "completedTasks": project.completed_tasks,
        "totalTickets": project.total_tickets,
        "createdAt": format_timestamp(project.created_at),
        "updatedAt": format_timestamp(project.updated_at),
    }


def task_to_record(task: Task) -> Dict[str, Any]:
    return {
        "_id": task.id,
        "taskName": task.name,
        "projectId": _reference_to_record(task.project, project_to_record),
        "assignedDeveloper": _reference_to_record(task.assignee, user_to_record),
        "status": enum_value(task.status),
        "priority": enum_value(task.priority),
        "ticketUsed": task.ticket_used,
        "maxTickets": task.max_tickets,
        "createdAt": format_timestamp(task.created_at),
        "updatedAt": format_timestamp(task.updated_at),
        "startDate": format_timestamp(task.start_date),
        "dueDate": format_timestamp(task.due_date),
    }


def task_ref_to_record(task) -> Dict[str, Any]:
    """Record for a task populated on a ticket. Accepts a Task or a TaskRef."""
    return {
        "_id": task.id,
        "taskName": task.name,
        "projectId": _reference_to_record(task.project, project_to_record),
    }


def ticket_to_record(ticket: Ticket) -> Dict[str, Any]:
    return {
        "_id": ticket.id,
        "description": ticket.description,
        "taskId": _reference_to_record(ticket.task, task_ref_to_record),
        "requestedBy": _reference_to_record(ticket.requester, user_to_record),
        "issueType": enum_value(ticket.issue_type),
        "category": enum_value(ticket.category),
        "priority": enum_value(ticket.priority),
        "status": enum_value(ticket.status),
        "createdAt": format_timestamp(ticket.created_at),
        "updatedAt": format_timestamp(ticket.updated_at),
    }


def _parse_records(kind: str, records: Any, parse: Callable[[Dict[str, Any]], T]) -> List[T]:
    if not isinstance(records, list):
        raise SnapshotError(f"Expected a list of {kind}, got {type(records).__name__}")
    parsed = []
    for index, raw in enumerate(records):
        try:
            parsed.append(parse(raw))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise SnapshotError(f"Malformed {kind} record at index {index}: {exc!r}") from exc
    return parsed


def snapshot_from_payload(data: Dict[str, Any]) -> Snapshot:
    """Convert a decoded JSON payload into a Snapshot.

    Raises:
        SnapshotError: If the payload or one of its records is malformed
    """
    if not isinstance(data, dict):
        raise SnapshotError(f"Snapshot must be a JSON object, got {type(data).__name__}")
    return Snapshot(
        tasks=_parse_records("tasks", data.get("tasks", []), task_from_record),
        projects=_parse_records("projects", data.get("projects", []), project_from_record),
        tickets=_parse_records("tickets", data.get("tickets", []), ticket_from_record),
    )


def snapshot_to_payload(snapshot: Snapshot) -> Dict[str, Any]:
    return {
        "tasks": [task_to_record(task) for task in snapshot.tasks],
        "projects": [project_to_record(project) for project in snapshot.projects],
        "tickets": [ticket_to_record(ticket) for ticket in snapshot.tickets],
    }


class Storage(ABC):
    """Abstract base class for snapshot storage implementations."""

    @abstractmethod
    def save(self, snapshot: Snapshot) -> None:
        """Save a snapshot to storage.

        Args:
            snapshot: Snapshot to persist
        """
        pass

    @abstractmethod
    def load(self) -> Snapshot:
        """Load the stored snapshot.

        Returns:
            Stored Snapshot, empty if nothing has been stored
        """
        pass

    @abstractmethod
    def delete(self) -> None:
        """Delete all data from storage."""
        pass


class JsonStorage(Storage):
    """JSON file-based snapshot storage with file locking.

    Attributes:
        file_path: Path to the JSON snapshot file
    """

    def __init__(self, file_path: Optional[str] = None):
        """Initialize JsonStorage with a file path.

        Args:
            file_path: Path to the snapshot file. If None, uses the
                      TASKVIEW_DATA_PATH setting.
        """
        if file_path is None:
            file_path = get_settings().data_path
        self.file_path = Path(file_path)

    def save(self, snapshot: Snapshot) -> None:
        """Save a snapshot to the JSON file with an exclusive lock."""
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        payload = snapshot_to_payload(snapshot)

        with open(self.file_path, "w") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                json.dump(payload, f, indent=2)
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        logger.debug("Saved snapshot to %s", self.file_path)

    def load(self) -> Snapshot:
        """Load the snapshot from the JSON file with a shared lock.

        Returns:
            Snapshot read from disk. Returns an empty Snapshot if the file
            doesn't exist or is empty.

        Raises:
            SnapshotError: If the file is not valid JSON or holds a
                malformed record
        """
        if not self.file_path.exists():
            logger.debug("No snapshot at %s", self.file_path)
            return Snapshot()

        with open(self.file_path, "r") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_SH)
            try:
                content = f.read().strip()
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)

        if not content:
            return Snapshot()
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise SnapshotError(f"{self.file_path} is not valid JSON: {exc}") from exc

        snapshot = snapshot_from_payload(data)
        logger.debug(
            "Loaded %d tasks, %d projects, %d tickets from %s",
            len(snapshot.tasks),
            len(snapshot.projects),
            len(snapshot.tickets),
            self.file_path,
        )
        return snapshot

    def delete(self) -> None:
        """Delete the JSON snapshot file.

        If the file doesn't exist, this method does nothing.
        """
        if self.file_path.exists():
            self.file_path.unlink()
