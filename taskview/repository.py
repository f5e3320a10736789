"""Snapshot repository for querying tasks, projects and tickets.

This module provides a SnapshotRepository class offering the filters the
tracker's task, project and ticket services expose, on top of the storage
layer.
"""

from typing import List, Optional, Union

from taskview.models import Project, Task, TaskStatus, Ticket, TicketStatus, enum_value, reference_id
from taskview.storage import JsonStorage, Snapshot, Storage


class SnapshotRepository:
    """Read-side repository over a stored snapshot.

    Every query loads the snapshot afresh, so results always reflect the
    latest fetch written to storage.

    Attributes:
        storage: Storage backend holding the snapshot
    """

    def __init__(self, storage: Optional[Storage] = None):
        """Initialize SnapshotRepository with a storage backend.

        Args:
            storage: Storage implementation to use. If None, uses JsonStorage
                    with the configured file path.
        """
        self.storage = storage or JsonStorage()

    def snapshot(self) -> Snapshot:
        return self.storage.load()

    def get_tasks(
        self,
        project_id: Optional[str] = None,
        status: Union[TaskStatus, str, None] = None,
    ) -> List[Task]:
        """Get tasks, optionally filtered by project and status.

        Args:
            project_id: Only return tasks of this project
            status: Only return tasks with this status

        Returns:
            List of Task objects in stored order
        """
        tasks = self.storage.load().tasks

        if project_id is not None:
            tasks = [task for task in tasks if task.project_id == project_id]
        if status is not None:
            tasks = [task for task in tasks if enum_value(task.status) == enum_value(status)]

        return tasks

    def get_task(self, task_id: str) -> Optional[Task]:
        """Get a specific task by ID.

        Args:
            task_id: ID of the task to retrieve

        Returns:
            Task object if found, None otherwise
        """
        for task in self.storage.load().tasks:
            if task.id == task_id:
                return task
        return None

    def get_projects(self) -> List[Project]:
        return self.storage.load().projects

    def get_project(self, project_id: str) -> Optional[Project]:
        for project in self.storage.load().projects:
            if project.id == project_id:
                return project
        return None

    def get_tickets(
        self,
        task_id: Optional[str] = None,
        status: Union[TicketStatus, str, None] = None,
    ) -> List[Ticket]:
        """Get tickets, optionally filtered by owning task and status."""
        tickets = self.storage.load().tickets

        if task_id is not None:
            tickets = [t for t in tickets if reference_id(t.task) == task_id]
        if status is not None:
            tickets = [t for t in tickets if enum_value(t.status) == enum_value(status)]

        return tickets

    def recent_tickets(self, limit: int = 5) -> List[Ticket]:
        """Newest tickets first, at most ``limit`` of them."""
        tickets = sorted(self.storage.load().tickets, key=lambda t: t.created_at, reverse=True)
        return tickets[:limit]

    def recent_projects(self, limit: int = 5) -> List[Project]:
        """The first ``limit`` projects, in stored order."""
        return self.storage.load().projects[:limit]
