"""Dashboard metrics derived from task and project snapshots.

All window arithmetic is done against an injected ``now`` so that results
are deterministic. Naive timestamps, on the tasks or ``now``, are taken
to be UTC.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Dict, Iterable, Optional, Sequence

from taskview.bucketing import status_counts
from taskview.config import DEFAULTS, ViewDefaults
from taskview.models import Priority, Project, ProjectStatus, Task, TaskStatus, as_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskMetrics:
    """Summary counters for the dashboard cards and charts.

    The four window counters are independent; a task may count in several.

    Attributes:
        done_recently: Done tasks updated within the window
        updated_recently: Tasks updated within the window
        created_recently: Tasks created within the window
        due_soon: Tasks due between today and the end of the window
        priority_histogram: Task count per priority bucket
        status_counts: Task count per status, in board order
    """

    done_recently: int
    updated_recently: int
    created_recently: int
    due_soon: int
    priority_histogram: Dict[Priority, int]
    status_counts: Dict[TaskStatus, int]


@dataclass(frozen=True)
class ProjectSummary:
    total: int
    active: int
    completed: int
    pending: int


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min, tzinfo=moment.tzinfo)


def end_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.max, tzinfo=moment.tzinfo)


def priority_histogram(
    tasks: Iterable[Task], defaults: ViewDefaults = DEFAULTS
) -> Dict[Priority, int]:
    """Count tasks per priority.

    Tasks without a priority count as the default priority. Priorities
    outside the recognised buckets are not counted.
    """
    histogram = {priority: 0 for priority in defaults.priority_order}
    for task in tasks:
        priority = defaults.priority_of(task)
        if priority in histogram:
            histogram[priority] += 1
    return histogram


def aggregate_metrics(
    tasks: Sequence[Task],
    now: datetime,
    window_days: Optional[int] = None,
    defaults: ViewDefaults = DEFAULTS,
) -> TaskMetrics:
    """Compute the dashboard counters for a window around ``now``.

    Args:
        tasks: Task snapshots
        now: Reference instant; naive values are taken to be UTC
        window_days: Window size in days. If None, uses defaults.window_days
        defaults: Defaults for absent fields

    Returns:
        TaskMetrics for the given tasks

    Raises:
        ValueError: If window_days is negative
    """
    if window_days is None:
        window_days = defaults.window_days
    if window_days < 0:
        raise ValueError(f"window_days must be non-negative, got {window_days}")

    now = as_utc(now)
    window = timedelta(days=window_days)
    window_start = now - window
    due_after = start_of_day(now)
    due_before = end_of_day(now + window)

    done_recently = updated_recently = created_recently = due_soon = 0
    for task in tasks:
        updated = as_utc(task.updated_at) >= window_start
        if updated:
            updated_recently += 1
            if task.status == TaskStatus.DONE:
                done_recently += 1
        if as_utc(task.created_at) >= window_start:
            created_recently += 1
        if task.due_date is not None and due_after < as_utc(task.due_date) < due_before:
            due_soon += 1

    metrics = TaskMetrics(
        done_recently=done_recently,
        updated_recently=updated_recently,
        created_recently=created_recently,
        due_soon=due_soon,
        priority_histogram=priority_histogram(tasks, defaults),
        status_counts=status_counts(tasks, defaults.task_status_order),
    )
    logger.debug("Aggregated %d tasks over %d days: %s", len(tasks), window_days, metrics)
    return metrics


def project_summary(projects: Iterable[Project]) -> ProjectSummary:
    """Count projects overall and in the active, completed and pending states."""
    projects = list(projects)
    counts = status_counts(projects, tuple(ProjectStatus))
    return ProjectSummary(
        total=len(projects),
        active=counts[ProjectStatus.ACTIVE],
        completed=counts[ProjectStatus.COMPLETED],
        pending=counts[ProjectStatus.PENDING],
    )
