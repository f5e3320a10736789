"""Board view-model: swimlanes across, status columns down.

A board is built by restricting the tasks to each swimlane and then
bucketing them by status, so every swimlane carries every column even
when the column is empty.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from taskview.bucketing import bucket_by_status
from taskview.config import DEFAULTS, ViewDefaults
from taskview.models import (
    STATUS_LABELS,
    Project,
    Resolved,
    Task,
    TaskStatus,
    reference_id,
)

logger = logging.getLogger(__name__)

Board = Dict[str, Dict[TaskStatus, List[Task]]]

ALL_PROJECTS = "all"


def _every_task(task: Task) -> bool:
    return True


@dataclass(frozen=True)
class Swimlane:
    """A horizontal board grouping.

    Attributes:
        id: Lane identifier, unique within a board
        title: Display title
        contains: Predicate selecting the tasks that belong to the lane
    """

    id: str
    title: str
    contains: Callable[[Task], bool] = field(default=_every_task, compare=False, repr=False)


class GroupBy(Enum):
    NONE = "none"
    PROJECT = "project"
    ASSIGNEE = "assignee"
    PRIORITY = "priority"


@dataclass(frozen=True)
class BoardColumn:
    status: TaskStatus
    title: str
    tasks: Tuple[Task, ...]

    @property
    def count(self) -> int:
        return len(self.tasks)

    @property
    def is_empty(self) -> bool:
        return not self.tasks


def build_board(
    swimlanes: Sequence[Swimlane],
    column_statuses: Sequence[TaskStatus],
    tasks: Sequence[Task],
) -> Board:
    """Group tasks into a swimlane by status grid.

    Args:
        swimlanes: Lanes in display order
        column_statuses: Column statuses in display order
        tasks: Tasks to place on the board

    Returns:
        Dict mapping each swimlane id to its status buckets
    """
    board: Board = {}
    for lane in swimlanes:
        lane_tasks = [task for task in tasks if lane.contains(task)]
        board[lane.id] = bucket_by_status(lane_tasks, column_statuses)
    logger.debug("Built board with %d swimlanes over %d tasks", len(board), len(tasks))
    return board


def board_columns(
    board: Board,
    swimlane_id: str,
    columns: Optional[Sequence[TaskStatus]] = None,
) -> List[BoardColumn]:
    """Render-ready columns for one swimlane, empty ones included."""
    buckets = board[swimlane_id]
    statuses = list(buckets) if columns is None else columns
    return [
        BoardColumn(status=status, title=STATUS_LABELS.get(status, str(status)), tasks=tuple(buckets[status]))
        for status in statuses
    ]


def filter_by_project(tasks: Iterable[Task], project_id: Optional[str]) -> List[Task]:
    if project_id is None or project_id == ALL_PROJECTS:
        return list(tasks)
    return [task for task in tasks if task.project_id == project_id]


def _in_project(project_id: Optional[str], task: Task) -> bool:
    return task.project_id == project_id


def _assigned_to(user_id: Optional[str], task: Task) -> bool:
    return reference_id(task.assignee) == user_id


def _has_priority(priority, defaults: ViewDefaults, task: Task) -> bool:
    return defaults.priority_of(task) == priority


def _project_lanes(tasks: Sequence[Task], projects: Sequence[Project]) -> List[Swimlane]:
    titles: Dict[str, str] = {project.id: project.name for project in projects}
    for task in tasks:
        pid = task.project_id
        if pid is None or pid in titles:
            continue
        if isinstance(task.project, Resolved) and task.project.entity.name:
            titles[pid] = task.project.entity.name
        else:
            titles[pid] = "Unknown Project"

    lanes = [Swimlane(pid, title, partial(_in_project, pid)) for pid, title in titles.items()]
    if any(task.project_id is None for task in tasks):
        lanes.append(Swimlane("none", "Unknown Project", partial(_in_project, None)))
    return sorted(lanes, key=lambda lane: lane.title.casefold())


def _assignee_lanes(tasks: Sequence[Task]) -> List[Swimlane]:
    names: Dict[str, str] = {}
    unassigned = False
    for task in tasks:
        uid = reference_id(task.assignee)
        if uid is None:
            unassigned = True
            continue
        if uid not in names:
            entity = task.assignee.entity if isinstance(task.assignee, Resolved) else None
            names[uid] = entity.name if entity is not None else uid

    lanes = sorted(
        (Swimlane(uid, name, partial(_assigned_to, uid)) for uid, name in names.items()),
        key=lambda lane: lane.title.casefold(),
    )
    if unassigned:
        lanes.append(Swimlane("unassigned", "Unassigned", partial(_assigned_to, None)))
    return lanes


def swimlanes_for(
    tasks: Sequence[Task],
    group_by,
    projects: Sequence[Project] = (),
    defaults: ViewDefaults = DEFAULTS,
) -> List[Swimlane]:
    """Derive the swimlanes for a board grouping.

    Args:
        tasks: Tasks shown on the board (already filtered)
        group_by: GroupBy member or its value
        projects: Known projects; each gets a lane in project grouping
                  even without tasks
        defaults: Defaults for absent fields

    Returns:
        Swimlanes in display order

    Raises:
        ValueError: If group_by is not recognised
    """
    group_by = GroupBy(group_by)
    if group_by is GroupBy.PROJECT:
        return _project_lanes(tasks, projects)
    if group_by is GroupBy.ASSIGNEE:
        return _assignee_lanes(tasks)
    if group_by is GroupBy.PRIORITY:
        return [
            Swimlane(p.value, p.value.capitalize(), partial(_has_priority, p, defaults))
            for p in defaults.priority_order
        ]
    return [Swimlane("all", "All Tasks")]

