"""Command-line interface for taskview.

This module renders the view-models to the terminal using argparse.
It supports the following commands:
- board: Kanban board, optionally grouped into swimlanes
- summary: Dashboard counters for the recent/upcoming window
- table: Sorted task table
- overview: Task status breakdown with percentages
- tickets: Most recent tickets
- projects: Projects with their task completion progress
"""

import argparse
import logging
import sys
from datetime import datetime, timezone
from typing import List, Optional

from taskview.board import GroupBy, board_columns, build_board, filter_by_project, swimlanes_for
from taskview.bucketing import status_breakdown
from taskview.config import Settings, get_settings
from taskview.errors import TaskviewError
from taskview.metrics import aggregate_metrics, project_summary
from taskview.models import (
    STATUS_LABELS,
    enum_value,
    progress_level,
    progress_percentage,
    reference_name,
    ticket_badge,
)
from taskview.repository import SnapshotRepository
from taskview.sorting import SortDirection, SortField, sort_entities
from taskview.storage import JsonStorage, parse_timestamp

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="taskview",
        description="Board, dashboard and table views over a tracker snapshot"
    )
    parser.add_argument("--data", help="Snapshot file (default: TASKVIEW_DATA_PATH)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Board command
    board_parser = subparsers.add_parser("board", help="Show the Kanban board")
    board_parser.add_argument(
        "--group-by",
        choices=[g.value for g in GroupBy],
        default=GroupBy.NONE.value,
        help="Swimlane grouping (default: none)"
    )
    board_parser.add_argument("--project", default="all", help="Only show tasks of this project")

    # Summary command
    summary_parser = subparsers.add_parser("summary", help="Show dashboard counters")
    summary_parser.add_argument("--window", type=int, help="Window size in days")
    summary_parser.add_argument("--now", help="Reference time (ISO 8601, default: current time)")

    # Table command
    table_parser = subparsers.add_parser("table", help="Show the task table")
    table_parser.add_argument(
        "--sort",
        choices=[f.value for f in SortField],
        default=SortField.UPDATED_AT.value,
        help="Column to sort by (default: updated_at)"
    )
    table_parser.add_argument("--desc", action="store_true", help="Sort descending")

    # Overview command
    subparsers.add_parser("overview", help="Show the task status overview")

    # Tickets command
    tickets_parser = subparsers.add_parser("tickets", help="Show recent tickets")
    tickets_parser.add_argument("--limit", type=int, default=5, help="Number of tickets (default: 5)")

    # Projects command
    projects_parser = subparsers.add_parser("projects", help="Show project progress")
    projects_parser.add_argument("--limit", type=int, default=5, help="Number of projects (default: 5)")

    return parser


def cmd_board(args: argparse.Namespace, repo: SnapshotRepository, settings: Settings) -> int:
    snapshot = repo.snapshot()
    tasks = filter_by_project(snapshot.tasks, args.project)
    projects = snapshot.projects if args.project == "all" else []
    statuses = settings.defaults.task_status_order

    lanes = swimlanes_for(tasks, args.group_by, projects, settings.defaults)
    board = build_board(lanes, statuses, tasks)

    for lane in lanes:
        columns = board_columns(board, lane.id, statuses)
        total = sum(column.count for column in columns)
        print(f"== {lane.title} ({total})")
        for column in columns:
            print(f"  {column.title} ({column.count})")
            if column.is_empty:
                print("    No tasks")
                continue
            for task in column.tasks:
                priority = enum_value(settings.defaults.priority_of(task))
                print(
                    f"    - {task.name} [{priority}] "
                    f"tickets {task.ticket_used}/{task.max_tickets} "
                    f"({ticket_badge(task.ticket_used, task.max_tickets)})"
                )
    return 0


def cmd_summary(args: argparse.Namespace, repo: SnapshotRepository, settings: Settings) -> int:
    """Handle the 'summary' command.

    Args:
        args: Parsed command-line arguments
        repo: SnapshotRepository instance
        settings: Runtime settings

    Returns:
        Exit code (0 for success, 1 for invalid arguments)
    """
    window = settings.window_days if args.window is None else args.window
    try:
        now = parse_timestamp(args.now) if args.now else datetime.now(timezone.utc)
        snapshot = repo.snapshot()
        metrics = aggregate_metrics(snapshot.tasks, now, window, settings.defaults)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"{metrics.done_recently} done in the last {window} days")
    print(f"{metrics.updated_recently} updated in the last {window} days")
    print(f"{metrics.created_recently} created in the last {window} days")
    print(f"{metrics.due_soon} due in the next {window} days")

    print("Priority breakdown:")
    for priority, count in metrics.priority_histogram.items():
        print(f"  {priority.value}: {count}")

    projects = project_summary(snapshot.projects)
    print(
        f"Projects: {projects.total} total, {projects.active} active, "
        f"{projects.completed} completed, {projects.pending} pending"
    )
    return 0


def cmd_table(args: argparse.Namespace, repo: SnapshotRepository, settings: Settings) -> int:
    tasks = repo.get_tasks()
    if not tasks:
        print("No tasks to display")
        return 0

    direction = SortDirection.DESCENDING if args.desc else SortDirection.ASCENDING
    for task in sort_entities(tasks, args.sort, direction):
        status = STATUS_LABELS.get(task.status, str(enum_value(task.status) or "-"))
        print(
            f"{task.name:<30} {reference_name(task.project) or '-':<20} "
            f"{status:<12} {task.updated_at:%Y-%m-%d %H:%M}"
        )
    return 0


def cmd_overview(args: argparse.Namespace, repo: SnapshotRepository, settings: Settings) -> int:
    shares = status_breakdown(repo.get_tasks(), settings.defaults.task_status_order)
    if not any(share.visible for share in shares):
        print("No tasks to analyze")
        return 0

    for share in shares:
        print(f"{STATUS_LABELS[share.status]:<12} {share.count:>4} {share.percentage:5.1f}%")
    return 0


def cmd_tickets(args: argparse.Namespace, repo: SnapshotRepository, settings: Settings) -> int:
    tickets = repo.recent_tickets(args.limit)
    if not tickets:
        print("No tickets yet")
        return 0

    for ticket in tickets:
        print(
            f"[{enum_value(ticket.status)}] {ticket.description} "
            f"({enum_value(ticket.issue_type)}, {ticket.created_at:%b %d, %Y})"
        )
    return 0


def cmd_projects(args: argparse.Namespace, repo: SnapshotRepository, settings: Settings) -> int:
    projects = repo.recent_projects(args.limit)
    if not projects:
        print("No projects yet")
        return 0

    for project in projects:
        percentage = progress_percentage(project.completed_tasks, project.tasks_count)
        status = str(enum_value(project.status) or "-")
        print(
            f"{project.name:<24} {project.client_name or '-':<16} {status:<10} "
            f"{project.completed_tasks}/{project.tasks_count} tasks "
            f"{percentage:5.1f}% ({progress_level(percentage)})"
        )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:]

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        settings = get_settings()
    except TaskviewError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    repo = SnapshotRepository(JsonStorage(args.data or settings.data_path))

    # Dispatch to command handlers
    commands = {
        "board": cmd_board,
        "summary": cmd_summary,
        "table": cmd_table,
        "overview": cmd_overview,
        "tickets": cmd_tickets,
        "projects": cmd_projects,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Error: Unknown command '{args.command}'", file=sys.stderr)
        return 1

    try:
        return handler(args, repo, settings)
    except TaskviewError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
