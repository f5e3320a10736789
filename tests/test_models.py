"""Tests for core models."""

from datetime import datetime

import pytest

from taskview.models import (
    Priority,
    Project,
    ProjectStatus,
    Resolved,
    Task,
    TaskStatus,
    Unresolved,
    coerce_enum,
    progress_level,
    progress_percentage,
    reference_id,
    reference_name,
    resolve_reference,
    ticket_badge,
)

CREATED = datetime(2026, 2, 1, 12, 0, 0)


def make_task(**overrides):
    fields = dict(id="t1", name="Landing page", created_at=CREATED, updated_at=CREATED)
    fields.update(overrides)
    return Task(**fields)


class TestEnums:
    """Tests for the status and priority enums."""

    def test_task_status_order(self):
        """Test that task statuses are declared in workflow order."""
        assert [s.value for s in TaskStatus] == ["to_do", "in_progress", "in_review", "done"]

    def test_project_status_lifecycle(self):
        """Test that the project lifecycle has seven ordered states."""
        statuses = [s.value for s in ProjectStatus]
        assert len(statuses) == 7
        assert statuses[0] == "draft"
        assert statuses[-1] == "cancelled"

    def test_priority_values(self):
        """Test that Priority enum has correct values."""
        assert [p.value for p in Priority] == ["urgent", "high", "medium", "low"]

    def test_coerce_known_value(self):
        assert coerce_enum(TaskStatus, "in_review") is TaskStatus.IN_REVIEW

    def test_coerce_unknown_value_keeps_string(self):
        assert coerce_enum(TaskStatus, "blocked") == "blocked"

    def test_coerce_none(self):
        assert coerce_enum(Priority, None) is None

    def test_coerce_empty_string_is_absent(self):
        assert coerce_enum(Priority, "") is None


class TestTask:
    """Tests for Task dataclass."""

    def test_task_defaults(self):
        """Test creating a task with only the required fields."""
        task = make_task()

        assert task.status == TaskStatus.TO_DO
        assert task.priority is None
        assert task.project is None
        assert task.ticket_used == 0
        assert task.max_tickets == 0

    def test_task_is_immutable(self):
        task = make_task()
        with pytest.raises(AttributeError):
            task.name = "Renamed"

    def test_negative_ticket_counters_rejected(self):
        with pytest.raises(ValueError):
            make_task(ticket_used=-1)

    def test_exhausted_when_used_equals_max(self):
        """Test that used == max counts as exhausted."""
        assert make_task(ticket_used=3, max_tickets=3).is_exhausted

    def test_not_exhausted_below_max(self):
        assert not make_task(ticket_used=2, max_tickets=3).is_exhausted

    def test_exhausted_above_max(self):
        assert make_task(ticket_used=4, max_tickets=3).is_exhausted

    def test_project_id_from_unresolved_reference(self):
        task = make_task(project=Unresolved("p1"))
        assert task.project_id == "p1"

    def test_project_id_from_resolved_reference(self):
        task = make_task(project=Resolved(Project(id="p2", name="Website")))
        assert task.project_id == "p2"


class TestReference:
    """Tests for the populated-or-id reference variant."""

    def test_resolve_nested_record(self):
        ref = resolve_reference({"_id": "p1", "name": "Website"}, lambda raw: Project(id=raw["_id"], name=raw["name"]))

        assert isinstance(ref, Resolved)
        assert ref.id == "p1"
        assert reference_name(ref) == "Website"

    def test_resolve_bare_id(self):
        ref = resolve_reference("p1", lambda raw: pytest.fail("factory must not be called"))

        assert ref == Unresolved("p1")
        assert reference_id(ref) == "p1"
        assert reference_name(ref) == ""

    def test_resolve_missing(self):
        assert resolve_reference(None, dict) is None
        assert reference_id(None) is None
        assert reference_name(None) == ""


class TestTicketBadge:
    """Tests for the ticket usage badge."""

    def test_exhausted(self):
        assert ticket_badge(3, 3) == "exhausted"

    def test_warning_when_one_left(self):
        assert ticket_badge(2, 3) == "warning"

    def test_available(self):
        assert ticket_badge(0, 3) == "available"

    def test_zero_allowance_is_exhausted(self):
        assert ticket_badge(0, 0) == "exhausted"


class TestProgress:
    """Tests for progress percentage and colour bands."""

    def test_percentage(self):
        assert progress_percentage(3, 4) == 75.0

    def test_zero_max(self):
        assert progress_percentage(5, 0) == 0.0

    @pytest.mark.parametrize(
        "percentage,level",
        [(100, "complete"), (75, "high"), (50, "medium"), (25, "low"), (24.9, "none")],
    )
    def test_levels(self, percentage, level):
        assert progress_level(percentage) == level
