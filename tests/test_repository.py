"""Comprehensive tests for SnapshotRepository."""

import pytest

from taskview.models import TaskStatus, TicketStatus
from taskview.repository import SnapshotRepository
from taskview.storage import JsonStorage


class TestSnapshotRepository:
    """Test suite for SnapshotRepository."""

    @pytest.fixture
    def repo(self, snapshot_file):
        """Create a SnapshotRepository over the sample snapshot."""
        return SnapshotRepository(JsonStorage(snapshot_file))

    @pytest.fixture
    def empty_repo(self, temp_path):
        return SnapshotRepository(JsonStorage(temp_path))

    def test_get_tasks_returns_all_in_order(self, repo):
        assert [t.id for t in repo.get_tasks()] == ["t1", "t2", "t3"]

    def test_get_tasks_empty(self, empty_repo):
        """Test get_tasks returns empty list when no snapshot exists."""
        assert empty_repo.get_tasks() == []

    def test_get_tasks_filter_by_project(self, repo):
        """Test that populated and bare project references both match."""
        assert [t.id for t in repo.get_tasks(project_id="p1")] == ["t1", "t2"]

    def test_get_tasks_filter_by_status(self, repo):
        assert [t.id for t in repo.get_tasks(status=TaskStatus.DONE)] == ["t1"]
        assert [t.id for t in repo.get_tasks(status="to_do")] == ["t3"]

    def test_get_tasks_combined_filters(self, repo):
        assert repo.get_tasks(project_id="p2", status="done") == []

    def test_get_task_existing(self, repo):
        task = repo.get_task("t2")
        assert task is not None
        assert task.name == "about page"

    def test_get_task_nonexistent(self, repo):
        """Test getting a non-existent task returns None."""
        assert repo.get_task("missing") is None

    def test_get_projects(self, repo):
        assert [p.name for p in repo.get_projects()] == ["Website", "Mobile App"]

    def test_get_project(self, repo):
        assert repo.get_project("p2").client_name == "Globex"
        assert repo.get_project("p9") is None

    def test_get_tickets_filter_by_task(self, repo):
        """Test that both ticket reference shapes match the task id."""
        assert [t.id for t in repo.get_tickets(task_id="t1")] == ["k1", "k2"]
        assert repo.get_tickets(task_id="t2") == []

    def test_get_tickets_filter_by_status(self, repo):
        assert [t.id for t in repo.get_tickets(status=TicketStatus.OPEN)] == ["k1"]

    def test_recent_tickets_newest_first(self, repo):
        assert [t.id for t in repo.recent_tickets()] == ["k2", "k1"]

    def test_recent_tickets_limit(self, repo):
        assert [t.id for t in repo.recent_tickets(limit=1)] == ["k2"]

    def test_recent_projects(self, repo):
        assert [p.id for p in repo.recent_projects(limit=1)] == ["p1"]

    def test_reads_latest_snapshot(self, repo):
        """Test that queries reflect a snapshot saved after construction."""
        repo.storage.delete()
        assert repo.get_tasks() == []
