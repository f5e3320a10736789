"""Shared fixtures: an API-shaped snapshot payload and a file holding it."""

import json
import tempfile
from pathlib import Path

import pytest


@pytest.fixture
def sample_payload():
    """A snapshot as the tracker API returns it."""
    website = {"_id": "p1", "name": "Website", "clientName": "Acme", "status": "active"}
    return {
        "projects": [
            {
                "_id": "p1",
                "name": "Website",
                "clientName": "Acme",
                "status": "active",
                "startDate": "2026-01-05T00:00:00.000Z",
                "deliveryDate": "2026-06-30T00:00:00.000Z",
                "tasksCount": 3,
                "completedTasks": 1,
                "totalTickets": 2,
                "createdAt": "2026-01-01T09:00:00.000Z",
                "updatedAt": "2026-03-01T09:00:00.000Z",
            },
            {
                "_id": "p2",
                "name": "Mobile App",
                "clientName": "Globex",
                "status": "pending",
                "tasksCount": 1,
                "completedTasks": 0,
                "totalTickets": 0,
            },
        ],
        "tasks": [
            {
                "_id": "t1",
                "taskName": "Home page",
                "projectId": website,
                "assignedDeveloper": {"_id": "u1", "name": "Alice", "email": "alice@example.com", "role": "user"},
                "status": "done",
                "priority": "high",
                "ticketUsed": 2,
                "maxTickets": 2,
                "createdAt": "2026-03-05T10:00:00.000Z",
                "updatedAt": "2026-03-09T10:00:00.000Z",
            },
            {
                "_id": "t2",
                "taskName": "about page",
                "projectId": "p1",
                "status": "in_progress",
                "ticketUsed": 0,
                "maxTickets": 2,
                "createdAt": "2026-02-01T10:00:00.000Z",
                "updatedAt": "2026-02-20T10:00:00.000Z",
                "dueDate": "2026-03-12T17:00:00.000Z",
            },
            {
                "_id": "t3",
                "taskName": "Onboarding flow",
                "projectId": {"_id": "p2", "name": "Mobile App"},
                "status": "to_do",
                "priority": "urgent",
                "ticketUsed": 1,
                "maxTickets": 2,
                "createdAt": "2026-03-08T10:00:00.000Z",
                "updatedAt": "2026-03-08T10:00:00.000Z",
            },
        ],
        "tickets": [
            {
                "_id": "k1",
                "taskId": "t1",
                "requestedBy": {"_id": "u3", "name": "Carol", "role": "user"},
                "issueType": "dev_bug",
                "category": "layout",
                "description": "Hero image overflows on mobile",
                "priority": "high",
                "status": "open",
                "createdAt": "2026-03-07T08:00:00.000Z",
            },
            {
                "_id": "k2",
                "taskId": {"_id": "t1", "taskName": "Home page", "projectId": "p1"},
                "requestedBy": "u3",
                "issueType": "change_request",
                "category": "content",
                "description": "Update footer copy",
                "priority": "low",
                "status": "resolved",
                "createdAt": "2026-03-08T08:00:00.000Z",
            },
        ],
    }


@pytest.fixture
def temp_path():
    """A temporary file path that does not exist yet."""
    with tempfile.NamedTemporaryFile(mode="w", delete=False, suffix=".json") as f:
        temp_path = f.name
    # Delete the file immediately - we just need the path
    Path(temp_path).unlink()
    yield temp_path
    # Cleanup
    path = Path(temp_path)
    if path.exists():
        path.unlink()


@pytest.fixture
def snapshot_file(temp_path, sample_payload):
    """Path of a snapshot file holding sample_payload."""
    with open(temp_path, "w") as f:
        json.dump(sample_payload, f)
    return temp_path
