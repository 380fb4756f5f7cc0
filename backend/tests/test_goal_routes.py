import json
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from conftest import TODAY
from main import app
from models import Goal, Task
from routes.goal_routes import get_source


@pytest.fixture
def client(db):
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def goal(db):
    g = Goal(
        title="Launch side project",
        success_criteria=json.dumps([
            {"id": "c1", "description": "Landing page live", "is_completed": True},
            {"id": "c2", "description": "First 10 users", "is_completed": False},
        ]),
        created_at=datetime.now(timezone.utc) - timedelta(days=10),
        last_activity_at=datetime.now(timezone.utc),
    )
    db.add(g)
    db.commit()
    db.add_all([
        Task(title="Write copy", status="Done", goal_id=g.id),
        Task(title="Deploy", status="Done", goal_id=g.id),
        Task(title="Tweet", status="NotStarted", goal_id=g.id),
        Task(title="Email list", status="InProgress", goal_id=g.id),
    ])
    db.commit()
    return g


def test_health_check(client):
    resp = client.get("/api/v1/health-check")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_goal_progress(client, goal):
    resp = client.get(f"/api/v1/goals/{goal.id}/progress")
    assert resp.status_code == 200
    data = resp.json()
    assert data["criteria"] == {"completed": 1, "total": 2, "percentage": 50}
    assert data["tasks"] == {"completed": 2, "total": 4, "percentage": 50}
    assert data["metrics"] == {"atTarget": 0, "total": 0, "percentage": 0}
    assert data["habits"]["streakDays"] == 0
    assert data["overall"] == 50


def test_goal_progress_not_found(client):
    resp = client.get("/api/v1/goals/999/progress")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Goal not found"


def test_goal_linked_counts(client, goal):
    resp = client.get(f"/api/v1/goals/{goal.id}/linked-counts")
    assert resp.status_code == 200
    assert resp.json() == {"tasks": 4, "metrics": 0, "habits": 0}


def test_goal_health(client, goal):
    resp = client.get(f"/api/v1/goals/{goal.id}/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["progress"]["overall"] == 50
    assert data["health"]["status"] == "healthy"
    assert data["health"]["momentum"] == "active"
    assert data["health"]["daysRemaining"] is None


def test_goal_hierarchy(client, goal, db):
    child = Goal(title="Write launch post", parent_goal_id=goal.id)
    db.add(child)
    db.commit()

    resp = client.get("/api/v1/goals/hierarchy")
    assert resp.status_code == 200
    tree = resp.json()
    assert len(tree) == 1
    assert tree[0]["progress"] == 50
    assert tree[0]["children"][0]["title"] == "Write launch post"


def test_preview_progress_accepts_camel_case(client):
    payload = {
        "goal": {"successCriteria": [{"description": "a", "isCompleted": True}, "b ✓"]},
        "tasks": [{"status": "Done"}, {"status": "Blocked"}],
        "metrics": [{"currentValue": 5, "targetValue": 4, "direction": "Higher"}],
        "habits": [{
            "frequency": "Daily",
            "createdAt": "2025-01-01T00:00:00",
            "logs": [{"date": (TODAY - timedelta(days=n)).isoformat()} for n in range(30)],
        }],
        "today": TODAY.isoformat(),
    }
    resp = client.post("/api/v1/goals/progress/preview", json=payload)
    assert resp.status_code == 200
    data = resp.json()
    assert data["criteria"]["percentage"] == 100
    assert data["tasks"]["percentage"] == 50
    assert data["metrics"]["atTarget"] == 1
    assert data["habits"] == {"streakDays": 30, "consistency": 100, "total": 1, "score": 100}
    # (30 * 100 + 30 * 50 + 20 * 100 + 20 * 100) / 100
    assert data["overall"] == 85


def test_preview_progress_empty_goal(client):
    resp = client.post("/api/v1/goals/progress/preview", json={"goal": {}})
    assert resp.status_code == 200
    assert resp.json()["overall"] == 0


class BrokenLinksSource:
    def get_goal(self, goal_id):
        return {"id": goal_id, "success_criteria": [{"is_completed": True}]}

    def get_linked_tasks(self, goal_id):
        raise ConnectionError("edge function timed out")

    def get_linked_metrics(self, goal_id):
        return []

    def get_linked_habits(self, goal_id):
        return []


class DownSource:
    def get_goal(self, goal_id):
        raise ConnectionError("database unreachable")


def test_progress_falls_back_when_links_fail(client):
    app.dependency_overrides[get_source] = lambda: BrokenLinksSource()
    resp = client.get("/api/v1/goals/1/progress")
    assert resp.status_code == 200
    data = resp.json()
    assert data["overall"] == 100
    assert data["tasks"]["total"] == 0


def test_progress_500_when_goal_cannot_be_loaded(client):
    app.dependency_overrides[get_source] = lambda: DownSource()
    resp = client.get("/api/v1/goals/1/progress")
    assert resp.status_code == 500
    assert "database unreachable" in resp.json()["detail"]


@pytest.mark.parametrize("weight", ["inf", "-inf", "nan", 10 ** 400])
def test_preview_ignores_unusable_weights(client, weight):
    payload = {
        "goal": {"successCriteria": [{"isCompleted": True}], "progressConfig": {"criteria_weight": weight}},
        "tasks": [{"status": "Done"}, {"status": "Todo"}],
    }
    resp = client.post("/api/v1/goals/progress/preview", json=payload)
    assert resp.status_code == 200
    # default 30/30 weights
    assert resp.json()["overall"] == 75


class CountingSource(BrokenLinksSource):
    def __init__(self):
        self.goal_reads = 0

    def get_goal(self, goal_id):
        self.goal_reads += 1
        return super().get_goal(goal_id)

    def get_linked_tasks(self, goal_id):
        return [{"status": "Done"}]


def test_health_reads_goal_once(client):
    source = CountingSource()
    app.dependency_overrides[get_source] = lambda: source
    resp = client.get("/api/v1/goals/1/health")
    assert resp.status_code == 200
    assert resp.json()["progress"]["overall"] == 100
    assert source.goal_reads == 1
