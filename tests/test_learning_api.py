"""
Tests for pattern, progress, quiz and statistics endpoints.
"""

from datetime import datetime, timezone

from fastapi import Depends
from sqlalchemy.orm import Session

from patternlab.core.dependencies import get_db, get_progress_store
from patternlab.services.progress_store import ProgressStore, ProgressStoreError


def set_status(client, headers, pattern_id, status):
    return client.put(
        f"/api/v1/patterns/{pattern_id}/progress",
        json={"status": status},
        headers=headers,
    )


def submit_answer(client, headers, pattern_id, is_correct, question_type="implementation"):
    return client.post(
        "/api/v1/learning/quiz-answers",
        json={
            "pattern_id": pattern_id,
            "question_type": question_type,
            "answer": "my answer",
            "is_correct": is_correct,
        },
        headers=headers,
    )


# =============================================================================
# Catalog
# =============================================================================

def test_patterns_require_authentication(client):
    assert client.get("/api/v1/patterns").status_code == 401
    assert client.get("/api/v1/learning/stats").status_code == 401


def test_list_patterns(client, auth_headers):
    response = client.get("/api/v1/patterns", headers=auth_headers)

    assert response.status_code == 200
    assert len(response.json()) == 22


def test_list_patterns_filtered(client, auth_headers):
    structural = client.get("/api/v1/patterns", params={"category": "structural"}, headers=auth_headers)
    searched = client.get("/api/v1/patterns", params={"q": "factory"}, headers=auth_headers)
    bad_category = client.get("/api/v1/patterns", params={"category": "functional"}, headers=auth_headers)

    assert len(structural.json()) == 7
    assert {p["category"] for p in structural.json()} == {"structural"}
    assert [p["id"] for p in searched.json()] == ["factory-method", "abstract-factory"]
    assert bad_category.status_code == 422


def test_pattern_detail_includes_lesson_content(client, auth_headers):
    response = client.get("/api/v1/patterns/singleton", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Singleton"
    assert data["category"] == "creational"
    assert "<h1>Singleton</h1>" in data["explanation"]["content_html"]
    assert data["question"] is not None
    assert data["solution_code"]


def test_pattern_detail_without_lesson_files(client, auth_headers):
    response = client.get("/api/v1/patterns/visitor", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["explanation"] is None
    assert response.json()["overview"] == "Visitor pattern overview."


def test_unknown_pattern_is_404(client, auth_headers):
    assert client.get("/api/v1/patterns/missing", headers=auth_headers).status_code == 404
    assert client.get("/api/v1/patterns/missing/progress", headers=auth_headers).status_code == 404


# =============================================================================
# Progress
# =============================================================================

def test_progress_defaults_to_not_started(client, auth_headers):
    response = client.get("/api/v1/patterns/adapter/progress", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {
        "pattern_id": "adapter",
        "status": "not_started",
        "next_statuses": ["in_progress"],
        "progress": None,
    }


def test_progress_transitions(client, auth_headers):
    started = set_status(client, auth_headers, "adapter", "in_progress")
    assert started.status_code == 200
    assert started.json()["status"] == "in_progress"
    assert set(started.json()["next_statuses"]) == {"completed", "not_started"}
    assert started.json()["progress"]["started_at"] is not None

    completed = set_status(client, auth_headers, "adapter", "completed")
    assert completed.status_code == 200
    assert completed.json()["next_statuses"] == ["in_progress"]
    assert completed.json()["progress"]["completed_at"] is not None

    rows = client.get("/api/v1/learning/progress", headers=auth_headers).json()
    assert [(r["pattern_id"], r["status"]) for r in rows] == [("adapter", "completed")]


def test_disallowed_transition_is_409(client, auth_headers):
    skipped = set_status(client, auth_headers, "adapter", "completed")

    assert skipped.status_code == 409
    assert client.get("/api/v1/learning/progress", headers=auth_headers).json() == []


def test_invalid_status_is_422(client, auth_headers):
    assert set_status(client, auth_headers, "adapter", "finished").status_code == 422


def test_progress_is_per_user(client, auth_headers, login):
    other = login("other@example.com")
    set_status(client, auth_headers, "adapter", "in_progress")

    response = client.get("/api/v1/patterns/adapter/progress", headers=other)

    assert response.json()["status"] == "not_started"


# =============================================================================
# Quiz answers
# =============================================================================

def test_submit_quiz_answer(client, auth_headers):
    response = submit_answer(client, auth_headers, "singleton", True)

    assert response.status_code == 201
    assert response.json()["pattern_id"] == "singleton"
    assert response.json()["question_type"] == "implementation"


def test_quiz_answer_for_unknown_pattern_is_404(client, auth_headers):
    assert submit_answer(client, auth_headers, "missing", True).status_code == 404


def test_quiz_answer_history_and_pattern_stats(client, auth_headers):
    submit_answer(client, auth_headers, "singleton", True)
    submit_answer(client, auth_headers, "singleton", False, question_type="advanced")
    submit_answer(client, auth_headers, "adapter", True)

    answers = client.get("/api/v1/learning/quiz-answers", headers=auth_headers).json()
    filtered = client.get(
        "/api/v1/learning/quiz-answers", params={"pattern_id": "singleton"}, headers=auth_headers
    ).json()
    totals = client.get("/api/v1/patterns/singleton/quiz-stats", headers=auth_headers).json()

    assert [a["pattern_id"] for a in answers] == ["adapter", "singleton", "singleton"]
    assert len(filtered) == 2
    assert totals == {"total": 2, "correct": 1}


# =============================================================================
# Statistics
# =============================================================================

def test_stats_for_new_user(client, auth_headers):
    response = client.get("/api/v1/learning/stats", headers=auth_headers)

    assert response.status_code == 200
    stats = response.json()
    assert stats["total_patterns"] == 22
    assert stats["not_started_count"] == 22
    assert stats["completion_rate"] == 0
    assert stats["quiz_stats"] == {"total_answers": 0, "correct_answers": 0, "correct_rate": 0, "by_pattern": []}
    assert stats["recent_activity"] == []


def test_stats_after_learning(client, auth_headers):
    set_status(client, auth_headers, "singleton", "in_progress")
    set_status(client, auth_headers, "singleton", "completed")
    set_status(client, auth_headers, "adapter", "in_progress")
    submit_answer(client, auth_headers, "singleton", True)
    submit_answer(client, auth_headers, "singleton", True)
    submit_answer(client, auth_headers, "adapter", False)

    stats = client.get("/api/v1/learning/stats", headers=auth_headers).json()

    assert stats["completed_count"] == 1
    assert stats["in_progress_count"] == 1
    assert stats["not_started_count"] == 20
    assert stats["completion_rate"] == 5  # 1 / 22 = 4.5%
    assert stats["category_stats"]["creational"] == {"total": 5, "completed": 1, "in_progress": 0, "not_started": 4}
    assert stats["category_stats"]["structural"]["in_progress"] == 1
    assert stats["quiz_stats"]["correct_rate"] == 67
    by_pattern = {p["pattern_id"]: p for p in stats["quiz_stats"]["by_pattern"]}
    assert by_pattern["singleton"]["correct_rate"] == 100
    assert by_pattern["adapter"]["correct_rate"] == 0
    assert [h["action"] for h in stats["recent_activity"]] == ["start", "complete", "start"]


def test_history_endpoint(client, auth_headers):
    set_status(client, auth_headers, "observer", "in_progress")
    set_status(client, auth_headers, "observer", "not_started")

    history = client.get("/api/v1/learning/history", params={"limit": 1}, headers=auth_headers).json()

    assert [(h["pattern_id"], h["action"]) for h in history] == [("observer", "view")]


def test_history_limit_is_validated(client, auth_headers):
    assert client.get("/api/v1/learning/history", params={"limit": 0}, headers=auth_headers).status_code == 422


def test_activity_counts_todays_events(client, auth_headers):
    set_status(client, auth_headers, "observer", "in_progress")
    set_status(client, auth_headers, "observer", "completed")
    today = datetime.now(timezone.utc).date().isoformat()

    activity = client.get("/api/v1/learning/activity", params={"days": 7}, headers=auth_headers).json()

    assert activity == [{"date": today, "count": 2}]


def test_activity_days_is_validated(client, auth_headers):
    assert client.get("/api/v1/learning/activity", params={"days": 0}, headers=auth_headers).status_code == 422
    assert client.get("/api/v1/learning/activity", params={"days": 731}, headers=auth_headers).status_code == 422


def test_dashboard(client, auth_headers):
    set_status(client, auth_headers, "singleton", "in_progress")
    submit_answer(client, auth_headers, "singleton", True)

    response = client.get("/api/v1/learning/dashboard", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert len(data["progress"]) == 1
    assert data["stats"]["in_progress_count"] == 1
    assert len(data["quiz_answers"]) == 1
    assert [h["action"] for h in data["history"]] == ["start"]
    assert sum(day["count"] for day in data["activity"]) == 1


# =============================================================================
# Store failures
# =============================================================================

class FailingStore:
    """Store whose every call fails the way a lost database connection would."""

    def _fail(self, operation):
        raise ProgressStoreError(operation, RuntimeError("connection lost"))

    def get_all_learning_progress(self, user_id):
        self._fail("get_all_learning_progress")

    def get_learning_progress(self, user_id, pattern_id):
        self._fail("get_learning_progress")

    def get_quiz_answers(self, user_id, pattern_id=None):
        self._fail("get_quiz_answers")

    def record_quiz_answer(self, *args):
        self._fail("record_quiz_answer")


def test_load_failure_is_reported_not_emptied(app, client, auth_headers):
    app.dependency_overrides[get_progress_store] = FailingStore

    stats = client.get("/api/v1/learning/stats", headers=auth_headers)
    dashboard = client.get("/api/v1/learning/dashboard", headers=auth_headers)

    assert stats.status_code == 503
    assert stats.json() == {"detail": "Failed to load learning data"}
    assert dashboard.status_code == 503


def test_save_failure_is_reported(app, client, auth_headers):
    app.dependency_overrides[get_progress_store] = FailingStore

    response = submit_answer(client, auth_headers, "singleton", True)

    assert response.status_code == 503
    assert response.json() == {"detail": "Failed to save learning data"}


# =============================================================================
# Query counts
# =============================================================================

class CountingStore(ProgressStore):
    """Real store that counts full progress reads."""

    progress_reads = 0

    def get_all_learning_progress(self, user_id):
        CountingStore.progress_reads += 1
        return super().get_all_learning_progress(user_id)


def counting_store(db: Session = Depends(get_db)):
    return CountingStore(db)


def test_dashboard_reads_progress_once(app, client, auth_headers, monkeypatch):
    set_status(client, auth_headers, "singleton", "in_progress")
    monkeypatch.setattr(CountingStore, "progress_reads", 0)
    app.dependency_overrides[get_progress_store] = counting_store

    data = client.get("/api/v1/learning/dashboard", headers=auth_headers).json()

    assert CountingStore.progress_reads == 1
    assert len(data["progress"]) == 1
    assert data["stats"]["in_progress_count"] == 1
