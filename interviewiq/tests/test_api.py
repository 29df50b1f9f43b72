"""
API tests for the InterviewIQ backend.

The app runs against an in-memory store and a small question bank with
question timers disabled, so every request is deterministic.
"""

import random

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, patch

from interviewiq.app import create_app
from interviewiq.common.config import AppConfig, AssessmentConfig, StorageConfig
from interviewiq.domain.questions import MemoryQuestionBank
from interviewiq.integrations.llm import LLMReply
from interviewiq.services import build_services
from interviewiq.storage.memory import MemoryStore
from interviewiq.tests.conftest import DATA_EXPERIENCED, WEB_FRESHER

ANSWERS = {q.id: q.correct_answer for q in WEB_FRESHER}
BASE = "/api/assessments/interview"


@pytest.fixture
def services():
    config = AppConfig(
        storage=StorageConfig(backend="memory"),
        assessment=AssessmentConfig(enable_question_timer=False),
    )
    return build_services(
        config,
        store=MemoryStore(),
        bank=MemoryQuestionBank(WEB_FRESHER + DATA_EXPERIENCED),
        rng=random.Random(5),
    )


@pytest.fixture
def client(services):
    with TestClient(create_app(services=services)) as test_client:
        yield test_client


def start(client, **overrides):
    body = {"level": "fresher", "domain": "Web Development", "email": "asha@x.io", "user_name": "Asha"}
    body.update(overrides)
    return client.post(f"{BASE}/sessions", json=body)


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "InterviewIQ" in response.json()["message"]


def test_catalog(client):
    data = client.get(f"{BASE}/catalog").json()["data"]

    assert data["domains"] == ["Data Science", "Web Development"]
    assert data["levels"] == ["experienced", "fresher"]
    assert data["questionCount"] == 5


def test_full_assessment(client):
    response = start(client)
    assert response.status_code == 201
    data = response.json()["data"]
    session_id = data["session"]["id"]
    question = data["question"]
    assert "correctAnswer" not in question
    assert data["timer"] is None

    for index in range(5):
        text = ANSWERS[question["id"]] if index < 3 else "wrong"
        response = client.post(f"{BASE}/sessions/{session_id}/answers", json={"answer": text, "time_spent": 10})
        assert response.status_code == 200
        result = response.json()["data"]
        question = result["nextQuestion"]

    assert result["completed"]
    assert result["session"]["totalScore"] == 30
    assert "endTime" in result["session"]
    assert result["report"]["eligibility"] == "Eligible"

    report = client.get(f"{BASE}/sessions/{session_id}/report").json()["data"]
    assert report["percentage"] == 60
    assert len(report["review"]) == 5

    user = client.get("/api/progress/users/asha@x.io").json()["data"]
    assert user["totalSessions"] == 1
    assert user["bestScore"] == 30

    summary = client.get("/api/progress/summary").json()["data"]
    assert summary["totalUsers"] == 1
    assert summary["totalSessions"] == 1


def test_current_question_and_draft(client):
    session_id = start(client).json()["data"]["session"]["id"]

    current = client.get(f"{BASE}/sessions/{session_id}/question").json()["data"]
    assert current["question"]["id"] in ANSWERS

    response = client.put(f"{BASE}/sessions/{session_id}/draft", json={"text": "partial"})
    assert response.status_code == 200


def test_unknown_session_is_404(client):
    response = client.get(f"{BASE}/sessions/missing")

    assert response.status_code == 404
    assert response.json()["code"] == "session_not_found"


def test_empty_pool_is_404_with_message(client):
    response = start(client, level="experienced", domain="Web Development")

    assert response.status_code == 404
    body = response.json()
    assert body["code"] == "no_questions_available"
    assert body["message"] == "Sorry, no questions available for experienced level in Web Development domain."


def test_answer_after_completion_is_409(client):
    session_id = start(client, level="experienced", domain="Data Science").json()["data"]["session"]["id"]
    for _ in range(2):
        client.post(f"{BASE}/sessions/{session_id}/answers", json={"answer": "guess"})

    response = client.post(f"{BASE}/sessions/{session_id}/answers", json={"answer": "again"})

    assert response.status_code == 409
    assert response.json()["code"] == "session_completed"


def test_invalid_request_is_422(client):
    response = client.post(f"{BASE}/sessions", json={"level": "fresher"})

    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


def test_restart_discards_session(client):
    session_id = start(client).json()["data"]["session"]["id"]

    assert client.delete(f"{BASE}/sessions/{session_id}").json()["data"]["removed"]
    assert client.get(f"{BASE}/sessions/{session_id}").status_code == 404


def test_logins(client, services):
    with patch.object(services.notifier, "send_login_notification", AsyncMock(return_value=False)) as notify:
        response = client.post("/api/progress/logins", json={"email": "asha@x.io", "user_name": "Asha"})
        client.post("/api/progress/logins", json={"email": "ravi@x.io", "user_name": "Ravi", "success": False})

    assert response.status_code == 201
    assert response.json()["data"]["login"]["email"] == "asha@x.io"
    notify.assert_awaited_once()

    logins = client.get("/api/progress/logins").json()["data"]
    assert [login["email"] for login in logins] == ["ravi@x.io", "asha@x.io"]


def test_unknown_user_is_404(client):
    assert client.get("/api/progress/users/nobody@x.io").status_code == 404


def test_assistant_chat_and_history(client, services):
    reply = LLMReply(text="Review HTTP status codes.")
    with patch.object(services.llm, "generate", AsyncMock(return_value=reply)):
        response = client.post("/api/assistant/chat", json={"prompt": "What should I study?"})

    data = response.json()["data"]
    assert data["reply"]["text"] == "Review HTTP status codes."

    histories = client.get("/api/assistant/history").json()["data"]
    assert histories[0]["id"] == data["historyId"]
    assert len(histories[0]["messages"]) == 2

    assert client.delete(f"/api/assistant/history/{data['historyId']}").status_code == 200
    assert client.delete(f"/api/assistant/history/{data['historyId']}").status_code == 404


def test_save_history(client):
    body = {"id": "c1", "title": "Prep", "messages": [{"role": "user", "content": "hi"}]}

    response = client.post("/api/assistant/history", json=body)

    assert response.status_code == 200
    assert response.json()["data"]["title"] == "Prep"
