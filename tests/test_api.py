"""
HTTP surface smoke tests.
Run: pytest tests/ -v
"""
import pytest
from fastapi.testclient import TestClient

from app import main
from app.completion import CompletionClient
from app.config import Settings
from app.search import FALLBACK_SOURCES, SourceSearchClient


@pytest.fixture
def client(monkeypatch):
    # No credentials: every turn takes the offline fallback paths.
    offline = Settings()
    monkeypatch.setattr(main.orchestrator, "search_client", SourceSearchClient(offline))
    monkeypatch.setattr(main.orchestrator, "completion_client", CompletionClient(offline))
    return TestClient(main.app)


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_config_reports_issues(client):
    data = client.get("/config").json()
    assert "is_valid" in data
    assert isinstance(data["issues"], list)


def test_start_session_returns_greeting(client):
    resp = client.post("/sessions")
    assert resp.status_code == 200
    data = resp.json()
    assert data["session_id"]
    assert len(data["turns"]) == 1
    assert data["turns"][0]["role"] == "assistant"


def test_chat_small_talk(client):
    resp = client.post("/chat", json={"message": "hello"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["small_talk"] is True
    assert data["result"] is None
    assert data["session_id"]


def test_chat_symptom_turn(client):
    resp = client.post("/chat", json={"message": "I have a high fever and a cough"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["small_talk"] is False
    result = data["result"]
    assert result["analysis"]["urgencyLevel"] == "high"
    assert [s["url"] for s in result["sources"]] == [s.url for s in FALLBACK_SOURCES]
    assert data["reply"] == result["formatted_text"]


def test_chat_continues_session(client):
    session_id = client.post("/sessions").json()["session_id"]

    client.post("/chat", json={"message": "I have a cough", "session_id": session_id})
    turns = client.get(f"/sessions/{session_id}").json()["turns"]

    assert [t["role"] for t in turns] == ["assistant", "user", "assistant"]
    assert turns[2]["sources"]


def test_unknown_session(client):
    assert client.get("/sessions/nope").status_code == 404
    assert client.post("/chat", json={"message": "hi", "session_id": "nope"}).status_code == 404


def test_chat_rejects_blank_and_missing(client):
    assert client.post("/chat", json={"message": "   "}).status_code == 422
    assert client.post("/chat").status_code == 422


def test_delete_session(client):
    session_id = client.post("/sessions").json()["session_id"]

    assert client.delete(f"/sessions/{session_id}").status_code == 204
    assert client.get(f"/sessions/{session_id}").status_code == 404
    assert client.delete(f"/sessions/{session_id}").status_code == 404
