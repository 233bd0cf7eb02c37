"""Tests for the Flask API using the test client."""

import pytest

from writing_assistant.app import create_app
from writing_assistant.exceptions import AIServiceError
from writing_assistant.storage import DOCUMENT_GOAL_KEY


@pytest.fixture
def app(test_config, storage, fake_ai):
    return create_app(test_config, storage=storage, ai_service=fake_ai)


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


def _add(client, content="Voltaire and tolerance"):
    return client.post("/api/notes", json={"content": content}).get_json()["note"]


class TestHealth:
    """Test cases for health and config endpoints."""

    def test_health(self, client):
        assert client.get("/health").get_json()["status"] == "ok"
        data = client.get("/api/health").get_json()
        assert data["status"] == "ok"
        assert data["notes"] == 0
        assert data["storage"] == "memory"

    def test_config_has_no_secrets(self, client):
        data = client.get("/api/config").get_json()
        assert "secret_key" not in data["web"]
        assert data["llm"]["api_key"] in (True, False)


class TestContracts:
    """Test cases for the brainstorm and search endpoints."""

    def test_brainstorm(self, client, fake_ai):
        resp = client.post("/api/brainstorm", json={
            "documentContext": "ctx", "documentGoal": "goal", "noteContent": "Voltaire",
        })
        assert resp.status_code == 200
        assert resp.get_json() == {"ok": True, "bulletPoints": ["Expand: one", "Alternative: two"]}
        assert fake_ai.brainstorm_calls[0].document_goal == "goal"

    def test_brainstorm_defaults_goal_from_document(self, client, fake_ai, storage):
        storage.set(DOCUMENT_GOAL_KEY, "Essay on Kant")
        client.post("/api/brainstorm", json={"noteContent": "Sapere aude"})
        assert fake_ai.brainstorm_calls[0].document_goal == "Essay on Kant"

    @pytest.mark.parametrize("path", ["/api/brainstorm", "/api/search"])
    def test_missing_note_content(self, client, path):
        resp = client.post(path, json={"documentContext": "ctx"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Note content is required"

    def test_brainstorm_failure(self, client, fake_ai):
        fake_ai.brainstorm_error = AIServiceError("Failed to generate brainstorm ideas")
        resp = client.post("/api/brainstorm", json={"noteContent": "Voltaire"})
        assert resp.status_code == 500
        assert resp.get_json() == {"ok": False, "error": "Failed to generate brainstorm ideas"}

    def test_search(self, client):
        resp = client.post("/api/search", json={"noteContent": "Voltaire"})
        assert resp.status_code == 200
        results = resp.get_json()["webResults"]
        assert results == [{"title": "Result", "url": "https://example.edu/result", "description": "A source."}]


class TestNotes:
    """Test cases for note endpoints."""

    def test_add_and_list(self, client):
        resp = client.post("/api/notes", json={"content": "Voltaire and tolerance"})
        assert resp.status_code == 201
        note = resp.get_json()["note"]
        assert note["status"] == ["idle"]
        notes = client.get("/api/notes").get_json()["notes"]
        assert [n["id"] for n in notes] == [note["id"]]

    def test_add_empty_rejected(self, client):
        resp = client.post("/api/notes", json={"content": "  "})
        assert resp.status_code == 400
        assert resp.get_json()["ok"] is False

    def test_edit_flow(self, client):
        note = _add(client)
        data = client.post(f"/api/notes/{note['id']}/edit").get_json()["note"]
        assert data["isEditing"] is True
        assert data["draft"] == "Voltaire and tolerance"

        data = client.put(f"/api/notes/{note['id']}/draft", json={"draft": "Voltaire on tolerance"}).get_json()["note"]
        assert data["draft"] == "Voltaire on tolerance"
        assert data["content"] == "Voltaire and tolerance"

        data = client.post(f"/api/notes/{note['id']}/save").get_json()["note"]
        assert data["content"] == "Voltaire on tolerance"
        assert data["isEditing"] is False

    def test_cancel(self, client):
        note = _add(client)
        client.post(f"/api/notes/{note['id']}/edit")
        client.put(f"/api/notes/{note['id']}/draft", json={"draft": "discard"})
        data = client.post(f"/api/notes/{note['id']}/cancel").get_json()["note"]
        assert data["content"] == "Voltaire and tolerance"

    def test_analyze_search_and_clear(self, client):
        note = _add(client)
        data = client.post(f"/api/notes/{note['id']}/analyze").get_json()["note"]
        assert data["brainstormBullets"] == ["Expand: one", "Alternative: two"]
        assert data["isLoadingAI"] is False

        data = client.post(f"/api/notes/{note['id']}/search").get_json()["note"]
        assert data["webResults"][0]["title"] == "Result"

        client.delete(f"/api/notes/{note['id']}/brainstorm")
        data = client.delete(f"/api/notes/{note['id']}/web-results").get_json()["note"]
        assert data["brainstormBullets"] is None
        assert data["webResults"] is None
        assert data["content"] == "Voltaire and tolerance"

    def test_analyze_failure_returns_canned_bullets(self, client, fake_ai):
        fake_ai.brainstorm_error = RuntimeError("down")
        note = _add(client)
        data = client.post(f"/api/notes/{note['id']}/analyze").get_json()["note"]
        assert data["brainstormBullets"][0] == "Sorry, there was an error generating ideas."

    def test_combined(self, client):
        resp = client.post("/api/notes/combined", json={"content": "Voltaire"})
        assert resp.status_code == 201
        note = resp.get_json()["note"]
        assert note["brainstormBullets"] and note["webResults"]

    def test_combined_empty_rejected(self, client):
        assert client.post("/api/notes/combined", json={"content": ""}).status_code == 400

    def test_delete(self, client):
        note = _add(client)
        assert client.delete(f"/api/notes/{note['id']}").get_json()["deleted"] is True
        assert client.get("/api/notes").get_json()["notes"] == []
        assert client.get(f"/api/notes/{note['id']}").status_code == 404

    def test_unknown_note_404(self, client):
        assert client.post("/api/notes/missing/analyze").status_code == 404
        assert client.post("/api/notes/missing/edit").status_code == 404


class TestDocument:
    """Test cases for the document endpoints."""

    def test_get_defaults(self, client):
        data = client.get("/api/document").get_json()
        assert data["documentGoal"] == "Research paper on the enlightenment"
        assert data["documentContext"].startswith("The Age of Enlightenment")

    def test_update(self, client, storage):
        data = client.put("/api/document", json={
            "documentGoal": "Essay on Voltaire", "documentContext": "Voltaire wrote Candide.",
        }).get_json()
        assert data["documentGoal"] == "Essay on Voltaire"
        assert data["documentContext"] == "Voltaire wrote Candide."
        assert storage.get(DOCUMENT_GOAL_KEY) == "Essay on Voltaire"
