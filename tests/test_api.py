"""Tests for the HTTP routes."""

import os

import pytest
from fastapi.testclient import TestClient

from notebuilder import database
from notebuilder.config import settings
from notebuilder.main import app

LECTURE = (
    "# Cells\n"
    "The cell is the key unit\n"
    "Mitochondria means powerhouse"
)


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Test client backed by a temporary database and sessions root."""
    monkeypatch.setattr(database, "DB_PATH", str(tmp_path / "test.db"))
    monkeypatch.setattr(settings, "sessions_root", str(tmp_path / "sessions"))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def session_id(client):
    response = client.post("/api/sessions", json={"title": "Biology"})
    assert response.status_code == 200
    return response.json()["id"]


class TestSessions:
    def test_create_and_get(self, client, session_id):
        data = client.get(f"/api/sessions/{session_id}").json()
        assert data["title"] == "Biology"
        assert data["markup"] == ""
        assert data["data_dir"].endswith(f"session_{session_id:04d}")
        assert os.path.isdir(os.path.join(data["data_dir"], "exports"))

    def test_list(self, client, session_id):
        data = client.get("/api/sessions").json()
        assert [s["id"] for s in data] == [session_id]

    def test_missing_session(self, client):
        assert client.get("/api/sessions/999").status_code == 404
        assert client.get("/api/sessions/999/notes").status_code == 404


class TestSources:
    def test_kind_inferred_from_extension(self, client, session_id):
        response = client.post(
            f"/api/sessions/{session_id}/sources",
            json={"name": "deck.pptx"},
        )
        assert response.status_code == 200
        assert response.json()["kind"] == "slides"
        assert response.json()["content"] is None

    def test_unsupported_extension(self, client, session_id):
        response = client.post(
            f"/api/sessions/{session_id}/sources", json={"name": "paper.pdf"}
        )
        assert response.status_code == 400

    def test_explicit_kind(self, client, session_id):
        client.post(
            f"/api/sessions/{session_id}/sources",
            json={"name": "paste", "kind": "text", "content": "hello"},
        )
        data = client.get(f"/api/sessions/{session_id}/sources").json()
        assert [(s["name"], s["kind"]) for s in data] == [("paste", "text")]

    def test_missing_session(self, client):
        response = client.post("/api/sessions/999/sources", json={"name": "a.txt"})
        assert response.status_code == 404


class TestNotes:
    @pytest.fixture
    def with_lecture(self, client, session_id):
        client.post(
            f"/api/sessions/{session_id}/sources",
            json={"name": "lecture.txt", "content": LECTURE},
        )
        return session_id

    def test_fresh_session_shows_placeholder(self, client, session_id):
        data = client.get(f"/api/sessions/{session_id}/notes").json()
        assert data["markup"] == ""
        assert data["plain"] == "Provide input or upload files to generate notes."

    def test_generate(self, client, with_lecture):
        response = client.post(
            f"/api/sessions/{with_lecture}/notes/generate",
            json={"style": "simplified", "highlights": ["keyPoints"]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["markup"] == (
            "<h2>Cells</h2><ul><li>The cell is the <strong>key</strong> unit</li>"
            "<li>Mitochondria means powerhouse</li></ul>"
        )
        assert "- The cell is the **key** unit" in data["markdown"]

        stored = client.get(f"/api/sessions/{with_lecture}").json()
        assert stored["markup"] == data["markup"]

    def test_generate_rejects_unknown_style(self, client, with_lecture):
        response = client.post(
            f"/api/sessions/{with_lecture}/notes/generate", json={"style": "verbose"}
        )
        assert response.status_code == 422

    def test_edit_then_regenerate(self, client, with_lecture):
        client.post(f"/api/sessions/{with_lecture}/notes/generate", json={})
        client.put(
            f"/api/sessions/{with_lecture}/notes",
            json={"markup": "<h2>Edited</h2><ul><li>new fact</li></ul>"},
        )
        response = client.post(
            f"/api/sessions/{with_lecture}/notes/regenerate",
            json={"style": "detailed", "highlights": []},
        )
        markup = response.json()["markup"]
        assert "<li>Edited.</li>" in markup
        assert "<li>new fact.</li>" in markup
        assert markup.startswith("<h2>Cells</h2>")

    def test_custom_instructions(self, client, with_lecture):
        response = client.post(
            f"/api/sessions/{with_lecture}/notes/generate",
            json={"custom_instructions": "focus on dates"},
        )
        assert response.json()["markup"].startswith(
            "<p><em>Applied instructions:</em> focus on dates</p>"
        )


class TestExports:
    def test_download_markdown(self, client, session_id):
        client.post(
            f"/api/sessions/{session_id}/sources",
            json={"name": "lecture.txt", "content": LECTURE},
        )
        client.post(f"/api/sessions/{session_id}/notes/generate", json={})
        response = client.get(f"/api/sessions/{session_id}/export/markdown")
        assert response.status_code == 200
        assert 'filename="notes.md"' in response.headers["content-disposition"]
        assert response.text.startswith("## Cells")

        data_dir = client.get(f"/api/sessions/{session_id}").json()["data_dir"]
        assert os.path.exists(os.path.join(data_dir, "exports", "notes.md"))

    def test_download_plain_of_fresh_session(self, client, session_id):
        response = client.get(f"/api/sessions/{session_id}/export/plain")
        assert response.text == "Provide input or upload files to generate notes."

    def test_unknown_kind(self, client, session_id):
        response = client.get(f"/api/sessions/{session_id}/export/pdf")
        assert response.status_code == 400

    def test_print(self, client, session_id):
        response = client.get(f"/api/sessions/{session_id}/print")
        assert response.status_code == 200
        assert response.text.startswith("<!doctype html>")
