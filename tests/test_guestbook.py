"""Tests for the public guestbook endpoints."""

import hashlib
from datetime import datetime, timezone

from guestbook.model import GuestbookEntry


def add_entry(db, name, message, visible=True, created_at=None):
    entry = GuestbookEntry(name=name, message=message, visible=visible, ip_hash="x" * 64)
    if created_at:
        entry.created_at = created_at
    db.add(entry)
    db.commit()
    return entry


class TestListEntries:
    def test_empty_guestbook(self, client):
        response = client.get("/api/guestbook")
        assert response.status_code == 200
        assert response.json() == {"entries": []}

    def test_only_visible_entries_newest_first(self, client, db_session):
        add_entry(db_session, "Old", "first", created_at=datetime(2025, 1, 1, tzinfo=timezone.utc))
        add_entry(db_session, "New", "second", created_at=datetime(2026, 1, 1, tzinfo=timezone.utc))
        add_entry(db_session, "Hidden", "spam", visible=False)

        response = client.get("/api/guestbook")

        assert response.status_code == 200
        entries = response.json()["entries"]
        assert [e["name"] for e in entries] == ["New", "Old"]

    def test_public_entries_do_not_expose_ip_hash(self, client, db_session):
        add_entry(db_session, "Adina", "hello")

        entry = client.get("/api/guestbook").json()["entries"][0]

        assert set(entry) == {"id", "name", "message", "createdAt"}


class TestCreateEntry:
    def test_create_entry(self, client, db_session):
        response = client.post("/api/guestbook", json={"name": "  Keegan ", "message": "SO COOL!"})

        assert response.status_code == 201
        entry = response.json()["entry"]
        assert entry["name"] == "Keegan"
        assert entry["message"] == "SO COOL!"
        assert "createdAt" in entry
        assert "ipHash" not in entry

        stored = db_session.query(GuestbookEntry).one()
        assert stored.visible is True
        assert stored.ip_hash == hashlib.sha256(b"testclient").hexdigest()

    def test_new_entry_is_listed(self, client):
        client.post("/api/guestbook", json={"name": "Galya", "message": "Bravo!"})

        entries = client.get("/api/guestbook").json()["entries"]

        assert len(entries) == 1
        assert entries[0]["name"] == "Galya"

    def test_blank_name_is_rejected(self, client):
        response = client.post("/api/guestbook", json={"name": "   ", "message": "hi"})

        assert response.status_code == 400
        assert response.json() == {"error": {"name": "Name is required"}}

    def test_name_too_long(self, client):
        response = client.post("/api/guestbook", json={"name": "a" * 81, "message": "hi"})

        assert response.status_code == 400
        assert response.json()["error"]["name"] == "Name must be 80 characters or less"

    def test_message_too_long(self, client):
        response = client.post("/api/guestbook", json={"name": "a", "message": "m" * 201})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Message must be 200 characters or less"

    def test_html_is_rejected(self, client):
        response = client.post(
            "/api/guestbook",
            json={"name": "<b>bold</b>", "message": "<script>alert(1)</script>"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == {
            "name": "Name contains invalid characters",
            "message": "Message contains invalid characters",
        }

    def test_missing_fields(self, client):
        response = client.post("/api/guestbook", json={})

        assert response.status_code == 400
        assert set(response.json()["error"]) == {"name", "message"}

    def test_invalid_json(self, client):
        response = client.post(
            "/api/guestbook",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert "body" in response.json()["error"]
