"""Tests for the admin moderation endpoints."""

import pytest
from sqlalchemy.exc import OperationalError

from contact.model import ContactMessage
from database import get_db
from guestbook.model import GuestbookEntry
from newsletter.model import NewsletterSub
from main import app


@pytest.fixture
def entry(db_session):
    entry = GuestbookEntry(name="Adina", message="So proud", visible=True, ip_hash="a" * 64)
    db_session.add(entry)
    db_session.commit()
    return entry.id


@pytest.fixture
def contact_message(db_session):
    message = ContactMessage(name="Jane", email="jane@example.com", subject="Hi", message="Hello")
    db_session.add(message)
    db_session.commit()
    return message.id


@pytest.fixture
def subscriber_id(db_session):
    sub = NewsletterSub(email="reader@example.com", confirmed=True, confirm_token=None, unsub_token="u" * 64)
    db_session.add(sub)
    db_session.commit()
    return sub.id


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/api/admin/stats"),
        ("get", "/api/admin/guestbook"),
        ("patch", "/api/admin/guestbook/1"),
        ("delete", "/api/admin/guestbook/1"),
        ("get", "/api/admin/newsletter"),
        ("delete", "/api/admin/newsletter/1"),
        ("get", "/api/admin/contacts"),
        ("patch", "/api/admin/contacts/1"),
        ("delete", "/api/admin/contacts/1"),
    ],
)
def test_management_routes_require_token(client, method, path):
    response = getattr(client, method)(path)

    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required."}


def test_stats(client, admin_headers, db_session, entry, contact_message, subscriber_id):
    db_session.add(GuestbookEntry(name="Spam", message="buy now", visible=False, ip_hash="b" * 64))
    db_session.add(NewsletterSub(email="pending@example.com", confirm_token="c" * 64, unsub_token="d" * 64))
    db_session.commit()

    response = client.get("/api/admin/stats", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {
        "guestbook": {"total": 2, "visible": 1},
        "newsletter": {"total": 2, "confirmed": 1},
        "contacts": {"total": 1, "unread": 1},
    }


class TestGuestbookModeration:
    def test_list_includes_hidden_entries_and_ip_hash(self, client, admin_headers, db_session, entry):
        db_session.add(GuestbookEntry(name="Spam", message="buy now", visible=False, ip_hash="b" * 64))
        db_session.commit()

        response = client.get("/api/admin/guestbook", headers=admin_headers)

        assert response.status_code == 200
        entries = response.json()["entries"]
        assert len(entries) == 2
        assert {e["visible"] for e in entries} == {True, False}
        assert all("ipHash" in e for e in entries)

    def test_toggle_visibility_flips_back_on_second_call(self, client, admin_headers, entry):
        first = client.patch(f"/api/admin/guestbook/{entry}", headers=admin_headers)
        assert first.status_code == 200
        assert first.json() == {
            "entry": {"id": entry, "name": "Adina", "visible": False},
            "message": "Entry is now hidden.",
        }
        assert client.get("/api/guestbook").json()["entries"] == []

        second = client.patch(f"/api/admin/guestbook/{entry}", headers=admin_headers)
        assert second.json()["entry"]["visible"] is True
        assert second.json()["message"] == "Entry is now visible."
        assert len(client.get("/api/guestbook").json()["entries"]) == 1

    def test_toggle_missing_entry(self, client, admin_headers):
        response = client.patch("/api/admin/guestbook/999", headers=admin_headers)

        assert response.status_code == 404
        assert response.json() == {"error": "Entry not found."}

    def test_invalid_id(self, client, admin_headers):
        response = client.patch("/api/admin/guestbook/abc", headers=admin_headers)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid entry ID."}

    def test_delete_entry(self, client, admin_headers, entry):
        response = client.delete(f"/api/admin/guestbook/{entry}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Entry permanently deleted.", "id": entry}
        assert client.delete(f"/api/admin/guestbook/{entry}", headers=admin_headers).status_code == 404


class TestNewsletterManagement:
    def test_list_subscribers(self, client, admin_headers, subscriber_id):
        response = client.get("/api/admin/newsletter", headers=admin_headers)

        assert response.status_code == 200
        subscribers = response.json()["subscribers"]
        assert len(subscribers) == 1
        assert subscribers[0]["email"] == "reader@example.com"
        assert set(subscribers[0]) == {"id", "email", "confirmed", "createdAt", "confirmedAt", "unsubAt"}

    def test_delete_subscriber(self, client, admin_headers, subscriber_id):
        response = client.delete(f"/api/admin/newsletter/{subscriber_id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Subscriber removed.", "id": subscriber_id}
        assert client.get("/api/admin/newsletter", headers=admin_headers).json()["subscribers"] == []

    def test_delete_missing_subscriber(self, client, admin_headers):
        response = client.delete("/api/admin/newsletter/42", headers=admin_headers)

        assert response.status_code == 404
        assert response.json() == {"error": "Subscriber not found."}

    def test_invalid_subscriber_id(self, client, admin_headers):
        response = client.delete("/api/admin/newsletter/x1", headers=admin_headers)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid subscriber ID."}


class TestContactManagement:
    def test_list_contacts(self, client, admin_headers, contact_message):
        response = client.get("/api/admin/contacts", headers=admin_headers)

        assert response.status_code == 200
        messages = response.json()["messages"]
        assert len(messages) == 1
        assert messages[0]["email"] == "jane@example.com"
        assert messages[0]["read"] is False

    def test_toggle_read(self, client, admin_headers, contact_message):
        first = client.patch(f"/api/admin/contacts/{contact_message}", headers=admin_headers)
        assert first.json() == {"message": "Marked as read.", "contact": {"id": contact_message, "read": True}}

        second = client.patch(f"/api/admin/contacts/{contact_message}", headers=admin_headers)
        assert second.json()["message"] == "Marked as unread."
        assert second.json()["contact"]["read"] is False

    def test_delete_contact(self, client, admin_headers, contact_message):
        response = client.delete(f"/api/admin/contacts/{contact_message}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Contact message deleted.", "id": contact_message}

    def test_missing_contact(self, client, admin_headers):
        assert client.patch("/api/admin/contacts/7", headers=admin_headers).json() == {"error": "Message not found."}
        assert client.delete("/api/admin/contacts/7", headers=admin_headers).status_code == 404

    @pytest.mark.parametrize("method", ["patch", "delete"])
    def test_invalid_message_id(self, client, admin_headers, method):
        response = getattr(client, method)("/api/admin/contacts/abc", headers=admin_headers)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid message ID."}


class BrokenSession:
    """Session stand-in whose queries fail the way a dropped connection does."""

    def __init__(self):
        self.rolled_back = False

    def query(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


@pytest.fixture
def broken_session():
    session = BrokenSession()
    app.dependency_overrides[get_db] = lambda: session
    yield session
    app.dependency_overrides.pop(get_db, None)


@pytest.mark.parametrize(
    "method, path, error",
    [
        ("get", "/api/admin/stats", "Failed to fetch stats."),
        ("get", "/api/admin/guestbook", "Failed to fetch guestbook entries."),
        ("patch", "/api/admin/guestbook/1", "Failed to update entry."),
        ("delete", "/api/admin/contacts/1", "Failed to delete message."),
    ],
)
def test_database_errors_roll_back_and_return_generic_500(client, admin_headers, broken_session, method, path, error):
    response = getattr(client, method)(path, headers=admin_headers)

    assert response.status_code == 500
    assert response.json() == {"error": error}
    assert broken_session.rolled_back is True
