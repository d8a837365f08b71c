"""Notification sink and auth gate."""

from bloodbank.models import Role
from bloodbank.records import AUTH_KEY


# ── 1. Notifications ────────────────────────────────────────────────


def test_post_is_unread(bank):
    note = bank.notifications.post("u1", "Title", "Body", "warning")
    assert note.read is False
    assert note.type.value == "warning"
    assert bank.notifications.unread_count("u1") == 1


def test_mark_read(bank):
    note = bank.notifications.post("u1", "Title", "Body")
    assert bank.notifications.mark_read(note.id).read is True
    assert bank.notifications.unread_count("u1") == 0
    assert bank.notifications.mark_read("missing") is None


def test_list_for_user_and_all(bank, clock):
    bank.notifications.post("u1", "a", "a")
    clock.advance(seconds=1)
    bank.notifications.post("u2", "b", "b")
    clock.advance(seconds=1)
    bank.notifications.post(None, "broadcast", "everyone")

    assert [n.title for n in bank.notifications.list_for_user("u1")] == ["a"]
    assert [n.title for n in bank.notifications.list_all()] == ["broadcast", "b", "a"]
    assert bank.notifications.unread_count("u2") == 1


# ── 2. Auth ─────────────────────────────────────────────────────────


def test_login_user_wrong_password(bank, donor):
    assert bank.auth.login_user("john@example.com", "wrongpass") is None
    assert bank.auth.current_session() is None


def test_login_user(bank, donor):
    session = bank.auth.login_user("john@example.com", "password")
    assert session.role == Role.user
    assert session.subject_id == donor.id
    assert not session.is_admin
    assert bank.auth.current_session() == session


def test_login_unknown_email(bank):
    assert bank.auth.login_user("nobody@example.com", "password") is None


def test_login_admin_and_logout(bank, backend):
    bank.seed_demo()
    assert bank.auth.login_admin("admin", "nope") is None
    session = bank.auth.login_admin("admin", "admin123")
    assert session.role == Role.admin and session.is_admin
    assert backend.has(AUTH_KEY)

    bank.auth.logout()
    assert not backend.has(AUTH_KEY)
    assert bank.auth.current_session() is None


def test_incomplete_auth_record_is_no_session(bank, backend):
    bank.store.set_document(AUTH_KEY, {"role": "user", "name": "John"})
    assert bank.auth.current_session() is None

    bank.store.set_document(AUTH_KEY, {"role": "superuser", "subject_id": "u1"})
    assert bank.auth.current_session() is None
