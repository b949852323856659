# tests/test_sessions.py
from datetime import datetime, timedelta

from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Request

from wakalead import db
from wakalead.kv import KeyValueStore
from wakalead.models.kv_entry import KVEntry
from wakalead.sessions import SessionManager, extract_session_id


def build_request(headers=None):
    return Request(EnvironBuilder(path="/api/auth/me", headers=headers or {}).get_environ())


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def test_session_ids_are_unique_and_unguessable(app):
    sessions = SessionManager()
    ids = {sessions.create(1, "wk-1") for _ in range(20)}
    assert len(ids) == 20
    assert all(len(session_id) >= 40 for session_id in ids)


def test_create_get_delete(app):
    sessions = SessionManager()
    session_id = sessions.create(7, "wk-7")

    data = sessions.get(session_id)
    assert data["userId"] == 7
    assert data["wakatimeId"] == "wk-7"
    assert "createdAt" in data
    assert db.session.get(KVEntry, f"session:{session_id}") is not None

    sessions.delete(session_id)
    assert sessions.get(session_id) is None


def test_sessions_expire_after_ttl_and_reads_do_not_extend(app):
    clock = Clock(datetime(2025, 11, 1, 12, 0))
    sessions = SessionManager(store=KeyValueStore(clock=clock), ttl_seconds=60)
    session_id = sessions.create(1, "wk-1")

    clock.now += timedelta(seconds=59)
    assert sessions.get(session_id) is not None

    clock.now += timedelta(seconds=2)
    assert sessions.get(session_id) is None
    assert KVEntry.query.count() == 0


def test_purge_expired_only_drops_expired_keys(app):
    clock = Clock(datetime(2025, 11, 1, 12, 0))
    store = KeyValueStore(clock=clock)
    store.put("short", {"a": 1}, ttl_seconds=10)
    store.put("long", {"b": 2}, ttl_seconds=1000)
    store.put("forever", {"c": 3})

    clock.now += timedelta(seconds=30)

    assert store.purge_expired() == 1
    assert store.get("long") == {"b": 2}
    assert store.get("forever") == {"c": 3}


def test_extract_prefers_bearer_then_cookie():
    assert extract_session_id(build_request({"Authorization": "Bearer abc"})) == "abc"
    assert extract_session_id(build_request({"Cookie": "theme=dark; session=xyz"})) == "xyz"
    assert (
        extract_session_id(build_request({"Authorization": "Bearer abc", "Cookie": "session=xyz"}))
        == "abc"
    )
    assert extract_session_id(build_request({"Cookie": "theme=dark"})) is None
    assert extract_session_id(build_request()) is None


def test_verify_reads_the_live_user(app, make_user):
    user = make_user("ada")
    sessions = SessionManager()
    session_id = sessions.create(user.id, user.wakatime_id)
    request = build_request({"Authorization": f"Bearer {session_id}"})

    assert sessions.verify(request).username == "ada"

    user.is_admin = True
    db.session.commit()
    assert sessions.verify(request).is_admin is True

    db.session.delete(user)
    db.session.commit()
    assert sessions.verify(request) is None
