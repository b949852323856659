# backend/wakalead/sessions.py
"""Opaque login sessions kept in the key-value store.

A session only maps an id to a user id. The user row is re-read on every
verify, so bans, deletions and admin changes apply on the next request.
"""
import re
import secrets
from typing import Optional

from . import db
from .kv import KeyValueStore
from .models.user import User
from .timeutil import utcnow

SESSION_PREFIX = "session:"
SESSION_COOKIE = "session"
DEFAULT_TTL_SECONDS = 60 * 60 * 24 * 7

_COOKIE_RE = re.compile(r"(?:^|;\s*)session=([^;]+)")


def extract_session_id(request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[len("Bearer "):].strip()
        if token:
            return token

    cookie = request.headers.get("Cookie")
    if cookie:
        match = _COOKIE_RE.search(cookie)
        if match:
            return match.group(1)
    return None


class SessionManager:
    def __init__(self, store: Optional[KeyValueStore] = None, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.store = store or KeyValueStore()
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{SESSION_PREFIX}{session_id}"

    def create(self, user_id: int, wakatime_id: str) -> str:
        session_id = secrets.token_urlsafe(32)
        self.store.put(
            self._key(session_id),
            {
                "userId": user_id,
                "wakatimeId": wakatime_id,
                "createdAt": utcnow().isoformat(),
            },
            ttl_seconds=self.ttl_seconds,
        )
        return session_id

    def get(self, session_id: str) -> Optional[dict]:
        if not session_id:
            return None
        return self.store.get(self._key(session_id))

    def delete(self, session_id: str) -> None:
        self.store.delete(self._key(session_id))

    def verify(self, request) -> Optional[User]:
        session_id = extract_session_id(request)
        if not session_id:
            return None

        session = self.get(session_id)
        if not session:
            return None

        return db.session.get(User, session["userId"])
