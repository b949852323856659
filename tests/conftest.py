# tests/conftest.py
from datetime import date

import pytest

from wakalead import create_app, db
from wakalead.errors import UpstreamAuthError, UpstreamUnavailable
from wakalead.models.user import User
from wakalead.wakatime import DaySummary, Profile, TokenGrant


class FakeWakaTime:
    """In-memory stand-in for WakaTimeClient that records every call."""

    def __init__(self):
        self.profiles = {}      # access token -> Profile
        self.days = {}          # access token -> {date: seconds}
        self.failing_tokens = {}  # access token -> exception
        self.refresh_error = None
        self.refresh_grants = {}  # refresh token -> TokenGrant
        self.summary_calls = []
        self.refresh_calls = []

    # OAuth
    def build_authorize_url(self):
        return "https://wakatime.test/oauth/authorize?client_id=cid&response_type=code"

    def exchange_code(self, code):
        if code == "bad":
            raise UpstreamUnavailable("Failed to exchange code for token: 400")
        return TokenGrant(f"access-{code}", f"refresh-{code}", 3600)

    def refresh_credential(self, refresh_token):
        self.refresh_calls.append(refresh_token)
        if self.refresh_error is not None:
            raise self.refresh_error
        return self.refresh_grants.get(
            refresh_token, TokenGrant(f"new-{refresh_token}", f"rotated-{refresh_token}", 3600)
        )

    # API
    def fetch_profile(self, access_token):
        try:
            return self.profiles[access_token]
        except KeyError:
            raise UpstreamAuthError("WakaTime rejected the credential (401)")

    def fetch_range_summary(self, access_token, start, end):
        self.summary_calls.append((access_token, start, end))
        if access_token in self.failing_tokens:
            raise self.failing_tokens[access_token]
        per_day = self.days.get(access_token, {})
        return [
            DaySummary(date=d, total_seconds=s)
            for d, s in sorted(per_day.items())
            if start <= d <= end
        ]

    # helpers for tests
    def add_profile(self, code, wakatime_id, username, **extra):
        self.profiles[f"access-{code}"] = Profile(wakatime_id=wakatime_id, username=username, **extra)

    def set_seconds(self, access_token, day: date, seconds: int):
        self.days.setdefault(access_token, {})[day] = seconds


@pytest.fixture
def fake_wakatime():
    return FakeWakaTime()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def app(fake_wakatime, sleeps):
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "FRONTEND_URL": "https://board.example.com",
            "SYNC_USER_DELAY_SECONDS": 0.5,
            "REFRESH_ALL_IN_BACKGROUND": False,
            "JOB_AUTH_TOKEN": "",
            "ADMIN_USERNAME": "",
        }
    )
    app.extensions["wakatime"] = fake_wakatime
    app.extensions["sleep"] = sleeps.append

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(username=None, **fields):
        counter["n"] += 1
        n = counter["n"]
        username = username or f"user{n}"
        values = {
            "wakatime_id": f"wk-{username}",
            "username": username,
            "access_token": f"token-{username}",
            "is_admin": False,
            "is_banned": False,
        }
        values.update(fields)
        user = User(**values)
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def login(app):
    """Create a session for a user and return the auth header for it."""

    def _login(user):
        session_id = app.extensions["sessions"].create(user.id, user.wakatime_id)
        return {"Authorization": f"Bearer {session_id}"}

    return _login
