# backend/wakalead/sync.py
"""Pulls coding time from WakaTime into ``daily_stats``.

Every batch walks the users one at a time in id order and pauses after each
user that reached the upstream API; that pause is the rate limiter. A failure
for one user is written to ``fetch_log`` and the batch moves on.
"""
import time
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from . import db
from .errors import TokenError, UpstreamError
from .models.fetch_log import FETCH_DAILY, FETCH_WEEKLY
from .models.user import User
from .stats_store import StatsStore
from .timeutil import rolling_window, utc_today
from .tokens import TokenManager
from .users import list_users
from .wakatime import total_seconds

SYNCED = "synced"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class UserOutcome:
    user_id: int
    username: str
    status: str
    total_seconds: Optional[int] = None
    days: int = 0
    error: Optional[str] = None

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "username": self.username,
            "status": self.status,
            "total_seconds": self.total_seconds,
            "days": self.days,
            "error": self.error,
        }


@dataclass
class SyncReport:
    mode: str
    dates: List[date]
    outcomes: List[UserOutcome] = field(default_factory=list)

    def count(self, status: str) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    def to_dict(self):
        return {
            "mode": self.mode,
            "dates": [d.isoformat() for d in self.dates],
            "synced": self.count(SYNCED),
            "skipped": self.count(SKIPPED),
            "failed": self.count(FAILED),
            "users": [outcome.to_dict() for outcome in self.outcomes],
        }


class SyncService:
    def __init__(
        self,
        client,
        stats: Optional[StatsStore] = None,
        tokens: Optional[TokenManager] = None,
        delay_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        today: Callable[[], date] = utc_today,
    ) -> None:
        self.client = client
        self.stats = stats or StatsStore()
        self.tokens = tokens or TokenManager(client)
        self.delay_seconds = delay_seconds
        self.sleep = sleep
        self.today = today

    # -----------------------------
    # Single-day modes
    # -----------------------------
    def sync_day_for_all_users(
        self,
        target_date: Optional[date] = None,
        use_today: bool = False,
        force: bool = False,
    ) -> SyncReport:
        """Scheduled daily run: yesterday by default, today on request."""
        if target_date is None:
            target_date = self.today() if use_today else self.today() - timedelta(days=1)

        users = list_users()
        current_app.logger.info(
            f"[sync] daily fetch for {len(users)} users on {target_date.isoformat()} force={force}"
        )

        report = SyncReport(mode="daily", dates=[target_date])
        for user in users:
            outcome = self._sync_single_day(user, target_date, check_duplicate=not force)
            report.outcomes.append(outcome)
            self._pause(outcome)

        current_app.logger.info(
            f"[sync] daily fetch done: synced={report.count(SYNCED)} "
            f"skipped={report.count(SKIPPED)} failed={report.count(FAILED)}"
        )
        return report

    def sync_today_for_all_users(self, force: bool = False) -> SyncReport:
        return self.sync_day_for_all_users(target_date=self.today(), force=force)

    def sync_today_for_user(self, user: User, force: bool = False) -> UserOutcome:
        """Warm today's row for one user, e.g. right after login."""
        return self._sync_single_day(user, self.today(), check_duplicate=not force)

    def _sync_single_day(self, user: User, target_date: date, check_duplicate: bool) -> UserOutcome:
        user_id, username = user.id, user.username

        if check_duplicate and self.stats.was_fetched(user_id, target_date):
            current_app.logger.info(
                f"[sync] already fetched user_id={user_id} on {target_date.isoformat()}"
            )
            return UserOutcome(user_id, username, SKIPPED)

        try:
            access_token = self.tokens.ensure_access_token(user)
            days = self.client.fetch_range_summary(access_token, target_date, target_date)
            seconds = total_seconds(days)

            self.stats.upsert_daily_stat(user_id, target_date, seconds)
            self.stats.log_success(user_id, FETCH_DAILY, target_date)
        except Exception as exc:
            return self._record_failure(user_id, username, FETCH_DAILY, target_date, exc)

        current_app.logger.info(f"[sync] user_id={user_id} {target_date.isoformat()}: {seconds}s")
        return UserOutcome(user_id, username, SYNCED, total_seconds=seconds, days=1)

    # -----------------------------
    # Rolling window mode
    # -----------------------------
    def sync_week_for_all_users(self) -> SyncReport:
        window = rolling_window(self.today())
        users = list_users()
        current_app.logger.info(
            f"[sync] week fetch for {len(users)} users "
            f"{window[0].isoformat()}..{window[-1].isoformat()}"
        )

        report = SyncReport(mode="weekly", dates=window)
        for user in users:
            outcome = self._sync_window(user, window)
            report.outcomes.append(outcome)
            self._pause(outcome)
        return report

    def sync_week_for_user(self, user: User) -> UserOutcome:
        return self._sync_window(user, rolling_window(self.today()))

    def _sync_window(self, user: User, window: List[date]) -> UserOutcome:
        user_id, username = user.id, user.username
        start, end = window[0], window[-1]

        try:
            access_token = self.tokens.ensure_access_token(user)
            days = self.client.fetch_range_summary(access_token, start, end)

            stored = 0
            for day in days:
                if start <= day.date <= end:
                    self.stats.upsert_daily_stat(user_id, day.date, day.total_seconds)
                    stored += 1
            self.stats.log_success(user_id, FETCH_WEEKLY, end)
        except Exception as exc:
            return self._record_failure(user_id, username, FETCH_WEEKLY, end, exc)

        return UserOutcome(
            user_id, username, SYNCED, total_seconds=total_seconds(days), days=stored
        )

    # -----------------------------
    # Helpers
    # -----------------------------
    def _record_failure(self, user_id, username, fetch_type, fetch_date, exc) -> UserOutcome:
        db.session.rollback()
        if isinstance(exc, SQLAlchemyError):
            # statement parameters can carry credentials
            message = f"Database error ({exc.__class__.__name__})"
        else:
            message = str(exc) or exc.__class__.__name__
        log_line = (
            f"[sync] {fetch_type} fetch failed for user_id={user_id} "
            f"on {fetch_date.isoformat()}: {exc.__class__.__name__}: {message}"
        )
        if isinstance(exc, (TokenError, UpstreamError, SQLAlchemyError)):
            current_app.logger.error(log_line)
        else:
            current_app.logger.exception(log_line)
        self.stats.log_error(user_id, fetch_type, fetch_date, message)
        return UserOutcome(user_id, username, FAILED, error=message)

    def _pause(self, outcome: UserOutcome) -> None:
        if outcome.status != SKIPPED and self.delay_seconds > 0:
            self.sleep(self.delay_seconds)
