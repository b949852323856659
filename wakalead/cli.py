# backend/wakalead/cli.py
"""Flask CLI commands; ``sync-daily`` is the once-a-day scheduled job.

    flask --app wakalead sync-daily
    flask --app wakalead sync-daily --today --force
    flask --app wakalead sync-week --user-id 3
"""
import json

import click

from . import db, get_session_manager, get_sync_service
from .timeutil import parse_iso_date
from .users import get_user


def _echo_json(payload):
    click.echo(json.dumps(payload, indent=2))


def register_commands(app):
    @app.cli.command("init-db")
    def init_db():
        """Create any missing tables."""
        db.create_all()
        click.echo("tables ready")

    @app.cli.command("sync-daily")
    @click.option("--date", "date_str", default=None, help="YYYY-MM-DD, defaults to yesterday")
    @click.option("--today", "use_today", is_flag=True, help="Fetch today instead of yesterday")
    @click.option("--force", is_flag=True, help="Ignore earlier successful fetches")
    def sync_daily(date_str, use_today, force):
        """Fetch one day of coding time for every user."""
        target = parse_iso_date(date_str) if date_str else None
        report = get_sync_service().sync_day_for_all_users(
            target_date=target, use_today=use_today, force=force
        )
        _echo_json(report.to_dict())

    @app.cli.command("sync-week")
    @click.option("--user-id", type=int, default=None)
    def sync_week(user_id):
        """Fetch the last 7 days for one user or everyone."""
        sync = get_sync_service()
        if user_id is None:
            _echo_json(sync.sync_week_for_all_users().to_dict())
            return

        user = get_user(user_id)
        if user is None:
            raise click.ClickException(f"user {user_id} not found")
        _echo_json(sync.sync_week_for_user(user).to_dict())

    @app.cli.command("purge-sessions")
    def purge_sessions():
        """Drop expired sessions from the key-value table."""
        removed = get_session_manager().store.purge_expired()
        click.echo(f"removed {removed} expired entries")
