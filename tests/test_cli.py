# tests/test_cli.py
import json
from datetime import timedelta

from wakalead.models.daily_stat import DailyStat
from wakalead.timeutil import utc_today


def test_sync_daily_command_fetches_yesterday(app, fake_wakatime, make_user):
    ada = make_user("ada")
    yesterday = utc_today() - timedelta(days=1)
    fake_wakatime.set_seconds("token-ada", yesterday, 900)

    result = app.test_cli_runner().invoke(args=["sync-daily"])

    assert result.exit_code == 0, result.output
    report = json.loads(result.stdout)
    assert report["dates"] == [yesterday.isoformat()]
    assert report["synced"] == 1
    assert DailyStat.query.filter_by(user_id=ada.id, date=yesterday).one().total_seconds == 900


def test_sync_week_command_unknown_user(app):
    result = app.test_cli_runner().invoke(args=["sync-week", "--user-id", "99"])

    assert result.exit_code != 0
    assert "user 99 not found" in result.output


def test_purge_sessions_command(app):
    result = app.test_cli_runner().invoke(args=["purge-sessions"])

    assert result.exit_code == 0
    assert "removed 0 expired entries" in result.output
