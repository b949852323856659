# backend/wakalead/routes/leaderboard_routes.py
import threading

from flask import Blueprint, current_app, jsonify

from .. import get_sync_service
from ..auth import session_required
from ..leaderboard import get_leaderboard, get_weekly_data
from ..timeutil import rolling_window, utc_today

leaderboard_bp = Blueprint("leaderboard", __name__)


@leaderboard_bp.route("/leaderboard/today", methods=["GET"])
@session_required
def leaderboard_today():
    today = utc_today()
    return jsonify(get_leaderboard(today, today)), 200


@leaderboard_bp.route("/leaderboard/week", methods=["GET"])
@session_required
def leaderboard_week():
    dates = rolling_window()
    return jsonify(get_leaderboard(dates[0], dates[-1])), 200


@leaderboard_bp.route("/weekly-data", methods=["GET"])
@session_required
def weekly_data():
    dates = rolling_window()
    return jsonify({"dates": [d.isoformat() for d in dates], "users": get_weekly_data(dates)}), 200


def _run_week_sync(app):
    with app.app_context():
        report = get_sync_service().sync_week_for_all_users()
        app.logger.info(
            f"[refresh-all] background week refresh done: {report.count('synced')} synced, "
            f"{report.count('failed')} failed"
        )


@leaderboard_bp.route("/refresh-all", methods=["POST"])
@session_required
def refresh_all():
    """Re-fetch the last 7 days for every user."""
    if current_app.config.get("REFRESH_ALL_IN_BACKGROUND"):
        app = current_app._get_current_object()
        threading.Thread(target=_run_week_sync, args=(app,), daemon=True).start()
        response = jsonify({"success": True, "message": "Week refresh started"})
        response.headers["Cache-Control"] = "no-store"
        return response, 202

    report = get_sync_service().sync_week_for_all_users()
    response = jsonify(
        {
            "success": True,
            "message": "Week data refreshed for all users",
            "report": report.to_dict(),
        }
    )
    response.headers["Cache-Control"] = "no-store"
    return response, 200
