# backend/wakalead/routes/dashboard_routes.py
from flask import Blueprint, current_app, jsonify

from .. import db
from ..auth import current_user_or_none
from ..leaderboard import get_leaderboard, get_weekly_data
from ..timeutil import rolling_window

dashboard_bp = Blueprint("dashboard", __name__)


# -------------------------
# DASHBOARD OVERVIEW
# -------------------------
@dashboard_bp.route("/dashboard", methods=["GET"])
def dashboard():
    """
    Public. Returns:
    {
      "user": { ... } | null,
      "today": [ leaderboard entries ],
      "week": [ leaderboard entries ],
      "weeklyData": { "dates": ["2025-11-14", ...], "users": [ ... ] }
    }
    """
    # a broken session never blocks the public board
    try:
        user = current_user_or_none()
    except Exception as e:
        db.session.rollback()
        current_app.logger.warning(f"[dashboard] session lookup failed, serving guest view: {e}")
        user = None

    dates = rolling_window()
    today = dates[-1]

    response = jsonify(
        {
            "user": user.to_public_dict() if user else None,
            "today": get_leaderboard(today, today),
            "week": get_leaderboard(dates[0], today),
            "weeklyData": {
                "dates": [d.isoformat() for d in dates],
                "users": get_weekly_data(dates),
            },
        }
    )
    response.headers["Cache-Control"] = "no-store"
    return response, 200
