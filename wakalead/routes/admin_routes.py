# backend/wakalead/routes/admin_routes.py
from flask import Blueprint, current_app, g, jsonify, request

from .. import get_sync_service
from ..auth import admin_required
from ..errors import BadRequest, Conflict, NotFound
from ..stats_store import StatsStore
from ..timeutil import parse_iso_date
from ..users import (
    delete_user,
    get_user,
    list_users,
    set_admin,
    set_banned,
    upsert_user,
    username_taken,
)

admin_bp = Blueprint("admin", __name__)


def _flag(name: str) -> bool:
    return (request.args.get(name) or "").lower() == "true"


def _user_or_404(user_id: int):
    user = get_user(user_id)
    if user is None:
        raise NotFound("User not found")
    return user


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@admin_bp.route("/users", methods=["GET"])
@admin_required
def admin_list_users():
    return jsonify([u.to_admin_dict() for u in list_users()]), 200


@admin_bp.route("/users", methods=["POST"])
@admin_required
def admin_create_user():
    """
    Body:
    {
      "wakatime_id": "...",     # required
      "username": "...",        # required
      "access_token": "...",    # required
      "refresh_token": "...",
      "display_name": "...",
      "email": "...",
      "photo_url": "..."
    }
    """
    data = request.get_json(silent=True) or {}

    wakatime_id = (data.get("wakatime_id") or "").strip()
    username = (data.get("username") or "").strip()
    access_token = data.get("access_token") or ""

    if not wakatime_id or not username or not access_token:
        raise BadRequest("Missing required fields")

    if username_taken(username, wakatime_id):
        raise Conflict("Username already taken")

    user = upsert_user(
        wakatime_id=wakatime_id,
        username=username,
        access_token=access_token,
        refresh_token=data.get("refresh_token"),
        display_name=data.get("display_name"),
        email=data.get("email"),
        photo_url=data.get("photo_url"),
    )
    current_app.logger.info(f"[admin] user_id={g.current_user.id} added user_id={user.id}")
    return jsonify(user.to_admin_dict()), 201


@admin_bp.route("/users/<int:user_id>", methods=["DELETE"])
@admin_required
def admin_delete_user(user_id: int):
    if not delete_user(user_id):
        raise NotFound("User not found")
    return jsonify({"success": True}), 200


@admin_bp.route("/users/<int:user_id>/ban", methods=["POST"])
@admin_required
def admin_ban_user(user_id: int):
    if set_banned(user_id, True) is None:
        raise NotFound("User not found")
    return jsonify({"success": True, "message": "User banned"}), 200


@admin_bp.route("/users/<int:user_id>/unban", methods=["POST"])
@admin_required
def admin_unban_user(user_id: int):
    if set_banned(user_id, False) is None:
        raise NotFound("User not found")
    return jsonify({"success": True, "message": "User unbanned"}), 200


@admin_bp.route("/users/<int:user_id>/promote", methods=["POST"])
@admin_required
def admin_promote_user(user_id: int):
    if set_admin(user_id, True) is None:
        raise NotFound("User not found")
    return jsonify({"success": True, "message": "User is now an admin"}), 200


@admin_bp.route("/users/<int:user_id>/demote", methods=["POST"])
@admin_required
def admin_demote_user(user_id: int):
    if user_id == g.current_user.id:
        raise BadRequest("Admins cannot demote themselves")
    if set_admin(user_id, False) is None:
        raise NotFound("User not found")
    return jsonify({"success": True, "message": "User is no longer an admin"}), 200


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

@admin_bp.route("/fetch-now", methods=["GET", "POST"])
@admin_required
def admin_fetch_now():
    """
    Query:
      today=true|false   fetch today instead of yesterday
      force=true         ignore earlier successful fetches
      date=YYYY-MM-DD    explicit date (wins over today)
    """
    use_today = _flag("today")
    force = _flag("force")

    target = None
    raw_date = request.args.get("date")
    if raw_date:
        try:
            target = parse_iso_date(raw_date)
        except ValueError:
            raise BadRequest("date must be YYYY-MM-DD")

    report = get_sync_service().sync_day_for_all_users(
        target_date=target, use_today=use_today, force=force
    )
    label = raw_date or ("today" if use_today else "yesterday")
    return (
        jsonify(
            {
                "success": True,
                "message": f"Data fetch initiated for {label}",
                "report": report.to_dict(),
            }
        ),
        200,
    )


@admin_bp.route("/users/<int:user_id>/fetch-week", methods=["POST"])
@admin_required
def admin_fetch_week(user_id: int):
    user = _user_or_404(user_id)
    outcome = get_sync_service().sync_week_for_user(user)
    return jsonify({"success": outcome.status != "failed", "result": outcome.to_dict()}), 200


@admin_bp.route("/fetch-log", methods=["GET"])
@admin_required
def admin_fetch_log():
    try:
        limit = int(request.args.get("limit", 100))
        if limit <= 0:
            limit = 100
    except ValueError:
        limit = 100

    user_id = request.args.get("user_id", type=int)
    rows = StatsStore().recent_fetch_log(limit=min(limit, 1000), user_id=user_id)
    return jsonify([row.to_dict() for row in rows]), 200
