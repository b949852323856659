# backend/wakalead/routes/jobs_routes.py
import secrets

from flask import Blueprint, current_app, jsonify, request

from .. import get_sync_service
from ..errors import BadRequest, Forbidden, NotAuthenticated
from ..timeutil import parse_iso_date

jobs_bp = Blueprint("jobs", __name__)


def _require_job_token():
    token = current_app.config.get("JOB_AUTH_TOKEN") or ""
    if not token:
        raise Forbidden("Job endpoint disabled: JOB_AUTH_TOKEN is not set")

    provided = (
        request.headers.get("X-Job-Token")
        or request.headers.get("Authorization", "").removeprefix("Bearer ").strip()
        or ""
    )
    if not secrets.compare_digest(token, provided):
        raise NotAuthenticated("Invalid job token")


@jobs_bp.route("/daily-sync", methods=["POST"])
def daily_sync():
    """Cron entry point for the scheduled once-a-day fetch."""
    _require_job_token()

    target = None
    raw_date = request.args.get("date")
    if raw_date:
        try:
            target = parse_iso_date(raw_date)
        except ValueError:
            raise BadRequest("date must be YYYY-MM-DD")

    force = (request.args.get("force") or "") in ("1", "true")
    report = get_sync_service().sync_day_for_all_users(target_date=target, force=force)
    return jsonify(report.to_dict()), 200
