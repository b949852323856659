# backend/wakalead/routes/auth_routes.py
from datetime import timedelta
from urllib.parse import urlencode, urlsplit, urlunsplit

from flask import Blueprint, current_app, g, jsonify, redirect, request

from .. import db, get_session_manager, get_sync_service, get_wakatime_client
from ..auth import session_required
from ..errors import UpstreamError
from ..sessions import extract_session_id
from ..timeutil import utcnow
from ..users import delete_user, upsert_user

auth_bp = Blueprint("auth", __name__)


def _frontend_redirect(path, **params):
    base = urlsplit(current_app.config["FRONTEND_URL"])
    return redirect(urlunsplit((base.scheme, base.netloc, path, urlencode(params), "")), code=302)


def _login_error(message):
    return _frontend_redirect("/login", error=message)


# -----------------------------
# Routes
# -----------------------------
@auth_bp.route("/login", methods=["GET"])
def login():
    return redirect(get_wakatime_client().build_authorize_url(), code=302)


@auth_bp.route("/callback", methods=["GET"])
def callback():
    error = request.args.get("error")
    if error:
        return _login_error(error)

    code = request.args.get("code")
    if not code:
        return _login_error("Missing authorization code")

    client = get_wakatime_client()
    try:
        grant = client.exchange_code(code)
        profile = client.fetch_profile(grant.access_token)

        expires_at = None
        if grant.expires_in is not None:
            expires_at = utcnow() + timedelta(seconds=grant.expires_in)

        user = upsert_user(
            wakatime_id=profile.wakatime_id,
            username=profile.username,
            display_name=profile.display_name,
            email=profile.email,
            photo_url=profile.photo_url,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            token_expires_at=expires_at,
        )
    except UpstreamError as e:
        db.session.rollback()
        current_app.logger.error(f"[auth/callback] WakaTime error during login: {e}")
        return _login_error(str(e) or "Authentication failed")
    except Exception as e:
        # DB errors echo bound parameters (tokens), so only the class is logged
        db.session.rollback()
        current_app.logger.error(f"[auth/callback] login failed: {type(e).__name__}")
        return _login_error("Authentication failed")

    if user.is_banned:
        current_app.logger.info(f"[auth/callback] banned user_id={user.id} tried to log in")
        return _login_error("Your account has been restricted by an administrator")

    session_id = get_session_manager().create(user.id, user.wakatime_id)

    # Warm today's row so the user shows up on the board right away
    outcome = get_sync_service().sync_today_for_user(user)
    current_app.logger.info(
        f"[auth/callback] user_id={user.id} logged in, today sync {outcome.status}"
    )

    return _frontend_redirect("/", session=session_id)


@auth_bp.route("/logout", methods=["POST"])
def logout():
    session_id = extract_session_id(request)
    if session_id:
        get_session_manager().delete(session_id)
    return jsonify({"success": True}), 200


@auth_bp.route("/delete-account", methods=["DELETE"])
@session_required
def delete_account():
    user_id = g.current_user.id
    delete_user(user_id)
    if g.session_id:
        get_session_manager().delete(g.session_id)

    current_app.logger.info(f"[auth/delete-account] user_id={user_id} deleted their account")
    return jsonify({"success": True, "message": "Account deleted"}), 200


@auth_bp.route("/me", methods=["GET"])
@session_required
def me():
    return jsonify(g.current_user.to_public_dict()), 200
