# backend/wakalead/users.py
from datetime import datetime
from typing import List, Optional

from flask import current_app

from . import db
from .models.user import User
from .timeutil import utcnow


def upsert_user(
    wakatime_id: str,
    username: str,
    access_token: str,
    refresh_token: Optional[str] = None,
    token_expires_at: Optional[datetime] = None,
    display_name: Optional[str] = None,
    email: Optional[str] = None,
    photo_url: Optional[str] = None,
) -> User:
    """Create or update the single user row for ``wakatime_id``.

    Ban and admin flags survive the update; ``ADMIN_USERNAME`` can only grant
    admin, never take it away. WakaTime usernames are unique upstream, so a
    stale row still holding ``username`` under another identity is renamed
    to ``<username>-<id>`` first.
    """
    _release_username(username, wakatime_id)

    user = User.query.filter_by(wakatime_id=wakatime_id).first()
    if user is None:
        user = User(wakatime_id=wakatime_id, is_admin=False, is_banned=False)
        db.session.add(user)

    user.username = username
    user.display_name = display_name
    user.email = email
    user.photo_url = photo_url
    user.access_token = access_token
    user.refresh_token = refresh_token
    user.token_expires_at = token_expires_at
    user.updated_at = utcnow()

    admin_username = current_app.config.get("ADMIN_USERNAME")
    if admin_username and username == admin_username:
        user.is_admin = True

    db.session.commit()
    return user


def _release_username(username: str, wakatime_id: str) -> None:
    stale = User.query.filter(
        User.username == username, User.wakatime_id != wakatime_id
    ).first()
    if stale is None:
        return

    stale.username = f"{username}-{stale.id}"
    db.session.flush()
    current_app.logger.info(
        f"[users] user_id={stale.id} lost username {username!r}, renamed to {stale.username!r}"
    )


def username_taken(username: str, wakatime_id: str) -> bool:
    """True when ``username`` belongs to a different WakaTime identity."""
    return (
        User.query.filter(User.username == username, User.wakatime_id != wakatime_id).first()
        is not None
    )


def list_users() -> List[User]:
    return User.query.order_by(User.id.asc()).all()


def get_user(user_id: int) -> Optional[User]:
    return db.session.get(User, user_id)


def delete_user(user_id: int) -> bool:
    user = get_user(user_id)
    if user is None:
        return False
    db.session.delete(user)
    db.session.commit()
    return True


def set_banned(user_id: int, banned: bool) -> Optional[User]:
    user = get_user(user_id)
    if user is None:
        return None
    user.is_banned = banned
    db.session.commit()
    return user


def set_admin(user_id: int, admin: bool) -> Optional[User]:
    user = get_user(user_id)
    if user is None:
        return None
    user.is_admin = admin
    db.session.commit()
    return user
