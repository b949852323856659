# backend/wakalead/auth.py
from functools import wraps

from flask import g, request

from . import get_session_manager
from .errors import Forbidden, NotAuthenticated
from .sessions import extract_session_id


def current_user_or_none():
    return get_session_manager().verify(request)


def session_required(fn):
    """Reject requests without a live session.

    Puts the live user on ``g.current_user`` and the id on ``g.session_id``.
    """

    @wraps(fn)
    def wrapper(*args, **kwargs):
        user = current_user_or_none()
        if user is None:
            raise NotAuthenticated()
        g.current_user = user
        g.session_id = extract_session_id(request)
        return fn(*args, **kwargs)

    return wrapper


def admin_required(fn):
    @wraps(fn)
    @session_required
    def wrapper(*args, **kwargs):
        if not g.current_user.is_admin:
            raise Forbidden()
        return fn(*args, **kwargs)

    return wrapper
