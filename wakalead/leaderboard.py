# backend/wakalead/leaderboard.py
from datetime import date
from typing import Any, Dict, List, Sequence

from sqlalchemy import and_, func

from . import db
from .models.daily_stat import DailyStat
from .models.user import User


def get_leaderboard(start: date, end: date) -> List[Dict[str, Any]]:
    """Rank every non-banned user by summed seconds over [start, end].

    Users without rows in range still appear with 0. Ties keep ascending user
    id order, and ranks follow list position (1, 2, 3, ...) with no gaps and
    no shared ranks.
    """
    total = func.coalesce(func.sum(DailyStat.total_seconds), 0).label("total")

    rows = (
        db.session.query(
            User.id,
            User.username,
            User.display_name,
            User.photo_url,
            User.is_admin,
            total,
        )
        .outerjoin(
            DailyStat,
            and_(
                DailyStat.user_id == User.id,
                DailyStat.date >= start,
                DailyStat.date <= end,
            ),
        )
        .filter(User.is_banned.is_(False))
        .group_by(User.id, User.username, User.display_name, User.photo_url, User.is_admin)
        .order_by(total.desc(), User.id.asc())
        .all()
    )

    return [
        {
            "user_id": row.id,
            "username": row.username,
            "display_name": row.display_name,
            "photo_url": row.photo_url,
            "is_admin": bool(row.is_admin),
            "total_seconds": int(row.total or 0),
            "rank": index + 1,
        }
        for index, row in enumerate(rows)
    ]


def get_weekly_data(dates: Sequence[date]) -> List[Dict[str, Any]]:
    """Per-user series of stored totals for ``dates``.

    Only dates that have a stored row are listed; the chart fills the gaps.
    """
    dates = list(dates)
    if not dates:
        return []

    rows = (
        db.session.query(
            User.id,
            User.username,
            User.display_name,
            DailyStat.date,
            DailyStat.total_seconds,
        )
        .outerjoin(
            DailyStat,
            and_(DailyStat.user_id == User.id, DailyStat.date.in_(dates)),
        )
        .filter(User.is_banned.is_(False))
        .order_by(User.id.asc(), DailyStat.date.asc())
        .all()
    )

    by_user: Dict[int, Dict[str, Any]] = {}
    for row in rows:
        entry = by_user.get(row.id)
        if entry is None:
            entry = {
                "user_id": row.id,
                "username": row.username,
                "display_name": row.display_name,
                "daily_data": [],
            }
            by_user[row.id] = entry

        if row.date is not None:
            entry["daily_data"].append(
                {"date": row.date.isoformat(), "seconds": int(row.total_seconds or 0)}
            )

    return list(by_user.values())
