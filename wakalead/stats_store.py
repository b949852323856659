# backend/wakalead/stats_store.py
"""Per-user daily totals and the fetch audit log."""
from datetime import date
from typing import List, Optional

from sqlalchemy.dialects import mysql, postgresql, sqlite

from . import db
from .models.daily_stat import DailyStat
from .models.fetch_log import STATUS_ERROR, STATUS_SUCCESS, FetchLogEntry
from .timeutil import utcnow

_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class StatsStore:
    def upsert_daily_stat(self, user_id: int, day: date, total_seconds: int) -> None:
        """Insert or overwrite the total for (user, day). Last write wins."""
        if total_seconds < 0:
            raise ValueError("total_seconds must be >= 0")

        now = utcnow()
        values = {
            "user_id": user_id,
            "date": day,
            "total_seconds": int(total_seconds),
            "fetched_at": now,
        }
        dialect = db.engine.dialect.name

        if dialect in _INSERTS:
            stmt = _INSERTS[dialect](DailyStat.__table__).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["user_id", "date"],
                set_={"total_seconds": stmt.excluded.total_seconds, "fetched_at": now},
            )
        elif dialect in ("mysql", "mariadb"):
            stmt = mysql.insert(DailyStat.__table__).values(**values)
            stmt = stmt.on_duplicate_key_update(
                total_seconds=stmt.inserted.total_seconds, fetched_at=now
            )
        else:
            self._upsert_orm(values)
            return

        db.session.execute(stmt)
        db.session.commit()

    def _upsert_orm(self, values: dict) -> None:
        row = DailyStat.query.filter_by(user_id=values["user_id"], date=values["date"]).first()
        if row is None:
            db.session.add(DailyStat(**values))
        else:
            row.total_seconds = values["total_seconds"]
            row.fetched_at = values["fetched_at"]
        db.session.commit()

    def get_daily_stat(self, user_id: int, day: date) -> Optional[DailyStat]:
        return DailyStat.query.filter_by(user_id=user_id, date=day).first()

    def log_fetch(
        self,
        user_id: int,
        fetch_type: str,
        fetch_date: date,
        status: str,
        error_message: Optional[str] = None,
    ) -> FetchLogEntry:
        entry = FetchLogEntry(
            user_id=user_id,
            fetch_type=fetch_type,
            fetch_date=fetch_date,
            status=status,
            error_message=error_message,
            fetched_at=utcnow(),
        )
        db.session.add(entry)
        db.session.commit()
        return entry

    def log_success(self, user_id: int, fetch_type: str, fetch_date: date) -> FetchLogEntry:
        return self.log_fetch(user_id, fetch_type, fetch_date, STATUS_SUCCESS)

    def log_error(self, user_id: int, fetch_type: str, fetch_date: date, message: str) -> FetchLogEntry:
        return self.log_fetch(user_id, fetch_type, fetch_date, STATUS_ERROR, message)

    def was_fetched(self, user_id: int, fetch_date: date) -> bool:
        """True once a successful fetch for (user, date) is on record."""
        return (
            db.session.query(FetchLogEntry.id)
            .filter(
                FetchLogEntry.user_id == user_id,
                FetchLogEntry.fetch_date == fetch_date,
                FetchLogEntry.status == STATUS_SUCCESS,
            )
            .first()
            is not None
        )

    def recent_fetch_log(self, limit: int = 100, user_id: Optional[int] = None) -> List[FetchLogEntry]:
        query = FetchLogEntry.query
        if user_id is not None:
            query = query.filter(FetchLogEntry.user_id == user_id)
        return query.order_by(FetchLogEntry.id.desc()).limit(limit).all()
