# backend/wakalead/models/daily_stat.py
from .. import db
from ..timeutil import utcnow


class DailyStat(db.Model):
    __tablename__ = "daily_stats"
    __table_args__ = (
        db.UniqueConstraint("user_id", "date", name="uq_daily_stats_user_date"),
        db.CheckConstraint("total_seconds >= 0", name="ck_daily_stats_nonnegative"),
    )

    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    user_id = db.Column(
        db.BigInteger().with_variant(db.Integer, "sqlite"),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = db.Column(db.Date, nullable=False, index=True)
    total_seconds = db.Column(db.Integer, default=0, nullable=False)
    fetched_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    user = db.relationship("User", back_populates="daily_stats")

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "date": self.date.isoformat(),
            "total_seconds": self.total_seconds,
            "fetched_at": self.fetched_at.isoformat() if self.fetched_at else None,
        }
