# backend/wakalead/models/fetch_log.py
from .. import db
from ..timeutil import utcnow

FETCH_DAILY = "daily"
FETCH_WEEKLY = "weekly"

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"


class FetchLogEntry(db.Model):
    """Append-only audit row for one upstream fetch attempt."""

    __tablename__ = "fetch_log"
    __table_args__ = (
        db.Index("ix_fetch_log_user_date_status", "user_id", "fetch_date", "status"),
    )

    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    user_id = db.Column(
        db.BigInteger().with_variant(db.Integer, "sqlite"),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    fetch_type = db.Column(
        db.Enum(FETCH_DAILY, FETCH_WEEKLY, name="fetch_type_enum"), nullable=False
    )
    fetch_date = db.Column(db.Date, nullable=False)
    status = db.Column(
        db.Enum(STATUS_SUCCESS, STATUS_ERROR, name="fetch_status_enum"), nullable=False
    )
    error_message = db.Column(db.Text)
    fetched_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    user = db.relationship("User", back_populates="fetch_logs")

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "fetch_type": self.fetch_type,
            "fetch_date": self.fetch_date.isoformat(),
            "status": self.status,
            "error_message": self.error_message,
            "fetched_at": self.fetched_at.isoformat() if self.fetched_at else None,
        }
