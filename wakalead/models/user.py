# backend/wakalead/models/user.py
from .. import db
from ..timeutil import utcnow


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    wakatime_id = db.Column(db.String(64), unique=True, nullable=False)
    username = db.Column(db.String(100), unique=True, nullable=False)
    display_name = db.Column(db.String(255))
    email = db.Column(db.String(255))
    photo_url = db.Column(db.String(512))

    # OAuth credential pair
    access_token = db.Column(db.Text, nullable=False)
    refresh_token = db.Column(db.Text)
    token_expires_at = db.Column(db.DateTime)

    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    is_banned = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    daily_stats = db.relationship(
        "DailyStat",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    fetch_logs = db.relationship(
        "FetchLogEntry",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def token_expired(self, now=None) -> bool:
        if self.token_expires_at is None:
            return False
        return self.token_expires_at < (now or utcnow())

    def to_public_dict(self):
        return {
            "id": self.id,
            "wakatime_id": self.wakatime_id,
            "username": self.username,
            "display_name": self.display_name,
            "photo_url": self.photo_url,
            "is_admin": bool(self.is_admin),
        }

    def to_admin_dict(self):
        data = self.to_public_dict()
        data.update(
            {
                "email": self.email,
                "is_banned": bool(self.is_banned),
                "created_at": self.created_at.isoformat() if self.created_at else None,
            }
        )
        return data
