# backend/wakalead/models/kv_entry.py
from .. import db


class KVEntry(db.Model):
    __tablename__ = "kv_entries"

    key = db.Column(db.String(255), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    expires_at = db.Column(db.DateTime, index=True)
