# backend/wakalead/kv.py
import json
from datetime import timedelta
from typing import Any, Optional

from . import db
from .models.kv_entry import KVEntry
from .timeutil import utcnow


class KeyValueStore:
    """JSON values under string keys with a per-key time-to-live.

    Expired keys read as missing and are removed on that read.
    """

    def __init__(self, clock=utcnow):
        self.clock = clock

    def put(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        expires_at = None
        if ttl_seconds is not None:
            expires_at = self.clock() + timedelta(seconds=ttl_seconds)

        entry = db.session.get(KVEntry, key)
        if entry is None:
            entry = KVEntry(key=key)
            db.session.add(entry)
        entry.value = json.dumps(value)
        entry.expires_at = expires_at
        db.session.commit()

    def get(self, key: str) -> Optional[Any]:
        entry = db.session.get(KVEntry, key)
        if entry is None:
            return None
        if entry.expires_at is not None and entry.expires_at <= self.clock():
            db.session.delete(entry)
            db.session.commit()
            return None
        return json.loads(entry.value)

    def delete(self, key: str) -> None:
        KVEntry.query.filter_by(key=key).delete()
        db.session.commit()

    def purge_expired(self) -> int:
        removed = KVEntry.query.filter(
            KVEntry.expires_at.isnot(None),
            KVEntry.expires_at <= self.clock(),
        ).delete(synchronize_session=False)
        db.session.commit()
        return removed
