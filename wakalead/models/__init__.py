# backend/wakalead/models/__init__.py
from .user import User
from .daily_stat import DailyStat
from .fetch_log import FetchLogEntry
from .kv_entry import KVEntry

__all__ = ["User", "DailyStat", "FetchLogEntry", "KVEntry"]
