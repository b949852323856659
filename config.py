# backend/config.py
import os


def _env_bool(name, default=False):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "mysql+pymysql://root:@localhost/wakalead"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # WakaTime OAuth app
    WAKATIME_CLIENT_ID = os.environ.get("WAKATIME_CLIENT_ID", "")
    WAKATIME_CLIENT_SECRET = os.environ.get("WAKATIME_CLIENT_SECRET", "")
    WAKATIME_REDIRECT_URI = os.environ.get("WAKATIME_REDIRECT_URI", "")
    WAKATIME_API_BASE = os.environ.get("WAKATIME_API_BASE", "https://wakatime.com/api/v1")
    WAKATIME_OAUTH_BASE = os.environ.get("WAKATIME_OAUTH_BASE", "https://wakatime.com/oauth")
    WAKATIME_SCOPE = "email,read_stats,read_logged_time"
    UPSTREAM_TIMEOUT_SECONDS = float(os.environ.get("UPSTREAM_TIMEOUT_SECONDS", "20"))

    FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")

    # Only used to promote an account on login; admin is a stored flag
    ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME", "")

    SESSION_TTL_SECONDS = 60 * 60 * 24 * 7

    # Pause between users in a batch sync (upstream rate limit)
    SYNC_USER_DELAY_SECONDS = float(os.environ.get("SYNC_USER_DELAY_SECONDS", "1.0"))
    REFRESH_ALL_IN_BACKGROUND = _env_bool("REFRESH_ALL_IN_BACKGROUND")

    # Shared secret for the cron endpoint; empty disables it
    JOB_AUTH_TOKEN = os.environ.get("JOB_AUTH_TOKEN", "")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
