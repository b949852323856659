# backend/wakalead/tokens.py
from datetime import timedelta

from flask import current_app

from .errors import CredentialExpiredNoRefresh, RefreshFailed, UpstreamError
from .models.user import User
from .timeutil import utcnow
from .users import upsert_user


class TokenManager:
    """Hands out a usable WakaTime access token for a user.

    A token with no recorded expiry is trusted as-is. An expired token is
    traded for a new pair once, and the rotated pair is written to the users
    table before it is returned.
    """

    def __init__(self, client, clock=utcnow):
        self.client = client
        self.clock = clock

    def ensure_access_token(self, user: User) -> str:
        now = self.clock()
        if not user.token_expired(now):
            return user.access_token

        if not user.refresh_token:
            current_app.logger.warning(
                f"[tokens] token expired and no refresh token for user_id={user.id}"
            )
            raise CredentialExpiredNoRefresh()

        current_app.logger.info(f"[tokens] refreshing token for user_id={user.id}")
        try:
            grant = self.client.refresh_credential(user.refresh_token)
        except UpstreamError as exc:
            raise RefreshFailed(f"Failed to refresh access token: {exc}") from exc

        expires_at = None
        if grant.expires_in is not None:
            expires_at = now + timedelta(seconds=grant.expires_in)

        upsert_user(
            wakatime_id=user.wakatime_id,
            username=user.username,
            display_name=user.display_name,
            email=user.email,
            photo_url=user.photo_url,
            access_token=grant.access_token,
            # some grants omit a new refresh token; keep the old one then
            refresh_token=grant.refresh_token or user.refresh_token,
            token_expires_at=expires_at,
        )
        return grant.access_token
