# backend/wakalead/wakatime.py
"""Thin client for the WakaTime OAuth and stats API."""
from dataclasses import dataclass
from datetime import date
from typing import List, Optional
from urllib.parse import parse_qsl, urlencode

import requests

from .errors import UpstreamAuthError, UpstreamUnavailable


@dataclass
class TokenGrant:
    access_token: str
    refresh_token: Optional[str]
    expires_in: Optional[int]


@dataclass
class Profile:
    wakatime_id: str
    username: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None


@dataclass
class DaySummary:
    date: date
    total_seconds: int


def _seconds(value) -> int:
    try:
        seconds = int(round(float(value or 0)))
    except (TypeError, ValueError):
        return 0
    return max(seconds, 0)


def total_seconds(days: List[DaySummary]) -> int:
    """Sum a (possibly sparse) range summary; missing days count as zero."""
    return sum(day.total_seconds for day in days)


class WakaTimeClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        api_base: str = "https://wakatime.com/api/v1",
        oauth_base: str = "https://wakatime.com/oauth",
        scope: str = "email,read_stats,read_logged_time",
        timeout: float = 20,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.api_base = api_base.rstrip("/")
        self.oauth_base = oauth_base.rstrip("/")
        self.scope = scope
        self.timeout = timeout
        self.http = session or requests.Session()

    @classmethod
    def from_config(cls, config) -> "WakaTimeClient":
        return cls(
            client_id=config["WAKATIME_CLIENT_ID"],
            client_secret=config["WAKATIME_CLIENT_SECRET"],
            redirect_uri=config["WAKATIME_REDIRECT_URI"],
            api_base=config["WAKATIME_API_BASE"],
            oauth_base=config["WAKATIME_OAUTH_BASE"],
            scope=config["WAKATIME_SCOPE"],
            timeout=config["UPSTREAM_TIMEOUT_SECONDS"],
        )

    # -----------------------------
    # OAuth
    # -----------------------------
    def build_authorize_url(self) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": self.scope,
        }
        return f"{self.oauth_base}/authorize?{urlencode(params)}"

    def exchange_code(self, code: str) -> TokenGrant:
        return self._token_request({"grant_type": "authorization_code", "code": code})

    def refresh_credential(self, refresh_token: str) -> TokenGrant:
        return self._token_request(
            {"grant_type": "refresh_token", "refresh_token": refresh_token}
        )

    def _token_request(self, extra: dict) -> TokenGrant:
        body = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            **extra,
        }
        response = self._send(
            "POST",
            f"{self.oauth_base}/token",
            data=body,
            headers={"Accept": "application/x-www-form-urlencoded"},
        )
        payload = self._decode_token_payload(response)

        access_token = payload.get("access_token")
        if not access_token:
            raise UpstreamUnavailable("WakaTime token response has no access_token")

        expires_in = payload.get("expires_in")
        if expires_in not in (None, ""):
            try:
                expires_in = int(float(expires_in))
            except (TypeError, ValueError) as exc:
                raise UpstreamUnavailable("Malformed token response") from exc
        else:
            expires_in = None

        return TokenGrant(
            access_token=access_token,
            refresh_token=payload.get("refresh_token") or None,
            expires_in=expires_in,
        )

    @staticmethod
    def _decode_token_payload(response: requests.Response) -> dict:
        # WakaTime answers form-encoded data unless asked for JSON
        content_type = response.headers.get("Content-Type", "")
        if "json" in content_type:
            try:
                return response.json()
            except ValueError as exc:
                raise UpstreamUnavailable("Malformed token response") from exc
        return dict(parse_qsl(response.text, keep_blank_values=True))

    # -----------------------------
    # API
    # -----------------------------
    def fetch_profile(self, access_token: str) -> Profile:
        payload = self._get_json("/users/current", access_token)
        data = payload.get("data") or {}
        if not data.get("id") or not data.get("username"):
            raise UpstreamUnavailable("WakaTime profile is missing id or username")
        return Profile(
            wakatime_id=str(data["id"]),
            username=data["username"],
            display_name=data.get("display_name") or data.get("full_name"),
            email=data.get("email"),
            photo_url=data.get("photo"),
        )

    def fetch_range_summary(self, access_token: str, start: date, end: date) -> List[DaySummary]:
        payload = self._get_json(
            "/users/current/summaries",
            access_token,
            params={"start": start.isoformat(), "end": end.isoformat()},
        )

        days = []
        for day in payload.get("data") or []:
            raw_date = (day.get("range") or {}).get("date")
            if not raw_date:
                continue
            days.append(
                DaySummary(
                    date=date.fromisoformat(raw_date),
                    total_seconds=_seconds((day.get("grand_total") or {}).get("total_seconds")),
                )
            )
        return days

    def _get_json(self, path: str, access_token: str, params: Optional[dict] = None) -> dict:
        response = self._send(
            "GET",
            f"{self.api_base}{path}",
            params=params,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamUnavailable(f"WakaTime returned invalid JSON for {path}") from exc

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            response = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise UpstreamUnavailable(f"WakaTime request failed: {exc}") from exc

        if response.status_code in (401, 403):
            raise UpstreamAuthError(f"WakaTime rejected the credential ({response.status_code})")
        if not response.ok:
            raise UpstreamUnavailable(f"WakaTime request failed: {response.status_code}")
        return response
