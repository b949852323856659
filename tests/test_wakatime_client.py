# tests/test_wakatime_client.py
from datetime import date

import pytest
import requests

from wakalead.errors import UpstreamAuthError, UpstreamUnavailable
from wakalead.wakatime import DaySummary, WakaTimeClient, total_seconds


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text="", content_type="application/json"):
        self.status_code = status_code
        self._json = json_data
        self.text = text
        self.headers = {"Content-Type": content_type}

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._json is None:
            raise ValueError("no json")
        return self._json


class FakeHttp:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def make_client(http):
    return WakaTimeClient(
        client_id="cid",
        client_secret="secret",
        redirect_uri="https://api.example.com/api/auth/callback",
        session=http,
    )


def test_authorize_url_has_fixed_scope():
    url = make_client(FakeHttp()).build_authorize_url()
    assert url.startswith("https://wakatime.com/oauth/authorize?")
    assert "response_type=code" in url
    assert "scope=email%2Cread_stats%2Cread_logged_time" in url
    assert "client_id=cid" in url


def test_refresh_decodes_form_encoded_body():
    http = FakeHttp(
        FakeResponse(
            text="access_token=sec_new&refresh_token=ref_new&expires_in=43200&token_type=bearer",
            content_type="application/x-www-form-urlencoded",
        )
    )
    grant = make_client(http).refresh_credential("ref_old")

    assert grant.access_token == "sec_new"
    assert grant.refresh_token == "ref_new"
    assert grant.expires_in == 43200

    method, url, kwargs = http.requests[0]
    assert method == "POST"
    assert url == "https://wakatime.com/oauth/token"
    assert kwargs["data"]["grant_type"] == "refresh_token"
    assert kwargs["data"]["refresh_token"] == "ref_old"


def test_non_numeric_expires_in_is_unavailable():
    http = FakeHttp(
        FakeResponse(
            text="access_token=sec_new&expires_in=soon",
            content_type="application/x-www-form-urlencoded",
        )
    )
    with pytest.raises(UpstreamUnavailable, match="Malformed token response"):
        make_client(http).refresh_credential("ref_old")


def test_exchange_code_without_access_token_is_unavailable():
    http = FakeHttp(FakeResponse(text="error=invalid_grant", content_type="text/plain"))
    with pytest.raises(UpstreamUnavailable):
        make_client(http).exchange_code("abc")


def test_range_summary_is_sparse_and_rounded():
    payload = {
        "data": [
            {"range": {"date": "2025-11-10"}, "grand_total": {"total_seconds": 3600.4}},
            {"range": {"date": "2025-11-12"}, "grand_total": {"total_seconds": 59.6}},
        ]
    }
    http = FakeHttp(FakeResponse(json_data=payload))
    days = make_client(http).fetch_range_summary("tok", date(2025, 11, 10), date(2025, 11, 12))

    assert days == [
        DaySummary(date(2025, 11, 10), 3600),
        DaySummary(date(2025, 11, 12), 60),
    ]
    assert total_seconds(days) == 3660

    _, url, kwargs = http.requests[0]
    assert url.endswith("/users/current/summaries")
    assert kwargs["params"] == {"start": "2025-11-10", "end": "2025-11-12"}
    assert kwargs["headers"]["Authorization"] == "Bearer tok"


def test_missing_grand_total_counts_as_zero():
    payload = {"data": [{"range": {"date": "2025-11-10"}}]}
    days = make_client(FakeHttp(FakeResponse(json_data=payload))).fetch_range_summary(
        "tok", date(2025, 11, 10), date(2025, 11, 10)
    )
    assert days == [DaySummary(date(2025, 11, 10), 0)]


def test_profile_fields_are_mapped():
    payload = {
        "data": {
            "id": "abc-123",
            "username": "ada",
            "display_name": "Ada L",
            "email": "ada@example.com",
            "photo": "https://img/ada.png",
        }
    }
    profile = make_client(FakeHttp(FakeResponse(json_data=payload))).fetch_profile("tok")
    assert profile.wakatime_id == "abc-123"
    assert profile.username == "ada"
    assert profile.display_name == "Ada L"
    assert profile.photo_url == "https://img/ada.png"


@pytest.mark.parametrize("status", [401, 403])
def test_auth_statuses_raise_auth_error(status):
    http = FakeHttp(FakeResponse(status_code=status, json_data={}))
    with pytest.raises(UpstreamAuthError):
        make_client(http).fetch_profile("tok")


def test_server_error_raises_unavailable():
    http = FakeHttp(FakeResponse(status_code=502, json_data={}))
    with pytest.raises(UpstreamUnavailable):
        make_client(http).fetch_range_summary("tok", date(2025, 1, 1), date(2025, 1, 1))


def test_network_error_raises_unavailable():
    http = FakeHttp(error=requests.ConnectionError("boom"))
    with pytest.raises(UpstreamUnavailable):
        make_client(http).fetch_profile("tok")
