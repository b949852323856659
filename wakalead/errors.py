# backend/wakalead/errors.py
"""Exception types shared by the API, the upstream client and the sync jobs."""


class ApiError(Exception):
    """An error that maps straight to an HTTP status and ``{"error": ...}``."""

    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequest(ApiError):
    status_code = 400


class NotAuthenticated(ApiError):
    status_code = 401

    def __init__(self, message="Not authenticated"):
        super().__init__(message)


class Forbidden(ApiError):
    status_code = 403

    def __init__(self, message="Forbidden: Admin access required"):
        super().__init__(message)


class NotFound(ApiError):
    status_code = 404

    def __init__(self, message="Not found"):
        super().__init__(message)


class Conflict(ApiError):
    status_code = 409


# -----------------------------
# Upstream (WakaTime) failures
# -----------------------------
class UpstreamError(Exception):
    pass


class UpstreamAuthError(UpstreamError):
    """WakaTime rejected the credential (401/403)."""


class UpstreamUnavailable(UpstreamError):
    """Network failure or any other non-2xx answer."""


# -----------------------------
# Credential lifecycle dead-ends
# -----------------------------
class TokenError(Exception):
    pass


class RefreshFailed(TokenError):
    pass


class CredentialExpiredNoRefresh(TokenError):
    def __init__(self, message="Token expired"):
        super().__init__(message)
