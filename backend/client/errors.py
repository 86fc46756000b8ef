# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Exceptions raised by the API client."""

from core.codec import DecryptionError  # noqa: F401  re-exported for callers


class ApiError(Exception):
    """Non-2xx response.  ``code`` is the server's ``detail`` error code."""

    def __init__(self, status_code: int, code: str):
        super().__init__(f"{status_code} {code}")
        self.status_code = status_code
        self.code = code


class Unauthorized(ApiError):
    """Missing or expired token – the user has to sign in again."""


class NotFound(ApiError):
    """Record does not exist or belongs to someone else (indistinguishable)."""
