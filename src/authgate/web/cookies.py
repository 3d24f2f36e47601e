"""Writes credential cookies onto responses."""

from datetime import UTC
from urllib.parse import quote

from fastapi import Response

from authgate.core.modules.credential.models import SESSION_COOKIE, USER_COOKIE, Credentials, SnapshotCookie


def set_credential_cookies(response: Response, credentials: Credentials, secure: bool) -> None:
    """Write the session and profile cookies with one shared expiry."""
    response.set_cookie(
        key=SESSION_COOKIE,
        value=credentials.token,
        expires=credentials.expires.astimezone(UTC),
        path="/",
        httponly=True,
        samesite="lax",
        secure=secure,
    )
    set_snapshot_cookie(response, credentials.snapshot_cookie, secure)


def set_snapshot_cookie(response: Response, cookie: SnapshotCookie, secure: bool) -> None:
    """Profile JSON, percent-encoded so the value is a bare cookie token."""
    response.set_cookie(
        key=USER_COOKIE,
        value=quote(cookie.snapshot.to_cookie(), safe=""),
        expires=cookie.expires.astimezone(UTC),
        path="/",
        httponly=True,
        samesite="lax",
        secure=secure,
    )


def clear_credential_cookies(response: Response, secure: bool) -> None:
    for key in (SESSION_COOKIE, USER_COOKIE):
        response.delete_cookie(key, path="/", httponly=True, samesite="lax", secure=secure)
