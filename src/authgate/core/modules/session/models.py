"""Session management models."""

from enum import StrEnum


class SessionRejection(StrEnum):
    """Why a presented token was not trusted. Logged only, never sent to clients."""

    INVALID_TOKEN = "invalid_token"  # malformed, forged or expired
    REVOKED = "revoked"  # no registry record for the user
    SUPERSEDED = "superseded"  # registry holds a newer token
    UNKNOWN_USER = "unknown_user"
    BANNED = "banned"
