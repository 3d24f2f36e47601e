"""Signed session tokens (JWT, HS256)."""

from datetime import datetime, timedelta
from typing import Any

import jwt
import structlog

from authgate.core.modules.token.models import SessionClaims
from authgate.utils import now

logger = structlog.get_logger(__name__)

ALGORITHM = "HS256"
TOKEN_LIFETIME = timedelta(days=1)


class TokenSigner:
    """Creates and validates session tokens with a process-wide key.

    The key is fixed for the lifetime of the instance. Rotation would need a
    key id header and a set of verification keys, neither of which exist here.
    """

    def __init__(self, secret: str) -> None:
        self._secret = secret

    def sign(self, claims: dict[str, Any], *, issued_at: datetime | None = None) -> str:
        """Sign claims with iat and an exp one day later."""
        issued_at = issued_at or now()
        payload = {**claims, "iat": issued_at, "exp": issued_at + TOKEN_LIFETIME}
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> SessionClaims | None:
        """Decode a token, or None when it is malformed, forged or expired.

        Expiry is strict, no leeway.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                leeway=0,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.PyJWTError as e:
            logger.debug("token_rejected", reason=type(e).__name__)
            return None
        return SessionClaims.from_payload(payload)
