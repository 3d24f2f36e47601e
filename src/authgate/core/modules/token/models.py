from datetime import UTC, datetime
from typing import Any, NewType, Self
from uuid import UUID

from pydantic import BaseModel

SessionToken = NewType("SessionToken", str)


class SessionClaims(BaseModel):
    """Verified identity claims carried by a session token."""

    user_id: UUID
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Self | None:
        try:
            user_id = UUID(str(payload["sub"]))
        except ValueError:
            return None
        return cls(
            user_id=user_id,
            issued_at=datetime.fromtimestamp(payload["iat"], UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )
