from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field

from authgate.core.db import MongoModel
from authgate.utils import now


class Role(StrEnum):
    USER = "user"
    ADMIN = "admin"


class User(MongoModel):
    """User domain model, identified by phone."""

    phone: str
    fullname: str
    username: str
    profile: str | None = None  # avatar path
    role: Role = Role.USER
    is_banned: bool = False
    password_hash: str | None = None  # bcrypt hash, unset for OTP-only accounts
    created_at: datetime = Field(default_factory=now)


class UserView(BaseModel):
    """User account information (API representation)."""

    id: UUID = Field(..., description="User ID")
    phone: str = Field(..., description="Phone number")
    fullname: str = Field(..., description="Full name")
    username: str = Field(..., description="Username")
    profile: str | None = Field(None, description="Avatar path")
    role: Role = Field(..., description="Account role")
    created_at: datetime = Field(..., description="Account creation time")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(
            id=user.id,
            phone=user.phone,
            fullname=user.fullname,
            username=user.username,
            profile=user.profile,
            role=user.role,
            created_at=user.created_at,
        )


class UserSnapshot(BaseModel):
    """Public profile written to the readable user cookie.

    Carries no identifier or credential material: the session cookie is the
    only thing the server trusts.
    """

    phone: str
    fullname: str
    username: str
    profile: str | None
    role: Role
    is_banned: bool
    created_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> "UserSnapshot":
        return cls.model_validate(user.model_dump(exclude={"id", "password_hash"}))

    def to_cookie(self) -> str:
        return self.model_dump_json()
