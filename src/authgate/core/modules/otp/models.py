"""OTP result models."""

from pydantic import BaseModel, Field


class OtpStatus(BaseModel):
    """Whether a live OTP exists for a phone, used for resend cooldowns."""

    expired: bool = Field(..., description="True when no OTP is waiting for this phone")
    ttl: int = Field(..., description="Seconds until the current OTP expires, 0 when expired", ge=0)


class OtpVerification(BaseModel):
    """Outcome of checking a submitted code. A rejection is a value, not an error."""

    expired: bool
    matched: bool
