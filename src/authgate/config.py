from typing import Literal

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings

from authgate.errors import ConfigurationError

MIN_SECRET_LENGTH = 32


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str  # MongoDB URL including the database name, e.g. mongodb://localhost/authgate
    redis_url: str = "redis://localhost:6379/0"
    redis_timeout: float = 5.0  # Socket and connect timeout for the key-value store, seconds
    host: str
    port: int
    debug: bool = False
    environment: Literal["development", "production"] = "development"
    jwt_secret: str  # Signing key for session tokens, loaded once and never rotated at runtime
    otp_length: int = 4
    cors_origins: list[str] = []
    admin_phone: str | None = None  # Phone of the account promoted to admin on startup (optional)
    sms_gateway_url: str | None = None  # HTTP endpoint that delivers OTP text messages (optional)
    sms_gateway_key: str | None = None

    model_config = {
        "env_file": [".env"],
        "env_prefix": "AUTHGATE_",
        "extra": "ignore",
    }

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, value: str) -> str:
        if len(value) < MIN_SECRET_LENGTH:
            raise ValueError(f"jwt_secret must be at least {MIN_SECRET_LENGTH} characters")
        return value

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def load_config() -> Config:
    """Load configuration, failing fast when the signing secret is unusable."""
    try:
        return Config()
    except ValidationError as e:
        if any(err["loc"] and err["loc"][0] == "jwt_secret" for err in e.errors()):
            raise ConfigurationError("AUTHGATE_JWT_SECRET is missing or too short") from e
        raise ConfigurationError(str(e)) from e
