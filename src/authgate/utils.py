import re
import secrets
from datetime import UTC, datetime

PHONE_RE = re.compile(r"^\+?\d{10,15}$")


def is_phone(value: str) -> bool:
    return bool(PHONE_RE.fullmatch(value))


def now() -> datetime:
    return datetime.now(UTC)


def random_digits(length: int) -> str:
    """Uniformly random numeric string, zero padded."""
    return str(secrets.randbelow(10**length)).zfill(length)
