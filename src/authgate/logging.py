import logging
from collections.abc import MutableMapping
from typing import Any

import structlog

# Driver chatter is not useful at DEBUG
QUIET_LOGGERS = ("pymongo", "pymongo.topology", "pymongo.connection", "pymongo.command", "redis", "httpx", "httpcore")

VISIBLE_PHONE_DIGITS = 4


def mask_phone(_: Any, __: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Keep only the last digits of a `phone` field."""
    phone = event_dict.get("phone")
    if isinstance(phone, str) and len(phone) > VISIBLE_PHONE_DIGITS:
        event_dict["phone"] = "*" * (len(phone) - VISIBLE_PHONE_DIGITS) + phone[-VISIBLE_PHONE_DIGITS:]
    return event_dict


def setup_logging(debug: bool) -> None:
    """Configure structlog over stdlib logging: console output in debug, JSON lines otherwise.

    JSON output masks phones. Debug output leaves them readable so the
    development OTP log line can be matched to a login attempt.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=log_level, format="%(message)s")
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if debug:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.extend([mask_phone, structlog.processors.JSONRenderer()])

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
