"""OTP delivery through an HTTP SMS gateway."""

import httpx
import structlog

from authgate.config import Config
from authgate.errors import DeliveryError

logger = structlog.get_logger(__name__)

GATEWAY_TIMEOUT = 10.0


async def send_otp_sms(config: Config, phone: str, code: str) -> None:
    """Hand the code to the configured gateway.

    Without a gateway, development mode logs the code instead so a local
    client can complete login. Production without a gateway is a delivery
    failure.

    Raises:
        DeliveryError: If the gateway is missing in production, unreachable, or rejects the message
    """
    if config.sms_gateway_url is None:
        if config.is_production:
            raise DeliveryError("SMS gateway is not configured")
        logger.info("otp_dev_delivery", phone=phone, code=code)
        return

    headers = {"Authorization": f"Bearer {config.sms_gateway_key}"} if config.sms_gateway_key else {}
    try:
        async with httpx.AsyncClient(timeout=GATEWAY_TIMEOUT) as client:
            response = await client.post(
                config.sms_gateway_url,
                json={"phone": phone, "text": f"Your login code: {code}"},
                headers=headers,
            )
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.exception("otp_delivery_failed", phone=phone, error=str(e))
        raise DeliveryError("Could not deliver OTP") from e

    logger.debug("otp_delivered", phone=phone)
