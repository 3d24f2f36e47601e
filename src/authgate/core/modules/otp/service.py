import hmac

import structlog

from authgate.core.core import Service
from authgate.core.modules.otp.models import OtpStatus, OtpVerification
from authgate.utils import random_digits

logger = structlog.get_logger(__name__)

OTP_TTL_SECONDS = 120


def otp_key(phone: str) -> str:
    return f"otp:{phone}"


class OtpService(Service):
    """One-time codes keyed by phone, stored in the key-value store with a short TTL.

    A wrong code does not burn the OTP: only a successful match or the TTL
    removes it. There is no attempt cap.
    """

    async def issue(self, phone: str) -> str:
        """Generate a code, replacing any live code for this phone and resetting its TTL."""
        code = random_digits(self.core.config.otp_length)
        await self.kv.set(otp_key(phone), code, OTP_TTL_SECONDS)
        logger.debug("otp_issued", phone=phone, ttl=OTP_TTL_SECONDS)
        return code

    async def status(self, phone: str) -> OtpStatus:
        ttl = await self.kv.ttl(otp_key(phone))
        if ttl == 0:
            return OtpStatus(expired=True, ttl=0)
        return OtpStatus(expired=False, ttl=ttl)

    async def verify(self, phone: str, code: str) -> OtpVerification:
        saved = await self.kv.get(otp_key(phone))
        if saved is None:
            return OtpVerification(expired=True, matched=False)

        if not hmac.compare_digest(saved.encode(), code.encode()):
            logger.debug("otp_mismatch", phone=phone)
            return OtpVerification(expired=False, matched=False)

        # Only the request whose delete removed the key consumes the code
        if not await self.kv.delete(otp_key(phone)):
            logger.debug("otp_already_consumed", phone=phone)
            return OtpVerification(expired=True, matched=False)

        logger.debug("otp_consumed", phone=phone)
        return OtpVerification(expired=False, matched=True)

    async def discard(self, phone: str) -> None:
        """Drop an OTP that never reached the user."""
        await self.kv.delete(otp_key(phone))
