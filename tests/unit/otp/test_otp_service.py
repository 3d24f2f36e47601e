"""Tests for one-time code issuance and verification."""

import asyncio

import pytest

from authgate.core.modules.otp.models import OtpStatus, OtpVerification
from authgate.core.modules.otp.service import OTP_TTL_SECONDS
from authgate.errors import TransientStoreError

PHONE = "0912345678"


class TestOtpVerification:
    @pytest.fixture(autouse=True)
    def setup(self, core, clock):
        self.otp = core.services.otp
        self.kv = core.kv
        self.clock = clock

    async def _store(self, code: str) -> None:
        await self.kv.set(f"otp:{PHONE}", code, OTP_TTL_SECONDS)

    async def test_wrong_code_then_right_code_then_replay(self):
        """A miss keeps the code, a match consumes it, a replay finds nothing."""
        await self._store("4821")

        assert await self.otp.verify(PHONE, "0000") == OtpVerification(expired=False, matched=False)
        assert await self.otp.verify(PHONE, "4821") == OtpVerification(expired=False, matched=True)
        assert await self.otp.verify(PHONE, "4821") == OtpVerification(expired=True, matched=False)

    async def test_issued_code_verifies_once(self):
        code = await self.otp.issue(PHONE)
        assert (await self.otp.verify(PHONE, code)).matched is True
        assert await self.otp.verify(PHONE, code) == OtpVerification(expired=True, matched=False)

    async def test_wrong_code_leaves_otp_usable(self):
        code = await self.otp.issue(PHONE)
        wrong = "1" if code[0] != "1" else "2"
        assert (await self.otp.verify(PHONE, wrong + code[1:])).matched is False
        self.clock.advance(60)
        assert (await self.otp.verify(PHONE, code)).matched is True

    async def test_verify_without_otp_reports_expired(self):
        assert await self.otp.verify(PHONE, "1234") == OtpVerification(expired=True, matched=False)

    async def test_code_expires_after_ttl(self):
        await self._store("4821")
        self.clock.advance(OTP_TTL_SECONDS)
        assert await self.otp.verify(PHONE, "4821") == OtpVerification(expired=True, matched=False)

    async def test_reissue_replaces_previous_code(self):
        await self._store("1111")
        code = await self.otp.issue(PHONE)
        if code != "1111":
            assert (await self.otp.verify(PHONE, "1111")).matched is False
        assert (await self.otp.verify(PHONE, code)).matched is True

    async def test_concurrent_verifications_consume_once(self):
        await self._store("4821")
        results = await asyncio.gather(*(self.otp.verify(PHONE, "4821") for _ in range(5)))
        assert sum(result.matched for result in results) == 1

    async def test_codes_are_per_phone(self):
        await self._store("4821")
        assert await self.otp.verify("0912345679", "4821") == OtpVerification(expired=True, matched=False)
        assert (await self.otp.verify(PHONE, "4821")).matched is True

    async def test_store_outage_is_not_an_expired_otp(self, redis_client):
        redis_client.available = False
        with pytest.raises(TransientStoreError):
            await self.otp.verify(PHONE, "4821")


class TestOtpIssue:
    @pytest.fixture(autouse=True)
    def setup(self, core, clock):
        self.otp = core.services.otp
        self.clock = clock

    async def test_code_is_numeric_with_configured_length(self, config):
        code = await self.otp.issue(PHONE)
        assert code.isdigit()
        assert len(code) == config.otp_length

    async def test_status_after_issue(self):
        await self.otp.issue(PHONE)
        assert await self.otp.status(PHONE) == OtpStatus(expired=False, ttl=OTP_TTL_SECONDS)

    async def test_status_counts_down_without_consuming(self):
        code = await self.otp.issue(PHONE)
        self.clock.advance(45)
        assert await self.otp.status(PHONE) == OtpStatus(expired=False, ttl=OTP_TTL_SECONDS - 45)
        assert (await self.otp.verify(PHONE, code)).matched is True

    async def test_status_without_otp(self):
        assert await self.otp.status(PHONE) == OtpStatus(expired=True, ttl=0)

    async def test_reissue_resets_ttl(self):
        await self.otp.issue(PHONE)
        self.clock.advance(100)
        await self.otp.issue(PHONE)
        assert (await self.otp.status(PHONE)).ttl == OTP_TTL_SECONDS
