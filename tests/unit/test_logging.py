"""Tests for log processors."""

from authgate.logging import mask_phone


class TestMaskPhone:
    def test_keeps_last_four_digits(self):
        event = mask_phone(None, "info", {"event": "otp_issued", "phone": "0912345678"})
        assert event["phone"] == "******5678"
        assert event["event"] == "otp_issued"

    def test_events_without_phone_are_untouched(self):
        event = {"event": "session_created", "user_id": "abc"}
        assert mask_phone(None, "info", dict(event)) == event

    def test_short_values_are_left_alone(self):
        assert mask_phone(None, "info", {"phone": "1234"})["phone"] == "1234"
