"""Tests for duration utility functions."""
import pytest
from datetime import date, datetime


class TestDurationMinutes:
    """Tests for duration_minutes."""

    def test_same_day(self):
        """Test a daytime shift."""
        from app.utils.duration import duration_minutes

        assert duration_minutes("09:00", "18:00") == 540
        assert duration_minutes("09:15", "09:45") == 30

    def test_overnight(self):
        """Test an end time before the start crosses midnight."""
        from app.utils.duration import duration_minutes

        assert duration_minutes("22:00", "06:00") == 480
        assert duration_minutes("23:59", "00:00") == 1

    def test_equal_times(self):
        """Test identical times give zero, not a full day."""
        from app.utils.duration import duration_minutes

        assert duration_minutes("12:00", "12:00") == 0

    def test_missing_input(self):
        """Test empty or missing times give zero."""
        from app.utils.duration import duration_minutes

        assert duration_minutes("", "18:00") == 0
        assert duration_minutes("09:00", None) == 0
        assert duration_minutes(None, None) == 0


class TestRoundToBillingUnit:
    """Tests for round_to_billing_unit."""

    def test_rounds_down(self):
        """Test minutes are rounded down to the unit."""
        from app.utils.duration import round_to_billing_unit

        assert round_to_billing_unit(29, 30) == 0
        assert round_to_billing_unit(30, 30) == 30
        assert round_to_billing_unit(59, 30) == 30
        assert round_to_billing_unit(509) == 480

    def test_custom_unit(self):
        """Test a non-default unit."""
        from app.utils.duration import round_to_billing_unit

        assert round_to_billing_unit(44, 15) == 30

    def test_invalid_unit(self):
        """Test a non-positive unit is rejected."""
        from app.utils.duration import round_to_billing_unit

        with pytest.raises(ValueError, match="positive"):
            round_to_billing_unit(60, 0)


class TestFormatting:
    """Tests for presentation helpers."""

    def test_format_elapsed(self):
        """Test milliseconds format as HH:MM:SS."""
        from app.utils.duration import format_elapsed

        assert format_elapsed(0) == "00:00:00"
        assert format_elapsed(3_661_999) == "01:01:01"
        assert format_elapsed(36 * 3_600_000) == "36:00:00"

    def test_format_duration(self):
        """Test minutes format as hours and minutes."""
        from app.utils.duration import format_duration

        assert format_duration(135) == "2h 15m"
        assert format_duration(0) == "0h 0m"

    def test_local_clock_conversions(self):
        """Test epoch milliseconds convert to local date and clock time."""
        from app.utils.duration import to_clock_time, to_local_date

        ms = int(datetime(2026, 7, 14, 21, 5).timestamp() * 1000)

        assert to_local_date(ms) == date(2026, 7, 14)
        assert to_clock_time(ms) == "21:05"
