"""Unit tests for stream_registry.expiry."""

import time

import pytest

from stream_registry.expiry import MAX_INSTANT, parse_duration, parse_expiry, parse_timestamp
from stream_registry.models import ExpiryKind, ExpiryResult

NOW = 1_700_000_000.0
DAY = 24 * 60 * 60


class TestParseExpiry:
    """Tests for parse_expiry()."""

    def test_empty_is_never(self):
        """Test that an empty expression never expires."""
        assert parse_expiry("") == ExpiryResult.never()
        assert parse_expiry("", now=NOW).kind is ExpiryKind.NEVER

    @pytest.mark.parametrize(
        "expression,seconds",
        [
            ("PT1S", 1),
            ("PT1M", 60),
            ("P1M", 30 * DAY),
            ("PT1H30M", 5400),
            ("P1D", DAY),
            ("P1Y", 365 * DAY),
            ("P1DT2H", DAY + 7200),
            ("P1Y2M3DT4H5M6S", 365 * DAY + 60 * DAY + 3 * DAY + 4 * 3600 + 5 * 60 + 6),
            ("P1.5D", 1.5 * DAY),
        ],
    )
    def test_duration_from_now(self, expression, seconds):
        """Test durations are added to the reference time."""
        result = parse_expiry(expression, now=NOW)

        assert result.kind is ExpiryKind.AT
        assert result.instant == NOW + seconds

    def test_fractional_duration_lands_after_now(self):
        """Test that a sub-second duration still expires after now."""
        now = NOW + 0.2
        result = parse_expiry("PT0.5S", now=now)

        assert result.kind is ExpiryKind.AT
        assert result.instant > now

    def test_duration_uses_current_time_by_default(self):
        """Test default reference time is the wall clock."""
        before = time.time()
        result = parse_expiry("PT1H")

        assert result.kind is ExpiryKind.AT
        assert result.instant > before
        assert result.instant <= time.time() + 3600 + 1

    @pytest.mark.parametrize("expression", ["P0D", "PT0S", "P0Y0M0DT0H0M0S", "P", "PT"])
    def test_zero_duration_is_invalid(self, expression):
        """Test that zero-length durations are rejected rather than expiring now."""
        assert parse_expiry(expression, now=NOW).is_invalid

    def test_absolute_timestamp_utc(self):
        """Test absolute RFC 3339 timestamp with Z suffix."""
        result = parse_expiry("2030-01-01T00:00:00Z", now=NOW)
        assert result == ExpiryResult.at(1_893_456_000)

    def test_absolute_timestamp_with_offset(self):
        """Test absolute timestamp with a non-UTC offset."""
        result = parse_expiry("2030-01-01T00:00:00+01:00", now=NOW)
        assert result == ExpiryResult.at(1_893_456_000 - 3600)

    def test_timestamp_in_the_past_is_accepted(self):
        """Test past timestamps resolve to an instant, not to never."""
        result = parse_expiry("1969-12-31T23:59:59Z", now=NOW)

        assert result.kind is ExpiryKind.AT
        assert result.instant == -1
        assert result != ExpiryResult.never()

    @pytest.mark.parametrize(
        "expression",
        [
            "never",
            "tomorrow",
            "1h",
            "-PT1S",
            "PT1X",
            "2030-01-01T00:00:00",  # no offset
            "2030-13-01T00:00:00Z",
            " ",
        ],
    )
    def test_garbage_is_invalid(self, expression):
        """Test unparseable input is invalid and never silently 'never'."""
        result = parse_expiry(expression, now=NOW)

        assert result.is_invalid
        assert result.kind is not ExpiryKind.NEVER

    @pytest.mark.parametrize("expression", ["P" + "9" * 400 + "Y", "P1000000Y", "PT" + "9" * 20 + "S"])
    def test_huge_duration_is_invalid(self, expression):
        """Test durations ending past the year 9999 are rejected."""
        assert parse_expiry(expression, now=NOW).is_invalid

    def test_duration_up_to_last_instant(self):
        """Test a duration ending exactly at the last representable second."""
        seconds = int(MAX_INSTANT - NOW)

        assert parse_expiry(f"PT{seconds}S", now=NOW) == ExpiryResult.at(MAX_INSTANT)
        assert parse_expiry(f"PT{seconds + 1}S", now=NOW).is_invalid

    @pytest.mark.parametrize(
        "expression", ["9999-12-31T23:59:59-01:00", "0001-01-01T00:00:00+01:00"]
    )
    def test_timestamp_outside_datetime_range_is_invalid(self, expression):
        """Test offsets that push a timestamp past the representable range."""
        assert parse_expiry(expression, now=NOW).is_invalid


class TestHelpers:
    """Tests for the duration and timestamp helpers."""

    def test_parse_duration_not_a_duration(self):
        """Test non-duration input returns None."""
        assert parse_duration("2030-01-01T00:00:00Z") is None

    def test_parse_duration_minutes_vs_months(self):
        """Test M means months before T and minutes after it."""
        assert parse_duration("P2M") == 60 * DAY
        assert parse_duration("PT2M") == 120

    def test_parse_timestamp_requires_offset(self):
        """Test naive timestamps are rejected."""
        assert parse_timestamp("2030-01-01T00:00:00") is None
        assert parse_timestamp("2030-01-01T00:00:00+00:00") == 1_893_456_000


class TestExpiryResult:
    """Tests for ExpiryResult conversions."""

    def test_to_auth_expire(self):
        """Test conversion to the stored representation."""
        assert ExpiryResult.never().to_auth_expire() is None
        assert ExpiryResult.at(42).to_auth_expire() == 42

    def test_invalid_cannot_be_stored(self):
        """Test invalid results refuse conversion."""
        with pytest.raises(ValueError):
            ExpiryResult.invalid().to_auth_expire()
