#!/usr/bin/env python3
"""Tests for date arithmetic and urgency helpers."""
import pytest
from datetime import date, datetime, timedelta
from gaadi import classify_urgency, days_left, is_past, parse_date, Urgency
from gaadi.calculations import to_iso


class TestParseDate:
    """Tests for parse_date normalization."""

    def test_iso_date_string(self):
        assert parse_date("2025-01-15") == datetime(2025, 1, 15)

    def test_iso_datetime_string(self):
        assert parse_date("2025-01-15T08:30:00") == datetime(2025, 1, 15, 8, 30)

    def test_aware_string_converted_to_utc(self):
        """Offsets are folded into UTC and the zone dropped."""
        assert parse_date("2025-01-15T08:30:00+05:30") == datetime(2025, 1, 15, 3, 0)
        assert parse_date("2025-01-15T08:30:00.000Z") == datetime(2025, 1, 15, 8, 30)

    def test_date_object(self):
        assert parse_date(date(2025, 1, 15)) == datetime(2025, 1, 15)

    def test_invalid_string_raises(self):
        with pytest.raises(ValueError):
            parse_date("not a date")


class TestIsPast:
    """Tests for is_past (calendar-day comparison)."""

    def test_yesterday_is_past(self):
        assert is_past("2025-05-31", datetime(2025, 6, 1, 10, 0))

    def test_today_is_not_past(self):
        """Earlier today is still today."""
        assert not is_past("2025-06-01T01:00:00", datetime(2025, 6, 1, 10, 0))
        assert not is_past("2025-06-01", datetime(2025, 6, 1, 23, 59))

    def test_tomorrow_is_not_past(self):
        assert not is_past("2025-06-02", datetime(2025, 6, 1, 10, 0))


class TestDaysLeft:
    """Tests for days_left."""

    def test_whole_days(self):
        now = datetime(2025, 6, 1, 10, 0)
        assert days_left(now + timedelta(days=5), now) == 5

    def test_truncates_partial_days(self):
        now = datetime(2025, 6, 1, 10, 0)
        assert days_left(now + timedelta(days=5, hours=23), now) == 5

    def test_earlier_today_is_zero(self):
        """Hours in the past truncate toward zero, not to -1."""
        assert days_left("2025-06-01T01:00:00", datetime(2025, 6, 1, 10, 0)) == 0

    def test_negative_when_past(self):
        assert days_left("2025-05-29T10:00:00", datetime(2025, 6, 1, 10, 0)) == -3


class TestClassifyUrgency:
    """Tests for classify_urgency with a 14 day lead time."""

    def test_urgent_below_half_lead_time(self):
        assert classify_urgency(5, 14) == Urgency.URGENT
        assert classify_urgency(0, 14) == Urgency.URGENT
        assert classify_urgency(6, 14) == Urgency.URGENT

    def test_soon_between_half_and_full_lead_time(self):
        assert classify_urgency(7, 14) == Urgency.SOON
        assert classify_urgency(10, 14) == Urgency.SOON
        assert classify_urgency(13, 14) == Urgency.SOON

    def test_normal_at_or_beyond_lead_time(self):
        assert classify_urgency(14, 14) == Urgency.NORMAL
        assert classify_urgency(20, 14) == Urgency.NORMAL

    def test_odd_lead_time_uses_fractional_half(self):
        """7 / 2 = 3.5, so 3 is urgent and 4 is soon."""
        assert classify_urgency(3, 7) == Urgency.URGENT
        assert classify_urgency(4, 7) == Urgency.SOON


class TestToIso:
    """Tests for to_iso."""

    def test_string_kept_as_given(self):
        assert to_iso("2025-01-15T08:30:00.000Z") == "2025-01-15T08:30:00.000Z"

    def test_date_and_datetime(self):
        assert to_iso(date(2025, 1, 15)) == "2025-01-15"
        assert to_iso(datetime(2025, 1, 15, 8, 30)) == "2025-01-15T08:30:00"

    def test_bad_string_raises(self):
        with pytest.raises(ValueError):
            to_iso("15/01/2025")
