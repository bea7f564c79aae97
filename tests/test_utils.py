"""Tests for crumb.utils module."""

from datetime import datetime, timedelta, timezone

from crumb.utils import EPOCH, as_utc, ascii_lower, utcnow


class TestAsciiLower:
    """Tests for ascii_lower function."""

    def test_lowercases_ascii(self):
        """Test ASCII letters are lowercased."""
        assert ascii_lower("Example.COM") == "example.com"

    def test_leaves_non_ascii_alone(self):
        """Test non-ASCII letters keep their case."""
        assert ascii_lower("ÉXAMPLE.com") == "Éxample.com"

    def test_empty_string(self):
        """Test empty string stays empty."""
        assert ascii_lower("") == ""


class TestTime:
    """Tests for the UTC helpers."""

    def test_utcnow_is_aware(self):
        """Test utcnow returns an aware UTC datetime."""
        now = utcnow()
        assert now.tzinfo == timezone.utc
        assert now > EPOCH

    def test_epoch(self):
        """Test EPOCH is the start of 1970 UTC."""
        assert EPOCH == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_as_utc_naive(self):
        """Test naive datetimes are treated as UTC."""
        assert as_utc(datetime(2030, 1, 1)) == datetime(2030, 1, 1, tzinfo=timezone.utc)

    def test_as_utc_converts(self):
        """Test aware datetimes are converted to UTC."""
        est = timezone(timedelta(hours=-5))
        converted = as_utc(datetime(2030, 1, 1, 7, 0, tzinfo=est))
        assert converted == datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert converted.tzinfo == timezone.utc
