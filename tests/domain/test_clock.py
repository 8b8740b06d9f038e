"""Tests for the injectable clocks."""

from datetime import UTC, date, datetime, timezone

from money_kernel.domain.clock import DeterministicClock, SystemClock


class TestDeterministicClock:
    """A frozen clock only moves when told to."""

    def test_default_instant(self):
        clock = DeterministicClock()
        assert clock.now() == datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)
        assert clock.now() == clock.now()

    def test_plain_date_is_pinned_to_midday_utc(self):
        clock = DeterministicClock(date(2024, 3, 31))

        assert clock.now() == datetime(2024, 3, 31, 12, 0, tzinfo=UTC)
        assert clock.today() == date(2024, 3, 31)

    def test_naive_datetime_taken_as_utc(self):
        clock = DeterministicClock(datetime(2024, 2, 29, 23, 59))

        assert clock.now().tzinfo is not None
        assert clock.current_month() == (2024, 2)

    def test_advance_crosses_month_boundary(self):
        clock = DeterministicClock(datetime(2024, 1, 31, 23, 0, tzinfo=timezone.utc))

        clock.advance(seconds=3600)
        assert clock.current_month() == (2024, 2)

        clock.advance(days=30)
        assert clock.today() == date(2024, 3, 2)

    def test_set_time(self):
        clock = DeterministicClock()
        clock.set_time(date(2025, 12, 1))

        assert clock.current_month() == (2025, 12)


class TestSystemClock:

    def test_now_is_timezone_aware(self):
        assert SystemClock().now().tzinfo is not None
