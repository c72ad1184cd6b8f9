"""Tests for aggregation windows."""
import unittest
from datetime import date, datetime, timedelta

from coinary.ledger.models import TimeRange
from coinary.ledger.windows import (
    month_window,
    previous_month,
    rolling_months,
    time_range_window,
    week_window,
)
from coinary.utils.exceptions import ValidationError


class TestWeekWindow(unittest.TestCase):
    """Test Monday-Sunday weeks."""

    def test_wednesday_reference(self):
        window = week_window(datetime(2025, 5, 14, 15, 30))

        self.assertEqual(window.start, datetime(2025, 5, 12, 0, 0, 0))
        self.assertEqual(window.end, datetime(2025, 5, 18, 23, 59, 59, 999000))

    def test_boundaries_are_inclusive(self):
        window = week_window(date(2025, 5, 14))
        one_ms = timedelta(milliseconds=1)

        self.assertTrue(window.contains(window.start))
        self.assertTrue(window.contains(window.end))
        self.assertFalse(window.contains(window.start - one_ms))
        self.assertFalse(window.contains(window.end + one_ms))

    def test_sunday_belongs_to_preceding_monday(self):
        window = week_window(datetime(2025, 5, 18, 8, 0))
        self.assertEqual(window.start, datetime(2025, 5, 12))

    def test_week_across_year_boundary(self):
        window = week_window(datetime(2026, 1, 1))
        self.assertEqual(window.start, datetime(2025, 12, 29))
        self.assertEqual(window.end.date(), date(2026, 1, 4))


class TestMonthWindow(unittest.TestCase):
    """Test calendar month windows."""

    def test_month_window(self):
        window = month_window(2, 2024)

        self.assertEqual(window.start, datetime(2024, 2, 1))
        self.assertEqual(window.end, datetime(2024, 2, 29, 23, 59, 59, 999000))

    def test_december(self):
        window = month_window(12, 2025)
        self.assertEqual(window.end, datetime(2025, 12, 31, 23, 59, 59, 999000))

    def test_invalid_month(self):
        for month in (0, 13, -1):
            with self.assertRaises(ValidationError):
                month_window(month, 2025)


class TestRollingMonths(unittest.TestCase):
    """Test rolling multi-month windows."""

    def test_rolls_back_across_year(self):
        self.assertEqual(rolling_months(1, 2026), [(11, 2025), (12, 2025), (1, 2026)])

    def test_custom_size(self):
        self.assertEqual(rolling_months(5, 2025, 1), [(5, 2025)])
        self.assertEqual(len(rolling_months(6, 2025, 14)), 14)
        self.assertEqual(rolling_months(6, 2025, 14)[0], (5, 2024))

    def test_invalid_size(self):
        with self.assertRaises(ValidationError):
            rolling_months(5, 2025, 0)

    def test_invalid_month(self):
        with self.assertRaises(ValidationError):
            rolling_months(13, 2025)

    def test_previous_month(self):
        self.assertEqual(previous_month(1, 2025), (12, 2024))
        self.assertEqual(previous_month(7, 2025), (6, 2025))


class TestTimeRangeWindow(unittest.TestCase):
    """Test dashboard periods."""

    def setUp(self):
        # Thursday
        self.now = datetime(2025, 5, 15, 10, 45)

    def test_all_ranges_end_today(self):
        for time_range in TimeRange:
            window = time_range_window(time_range, self.now)
            self.assertEqual(window.end, datetime(2025, 5, 15, 23, 59, 59, 999000))

    def test_range_starts(self):
        self.assertEqual(time_range_window(TimeRange.DAY, self.now).start, datetime(2025, 5, 15))
        self.assertEqual(time_range_window(TimeRange.WEEK, self.now).start, datetime(2025, 5, 12))
        self.assertEqual(time_range_window(TimeRange.MONTH, self.now).start, datetime(2025, 5, 1))
        self.assertEqual(time_range_window("year", self.now).start, datetime(2025, 1, 1))


if __name__ == "__main__":
    unittest.main()
