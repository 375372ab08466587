"""Tests for day labels and count badges."""

import unittest
from datetime import datetime, timedelta, timezone

from notefeed.notes.dates import count_badge, day_label

UTC = timezone.utc
BERLIN_SUMMER = timezone(timedelta(hours=2))


class DayLabelTest(unittest.TestCase):
    def setUp(self):
        self.now = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)

    def test_same_calendar_day_is_today_regardless_of_time(self):
        self.assertEqual(day_label(datetime(2026, 10, 19, 0, 1, tzinfo=UTC), self.now, UTC), "Today")
        self.assertEqual(day_label(datetime(2026, 10, 19, 8, 59, tzinfo=UTC), self.now, UTC), "Today")

    def test_yesterday_is_by_calendar_date_not_elapsed_hours(self):
        # 10 hours ago, but on the previous date
        self.assertEqual(day_label(datetime(2026, 10, 18, 23, 0, tzinfo=UTC), self.now, UTC), "Yesterday")
        # 33 hours ago, still the previous date
        self.assertEqual(day_label(datetime(2026, 10, 18, 0, 0, tzinfo=UTC), self.now, UTC), "Yesterday")
        # 33h01m ago, two dates back
        self.assertEqual(day_label(datetime(2026, 10, 17, 23, 59, tzinfo=UTC), self.now, UTC), "October 17")

    def test_older_days_use_month_and_day(self):
        self.assertEqual(day_label(datetime(2026, 3, 5, 12, tzinfo=UTC), self.now, UTC), "March 5")

    def test_local_timezone_decides_the_date(self):
        late = datetime(2026, 10, 18, 22, 30, tzinfo=UTC)  # 00:30 on the 19th in UTC+2
        self.assertEqual(day_label(late, self.now, UTC), "Yesterday")
        self.assertEqual(day_label(late, self.now, BERLIN_SUMMER), "Today")


class CountBadgeTest(unittest.TestCase):
    def test_exact_below_threshold(self):
        self.assertEqual(count_badge(1, 16), "1")
        self.assertEqual(count_badge(14, 16), "14")

    def test_plus_at_or_above_threshold(self):
        self.assertEqual(count_badge(15, 16), "15+")
        self.assertEqual(count_badge(40, 16), "15+")


if __name__ == "__main__":
    unittest.main()
