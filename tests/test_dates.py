import unittest
from datetime import date

from habitdose import dates


class CalendarArithmeticTests(unittest.TestCase):
    def test_days_between_accepts_strings_and_dates(self):
        self.assertEqual(dates.days_between("2025-01-01", "2025-01-08"), 7)
        self.assertEqual(dates.days_between(date(2025, 1, 8), "2025-01-01"), -7)
        self.assertEqual(dates.days_between("2024-02-28", "2024-03-01"), 2)

    def test_weeks_between_floors(self):
        self.assertEqual(dates.weeks_between("2025-01-01", "2025-01-07"), 0)
        self.assertEqual(dates.weeks_between("2025-01-01", "2025-01-08"), 1)
        self.assertEqual(dates.weeks_between("2025-01-01", "2025-01-21"), 2)

    def test_elapsed_periods_clamps_before_start(self):
        self.assertEqual(dates.elapsed_periods("2025-01-10", "2025-01-01", dates.DAILY), 0)
        self.assertEqual(dates.elapsed_periods("2025-01-01", "2025-01-10", dates.DAILY), 9)
        self.assertEqual(dates.elapsed_periods("2025-01-01", "2025-01-15", dates.WEEKLY), 2)

    def test_date_range_is_inclusive(self):
        span = dates.date_range("2026-02-01", "2026-02-03")
        self.assertEqual(span, [date(2026, 2, 1), date(2026, 2, 2), date(2026, 2, 3)])
        self.assertEqual(dates.date_range("2026-02-03", "2026-02-01"), [])

    def test_window_dates_ends_on_end_date(self):
        window = dates.window_dates(date(2026, 2, 7), 3)
        self.assertEqual(window, [date(2026, 2, 5), date(2026, 2, 6), date(2026, 2, 7)])

    def test_parse_rejects_garbage(self):
        with self.assertRaises(ValueError):
            dates.parse_date("2026-13-01")


if __name__ == "__main__":
    unittest.main()
