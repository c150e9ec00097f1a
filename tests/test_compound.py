import unittest
from datetime import date, timedelta

from habitdose.compound import compound_effect, linear_regression, progress_percentage, projection
from habitdose.models import (
    DailyEntry,
    Direction,
    Habit,
    Progression,
    ProgressionMode,
    ProgressionPeriod,
)


def _habit(direction=Direction.INCREASE, start=10, mode=ProgressionMode.PERCENTAGE,
           value=5, period=ProgressionPeriod.WEEKLY, target=None):
    progression = None
    if direction is not Direction.MAINTAIN:
        progression = Progression(mode, value, period)
    return Habit(
        id="h1",
        direction=direction,
        start_value=start,
        created_at=date(2025, 1, 1),
        progression=progression,
        target_value=target,
    )


class CompoundEffectTests(unittest.TestCase):
    def test_one_week_of_five_percent(self):
        effect = compound_effect(_habit(), "2025-01-08")
        self.assertEqual(effect.start_dose, 10)
        self.assertEqual(effect.current_dose, 11)
        self.assertEqual(effect.days_elapsed, 7)
        self.assertEqual(effect.absolute_change, 1)
        self.assertAlmostEqual(effect.percentage_change, 10.0)

    def test_decrease_keeps_negative_sign(self):
        habit = _habit(direction=Direction.DECREASE, mode=ProgressionMode.ABSOLUTE, value=1, target=0)
        effect = compound_effect(habit, "2025-01-22")
        self.assertEqual(effect.current_dose, 7)
        self.assertEqual(effect.absolute_change, -3)
        self.assertAlmostEqual(effect.percentage_change, -30.0)

    def test_years_of_daily_growth_stop_at_target(self):
        habit = _habit(value=50, period=ProgressionPeriod.DAILY, target=100)
        effect = compound_effect(habit, "2030-01-01")
        self.assertEqual(effect.current_dose, 100)
        self.assertEqual(effect.absolute_change, 90)
        self.assertAlmostEqual(effect.percentage_change, 900.0)

    def test_before_creation(self):
        effect = compound_effect(_habit(), "2024-12-25")
        self.assertEqual(effect.days_elapsed, 0)
        self.assertEqual(effect.absolute_change, 0)
        self.assertEqual(effect.percentage_change, 0)

    def test_zero_start_reports_zero_percentage(self):
        habit = _habit(direction=Direction.MAINTAIN, start=0)
        self.assertEqual(compound_effect(habit, "2025-03-01").percentage_change, 0.0)

    def test_to_dict_uses_camel_case(self):
        payload = compound_effect(_habit(), "2025-01-08").to_dict()
        self.assertEqual(payload["currentDose"], 11)
        self.assertEqual(payload["daysElapsed"], 7)


class ProgressTests(unittest.TestCase):
    def test_progress_toward_target(self):
        self.assertAlmostEqual(progress_percentage(_habit(target=20), 15), 50.0)
        decrease = _habit(direction=Direction.DECREASE, target=0)
        self.assertAlmostEqual(progress_percentage(decrease, 5), 50.0)
        self.assertAlmostEqual(progress_percentage(decrease, 0), 100.0)

    def test_no_target_or_maintain(self):
        self.assertEqual(progress_percentage(_habit(), 50), 0.0)
        self.assertEqual(progress_percentage(_habit(direction=Direction.MAINTAIN, target=20), 20), 0.0)

    def test_start_already_past_target(self):
        habit = _habit(start=30, target=20)
        self.assertEqual(progress_percentage(habit, 25), 100.0)


class ProjectionTests(unittest.TestCase):
    def test_linear_regression(self):
        slope, intercept = linear_regression([(0, 1), (1, 3), (2, 5)])
        self.assertAlmostEqual(slope, 2.0)
        self.assertAlmostEqual(intercept, 1.0)
        self.assertEqual(linear_regression([]), (0.0, 0.0))
        self.assertEqual(linear_regression([(3, 4)]), (0.0, 4))

    def test_projection_from_recent_entries(self):
        today = date(2025, 2, 1)
        entries = [
            DailyEntry(
                id=str(offset),
                habit_id="h1",
                date=today - timedelta(days=3 - offset),
                target_dose=10,
                actual_value=10 + offset,
            )
            for offset in range(4)
        ]
        result = projection(_habit(target=20), entries, today)
        self.assertEqual(result.current_value, 13)
        self.assertEqual(result.target_value, 20)
        self.assertAlmostEqual(result.progress_percentage, 30.0)
        self.assertAlmostEqual(result.weekly_rate, 7.0)
        self.assertEqual(result.days_remaining, 7)
        self.assertEqual(result.estimated_completion_date, date(2025, 2, 8))
        self.assertAlmostEqual(result.projection_in_30_days, 43.0)

    def test_projection_without_entries_uses_dose(self):
        result = projection(_habit(target=20), [], "2025-01-08")
        self.assertEqual(result.current_value, 11)
        self.assertEqual(result.weekly_rate, 0)
        self.assertIsNone(result.estimated_completion_date)
        self.assertIsNone(result.days_remaining)


if __name__ == "__main__":
    unittest.main()
