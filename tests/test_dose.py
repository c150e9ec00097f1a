import math
import unittest
from datetime import date

from habitdose.dates import add_days
from habitdose.dose import round_half_up, target_dose
from habitdose.models import (
    Direction,
    Habit,
    Progression,
    ProgressionMode,
    ProgressionPeriod,
)

CREATED = date(2025, 1, 1)


def _habit(direction=Direction.INCREASE, start=10, mode=ProgressionMode.ABSOLUTE,
           value=1, period=ProgressionPeriod.DAILY, target=None):
    progression = None
    if direction is not Direction.MAINTAIN:
        progression = Progression(mode=mode, value=value, period=period)
    return Habit(
        id="h1",
        direction=direction,
        start_value=start,
        created_at=CREATED,
        unit="reps",
        progression=progression,
        target_value=target,
    )


class RoundingTests(unittest.TestCase):
    def test_half_rounds_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(10.5), 11)
        self.assertEqual(round_half_up(2.4999), 2)
        self.assertEqual(round_half_up(7.0), 7)

    def test_non_finite_passes_through(self):
        self.assertTrue(math.isinf(round_half_up(float("inf"))))
        self.assertTrue(math.isnan(round_half_up(float("nan"))))


class TargetDoseTests(unittest.TestCase):
    def test_maintain_never_moves(self):
        habit = _habit(direction=Direction.MAINTAIN, start=7)
        for offset in (0, 1, 30, 400):
            self.assertEqual(target_dose(habit, add_days(CREATED, offset)), 7)

    def test_absolute_increase_one_period(self):
        habit = _habit(value=2)
        self.assertEqual(target_dose(habit, "2025-01-01"), 10)
        self.assertEqual(target_dose(habit, "2025-01-02"), 12)
        self.assertEqual(target_dose(habit, "2025-01-11"), 30)

    def test_weekly_percentage_worked_example(self):
        habit = _habit(mode=ProgressionMode.PERCENTAGE, value=5, period=ProgressionPeriod.WEEKLY)
        self.assertEqual(target_dose(habit, "2025-01-07"), 10)
        self.assertEqual(target_dose(habit, "2025-01-08"), 11)

    def test_percentage_compounds(self):
        habit = _habit(mode=ProgressionMode.PERCENTAGE, value=5, period=ProgressionPeriod.WEEKLY)
        # 10 * 1.05^2 = 11.025, 10 * 1.05^3 = 11.576
        self.assertEqual(target_dose(habit, add_days(CREATED, 14)), 11)
        self.assertEqual(target_dose(habit, add_days(CREATED, 21)), 12)
        self.assertEqual(target_dose(habit, add_days(CREATED, 7 * 20)), round_half_up(10 * 1.05 ** 20))

    def test_percentage_decrease(self):
        habit = _habit(
            direction=Direction.DECREASE,
            start=100,
            mode=ProgressionMode.PERCENTAGE,
            value=10,
            period=ProgressionPeriod.WEEKLY,
        )
        self.assertEqual(target_dose(habit, add_days(CREATED, 14)), 81)
        self.assertEqual(target_dose(habit, add_days(CREATED, 21)), 73)

    def test_half_step_rounds_up(self):
        habit = _habit(value=0.5)
        self.assertEqual(target_dose(habit, "2025-01-02"), 11)
        self.assertEqual(target_dose(habit, "2025-01-03"), 11)
        self.assertEqual(target_dose(habit, "2025-01-04"), 12)

    def test_decrease_clamps_at_zero_target(self):
        habit = _habit(
            direction=Direction.DECREASE, value=1, period=ProgressionPeriod.WEEKLY, target=0
        )
        self.assertEqual(target_dose(habit, add_days(CREATED, 7 * 9)), 1)
        self.assertEqual(target_dose(habit, add_days(CREATED, 7 * 10)), 0)
        self.assertEqual(target_dose(habit, add_days(CREATED, 7 * 15)), 0)

    def test_decrease_without_target_never_negative(self):
        habit = _habit(direction=Direction.DECREASE, start=5, value=1)
        self.assertEqual(target_dose(habit, add_days(CREATED, 10)), 0)

    def test_decrease_stops_at_target(self):
        habit = _habit(direction=Direction.DECREASE, start=20, value=3, target=8)
        self.assertEqual(target_dose(habit, add_days(CREATED, 3)), 11)
        self.assertEqual(target_dose(habit, add_days(CREATED, 5)), 8)

    def test_increase_stops_at_target(self):
        habit = _habit(value=5, target=30)
        self.assertEqual(target_dose(habit, add_days(CREATED, 3)), 25)
        self.assertEqual(target_dose(habit, add_days(CREATED, 10)), 30)

    def test_percentage_increase_stops_at_target(self):
        habit = _habit(mode=ProgressionMode.PERCENTAGE, value=10, target=20)
        # 10 * 1.1^7 = 19.49, 10 * 1.1^8 = 21.44
        self.assertEqual(target_dose(habit, add_days(CREATED, 7)), 19)
        self.assertEqual(target_dose(habit, add_days(CREATED, 8)), 20)
        self.assertEqual(target_dose(habit, add_days(CREATED, 60)), 20)

    def test_percentage_decrease_stops_at_target(self):
        habit = _habit(
            direction=Direction.DECREASE, start=100, mode=ProgressionMode.PERCENTAGE, value=10, target=50
        )
        # 100 * 0.9^6 = 53.14, 100 * 0.9^7 = 47.83
        self.assertEqual(target_dose(habit, add_days(CREATED, 6)), 53)
        self.assertEqual(target_dose(habit, add_days(CREATED, 7)), 50)

    def test_long_running_percentage_settles_on_target(self):
        growing = _habit(mode=ProgressionMode.PERCENTAGE, value=50, target=100)
        shrinking = _habit(
            direction=Direction.DECREASE, start=100, mode=ProgressionMode.PERCENTAGE, value=50, target=5
        )
        self.assertEqual(target_dose(growing, "2030-01-01"), 100)
        self.assertEqual(target_dose(shrinking, "2030-01-01"), 5)

    def test_long_running_percentage_without_target_is_infinite(self):
        habit = _habit(mode=ProgressionMode.PERCENTAGE, value=50)
        dose = target_dose(habit, "2030-01-01")
        self.assertTrue(math.isinf(dose))
        self.assertGreater(dose, 0)

    def test_rounding_never_passes_fractional_target(self):
        increase = _habit(value=1, target=12.5)
        self.assertEqual(target_dose(increase, add_days(CREATED, 2)), 12)
        self.assertEqual(target_dose(increase, add_days(CREATED, 9)), 12.5)
        decrease = _habit(direction=Direction.DECREASE, value=1, target=7.5)
        self.assertEqual(target_dose(decrease, add_days(CREATED, 2)), 8)
        self.assertEqual(target_dose(decrease, add_days(CREATED, 3)), 7.5)

    def test_dates_before_creation_return_start(self):
        habit = _habit(value=3)
        self.assertEqual(target_dose(habit, "2024-12-01"), 10)

    def test_zero_elapsed_returns_start_exactly(self):
        habit = _habit(start=2.5, mode=ProgressionMode.PERCENTAGE, value=10, period=ProgressionPeriod.WEEKLY)
        self.assertEqual(target_dose(habit, "2025-01-05"), 2.5)


if __name__ == "__main__":
    unittest.main()
