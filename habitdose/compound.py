"""How far a habit's dose has moved since day one, and where it is heading."""

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from .dates import DateLike, as_date, days_between, format_date
from .dose import Number, target_dose
from .models import DailyEntry, Direction, Habit

PROJECTION_WINDOW_DAYS = 28


@dataclass(frozen=True)
class CompoundEffect:
    start_dose: Number
    current_dose: Number
    days_elapsed: int
    absolute_change: Number
    percentage_change: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startDose": self.start_dose,
            "currentDose": self.current_dose,
            "daysElapsed": self.days_elapsed,
            "absoluteChange": self.absolute_change,
            "percentageChange": self.percentage_change,
        }


@dataclass(frozen=True)
class Projection:
    current_value: float
    target_value: float
    progress_percentage: float
    weekly_rate: float
    estimated_completion_date: Optional[date]
    days_remaining: Optional[int]
    projection_in_30_days: float
    projection_in_90_days: float

    def to_dict(self) -> Dict[str, Any]:
        completion = self.estimated_completion_date
        return {
            "currentValue": self.current_value,
            "targetValue": self.target_value,
            "progressPercentage": self.progress_percentage,
            "weeklyRate": self.weekly_rate,
            "estimatedCompletionDate": format_date(completion) if completion else None,
            "daysRemaining": self.days_remaining,
            "projectionIn30Days": self.projection_in_30_days,
            "projectionIn90Days": self.projection_in_90_days,
        }


def compound_effect(habit: Habit, reference_date: DateLike) -> CompoundEffect:
    start_dose = habit.start_value
    current_dose = target_dose(habit, reference_date)
    absolute_change = current_dose - start_dose
    if start_dose > 0:
        percentage_change = absolute_change / start_dose * 100
    else:
        percentage_change = 0.0
    return CompoundEffect(
        start_dose=start_dose,
        current_dose=current_dose,
        days_elapsed=max(days_between(habit.created_at, reference_date), 0),
        absolute_change=absolute_change,
        percentage_change=percentage_change,
    )


def progress_percentage(habit: Habit, value: float) -> float:
    """Share of the way from start value to target value, in percent.

    Zero for maintain habits and habits without a target. Not clamped, so a
    value past the target reports more than 100.
    """
    target = habit.target_value
    start = habit.start_value
    if target is None:
        return 0.0
    if habit.direction is Direction.INCREASE:
        if start >= target:
            return 100.0 if value >= target else 0.0
        return (value - start) / (target - start) * 100
    if habit.direction is Direction.DECREASE:
        if start <= target:
            return 100.0 if value <= target else 0.0
        return (start - value) / (start - target) * 100
    return 0.0


def linear_regression(points: Sequence[Tuple[float, float]]) -> Tuple[float, float]:
    n = len(points)
    if n == 0:
        return 0.0, 0.0
    if n == 1:
        return 0.0, points[0][1]
    sum_x = sum(x for x, _ in points)
    sum_y = sum(y for _, y in points)
    sum_xy = sum(x * y for x, y in points)
    sum_xx = sum(x * x for x, _ in points)
    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0, sum_y / n
    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def projection(
    habit: Habit, entries: Iterable[DailyEntry], reference_date: DateLike
) -> Projection:
    today = as_date(reference_date)
    window_start = today - timedelta(days=PROJECTION_WINDOW_DAYS)
    recent = sorted(
        (
            entry
            for entry in entries
            if entry.habit_id == habit.id and window_start <= entry.date <= today
        ),
        key=lambda entry: entry.date,
    )
    current = recent[-1].actual_value if recent else target_dose(habit, today)
    target = habit.target_value if habit.target_value is not None else current
    progress = max(0.0, min(100.0, progress_percentage(habit, current)))

    points = [(float((entry.date - window_start).days), entry.actual_value) for entry in recent]
    slope, _ = linear_regression(points)
    weekly_rate = slope * 7

    estimated: Optional[date] = None
    days_remaining: Optional[int] = None
    if habit.target_value is not None and weekly_rate != 0:
        remaining = habit.target_value - current
        heading_there = (
            habit.direction is Direction.INCREASE and weekly_rate > 0 and remaining > 0
        ) or (habit.direction is Direction.DECREASE and weekly_rate < 0 and remaining < 0)
        if heading_there:
            days_remaining = math.ceil(abs(remaining / weekly_rate) * 7)
            estimated = today + timedelta(days=days_remaining)

    daily_rate = weekly_rate / 7
    return Projection(
        current_value=current,
        target_value=target,
        progress_percentage=progress,
        weekly_rate=weekly_rate,
        estimated_completion_date=estimated,
        days_remaining=days_remaining,
        projection_in_30_days=max(0.0, current + daily_rate * 30),
        projection_in_90_days=max(0.0, current + daily_rate * 90),
    )
