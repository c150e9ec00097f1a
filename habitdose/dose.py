import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from .dates import DateLike, elapsed_periods
from .models import Direction, Habit, ProgressionMode

Number = Union[int, float]


def round_half_up(value: float) -> Number:
    if not math.isfinite(value):
        return value
    # repr() gives the shortest decimal form, so 10.5 stays 10.5 before quantizing
    return int(Decimal(repr(value)).to_integral_value(rounding=ROUND_HALF_UP))


def _sign(direction: Direction) -> int:
    return -1 if direction is Direction.DECREASE else 1


def _clamp(dose: float, habit: Habit) -> float:
    target = habit.target_value
    if habit.direction is Direction.INCREASE:
        if target is not None:
            return min(dose, target)
        return dose
    # decrease never goes below the target, or below zero without one
    return max(dose, target if target is not None else 0)


def elapsed_for(habit: Habit, on_date: DateLike) -> int:
    if habit.progression is None:
        return 0
    return elapsed_periods(habit.created_at, on_date, habit.progression.period.value)


def _compound(start_value: float, factor: float, elapsed: int) -> float:
    try:
        return start_value * factor ** elapsed
    except OverflowError:
        # |factor| > 1 here; a negative factor flips sign on odd periods
        negative = (start_value < 0) != (factor < 0 and elapsed % 2 == 1)
        return -math.inf if negative else math.inf


def raw_dose(habit: Habit, on_date: DateLike) -> float:
    """Unrounded, unclamped dose for ``on_date``.

    A percentage progression that outgrows a float returns an infinity.
    """
    progression = habit.progression
    if habit.direction is Direction.MAINTAIN or progression is None:
        return habit.start_value
    elapsed = elapsed_for(habit, on_date)
    sign = _sign(habit.direction)
    if progression.mode is ProgressionMode.ABSOLUTE:
        return habit.start_value + sign * progression.value * elapsed
    return _compound(habit.start_value, 1 + sign * progression.value / 100, elapsed)


def target_dose(habit: Habit, on_date: DateLike) -> Number:
    if habit.direction is Direction.MAINTAIN or habit.progression is None:
        return habit.start_value
    if elapsed_for(habit, on_date) == 0:
        return habit.start_value
    # clamp after rounding so a fractional target is never passed
    return _clamp(round_half_up(raw_dose(habit, on_date)), habit)
