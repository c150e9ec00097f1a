from typing import Optional

from .models import CompletionStatus, DailyEntry, Direction

MAX_COMPLETION_PERCENTAGE = 200.0

SUCCESS_STATUSES = frozenset(
    {CompletionStatus.COMPLETED, CompletionStatus.EXCEEDED, CompletionStatus.ZERO_VICTORY}
)


def completion_status(entry: Optional[DailyEntry], direction: Direction) -> CompletionStatus:
    if entry is None:
        return CompletionStatus.PENDING
    actual = entry.actual_value
    target = entry.target_dose
    if direction is Direction.DECREASE:
        # zero outranks completed even when the target itself is zero
        if actual == 0:
            return CompletionStatus.ZERO_VICTORY
        if actual > target:
            return CompletionStatus.PARTIAL
        return CompletionStatus.COMPLETED
    if actual < target:
        return CompletionStatus.PARTIAL
    if actual == target:
        return CompletionStatus.COMPLETED
    return CompletionStatus.EXCEEDED


def is_success(status: CompletionStatus) -> bool:
    return status in SUCCESS_STATUSES


def _clamp_percentage(value: float) -> float:
    return max(0.0, min(MAX_COMPLETION_PERCENTAGE, value))


def completion_percentage(actual: float, target: float, direction: Direction) -> float:
    if direction is Direction.DECREASE:
        if actual == 0:
            return MAX_COMPLETION_PERCENTAGE
        if target <= 0 or actual < 0:
            return 0.0
        return _clamp_percentage(target / actual * 100)
    if target <= 0:
        return 100.0 if actual > 0 else 0.0
    return _clamp_percentage(actual / target * 100)


def entry_percentage(entry: Optional[DailyEntry], direction: Direction) -> float:
    if entry is None:
        return 0.0
    return completion_percentage(entry.actual_value, entry.target_dose, direction)
