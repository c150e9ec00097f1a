from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, Mapping

from .completion import completion_status, entry_percentage, is_success
from .dates import DateLike, as_date, date_range
from .entries import entries_by_date, find_entry
from .models import CompletionStatus, DailyEntry, Habit


@dataclass(frozen=True)
class HabitStats:
    total_days: int = 0
    completed_days: int = 0
    average_completion: float = 0.0
    current_streak: int = 0
    active_days: int = 0
    exceeded_days: int = 0
    best_streak: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalDays": self.total_days,
            "completedDays": self.completed_days,
            "averageCompletion": self.average_completion,
            "currentStreak": self.current_streak,
            "activeDays": self.active_days,
            "exceededDays": self.exceeded_days,
            "bestStreak": self.best_streak,
        }


def _walk_streak(
    habit: Habit, by_date: Mapping[date, DailyEntry], floor: date, end: date
) -> int:
    streak = 0
    cursor = end
    lower = max(floor, habit.created_at)
    while cursor >= lower:
        # paused days and days after archiving neither count nor break the run
        if habit.is_active_on(cursor):
            if not is_success(completion_status(by_date.get(cursor), habit.direction)):
                break
            streak += 1
        cursor -= timedelta(days=1)
    return streak


def current_streak(habit: Habit, entries: Iterable[DailyEntry], end_date: DateLike) -> int:
    return _walk_streak(habit, entries_by_date(entries, habit.id), habit.created_at, as_date(end_date))


def habit_stats(
    habit: Habit, entries: Iterable[DailyEntry], start_date: DateLike, end_date: DateLike
) -> HabitStats:
    start = as_date(start_date)
    end = as_date(end_date)
    if end < start:
        return HabitStats()
    by_date = entries_by_date(entries, habit.id)

    total_days = 0
    completed_days = 0
    exceeded_days = 0
    active_days = 0
    percentage_sum = 0.0
    run = 0
    best = 0
    for day in date_range(start, end):
        if not habit.is_active_on(day):
            continue
        entry = by_date.get(day)
        status = completion_status(entry, habit.direction)
        total_days += 1
        if entry is not None:
            active_days += 1
        percentage_sum += entry_percentage(entry, habit.direction)
        if is_success(status):
            completed_days += 1
            run += 1
            best = max(best, run)
        else:
            run = 0
        if status in (CompletionStatus.EXCEEDED, CompletionStatus.ZERO_VICTORY):
            exceeded_days += 1

    average = percentage_sum / total_days if total_days else 0.0
    return HabitStats(
        total_days=total_days,
        completed_days=completed_days,
        average_completion=average,
        current_streak=_walk_streak(habit, by_date, start, end),
        active_days=active_days,
        exceeded_days=exceeded_days,
        best_streak=best,
    )


def daily_completion_percentage(
    entries_for_date: Iterable[DailyEntry], habits: Iterable[Habit], on_date: DateLike
) -> float:
    day = as_date(on_date)
    applicable = [habit for habit in habits if habit.is_active_on(day)]
    if not applicable:
        return 0.0
    entries = list(entries_for_date)
    total = 0.0
    for habit in applicable:
        entry = find_entry(entries, habit.id, day)
        # each habit contributes at most 100%
        total += min(entry_percentage(entry, habit.direction), 100.0)
    return total / len(applicable)
