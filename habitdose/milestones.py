"""One-time milestone detection around a single check-in.

The celebrated keys for a habit belong to the caller. ``detect_milestone``
takes them in and hands back an updated copy; nothing is kept here between
calls.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence, Set, Tuple

from .completion import completion_status, is_success
from .compound import progress_percentage
from .dates import DateLike, as_date
from .dose import target_dose
from .entries import new_entry_id
from .models import CompletionStatus, DailyEntry, Direction, Habit
from .stats import current_streak

logger = logging.getLogger(__name__)

STREAK_LENGTHS = (100, 30, 7)
PROGRESS_LEVELS = (75, 50, 25)


@dataclass(frozen=True)
class CheckinSnapshot:
    habit: Habit
    on_date: date
    # None when nothing was recorded for the day yet
    value: Optional[float]
    entries: Tuple[DailyEntry, ...]


@dataclass(frozen=True)
class MilestoneRule:
    key: str
    message: str
    check: Callable[[CheckinSnapshot], bool]


def _target_reached(snapshot: CheckinSnapshot) -> bool:
    habit = snapshot.habit
    if snapshot.value is None or habit.target_value is None:
        return False
    if habit.direction is Direction.INCREASE:
        return snapshot.value >= habit.target_value
    if habit.direction is Direction.DECREASE:
        return snapshot.value <= habit.target_value
    return False


def _dose_doubled(snapshot: CheckinSnapshot) -> bool:
    if snapshot.value is None or snapshot.habit.direction is not Direction.INCREASE:
        return False
    return snapshot.value >= 2 * snapshot.habit.start_value


def _dose_halved(snapshot: CheckinSnapshot) -> bool:
    if snapshot.value is None or snapshot.habit.direction is not Direction.DECREASE:
        return False
    return snapshot.value <= snapshot.habit.start_value / 2


def _progress_at_least(level: int) -> Callable[[CheckinSnapshot], bool]:
    def check(snapshot: CheckinSnapshot) -> bool:
        if snapshot.value is None or snapshot.habit.target_value is None:
            return False
        return progress_percentage(snapshot.habit, snapshot.value) >= level

    return check


def _streak_at_least(length: int) -> Callable[[CheckinSnapshot], bool]:
    def check(snapshot: CheckinSnapshot) -> bool:
        return current_streak(snapshot.habit, snapshot.entries, snapshot.on_date) >= length

    return check


def _any_entry(predicate: Callable[[CompletionStatus], bool]) -> Callable[[CheckinSnapshot], bool]:
    def check(snapshot: CheckinSnapshot) -> bool:
        direction = snapshot.habit.direction
        return any(predicate(completion_status(entry, direction)) for entry in snapshot.entries)

    return check


def _build_rules() -> Tuple[MilestoneRule, ...]:
    rules: List[MilestoneRule] = [
        MilestoneRule("target-reached", "Target reached. You made it all the way.", _target_reached),
        MilestoneRule("dose-doubled", "You have doubled your starting dose.", _dose_doubled),
        MilestoneRule("dose-halved", "You have cut your starting dose in half.", _dose_halved),
    ]
    progress_messages = {
        75: "Three quarters of the way. The finish line is in sight.",
        50: "Halfway to your target.",
        25: "A quarter of the way there. Nice start.",
    }
    for level in PROGRESS_LEVELS:
        rules.append(
            MilestoneRule(f"progress-{level}", progress_messages[level], _progress_at_least(level))
        )
    for length in STREAK_LENGTHS:
        rules.append(
            MilestoneRule(
                f"streak-{length}", f"{length} days in a row.", _streak_at_least(length)
            )
        )
    rules.append(
        MilestoneRule(
            "first-zero",
            "A day at zero. That is the best possible result.",
            _any_entry(lambda status: status is CompletionStatus.ZERO_VICTORY),
        )
    )
    rules.append(
        MilestoneRule("first-completion", "First day on target.", _any_entry(is_success))
    )
    return tuple(rules)


MILESTONE_RULES = _build_rules()
_MESSAGES = {rule.key: rule.message for rule in MILESTONE_RULES}


def milestone_message(key: str) -> str:
    return _MESSAGES.get(key, "Congratulations on your progress!")


def _snapshots(
    habit: Habit,
    previous_value: float,
    new_value: float,
    entries: Sequence[DailyEntry],
    day: date,
) -> Tuple[CheckinSnapshot, CheckinSnapshot]:
    history = [entry for entry in entries if entry.habit_id == habit.id and entry.date != day]
    existing = None
    for entry in entries:
        if entry.habit_id == habit.id and entry.date == day:
            existing = entry

    if existing is None:
        before = CheckinSnapshot(habit, day, None, tuple(history))
        after_entry = DailyEntry(
            id=new_entry_id(),
            habit_id=habit.id,
            date=day,
            target_dose=target_dose(habit, day),
            actual_value=new_value,
        )
    else:
        before_entry = replace(existing, actual_value=previous_value)
        before = CheckinSnapshot(habit, day, previous_value, tuple(history) + (before_entry,))
        after_entry = replace(existing, actual_value=new_value)
    after = CheckinSnapshot(habit, day, new_value, tuple(history) + (after_entry,))
    return before, after


def detect_milestone(
    habit: Habit,
    previous_value: float,
    new_value: float,
    entries: Iterable[DailyEntry],
    celebrated: Iterable[str],
    on_date: DateLike,
    rules: Sequence[MilestoneRule] = MILESTONE_RULES,
) -> Tuple[Optional[str], Set[str]]:
    """Return the first milestone crossed by this check-in, if any.

    ``entries`` is the history before the check-in. A rule fires when it is
    false just before the check-in, true just after, and its key is not yet
    in ``celebrated``. Only the first firing rule is reported. Every rule
    crossed by the same check-in is added to the returned set, so repeating
    the call with that set reports nothing.
    """
    updated = set(celebrated)
    entries = list(entries)
    before, after = _snapshots(habit, previous_value, new_value, entries, as_date(on_date))
    fired: Optional[str] = None
    for rule in rules:
        if rule.key in updated:
            continue
        if rule.check(before) or not rule.check(after):
            continue
        updated.add(rule.key)
        if fired is None:
            fired = rule.key
            logger.debug("milestone %s fired for habit %s", rule.key, habit.id)
    return fired, updated
