"""Check-in writes and the per-entry operations log.

Cumulative entries carry an ordered log of signed operations; ``actual_value``
is always the replay of that log. Undo drops the last operation.
"""

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Dict, Iterable, Optional, Sequence, Tuple

from .dates import DateLike, as_date
from .dose import target_dose
from .models import DailyEntry, EntryMode, Habit, Operation, OperationKind

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def new_entry_id() -> str:
    return uuid.uuid4().hex


def replay_operations(operations: Iterable[Operation]) -> float:
    total = sum(op.signed_value for op in operations)
    return max(total, 0)


def append_operation(entry: DailyEntry, operation: Operation) -> DailyEntry:
    operations = entry.operations + (operation,)
    return replace(entry, operations=operations, actual_value=replay_operations(operations))


def undo_last_operation(entry: DailyEntry) -> DailyEntry:
    if not entry.operations:
        return entry
    operations = entry.operations[:-1]
    return replace(entry, operations=operations, actual_value=replay_operations(operations))


def find_entry(
    entries: Iterable[DailyEntry], habit_id: str, on_date: DateLike
) -> Optional[DailyEntry]:
    day = as_date(on_date)
    found = None
    for entry in entries:
        if entry.habit_id == habit_id and entry.date == day:
            found = entry
    return found


def entries_by_date(entries: Iterable[DailyEntry], habit_id: str) -> Dict[date, DailyEntry]:
    # later entries for the same day win
    indexed: Dict[date, DailyEntry] = {}
    for entry in entries:
        if entry.habit_id == habit_id:
            indexed[entry.date] = entry
    return indexed


def record_checkin(
    habit: Habit,
    existing: Optional[DailyEntry],
    value: float,
    on_date: DateLike,
    entry_id: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> DailyEntry:
    day = as_date(on_date)
    cumulative = habit.entry_mode is EntryMode.CUMULATIVE
    if existing is None:
        entry = DailyEntry(
            id=entry_id or new_entry_id(),
            habit_id=habit.id,
            date=day,
            target_dose=target_dose(habit, day),
            actual_value=0 if cumulative else value,
        )
    elif cumulative:
        entry = existing
        if not existing.operations and existing.actual_value:
            # value written before the habit switched to cumulative mode
            seed = Operation(OperationKind.ADD, existing.actual_value)
            entry = replace(existing, operations=(seed,))
    else:
        # the stored snapshot survives later edits to the habit
        entry = replace(existing, actual_value=value)
    if cumulative:
        operation = Operation(OperationKind.ADD, abs(value), timestamp or _now_iso())
        entry = append_operation(entry, operation)
    logger.debug(
        "check-in habit=%s date=%s actual=%s target=%s",
        habit.id,
        day,
        entry.actual_value,
        entry.target_dose,
    )
    return entry


def upsert_entry(entries: Sequence[DailyEntry], entry: DailyEntry) -> Tuple[DailyEntry, ...]:
    kept = tuple(
        e for e in entries if not (e.habit_id == entry.habit_id and e.date == entry.date)
    )
    return kept + (entry,)
