import argparse
import json
import logging
import os
from datetime import date
from typing import Any, Dict, List, Optional, Set

from .completion import completion_status, entry_percentage
from .compound import compound_effect, projection
from .dates import add_days, format_date, parse_date, today_local, window_dates
from .dose import target_dose
from .entries import find_entry, record_checkin, undo_last_operation, upsert_entry
from .milestones import detect_milestone, milestone_message
from .models import (
    CompletionStatus,
    DailyEntry,
    Direction,
    EntryMode,
    Habit,
    PlannedPause,
    Progression,
    ProgressionMode,
    ProgressionPeriod,
    validate_habit,
)
from .stats import daily_completion_percentage, habit_stats

logger = logging.getLogger(__name__)

DEFAULT_DATA_PATH = "~/.habitdose.json"

STATUS_MARKS = {
    CompletionStatus.PENDING: "·",
    CompletionStatus.PARTIAL: "~",
    CompletionStatus.COMPLETED: "✓",
    CompletionStatus.EXCEEDED: "+",
    CompletionStatus.ZERO_VICTORY: "0",
}


def _data_path() -> str:
    return os.path.expanduser(os.environ.get("HABITDOSE_DATA", DEFAULT_DATA_PATH))


def _empty_store() -> Dict[str, Any]:
    return {"habits": [], "entries": [], "milestones": {}}


def _load_store() -> Dict[str, Any]:
    path = _data_path()
    if not os.path.exists(path):
        return _empty_store()
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        return _empty_store()
    store = _empty_store()
    store["habits"] = [h for h in data.get("habits", []) if isinstance(h, dict)]
    store["entries"] = [e for e in data.get("entries", []) if isinstance(e, dict)]
    milestones = data.get("milestones")
    if isinstance(milestones, dict):
        store["milestones"] = milestones
    logger.debug(
        "loaded %d habit(s), %d entries from %s",
        len(store["habits"]),
        len(store["entries"]),
        path,
    )
    return store


def _save_store(store: Dict[str, Any]) -> None:
    path = _data_path()
    with open(path, "w", encoding="utf-8") as f:
        json.dump(store, f, indent=2, sort_keys=True, ensure_ascii=False)
    logger.debug("saved store to %s", path)


def _habits(store: Dict[str, Any]) -> List[Habit]:
    return [Habit.from_dict(h) for h in store["habits"]]


def _entries(store: Dict[str, Any]) -> List[DailyEntry]:
    return [DailyEntry.from_dict(e) for e in store["entries"]]


def _get_habit(store: Dict[str, Any], habit_id: str) -> Optional[Habit]:
    for habit in _habits(store):
        if habit.id == habit_id:
            return habit
    return None


def _put_habit(store: Dict[str, Any], habit: Habit) -> None:
    store["habits"] = [h for h in store["habits"] if str(h.get("id")) != habit.id]
    store["habits"].append(habit.to_dict())
    store["habits"].sort(key=lambda h: int(h["id"]) if str(h["id"]).isdigit() else 0)


def _next_id(store: Dict[str, Any]) -> str:
    ids = [int(h["id"]) for h in store["habits"] if str(h.get("id", "")).isdigit()]
    return str(max(ids) + 1) if ids else "1"


def _celebrated(store: Dict[str, Any], habit_id: str) -> Set[str]:
    return set(store["milestones"].get(habit_id, []))


def _reference_date(args: argparse.Namespace) -> date:
    return today_local() if args.date is None else args.date


def _fmt(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, float):
        return f"{value:.2f}".rstrip("0").rstrip(".")
    return str(value)


def _with_unit(value: Any, habit: Habit) -> str:
    return f"{_fmt(value)} {habit.unit}" if habit.unit else _fmt(value)


def _habit_label(habit: Habit) -> str:
    return f"#{habit.id} {habit.name}".rstrip()


def cmd_add(args: argparse.Namespace) -> None:
    store = _load_store()
    direction = Direction(args.direction)
    progression = None
    if direction is not Direction.MAINTAIN and args.step is not None:
        progression = Progression(
            mode=ProgressionMode(args.mode),
            value=args.step,
            period=ProgressionPeriod(args.period),
        )
    habit = Habit(
        id=_next_id(store),
        name=args.name.strip(),
        direction=direction,
        start_value=args.start,
        unit=args.unit,
        progression=progression,
        target_value=args.target,
        created_at=_reference_date(args),
        entry_mode=EntryMode.CUMULATIVE if args.cumulative else EntryMode.REPLACE,
    )
    problems = validate_habit(habit)
    if problems:
        for problem in problems:
            print(problem)
        return
    _put_habit(store, habit)
    _save_store(store)
    print(f"Added habit {_habit_label(habit)} starting at {_with_unit(habit.start_value, habit)}")


def cmd_list(args: argparse.Namespace) -> None:
    store = _load_store()
    habits = _habits(store)
    if not args.all:
        habits = [h for h in habits if h.archived_at is None]
    if not habits:
        print("No habits yet.")
        return
    today = _reference_date(args)
    for habit in habits:
        mark = "✓" if habit.archived_at else "·"
        if habit.is_paused_on(today):
            mark = "‖"
        dose = target_dose(habit, today)
        print(
            f"{habit.id:>3} {mark} {habit.name} "
            f"({habit.direction.value}, today: {_with_unit(dose, habit)})"
        )


def cmd_archive(args: argparse.Namespace) -> None:
    store = _load_store()
    habit = _get_habit(store, args.id)
    if not habit:
        print(f"Habit #{args.id} not found.")
        return
    if habit.archived_at:
        print(f"Habit #{args.id} is already archived.")
        return
    archived = _reference_date(args)
    _put_habit(store, Habit.from_dict({**habit.to_dict(), "archivedAt": format_date(archived)}))
    _save_store(store)
    print(f"Archived habit {_habit_label(habit)} on {format_date(archived)}.")


def cmd_pause(args: argparse.Namespace) -> None:
    store = _load_store()
    habit = _get_habit(store, args.id)
    if not habit:
        print(f"Habit #{args.id} not found.")
        return
    pause = PlannedPause(start_date=args.start, end_date=args.end, reason=args.reason)
    paused = Habit.from_dict({**habit.to_dict(), "plannedPause": pause.to_dict()})
    problems = validate_habit(paused)
    if problems:
        for problem in problems:
            print(problem)
        return
    _put_habit(store, paused)
    _save_store(store)
    print(
        f"Paused habit {_habit_label(habit)} "
        f"from {format_date(pause.start_date)} to {format_date(pause.end_date)}."
    )


def cmd_resume(args: argparse.Namespace) -> None:
    store = _load_store()
    habit = _get_habit(store, args.id)
    if not habit:
        print(f"Habit #{args.id} not found.")
        return
    if habit.planned_pause is None:
        print(f"Habit #{args.id} is not paused.")
        return
    _put_habit(store, Habit.from_dict({**habit.to_dict(), "plannedPause": None}))
    _save_store(store)
    print(f"Resumed habit {_habit_label(habit)}.")


def cmd_checkin(args: argparse.Namespace) -> None:
    store = _load_store()
    habit = _get_habit(store, args.id)
    if not habit:
        print(f"Habit #{args.id} not found.")
        return
    if habit.archived_at:
        print(f"Habit #{args.id} is archived. Add a new habit to keep tracking.")
        return
    day = _reference_date(args)
    if day < habit.created_at:
        print(f"Habit #{args.id} did not exist on {format_date(day)}.")
        return
    entries = _entries(store)
    existing = find_entry(entries, habit.id, day)
    previous = existing.actual_value if existing else 0
    entry = record_checkin(habit, existing, args.value, day)

    key, celebrated = detect_milestone(
        habit, previous, entry.actual_value, entries, _celebrated(store, habit.id), day
    )
    store["entries"] = [e.to_dict() for e in upsert_entry(entries, entry)]
    store["milestones"][habit.id] = sorted(celebrated)
    _save_store(store)

    status = completion_status(entry, habit.direction)
    print(
        f"Checked in habit {_habit_label(habit)} ({format_date(day)}): "
        f"{_fmt(entry.actual_value)}/{_with_unit(entry.target_dose, habit)} [{status.value}]"
    )
    if key:
        print(f"Milestone: {milestone_message(key)}")


def cmd_undo(args: argparse.Namespace) -> None:
    store = _load_store()
    habit = _get_habit(store, args.id)
    if not habit:
        print(f"Habit #{args.id} not found.")
        return
    day = _reference_date(args)
    entries = _entries(store)
    existing = find_entry(entries, habit.id, day)
    if existing is None or not existing.operations:
        print(f"Nothing to undo for habit #{args.id} on {format_date(day)}.")
        return
    entry = undo_last_operation(existing)
    store["entries"] = [e.to_dict() for e in upsert_entry(entries, entry)]
    _save_store(store)
    print(
        f"Undid last entry for habit {_habit_label(habit)} ({format_date(day)}): "
        f"now {_fmt(entry.actual_value)}/{_with_unit(entry.target_dose, habit)}"
    )


def cmd_dose(args: argparse.Namespace) -> None:
    store = _load_store()
    habit = _get_habit(store, args.id)
    if not habit:
        print(f"Habit #{args.id} not found.")
        return
    day = _reference_date(args)
    print(f"{format_date(day)}: {_with_unit(target_dose(habit, day), habit)}")


def cmd_status(args: argparse.Namespace) -> None:
    store = _load_store()
    habit = _get_habit(store, args.id)
    if not habit:
        print(f"Habit #{args.id} not found.")
        return
    day = _reference_date(args)
    entry = find_entry(_entries(store), habit.id, day)
    status = completion_status(entry, habit.direction)
    percentage = entry_percentage(entry, habit.direction)
    print(f"{format_date(day)}: {status.value} ({percentage:.0f}%)")


def cmd_stats(args: argparse.Namespace) -> None:
    store = _load_store()
    habit = _get_habit(store, args.id)
    if not habit:
        print(f"Habit #{args.id} not found.")
        return
    if args.days <= 0:
        print("Days must be at least 1.")
        return
    end_date = _reference_date(args)
    start_date = add_days(end_date, -(args.days - 1))
    stats = habit_stats(habit, _entries(store), start_date, end_date)
    print(f"Stats: {habit.name} ({format_date(start_date)} → {format_date(end_date)})")
    print(f"Tracked days: {stats.total_days}")
    print(f"Completed days: {stats.completed_days} (exceeded {stats.exceeded_days})")
    print(f"Days with an entry: {stats.active_days}")
    print(f"Average completion: {stats.average_completion:.1f}%")
    print(f"Current streak: {stats.current_streak} day(s)")
    print(f"Best streak: {stats.best_streak} day(s)")


def cmd_today(args: argparse.Namespace) -> None:
    store = _load_store()
    day = _reference_date(args)
    habits = [h for h in _habits(store) if h.is_active_on(day)]
    if not habits:
        print("No habits to track today.")
        return
    entries = [e for e in _entries(store) if e.date == day]
    for habit in habits:
        entry = find_entry(entries, habit.id, day)
        status = completion_status(entry, habit.direction)
        actual = _fmt(entry.actual_value) if entry else "-"
        dose = entry.target_dose if entry else target_dose(habit, day)
        print(
            f"{habit.id:>3} {STATUS_MARKS[status]} {habit.name} "
            f"{actual}/{_with_unit(dose, habit)}"
        )
    overall = daily_completion_percentage(entries, habits, day)
    print(f"Overall {format_date(day)}: {overall:.0f}%")


def cmd_compound(args: argparse.Namespace) -> None:
    store = _load_store()
    habit = _get_habit(store, args.id)
    if not habit:
        print(f"Habit #{args.id} not found.")
        return
    effect = compound_effect(habit, _reference_date(args))
    sign = "+" if effect.absolute_change >= 0 else ""
    print(
        f"Day 1: {_with_unit(effect.start_dose, habit)} → "
        f"day {effect.days_elapsed + 1}: {_with_unit(effect.current_dose, habit)}"
    )
    print(
        f"Change: {sign}{_fmt(effect.absolute_change)} "
        f"({sign}{effect.percentage_change:.1f}%)"
    )


def cmd_project(args: argparse.Namespace) -> None:
    store = _load_store()
    habit = _get_habit(store, args.id)
    if not habit:
        print(f"Habit #{args.id} not found.")
        return
    result = projection(habit, _entries(store), _reference_date(args))
    print(f"Current: {_fmt(result.current_value)} / target {_with_unit(result.target_value, habit)}")
    print(f"Progress: {result.progress_percentage:.1f}%")
    print(f"Weekly rate: {result.weekly_rate:+.2f}")
    if result.estimated_completion_date:
        print(
            f"Estimated target date: {format_date(result.estimated_completion_date)} "
            f"({result.days_remaining} day(s))"
        )
    print(f"In 30 days: {_fmt(result.projection_in_30_days)}")
    print(f"In 90 days: {_fmt(result.projection_in_90_days)}")


def cmd_history(args: argparse.Namespace) -> None:
    store = _load_store()
    habit = _get_habit(store, args.id)
    if not habit:
        print(f"Habit #{args.id} not found.")
        return
    if args.days <= 0:
        print("Days must be at least 1.")
        return
    end_date = _reference_date(args)
    window = window_dates(end_date, args.days)
    entries = _entries(store)
    print(f"History: {habit.name} ({format_date(window[0])} → {format_date(window[-1])})")
    for day in window:
        if not habit.exists_on(day):
            continue
        if habit.is_paused_on(day):
            print(f"{format_date(day)} ‖ paused")
            continue
        entry = find_entry(entries, habit.id, day)
        status = completion_status(entry, habit.direction)
        dose = entry.target_dose if entry else target_dose(habit, day)
        actual = _fmt(entry.actual_value) if entry else "-"
        print(f"{format_date(day)} {STATUS_MARKS[status]} {actual}/{_fmt(dose)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Progressive habit dose tracker")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Add a new habit")
    add.add_argument("name", help="Habit name")
    add.add_argument("--direction", choices=[d.value for d in Direction], default="increase")
    add.add_argument("--start", type=float, required=True, help="Starting dose (> 0)")
    add.add_argument("--unit", default="", help="Unit label, e.g. reps or minutes")
    add.add_argument("--mode", choices=[m.value for m in ProgressionMode], default="percentage")
    add.add_argument("--step", type=float, help="Progression amount per period (units or %%)")
    add.add_argument("--period", choices=[p.value for p in ProgressionPeriod], default="weekly")
    add.add_argument("--target", type=float, help="Final target value")
    add.add_argument("--cumulative", action="store_true", help="Sum check-ins within a day")
    add.add_argument("--date", type=parse_date, help="Creation date (YYYY-MM-DD)")
    add.set_defaults(func=cmd_add)

    list_cmd = sub.add_parser("list", help="List habits with today's dose")
    list_cmd.add_argument("--all", action="store_true", help="Include archived habits")
    list_cmd.add_argument("--date", type=parse_date, help="Override date (YYYY-MM-DD)")
    list_cmd.set_defaults(func=cmd_list)

    archive = sub.add_parser("archive", help="Archive a habit")
    archive.add_argument("id", help="Habit id")
    archive.add_argument("--date", type=parse_date, help="Archive date (YYYY-MM-DD)")
    archive.set_defaults(func=cmd_archive)

    pause = sub.add_parser("pause", help="Plan a pause for a habit")
    pause.add_argument("id", help="Habit id")
    pause.add_argument("--start", type=parse_date, required=True, help="First paused day")
    pause.add_argument("--end", type=parse_date, required=True, help="Last paused day")
    pause.add_argument("--reason", help="Why the habit is paused")
    pause.set_defaults(func=cmd_pause)

    resume = sub.add_parser("resume", help="Remove a planned pause")
    resume.add_argument("id", help="Habit id")
    resume.set_defaults(func=cmd_resume)

    checkin = sub.add_parser("checkin", help="Record a value for a habit")
    checkin.add_argument("id", help="Habit id")
    checkin.add_argument("value", type=float, help="Amount done")
    checkin.add_argument("--date", type=parse_date, help="Override date (YYYY-MM-DD)")
    checkin.set_defaults(func=cmd_checkin)

    undo = sub.add_parser("undo", help="Undo the last cumulative entry of a day")
    undo.add_argument("id", help="Habit id")
    undo.add_argument("--date", type=parse_date, help="Override date (YYYY-MM-DD)")
    undo.set_defaults(func=cmd_undo)

    dose = sub.add_parser("dose", help="Show the target dose for a date")
    dose.add_argument("id", help="Habit id")
    dose.add_argument("--date", type=parse_date, help="Override date (YYYY-MM-DD)")
    dose.set_defaults(func=cmd_dose)

    status = sub.add_parser("status", help="Show completion status for a date")
    status.add_argument("id", help="Habit id")
    status.add_argument("--date", type=parse_date, help="Override date (YYYY-MM-DD)")
    status.set_defaults(func=cmd_status)

    stats = sub.add_parser("stats", help="Show stats for a habit over a window")
    stats.add_argument("id", help="Habit id")
    stats.add_argument("--days", type=int, default=30, help="Number of days to include")
    stats.add_argument("--date", type=parse_date, help="Override end date (YYYY-MM-DD)")
    stats.set_defaults(func=cmd_stats)

    today = sub.add_parser("today", help="Show every active habit for a day")
    today.add_argument("--date", type=parse_date, help="Override date (YYYY-MM-DD)")
    today.set_defaults(func=cmd_today)

    compound = sub.add_parser("compound", help="Show how far the dose has moved since day one")
    compound.add_argument("id", help="Habit id")
    compound.add_argument("--date", type=parse_date, help="Override date (YYYY-MM-DD)")
    compound.set_defaults(func=cmd_compound)

    project = sub.add_parser("project", help="Project progress toward the target")
    project.add_argument("id", help="Habit id")
    project.add_argument("--date", type=parse_date, help="Override date (YYYY-MM-DD)")
    project.set_defaults(func=cmd_project)

    history = sub.add_parser("history", help="Show daily doses and results for a habit")
    history.add_argument("id", help="Habit id")
    history.add_argument("--days", type=int, default=14, help="Number of days to include")
    history.add_argument("--date", type=parse_date, help="Override end date (YYYY-MM-DD)")
    history.set_defaults(func=cmd_history)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(
        level=os.environ.get("HABITDOSE_LOG_LEVEL", "WARNING").upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
