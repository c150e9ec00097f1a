from .completion import completion_percentage, completion_status, is_success
from .compound import compound_effect, progress_percentage, projection
from .dose import round_half_up, target_dose
from .entries import append_operation, record_checkin, replay_operations, undo_last_operation
from .milestones import detect_milestone, milestone_message
from .models import (
    CompletionStatus,
    DailyEntry,
    Direction,
    EntryMode,
    Habit,
    Operation,
    OperationKind,
    PlannedPause,
    Progression,
    ProgressionMode,
    ProgressionPeriod,
    validate_habit,
)
from .stats import current_streak, daily_completion_percentage, habit_stats

__version__ = "0.1.0"

__all__ = [
    "CompletionStatus",
    "DailyEntry",
    "Direction",
    "EntryMode",
    "Habit",
    "Operation",
    "OperationKind",
    "PlannedPause",
    "Progression",
    "ProgressionMode",
    "ProgressionPeriod",
    "append_operation",
    "completion_percentage",
    "completion_status",
    "compound_effect",
    "current_streak",
    "daily_completion_percentage",
    "detect_milestone",
    "habit_stats",
    "is_success",
    "milestone_message",
    "progress_percentage",
    "projection",
    "record_checkin",
    "replay_operations",
    "round_half_up",
    "target_dose",
    "undo_last_operation",
    "validate_habit",
]
