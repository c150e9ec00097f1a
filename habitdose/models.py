"""Habit and entry records shared by every engine module.

Records are frozen dataclasses. The caller stores them as JSON dicts with
camelCase keys; ``from_dict``/``to_dict`` convert at that boundary.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .dates import DateLike, as_date, format_date


class Direction(Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    MAINTAIN = "maintain"


class ProgressionMode(Enum):
    PERCENTAGE = "percentage"
    ABSOLUTE = "absolute"


class ProgressionPeriod(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


class EntryMode(Enum):
    REPLACE = "replace"
    CUMULATIVE = "cumulative"


class OperationKind(Enum):
    ADD = "add"
    SUBTRACT = "subtract"


class CompletionStatus(Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"
    EXCEEDED = "exceeded"
    ZERO_VICTORY = "zero-victory"


def _optional_date(value: Optional[DateLike]) -> Optional[date]:
    if value is None or value == "":
        return None
    return as_date(value)


def _optional_format(value: Optional[date]) -> Optional[str]:
    return format_date(value) if value is not None else None


@dataclass(frozen=True)
class Progression:
    mode: ProgressionMode
    value: float
    period: ProgressionPeriod

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Progression":
        return cls(
            mode=ProgressionMode(data["mode"]),
            value=data["value"],
            period=ProgressionPeriod(data.get("period", ProgressionPeriod.DAILY.value)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"mode": self.mode.value, "value": self.value, "period": self.period.value}


@dataclass(frozen=True)
class PlannedPause:
    start_date: date
    end_date: date
    reason: Optional[str] = None

    def covers(self, day: DateLike) -> bool:
        return self.start_date <= as_date(day) <= self.end_date

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlannedPause":
        return cls(
            start_date=as_date(data["startDate"]),
            end_date=as_date(data["endDate"]),
            reason=data.get("reason"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startDate": format_date(self.start_date),
            "endDate": format_date(self.end_date),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class Habit:
    id: str
    direction: Direction
    start_value: float
    created_at: date
    unit: str = ""
    progression: Optional[Progression] = None
    target_value: Optional[float] = None
    archived_at: Optional[date] = None
    entry_mode: EntryMode = EntryMode.REPLACE
    name: str = ""
    planned_pause: Optional[PlannedPause] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Habit":
        progression = data.get("progression")
        pause = data.get("plannedPause")
        return cls(
            id=str(data["id"]),
            direction=Direction(data["direction"]),
            start_value=data["startValue"],
            created_at=as_date(data["createdAt"]),
            unit=data.get("unit", ""),
            progression=Progression.from_dict(progression) if progression else None,
            target_value=data.get("targetValue"),
            archived_at=_optional_date(data.get("archivedAt")),
            entry_mode=EntryMode(data.get("entryMode") or EntryMode.REPLACE.value),
            name=data.get("name", ""),
            planned_pause=PlannedPause.from_dict(pause) if pause else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "direction": self.direction.value,
            "startValue": self.start_value,
            "unit": self.unit,
            "progression": self.progression.to_dict() if self.progression else None,
            "targetValue": self.target_value,
            "createdAt": format_date(self.created_at),
            "archivedAt": _optional_format(self.archived_at),
            "entryMode": self.entry_mode.value,
            "plannedPause": self.planned_pause.to_dict() if self.planned_pause else None,
        }

    def exists_on(self, day: DateLike) -> bool:
        current = as_date(day)
        if current < self.created_at:
            return False
        return self.archived_at is None or current <= self.archived_at

    def is_paused_on(self, day: DateLike) -> bool:
        return self.planned_pause is not None and self.planned_pause.covers(day)

    def is_active_on(self, day: DateLike) -> bool:
        return self.exists_on(day) and not self.is_paused_on(day)


@dataclass(frozen=True)
class Operation:
    kind: OperationKind
    value: float
    timestamp: Optional[str] = None

    @property
    def signed_value(self) -> float:
        if self.kind is OperationKind.SUBTRACT:
            return -abs(self.value)
        return abs(self.value)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Operation":
        return cls(
            kind=OperationKind(data.get("type", OperationKind.ADD.value)),
            value=data["value"],
            timestamp=data.get("timestamp"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "value": self.value, "timestamp": self.timestamp}


@dataclass(frozen=True)
class DailyEntry:
    id: str
    habit_id: str
    date: date
    target_dose: float
    actual_value: float
    operations: Tuple[Operation, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailyEntry":
        return cls(
            id=str(data["id"]),
            habit_id=str(data["habitId"]),
            date=as_date(data["date"]),
            target_dose=data["targetDose"],
            actual_value=data["actualValue"],
            operations=tuple(Operation.from_dict(op) for op in data.get("operations") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "habitId": self.habit_id,
            "date": format_date(self.date),
            "targetDose": self.target_dose,
            "actualValue": self.actual_value,
        }
        if self.operations:
            payload["operations"] = [op.to_dict() for op in self.operations]
        return payload


def validate_habit(habit: Habit) -> List[str]:
    problems: List[str] = []
    if not habit.start_value > 0:
        problems.append("Start value must be greater than 0.")
    if habit.direction is Direction.MAINTAIN:
        if habit.progression is not None:
            problems.append("A maintain habit cannot have a progression.")
    elif habit.progression is None:
        problems.append(f"Direction '{habit.direction.value}' needs a progression.")
    elif habit.progression.value < 0:
        problems.append("Progression value must be positive; direction sets the sign.")
    if habit.target_value is not None and habit.target_value < 0:
        problems.append("Target value cannot be negative.")
    pause = habit.planned_pause
    if pause is not None and pause.end_date < pause.start_date:
        problems.append("Pause end date must be on or after its start date.")
    return problems
