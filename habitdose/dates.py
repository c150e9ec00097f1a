from datetime import datetime, date, timedelta
from typing import List, Union

DateLike = Union[str, date]

DAILY = "daily"
WEEKLY = "weekly"


def today_local() -> date:
    return datetime.now().date()


def parse_date(value: str) -> date:
    return datetime.strptime(value, "%Y-%m-%d").date()


def format_date(value: date) -> str:
    return value.isoformat()


def as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_date(value)


def days_between(start: DateLike, end: DateLike) -> int:
    return (as_date(end) - as_date(start)).days


def weeks_between(start: DateLike, end: DateLike) -> int:
    # floor division keeps partial weeks out, including for negative spans
    return days_between(start, end) // 7


def elapsed_periods(start: DateLike, end: DateLike, period: str) -> int:
    days = max(days_between(start, end), 0)
    if period == WEEKLY:
        return days // 7
    return days


def add_days(value: DateLike, days: int) -> date:
    return as_date(value) + timedelta(days=days)


def date_range(start: DateLike, end: DateLike) -> List[date]:
    start_date = as_date(start)
    end_date = as_date(end)
    if end_date < start_date:
        return []
    span = (end_date - start_date).days
    return [start_date + timedelta(days=offset) for offset in range(span + 1)]


def window_dates(end: DateLike, days: int) -> List[date]:
    end_date = as_date(end)
    return [end_date - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
