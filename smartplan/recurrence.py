from __future__ import annotations

from datetime import date, timedelta
from typing import Any, List, Optional, Sequence, Union
import calendar

from .config import (
    DEFAULT_RECURRENCE_TYPE,
    DEFAULT_RECURRENCE_UNIT,
    RECURRENCE_TYPES,
    RECURRENCE_UNITS,
    WEEKDAY_ORDER,
)
from .models import Recurrence
from .utils import (
    _log_debug,
    coerce_finite_number,
    format_date,
    get_current_date,
    try_parse_date,
)

_WEEKDAY_TO_INDEX = {name: idx for idx, name in enumerate(WEEKDAY_ORDER)}
_TYPE_LOOKUP = {value.lower(): value for value in RECURRENCE_TYPES}
_UNIT_LOOKUP = {value.lower(): value for value in RECURRENCE_UNITS}
_WEEKDAY_ALIASES = {name.lower(): name for name in WEEKDAY_ORDER}
_WEEKDAY_ALIASES.update({
    "monday": "Mon",
    "tuesday": "Tue",
    "tues": "Tue",
    "wednesday": "Wed",
    "thursday": "Thu",
    "thurs": "Thu",
    "friday": "Fri",
    "saturday": "Sat",
    "sunday": "Sun",
})

DateLike = Union[str, date, None]


def _normalize_weekday_token(raw: Any) -> Optional[str]:
    if not isinstance(raw, str):
        return None
    cleaned = raw.strip()
    if cleaned in _WEEKDAY_TO_INDEX:
        return cleaned
    return _WEEKDAY_ALIASES.get(cleaned.lower())


def _normalize_days_of_week(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    seen: set[str] = set()
    for raw in value:
        if not raw:
            continue
        token = _normalize_weekday_token(raw)
        if token:
            seen.add(token)
    return sorted(seen, key=_WEEKDAY_TO_INDEX.__getitem__)


def normalize_recurrence(recurrence: Any) -> Recurrence:
    """Coerce any recurrence-ish value into a canonical Recurrence.

    Never raises. A bare string is read as the recurrence type ("Weekly"),
    unknown types and units fall back to None/day, the interval survives only
    for Custom, and weekdays survive only for Weekly or Custom+week.
    """
    if isinstance(recurrence, Recurrence):
        recurrence = recurrence.model_dump(by_alias=True)
    if isinstance(recurrence, str):
        recurrence = {"type": recurrence}
    if not isinstance(recurrence, dict):
        return Recurrence()

    raw_type = recurrence.get("type")
    rec_type = DEFAULT_RECURRENCE_TYPE
    if isinstance(raw_type, str):
        rec_type = _TYPE_LOOKUP.get(raw_type.strip().lower(), DEFAULT_RECURRENCE_TYPE)

    raw_unit = recurrence.get("unit")
    unit = DEFAULT_RECURRENCE_UNIT
    if isinstance(raw_unit, str):
        unit = _UNIT_LOOKUP.get(raw_unit.strip().lower(), DEFAULT_RECURRENCE_UNIT)

    interval: Optional[int] = None
    if rec_type == "Custom":
        number = coerce_finite_number(recurrence.get("interval"))
        interval = int(number) if number is not None else None

    raw_days = recurrence.get("daysOfWeek")
    if raw_days is None:
        raw_days = recurrence.get("days_of_week")
    keep_days = rec_type == "Weekly" or (rec_type == "Custom" and unit == "week")
    days = _normalize_days_of_week(raw_days) if keep_days else []

    return Recurrence(type=rec_type, interval=interval, unit=unit, days_of_week=days)


def is_recurring_task(task: Any) -> bool:
    recurrence = getattr(task, "recurrence", None)
    if recurrence is None and isinstance(task, dict):
        recurrence = task.get("recurrence")
    return normalize_recurrence(recurrence).type != "None"


def _add_months(value: date, months: int) -> date:
    total = (value.year * 12 + (value.month - 1)) + months
    year = total // 12
    month = total % 12 + 1
    # Jan 31 + 1 month -> Feb 28/29
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _find_next_weekday(from_date: date, days_of_week: Sequence[str]) -> date:
    """First date on or after from_date whose weekday is in days_of_week."""
    targets = {_WEEKDAY_TO_INDEX[d] for d in days_of_week if d in _WEEKDAY_TO_INDEX}
    for offset in range(7):
        candidate = from_date + timedelta(days=offset)
        if candidate.weekday() in targets:
            return candidate
    return from_date


def _advance(rec: Recurrence, current: date) -> Optional[date]:
    days = rec.days_of_week

    if rec.type == "Daily":
        return current + timedelta(days=1)

    if rec.type == "Weekly":
        if days:
            return _find_next_weekday(current + timedelta(days=1), days)
        return current + timedelta(days=7)

    if rec.type == "Monthly":
        return _add_months(current, 1)

    # Custom
    interval = rec.interval
    if interval is None or interval < 1:
        return None
    if rec.unit == "day":
        return current + timedelta(days=interval)
    if rec.unit == "week":
        if days:
            in_cycle = _find_next_weekday(current + timedelta(days=1), days)
            if (in_cycle - current).days <= 7:
                return in_cycle
            return _find_next_weekday(current + timedelta(weeks=interval), days)
        return current + timedelta(weeks=interval)
    return _add_months(current, interval)


def next_occurrence(recurrence: Any,
                    current_date: DateLike = None,
                    today: Optional[date] = None) -> Optional[str]:
    rec = normalize_recurrence(recurrence)
    if rec.type == "None":
        return None

    current = try_parse_date(current_date) or today or get_current_date()
    try:
        upcoming = _advance(rec, current)
    except (OverflowError, ValueError):
        # past date.max
        _log_debug(f"[RECURRENCE] no representable occurrence after {current} for {rec.type}")
        return None
    return format_date(upcoming) if upcoming is not None else None


def first_occurrence(recurrence: Any,
                     base_date: DateLike = None,
                     today: Optional[date] = None) -> Optional[str]:
    rec = normalize_recurrence(recurrence)
    if rec.type == "None":
        if isinstance(base_date, date):
            return format_date(base_date)
        return base_date

    today = today or get_current_date()
    base = try_parse_date(base_date)
    if base is not None and base >= today:
        return format_date(base)

    weekly = rec.type == "Weekly" or (rec.type == "Custom" and rec.unit == "week")
    if weekly and rec.days_of_week:
        if WEEKDAY_ORDER[today.weekday()] in rec.days_of_week:
            return format_date(today)
        return format_date(_find_next_weekday(today, rec.days_of_week))

    return format_date(base or today)
