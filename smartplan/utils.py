from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from .config import APP_TIMEZONE, DEBUG_DATE, ISO_DATE_RE, LLM_DEBUG

_debug_date_override: Optional[date] = None


def _log_debug(message: str) -> None:
    if LLM_DEBUG:
        print(message, flush=True)


def try_parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    # "2026-02-01T00:00:00Z" -> "2026-02-01"
    if "T" in cleaned:
        cleaned = cleaned.split("T")[0]
    if not ISO_DATE_RE.match(cleaned):
        return None
    try:
        return datetime.strptime(cleaned, "%Y-%m-%d").date()
    except ValueError:
        return None


def format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def set_debug_date(value: Any) -> Optional[date]:
    """Pin "today" to a fixed date. A falsy or unparseable value clears the pin."""
    global _debug_date_override
    _debug_date_override = try_parse_date(value)
    return _debug_date_override


def get_debug_date() -> Optional[date]:
    return _debug_date_override


def clear_debug_date() -> None:
    global _debug_date_override
    _debug_date_override = None


def get_current_date() -> date:
    if _debug_date_override is not None:
        return _debug_date_override
    return datetime.now(APP_TIMEZONE).date()


def today_iso() -> str:
    return format_date(get_current_date())


if DEBUG_DATE:
    set_debug_date(DEBUG_DATE)


def coerce_finite_number(value: Any) -> Optional[float]:
    """Number(value) semantics for untrusted input: None/""/junk/inf -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number
