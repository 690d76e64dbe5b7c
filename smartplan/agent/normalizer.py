from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Union
import re

from ..config import DEFAULT_PRIORITY, DEFAULT_TITLE, ISO_DATE_RE, PRIORITIES
from ..models import Due, Task
from ..recurrence import normalize_recurrence
from ..utils import coerce_finite_number, get_current_date, try_parse_date
from .ids import IdGenerator, default_id_generator

_PRIORITY_LOOKUP = {value.lower(): value for value in PRIORITIES}
_LEGACY_DUE_SEPARATOR = "·"

# Wire keys an update patch may touch. "id" is never patchable.
PATCHABLE_FIELDS = (
    "title",
    "due",
    "priority",
    "tags",
    "completed",
    "completedDate",
    "timeAllocated",
    "objective",
    "goalId",
    "recurrence",
    "inToday",
)

TaskLike = Union[Task, Dict[str, Any]]


def _as_dict(raw: Any) -> Dict[str, Any]:
  if isinstance(raw, Task):
    return raw.to_wire()
  if isinstance(raw, dict):
    return raw
  return {}


def _clean_str(value: Any) -> str:
  if value is None:
    return ""
  if not isinstance(value, str):
    value = str(value)
  return value.strip()


def _normalize_due(value: Any) -> Due:
  if isinstance(value, Due):
    return value.model_copy()
  if isinstance(value, dict):
    return Due(date=_clean_str(value.get("date")), time=_clean_str(value.get("time")))
  if isinstance(value, str):
    # legacy "2025-12-29 · 11:00"
    pieces = [part.strip() for part in value.split(_LEGACY_DUE_SEPARATOR) if part.strip()]
    if not pieces:
      return Due()
    first = pieces[0]
    date_part = first if ISO_DATE_RE.match(first) else ""
    if len(pieces) > 1:
      time_part = pieces[1]
    elif not date_part and re.search(r"\d", first):
      time_part = first
    else:
      time_part = ""
    return Due(date=date_part, time=time_part)
  return Due()


def _normalize_tags(raw: Dict[str, Any]) -> List[str]:
  value = raw.get("tags")
  if value is None and raw.get("tag"):
    value = [raw.get("tag")]
  if not isinstance(value, (list, tuple)):
    return []
  out: List[str] = []
  for item in value:
    if not item:
      continue
    cleaned = _clean_str(item)
    if cleaned and cleaned not in out:
      out.append(cleaned)
  return out


def _normalize_priority(value: Any) -> str:
  if not isinstance(value, str):
    return DEFAULT_PRIORITY
  return _PRIORITY_LOOKUP.get(value.strip().lower(), DEFAULT_PRIORITY)


def _normalize_time_allocated(value: Any) -> Optional[int]:
  number = coerce_finite_number(value)
  if number is None or number < 0:
    return None
  return int(round(number))


def _normalize_objective(raw: Dict[str, Any]) -> Optional[Union[int, float, str]]:
  if "objective" in raw:
    value = raw.get("objective")
  else:
    value = raw.get("target")
  if value is None or isinstance(value, bool):
    return None
  if isinstance(value, (int, float)):
    return value if coerce_finite_number(value) is not None else None
  cleaned = _clean_str(value)
  return cleaned or None


def _normalize_reference(value: Any) -> Optional[Union[int, str]]:
  if value is None or isinstance(value, bool):
    return None
  if isinstance(value, int):
    return value
  if isinstance(value, float):
    return int(value) if value.is_integer() else str(value)
  if isinstance(value, str):
    return value.strip() or None
  return None


def derive_in_today(due_date: str, today: date) -> bool:
  """Overdue, today or tomorrow. No due date means not in today."""
  parsed = try_parse_date(due_date)
  if parsed is None:
    return False
  return parsed <= today + timedelta(days=1)


class TaskNormalizer:
  """Turns partial or foreign task objects into canonical Task models."""

  def __init__(self,
               id_generator: Optional[IdGenerator] = None,
               today: Optional[Callable[[], date]] = None) -> None:
    self._ids = id_generator or default_id_generator
    self._today = today or get_current_date

  def normalize(self, raw: Any) -> Task:
    data = _as_dict(raw)

    task_id = _normalize_reference(data.get("id"))
    if task_id is None:
      task_id = self._ids.next_id()

    title = _clean_str(data.get("title")) or DEFAULT_TITLE
    due = _normalize_due(data.get("due"))

    completed = bool(data.get("completed"))
    completed_date = _clean_str(data.get("completedDate")) or None
    if not completed:
      completed_date = None

    if "inToday" in data:
      in_today = bool(data.get("inToday"))
    else:
      in_today = derive_in_today(due.date, self._today())

    return Task(
        id=task_id,
        title=title,
        due=due,
        priority=_normalize_priority(data.get("priority")),
        tags=_normalize_tags(data),
        completed=completed,
        completed_date=completed_date,
        time_allocated=_normalize_time_allocated(data.get("timeAllocated")),
        objective=_normalize_objective(data),
        goal_id=_normalize_reference(data.get("goalId")),
        recurrence=normalize_recurrence(data.get("recurrence")),
        in_today=in_today,
    )

  def normalize_many(self, items: Iterable[Any]) -> List[Task]:
    return [self.normalize(item) for item in items or []]

  def apply_fields(self, task: Task, fields: Any) -> Task:
    """Patch only the keys present in fields; a null value clears that key."""
    if not isinstance(fields, dict) or not fields:
      return task.model_copy(deep=True)
    merged = task.to_wire()
    for key in PATCHABLE_FIELDS:
      if key in fields:
        merged[key] = fields[key]
    return self.normalize(merged)


_default_normalizer = TaskNormalizer()


def normalize_task(raw: Any) -> Task:
  return _default_normalizer.normalize(raw)


def sanitize_tasks(tasks: Iterable[TaskLike]) -> List[Dict[str, Any]]:
  """Read-only snapshot of the collection in wire shape, for model context."""
  snapshot: List[Dict[str, Any]] = []
  for item in tasks or []:
    task = item if isinstance(item, Task) else _default_normalizer.normalize(item)
    snapshot.append(task.to_wire())
  return snapshot
