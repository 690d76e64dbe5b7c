from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from ..models import Task
from ..utils import _log_debug

LedgerKey = Tuple[str, int]


def _copy_collection(tasks: Iterable[Task]) -> List[Task]:
  return [task.model_copy(deep=True) for task in tasks]


class UndoLedger:
  """Pre-action snapshots keyed by (message id, action index).

  Each entry can be consumed once: undo hands back the snapshot and forgets
  it, so a repeated undo of the same action restores nothing.
  """

  def __init__(self) -> None:
    self._entries: Dict[LedgerKey, List[Task]] = {}

  def record(self, message_id: str, index: int, previous: Iterable[Task]) -> None:
    self._entries[(message_id, index)] = _copy_collection(previous)

  def undo(self, message_id: str, index: int) -> Optional[List[Task]]:
    snapshot = self._entries.pop((message_id, index), None)
    if snapshot is None:
      _log_debug(f"[UNDO] nothing to restore for {message_id}#{index}")
      return None
    _log_debug(f"[UNDO] restored {message_id}#{index} ({len(snapshot)} task(s))")
    return _copy_collection(snapshot)

  def has(self, message_id: str, index: int) -> bool:
    return (message_id, index) in self._entries

  def clear(self) -> None:
    self._entries.clear()

  def __len__(self) -> int:
    return len(self._entries)
