from __future__ import annotations

from datetime import date
from typing import Any, Callable, Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from ..models import Task, TaskId
from ..recurrence import first_occurrence, normalize_recurrence
from ..utils import _log_debug, format_date, get_current_date
from .normalizer import TaskNormalizer
from .schemas import (
    Action,
    ActionRun,
    ActionState,
    CompleteAction,
    CreateAction,
    DeleteAction,
    UNDOABLE_STATES,
    UpdateAction,
    coerce_action,
)
from .undo_ledger import UndoLedger


class InvalidTransitionError(ValueError):
  """approve/reject aimed at an action that is not awaiting approval."""


class ExecutionResult(BaseModel):
  model_config = ConfigDict(extra="forbid")

  tasks: List[Task]
  run: ActionRun
  restored: bool = False

  @property
  def states(self) -> List[ActionState]:
    return list(self.run.states)

  @property
  def executed_count(self) -> int:
    return self.run.executed_count


def _same_id(left: Any, right: Any) -> bool:
  # Models echo numeric ids back as strings often enough to matter.
  return left == right or str(left) == str(right)


def _find_index(tasks: Sequence[Task], task_id: TaskId) -> Optional[int]:
  for idx, task in enumerate(tasks):
    if _same_id(task.id, task_id):
      return idx
  return None


class ActionExecutor:
  """Applies assistant actions to a task collection, one action at a time.

  Non-destructive actions run straight through. The first delete halts the
  walk as pending_approval and everything after it stays blocked until the
  delete is approved or rejected. Each applied action leaves a snapshot of
  the collection as it was just before, in the undo ledger.
  """

  def __init__(self,
               normalizer: Optional[TaskNormalizer] = None,
               ledger: Optional[UndoLedger] = None,
               today: Optional[Callable[[], date]] = None) -> None:
    self._today = today or get_current_date
    self.normalizer = normalizer or TaskNormalizer(today=self._today)
    self.ledger = ledger if ledger is not None else UndoLedger()

  # -------------------------
  # public transitions
  # -------------------------
  def execute(self, tasks: Iterable[Any], actions: Sequence[Any],
              message_id: str) -> ExecutionResult:
    run = ActionRun(message_id=message_id,
                    raw_actions=list(actions or []),
                    states=[ActionState.BLOCKED] * len(actions or []))
    return self._walk(self._coerce_collection(tasks), run, 0)

  def approve(self, tasks: Iterable[Any], run: ActionRun,
              index: int) -> ExecutionResult:
    run = self._require_pending(run, index)
    working = self._coerce_collection(tasks)
    action = coerce_action(run.raw_actions[index])
    self.ledger.record(run.message_id, index, working)
    working = self._apply(working, action)
    run.states[index] = ActionState.APPROVED
    _log_debug(f"[EXEC] {run.message_id}#{index} delete approved")
    return self._walk(working, run, index + 1)

  def reject(self, tasks: Iterable[Any], run: ActionRun,
             index: int) -> ExecutionResult:
    run = self._require_pending(run, index)
    run.states[index] = ActionState.REJECTED
    _log_debug(f"[EXEC] {run.message_id}#{index} delete rejected")
    return self._walk(self._coerce_collection(tasks), run, index + 1)

  def undo(self, tasks: Iterable[Any], run: ActionRun,
           index: int) -> ExecutionResult:
    run = run.model_copy(deep=True)
    current = self._coerce_collection(tasks)
    if not 0 <= index < len(run.states) or run.states[index] not in UNDOABLE_STATES:
      return ExecutionResult(tasks=current, run=run)
    snapshot = self.ledger.undo(run.message_id, index)
    if snapshot is None:
      return ExecutionResult(tasks=current, run=run)
    run.states[index] = ActionState.UNDONE
    return ExecutionResult(tasks=snapshot, run=run, restored=True)

  # -------------------------
  # internals
  # -------------------------
  def _coerce_collection(self, tasks: Iterable[Any]) -> List[Task]:
    out: List[Task] = []
    for item in tasks or []:
      out.append(item if isinstance(item, Task) else self.normalizer.normalize(item))
    return out

  def _require_pending(self, run: ActionRun, index: int) -> ActionRun:
    if not 0 <= index < len(run.states):
      raise InvalidTransitionError(f"action index {index} out of range")
    if run.states[index] != ActionState.PENDING_APPROVAL:
      raise InvalidTransitionError(
          f"action {index} is {run.states[index].value}, not pending_approval")
    return run.model_copy(deep=True)

  def _walk(self, tasks: List[Task], run: ActionRun, start: int) -> ExecutionResult:
    for index in range(start, len(run.raw_actions)):
      action = coerce_action(run.raw_actions[index])
      if isinstance(action, DeleteAction):
        run.states[index] = ActionState.PENDING_APPROVAL
        _log_debug(f"[EXEC] {run.message_id}#{index} delete id={action.id} awaiting approval")
        break
      self.ledger.record(run.message_id, index, tasks)
      tasks = self._apply(tasks, action)
      run.states[index] = ActionState.EXECUTED
    _log_debug(f"[EXEC] {run.message_id} executed_count={run.executed_count}"
               f"/{len(run.raw_actions)}")
    return ExecutionResult(tasks=tasks, run=run)

  def _apply(self, tasks: List[Task], action: Optional[Action]) -> List[Task]:
    if action is None:
      _log_debug("[EXEC] skipped unrecognized action")
      return list(tasks)
    if isinstance(action, CreateAction):
      return list(tasks) + [self._create(tasks, action)]
    if isinstance(action, DeleteAction):
      remaining = [task for task in tasks if not _same_id(task.id, action.id)]
      if len(remaining) == len(tasks):
        _log_debug(f"[EXEC] delete: task {action.id!r} not found")
      return remaining
    if isinstance(action, (UpdateAction, CompleteAction)):
      position = _find_index(tasks, action.id)
      if position is None:
        _log_debug(f"[EXEC] {action.type}: task {action.id!r} not found")
        return list(tasks)
      updated = list(tasks)
      if isinstance(action, CompleteAction):
        updated[position] = self._complete(tasks[position], action)
      else:
        updated[position] = self._update(tasks[position], action)
      return updated
    raise TypeError(f"unhandled action type: {type(action).__name__}")

  def _create(self, tasks: Sequence[Task], action: CreateAction) -> Task:
    raw = dict(action.task)
    if raw.get("id") is not None and _find_index(tasks, raw["id"]) is not None:
      raw.pop("id")
    task = self.normalizer.normalize(raw)
    seeded = self._seed_due_date(task)
    if seeded is None:
      return task
    data = task.to_wire()
    data["due"]["date"] = seeded
    if "inToday" not in raw:
      data.pop("inToday", None)
    return self.normalizer.normalize(data)

  def _update(self, task: Task, action: UpdateAction) -> Task:
    updated = self.normalizer.apply_fields(task, action.fields)
    if "recurrence" not in action.fields:
      return updated
    seeded = self._seed_due_date(updated)
    if seeded is None:
      return updated
    return updated.model_copy(update={"due": updated.due.model_copy(update={"date": seeded})})

  def _complete(self, task: Task, action: CompleteAction) -> Task:
    completed = bool(action.completed)
    completed_date = action.completed_date or None
    if completed and not completed_date:
      completed_date = format_date(self._today())
    return self.normalizer.apply_fields(task, {
        "completed": completed,
        "completedDate": completed_date,
    })

  def _seed_due_date(self, task: Task) -> Optional[str]:
    """First occurrence for a recurring task when it differs from its due date."""
    recurrence = normalize_recurrence(task.recurrence)
    if recurrence.type == "None":
      return None
    seeded = first_occurrence(recurrence, task.due.date or None, today=self._today())
    if not seeded or seeded == task.due.date:
      return None
    return seeded
