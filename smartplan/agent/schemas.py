from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ..models import TaskId
from ..utils import _log_debug


# ---------------------------------------------------------------------------
#  Action wire schemas
# ---------------------------------------------------------------------------

class CreateAction(BaseModel):
  model_config = ConfigDict(extra="ignore")

  type: Literal["create"] = "create"
  task: Dict[str, Any] = Field(default_factory=dict)


class UpdateAction(BaseModel):
  model_config = ConfigDict(extra="ignore")

  type: Literal["update"] = "update"
  id: TaskId
  fields: Dict[str, Any] = Field(default_factory=dict)


class CompleteAction(BaseModel):
  model_config = ConfigDict(extra="ignore", populate_by_name=True)

  type: Literal["complete"] = "complete"
  id: TaskId
  completed: Optional[bool] = True
  completed_date: Optional[str] = Field(default=None, alias="completedDate")


class DeleteAction(BaseModel):
  model_config = ConfigDict(extra="ignore")

  type: Literal["delete"] = "delete"
  id: TaskId


Action = Annotated[
    Union[CreateAction, UpdateAction, CompleteAction, DeleteAction],
    Field(discriminator="type"),
]
_ACTION_ADAPTER: TypeAdapter[Any] = TypeAdapter(Action)


def coerce_action(raw: Any) -> Optional[Action]:
  """Typed view of one raw action entry, or None when it is not an action."""
  if not isinstance(raw, dict):
    return None
  kind = raw.get("type")
  if not isinstance(kind, str):
    return None
  payload = dict(raw)
  payload["type"] = kind.strip().lower()
  if payload.get("task") is None:
    payload.pop("task", None)
  if payload.get("fields") is None:
    payload.pop("fields", None)
  try:
    return _ACTION_ADAPTER.validate_python(payload)
  except ValidationError as exc:
    _log_debug(f"[ACTIONS] dropped invalid action {raw!r}: {exc.error_count()} error(s)")
    return None


# ---------------------------------------------------------------------------
#  Execution state
# ---------------------------------------------------------------------------

class ActionState(str, Enum):
  BLOCKED = "blocked"
  PENDING_APPROVAL = "pending_approval"
  EXECUTED = "executed"
  APPROVED = "approved"
  REJECTED = "rejected"
  UNDONE = "undone"


TERMINAL_STATES = frozenset({
    ActionState.EXECUTED,
    ActionState.APPROVED,
    ActionState.REJECTED,
    ActionState.UNDONE,
})
UNDOABLE_STATES = frozenset({ActionState.EXECUTED, ActionState.APPROVED})


class ParseResult(BaseModel):
  model_config = ConfigDict(extra="forbid")

  display_text: str
  actions: List[Any] = Field(default_factory=list)
  ok: bool = True
  error: Optional[str] = None


class ActionRun(BaseModel):
  """Actions proposed by one assistant message and where execution stands."""
  model_config = ConfigDict(extra="forbid")

  message_id: str
  raw_actions: List[Any] = Field(default_factory=list)
  states: List[ActionState] = Field(default_factory=list)

  @property
  def pending_index(self) -> Optional[int]:
    for index, state in enumerate(self.states):
      if state == ActionState.PENDING_APPROVAL:
        return index
    return None

  @property
  def executed_count(self) -> int:
    count = 0
    for state in self.states:
      if state not in TERMINAL_STATES:
        break
      count += 1
    return count

  def view(self) -> Dict[str, Any]:
    return {
        "message_id": self.message_id,
        "actions": self.raw_actions,
        "states": [state.value for state in self.states],
        "executed_count": self.executed_count,
        "pending_index": self.pending_index,
    }
