from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Dict, List

from fastapi import APIRouter, HTTPException, Query

from .agent import (
    ActionExecutor,
    ActionRun,
    ExecutionResult,
    InvalidTransitionError,
    TaskNormalizer,
    parse_assistant_reply,
)
from .agent.prompt import build_context_messages
from .config import API_BASE, DEFAULT_SESSION_ID
from .models import AssistantReplyPayload, OccurrencePayload, Task, TasksPayload
from .recurrence import first_occurrence, next_occurrence
from .state import (
    get_run,
    get_session,
    get_tasks,
    record_run,
    reset_session,
    session_lock,
    set_tasks,
)
from .utils import _log_debug

router = APIRouter()
logger = logging.getLogger(__name__)
_normalizer = TaskNormalizer()


def _executor_for(session_id: str) -> ActionExecutor:
  return ActionExecutor(normalizer=_normalizer, ledger=get_session(session_id).ledger)


def _tasks_view(tasks: List[Task]) -> List[Dict[str, Any]]:
  return [task.to_wire() for task in tasks]


def _result_view(result: ExecutionResult) -> Dict[str, Any]:
  return {
      **result.run.view(),
      "restored": result.restored,
      "tasks": _tasks_view(result.tasks),
  }


def _require_run(session_id: str, message_id: str) -> ActionRun:
  run = get_run(session_id, message_id)
  if run is None:
    raise HTTPException(status_code=404, detail=f"Unknown message: {message_id}")
  return run


def _transition(session_id: str, message_id: str, index: int,
                step: Callable[[ActionExecutor, List[Task], ActionRun, int],
                               ExecutionResult]) -> Dict[str, Any]:
  with session_lock():
    run = _require_run(session_id, message_id)
    executor = _executor_for(session_id)
    try:
      result = step(executor, get_tasks(session_id), run, index)
    except InvalidTransitionError as exc:
      raise HTTPException(status_code=409, detail=str(exc))
    except Exception as e:
      logger.exception("Action transition error")
      raise HTTPException(status_code=500, detail=str(e))
    set_tasks(session_id, result.tasks)
    record_run(session_id, result.run)
    return _result_view(result)


@router.get(f"{API_BASE}/tasks")
def list_tasks(session_id: str = Query(DEFAULT_SESSION_ID)):
  return {"tasks": _tasks_view(get_tasks(session_id))}


@router.put(f"{API_BASE}/tasks")
def replace_tasks(payload: TasksPayload, session_id: str = Query(DEFAULT_SESSION_ID)):
  with session_lock():
    tasks = _normalizer.normalize_many(payload.tasks)
    ids = [str(task.id) for task in tasks]
    if len(ids) != len(set(ids)):
      raise HTTPException(status_code=400, detail="Task ids must be unique.")
    stored = set_tasks(session_id, tasks)
  return {"tasks": _tasks_view(stored)}


@router.get(f"{API_BASE}/assistant/context")
def assistant_context(session_id: str = Query(DEFAULT_SESSION_ID)):
  return {"messages": build_context_messages(get_tasks(session_id))}


@router.post(f"{API_BASE}/assistant/replies")
def process_reply(payload: AssistantReplyPayload,
                  session_id: str = Query(DEFAULT_SESSION_ID)):
  message_id = (payload.message_id or "").strip() or uuid.uuid4().hex[:12]
  with session_lock():
    if get_run(session_id, message_id) is not None:
      raise HTTPException(status_code=409,
                          detail=f"Message already processed: {message_id}")
    parsed = parse_assistant_reply(payload.content)
    try:
      result = _executor_for(session_id).execute(get_tasks(session_id),
                                                 parsed.actions, message_id)
    except Exception as e:
      logger.exception("Action execution error")
      raise HTTPException(status_code=500, detail=str(e))
    set_tasks(session_id, result.tasks)
    record_run(session_id, result.run)
  _log_debug(f"[API] {session_id}/{message_id} parsed_ok={parsed.ok} "
             f"actions={len(parsed.actions)}")
  return {
      "display_text": parsed.display_text,
      "parse_ok": parsed.ok,
      **_result_view(result),
  }


@router.post(f"{API_BASE}/assistant/replies/{{message_id}}/actions/{{index}}/approve")
def approve_action(message_id: str, index: int,
                   session_id: str = Query(DEFAULT_SESSION_ID)):
  return _transition(session_id, message_id, index,
                     lambda ex, tasks, run, i: ex.approve(tasks, run, i))


@router.post(f"{API_BASE}/assistant/replies/{{message_id}}/actions/{{index}}/reject")
def reject_action(message_id: str, index: int,
                  session_id: str = Query(DEFAULT_SESSION_ID)):
  return _transition(session_id, message_id, index,
                     lambda ex, tasks, run, i: ex.reject(tasks, run, i))


@router.post(f"{API_BASE}/assistant/replies/{{message_id}}/actions/{{index}}/undo")
def undo_action(message_id: str, index: int,
                session_id: str = Query(DEFAULT_SESSION_ID)):
  return _transition(session_id, message_id, index,
                     lambda ex, tasks, run, i: ex.undo(tasks, run, i))


@router.post(f"{API_BASE}/recurrence/first")
def recurrence_first(payload: OccurrencePayload):
  return {"date": first_occurrence(payload.recurrence, payload.date)}


@router.post(f"{API_BASE}/recurrence/next")
def recurrence_next(payload: OccurrencePayload):
  return {"date": next_occurrence(payload.recurrence, payload.date)}


@router.delete(f"{API_BASE}/sessions")
def delete_session(session_id: str = Query(DEFAULT_SESSION_ID)):
  reset_session(session_id)
  return {"ok": True}
