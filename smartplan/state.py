from __future__ import annotations

from threading import RLock
from typing import Dict, Iterable, List, Optional

from .agent.schemas import ActionRun
from .agent.undo_ledger import UndoLedger
from .models import Task

# In-memory store.
# NOTE: session state is only mutated through the functions in this module.


class Session:

    def __init__(self) -> None:
        self.tasks: List[Task] = []
        self.runs: Dict[str, ActionRun] = {}
        self.ledger = UndoLedger()


_sessions: Dict[str, Session] = {}
_lock = RLock()


def session_lock():
    """Held by callers for the whole of one pipeline operation."""
    return _lock


def get_session(session_id: str) -> Session:
    with _lock:
        session = _sessions.get(session_id)
        if session is None:
            session = Session()
            _sessions[session_id] = session
        return session


def get_tasks(session_id: str) -> List[Task]:
    return list(get_session(session_id).tasks)


def set_tasks(session_id: str, tasks: Iterable[Task]) -> List[Task]:
    with _lock:
        session = get_session(session_id)
        session.tasks = list(tasks)
        return list(session.tasks)


def get_run(session_id: str, message_id: str) -> Optional[ActionRun]:
    with _lock:
        return get_session(session_id).runs.get(message_id)


def record_run(session_id: str, run: ActionRun) -> None:
    with _lock:
        get_session(session_id).runs[run.message_id] = run


def reset_session(session_id: str) -> None:
    with _lock:
        session = _sessions.pop(session_id, None)
        if session is not None:
            session.ledger.clear()


def reset_all_sessions() -> None:
    with _lock:
        for session in _sessions.values():
            session.ledger.clear()
        _sessions.clear()
