"""
SmartPlan assistant action pipeline
"""

from .action_parser import parse_assistant_reply
from .executor import ActionExecutor, ExecutionResult, InvalidTransitionError
from .ids import IdGenerator
from .normalizer import TaskNormalizer, normalize_task, sanitize_tasks
from .schemas import ActionRun, ActionState, ParseResult, coerce_action
from .undo_ledger import UndoLedger

__all__ = [
    "parse_assistant_reply",
    "ActionExecutor",
    "ExecutionResult",
    "InvalidTransitionError",
    "IdGenerator",
    "TaskNormalizer",
    "normalize_task",
    "sanitize_tasks",
    "ActionRun",
    "ActionState",
    "ParseResult",
    "coerce_action",
    "UndoLedger",
]
