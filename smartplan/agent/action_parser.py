from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

from ..config import ACTIONS_TAG
from ..utils import _log_debug
from .schemas import ParseResult


def _block_pattern(tag: str) -> "re.Pattern[str]":
  escaped = re.escape(tag)
  return re.compile(rf"<{escaped}\s*>([\s\S]*?)</{escaped}\s*>", re.IGNORECASE)


_DEFAULT_BLOCK_RE = _block_pattern(ACTIONS_TAG)


def _safe_json_loads(raw: str) -> Optional[Dict[str, Any]]:
  raw = raw.strip()
  if not raw:
    return None
  try:
    obj = json.loads(raw)
  except (ValueError, RecursionError) as exc:
    _log_debug(f"[ACTIONS] json.loads failed: {type(exc).__name__}")
    return None
  return obj if isinstance(obj, dict) else None


def parse_assistant_reply(text: Any, tag: Optional[str] = None) -> ParseResult:
  """Split an assistant reply into display text and its proposed actions.

  Only the first actions block is read. Every block is removed from the
  display text whether or not it parses. Malformed or missing blocks give
  an empty action list; nothing here raises on model output.
  """
  if not isinstance(text, str):
    text = "" if text is None else str(text)

  pattern = _block_pattern(tag) if tag else _DEFAULT_BLOCK_RE
  match = pattern.search(text)
  if not match:
    return ParseResult(display_text=text, actions=[])

  display_text = pattern.sub("", text).strip()
  payload = _safe_json_loads(match.group(1))
  if payload is None:
    _log_debug(f"[ACTIONS] unable to parse actions JSON: {match.group(1)[:200]!r}")
    return ParseResult(display_text=display_text,
                       actions=[],
                       ok=False,
                       error="invalid_json")

  actions = payload.get("actions")
  if not isinstance(actions, list):
    _log_debug(f"[ACTIONS] actions is not a list: {type(actions).__name__}")
    return ParseResult(display_text=display_text,
                       actions=[],
                       ok=False,
                       error="missing_actions")

  _log_debug(f"[ACTIONS] parsed {len(actions)} action(s)")
  return ParseResult(display_text=display_text, actions=actions)
