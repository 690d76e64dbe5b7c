from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional

from ..config import ACTIONS_TAG
from ..utils import today_iso
from .normalizer import sanitize_tasks


def build_system_prompt(tag: Optional[str] = None) -> str:
  tag = tag or ACTIONS_TAG
  return (
      "You are SmartPlan, a focused scheduling copilot. Be concise, avoid over-explaining.\n\n"
      "You receive:\n"
      "- User chat messages\n"
      "- Current todo JSON snapshot\n"
      "You return natural language guidance AND a machine-readable actions block.\n\n"
      "Action format (always include, even if empty):\n"
      f"<{tag}>{{\n"
      '  "actions": [\n'
      '    {"type":"create","task":{"title":"string","due":{"date":"YYYY-MM-DD","time":"HH:MM"},'
      '"priority":"High|Medium|Low|None","tags":["..."],"completed":false,'
      '"timeAllocated":number|null,"objective":string|null,"goalId":string|null,'
      '"recurrence":{"type":"None|Daily|Weekly|Monthly|Custom","interval":number|null,'
      '"unit":"day|week|month","daysOfWeek":["Mon","Tue","Wed","Thu","Fri","Sat","Sun"]},'
      '"inToday":boolean}},\n'
      '    {"type":"update","id":123,"fields":{ ...only changed keys... }},\n'
      '    {"type":"complete","id":123,"completed":true,"completedDate":"YYYY-MM-DD"},\n'
      '    {"type":"delete","id":123}\n'
      "  ]\n"
      f"}}</{tag}>\n\n"
      "Rules:\n"
      "- Never invent task IDs; only use provided IDs for updates, completions and deletes.\n"
      "- For new tasks, include the full task object; omit impossible fields.\n"
      "- If no changes are needed, return actions: [] but still wrap in the tags.\n"
      "- Keep the natural language reply separate from the actions block.\n"
      "- Deletes are shown to the user for approval before they run.\n"
      "- Leave due.time empty unless the user explicitly mentions a specific time.\n"
      "- If timeAllocated is not provided, estimate it in minutes from the task description.\n")


def build_context_messages(tasks: Iterable[Any],
                           tag: Optional[str] = None) -> List[Dict[str, str]]:
  """System messages the chat transport puts in front of the conversation."""
  snapshot = sanitize_tasks(tasks)
  return [
      {
          "role": "system",
          "content": build_system_prompt(tag)
      },
      {
          "role": "system",
          "content": f"Today is {today_iso()}.\n"
                     f"Current todos JSON (read-only):\n"
                     f"{json.dumps(snapshot, ensure_ascii=False, indent=2)}"
      },
  ]
