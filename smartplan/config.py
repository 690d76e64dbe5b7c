from __future__ import annotations

import os
import re
from zoneinfo import ZoneInfo

LLM_DEBUG = os.getenv("LLM_DEBUG", "0") == "1"

APP_TIMEZONE = ZoneInfo(os.getenv("SMARTPLAN_TIMEZONE", "UTC"))
DEBUG_DATE = os.getenv("SMARTPLAN_DEBUG_DATE", "").strip() or None

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# -------------------------
# Assistant protocol
# -------------------------
ACTIONS_TAG = os.getenv("SMARTPLAN_ACTIONS_TAG", "smartplan_actions").strip() or "smartplan_actions"
API_BASE = os.getenv("API_BASE", "/api")
DEFAULT_SESSION_ID = "default"

# -------------------------
# Task defaults
# -------------------------
DEFAULT_TITLE = "Untitled task"
PRIORITIES = ("High", "Medium", "Low", "None")
DEFAULT_PRIORITY = "None"

RECURRENCE_TYPES = ("None", "Daily", "Weekly", "Monthly", "Custom")
RECURRENCE_UNITS = ("day", "week", "month")
DEFAULT_RECURRENCE_TYPE = "None"
DEFAULT_RECURRENCE_UNIT = "day"
WEEKDAY_ORDER = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

ID_COUNTER_MODULO = 1000
