from __future__ import annotations

from enum import Enum


class Intent(str, Enum):
    AGENDA_QUERY = "agenda_query"
    PENDING_CONTINUATION = "pending_continuation"
    MEETING = "meeting"
    EXPLICIT_TASK = "explicit_task"
    GREETING = "greeting"
    DEFAULT_TASK = "default_task"


class Awaiting(str, Enum):
    DATE = "date"
    TIME = "time"


class DialogueState(str, Enum):
    IDLE = "idle"
    AWAITING_DATE = "awaiting_date"
    AWAITING_TIME = "awaiting_time"
