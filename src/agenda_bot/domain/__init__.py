"""Domain models for the agenda assistant."""

from __future__ import annotations

from .enums import Awaiting, DialogueState, Intent
from .errors import (
    AgendaBotError,
    AuthMissing,
    ConfigurationError,
    DownstreamFailure,
    OAuthExchangeError,
    ParseFailure,
)
from .models import (
    EventSummary,
    MeetingRequest,
    OAuthCredentials,
    PendingMeeting,
    PendingTasks,
    TaskSummary,
)

__all__ = [
    "AgendaBotError",
    "AuthMissing",
    "Awaiting",
    "ConfigurationError",
    "DialogueState",
    "DownstreamFailure",
    "EventSummary",
    "Intent",
    "MeetingRequest",
    "OAuthCredentials",
    "OAuthExchangeError",
    "ParseFailure",
    "PendingMeeting",
    "PendingTasks",
    "TaskSummary",
]
