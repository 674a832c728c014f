from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from .enums import Awaiting, DialogueState


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    raise ValueError(f"Unsupported datetime value: {value!r}")


def _parse_date(value: Any) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise ValueError(f"Unsupported date value: {value!r}")


@dataclass(slots=True)
class PendingMeeting:
    """A meeting request still missing its date or its time."""

    title: str
    awaiting: Awaiting
    created_at: datetime
    resolved_date: Optional[date] = None

    @property
    def state(self) -> DialogueState:
        if self.awaiting is Awaiting.DATE:
            return DialogueState.AWAITING_DATE
        return DialogueState.AWAITING_TIME

    def is_expired(self, now: datetime, ttl: Optional[timedelta]) -> bool:
        if ttl is None:
            return False
        return now - self.created_at > ttl

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "PendingMeeting":
        return cls(
            title=str(record["title"]),
            awaiting=Awaiting(record["awaiting"]),
            created_at=_parse_datetime(record["created_at"]),
            resolved_date=_parse_date(record.get("resolved_date")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "awaiting": self.awaiting.value,
            "created_at": self.created_at.isoformat(),
            "resolved_date": self.resolved_date.isoformat() if self.resolved_date else None,
        }


@dataclass(frozen=True)
class MeetingRequest:
    title: str
    start: datetime
    duration_minutes: int = 60
    reminder_offsets_minutes: Sequence[int] = (1440, 60)

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration_minutes)


@dataclass(slots=True)
class EventSummary:
    title: str
    start: datetime
    end: Optional[datetime] = None
    all_day: bool = False
    link: Optional[str] = None


@dataclass(slots=True)
class TaskSummary:
    id: str
    title: str
    due: Optional[date] = None


@dataclass(slots=True)
class PendingTasks:
    undated: List[TaskSummary] = field(default_factory=list)
    dated: List[TaskSummary] = field(default_factory=list)

    def due_on(self, day: date) -> List[TaskSummary]:
        return [task for task in self.dated if task.due == day]


@dataclass(slots=True)
class OAuthCredentials:
    """Opaque Google token pair stored per user."""

    access_token: str
    refresh_token: Optional[str] = None
    expiry: Optional[datetime] = None
    scopes: tuple[str, ...] = ()

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "OAuthCredentials":
        expiry = record.get("expiry")
        return cls(
            access_token=str(record["access_token"]),
            refresh_token=record.get("refresh_token"),
            expiry=_parse_datetime(expiry) if expiry else None,
            scopes=tuple(record.get("scopes") or ()),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expiry": self.expiry.isoformat() if self.expiry else None,
            "scopes": list(self.scopes),
        }
