"""Google Calendar v3 and Google Tasks v1 adapters.

Both gateways take the user's :class:`OAuthCredentials` on every call. When
the access token has expired it is refreshed in place, so the caller can
persist the new token after the call returns.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional, Protocol, Sequence

import httplib2
import requests
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request as GoogleRequest
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..config import GoogleSettings
from ..domain import DownstreamFailure, EventSummary, OAuthCredentials, PendingTasks, TaskSummary

logger = logging.getLogger(__name__)

TOKEN_URI = "https://oauth2.googleapis.com/token"

ServiceFactory = Callable[[str, str, OAuthCredentials], Any]


class CalendarGateway(Protocol):
    def create_event(
        self,
        auth: OAuthCredentials,
        title: str,
        start: datetime,
        duration_minutes: int = 60,
        reminder_offsets_minutes: Sequence[int] = (1440, 60),
    ) -> str: ...

    def list_events(self, auth: OAuthCredentials, day_start: datetime, day_end: datetime) -> List[EventSummary]: ...


class TaskGateway(Protocol):
    def create_task(self, auth: OAuthCredentials, title: str, due: Optional[date] = None) -> TaskSummary: ...

    def list_pending(self, auth: OAuthCredentials) -> PendingTasks: ...


@contextmanager
def _downstream(operation: str) -> Iterator[None]:
    try:
        yield
    except (HttpError, GoogleAuthError, requests.RequestException, httplib2.HttpLib2Error, OSError) as exc:
        raise DownstreamFailure(f"Google {operation} failed: {exc}") from exc


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


@dataclass
class GoogleServiceFactory:
    """Builds discovery clients from stored tokens, refreshing them when expired."""

    settings: GoogleSettings

    def credentials(self, auth: OAuthCredentials) -> Credentials:
        creds = Credentials(
            token=auth.access_token,
            refresh_token=auth.refresh_token,
            token_uri=TOKEN_URI,
            client_id=self.settings.client_id,
            client_secret=self.settings.client_secret,
            scopes=list(auth.scopes or self.settings.scopes),
        )
        creds.expiry = _naive_utc(auth.expiry)
        if creds.expired and creds.refresh_token:
            creds.refresh(GoogleRequest())
            auth.access_token = creds.token
            auth.expiry = creds.expiry.replace(tzinfo=timezone.utc) if creds.expiry else None
            logger.debug("Refreshed Google access token")
        return creds

    def __call__(self, api: str, version: str, auth: OAuthCredentials) -> Any:
        return build(api, version, credentials=self.credentials(auth), cache_discovery=False)


def build_reminders(offsets: Sequence[int]) -> Dict[str, Any]:
    overrides = [{"method": "popup", "minutes": int(minutes)} for minutes in offsets if int(minutes) >= 0]
    if not overrides:
        return {"useDefault": True}
    return {"useDefault": False, "overrides": overrides}


def _event_time(payload: Dict[str, Any]) -> tuple[Optional[datetime], bool]:
    if payload.get("dateTime"):
        return datetime.fromisoformat(payload["dateTime"].replace("Z", "+00:00")), False
    if payload.get("date"):
        return datetime.combine(date.fromisoformat(payload["date"]), datetime.min.time()), True
    return None, False


def _event_summary(raw: Dict[str, Any]) -> Optional[EventSummary]:
    start, all_day = _event_time(raw.get("start") or {})
    if start is None:
        return None
    end, _ = _event_time(raw.get("end") or {})
    return EventSummary(
        title=raw.get("summary") or "(sin título)",
        start=start,
        end=end,
        all_day=all_day,
        link=raw.get("htmlLink"),
    )


def _rfc3339_due(due: date) -> str:
    return f"{due.isoformat()}T00:00:00.000Z"


def _task_summary(raw: Dict[str, Any]) -> TaskSummary:
    due_raw = raw.get("due")
    return TaskSummary(
        id=str(raw.get("id", "")),
        title=raw.get("title") or "(sin título)",
        due=date.fromisoformat(due_raw[:10]) if due_raw else None,
    )


@dataclass
class GoogleCalendarGateway:
    settings: GoogleSettings
    service_factory: Optional[ServiceFactory] = None
    timezone_name: str = "UTC"

    def __post_init__(self) -> None:
        if self.service_factory is None:
            self.service_factory = GoogleServiceFactory(self.settings)

    def _service(self, auth: OAuthCredentials) -> Any:
        return self.service_factory("calendar", "v3", auth)

    def create_event(
        self,
        auth: OAuthCredentials,
        title: str,
        start: datetime,
        duration_minutes: int = 60,
        reminder_offsets_minutes: Sequence[int] = (1440, 60),
    ) -> str:
        end = start + timedelta(minutes=duration_minutes)
        body = {
            "summary": title,
            "start": {"dateTime": start.isoformat(), "timeZone": self.timezone_name},
            "end": {"dateTime": end.isoformat(), "timeZone": self.timezone_name},
            "reminders": build_reminders(reminder_offsets_minutes),
        }
        with _downstream("calendar insert"):
            created = self._service(auth).events().insert(calendarId=self.settings.calendar_id, body=body).execute()
        logger.info("Created calendar event %s", created.get("id"))
        return created.get("htmlLink") or ""

    def list_events(self, auth: OAuthCredentials, day_start: datetime, day_end: datetime) -> List[EventSummary]:
        with _downstream("calendar list"):
            response = (
                self._service(auth)
                .events()
                .list(
                    calendarId=self.settings.calendar_id,
                    timeMin=day_start.isoformat(),
                    timeMax=day_end.isoformat(),
                    singleEvents=True,
                    orderBy="startTime",
                )
                .execute()
            )
        events = [_event_summary(item) for item in response.get("items", [])]
        return [event for event in events if event is not None]


@dataclass
class GoogleTaskGateway:
    settings: GoogleSettings
    service_factory: Optional[ServiceFactory] = None
    page_size: int = 100
    _max_pages: int = field(default=10, repr=False)

    def __post_init__(self) -> None:
        if self.service_factory is None:
            self.service_factory = GoogleServiceFactory(self.settings)

    def _service(self, auth: OAuthCredentials) -> Any:
        return self.service_factory("tasks", "v1", auth)

    def create_task(self, auth: OAuthCredentials, title: str, due: Optional[date] = None) -> TaskSummary:
        body: Dict[str, Any] = {"title": title}
        if due is not None:
            body["due"] = _rfc3339_due(due)
        with _downstream("tasks insert"):
            created = self._service(auth).tasks().insert(tasklist=self.settings.tasklist_id, body=body).execute()
        logger.info("Created task %s", created.get("id"))
        return _task_summary(created)

    def list_pending(self, auth: OAuthCredentials) -> PendingTasks:
        pending = PendingTasks()
        page_token: Optional[str] = None
        with _downstream("tasks list"):
            service = self._service(auth)
            for _ in range(self._max_pages):
                response = (
                    service.tasks()
                    .list(
                        tasklist=self.settings.tasklist_id,
                        showCompleted=False,
                        maxResults=self.page_size,
                        pageToken=page_token,
                    )
                    .execute()
                )
                for item in response.get("items", []):
                    if item.get("status") == "completed":
                        continue
                    task = _task_summary(item)
                    (pending.dated if task.due else pending.undated).append(task)
                page_token = response.get("nextPageToken")
                if not page_token:
                    break
        pending.dated.sort(key=lambda task: task.due)
        return pending


__all__ = [
    "CalendarGateway",
    "GoogleCalendarGateway",
    "GoogleServiceFactory",
    "GoogleTaskGateway",
    "TaskGateway",
    "build_reminders",
]
