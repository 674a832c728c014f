"""Shared fixtures: fake Google gateways, a fake messenger and wired settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Sequence
from unittest.mock import MagicMock

import pytest

from agenda_bot.config import (
    AppSettings,
    AssistantSettings,
    GoogleSettings,
    ServerSettings,
    StorageSettings,
    SupabaseSettings,
    TelegramSettings,
)
from agenda_bot.data import ConversationState, CredentialStore
from agenda_bot.domain import DownstreamFailure, EventSummary, OAuthCredentials, PendingTasks, TaskSummary
from agenda_bot.orchestrator import DialogueOrchestrator
from agenda_bot.services import GoogleAuthService

# Wednesday
NOW = datetime(2026, 10, 14, 9, 30, tzinfo=timezone.utc)
USER_ID = "1001"
CHAT_ID = "1001"


class FakeCalendar:
    def __init__(self) -> None:
        self.created: List[dict] = []
        self.listed: List[tuple[datetime, datetime]] = []
        self.events: List[EventSummary] = []
        self.fail = False
        self.refresh_to: Optional[str] = None

    def create_event(
        self,
        auth: OAuthCredentials,
        title: str,
        start: datetime,
        duration_minutes: int = 60,
        reminder_offsets_minutes: Sequence[int] = (1440, 60),
    ) -> str:
        if self.fail:
            raise DownstreamFailure("calendar unavailable")
        if self.refresh_to:
            auth.access_token = self.refresh_to
        self.created.append(
            {
                "title": title,
                "start": start,
                "end": start + timedelta(minutes=duration_minutes),
                "reminders": tuple(reminder_offsets_minutes),
            }
        )
        return f"https://calendar.example/event/{len(self.created)}"

    def list_events(self, auth: OAuthCredentials, day_start: datetime, day_end: datetime) -> List[EventSummary]:
        if self.fail:
            raise DownstreamFailure("calendar unavailable")
        self.listed.append((day_start, day_end))
        return list(self.events)

    @property
    def calls(self) -> int:
        return len(self.created) + len(self.listed)


class FakeTasks:
    def __init__(self) -> None:
        self.created: List[TaskSummary] = []
        self.pending = PendingTasks()
        self.list_calls = 0
        self.fail = False

    def create_task(self, auth: OAuthCredentials, title: str, due: Optional[date] = None) -> TaskSummary:
        if self.fail:
            raise DownstreamFailure("tasks unavailable")
        task = TaskSummary(id=f"task-{len(self.created) + 1}", title=title, due=due)
        self.created.append(task)
        return task

    def list_pending(self, auth: OAuthCredentials) -> PendingTasks:
        if self.fail:
            raise DownstreamFailure("tasks unavailable")
        self.list_calls += 1
        return self.pending

    @property
    def calls(self) -> int:
        return len(self.created) + self.list_calls


class FakeMessenger:
    def __init__(self) -> None:
        self.sent: List[tuple[str, str]] = []
        self.started = False

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.started = False

    async def send_message(self, chat_id: str, text: str) -> None:
        self.sent.append((chat_id, text))


@dataclass
class FakeContext:
    settings: AppSettings
    orchestrator: DialogueOrchestrator
    auth: GoogleAuthService
    credentials: CredentialStore
    messenger: FakeMessenger = field(default_factory=FakeMessenger)


def make_settings(tmp_path: Path, *, webhook_secret: Optional[str] = None) -> AppSettings:
    return AppSettings(
        telegram=TelegramSettings(
            bot_token="123:abc",
            webhook_secret=webhook_secret,
            public_base_url="https://bot.example",
        ),
        google=GoogleSettings(
            client_id="client-id",
            client_secret="client-secret",
            redirect_uri="https://bot.example/auth/google/callback",
            calendar_id="primary",
            tasklist_id="@default",
        ),
        supabase=SupabaseSettings(url=None, service_role_key=None, credentials_table="google_credentials"),
        assistant=AssistantSettings(
            timezone="UTC",
            meeting_minutes=60,
            reminder_minutes=(1440, 60),
            pending_ttl=timedelta(hours=24),
            undated_task_limit=5,
        ),
        storage=StorageSettings(credential_backend="memory", credentials_file=tmp_path / "credentials.json"),
        server=ServerSettings(host="127.0.0.1", port=8080, log_level="INFO"),
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    return make_settings(tmp_path)


@pytest.fixture
def calendar() -> FakeCalendar:
    return FakeCalendar()


@pytest.fixture
def tasks() -> FakeTasks:
    return FakeTasks()


@pytest.fixture
def credentials() -> CredentialStore:
    store = CredentialStore()
    store.set(USER_ID, OAuthCredentials(access_token="access-1", refresh_token="refresh-1"))
    return store


@pytest.fixture
def conversations(settings: AppSettings) -> ConversationState:
    return ConversationState(ttl=settings.assistant.pending_ttl)


@pytest.fixture
def token_http() -> MagicMock:
    http = MagicMock()
    response = MagicMock()
    response.ok = True
    response.json.return_value = {
        "access_token": "fresh-access",
        "refresh_token": "fresh-refresh",
        "expires_in": 3599,
        "scope": "https://www.googleapis.com/auth/calendar.events https://www.googleapis.com/auth/tasks",
    }
    http.post.return_value = response
    return http


@pytest.fixture
def auth_service(settings: AppSettings, credentials: CredentialStore, token_http: MagicMock) -> GoogleAuthService:
    return GoogleAuthService(
        settings=settings.google,
        credentials=credentials,
        login_base_url=settings.telegram.login_url,
        http=token_http,
    )


@pytest.fixture
def orchestrator(
    settings: AppSettings,
    calendar: FakeCalendar,
    tasks: FakeTasks,
    credentials: CredentialStore,
    conversations: ConversationState,
    auth_service: GoogleAuthService,
) -> DialogueOrchestrator:
    return DialogueOrchestrator(
        calendar=calendar,
        tasks=tasks,
        credentials=credentials,
        conversations=conversations,
        settings=settings.assistant,
        login_link=auth_service.start_login,
    )


@pytest.fixture
def fake_context(
    settings: AppSettings,
    orchestrator: DialogueOrchestrator,
    auth_service: GoogleAuthService,
    credentials: CredentialStore,
) -> FakeContext:
    return FakeContext(settings=settings, orchestrator=orchestrator, auth=auth_service, credentials=credentials)