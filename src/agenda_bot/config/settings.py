from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

from .paths import CREDENTIALS_FILE

load_dotenv()

GOOGLE_SCOPES = (
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/tasks",
)


@dataclass(frozen=True)
class TelegramSettings:
    bot_token: Optional[str]
    webhook_secret: Optional[str]
    public_base_url: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token)

    @property
    def missing_env_vars(self) -> list[str]:
        return [] if self.bot_token else ["TELEGRAM_BOT_TOKEN"]

    @property
    def webhook_url(self) -> Optional[str]:
        if not self.public_base_url:
            return None
        return f"{self.public_base_url.rstrip('/')}/webhook"

    @property
    def login_url(self) -> str:
        base = (self.public_base_url or "").rstrip("/")
        return f"{base}/auth/google/login"


@dataclass(frozen=True)
class GoogleSettings:
    client_id: Optional[str]
    client_secret: Optional[str]
    redirect_uri: Optional[str]
    calendar_id: str
    tasklist_id: str
    scopes: tuple[str, ...] = GOOGLE_SCOPES

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.redirect_uri)

    @property
    def missing_env_vars(self) -> list[str]:
        missing = []
        if not self.client_id:
            missing.append("GOOGLE_CLIENT_ID")
        if not self.client_secret:
            missing.append("GOOGLE_CLIENT_SECRET")
        if not self.redirect_uri:
            missing.append("GOOGLE_REDIRECT_URI")
        return missing


@dataclass(frozen=True)
class SupabaseSettings:
    url: Optional[str]
    service_role_key: Optional[str]
    credentials_table: str

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.service_role_key)


@dataclass(frozen=True)
class AssistantSettings:
    timezone: str
    meeting_minutes: int
    reminder_minutes: tuple[int, ...]
    pending_ttl: timedelta
    undated_task_limit: int

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass(frozen=True)
class StorageSettings:
    credential_backend: str
    credentials_file: Path


@dataclass(frozen=True)
class ServerSettings:
    host: str
    port: int
    log_level: str


@dataclass(frozen=True)
class AppSettings:
    telegram: TelegramSettings
    google: GoogleSettings
    supabase: SupabaseSettings
    assistant: AssistantSettings
    storage: StorageSettings
    server: ServerSettings


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _minutes_from_env(name: str, default: tuple[int, ...]) -> tuple[int, ...]:
    raw = os.getenv(name)
    if not raw:
        return default
    values = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if chunk.isdigit():
            values.append(int(chunk))
    return tuple(values) or default


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    telegram = TelegramSettings(
        bot_token=os.getenv("TELEGRAM_BOT_TOKEN"),
        webhook_secret=os.getenv("TELEGRAM_WEBHOOK_SECRET") or None,
        public_base_url=os.getenv("PUBLIC_BASE_URL"),
    )

    google = GoogleSettings(
        client_id=os.getenv("GOOGLE_CLIENT_ID"),
        client_secret=os.getenv("GOOGLE_CLIENT_SECRET"),
        redirect_uri=os.getenv("GOOGLE_REDIRECT_URI"),
        calendar_id=os.getenv("GOOGLE_CALENDAR_ID", "primary"),
        tasklist_id=os.getenv("GOOGLE_TASKLIST_ID", "@default"),
    )

    supabase = SupabaseSettings(
        url=os.getenv("SUPABASE_URL"),
        service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY"),
        credentials_table=os.getenv("SUPABASE_CREDENTIALS_TABLE", "google_credentials"),
    )

    assistant = AssistantSettings(
        timezone=os.getenv("AGENDA_TIMEZONE", "America/Santiago"),
        meeting_minutes=_int_from_env("AGENDA_MEETING_MINUTES", 60),
        reminder_minutes=_minutes_from_env("AGENDA_REMINDER_MINUTES", (1440, 60)),
        pending_ttl=timedelta(minutes=_int_from_env("AGENDA_PENDING_TTL_MINUTES", 1440)),
        undated_task_limit=_int_from_env("AGENDA_UNDATED_TASK_LIMIT", 5),
    )

    storage = StorageSettings(
        credential_backend=os.getenv("AGENDA_CREDENTIAL_BACKEND", "json").lower(),
        credentials_file=Path(os.getenv("AGENDA_CREDENTIALS_FILE") or CREDENTIALS_FILE),
    )

    server = ServerSettings(
        host=os.getenv("HOST", "0.0.0.0"),
        port=_int_from_env("PORT", 8080),
        log_level=os.getenv("AGENDA_LOG_LEVEL", "INFO").upper(),
    )

    return AppSettings(
        telegram=telegram,
        google=google,
        supabase=supabase,
        assistant=assistant,
        storage=storage,
        server=server,
    )
