"""Configuration models and helpers."""

from __future__ import annotations

from .paths import APP_NAME, CREDENTIALS_FILE, DATA_DIR, ensure_data_dir
from .settings import (
    AppSettings,
    AssistantSettings,
    GoogleSettings,
    ServerSettings,
    StorageSettings,
    SupabaseSettings,
    TelegramSettings,
    get_settings,
)

__all__ = [
    "APP_NAME",
    "AppSettings",
    "AssistantSettings",
    "CREDENTIALS_FILE",
    "DATA_DIR",
    "GoogleSettings",
    "ServerSettings",
    "StorageSettings",
    "SupabaseSettings",
    "TelegramSettings",
    "ensure_data_dir",
    "get_settings",
]
