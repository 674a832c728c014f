"""Adapters to Google, Telegram and the OAuth flow."""

from __future__ import annotations

from .auth import GoogleAuthService
from .google import CalendarGateway, GoogleCalendarGateway, GoogleServiceFactory, GoogleTaskGateway, TaskGateway
from .messaging import Messenger, TelegramMessenger

__all__ = [
    "CalendarGateway",
    "GoogleAuthService",
    "GoogleCalendarGateway",
    "GoogleServiceFactory",
    "GoogleTaskGateway",
    "Messenger",
    "TaskGateway",
    "TelegramMessenger",
]
