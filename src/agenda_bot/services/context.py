from __future__ import annotations

from dataclasses import dataclass, field

from ..config import AppSettings, get_settings
from ..data import ConversationState, CredentialStore, build_credential_store
from ..domain import ConfigurationError
from ..orchestrator import DialogueOrchestrator
from .auth import GoogleAuthService
from .google import GoogleCalendarGateway, GoogleTaskGateway
from .messaging import Messenger, TelegramMessenger


@dataclass
class ServiceContext:
    """Wires settings, stores, Google gateways and the reply channel together."""

    settings: AppSettings = field(default_factory=get_settings)
    credentials: CredentialStore = field(init=False)
    conversations: ConversationState = field(init=False)
    auth: GoogleAuthService = field(init=False)
    orchestrator: DialogueOrchestrator = field(init=False)
    messenger: Messenger = field(init=False)

    def __post_init__(self) -> None:
        telegram = self.settings.telegram
        if not telegram.is_configured:
            missing = ", ".join(telegram.missing_env_vars)
            raise ConfigurationError(f"Telegram is not configured. Missing: {missing}")

        assistant = self.settings.assistant
        self.credentials = build_credential_store(self.settings)
        self.conversations = ConversationState(ttl=assistant.pending_ttl)
        self.auth = GoogleAuthService(
            settings=self.settings.google,
            credentials=self.credentials,
            login_base_url=telegram.login_url,
        )
        self.orchestrator = DialogueOrchestrator(
            calendar=GoogleCalendarGateway(self.settings.google, timezone_name=assistant.timezone),
            tasks=GoogleTaskGateway(self.settings.google),
            credentials=self.credentials,
            conversations=self.conversations,
            settings=assistant,
            login_link=self.auth.start_login,
        )
        self.messenger = TelegramMessenger(telegram.bot_token)
