from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..config import AppSettings
from ..domain import ConfigurationError, OAuthCredentials
from .stores import InMemoryStore, JsonFileStore, KeyValueStore, SupabaseStore
from .supabase import SupabaseGateway


@dataclass
class CredentialStore:
    """OAuth token pairs keyed by chat user id."""

    store: KeyValueStore = field(default_factory=InMemoryStore)

    def get(self, user_id: str) -> Optional[OAuthCredentials]:
        record = self.store.get(user_id)
        return OAuthCredentials.from_record(record) if record else None

    def set(self, user_id: str, credentials: OAuthCredentials) -> None:
        self.store.set(user_id, credentials.to_record())

    def delete(self, user_id: str) -> bool:
        return self.store.delete(user_id)

    def is_authenticated(self, user_id: str) -> bool:
        return self.get(user_id) is not None


def build_credential_store(settings: AppSettings) -> CredentialStore:
    backend = settings.storage.credential_backend
    if backend == "memory":
        return CredentialStore(InMemoryStore())
    if backend == "json":
        return CredentialStore(JsonFileStore(settings.storage.credentials_file))
    if backend == "supabase":
        if not settings.supabase.is_configured:
            raise ConfigurationError("Supabase credential backend needs SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY.")
        gateway = SupabaseGateway(settings.supabase)
        return CredentialStore(SupabaseStore(gateway, settings.supabase.credentials_table))
    raise ConfigurationError(f"Unknown credential backend: {backend!r}")
