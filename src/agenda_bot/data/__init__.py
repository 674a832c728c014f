"""Data access layer."""

from __future__ import annotations

from .conversations import ConversationState
from .credentials import CredentialStore, build_credential_store
from .stores import InMemoryStore, JsonFileStore, KeyValueStore, SupabaseStore
from .supabase import SupabaseGateway, SupabaseNotInitializedError

__all__ = [
    "ConversationState",
    "CredentialStore",
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStore",
    "SupabaseGateway",
    "SupabaseNotInitializedError",
    "SupabaseStore",
    "build_credential_store",
]
