from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from supabase import Client, create_client

from ..config.settings import SupabaseSettings


class SupabaseNotInitializedError(RuntimeError):
    """Raised when the Supabase client is used without URL or service key."""


@dataclass
class SupabaseGateway:
    """Lazily created service-role Supabase client."""

    settings: SupabaseSettings
    _client: Optional[Client] = None

    def ensure_client(self) -> Client:
        if self._client is not None:
            return self._client
        if not self.settings.is_configured:
            raise SupabaseNotInitializedError("Supabase settings are missing URL or service role key.")
        self._client = create_client(self.settings.url, self.settings.service_role_key)
        return self._client

    def table(self, name: str):
        return self.ensure_client().table(name)
