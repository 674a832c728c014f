from __future__ import annotations


class AgendaBotError(RuntimeError):
    """Base class for recoverable assistant errors."""


class ConfigurationError(AgendaBotError):
    """Raised when a required setting is missing."""


class ParseFailure(AgendaBotError):
    """Raised when no date or time could be extracted from a message."""


class AuthMissing(AgendaBotError):
    """Raised when a user has no stored Google credentials."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"No Google credentials stored for user {user_id}.")
        self.user_id = user_id


class DownstreamFailure(AgendaBotError):
    """Raised when a calendar, task or messaging backend call fails."""


class OAuthExchangeError(DownstreamFailure):
    """Raised when the authorization code could not be exchanged for tokens."""
