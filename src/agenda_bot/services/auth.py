from __future__ import annotations

import logging
import secrets
import threading
import urllib.parse
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import requests

from ..config import GoogleSettings
from ..data import CredentialStore
from ..domain import ConfigurationError, OAuthCredentials, OAuthExchangeError
from .google import TOKEN_URI

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
STATE_MAX_AGE = timedelta(minutes=10)


@dataclass(frozen=True)
class LoginRequest:
    user_id: str
    chat_id: str
    created_at: datetime


@dataclass
class GoogleAuthService:
    """Authorization-code flow binding a Google account to a chat user."""

    settings: GoogleSettings
    credentials: CredentialStore
    login_base_url: str = ""
    http: requests.Session = field(default_factory=requests.Session)
    _pending: Dict[str, LoginRequest] = field(default_factory=dict, repr=False)
    _guard: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def _require_configured(self) -> None:
        if not self.settings.is_configured:
            missing = ", ".join(self.settings.missing_env_vars)
            raise ConfigurationError(f"Google OAuth is not configured. Missing: {missing}")

    def start_login(self, user_id: str, chat_id: str, *, now: Optional[datetime] = None) -> str:
        """Register a login attempt and return the link sent to the user."""

        self._require_configured()
        now = now or datetime.now(timezone.utc)
        state = secrets.token_urlsafe(24)
        with self._guard:
            self._purge(now)
            self._pending[state] = LoginRequest(user_id=user_id, chat_id=chat_id, created_at=now)
        query = urllib.parse.urlencode({"state": state})
        return f"{self.login_base_url}?{query}"

    def authorization_url(self, state: str) -> str:
        self._require_configured()
        params = {
            "client_id": self.settings.client_id,
            "redirect_uri": self.settings.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.settings.scopes),
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
        return f"{AUTHORIZE_URL}?{urllib.parse.urlencode(params)}"

    def is_known_state(self, state: str, *, now: Optional[datetime] = None) -> bool:
        with self._guard:
            self._purge(now or datetime.now(timezone.utc))
            return state in self._pending

    def exchange_code(self, code: str, state: str, *, now: Optional[datetime] = None) -> LoginRequest:
        """Trade ``code`` for tokens and store them for the user bound to ``state``."""

        self._require_configured()
        now = now or datetime.now(timezone.utc)
        with self._guard:
            self._purge(now)
            login = self._pending.pop(state, None)
        if login is None:
            raise OAuthExchangeError("Unknown or expired login state.")

        data = {
            "code": code,
            "client_id": self.settings.client_id,
            "client_secret": self.settings.client_secret,
            "redirect_uri": self.settings.redirect_uri,
            "grant_type": "authorization_code",
        }
        try:
            response = self.http.post(TOKEN_URI, data=data, timeout=15)
        except requests.RequestException as exc:
            raise OAuthExchangeError(f"Token exchange request failed: {exc}") from exc
        if not response.ok:
            raise OAuthExchangeError(f"Token exchange failed: {response.status_code} {response.text}")

        token_json = response.json()
        access_token = token_json.get("access_token")
        if not access_token:
            raise OAuthExchangeError("Token response has no access_token.")
        expires_in = int(token_json.get("expires_in") or 0)
        scopes = tuple((token_json.get("scope") or "").split()) or self.settings.scopes
        previous = self.credentials.get(login.user_id)
        refresh_token = token_json.get("refresh_token") or (previous.refresh_token if previous else None)

        self.credentials.set(
            login.user_id,
            OAuthCredentials(
                access_token=access_token,
                refresh_token=refresh_token,
                expiry=now + timedelta(seconds=expires_in) if expires_in else None,
                scopes=scopes,
            ),
        )
        logger.info("Stored Google credentials for user %s", login.user_id)
        return login

    def logout(self, user_id: str) -> bool:
        return self.credentials.delete(user_id)

    def _purge(self, now: datetime) -> None:
        expired = [key for key, login in self._pending.items() if now - login.created_at > STATE_MAX_AGE]
        for key in expired:
            self._pending.pop(key, None)
