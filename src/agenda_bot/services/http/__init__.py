"""HTTP entry points: Telegram webhook, health checks and the Google OAuth callback."""

from .server import app, create_app, process_update, run_server

__all__ = ["app", "create_app", "process_update", "run_server"]
