from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_data_dir

APP_NAME = "agenda-bot"
APP_AUTHOR = "AgendaBot"
DATA_DIR = Path(os.getenv("AGENDA_DATA_DIR") or user_data_dir(APP_NAME, APP_AUTHOR))
CREDENTIALS_FILE = DATA_DIR / "credentials.json"


def ensure_data_dir() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
