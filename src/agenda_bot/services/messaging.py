from __future__ import annotations

import logging
from typing import Optional, Protocol

from telegram import Bot
from telegram.error import TelegramError

from ..domain import DownstreamFailure

logger = logging.getLogger(__name__)

TELEGRAM_MESSAGE_LIMIT = 4096


class Messenger(Protocol):
    async def start(self) -> None: ...

    async def stop(self) -> None: ...

    async def send_message(self, chat_id: str, text: str) -> None: ...


class TelegramMessenger:
    """Reply channel over the Telegram Bot API."""

    def __init__(self, token: str, bot: Optional[Bot] = None) -> None:
        self._bot = bot or Bot(token)
        self._started = False

    @property
    def bot(self) -> Bot:
        return self._bot

    async def start(self) -> None:
        if self._started:
            return
        await self._bot.initialize()
        self._started = True
        logger.info("Telegram bot initialized")

    async def stop(self) -> None:
        if not self._started:
            return
        await self._bot.shutdown()
        self._started = False

    async def send_message(self, chat_id: str, text: str) -> None:
        try:
            for start in range(0, len(text), TELEGRAM_MESSAGE_LIMIT):
                await self._bot.send_message(chat_id=chat_id, text=text[start : start + TELEGRAM_MESSAGE_LIMIT])
        except TelegramError as exc:
            raise DownstreamFailure(f"Telegram sendMessage failed: {exc}") from exc

    async def set_webhook(self, url: str, secret_token: Optional[str] = None) -> bool:
        try:
            return await self._bot.set_webhook(url=url, secret_token=secret_token)
        except TelegramError as exc:
            raise DownstreamFailure(f"Telegram setWebhook failed: {exc}") from exc
