from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TelegramUser(BaseModel):
    id: int
    first_name: Optional[str] = Field(default=None)
    username: Optional[str] = Field(default=None)


class TelegramChat(BaseModel):
    id: int
    type: Optional[str] = Field(default=None)


class TelegramMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: int
    chat: TelegramChat
    from_user: Optional[TelegramUser] = Field(default=None, alias="from")
    text: Optional[str] = Field(default=None)

    @property
    def sender_id(self) -> str:
        return str(self.from_user.id if self.from_user else self.chat.id)


class TelegramUpdate(BaseModel):
    """The subset of a Telegram ``Update`` the assistant reads."""

    update_id: int
    message: Optional[TelegramMessage] = Field(default=None)
