from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional

from ..domain import Awaiting, DialogueState, PendingMeeting
from .stores import InMemoryStore, KeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class ConversationState:
    """Per-conversation pending meeting, at most one per conversation id."""

    store: KeyValueStore = field(default_factory=InMemoryStore)
    ttl: Optional[timedelta] = None

    def lock(self, conversation_id: str):
        return self.store.lock(conversation_id)

    def get(self, conversation_id: str, now: datetime) -> Optional[PendingMeeting]:
        record = self.store.get(conversation_id)
        if record is None:
            return None
        pending = PendingMeeting.from_record(record)
        if pending.is_expired(now, self.ttl):
            logger.info("Discarding expired pending meeting for conversation %s", conversation_id)
            self.store.delete(conversation_id)
            return None
        return pending

    def state_of(self, conversation_id: str, now: datetime) -> DialogueState:
        pending = self.get(conversation_id, now)
        return pending.state if pending else DialogueState.IDLE

    def start(
        self,
        conversation_id: str,
        *,
        title: str,
        now: datetime,
        resolved_date: Optional[date] = None,
    ) -> PendingMeeting:
        pending = PendingMeeting(
            title=title,
            awaiting=Awaiting.TIME if resolved_date else Awaiting.DATE,
            created_at=now,
            resolved_date=resolved_date,
        )
        self.store.set(conversation_id, pending.to_record())
        return pending

    def update(self, conversation_id: str, pending: PendingMeeting) -> None:
        self.store.set(conversation_id, pending.to_record())

    def clear(self, conversation_id: str) -> bool:
        return self.store.delete(conversation_id)
