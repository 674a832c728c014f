from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..domain import Awaiting, Intent, PendingMeeting
from .datetime_resolver import DateResolution, DateTimeResolver, normalize_text

MEETING_RE = re.compile(
    r"\b(reunion(?:es)?|reunirme|reunirnos|reunamos|agendar|agendame|agendemos|agenda\s+(?:una|un)|"
    r"cita|llamada|llamar|junta|meeting|bloquear|bloquea|bloqueame|bloque)\b"
)
TASK_RE = re.compile(r"\b(tareas?|pendientes?|recordar|recuerdame|recordarme|recordatorio)\b")
AGENDA_QUERY_RE = re.compile(
    r"\b(que\s+tengo|mi\s+agenda|mis\s+eventos|agenda\s+(?:de|para)\s+(?:hoy|manana)|resumen)\b"
)
GREETING_RE = re.compile(
    r"^[\s!?.,¡¿]*(?:hola|holi|hey|buenas(?:\s+(?:tardes|noches))?|buenos\s+dias)[\s!?.,]*$"
)


@dataclass(frozen=True)
class ClassificationContext:
    text: str
    normalized: str
    resolution: DateResolution
    pending: Optional[PendingMeeting] = None


Predicate = Callable[[ClassificationContext], bool]


@dataclass(frozen=True)
class IntentRule:
    intent: Intent
    predicate: Predicate


@dataclass(frozen=True)
class Classification:
    intent: Intent
    resolution: DateResolution


def is_agenda_query(context: ClassificationContext) -> bool:
    return bool(AGENDA_QUERY_RE.search(context.normalized)) and context.resolution.has_date


def continues_pending(context: ClassificationContext) -> bool:
    pending = context.pending
    if pending is None:
        return False
    if pending.awaiting is Awaiting.DATE:
        return context.resolution.has_date
    return context.resolution.has_time


def is_meeting(context: ClassificationContext) -> bool:
    return bool(MEETING_RE.search(context.normalized))


def is_explicit_task(context: ClassificationContext) -> bool:
    return bool(TASK_RE.search(context.normalized))


def is_greeting(context: ClassificationContext) -> bool:
    return bool(GREETING_RE.match(context.normalized))


DEFAULT_RULES: tuple[IntentRule, ...] = (
    IntentRule(Intent.AGENDA_QUERY, is_agenda_query),
    IntentRule(Intent.PENDING_CONTINUATION, continues_pending),
    IntentRule(Intent.MEETING, is_meeting),
    IntentRule(Intent.EXPLICIT_TASK, is_explicit_task),
    IntentRule(Intent.GREETING, is_greeting),
)


class IntentClassifier:
    """Keyword classifier evaluating ``rules`` in order; the first match wins."""

    def __init__(
        self,
        resolver: Optional[DateTimeResolver] = None,
        rules: Sequence[IntentRule] = DEFAULT_RULES,
        fallback: Intent = Intent.DEFAULT_TASK,
    ) -> None:
        self.resolver = resolver or DateTimeResolver()
        self.rules = tuple(rules)
        self.fallback = fallback

    def classify(self, text: str, now: datetime, pending: Optional[PendingMeeting] = None) -> Classification:
        resolution = self.resolver.resolve(text, now)
        context = ClassificationContext(
            text=text,
            normalized=normalize_text(text),
            resolution=resolution,
            pending=pending,
        )
        for rule in self.rules:
            if rule.predicate(context):
                return Classification(intent=rule.intent, resolution=resolution)
        return Classification(intent=self.fallback, resolution=resolution)


__all__ = [
    "Classification",
    "ClassificationContext",
    "DEFAULT_RULES",
    "IntentClassifier",
    "IntentRule",
]
