"""Conversation state machine turning chat messages into calendar actions.

A conversation is ``IDLE`` unless a meeting request is missing its day
(``AWAITING_DATE``) or its time (``AWAITING_TIME``). Each message produces
at most one outward action: a follow-up question, a calendar event, a task,
or an agenda summary.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from ..config import AssistantSettings
from ..data import ConversationState, CredentialStore
from ..domain import (
    AuthMissing,
    Awaiting,
    ConfigurationError,
    DownstreamFailure,
    Intent,
    MeetingRequest,
    OAuthCredentials,
    ParseFailure,
    PendingMeeting,
)
from ..nlp import DateResolution, IntentClassifier
from ..services.google import CalendarGateway, TaskGateway
from . import replies

logger = logging.getLogger(__name__)

LoginLinkFactory = Callable[[str, str], str]

TITLE_PREFIX_RE = re.compile(
    r"^\s*(?:tarea|pendiente|recordatorio|recu[eé]rdame(?:\s+que)?|recordar|ag[eé]nd(?:a|ar|ame)(?:me)?)\s*[:\-]?\s*",
    re.IGNORECASE,
)
MAX_TITLE_LENGTH = 120


def derive_title(text: str) -> str:
    cleaned = " ".join(text.split())
    stripped = TITLE_PREFIX_RE.sub("", cleaned, count=1) or cleaned
    stripped = stripped[:MAX_TITLE_LENGTH].rstrip(" .,;:")
    return stripped[:1].upper() + stripped[1:] if stripped else cleaned


class DialogueOrchestrator:
    def __init__(
        self,
        *,
        calendar: CalendarGateway,
        tasks: TaskGateway,
        credentials: CredentialStore,
        conversations: ConversationState,
        settings: AssistantSettings,
        classifier: Optional[IntentClassifier] = None,
        login_link: Optional[LoginLinkFactory] = None,
    ) -> None:
        self.calendar = calendar
        self.tasks = tasks
        self.credentials = credentials
        self.conversations = conversations
        self.settings = settings
        self.classifier = classifier or IntentClassifier()
        self.login_link = login_link
        self.tz = settings.tzinfo

    # ------------------------------------------------------------------ entry

    def handle(
        self,
        conversation_id: str,
        user_id: str,
        text: Optional[str],
        now: Optional[datetime] = None,
    ) -> Optional[str]:
        """Process one message and return the reply text, or ``None`` to stay silent."""

        text = (text or "").strip()
        if not text:
            return None
        now = now or datetime.now(self.tz)
        if text.startswith("/"):
            return self._command(conversation_id, user_id, text, now)

        try:
            auth = self._require_credentials(user_id)
        except AuthMissing as exc:
            logger.info("%s Sending login prompt.", exc)
            return self._login_prompt(user_id, conversation_id)

        with self.conversations.lock(conversation_id):
            token_before = auth.access_token
            reply = self._dispatch(conversation_id, text, now, auth)
            if auth.access_token != token_before:
                self.credentials.set(user_id, auth)
        return reply

    def _require_credentials(self, user_id: str) -> OAuthCredentials:
        auth = self.credentials.get(user_id)
        if auth is None:
            raise AuthMissing(user_id)
        return auth

    def _dispatch(self, conversation_id: str, text: str, now: datetime, auth: OAuthCredentials) -> str:
        pending = self.conversations.get(conversation_id, now)
        classification = self.classifier.classify(text, now, pending=pending)
        intent = classification.intent
        resolution = classification.resolution
        logger.debug("Conversation %s classified as %s", conversation_id, intent.value)

        if intent is Intent.AGENDA_QUERY:
            return self._agenda(auth, resolution.day or now.date(), now)
        if intent is Intent.PENDING_CONTINUATION and pending is not None:
            return self._continue_meeting(conversation_id, pending, resolution, auth, now)
        if intent is Intent.MEETING:
            return self._start_meeting(conversation_id, text, resolution, auth, now, superseding=pending)
        if intent is Intent.EXPLICIT_TASK:
            return self._create_task(auth, text, resolution.day, now)
        if intent is Intent.GREETING:
            return replies.GREETING
        if pending is not None:
            return self._ask_again(pending, now)
        return self._create_task(auth, text, resolution.day, now)

    # --------------------------------------------------------------- meetings

    def _start_meeting(
        self,
        conversation_id: str,
        text: str,
        resolution: DateResolution,
        auth: OAuthCredentials,
        now: datetime,
        *,
        superseding: Optional[PendingMeeting],
    ) -> str:
        title = derive_title(text)
        if superseding is not None:
            logger.info("New meeting request replaces pending «%s» in %s", superseding.title, conversation_id)

        if resolution.is_complete:
            ok, reply = self._create_event(auth, title, resolution.at(self.tz), now)
            if ok and superseding is not None:
                self.conversations.clear(conversation_id)
            return reply

        pending = self.conversations.start(conversation_id, title=title, now=now, resolved_date=resolution.day)
        return self._question(pending, now)

    def _continue_meeting(
        self,
        conversation_id: str,
        pending: PendingMeeting,
        resolution: DateResolution,
        auth: OAuthCredentials,
        now: datetime,
    ) -> str:
        if pending.awaiting is Awaiting.DATE:
            if resolution.is_complete:
                ok, reply = self._create_event(auth, pending.title, resolution.at(self.tz), now)
                if ok:
                    self.conversations.clear(conversation_id)
                return reply
            pending.resolved_date = resolution.day
            pending.awaiting = Awaiting.TIME
            self.conversations.update(conversation_id, pending)
            return self._question(pending, now)

        try:
            start = DateResolution(day=pending.resolved_date, time=resolution.time).at(self.tz)
        except ParseFailure:
            return self._ask_again(pending, now)
        ok, reply = self._create_event(auth, pending.title, start, now)
        if ok:
            self.conversations.clear(conversation_id)
        return reply

    def _question(self, pending: PendingMeeting, now: datetime) -> str:
        if pending.awaiting is Awaiting.DATE:
            return replies.ASK_DATE.format(title=pending.title)
        return replies.ASK_TIME.format(title=pending.title, day=replies.day_label(pending.resolved_date, now.date()))

    def _ask_again(self, pending: PendingMeeting, now: datetime) -> str:
        logger.debug("Re-asking for %s of «%s»", pending.awaiting.value, pending.title)
        return self._question(pending, now)

    def _create_event(self, auth: OAuthCredentials, title: str, start: datetime, now: datetime) -> tuple[bool, str]:
        request = MeetingRequest(
            title=title,
            start=start,
            duration_minutes=self.settings.meeting_minutes,
            reminder_offsets_minutes=self.settings.reminder_minutes,
        )
        try:
            link = self.calendar.create_event(
                auth,
                request.title,
                request.start,
                duration_minutes=request.duration_minutes,
                reminder_offsets_minutes=request.reminder_offsets_minutes,
            )
        except DownstreamFailure:
            logger.exception("Calendar event creation failed for «%s»", title)
            return False, replies.GENERIC_FAILURE
        logger.info("Meeting «%s» booked from %s to %s", title, request.start.isoformat(), request.end.isoformat())
        return True, replies.event_created(title, start, link, now.date())

    # ------------------------------------------------------------------ tasks

    def _create_task(self, auth: OAuthCredentials, text: str, due: Optional[date], now: datetime) -> str:
        title = derive_title(text)
        try:
            task = self.tasks.create_task(auth, title, due)
        except DownstreamFailure:
            logger.exception("Task creation failed for «%s»", title)
            return replies.GENERIC_FAILURE
        return replies.task_created(task, now.date())

    # ----------------------------------------------------------------- agenda

    def _agenda(self, auth: OAuthCredentials, day: date, now: datetime) -> str:
        day_start = datetime.combine(day, time.min, tzinfo=self.tz)
        day_end = day_start + timedelta(days=1)
        try:
            events = self.calendar.list_events(auth, day_start, day_end)
            pending_tasks = self.tasks.list_pending(auth)
        except DownstreamFailure:
            logger.exception("Agenda lookup failed for %s", day.isoformat())
            return replies.GENERIC_FAILURE
        return replies.agenda_summary(
            day,
            events,
            pending_tasks.due_on(day),
            pending_tasks.undated[: self.settings.undated_task_limit],
            now.date(),
        )

    # --------------------------------------------------------------- commands

    def _command(self, conversation_id: str, user_id: str, text: str, now: datetime) -> Optional[str]:
        command = text.split()[0][1:].split("@", 1)[0].lower()
        if command == "start":
            return replies.START
        if command in ("ayuda", "help"):
            return replies.HELP
        if command == "login":
            return self._login_prompt(user_id, conversation_id)
        if command == "logout":
            return replies.LOGGED_OUT if self.credentials.delete(user_id) else replies.NOT_LOGGED_IN
        if command in ("cancelar", "cancel"):
            with self.conversations.lock(conversation_id):
                pending = self.conversations.get(conversation_id, now)
                if pending is None:
                    return replies.NOTHING_TO_CANCEL
                self.conversations.clear(conversation_id)
            return replies.CANCELLED.format(title=pending.title)
        logger.debug("Ignoring unknown command %s", command)
        return None

    def _login_prompt(self, user_id: str, conversation_id: str) -> str:
        if self.login_link is None:
            return replies.LOGIN_UNAVAILABLE
        try:
            url = self.login_link(user_id, conversation_id)
        except ConfigurationError:
            logger.warning("Login requested but Google OAuth is not configured")
            return replies.LOGIN_NOT_CONFIGURED
        return replies.LOGIN_PROMPT.format(url=url)
