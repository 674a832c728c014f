"""
Unit tests for the rule-based intent classifier.
"""

from datetime import date

import pytest

from agenda_bot.domain import Awaiting, Intent, PendingMeeting
from agenda_bot.nlp import IntentClassifier, IntentRule
from agenda_bot.nlp.intents import is_explicit_task, is_meeting

from conftest import NOW


@pytest.fixture
def classifier():
    return IntentClassifier()


def _pending(awaiting: Awaiting) -> PendingMeeting:
    resolved = date(2026, 10, 16) if awaiting is Awaiting.TIME else None
    return PendingMeeting(title="Reunión con Ana", awaiting=awaiting, created_at=NOW, resolved_date=resolved)


class TestKeywordFamilies:
    """Classification without a pending meeting."""

    @pytest.mark.parametrize(
        "text",
        ["¿Qué tengo hoy?", "que tengo mañana", "Mi agenda de hoy", "resumen del viernes"],
    )
    def test_agenda_query(self, classifier, text):
        assert classifier.classify(text, NOW).intent is Intent.AGENDA_QUERY

    @pytest.mark.parametrize(
        "text",
        [
            "Reunión con Pedro mañana",
            "agendar llamada con el banco",
            "Cita con el dentista el 20/10",
            "bloquear la tarde del viernes",
            "JUNTA de vecinos",
        ],
    )
    def test_meeting(self, classifier, text):
        assert classifier.classify(text, NOW).intent is Intent.MEETING

    @pytest.mark.parametrize("text", ["Tarea: pagar la luz", "recuérdame pagar el arriendo", "pendiente revisar correo"])
    def test_explicit_task(self, classifier, text):
        assert classifier.classify(text, NOW).intent is Intent.EXPLICIT_TASK

    @pytest.mark.parametrize("text", ["comprar pan", "que tengo que comprar", "hola, compra pan"])
    def test_default(self, classifier, text):
        assert classifier.classify(text, NOW).intent is Intent.DEFAULT_TASK

    @pytest.mark.parametrize("text", ["hola", "¡Hola!", "Buenos días", "buenas tardes", "hey"])
    def test_greeting(self, classifier, text):
        assert classifier.classify(text, NOW).intent is Intent.GREETING

    def test_greeting_with_request_is_not_a_greeting(self, classifier):
        assert classifier.classify("hola, reunión mañana a las 10", NOW).intent is Intent.MEETING

    def test_meeting_beats_task(self, classifier):
        assert classifier.classify("reunión para revisar la tarea", NOW).intent is Intent.MEETING

    def test_resolution_is_returned(self, classifier):
        classification = classifier.classify("Reunión mañana a las 10", NOW)

        assert classification.resolution.day == date(2026, 10, 15)
        assert classification.resolution.time.hour == 10


class TestPendingContinuation:
    """Precedence when a meeting is waiting for its date or time."""

    def test_time_reply_continues(self, classifier):
        result = classifier.classify("a las 4 pm", NOW, pending=_pending(Awaiting.TIME))

        assert result.intent is Intent.PENDING_CONTINUATION

    def test_continuation_beats_meeting_keywords(self, classifier):
        result = classifier.classify("la reunión es a las 5", NOW, pending=_pending(Awaiting.TIME))

        assert result.intent is Intent.PENDING_CONTINUATION

    def test_date_reply_continues(self, classifier):
        result = classifier.classify("el viernes", NOW, pending=_pending(Awaiting.DATE))

        assert result.intent is Intent.PENDING_CONTINUATION

    def test_time_does_not_answer_a_date_question(self, classifier):
        result = classifier.classify("a las 5", NOW, pending=_pending(Awaiting.DATE))

        assert result.intent is Intent.DEFAULT_TASK

    def test_agenda_query_beats_continuation(self, classifier):
        result = classifier.classify("qué tengo mañana", NOW, pending=_pending(Awaiting.DATE))

        assert result.intent is Intent.AGENDA_QUERY


class TestCustomRules:
    """Rules are data and can be reordered."""

    def test_task_first_policy(self):
        classifier = IntentClassifier(
            rules=(
                IntentRule(Intent.EXPLICIT_TASK, is_explicit_task),
                IntentRule(Intent.MEETING, is_meeting),
            )
        )

        assert classifier.classify("reunión para revisar la tarea", NOW).intent is Intent.EXPLICIT_TASK

    def test_custom_fallback(self):
        classifier = IntentClassifier(rules=(), fallback=Intent.MEETING)

        assert classifier.classify("lo que sea", NOW).intent is Intent.MEETING
