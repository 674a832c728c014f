from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional

from ..domain import EventSummary, TaskSummary

WEEKDAY_NAMES = ("lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo")

START = (
    "👋 Hola, soy tu asistente de agenda.\n\n"
    "Escríbeme cosas como:\n"
    "• «Reunión con el equipo mañana a las 10»\n"
    "• «Tarea: enviar el informe el viernes»\n"
    "• «¿Qué tengo hoy?»\n\n"
    "Usa /login para conectar tu cuenta de Google y /ayuda para ver los comandos."
)

HELP = (
    "Comandos:\n"
    "/login - conectar Google Calendar y Google Tasks\n"
    "/logout - desconectar tu cuenta\n"
    "/cancelar - descartar la reunión que estoy agendando\n"
    "/ayuda - mostrar esta ayuda\n\n"
    "Si falta el día o la hora de una reunión te lo voy a preguntar."
)

ASK_DATE = "📅 ¿Qué día es «{title}»? Por ejemplo: mañana, el viernes o 24/10."
ASK_TIME = "🕒 ¿A qué hora es «{title}» el {day}? Por ejemplo: 15:30 o 4 pm."
EVENT_CREATED = "✅ Agendé «{title}» para el {when}."
TASK_CREATED = "📝 Tarea creada: «{title}»."
TASK_CREATED_DUE = "📝 Tarea creada: «{title}» para el {day}."
LOGIN_PROMPT = "🔐 Primero conecta tu cuenta de Google: {url}"
LOGIN_UNAVAILABLE = "🔐 Primero conecta tu cuenta de Google con /login."
LOGIN_NOT_CONFIGURED = "⚠️ El inicio de sesión con Google no está configurado en este servidor."
LOGGED_OUT = "👋 Desconecté tu cuenta de Google."
NOT_LOGGED_IN = "No hay ninguna cuenta de Google conectada."
CANCELLED = "🗑️ Descarté la reunión «{title}»."
NOTHING_TO_CANCEL = "No estoy agendando ninguna reunión."
GENERIC_FAILURE = "⚠️ No pude completar la acción con Google. Intenta de nuevo en un momento."
LOGIN_COMPLETED = "✅ Cuenta de Google conectada. Ya puedes pedirme reuniones y tareas."
GREETING = "👋 Hola, aquí estoy. Dime qué quieres agendar o escribe /ayuda."


def day_label(day: date, today: Optional[date] = None) -> str:
    if today is not None:
        delta = (day - today).days
        if delta == 0:
            return "hoy"
        if delta == 1:
            return "mañana"
    return f"{WEEKDAY_NAMES[day.weekday()]} {day.strftime('%d/%m')}"


def when_label(start: datetime, today: Optional[date] = None) -> str:
    return f"{day_label(start.date(), today)} a las {start.strftime('%H:%M')}"


def event_created(title: str, start: datetime, link: str, today: Optional[date] = None) -> str:
    text = EVENT_CREATED.format(title=title, when=when_label(start, today))
    return f"{text}\n{link}" if link else text


def task_created(task: TaskSummary, today: Optional[date] = None) -> str:
    if task.due:
        return TASK_CREATED_DUE.format(title=task.title, day=day_label(task.due, today))
    return TASK_CREATED.format(title=task.title)


def _event_line(event: EventSummary) -> str:
    if event.all_day:
        return f"• Todo el día: {event.title}"
    return f"• {event.start.strftime('%H:%M')} {event.title}"


def _task_lines(tasks: Iterable[TaskSummary]) -> list[str]:
    return [f"• {task.title}" for task in tasks]


def agenda_summary(
    day: date,
    events: list[EventSummary],
    due_tasks: list[TaskSummary],
    undated_tasks: list[TaskSummary],
    today: Optional[date] = None,
) -> str:
    label = day_label(day, today)
    if label in ("hoy", "mañana"):
        label = f"{label} ({WEEKDAY_NAMES[day.weekday()]} {day.strftime('%d/%m')})"
    lines = [f"📋 Agenda de {label}", "", "Eventos:"]
    lines.extend([_event_line(event) for event in events] or ["• Sin eventos."])
    lines.extend(["", "Tareas del día:"])
    lines.extend(_task_lines(due_tasks) or ["• Sin tareas con fecha."])
    if undated_tasks:
        lines.extend(["", "Pendientes sin fecha:"])
        lines.extend(_task_lines(undated_tasks))
    return "\n".join(lines)
