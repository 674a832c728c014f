"""Spanish free-text date and time resolution.

Every lookup runs on text normalized by :func:`normalize_text`, so
"Miércoles", "miercoles" and "MIÉRCOLES" are the same token and "mañana"
is matched as "manana".
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from ..domain import ParseFailure

MONTHS = {
    "enero": 1,
    "febrero": 2,
    "marzo": 3,
    "abril": 4,
    "mayo": 5,
    "junio": 6,
    "julio": 7,
    "agosto": 8,
    "septiembre": 9,
    "setiembre": 9,
    "octubre": 10,
    "noviembre": 11,
    "diciembre": 12,
}

WEEKDAYS = {
    "lunes": 0,
    "martes": 1,
    "miercoles": 2,
    "jueves": 3,
    "viernes": 4,
    "sabado": 5,
    "domingo": 6,
}

_MONTH_ALTERNATION = "|".join(sorted(MONTHS, key=len, reverse=True))

ISO_DATE_RE = re.compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b")
NUMERIC_DATE_RE = re.compile(r"\b(\d{1,2})[/-](\d{1,2})(?:[/-](\d{4}|\d{2}))?\b")
VERBOSE_DATE_RE = re.compile(
    rf"\b(\d{{1,2}})\s+de\s+({_MONTH_ALTERNATION})\b(?:\s+(?:de|del)\s+(\d{{4}}|\d{{2}})\b|\s+(\d{{4}})\b)?"
)
DAY_AFTER_TOMORROW_RE = re.compile(r"\bpasado\s+manana\b")
TOMORROW_RE = re.compile(r"\bmanana\b")
TODAY_RE = re.compile(r"\bhoy\b")
WEEKDAY_RE = re.compile(rf"\b({'|'.join(WEEKDAYS)})\b")

_MERIDIEM = r"(am|pm|a\.\s?m\.?|p\.\s?m\.?)"
CLOCK_TIME_RE = re.compile(rf"\b(\d{{1,2}}):(\d{{2}})(?:\s*{_MERIDIEM}(?!\w))?")
MERIDIEM_TIME_RE = re.compile(rf"\b(\d{{1,2}})\s*{_MERIDIEM}(?!\w)")
SPOKEN_TIME_RE = re.compile(r"\ba\s+las?\s+(\d{1,2})\b")
HOURS_SUFFIX_RE = re.compile(r"\b(\d{1,2})\s*(?:hrs|hs|h)\b")
DAYPART_TIME_RE = re.compile(r"\b(\d{1,2})\s+(?:de|por|en)\s+la\s+(?:manana|tarde|noche)\b")
# "el dia 10" is a day of the month; "3 personas" is a quantity
BARE_HOUR_RE = re.compile(r"(?<![\d:/.,-])(?<!dia )\b(\d{1,2})\b(?![.,:/-]?\d)(?!\s*[a-z])")
AFTERNOON_RE = re.compile(r"\b(?:de|por|en)\s+la\s+(?:tarde|noche)\b")
MORNING_RE = re.compile(r"\b(?:de|por|en)\s+la\s+manana\b")


def normalize_text(text: str) -> str:
    """Lowercase ``text`` and strip accents (``ñ`` becomes ``n``)."""

    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def _normalize_year(raw: Optional[str], fallback: int) -> int:
    if not raw:
        return fallback
    year = int(raw)
    return 2000 + year if year < 100 else year


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _date_with_rollover(today: date, month: int, day: int, raw_year: Optional[str]) -> Optional[date]:
    if raw_year:
        return _safe_date(_normalize_year(raw_year, today.year), month, day)
    candidate = _safe_date(today.year, month, day)
    if candidate is not None and candidate < today:
        candidate = _safe_date(today.year + 1, month, day)
    return candidate


def _to_24h(hour: int, meridiem: Optional[str]) -> int:
    if not meridiem:
        return hour
    if meridiem.startswith("a"):
        return 0 if hour == 12 else hour
    return hour if hour >= 12 else hour + 12


def _build_time(hour: int, minute: int) -> Optional[time]:
    if not 0 <= hour <= 23 or not 0 <= minute <= 59:
        return None
    return time(hour, minute)


def _strip_dates(normalized: str) -> str:
    for pattern in (ISO_DATE_RE, NUMERIC_DATE_RE, VERBOSE_DATE_RE):
        normalized = pattern.sub(" ", normalized)
    return normalized


def _search_time(normalized: str) -> Optional[time]:
    evening = AFTERNOON_RE.search(normalized) is not None

    match = CLOCK_TIME_RE.search(normalized)
    if match:
        meridiem = match.group(3) or ("pm" if evening else None)
        return _build_time(_to_24h(int(match.group(1)), meridiem), int(match.group(2)))

    match = MERIDIEM_TIME_RE.search(normalized)
    if match:
        return _build_time(_to_24h(int(match.group(1)), match.group(2)), 0)

    match = (
        SPOKEN_TIME_RE.search(normalized)
        or HOURS_SUFFIX_RE.search(normalized)
        or DAYPART_TIME_RE.search(normalized)
        or BARE_HOUR_RE.search(normalized)
    )
    if match:
        return _build_time(_to_24h(int(match.group(1)), "pm" if evening else None), 0)
    return None


def extract_hour_minute(text: str) -> Optional[time]:
    """Return the time of day written in ``text``, or ``None``.

    ``"14:30"`` gives 14:30, ``"2 pm"`` gives 14:00 and ``"25:00"`` gives
    ``None``. Dates are removed first so ``"15/03"`` never reads as 15:00.
    """

    return _search_time(_strip_dates(normalize_text(text)))


def _explicit_date(normalized: str, today: date) -> Optional[date]:
    match = ISO_DATE_RE.search(normalized)
    if match:
        found = _safe_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
        if found:
            return found

    for match in NUMERIC_DATE_RE.finditer(normalized):
        found = _date_with_rollover(today, int(match.group(2)), int(match.group(1)), match.group(3))
        if found:
            return found

    for match in VERBOSE_DATE_RE.finditer(normalized):
        raw_year = match.group(3) or match.group(4)
        found = _date_with_rollover(today, MONTHS[match.group(2)], int(match.group(1)), raw_year)
        if found:
            return found
    return None


def _relative_date(normalized: str, today: date) -> Optional[date]:
    # "por la manana" is a part of the day, not tomorrow
    normalized = MORNING_RE.sub(" ", normalized)
    if DAY_AFTER_TOMORROW_RE.search(normalized):
        return today + timedelta(days=2)
    if TOMORROW_RE.search(normalized):
        return today + timedelta(days=1)
    if TODAY_RE.search(normalized):
        return today
    match = WEEKDAY_RE.search(normalized)
    if match:
        offset = (WEEKDAYS[match.group(1)] - today.weekday()) % 7 or 7
        return today + timedelta(days=offset)
    return None


def extract_date(text: str, today: date) -> Optional[date]:
    normalized = normalize_text(text)
    return _explicit_date(normalized, today) or _relative_date(normalized, today)


@dataclass(frozen=True)
class DateResolution:
    """What could be read from a message: a day, a time of day, both or neither."""

    day: Optional[date] = None
    time: Optional[time] = None

    @property
    def has_date(self) -> bool:
        return self.day is not None

    @property
    def has_time(self) -> bool:
        return self.time is not None

    @property
    def is_complete(self) -> bool:
        return self.has_date and self.has_time

    def at(self, tz: Optional[tzinfo] = None) -> datetime:
        if self.day is None or self.time is None:
            raise ParseFailure("Both a day and a time are needed to build an instant.")
        return datetime.combine(self.day, self.time, tzinfo=tz)


class DateTimeResolver:
    """Turns message text into a :class:`DateResolution` relative to ``now``."""

    def resolve(self, text: str, now: datetime) -> DateResolution:
        today = now.date()
        return DateResolution(day=extract_date(text, today), time=extract_hour_minute(text))

    def extract_hour_minute(self, text: str) -> Optional[time]:
        return extract_hour_minute(text)


__all__ = [
    "DateResolution",
    "DateTimeResolver",
    "extract_date",
    "extract_hour_minute",
    "normalize_text",
]
