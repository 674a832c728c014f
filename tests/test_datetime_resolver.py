"""
Unit tests for the Spanish date/time resolver.

Reference "now" is Wednesday 2026-10-14 09:30 UTC.
"""

from datetime import date, time, timedelta

import pytest

from agenda_bot.domain import ParseFailure
from agenda_bot.nlp import DateResolution, DateTimeResolver, extract_date, extract_hour_minute, normalize_text

from conftest import NOW

TODAY = NOW.date()


@pytest.fixture
def resolver():
    return DateTimeResolver()


class TestRelativeDates:
    """hoy / mañana / pasado mañana."""

    @pytest.mark.parametrize(
        "text",
        ["mañana", "Reunión MAÑANA con Ana", "llamar al banco manana", "¿mañana?"],
    )
    def test_tomorrow_is_next_day_without_time(self, resolver, text):
        resolution = resolver.resolve(text, NOW)

        assert resolution.day == TODAY + timedelta(days=1)
        assert resolution.time is None

    def test_day_after_tomorrow_wins_over_tomorrow(self, resolver):
        assert resolver.resolve("pasado mañana", NOW).day == date(2026, 10, 16)

    def test_today(self, resolver):
        assert resolver.resolve("qué tengo hoy", NOW).day == TODAY

    def test_no_date(self, resolver):
        resolution = resolver.resolve("comprar pan", NOW)

        assert resolution == DateResolution()
        assert not resolution.has_date
        assert not resolution.has_time


class TestWeekdays:
    """Weekday names resolve to the next occurrence, never today."""

    @pytest.mark.parametrize(
        "name,weekday",
        [
            ("lunes", 0),
            ("martes", 1),
            ("miércoles", 2),
            ("miercoles", 2),
            ("jueves", 3),
            ("viernes", 4),
            ("sábado", 5),
            ("domingo", 6),
        ],
    )
    def test_next_occurrence(self, name, weekday):
        resolved = extract_date(f"reunión el {name}", TODAY)
        offset = (resolved - TODAY).days

        assert resolved.weekday() == weekday
        assert 1 <= offset <= 7

    def test_same_weekday_jumps_a_full_week(self):
        assert extract_date("el Miércoles", TODAY) == date(2026, 10, 21)


class TestExplicitDates:
    """Numeric and verbose calendar dates."""

    def test_numeric_without_year(self):
        assert extract_date("el 20/10", TODAY) == date(2026, 10, 20)

    def test_numeric_two_digit_year(self):
        assert extract_date("20/10/27", TODAY) == date(2027, 10, 20)

    def test_numeric_four_digit_year(self):
        assert extract_date("5-1-2027", TODAY) == date(2027, 1, 5)

    def test_past_date_without_year_rolls_over(self):
        assert extract_date("01/02", TODAY) == date(2027, 2, 1)

    def test_impossible_date_is_ignored(self):
        assert extract_date("31/02", TODAY) is None

    def test_verbose_date_accent_insensitive(self):
        assert extract_date("el 15 de Octubre", TODAY) == date(2026, 10, 15)

    def test_verbose_date_with_year(self):
        assert extract_date("3 de marzo de 2027", TODAY) == date(2027, 3, 3)

    def test_verbose_short_year_and_setiembre(self):
        assert extract_date("3 de setiembre del 27", TODAY) == date(2027, 9, 3)

    def test_explicit_date_beats_relative_term(self):
        assert extract_date("mañana no, el 24/12", TODAY) == date(2026, 12, 24)


class TestHourMinute:
    """Time-of-day extraction."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("14:30", time(14, 30)),
            ("2 pm", time(14, 0)),
            ("2pm", time(14, 0)),
            ("12 am", time(0, 0)),
            ("12 pm", time(12, 0)),
            ("9:15 a.m.", time(9, 15)),
            ("a las 5 de la tarde", time(17, 0)),
            ("a las 10", time(10, 0)),
            ("15 hrs", time(15, 0)),
            ("15", time(15, 0)),
        ],
    )
    def test_recognized_forms(self, text, expected):
        assert extract_hour_minute(text) == expected

    def test_resolver_method(self, resolver):
        assert resolver.extract_hour_minute("a las 8 de la noche") == time(20, 0)

    @pytest.mark.parametrize("text", ["25:00", "10:61", "a las 30"])
    def test_out_of_range_is_rejected(self, text):
        assert extract_hour_minute(text) is None

    @pytest.mark.parametrize("text", ["15/03", "15 de marzo", "reunión con 3 personas mañana", "sin hora"])
    def test_no_time_signal(self, text):
        assert extract_hour_minute(text) is None


class TestResolution:
    """Full resolution into an instant."""

    def test_date_and_time(self, resolver):
        resolution = resolver.resolve("Reunión con Ana el 15 de octubre a las 16:00", NOW)

        assert resolution.is_complete
        assert resolution.at(NOW.tzinfo) == NOW.replace(day=15, hour=16, minute=0)

    def test_at_requires_both_parts(self):
        with pytest.raises(ParseFailure):
            DateResolution(day=TODAY).at()

    def test_normalize_text(self):
        assert normalize_text("Miércoles MAÑANA") == "miercoles manana"


class TestPartsOfDay:
    """Parts of the day such as "por la mañana" never mean tomorrow."""

    @pytest.mark.parametrize(
        "text",
        ["el viernes por la mañana", "viernes en la mañana", "reunión el viernes a las 10 de la mañana"],
    )
    def test_weekday_with_morning(self, resolver, text):
        assert resolver.resolve(text, NOW).day == date(2026, 10, 16)

    def test_tomorrow_morning(self, resolver):
        resolution = resolver.resolve("mañana por la mañana a las 9", NOW)

        assert resolution.day == date(2026, 10, 15)
        assert resolution.time == time(9, 0)

    def test_morning_only_has_no_date(self, resolver):
        assert resolver.resolve("por la mañana", NOW).day is None

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("10 de la mañana", time(10, 0)),
            ("el lunes 8 de la noche", time(20, 0)),
            ("5 por la tarde", time(17, 0)),
        ],
    )
    def test_hour_with_part_of_day(self, text, expected):
        assert extract_hour_minute(text) == expected


class TestBareHour:
    """A lone number is an hour unless it reads as a quantity or a day of the month."""

    def test_trailing_hour_after_weekday(self, resolver):
        resolution = resolver.resolve("reunión con Ana el lunes 10", NOW)

        assert resolution.day == date(2026, 10, 19)
        assert resolution.time == time(10, 0)

    def test_hour_before_punctuation(self):
        assert extract_hour_minute("mañana 16, en la oficina") == time(16, 0)

    @pytest.mark.parametrize("text", ["llevar 3 sillas", "el día 10", "pagar 2.500", "comprar 12 huevos"])
    def test_not_an_hour(self, text):
        assert extract_hour_minute(text) is None
