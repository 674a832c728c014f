"""Spanish text understanding: date/time resolution and intent classification."""

from __future__ import annotations

from .datetime_resolver import DateResolution, DateTimeResolver, extract_date, extract_hour_minute, normalize_text
from .intents import DEFAULT_RULES, Classification, IntentClassifier, IntentRule

__all__ = [
    "Classification",
    "DEFAULT_RULES",
    "DateResolution",
    "DateTimeResolver",
    "IntentClassifier",
    "IntentRule",
    "extract_date",
    "extract_hour_minute",
    "normalize_text",
]
