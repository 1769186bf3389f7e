"""
Locale-aware date presentation for the booking and admin screens.

Kept apart from slot computation: nothing here affects which slots exist.
"""

from datetime import date
from typing import List

import pendulum

SUPPORTED_LOCALES = ("en", "da", "ar")
DEFAULT_LOCALE = "en"

# 0=Monday, 6=Sunday
_SHORT_WEEKDAYS = {
    "en": ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
    "da": ["man.", "tirs.", "ons.", "tors.", "fre.", "lør.", "søn."],
    "ar": ["الاثنين", "الثلاثاء", "الأربعاء", "الخميس", "الجمعة", "السبت", "الأحد"],
}

_SHORT_MONTHS = {
    "en": ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"],
    "da": ["jan.", "feb.", "mar.", "apr.", "maj", "jun.", "jul.", "aug.", "sep.", "okt.", "nov.", "dec."],
    "ar": ["يناير", "فبراير", "مارس", "أبريل", "مايو", "يونيو", "يوليو", "أغسطس", "سبتمبر", "أكتوبر", "نوفمبر", "ديسمبر"],
}


def resolve_locale(locale: str | None) -> str:
    """Map a locale tag such as ``da-DK`` to a supported one, defaulting to English."""
    if not locale:
        return DEFAULT_LOCALE
    tag = locale.replace("_", "-").split("-")[0].lower()
    return tag if tag in SUPPORTED_LOCALES else DEFAULT_LOCALE


def upcoming_booking_dates(today: date, days: int = 14) -> List[date]:
    """
    Dates offered by the booking flow: tomorrow through ``today + days``.

    Same-day bookings are never offered.
    """
    start = pendulum.date(today.year, today.month, today.day)
    return [start.add(days=offset) for offset in range(1, days + 1)]


def format_day_label(day: date, locale: str | None = DEFAULT_LOCALE) -> str:
    """Short weekday plus day of month, e.g. ``Mon 25``."""
    tag = resolve_locale(locale)
    return f"{_SHORT_WEEKDAYS[tag][day.weekday()]} {day.day}"


def format_long_date(day: date, locale: str | None = DEFAULT_LOCALE) -> str:
    """Admin table format, e.g. ``Nov 25, 2024``."""
    tag = resolve_locale(locale)
    month = _SHORT_MONTHS[tag][day.month - 1]
    if tag == "en":
        return f"{month} {day.day}, {day.year}"
    return f"{day.day}. {month} {day.year}" if tag == "da" else f"{day.day} {month} {day.year}"
