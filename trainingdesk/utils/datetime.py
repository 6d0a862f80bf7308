# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for TrainingDesk.

Reports are issued for a Spanish audience, so printable dates follow the
es-ES conventions ("18/10/2026", "18 de octubre de 2026") independently of
the process locale.

Usage:
------
    from trainingdesk.utils.datetime import utc_now, format_short_date

    issued = format_short_date(utc_now())
"""

from datetime import date, datetime, timezone

SPANISH_MONTHS = (
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
)


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def to_date(value: date | datetime | str | None) -> date | None:
    """Coerce a database or wire value into a date.

    Args:
        value: A date, datetime, ISO-8601 string or None.

    Returns:
        The calendar date, or None if the value is empty or unparseable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except ValueError:
        return None


def format_short_date(value: date | datetime | str | None) -> str:
    """Format a date as dd/mm/yyyy.

    Args:
        value: Value accepted by to_date().

    Returns:
        Formatted date, or empty string when no date is available.
    """
    day = to_date(value)
    if day is None:
        return ""
    return f"{day.day:02d}/{day.month:02d}/{day.year}"


def format_long_date(value: date | datetime | str | None) -> str:
    """Format a date in long Spanish form, e.g. "8 de marzo de 2026".

    Args:
        value: Value accepted by to_date().

    Returns:
        Formatted date, or empty string when no date is available.
    """
    day = to_date(value)
    if day is None:
        return ""
    return f"{day.day} de {SPANISH_MONTHS[day.month - 1]} de {day.year}"


def format_time_spent(seconds: float | int | str | None) -> str:
    """Convert a dedication time in seconds to a compact label.

    Hours are shown with minutes, minutes alone, and only sub-minute
    values show seconds.

    Args:
        seconds: Duration in seconds.

    Returns:
        Label like "2h 30m", "45m" or "12s"; "-" when unknown or negative.
    """
    if seconds is None:
        return "-"
    try:
        total = float(seconds)
    except (TypeError, ValueError):
        return "-"
    if total != total or total < 0 or total == float("inf"):
        return "-"

    hours = int(total // 3600)
    minutes = int((total % 3600) // 60)
    secs = int(total % 60)

    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m"
    return f"{secs}s"
