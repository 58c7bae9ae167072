"""
slot_utils.py
-------------
Time helpers shared by the scheduling code:
- HH:MM parsing/formatting and day-of-week conversion (0 = Sunday)
- timezone-aware day windows and wall-clock -> aware datetime conversion
- the half-open interval overlap test
"""

import re
from datetime import date, datetime, time, timedelta

from django.core.exceptions import ValidationError
from django.utils import timezone

HHMM_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(:[0-5]\d)?$")

DAY_NAMES = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]


def _parse_hhmm(value) -> time:
    """
    Accept 'HH:MM' (or 'HH:MM:SS' as stored by TimeField serializers) or a
    datetime.time. Anything else is a ValidationError.
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    match = HHMM_RE.match((value or "").strip()) if isinstance(value, str) else None
    if match is None:
        raise ValidationError(f"Invalid time {value!r}. Use HH:MM (24-hour).")
    return time(int(match.group(1)), int(match.group(2)))


def format_hhmm(value) -> str:
    return value.strftime("%H:%M")


def day_of_week(value: date) -> int:
    """0 = Sunday .. 6 = Saturday."""
    return value.isoweekday() % 7


def day_name_from_day_of_week(dow: int) -> str:
    return DAY_NAMES[dow]


def day_of_week_from_day_name(name: str) -> int:
    try:
        return DAY_NAMES.index((name or "").strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown day name {name!r}.")


def _make_aware(dt_naive: datetime, tz=None):
    """
    Convert a naive datetime to an aware one using the given timezone,
    or Django's current timezone.
    """
    if timezone.is_aware(dt_naive):
        return dt_naive
    return timezone.make_aware(dt_naive, tz or timezone.get_current_timezone())


def at_time(day: date, value, tz=None) -> datetime:
    """Aware datetime for a wall-clock time on the given day."""
    return _make_aware(datetime.combine(day, _parse_hhmm(value)), tz)


def local_date(dt: datetime, tz=None) -> date:
    """Calendar date of an instant in the business timezone."""
    return timezone.localtime(_make_aware(dt, tz), tz or timezone.get_current_timezone()).date()


def date_to_range(date_str: str, tz=None):
    """
    Convert 'YYYY-MM-DD' into a timezone-aware day window [start, end).
    """
    date_str = (date_str or "").strip()
    y, m, d = map(int, date_str.split("-"))

    day_start = _make_aware(datetime(y, m, d, 0, 0, 0), tz)
    day_end = day_start + timedelta(days=1)
    return day_start, day_end


def intervals_overlap(a_start, a_end, b_start, b_end) -> bool:
    """
    Half-open overlap: [a_start, a_end) and [b_start, b_end) share time.
    Back-to-back intervals (a_end == b_start) do not overlap.
    """
    return a_start < b_end and b_start < a_end
