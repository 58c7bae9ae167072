"""
scheduling.py
-------------
Pure scheduling rules. Every function works on caller-supplied snapshots
(weekly windows, existing appointments) and performs no database access.

Times of day are wall-clock values in the business timezone; pass `tz`
to override Django's current timezone.

Conflict models:
- Exclusive services: the candidate [start, start + duration) must sit inside
  the day's window, miss every break, and miss every non-cancelled appointment.
  Touching boundaries are allowed (back-to-back bookings).
- Capacity services: count non-cancelled same-service appointments starting in
  the candidate's hour bucket; windows, breaks and exact minutes are ignored.
"""

from datetime import datetime, timedelta
from typing import Iterable, Iterator, List, Optional

from django.core.exceptions import ValidationError
from django.utils import timezone

from .slot_utils import (
    _make_aware,
    at_time,
    day_of_week,
    format_hhmm,
    intervals_overlap,
    local_date,
)

CANCELLED = "CANCELLED"


def _check_duration(duration_minutes: int) -> timedelta:
    if duration_minutes is None or duration_minutes < 0:
        raise ValidationError(f"Invalid duration {duration_minutes!r}. Use a non-negative number of minutes.")
    return timedelta(minutes=duration_minutes)


def _is_cancelled(appointment) -> bool:
    return (getattr(appointment, "status", "") or "").upper() == CANCELLED


def _as_date(target_date, tz=None):
    # A datetime never equals a date, so callers passing one get its local day.
    if isinstance(target_date, datetime):
        return local_date(target_date, tz)
    return target_date


def resolve_window(target_date, windows: Iterable):
    """
    First window for the date's day of week, or None when the day has no
    window or the window is switched off.
    """
    dow = day_of_week(target_date)
    for window in windows:
        if window.day_of_week == dow:
            return window if window.is_available else None
    return None


def is_within_availability(target_date, time_str, duration_minutes: int, windows: Iterable, tz=None) -> bool:
    """
    True if the candidate fits the day's window (both edges inclusive)
    and overlaps none of its breaks.
    """
    target_date = _as_date(target_date, tz)
    window = resolve_window(target_date, windows)
    if window is None:
        return False

    start = at_time(target_date, time_str, tz)
    end = start + _check_duration(duration_minutes)

    window_start = at_time(target_date, window.start_time, tz)
    window_end = at_time(target_date, window.end_time, tz)
    if start < window_start or end > window_end:
        return False

    for brk in window.breaks or ():
        if intervals_overlap(start, end, at_time(target_date, brk.start_time, tz), at_time(target_date, brk.end_time, tz)):
            return False

    return True


def is_slot_available(
    target_date,
    time_str,
    duration_minutes: int,
    existing_appointments: Iterable,
    exclude_appointment_id: Optional[int] = None,
    tz=None,
) -> bool:
    """
    True if the candidate overlaps no non-cancelled appointment starting on
    the same calendar day. Callers pass one staff member's appointments.
    """
    tz = tz or timezone.get_current_timezone()
    target_date = _as_date(target_date, tz)
    start = at_time(target_date, time_str, tz)
    end = start + _check_duration(duration_minutes)

    for appt in existing_appointments:
        if _is_cancelled(appt):
            continue
        if exclude_appointment_id is not None and appt.id == exclude_appointment_id:
            continue
        if local_date(appt.start_time, tz) != target_date:
            continue
        appt_start = _make_aware(appt.start_time, tz)
        appt_end = appt_start + _check_duration(appt.duration_minutes)
        if intervals_overlap(start, end, appt_start, appt_end):
            return False

    return True


def iter_available_slots(
    target_date,
    windows: Iterable,
    existing_appointments: Iterable,
    duration_minutes: int,
    interval_minutes: int = 15,
    tz=None,
) -> Iterator[str]:
    """
    Yield bookable HH:MM start times in ascending order, stepping from the
    window start by `interval_minutes` while the service still fits.
    """
    if interval_minutes is None or interval_minutes <= 0:
        raise ValidationError(f"Invalid slot interval {interval_minutes!r}. Use a positive number of minutes.")

    target_date = _as_date(target_date, tz)
    windows = list(windows)
    window = resolve_window(target_date, windows)
    if window is None:
        return

    existing_appointments = list(existing_appointments)
    duration = _check_duration(duration_minutes)
    step = timedelta(minutes=interval_minutes)

    current = at_time(target_date, window.start_time, tz)
    window_end = at_time(target_date, window.end_time, tz)

    while current + duration <= window_end:
        time_str = format_hhmm(current)
        if is_within_availability(target_date, time_str, duration_minutes, [window], tz) and is_slot_available(
            target_date, time_str, duration_minutes, existing_appointments, tz=tz
        ):
            yield time_str
        current += step


def generate_available_slots(
    target_date,
    windows: Iterable,
    existing_appointments: Iterable,
    duration_minutes: int,
    interval_minutes: int = 15,
    tz=None,
) -> List[str]:
    return list(
        iter_available_slots(target_date, windows, existing_appointments, duration_minutes, interval_minutes, tz)
    )


def get_available_days(start_date, end_date, windows: Iterable) -> list:
    """
    Dates in [start_date, end_date] whose day of week has any window record.
    The is_available flag and breaks are not consulted here.
    """
    days_with_windows = {w.day_of_week for w in windows}
    result = []
    current = start_date
    while current <= end_date:
        if day_of_week(current) in days_with_windows:
            result.append(current)
        current += timedelta(days=1)
    return result


def hour_bucket(dt, tz=None):
    """(date, hour) of an instant in the business timezone."""
    local = timezone.localtime(_make_aware(dt, tz), tz or timezone.get_current_timezone())
    return local.date(), local.hour


def check_service_capacity(service, appointments: Iterable, start_time, exclude_appointment_id=None, tz=None) -> dict:
    """
    Headcount check for class services: how many non-cancelled bookings of
    this service start in the same hour as `start_time`.

    Returns:
        dict: {"available": bool, "capacity": int, "booked": int, "remaining": int}

    Raises:
        ValueError: for one-on-one services, which use the overlap rules.
    """
    if not service.is_capacity_based:
        raise ValueError(f"Service {service.pk} is one-on-one; capacity checks do not apply.")

    bucket = hour_bucket(start_time, tz)
    booked = sum(
        1
        for appt in appointments
        if appt.service_id == service.pk
        and not _is_cancelled(appt)
        and (exclude_appointment_id is None or appt.id != exclude_appointment_id)
        and hour_bucket(appt.start_time, tz) == bucket
    )
    remaining = service.capacity - booked
    return {
        "available": remaining > 0,
        "capacity": service.capacity,
        "booked": booked,
        "remaining": remaining,
    }
