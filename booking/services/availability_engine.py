"""
availability_engine.py
----------------------
Computes availability by loading snapshots from the database and running the
scheduling rules in scheduling.py against them:
1) the staff member's weekly window for the day, including breaks,
2) existing non-cancelled bookings (double-booking prevention), or
3) for class services, the headcount in the candidate's hour bucket.

The engine only answers "is this free given what is stored right now".
BookingManager re-runs the check under a row lock before writing.
"""

import logging
from datetime import datetime, timedelta

from django.utils import timezone

from ..conf import get_booking_setting
from ..models import Booking, Staff  # IMPORTANT: booking.models.Staff
from . import scheduling
from .slot_utils import _make_aware, at_time, format_hhmm

logger = logging.getLogger(__name__)


class AvailabilityEngine:
    def __init__(self, tz=None):
        self.tz = tz or timezone.get_current_timezone()

    def _is_valid_staff(self, staff) -> bool:
        return isinstance(staff, Staff)

    # -------------------- snapshots --------------------
    def windows_for_staff(self, staff):
        from staff.models import StaffAvailability

        rows = (
            StaffAvailability.objects.filter(staff=staff)
            .prefetch_related("breaks")
            .order_by("day_of_week", "id")
        )
        return [row.to_window() for row in rows]

    def appointments_for_staff(self, staff, day):
        day_start = _make_aware(datetime.combine(day, datetime.min.time()), self.tz)
        day_end = day_start + timedelta(days=1)
        return list(
            Booking.objects.filter(staff=staff, start_time__gte=day_start, start_time__lt=day_end)
            .exclude(status=Booking.CANCELLED)
            .order_by("start_time")
        )

    def _service_bookings_in_hour(self, service, start_time):
        local = timezone.localtime(_make_aware(start_time, self.tz), self.tz)
        hour_start = local.replace(minute=0, second=0, microsecond=0)
        return list(
            Booking.objects.filter(
                service=service,
                start_time__gte=hour_start,
                start_time__lt=hour_start + timedelta(hours=1),
            ).exclude(status=Booking.CANCELLED)
        )

    # -------------------- checks --------------------
    def capacity_status(self, service, start_time, exclude_booking_id=None) -> dict:
        return scheduling.check_service_capacity(
            service,
            self._service_bookings_in_hour(service, start_time),
            start_time,
            exclude_appointment_id=exclude_booking_id,
            tz=self.tz,
        )

    def fits_staff_availability(self, staff, start_time, duration_minutes: int) -> bool:
        if not self._is_valid_staff(staff):
            return False
        local = timezone.localtime(_make_aware(start_time, self.tz), self.tz)
        return scheduling.is_within_availability(
            local.date(), format_hhmm(local), duration_minutes, self.windows_for_staff(staff), tz=self.tz
        )

    def has_booking_conflict(self, staff, start_time, duration_minutes: int, exclude_booking_id=None) -> bool:
        if not self._is_valid_staff(staff):
            return True  # treat as conflict; skip invalid values
        local = timezone.localtime(_make_aware(start_time, self.tz), self.tz)
        free = scheduling.is_slot_available(
            local.date(),
            format_hhmm(local),
            duration_minutes,
            self.appointments_for_staff(staff, local.date()),
            exclude_appointment_id=exclude_booking_id,
            tz=self.tz,
        )
        if not free:
            logger.info(
                "Booking conflict for staff %s at %s (%s min)",
                staff.pk, local.isoformat(), duration_minutes,
            )
        return not free

    def is_slot_available_for_staff(self, staff, service, start_time, exclude_booking_id=None) -> bool:
        """
        Dispatch on the service's booking model. Class services only count
        heads; one-on-one services need the staff window and no overlap.
        """
        if service.is_capacity_based:
            return self.capacity_status(service, start_time, exclude_booking_id)["available"]
        if not self.fits_staff_availability(staff, start_time, service.duration_minutes):
            return False
        if self.has_booking_conflict(staff, start_time, service.duration_minutes, exclude_booking_id):
            return False
        return True

    # -------------------- listings --------------------
    def available_slots_for_staff(self, staff, service, day, interval_minutes=None):
        if interval_minutes is None:
            interval_minutes = get_booking_setting("SLOT_INTERVAL_MINUTES")
        return scheduling.generate_available_slots(
            day,
            self.windows_for_staff(staff),
            self.appointments_for_staff(staff, day),
            service.duration_minutes,
            interval_minutes,
            tz=self.tz,
        )

    def available_days_for_staff(self, staff, start_date, end_date):
        return scheduling.get_available_days(start_date, end_date, self.windows_for_staff(staff))

    def find_available_slots(self, service, day, staff_queryset, interval_minutes=None):
        """
        Merge per-staff slots into one ascending list:
            {"date": "YYYY-MM-DD", "slots": [{"time", "start_time", "staff_ids"}, ...]}
        """
        by_time = {}
        for staff in staff_queryset:
            if not self._is_valid_staff(staff):
                continue  # skip bad values
            for time_str in self.available_slots_for_staff(staff, service, day, interval_minutes):
                by_time.setdefault(time_str, []).append(staff.id)

        results = []
        for time_str in sorted(by_time):
            start = at_time(day, time_str, self.tz)
            results.append({"time": time_str, "start_time": start.isoformat(), "staff_ids": by_time[time_str]})

        return {"date": day.isoformat(), "slots": results}
