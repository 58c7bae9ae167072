"""
booking_manager.py
------------------
Coordinates booking creation, rescheduling, cancellation and completion.

Double-booking prevention:
- AvailabilityEngine answers "is this slot free" against a snapshot.
- Two requests could both read the same snapshot and both pass, so every
  write runs inside transaction.atomic() after locking the staff row (or the
  service row for class services) with select_for_update(). Requests for the
  same staff member are serialized; the second one sees the first booking.
"""

import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from ..conf import get_booking_setting
from ..models import Booking, Service, Staff
from .availability_engine import AvailabilityEngine

logger = logging.getLogger(__name__)

STAFF_UNAVAILABLE = "Staff member is not available at the requested time"
SLOT_TAKEN = "This time slot is already booked. Please select a different time."
CLASS_FULL = "This class is full. Please select a different time."
STAFF_REQUIRED = "A staff member is required for this service."


class BookingRejected(ValueError):
    """Raised when a booking cannot be placed or changed."""


class BookingManager:
    def __init__(self, engine=None):
        self.availability = engine or AvailabilityEngine()

    def validate_booking(self, staff, service, start_time, exclude_booking_id=None, duration_minutes=None) -> dict:
        """
        Check a proposed booking without writing it. duration_minutes defaults
        to the service duration; existing bookings pass their own.

        Returns:
            dict: {"is_valid": bool, "error": str | None}
        """
        duration = service.duration_minutes if duration_minutes is None else duration_minutes

        if service.is_capacity_based:
            status = self.availability.capacity_status(service, start_time, exclude_booking_id)
            if not status["available"]:
                return {"is_valid": False, "error": CLASS_FULL}
            return {"is_valid": True, "error": None}

        if staff is None:
            return {"is_valid": False, "error": STAFF_REQUIRED}

        if not self.availability.fits_staff_availability(staff, start_time, duration):
            logger.info("Staff %s not available at %s for %s min", staff.pk, start_time.isoformat(), duration)
            return {"is_valid": False, "error": STAFF_UNAVAILABLE}

        if self.availability.has_booking_conflict(staff, start_time, duration, exclude_booking_id):
            return {"is_valid": False, "error": SLOT_TAKEN}

        return {"is_valid": True, "error": None}

    def _lock(self, staff, service):
        # Row locks are held until the surrounding atomic block ends.
        if service.is_capacity_based:
            Service.objects.select_for_update().get(pk=service.pk)
        if staff is not None:
            Staff.objects.select_for_update().get(pk=staff.pk)

    @transaction.atomic
    def create_booking(self, client, service, staff, start_time, notes=""):
        """
        Create a booking after checking the staff window and overlaps
        (or the class headcount).

        Args:
            client: ClientProfile instance
            service: Service instance (needs duration_minutes)
            staff: Staff instance (may be None for class services)
            start_time: aware datetime
            notes: optional string

        Raises:
            BookingRejected: if the slot cannot be booked.
        """
        self._lock(staff, service)

        result = self.validate_booking(staff, service, start_time)
        if not result["is_valid"]:
            raise BookingRejected(result["error"])

        booking = Booking.objects.create(
            client=client,
            service=service,
            staff=staff,
            start_time=start_time,
            duration_minutes=service.duration_minutes,
            notes=notes,
        )
        logger.info(
            "Booking %s created: staff=%s service=%s start=%s",
            booking.pk, getattr(staff, "pk", None), service.pk, start_time.isoformat(),
        )
        return booking

    @transaction.atomic
    def reschedule_booking(self, booking, new_start_time, staff=None):
        """
        Move a booking. The booking itself is excluded from the conflict check
        so it can shift within its own interval.
        """
        if booking.status != Booking.SCHEDULED:
            raise BookingRejected("Only scheduled bookings can be rescheduled.")

        staff = staff or booking.staff
        self._lock(staff, booking.service)

        result = self.validate_booking(
            staff,
            booking.service,
            new_start_time,
            exclude_booking_id=booking.pk,
            duration_minutes=booking.duration_minutes,
        )
        if not result["is_valid"]:
            raise BookingRejected(result["error"])

        booking.staff = staff
        booking.start_time = new_start_time
        booking.save(update_fields=["staff", "start_time"])
        logger.info("Booking %s moved to %s", booking.pk, new_start_time.isoformat())
        return booking

    @transaction.atomic
    def cancel_booking(self, booking, cutoff_minutes=None) -> bool:
        """
        Cancel a booking if outside the cutoff window.
        Sets status to CANCELLED and records cancellation_time.
        """
        if cutoff_minutes is None:
            cutoff_minutes = get_booking_setting("CANCELLATION_CUTOFF_MINUTES")

        if booking.status == Booking.CANCELLED:
            raise BookingRejected("This booking is already cancelled.")

        now = timezone.now()
        if booking.start_time - now <= timedelta(minutes=cutoff_minutes):
            raise BookingRejected(
                f"Cannot cancel within {cutoff_minutes} minutes of appointment start."
            )

        booking.status = Booking.CANCELLED
        booking.cancellation_time = now
        booking.save(update_fields=["status", "cancellation_time"])
        logger.info("Booking %s cancelled", booking.pk)
        return True

    def complete_booking(self, booking):
        if booking.status != Booking.SCHEDULED:
            raise BookingRejected("Only scheduled bookings can be completed.")
        booking.status = Booking.COMPLETED
        booking.save(update_fields=["status"])
        return booking
