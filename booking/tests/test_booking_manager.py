from datetime import time, timedelta
from unittest import mock

from django.test import TestCase, override_settings
from django.utils import timezone

from booking.models import Booking
from booking.services.booking_manager import (
    CLASS_FULL,
    SLOT_TAKEN,
    STAFF_REQUIRED,
    STAFF_UNAVAILABLE,
    BookingManager,
    BookingRejected,
)

from .helpers import MONDAY, at, book, give_hours, make_class, make_client, make_service, make_staff


@override_settings(TIME_ZONE="UTC")
class BookingManagerTests(TestCase):
    def setUp(self):
        self.manager = BookingManager()
        self.service = make_service(duration=30)
        self.staff = make_staff("Ana")
        self.client_profile = make_client()
        give_hours(self.staff, breaks=[(time(13, 0), time(14, 0))])

    def test_create_booking_copies_duration(self):
        booking = self.manager.create_booking(self.client_profile, self.service, self.staff, at(MONDAY, 10))
        self.assertEqual(booking.duration_minutes, 30)
        self.assertEqual(booking.status, Booking.SCHEDULED)

    def test_double_booking_is_rejected(self):
        self.manager.create_booking(self.client_profile, self.service, self.staff, at(MONDAY, 10))
        with self.assertRaises(BookingRejected) as ctx:
            self.manager.create_booking(self.client_profile, self.service, self.staff, at(MONDAY, 10, 15))
        self.assertEqual(str(ctx.exception), SLOT_TAKEN)
        self.assertEqual(Booking.objects.count(), 1)

    def test_back_to_back_is_accepted(self):
        self.manager.create_booking(self.client_profile, self.service, self.staff, at(MONDAY, 10))
        self.manager.create_booking(self.client_profile, self.service, self.staff, at(MONDAY, 10, 30))
        self.assertEqual(Booking.objects.count(), 2)

    def test_outside_hours_is_rejected(self):
        result = self.manager.validate_booking(self.staff, self.service, at(MONDAY, 16, 45))
        self.assertEqual(result, {"is_valid": False, "error": STAFF_UNAVAILABLE})
        result = self.manager.validate_booking(self.staff, self.service, at(MONDAY, 13, 30))
        self.assertEqual(result["error"], STAFF_UNAVAILABLE)

    def test_staff_required_for_one_on_one(self):
        result = self.manager.validate_booking(None, self.service, at(MONDAY, 10))
        self.assertEqual(result, {"is_valid": False, "error": STAFF_REQUIRED})

    def test_booking_error_is_a_value_error(self):
        with self.assertRaises(ValueError):
            self.manager.create_booking(self.client_profile, self.service, None, at(MONDAY, 10))

    def test_reschedule_excludes_itself(self):
        booking = self.manager.create_booking(self.client_profile, self.service, self.staff, at(MONDAY, 10))
        self.manager.reschedule_booking(booking, at(MONDAY, 10, 15))
        booking.refresh_from_db()
        self.assertEqual(booking.start_time, at(MONDAY, 10, 15))

    def test_reschedule_into_other_booking_is_rejected(self):
        self.manager.create_booking(self.client_profile, self.service, self.staff, at(MONDAY, 11))
        booking = self.manager.create_booking(self.client_profile, self.service, self.staff, at(MONDAY, 10))
        with self.assertRaises(BookingRejected):
            self.manager.reschedule_booking(booking, at(MONDAY, 11, 15))

    def test_reschedule_checks_the_booking_duration(self):
        # Booked as 90 minutes before the service was shortened to 30
        booking = book(self.client_profile, self.service, self.staff, at(MONDAY, 9), duration=90)
        book(self.client_profile, self.service, self.staff, at(MONDAY, 12))

        with self.assertRaises(BookingRejected) as ctx:
            self.manager.reschedule_booking(booking, at(MONDAY, 11))
        self.assertEqual(str(ctx.exception), SLOT_TAKEN)

        with self.assertRaises(BookingRejected) as ctx:
            self.manager.reschedule_booking(booking, at(MONDAY, 16))
        self.assertEqual(str(ctx.exception), STAFF_UNAVAILABLE)

        booking.refresh_from_db()
        self.assertEqual(booking.start_time, at(MONDAY, 9))

    def test_cancel_frees_the_slot(self):
        booking = self.manager.create_booking(self.client_profile, self.service, self.staff, at(MONDAY, 10))
        self.assertTrue(self.manager.cancel_booking(booking))
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.CANCELLED)
        self.assertIsNotNone(booking.cancellation_time)
        self.manager.create_booking(self.client_profile, self.service, self.staff, at(MONDAY, 10))

    def test_cancel_twice_is_rejected(self):
        booking = self.manager.create_booking(self.client_profile, self.service, self.staff, at(MONDAY, 10))
        self.manager.cancel_booking(booking)
        with self.assertRaises(BookingRejected):
            self.manager.cancel_booking(booking)

    def test_cancel_inside_cutoff_is_rejected(self):
        soon = timezone.now() + timedelta(minutes=30)
        booking = book(self.client_profile, self.service, self.staff, soon)
        with self.assertRaises(BookingRejected):
            self.manager.cancel_booking(booking, cutoff_minutes=120)

    def test_complete_booking(self):
        booking = self.manager.create_booking(self.client_profile, self.service, self.staff, at(MONDAY, 10))
        self.manager.complete_booking(booking)
        self.assertEqual(booking.status, Booking.COMPLETED)
        with self.assertRaises(BookingRejected):
            self.manager.complete_booking(booking)

    def test_staff_row_is_locked_before_checking(self):
        with mock.patch("booking.services.booking_manager.Staff.objects.select_for_update") as sfu:
            sfu.return_value.get.return_value = self.staff
            self.manager.create_booking(self.client_profile, self.service, self.staff, at(MONDAY, 10))
        sfu.assert_called_once_with()
        sfu.return_value.get.assert_called_once_with(pk=self.staff.pk)


@override_settings(TIME_ZONE="UTC")
class ClassBookingTests(TestCase):
    def setUp(self):
        self.manager = BookingManager()
        self.workshop = make_class(capacity=3)
        self.client_profile = make_client()

    def test_capacity_is_enforced(self):
        for minute in (0, 15, 30):
            self.manager.create_booking(self.client_profile, self.workshop, None, at(MONDAY, 18, minute))
        with self.assertRaises(BookingRejected) as ctx:
            self.manager.create_booking(self.client_profile, self.workshop, None, at(MONDAY, 18, 45))
        self.assertEqual(str(ctx.exception), CLASS_FULL)
        self.manager.create_booking(self.client_profile, self.workshop, None, at(MONDAY, 19))
        self.assertEqual(Booking.objects.count(), 4)
