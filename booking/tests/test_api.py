from datetime import time

from django.contrib.auth.models import User
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from booking.models import Booking

from .helpers import MONDAY, at, book, give_hours, make_class, make_client, make_service, make_staff


@override_settings(TIME_ZONE="UTC")
class BookingApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.service = make_service(duration=30)
        self.ana = make_staff("Ana")
        self.ben = make_staff("Ben")
        self.client_profile = make_client()
        give_hours(self.ana, breaks=[(time(13, 0), time(14, 0))])
        give_hours(self.ben)

    def post_booking(self, start, staff=None, service=None):
        payload = {
            "client": self.client_profile.id,
            "service": (service or self.service).id,
            "start_time": start.isoformat(),
        }
        if staff is not None:
            payload["staff"] = staff.id
        return self.client.post("/api/bookings/", payload, format="json")

    def test_create_booking(self):
        resp = self.post_booking(at(MONDAY, 10), staff=self.ana)
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["staff"], self.ana.id)
        self.assertEqual(resp.data["duration_minutes"], 30)
        self.assertEqual(resp.data["status"], "SCHEDULED")

    def test_busy_staff_falls_back_to_free_staff(self):
        book(self.client_profile, self.service, self.ana, at(MONDAY, 10))
        resp = self.post_booking(at(MONDAY, 10, 15), staff=self.ana)
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["staff"], self.ben.id)

    def test_no_free_staff_is_400(self):
        book(self.client_profile, self.service, self.ana, at(MONDAY, 10))
        book(self.client_profile, self.service, self.ben, at(MONDAY, 10))
        resp = self.post_booking(at(MONDAY, 10))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["detail"], "No staff available for that time.")

    def test_past_start_is_400(self):
        resp = self.post_booking(at(MONDAY.replace(year=2001), 10), staff=self.ana)
        self.assertEqual(resp.status_code, 400)

    def test_availability_lists_slots(self):
        book(self.client_profile, self.service, self.ana, at(MONDAY, 9))
        resp = self.client.get(
            "/api/bookings/availability/", {"service": self.service.id, "date": "2030-01-07", "staff": self.ana.id}
        )
        self.assertEqual(resp.status_code, 200)
        times = [s["time"] for s in resp.data["slots"]]
        self.assertEqual(times[0], "09:30")
        self.assertNotIn("09:15", times)
        self.assertNotIn("13:00", times)
        self.assertEqual(times[-1], "16:30")

    def test_availability_requires_params(self):
        resp = self.client.get("/api/bookings/availability/", {"service": self.service.id})
        self.assertEqual(resp.status_code, 400)
        resp = self.client.get("/api/bookings/availability/", {"service": self.service.id, "date": "07/01/2030"})
        self.assertEqual(resp.status_code, 400)

    def test_non_numeric_ids_are_bad_requests(self):
        resp = self.client.get("/api/bookings/availability/", {"service": "abc", "date": "2030-01-07"})
        self.assertEqual(resp.status_code, 400)
        resp = self.client.get(
            "/api/bookings/availability/", {"service": self.service.id, "date": "2030-01-07", "staff": "x"}
        )
        self.assertEqual(resp.status_code, 400)
        resp = self.client.get("/api/bookings/capacity/", {"service": "abc", "start": "2030-01-07T10:00:00Z"})
        self.assertEqual(resp.status_code, 400)
        resp = self.client.get(
            "/api/bookings/available-days/", {"staff": "ana", "start": "2030-01-07", "end": "2030-01-14"}
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("detail", resp.data)

    def test_availability_for_day_off_is_empty(self):
        resp = self.client.get("/api/bookings/availability/", {"service": self.service.id, "date": "2030-01-06"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["slots"], [])

    def test_available_days(self):
        resp = self.client.get(
            "/api/bookings/available-days/", {"staff": self.ana.id, "start": "2030-01-06", "end": "2030-01-19"}
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["days"], ["2030-01-07", "2030-01-14"])

    def test_available_days_rejects_reversed_range(self):
        resp = self.client.get(
            "/api/bookings/available-days/", {"staff": self.ana.id, "start": "2030-01-19", "end": "2030-01-06"}
        )
        self.assertEqual(resp.status_code, 400)

    def test_cancel_and_reschedule(self):
        booking = book(self.client_profile, self.service, self.ana, at(MONDAY, 10))
        resp = self.client.post(
            f"/api/bookings/{booking.id}/reschedule/", {"start_time": at(MONDAY, 11).isoformat()}, format="json"
        )
        self.assertEqual(resp.status_code, 200)
        booking.refresh_from_db()
        self.assertEqual(booking.start_time, at(MONDAY, 11))

        resp = self.client.post(f"/api/bookings/{booking.id}/cancel/")
        self.assertEqual(resp.status_code, 200)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.CANCELLED)

        resp = self.client.post(f"/api/bookings/{booking.id}/cancel/")
        self.assertEqual(resp.status_code, 400)

    def test_reschedule_into_break_is_400(self):
        booking = book(self.client_profile, self.service, self.ana, at(MONDAY, 10))
        resp = self.client.post(
            f"/api/bookings/{booking.id}/reschedule/", {"start_time": at(MONDAY, 13, 15).isoformat()}, format="json"
        )
        self.assertEqual(resp.status_code, 400)

    def test_complete_is_staff_only(self):
        booking = book(self.client_profile, self.service, self.ana, at(MONDAY, 10))
        resp = self.client.post(f"/api/bookings/{booking.id}/complete/")
        self.assertEqual(resp.status_code, 403)

        admin = User.objects.create_user(username="admin", password="pass12345", is_staff=True)
        self.client.force_authenticate(admin)
        resp = self.client.post(f"/api/bookings/{booking.id}/complete/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["status"], "COMPLETED")


@override_settings(TIME_ZONE="UTC")
class ClassApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.workshop = make_class(capacity=2)
        self.client_profile = make_client()

    def test_capacity_endpoint_and_full_class(self):
        for minute in (0, 30):
            resp = self.client.post(
                "/api/bookings/",
                {"client": self.client_profile.id, "service": self.workshop.id,
                 "start_time": at(MONDAY, 18, minute).isoformat()},
                format="json",
            )
            self.assertEqual(resp.status_code, 201)

        resp = self.client.get(
            "/api/bookings/capacity/", {"service": self.workshop.id, "start": at(MONDAY, 18, 15).isoformat()}
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data, {"available": False, "capacity": 2, "booked": 2, "remaining": 0})

        resp = self.client.post(
            "/api/bookings/",
            {"client": self.client_profile.id, "service": self.workshop.id,
             "start_time": at(MONDAY, 18, 45).isoformat()},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)

    def test_slot_listing_is_for_one_on_one_services(self):
        resp = self.client.get("/api/bookings/availability/", {"service": self.workshop.id, "date": "2030-01-07"})
        self.assertEqual(resp.status_code, 400)


class ServiceApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(username="admin", password="pass12345", is_staff=True)

    def test_public_cannot_create_service(self):
        resp = self.client.post(
            "/api/services/", {"name": "Cut", "duration_minutes": 30, "price": "20.00"}, format="json"
        )
        self.assertEqual(resp.status_code, 403)

    def test_class_service_needs_capacity(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.post(
            "/api/services/",
            {"name": "Workshop", "duration_minutes": 60, "price": "20.00", "booking_model": "CAPACITY", "capacity": 1},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("capacity", resp.data)

        resp = self.client.post(
            "/api/services/",
            {"name": "Workshop", "duration_minutes": 60, "price": "20.00", "booking_model": "CAPACITY", "capacity": 8},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)

    def test_client_profile_is_reused(self):
        payload = {"name": "Client One", "email": "client@example.com", "phone": "5551234567"}
        first = self.client.post("/api/clients/", payload, format="json")
        second = self.client.post("/api/clients/", {**payload, "email": "CLIENT@example.com"}, format="json")
        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 200)
        self.assertEqual(first.data["id"], second.data["id"])

    def test_staff_list_is_public(self):
        make_staff("Ana")
        resp = self.client.get("/api/staff/")
        self.assertEqual(resp.status_code, 200)
