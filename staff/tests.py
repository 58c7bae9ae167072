from datetime import time

from django.contrib.auth.models import User
from django.test import TestCase
from rest_framework.test import APIClient

from booking.models import Staff
from .models import StaffAvailability, StaffBreak


class StaffAvailabilityApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(username="admin", password="pass12345", is_staff=True)
        self.client.force_authenticate(self.admin)
        self.staff = Staff.objects.create(name="Ana", email="ana@example.com", role="Stylist")

    def payload(self, **overrides):
        data = {
            "staff": self.staff.id,
            "day_of_week": 1,
            "start_time": "09:00",
            "end_time": "17:00",
            "breaks": [{"start_time": "13:00", "end_time": "14:00"}],
        }
        data.update(overrides)
        return data

    def test_create_with_breaks(self):
        resp = self.client.post("/api/staff/availability/", self.payload(), format="json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["start_time"], "09:00")
        self.assertEqual(resp.data["breaks"], [{"id": StaffBreak.objects.get().id, "start_time": "13:00", "end_time": "14:00"}])
        self.assertTrue(resp.data["is_available"])

    def test_one_window_per_day(self):
        self.client.post("/api/staff/availability/", self.payload(), format="json")
        resp = self.client.post("/api/staff/availability/", self.payload(start_time="10:00"), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("day_of_week", resp.data)
        self.assertEqual(StaffAvailability.objects.count(), 1)

    def test_day_of_week_range(self):
        resp = self.client.post("/api/staff/availability/", self.payload(day_of_week=7), format="json")
        self.assertEqual(resp.status_code, 400)

    def test_end_must_follow_start(self):
        resp = self.client.post(
            "/api/staff/availability/", self.payload(start_time="17:00", end_time="09:00", breaks=[]), format="json"
        )
        self.assertEqual(resp.status_code, 400)

    def test_break_outside_hours_is_rejected(self):
        resp = self.client.post(
            "/api/staff/availability/",
            self.payload(breaks=[{"start_time": "16:30", "end_time": "17:30"}]),
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("breaks", resp.data)

    def test_update_replaces_breaks(self):
        resp = self.client.post("/api/staff/availability/", self.payload(), format="json")
        url = f"/api/staff/availability/{resp.data['id']}/"
        resp = self.client.patch(url, {"breaks": [{"start_time": "12:00", "end_time": "12:30"}]}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(list(StaffBreak.objects.values_list("start_time", flat=True)), [time(12, 0)])

    def test_shrinking_hours_keeps_breaks_inside(self):
        resp = self.client.post("/api/staff/availability/", self.payload(), format="json")
        url = f"/api/staff/availability/{resp.data['id']}/"

        resp = self.client.patch(url, {"end_time": "12:00"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("breaks", resp.data)
        self.assertEqual(StaffAvailability.objects.get().end_time, time(17, 0))

        resp = self.client.patch(url, {"end_time": "15:00"}, format="json")
        self.assertEqual(resp.status_code, 200)

    def test_filter_by_staff(self):
        other = Staff.objects.create(name="Ben", email="ben@example.com", role="Stylist")
        self.client.post("/api/staff/availability/", self.payload(), format="json")
        self.client.post("/api/staff/availability/", self.payload(staff=other.id), format="json")
        resp = self.client.get("/api/staff/availability/", {"staff": other.id})
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(resp.data[0]["staff"], other.id)
        self.assertEqual(self.client.get("/api/staff/availability/", {"staff": "ben"}).data, [])

    def test_requires_staff_user(self):
        self.client.force_authenticate(None)
        resp = self.client.get("/api/staff/availability/")
        self.assertEqual(resp.status_code, 403)


class StaffAvailabilityModelTests(TestCase):
    def test_to_window(self):
        staff = Staff.objects.create(name="Ana", email="ana@example.com", role="Stylist")
        row = StaffAvailability.objects.create(
            staff=staff, day_of_week=2, start_time=time(9, 0), end_time=time(12, 0), is_available=False
        )
        StaffBreak.objects.create(availability=row, start_time=time(10, 30), end_time=time(10, 45))
        StaffBreak.objects.create(availability=row, start_time=time(10, 0), end_time=time(10, 15))

        window = row.to_window()
        self.assertEqual(window.day_of_week, 2)
        self.assertFalse(window.is_available)
        self.assertEqual(window.staff_id, staff.id)
        self.assertEqual([b.start_time for b in window.breaks], [time(10, 0), time(10, 30)])
