from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.contrib.auth.models import User
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from booking.models import Booking, ClientProfile, Service
from .views import analyze_booking_load

UTC = dt_timezone.utc


@override_settings(TIME_ZONE="UTC")
class AvailabilityAnalysisTests(TestCase):
    def setUp(self):
        self.service = Service.objects.create(name="Cut", duration_minutes=30, price=Decimal("20.00"))
        self.client_profile = ClientProfile.objects.create(name="C", email="c@example.com", phone="5551234567")

    def book(self, start, status=Booking.SCHEDULED):
        return Booking.objects.create(
            client=self.client_profile, service=self.service, start_time=start, duration_minutes=30, status=status
        )

    def test_counts_and_peaks(self):
        # Two Monday 10:00 bookings, one Wednesday 15:00
        self.book(datetime(2030, 1, 7, 10, 0, tzinfo=UTC))
        self.book(datetime(2030, 1, 7, 10, 30, tzinfo=UTC))
        self.book(datetime(2030, 1, 9, 15, 0, tzinfo=UTC))

        result = analyze_booking_load(Booking.objects.all())
        self.assertEqual(result["total_appointments"], 3)
        self.assertEqual(result["hourly_count"][10], 2)
        self.assertEqual(result["hourly_count"][15], 1)
        self.assertEqual(result["day_of_week_count"]["Monday"], 2)
        self.assertEqual(result["day_of_week_count"]["Wednesday"], 1)
        self.assertEqual(result["peak_hours"][:2], [10, 15])
        self.assertEqual(len(result["peak_hours"]), 4)  # ceil(12 * 0.3)
        self.assertEqual(result["peak_days"][:2], ["Monday", "Wednesday"])
        self.assertEqual(len(result["peak_days"]), 3)  # ceil(7 * 0.4)
        self.assertEqual(len(result["off_peak_days"]), 4)

    def test_endpoint_is_staff_only_and_skips_cancelled(self):
        self.book(datetime(2030, 1, 7, 10, 0, tzinfo=UTC))
        self.book(datetime(2030, 1, 7, 11, 0, tzinfo=UTC), status=Booking.CANCELLED)

        api = APIClient()
        self.assertEqual(api.get("/api/reports/availability-analysis").status_code, 403)

        admin = User.objects.create_user(username="admin", password="pass12345", is_staff=True)
        api.force_authenticate(admin)
        resp = api.get("/api/reports/availability-analysis")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["total_appointments"], 1)
        self.assertEqual(api.get("/api/reports/availability-analysis", {"staff": "ana"}).status_code, 400)
