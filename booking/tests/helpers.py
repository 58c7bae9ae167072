# booking/tests/helpers.py
#
# Shared fixtures. 2030-01-07 is a Monday, far enough in the future for the
# "start time must be in the future" rules.

from datetime import date, datetime, time, timezone as dt_timezone
from decimal import Decimal

from booking.models import Booking, ClientProfile, Service, Staff
from staff.models import StaffAvailability, StaffBreak

UTC = dt_timezone.utc
MONDAY = date(2030, 1, 7)
SUNDAY = date(2030, 1, 6)


def at(day, hour, minute=0):
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=UTC)


def make_service(name="Basic Haircut", duration=30, **kwargs):
    return Service.objects.create(
        name=name,
        description="Test service",
        duration_minutes=duration,
        price=Decimal("25.00"),
        **kwargs,
    )


def make_class(name="Braiding Workshop", capacity=3, duration=60):
    return make_service(name=name, duration=duration, booking_model=Service.CAPACITY, capacity=capacity)


def make_staff(name="Ana", email=None):
    return Staff.objects.create(name=name, email=email or f"{name.lower()}@example.com", role="Stylist")


def make_client(name="Client One", email="client@example.com", phone="5551234567"):
    return ClientProfile.objects.create(name=name, email=email, phone=phone)


def give_hours(staff, day_of_week=1, start=time(9, 0), end=time(17, 0), breaks=(), is_available=True):
    window = StaffAvailability.objects.create(
        staff=staff, day_of_week=day_of_week, start_time=start, end_time=end, is_available=is_available
    )
    for brk_start, brk_end in breaks:
        StaffBreak.objects.create(availability=window, start_time=brk_start, end_time=brk_end)
    return window


def book(client, service, staff, start, status=Booking.SCHEDULED, duration=None):
    return Booking.objects.create(
        client=client,
        service=service,
        staff=staff,
        start_time=start,
        duration_minutes=duration or service.duration_minutes,
        status=status,
    )
