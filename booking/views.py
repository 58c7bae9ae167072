# booking/views.py
#
# Purpose:
# - CRUD APIs for Clients, Services, Staff and Bookings.
# - Availability endpoints: bookable slots for a day, class capacity for an
#   hour, and which days a staff member works in a date range.
# - Permissions:
#   * Service writes are staff-only.
#   * Booking creation requires NO login. Public flow: create client -> create booking.
#
# Notes:
# - Rule violations from BookingManager surface as ValueError and are
#   returned as HTTP 400 {"detail": ...}.
# - For one-on-one services, if the posted staff is busy or missing we
#   auto-assign a free staff member (re-validated inside create_booking).
#
import logging
import re
from datetime import timedelta

from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import BasePermission
from rest_framework.response import Response

from .conf import get_booking_setting
from .models import ClientProfile, Service, Staff, Booking
from .serializers import (
    ClientProfileSerializer,
    ServiceSerializer,
    StaffSerializer,
    BookingSerializer,
    RescheduleSerializer,
)
from .services.booking_manager import BookingManager
from .services.availability_engine import AvailabilityEngine  # computes open slots

logger = logging.getLogger(__name__)

PHONE_RE = re.compile(r"^\d{7,15}$")


def _parse_day(raw):
    """
    Accept 'YYYY-MM-DD', also with a trailing time part which we trim.
    Returns a date or None.
    """
    raw = (raw or "").strip()
    if "T" in raw:
        raw = raw.split("T", 1)[0].strip()
    elif " " in raw:
        raw = raw.split(" ", 1)[0].strip()
    try:
        return parse_date(raw)
    except ValueError:
        return None


def _bad_request(detail):
    return Response({"detail": detail}, status=status.HTTP_400_BAD_REQUEST)


def _is_pk(raw):
    return raw.isascii() and raw.isdigit()


# -------------------- Permissions --------------------
class IsStaffOrReadOnly(BasePermission):
    """
    Read: anyone
    Write: staff only
    """
    def has_permission(self, request, view):
        if request.method in ("GET", "HEAD", "OPTIONS"):
            return True
        return bool(request.user and request.user.is_staff)


# -------------------- ViewSets --------------------
class ClientProfileViewSet(viewsets.ModelViewSet):
    queryset = ClientProfile.objects.all().order_by("id")
    serializer_class = ClientProfileSerializer

    def create(self, request, *args, **kwargs):
        """
        Create-or-reuse ClientProfile with normalized (trimmed) fields.
        - If a profile with the same name/email (case-insensitive) and phone
          exists, return it (200 OK); otherwise create one (201 Created).
        """
        name = (request.data.get("name") or "").strip()
        email = (request.data.get("email") or "").strip()
        phone = (request.data.get("phone") or "").strip()

        if not name or not email or not phone:
            return _bad_request("name, email, and phone are required.")

        if not PHONE_RE.match(phone):
            return _bad_request("Phone must be digits only, 7 to 15 digits.")

        existing = ClientProfile.objects.filter(
            name__iexact=name,
            email__iexact=email,
            phone=phone,
        ).first()

        if existing:
            data = self.get_serializer(existing).data
            return Response(data, status=200)

        serializer = self.get_serializer(data={"name": name, "email": email, "phone": phone})
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        headers = self.get_success_headers(serializer.data)
        return Response(serializer.data, status=201, headers=headers)


class ServiceViewSet(viewsets.ModelViewSet):
    """
    Service catalog:
    - Anyone can list active services.
    - Only staff can create/update/delete services (IsStaffOrReadOnly).
    """
    serializer_class = ServiceSerializer
    permission_classes = [IsStaffOrReadOnly]

    def get_queryset(self):
        """
        Staff can see all services; public sees only active services.
        """
        user = getattr(self.request, "user", None)
        qs = Service.objects.all().order_by("id")
        if user and user.is_authenticated and user.is_staff:
            return qs
        return qs.filter(active=True)


class StaffViewSet(viewsets.ModelViewSet):
    queryset = Staff.objects.all().order_by("id")
    serializer_class = StaffSerializer
    permission_classes = [IsStaffOrReadOnly]


class BookingViewSet(viewsets.ModelViewSet):
    """
    Endpoints:
    - POST   /api/bookings/                      create
    - POST   /api/bookings/{id}/cancel/          cancel with cutoff
    - POST   /api/bookings/{id}/complete/        mark completed
    - POST   /api/bookings/{id}/reschedule/      move to a new start time
    - GET    /api/bookings/availability/         bookable slots for a day
    - GET    /api/bookings/capacity/             class headcount for an hour
    - GET    /api/bookings/available-days/       working days in a range
    """
    queryset = Booking.objects.all().order_by("-start_time")
    serializer_class = BookingSerializer
    http_method_names = ["get", "post", "head", "options"]

    def get_manager(self):
        return BookingManager()

    def create(self, request, *args, **kwargs):
        """
        Create a booking with validated payload:
        - Requires: client (ClientProfile PK), service (PK), start_time (ISO).
        - Optional: staff (PK), notes (str).
        - Blocks inactive services.
        """
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        client = data["client"]
        service = data["service"]
        staff = data.get("staff")
        start_time = data["start_time"]
        notes = data.get("notes", "")

        if not service.active:
            return _bad_request("This service is not currently available.")

        # Ensure aware datetime for consistent comparisons
        if timezone.is_naive(start_time):
            start_time = timezone.make_aware(start_time, timezone.get_current_timezone())

        if not service.is_capacity_based:
            # Auto-assign any free staff if provided staff is busy or missing
            eng = AvailabilityEngine()

            def staff_is_free(s):
                return eng.is_slot_available_for_staff(s, service, start_time)

            if staff is None or not staff_is_free(staff):
                for s in Staff.objects.all().order_by("id"):
                    if staff_is_free(s):
                        staff = s
                        break

            if staff is None or not staff_is_free(staff):
                return _bad_request("No staff available for that time.")

        try:
            booking = self.get_manager().create_booking(
                client=client,
                service=service,
                staff=staff,
                start_time=start_time,
                notes=notes,
            )
        except ValueError as e:
            return _bad_request(str(e))

        out = BookingSerializer(booking)
        headers = self.get_success_headers(out.data)
        return Response(out.data, status=status.HTTP_201_CREATED, headers=headers)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        """
        Cancel a booking (public). Respects the configured cutoff.
        """
        booking = get_object_or_404(Booking, pk=pk)
        try:
            self.get_manager().cancel_booking(booking)
        except ValueError as e:
            return _bad_request(str(e))
        return Response({"detail": "Booking cancelled."}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        if not (request.user and request.user.is_staff):
            return Response({"detail": "Staff only."}, status=status.HTTP_403_FORBIDDEN)
        booking = get_object_or_404(Booking, pk=pk)
        try:
            self.get_manager().complete_booking(booking)
        except ValueError as e:
            return _bad_request(str(e))
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def reschedule(self, request, pk=None):
        booking = get_object_or_404(Booking, pk=pk)
        serializer = RescheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            self.get_manager().reschedule_booking(
                booking,
                serializer.validated_data["start_time"],
                staff=serializer.validated_data.get("staff"),
            )
        except ValueError as e:
            return _bad_request(str(e))
        return Response(BookingSerializer(booking).data)

    @action(detail=False, methods=["get"], url_path="availability")
    def availability(self, request):
        """
        GET /api/bookings/availability/?service=ID&date=YYYY-MM-DD[&staff=ID]
        Filters out past slots relative to the current time.
        """
        service_id = (request.query_params.get("service") or "").strip()
        date_raw = (request.query_params.get("date") or "").strip()
        staff_id = (request.query_params.get("staff") or "").strip()

        if not service_id or not date_raw:
            return _bad_request("Missing 'service' or 'date'.")
        if not _is_pk(service_id) or (staff_id and not _is_pk(staff_id)):
            return _bad_request("'service' and 'staff' must be numeric ids.")

        day = _parse_day(date_raw)
        if day is None:
            return _bad_request("Invalid date format. Use YYYY-MM-DD.")

        service = get_object_or_404(Service, pk=service_id)
        if service.is_capacity_based:
            return _bad_request("Class services are booked by hour; use /api/bookings/capacity/.")

        staff_qs = Staff.objects.all().order_by("id")
        if staff_id:
            staff_qs = staff_qs.filter(pk=staff_id)

        engine = AvailabilityEngine()
        try:
            data = engine.find_available_slots(service, day, staff_qs)
        except ValidationError as e:
            return _bad_request(" ".join(e.messages))

        now = timezone.now()
        data["slots"] = [s for s in data["slots"] if parse_datetime(s["start_time"]) > now]
        return Response(data)

    @action(detail=False, methods=["get"], url_path="capacity")
    def capacity(self, request):
        """
        GET /api/bookings/capacity/?service=ID&start=ISO-DATETIME
        """
        service_id = (request.query_params.get("service") or "").strip()
        start_raw = (request.query_params.get("start") or "").strip()
        if not service_id or not start_raw:
            return _bad_request("Missing 'service' or 'start'.")
        if not _is_pk(service_id):
            return _bad_request("'service' must be a numeric id.")

        start = parse_datetime(start_raw)
        if start is None:
            return _bad_request("Invalid start. Use an ISO datetime.")
        if timezone.is_naive(start):
            start = timezone.make_aware(start, timezone.get_current_timezone())

        service = get_object_or_404(Service, pk=service_id)
        if not service.is_capacity_based:
            return _bad_request("This service is booked one-on-one; use /api/bookings/availability/.")

        return Response(AvailabilityEngine().capacity_status(service, start))

    @action(detail=False, methods=["get"], url_path="available-days")
    def available_days(self, request):
        """
        GET /api/bookings/available-days/?staff=ID&start=YYYY-MM-DD&end=YYYY-MM-DD
        """
        staff_id = (request.query_params.get("staff") or "").strip()
        start = _parse_day(request.query_params.get("start"))
        end = _parse_day(request.query_params.get("end"))

        if not staff_id:
            return _bad_request("Missing 'staff'.")
        if not _is_pk(staff_id):
            return _bad_request("'staff' must be a numeric id.")
        if start is None or end is None:
            return _bad_request("Invalid 'start' or 'end'. Use YYYY-MM-DD.")
        if end < start:
            return _bad_request("'end' must not be before 'start'.")
        max_days = get_booking_setting("MAX_AVAILABLE_DAYS_RANGE")
        if end - start > timedelta(days=max_days):
            return _bad_request(f"Date range is limited to {max_days} days.")

        staff = get_object_or_404(Staff, pk=staff_id)
        days = AvailabilityEngine().available_days_for_staff(staff, start, end)
        return Response({"staff": staff.id, "days": [d.isoformat() for d in days]})
