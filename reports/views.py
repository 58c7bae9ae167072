# reports/views.py

import math

from django.utils import timezone
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import BasePermission

from booking.models import Booking
from booking.services.slot_utils import day_name_from_day_of_week, day_of_week

# Hours shown in the analysis (08:00 .. 19:00 starts)
FIRST_HOUR = 8
LAST_HOUR = 19


class IsStaffOnly(BasePermission):
    """
    Only allow requests from logged-in staff users.
    """
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_staff)


def analyze_booking_load(bookings):
    """
    Count bookings per hour of day and per day of week (business timezone)
    and split both into peak and off-peak groups.

    Peak hours are the busiest 30% of hours, peak days the busiest 40% of
    days. Ties keep calendar order.
    """
    tz = timezone.get_current_timezone()
    hourly = {hour: 0 for hour in range(FIRST_HOUR, LAST_HOUR + 1)}
    by_day = {day_name_from_day_of_week(d).capitalize(): 0 for d in range(7)}

    total = 0
    for b in bookings:
        local = timezone.localtime(b.start_time, tz)
        if local.hour in hourly:
            hourly[local.hour] += 1
        by_day[day_name_from_day_of_week(day_of_week(local.date())).capitalize()] += 1
        total += 1

    sorted_hours = sorted(hourly.items(), key=lambda item: -item[1])
    sorted_days = sorted(by_day.items(), key=lambda item: -item[1])
    peak_hour_count = math.ceil(len(sorted_hours) * 0.3)
    peak_day_count = math.ceil(len(sorted_days) * 0.4)

    return {
        "hourly_count": hourly,
        "day_of_week_count": by_day,
        "peak_hours": [h for h, _ in sorted_hours[:peak_hour_count]],
        "off_peak_hours": [h for h, _ in sorted_hours[peak_hour_count:]],
        "peak_days": [d for d, _ in sorted_days[:peak_day_count]],
        "off_peak_days": [d for d, _ in sorted_days[peak_day_count:]],
        "total_appointments": total,
    }


class AvailabilityAnalysisView(APIView):
    """
    GET /api/reports/availability-analysis[?staff=ID]

    Booking load by hour and weekday over non-cancelled bookings, to help
    decide where staff hours are needed. Only accessible by staff users.
    """
    permission_classes = [IsStaffOnly]

    def get(self, request):
        qs = Booking.objects.exclude(status=Booking.CANCELLED)
        staff_id = (request.query_params.get("staff") or "").strip()
        if staff_id:
            if not (staff_id.isascii() and staff_id.isdigit()):
                return Response({"detail": "'staff' must be a numeric id."}, status=status.HTTP_400_BAD_REQUEST)
            qs = qs.filter(staff_id=staff_id)
        return Response(analyze_booking_load(qs.only("start_time")))
