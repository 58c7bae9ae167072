# booking/urls.py
#
# Purpose:
# - Expose REST API endpoints for the booking app via DRF router.
#
# Notes for developers:
# - Availability lookups are list-level actions on the bookings viewset:
#     * GET /api/bookings/availability/
#     * GET /api/bookings/capacity/
#     * GET /api/bookings/available-days/
# - Weekly staff hours live under /api/staff/availability/ (staff app), which
#   is included before this module in booking_system/urls.py.

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    ClientProfileViewSet,
    ServiceViewSet,
    StaffViewSet,
    BookingViewSet,
)

# --------------------------
# DRF Router registrations
# --------------------------
router = DefaultRouter()
router.register(r"clients", ClientProfileViewSet, basename="client")
router.register(r"services", ServiceViewSet, basename="service")
router.register(r"staff", StaffViewSet, basename="staff")
router.register(r"bookings", BookingViewSet, basename="booking")

urlpatterns = [
    path("", include(router.urls)),
]
