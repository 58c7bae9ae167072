# booking_system/urls.py
#
# Purpose:
# - Project URL router.
# - Keeps DRF routers under /api/.
#
from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    # Django admin
    path("admin/", admin.site.urls),

    # =====
    # API's
    # =====
    # /api/staff/availability/ must be matched before the booking router's
    # /api/staff/{id}/ detail route.
    path("api/staff/", include("staff.urls")),
    path("api/reports/", include("reports.urls")),
    path("api/", include("booking.urls")),
]
