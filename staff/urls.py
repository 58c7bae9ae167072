from django.urls import path, include
from rest_framework.routers import SimpleRouter
from .views import StaffAvailabilityViewSet

# SimpleRouter: no API root view, so /api/staff/ falls through to the booking router.
router = SimpleRouter()
router.register(r"availability", StaffAvailabilityViewSet, basename="staff-availability")

urlpatterns = [path("", include(router.urls))]
