from rest_framework import viewsets
from rest_framework.permissions import BasePermission
from .models import StaffAvailability
from .serializers import StaffAvailabilitySerializer

class IsStaffOnly(BasePermission):
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_staff)

class StaffAvailabilityViewSet(viewsets.ModelViewSet):
    """
    Weekly hours. Filter with ?staff=ID.
    """
    serializer_class = StaffAvailabilitySerializer
    permission_classes = [IsStaffOnly]

    def get_queryset(self):
        qs = StaffAvailability.objects.prefetch_related("breaks").order_by("staff_id", "day_of_week")
        staff_id = (self.request.query_params.get("staff") or "").strip()
        if staff_id.isascii() and staff_id.isdigit():
            qs = qs.filter(staff_id=staff_id)
        elif staff_id:
            qs = qs.none()
        return qs
