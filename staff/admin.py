# staff/admin.py
from django.contrib import admin
from .models import StaffAvailability, StaffBreak


class StaffBreakInline(admin.TabularInline):
    model = StaffBreak
    extra = 0


@admin.register(StaffAvailability)
class StaffAvailabilityAdmin(admin.ModelAdmin):
    list_display = ("staff", "day_of_week", "start_time", "end_time", "is_available")
    list_filter = ("staff", "day_of_week", "is_available")
    search_fields = ("staff__name",)
    inlines = [StaffBreakInline]
