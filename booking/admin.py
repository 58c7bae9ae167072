from django.contrib import admin
from .models import Service, ClientProfile, Staff, Booking

@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "price", "duration_minutes", "booking_model", "capacity", "active")
    list_filter = ("active", "booking_model")
    search_fields = ("name",)

@admin.register(ClientProfile)
class ClientProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "email")

@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "email", "role")

@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "client", "service", "staff", "start_time", "duration_minutes", "status")
    list_filter = ("status", "service")
    search_fields = ("client__name", "service__name")
