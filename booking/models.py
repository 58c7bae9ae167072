# booking/models.py
#
# Purpose:
# - Core domain models for the booking system.
#
# Design highlights:
# - ClientProfile: The customer who books. Optional link to auth User.
#   • clean() prevents duplicates by (name/email case-insensitive + phone exact).
# - Service: Validates price and duration; "active" flag controls visibility.
#   • booking_model is a tag: EXCLUSIVE services are one-on-one and checked
#     for interval overlap; CAPACITY services are classes checked by headcount
#     per hour bucket. The two rules are never combined.
# - Staff: Basic identity for stylists; unique email for admin clarity.
# - Booking (an appointment):
#   • Records client, service, staff (optional for classes), start_time
#   • duration_minutes is copied from the service when the booking is made,
#     so later service edits do not move existing bookings
#   • status is uppercase "SCHEDULED", "COMPLETED" or "CANCELLED"
#   • cancellation_time records when a cancellation occurs
#
# Notes for developers:
# - Overlap prevention lives in booking/services (AvailabilityEngine +
#   BookingManager); the models only validate their own fields.
#

from datetime import timedelta

from django.db import models
from django.core.validators import MinValueValidator
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError


# -------------------------
# Client (person who books)
# -------------------------
class ClientProfile(models.Model):
    """
    A client who books an appointment.
    - 'user' link is optional (public can book with just name/email/phone).
    - We prevent duplicates by using a case-insensitive match on name and email,
      and exact match on phone in model.clean().
    """
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="client_profile",
        null=True,
        blank=True,
    )
    name = models.CharField(max_length=200)
    email = models.EmailField()
    phone = models.CharField(max_length=20)

    def __str__(self):
        return self.name

    def clean(self):
        """
        Soft duplicate prevention (app-level):
        - Disallow another profile with same (name/email case-insensitive) + phone exact.
        - Allows saving when updating the same record (excludes self.pk).
        """
        name = (self.name or "").strip()
        email = (self.email or "").strip()
        phone = (self.phone or "").strip()

        # If any key fields are missing, let the form/serializer handle "required".
        if not name or not email or not phone:
            return

        qs = ClientProfile.objects.filter(
            name__iexact=name,
            email__iexact=email,
            phone=phone,
        )
        if self.pk:
            qs = qs.exclude(pk=self.pk)

        if qs.exists():
            raise ValidationError(
                "A client with the same name, email, and phone already exists."
            )


# -------------------------
# Service catalog item
# -------------------------
class Service(models.Model):
    """
    A service offered by the salon.

    Rules:
    - price must be > 0
    - duration_minutes must be > 0
    - EXCLUSIVE services have capacity 1; CAPACITY services need capacity > 1
    - active controls visibility and bookability
    """
    EXCLUSIVE = "EXCLUSIVE"
    CAPACITY = "CAPACITY"
    BOOKING_MODEL_CHOICES = [
        (EXCLUSIVE, "One-on-one"),
        (CAPACITY, "Class (shared capacity)"),
    ]

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    duration_minutes = models.PositiveIntegerField(
        validators=[MinValueValidator(1)]  # duration must be >= 1 minute
    )
    price = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(0.01)],  # price must be > 0
    )
    booking_model = models.CharField(
        max_length=10,
        choices=BOOKING_MODEL_CHOICES,
        default=EXCLUSIVE,
    )
    capacity = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        help_text="Headcount per hour for class services.",
    )
    active = models.BooleanField(default=True)

    def __str__(self):
        return f"{self.name} (${self.price})"

    @property
    def is_capacity_based(self) -> bool:
        return self.booking_model == self.CAPACITY

    def clean(self):
        if self.booking_model == self.CAPACITY and (self.capacity or 0) <= 1:
            raise ValidationError({"capacity": "Class services need a capacity greater than 1."})
        if self.booking_model == self.EXCLUSIVE and self.capacity != 1:
            raise ValidationError({"capacity": "One-on-one services have a capacity of 1."})


# -------------------------
# Staff member / Stylist
# -------------------------
class Staff(models.Model):
    """
    A stylist or staff member who can be assigned to bookings.
    Weekly working hours live in staff.StaffAvailability.
    """
    name = models.CharField(max_length=200)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=100)

    def __str__(self):
        return self.name


# -------------------------
# Booking record
# -------------------------
class Booking(models.Model):
    """
    Appointment booking.

    The booking occupies the half-open interval
    [start_time, start_time + duration_minutes) unless it is cancelled.
    """
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    STATUS_CHOICES = [
        (SCHEDULED, "Scheduled"),
        (COMPLETED, "Completed"),
        (CANCELLED, "Cancelled"),
    ]

    client = models.ForeignKey(ClientProfile, on_delete=models.CASCADE)
    service = models.ForeignKey(Service, on_delete=models.CASCADE)
    staff = models.ForeignKey(Staff, on_delete=models.SET_NULL, null=True, blank=True)
    start_time = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    created_at = models.DateTimeField(auto_now_add=True)
    notes = models.TextField(blank=True)
    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=SCHEDULED,
        help_text="Booking lifecycle status",
    )
    cancellation_time = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the booking was cancelled (if applicable).",
    )

    class Meta:
        indexes = [
            models.Index(fields=["staff", "start_time"]),
            models.Index(fields=["service", "start_time"]),
        ]

    def __str__(self):
        return f"{self.client.name} → {self.service.name} on {self.start_time}"

    @property
    def end_time(self):
        return self.start_time + timedelta(minutes=self.duration_minutes)
