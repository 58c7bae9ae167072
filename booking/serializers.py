from rest_framework import serializers
from django.utils import timezone
from .models import ClientProfile, Service, Staff, Booking

class ClientProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = ClientProfile
        fields = ["id", "name", "email", "phone"]  # include phone


class ServiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Service
        fields = ["id", "name", "description", "duration_minutes", "price", "booking_model", "capacity", "active"]

    def validate(self, attrs):
        booking_model = attrs.get("booking_model", getattr(self.instance, "booking_model", Service.EXCLUSIVE))
        capacity = attrs.get("capacity", getattr(self.instance, "capacity", 1))
        if booking_model == Service.CAPACITY and capacity <= 1:
            raise serializers.ValidationError({"capacity": "Class services need a capacity greater than 1."})
        if booking_model == Service.EXCLUSIVE and capacity != 1:
            raise serializers.ValidationError({"capacity": "One-on-one services have a capacity of 1."})
        return attrs


class StaffSerializer(serializers.ModelSerializer):
    class Meta:
        model = Staff
        fields = ["id", "name", "email", "role"]


class BookingSerializer(serializers.ModelSerializer):
    # Explicitly accept PKs (optional; DRF can infer)
    client = serializers.PrimaryKeyRelatedField(queryset=ClientProfile.objects.all())
    service = serializers.PrimaryKeyRelatedField(queryset=Service.objects.all())
    staff = serializers.PrimaryKeyRelatedField(queryset=Staff.objects.all(), allow_null=True, required=False)

    class Meta:
        model = Booking
        fields = [
            "id",
            "client",
            "service",
            "staff",
            "start_time",
            "duration_minutes",
            "created_at",
            "notes",
            "status",
        ]
        read_only_fields = ["duration_minutes", "created_at", "status"]

    def validate(self, attrs):
        # prevent past dates
        start_time = attrs.get("start_time")
        if start_time and start_time <= timezone.now():
            raise serializers.ValidationError("Start time must be in the future.")
        return attrs


class RescheduleSerializer(serializers.Serializer):
    start_time = serializers.DateTimeField()
    staff = serializers.PrimaryKeyRelatedField(queryset=Staff.objects.all(), allow_null=True, required=False)

    def validate_start_time(self, value):
        if value <= timezone.now():
            raise serializers.ValidationError("Start time must be in the future.")
        return value
