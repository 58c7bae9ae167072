from django.db import transaction
from rest_framework import serializers
from .models import StaffAvailability, StaffBreak


class StaffBreakSerializer(serializers.ModelSerializer):
    start_time = serializers.TimeField(format="%H:%M")
    end_time = serializers.TimeField(format="%H:%M")

    class Meta:
        model = StaffBreak
        fields = ["id", "start_time", "end_time"]


class StaffAvailabilitySerializer(serializers.ModelSerializer):
    """
    One working window per staff member and day of week, with its breaks.
    Writing 'breaks' replaces the stored list.
    """
    start_time = serializers.TimeField(format="%H:%M")
    end_time = serializers.TimeField(format="%H:%M")
    day_of_week = serializers.IntegerField(min_value=0, max_value=6)
    breaks = StaffBreakSerializer(many=True, required=False)

    class Meta:
        model = StaffAvailability
        fields = ["id", "staff", "day_of_week", "start_time", "end_time", "is_available", "breaks"]
        # Uniqueness is checked in validate() with a friendlier message.
        validators = []

    def validate(self, attrs):
        instance = self.instance
        staff = attrs.get("staff", getattr(instance, "staff", None))
        day = attrs.get("day_of_week", getattr(instance, "day_of_week", None))
        start = attrs.get("start_time", getattr(instance, "start_time", None))
        end = attrs.get("end_time", getattr(instance, "end_time", None))

        if start is not None and end is not None and start >= end:
            raise serializers.ValidationError({"end_time": "End time must be after start time."})

        dupes = StaffAvailability.objects.filter(staff=staff, day_of_week=day)
        if instance is not None:
            dupes = dupes.exclude(pk=instance.pk)
        if dupes.exists():
            raise serializers.ValidationError(
                {"day_of_week": "This staff member already has hours for that day."}
            )

        breaks = attrs.get("breaks")
        if breaks is None and instance is not None:
            # Stored breaks must still fit when only the hours change.
            breaks = [{"start_time": b.start_time, "end_time": b.end_time} for b in instance.breaks.all()]
        for brk in breaks or ():
            if brk["start_time"] >= brk["end_time"]:
                raise serializers.ValidationError({"breaks": "Break end must be after break start."})
            if brk["start_time"] < start or brk["end_time"] > end:
                raise serializers.ValidationError({"breaks": "Breaks must fall inside the working hours."})
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        breaks = validated_data.pop("breaks", [])
        availability = StaffAvailability.objects.create(**validated_data)
        for brk in breaks:
            StaffBreak.objects.create(availability=availability, **brk)
        return availability

    @transaction.atomic
    def update(self, instance, validated_data):
        breaks = validated_data.pop("breaks", None)
        instance = super().update(instance, validated_data)
        if breaks is not None:
            instance.breaks.all().delete()
            for brk in breaks:
                StaffBreak.objects.create(availability=instance, **brk)
        return instance
