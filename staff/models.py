# staff/models.py
from django.db import models

from booking.services.snapshots import BreakTime, WeeklyWindow


class StaffAvailability(models.Model):
    """
    Weekly working hours of a staff member for one day of the week.
    Points to booking.Staff to avoid having two Staff models.

    day_of_week uses 0 = Sunday .. 6 = Saturday. Times are wall-clock values
    in the business time zone (settings.TIME_ZONE).
    """
    DAY_CHOICES = [
        (0, "Sunday"),
        (1, "Monday"),
        (2, "Tuesday"),
        (3, "Wednesday"),
        (4, "Thursday"),
        (5, "Friday"),
        (6, "Saturday"),
    ]

    staff = models.ForeignKey(
        "booking.Staff",                 # ← reference booking app model
        on_delete=models.CASCADE,
        related_name="availabilities",
    )
    day_of_week = models.PositiveSmallIntegerField(choices=DAY_CHOICES)
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_available = models.BooleanField(default=True)

    class Meta:
        ordering = ["staff_id", "day_of_week"]
        constraints = [
            models.UniqueConstraint(
                fields=["staff", "day_of_week"],
                name="uniq_staff_availability_per_day",
            ),
        ]

    def __str__(self):
        return (
            f"{self.staff.name}: {self.get_day_of_week_display()} "
            f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"
        )

    def to_window(self) -> WeeklyWindow:
        return WeeklyWindow(
            day_of_week=self.day_of_week,
            start_time=self.start_time,
            end_time=self.end_time,
            is_available=self.is_available,
            breaks=tuple(
                BreakTime(start_time=b.start_time, end_time=b.end_time)
                for b in self.breaks.all()
            ),
            staff_id=self.staff_id,
        )


class StaffBreak(models.Model):
    """
    A break (e.g. lunch) nested inside one StaffAvailability window.
    """
    availability = models.ForeignKey(
        StaffAvailability,
        on_delete=models.CASCADE,
        related_name="breaks",
    )
    start_time = models.TimeField()
    end_time = models.TimeField()

    class Meta:
        ordering = ["availability_id", "start_time"]

    def __str__(self):
        return f"Break {self.start_time:%H:%M} - {self.end_time:%H:%M}"
