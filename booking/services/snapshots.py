"""
snapshots.py
------------
Plain read-only records handed to the scheduling functions.

The scheduling code only reads attributes, so ORM rows with the same
attribute names (e.g. booking.models.Booking) can be passed directly.
StaffAvailability rows are converted with StaffAvailability.to_window()
because their breaks live in a related table.
"""

from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Optional, Tuple, Union

TimeLike = Union[str, time]


@dataclass(frozen=True)
class BreakTime:
    start_time: TimeLike
    end_time: TimeLike


@dataclass(frozen=True)
class WeeklyWindow:
    """Working hours for one day of the week (0 = Sunday)."""
    day_of_week: int
    start_time: TimeLike
    end_time: TimeLike
    is_available: bool = True
    breaks: Tuple[BreakTime, ...] = field(default_factory=tuple)
    staff_id: Optional[int] = None


@dataclass(frozen=True)
class AppointmentSnapshot:
    id: Optional[int]
    start_time: datetime
    duration_minutes: int
    status: str = "SCHEDULED"
    service_id: Optional[int] = None
    staff_id: Optional[int] = None
