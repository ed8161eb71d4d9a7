"""
Common Value Objects

Value objects used across the department and booking contexts:
- ClockTime: A wall-clock time of day with minute precision ("HH:MM")
- TimeWindow: A half-open range of clock times ("HH:MM-HH:MM")
"""

from dataclasses import dataclass

from shared.domain.base import ValueObject

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True, order=True)
class ClockTime(ValueObject):
    """
    Clock time value object

    Stored as minutes since midnight so arithmetic and ordering are trivial.
    """
    minutes: int

    def __post_init__(self):
        if not 0 <= self.minutes <= MINUTES_PER_DAY:
            raise ValueError(f"Clock time out of range: {self.minutes} minutes")

    @classmethod
    def parse(cls, value: str) -> 'ClockTime':
        """Parse "HH:MM" (also accepts "H:MM")"""
        if not value or ':' not in value:
            raise ValueError(f"Invalid clock time: {value!r}")
        hours, _, minutes = value.strip().partition(':')
        if not hours.isdigit() or not minutes.isdigit() or len(minutes) != 2:
            raise ValueError(f"Invalid clock time: {value!r}")
        hours_i, minutes_i = int(hours), int(minutes)
        if hours_i > 24 or minutes_i > 59 or (hours_i == 24 and minutes_i):
            raise ValueError(f"Invalid clock time: {value!r}")
        return cls(hours_i * 60 + minutes_i)

    @classmethod
    def from_time(cls, value) -> 'ClockTime':
        """Build from a ``datetime.time``"""
        return cls(value.hour * 60 + value.minute)

    def plus(self, minutes: int) -> 'ClockTime':
        return ClockTime(self.minutes + minutes)

    def __str__(self):
        return f"{self.minutes // 60:02d}:{self.minutes % 60:02d}"

    def __repr__(self):
        return f"ClockTime('{self}')"


@dataclass(frozen=True)
class TimeWindow(ValueObject):
    """
    Time window value object

    Represents a range from start (inclusive) to end (exclusive).
    Used for working hours, slot bounds and slot labels.
    """
    start: ClockTime
    end: ClockTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Window start ({self.start}) must be before end ({self.end})")

    @classmethod
    def parse(cls, label: str) -> 'TimeWindow':
        """Parse a slot label such as "10:00-10:15" """
        start, sep, end = (label or '').partition('-')
        if not sep:
            raise ValueError(f"Invalid time window: {label!r}")
        return cls(ClockTime.parse(start), ClockTime.parse(end))

    def intersect(self, other: 'TimeWindow') -> 'TimeWindow | None':
        """Overlap of two windows, or None when they do not overlap"""
        start = max(self.start, other.start)
        end = min(self.end, other.end)
        if start >= end:
            return None
        return TimeWindow(start, end)

    def contains(self, moment: ClockTime) -> bool:
        return self.start <= moment < self.end

    @property
    def minutes(self) -> int:
        return self.end.minutes - self.start.minutes

    @property
    def label(self) -> str:
        return f"{self.start}-{self.end}"

    def __str__(self):
        return self.label

    def __repr__(self):
        return f"TimeWindow('{self.label}')"
