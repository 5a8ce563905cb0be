"""
Domain models for session references, slots and time ranges.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import pendulum
from pendulum import DateTime

from .exceptions import InvalidSchedulingInputError

DATE_FORMAT = "YYYY-MM-DD"
TIME_FORMAT = "HH:mm"

# Clock times are parsed against a fixed day so the result never depends on "today".
_REFERENCE_DAY = "2000-01-01"


def parse_date(value: str, tz: str = "UTC") -> DateTime:
    """
    Parse a YYYY-MM-DD calendar date into the start of that day.

    Raises:
        InvalidSchedulingInputError: If the value is not a valid date string
    """
    try:
        parsed = pendulum.from_format(value, DATE_FORMAT, tz=tz)
    except (TypeError, ValueError) as exc:
        raise InvalidSchedulingInputError(f"Invalid date {value!r}, expected YYYY-MM-DD") from exc

    # Sessions match on exact strings, so only the zero-padded form is accepted
    if parsed.format(DATE_FORMAT) != value:
        raise InvalidSchedulingInputError(f"Invalid date {value!r}, expected YYYY-MM-DD")

    return parsed.start_of("day")


def parse_clock_time(value: str) -> int:
    """
    Parse an HH:MM time of day into minutes since midnight.

    Raises:
        InvalidSchedulingInputError: If the value is not a valid time string
    """
    if not isinstance(value, str):
        raise InvalidSchedulingInputError(f"Invalid time {value!r}, expected HH:MM")
    try:
        parsed = pendulum.from_format(f"{_REFERENCE_DAY} {value}", f"{DATE_FORMAT} {TIME_FORMAT}")
    except ValueError as exc:
        raise InvalidSchedulingInputError(f"Invalid time {value!r}, expected HH:MM") from exc

    minutes = parsed.hour * 60 + parsed.minute
    if format_clock_time(minutes) != value:
        raise InvalidSchedulingInputError(f"Invalid time {value!r}, expected HH:MM")

    return minutes


def format_clock_time(minutes: int) -> str:
    """Format minutes since midnight as a zero-padded HH:MM string."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def validate_duration(value: Any) -> int:
    """Ensure a duration is a positive number of minutes."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidSchedulingInputError(f"Duration must be an integer number of minutes, got {value!r}")
    if value <= 0:
        raise InvalidSchedulingInputError(f"Duration must be greater than zero, got {value}")
    return value


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable half-open time range [start, end).

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    @classmethod
    def on_day(cls, day: DateTime, start_minutes: int, duration_minutes: int) -> "TimeRange":
        """Build a range starting ``start_minutes`` after midnight of ``day``."""
        start = day.add(minutes=start_minutes)
        return cls(start=start, end=start.add(minutes=duration_minutes))

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another."""
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class SessionReference:
    """
    Read-only projection of an existing therapy session.

    ``practitioner_name`` is the legacy identity for sessions booked before
    doctor ids existed. The allocator only ever filters on ``doctor_id``.
    """
    date: str
    time: str
    duration_minutes: int
    doctor_id: Optional[str] = None
    practitioner_name: Optional[str] = None

    def __post_init__(self):
        parse_date(self.date)
        parse_clock_time(self.time)
        validate_duration(self.duration_minutes)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SessionReference":
        """
        Build a session reference from a stored session record.

        Accepts both the snake_case field names and the record keys used by
        the clinic datastore (``duration``, ``doctorId``, ``practitioner``).
        """
        try:
            date = data["date"]
            time = data["time"]
        except KeyError as exc:
            raise InvalidSchedulingInputError(f"Session is missing field {exc.args[0]!r}") from exc

        duration = data.get("duration_minutes", data.get("duration"))
        doctor_id = data.get("doctor_id", data.get("doctorId"))
        practitioner = data.get("practitioner_name", data.get("practitioner"))

        return cls(
            date=date,
            time=time,
            duration_minutes=duration,
            doctor_id=str(doctor_id) if doctor_id not in (None, "") else None,
            practitioner_name=practitioner or None,
        )

    def start_minutes(self) -> int:
        """Return the start time as minutes since midnight."""
        return parse_clock_time(self.time)

    def time_range(self, day: DateTime) -> TimeRange:
        """Return the occupied interval, anchored on the already-parsed ``day``."""
        return TimeRange.on_day(day, self.start_minutes(), self.duration_minutes)


@dataclass(frozen=True)
class Slot:
    """
    A free start time on a given date.
    """
    date: str
    time: str

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: Weekday, DD.MM.YYYY | HH:MM
        """
        day = parse_date(self.date)
        return f"{day.format('dddd, DD.MM.YYYY')} | {self.time}"


@dataclass(frozen=True)
class SuggestedSlot(Slot):
    """
    A free slot ranked for presentation; higher scores are better.
    """
    score: int = 0
