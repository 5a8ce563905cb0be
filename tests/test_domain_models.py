"""
Tests for domain models.
"""

import pendulum
import pytest

from clinicslots.domain.exceptions import InvalidSchedulingInputError
from clinicslots.domain.models import (
    SessionReference,
    Slot,
    SuggestedSlot,
    TimeRange,
    format_clock_time,
    parse_clock_time,
    parse_date,
)


class TestTimeRange:
    """Tests for TimeRange model."""

    def test_create_valid_time_range(self):
        """Test creating a valid time range."""
        start = pendulum.parse("2024-01-15 09:00", tz="UTC")
        end = pendulum.parse("2024-01-15 17:00", tz="UTC")

        tr = TimeRange(start=start, end=end)

        assert tr.start == start
        assert tr.end == end

    def test_invalid_time_range_raises_error(self):
        """Test that creating an invalid time range raises ValueError."""
        start = pendulum.parse("2024-01-15 17:00", tz="UTC")
        end = pendulum.parse("2024-01-15 09:00", tz="UTC")

        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            TimeRange(start=start, end=end)

    def test_overlaps(self):
        """Test overlap detection."""
        day = parse_date("2024-01-15")
        tr1 = TimeRange.on_day(day, 9 * 60, 180)   # 09:00-12:00
        tr2 = TimeRange.on_day(day, 11 * 60, 180)  # 11:00-14:00
        tr3 = TimeRange.on_day(day, 14 * 60, 180)  # 14:00-17:00

        assert tr1.overlaps(tr2)
        assert tr2.overlaps(tr1)
        assert not tr1.overlaps(tr3)

    def test_touching_ranges_do_not_overlap(self):
        """Half-open ranges that share only an endpoint are compatible."""
        day = parse_date("2024-01-15")
        first = TimeRange.on_day(day, 9 * 60, 60)
        second = TimeRange.on_day(day, 10 * 60, 60)

        assert not first.overlaps(second)
        assert not second.overlaps(first)

    def test_contained_range_overlaps(self):
        day = parse_date("2024-01-15")
        outer = TimeRange.on_day(day, 9 * 60, 120)
        inner = TimeRange.on_day(day, 9 * 60 + 30, 30)

        assert outer.overlaps(inner)
        assert inner.overlaps(outer)

    def test_on_day_crosses_midnight(self):
        day = parse_date("2024-01-15")
        late = TimeRange.on_day(day, 23 * 60 + 30, 60)

        assert late.end == pendulum.datetime(2024, 1, 16, 0, 30, tz="UTC")


class TestClockHelpers:
    """Tests for date and time parsing helpers."""

    def test_parse_clock_time(self):
        assert parse_clock_time("00:00") == 0
        assert parse_clock_time("09:30") == 570
        assert parse_clock_time("17:00") == 1020

    @pytest.mark.parametrize("value", ["noon", "", "9h30", None, "9:00", "9:5", "09:5"])
    def test_parse_clock_time_rejects_malformed(self, value):
        with pytest.raises(InvalidSchedulingInputError):
            parse_clock_time(value)

    def test_format_clock_time_zero_pads(self):
        assert format_clock_time(545) == "09:05"
        assert format_clock_time(0) == "00:00"
        assert format_clock_time(1020) == "17:00"

    def test_parse_date(self):
        day = parse_date("2024-01-15")

        assert (day.year, day.month, day.day) == (2024, 1, 15)
        assert (day.hour, day.minute) == (0, 0)

    @pytest.mark.parametrize("value", ["15.01.2024", "tomorrow", "2024-13-01", "2024-1-15", "2024-01-5"])
    def test_parse_date_rejects_malformed(self, value):
        with pytest.raises(InvalidSchedulingInputError):
            parse_date(value)


class TestSessionReference:
    """Tests for SessionReference model."""

    def test_from_mapping_with_record_keys(self):
        """Records from the clinic datastore use duration/practitioner keys."""
        session = SessionReference.from_mapping({
            "date": "2024-01-15",
            "time": "09:00",
            "duration": 60,
            "doctor_id": "D1",
            "practitioner": "Dr. Sharma",
        })

        assert session == SessionReference(
            date="2024-01-15",
            time="09:00",
            duration_minutes=60,
            doctor_id="D1",
            practitioner_name="Dr. Sharma",
        )

    def test_from_mapping_blank_doctor_is_unassigned(self):
        session = SessionReference.from_mapping({
            "date": "2024-01-15", "time": "09:00", "duration": 45, "doctor_id": "",
        })

        assert session.doctor_id is None
        assert session.practitioner_name is None

    def test_from_mapping_missing_field(self):
        with pytest.raises(InvalidSchedulingInputError, match="time"):
            SessionReference.from_mapping({"date": "2024-01-15", "duration": 60})

    def test_invalid_time_raises(self):
        with pytest.raises(InvalidSchedulingInputError):
            SessionReference(date="2024-01-15", time="late", duration_minutes=60)

    def test_unpadded_date_raises(self):
        """Dates are compared as strings, so 2024-1-15 would never match 2024-01-15."""
        with pytest.raises(InvalidSchedulingInputError):
            SessionReference(date="2024-1-15", time="09:00", duration_minutes=60)

    def test_unpadded_time_raises(self):
        with pytest.raises(InvalidSchedulingInputError):
            SessionReference(date="2024-01-15", time="9:00", duration_minutes=60)

    @pytest.mark.parametrize("duration", [0, -15, True, "60", None])
    def test_invalid_duration_raises(self, duration):
        with pytest.raises(InvalidSchedulingInputError):
            SessionReference(date="2024-01-15", time="09:00", duration_minutes=duration)

    def test_time_range(self):
        session = SessionReference(date="2024-01-15", time="10:15", duration_minutes=45)
        occupied = session.time_range(parse_date("2024-01-15"))

        assert occupied.start == pendulum.datetime(2024, 1, 15, 10, 15, tz="UTC")
        assert occupied.end == pendulum.datetime(2024, 1, 15, 11, 0, tz="UTC")


class TestSlot:
    """Tests for Slot values."""

    def test_format_display(self):
        slot = Slot(date="2024-01-15", time="09:00")

        assert slot.format_display() == "Monday, 15.01.2024 | 09:00"

    def test_suggested_slot_carries_score(self):
        suggestion = SuggestedSlot(date="2024-01-15", time="09:00", score=120)

        assert suggestion.score == 120
        assert suggestion != SuggestedSlot(date="2024-01-15", time="09:00", score=100)
