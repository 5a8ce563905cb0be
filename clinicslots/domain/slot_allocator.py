"""
Core business logic for allocating appointment slots.

Pure domain logic without any external dependencies (no database, no I/O).
Every operation is a deterministic function of the settings value and the
session list it is handed.
"""

from __future__ import annotations

import logging
from datetime import date as date_type, datetime
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Union

import pendulum
from pendulum import DateTime

from .models import (
    DATE_FORMAT,
    SessionReference,
    Slot,
    SuggestedSlot,
    TimeRange,
    format_clock_time,
    parse_clock_time,
    parse_date,
    validate_duration,
)

if TYPE_CHECKING:
    from ..config import SchedulingSettings

logger = logging.getLogger(__name__)

DateLike = Union[str, date_type]

MAX_DAYS_TO_CHECK = 30
SUGGESTION_DAYS_AHEAD = 7
MAX_SUGGESTIONS = 10


class SlotAllocator:
    """
    Computes free appointment start times for a clinic calendar.

    Algorithm:
    1. Walk the working day from its start in steps of duration + buffer
    2. Skip candidates that overlap an existing session on the same date
       (only that doctor's sessions when a doctor id is given)
    3. Return the remaining start times in ascending order
    """

    def __init__(self, settings: SchedulingSettings):
        self.settings = settings

    def get_available_time_slots(
        self,
        date: str,
        existing_sessions: Iterable[SessionReference],
        duration_minutes: Optional[int] = None,
        doctor_id: Optional[str] = None
    ) -> List[str]:
        """
        Find all free start times on one date.

        Args:
            date: Target date (YYYY-MM-DD)
            existing_sessions: Booked sessions, clinic-wide or pre-filtered
            duration_minutes: Session length, defaults to the configured duration
            doctor_id: Only check conflicts against this doctor's sessions

        Returns:
            Zero-padded HH:MM start times in ascending order
        """
        duration = self._resolve_duration(duration_minutes)
        day = parse_date(date)

        if not self.settings.has_working_window:
            logger.debug(
                "Working hours %s-%s do not form a window; no slots available",
                self.settings.working_hours_start,
                self.settings.working_hours_end,
            )
            return []

        busy_ranges = self._busy_ranges_for_day(day, date, existing_sessions, doctor_id)

        slots: List[str] = []
        cursor = self.settings.working_start_minutes
        day_end = self.settings.working_end_minutes

        while cursor + duration <= day_end:
            candidate = TimeRange.on_day(day, cursor, duration)

            if not any(candidate.overlaps(busy) for busy in busy_ranges):
                slots.append(format_clock_time(cursor))

            # Buffer follows every candidate, booked or not
            cursor += duration + self.settings.buffer_minutes

        logger.debug(
            "%d free slot(s) on %s (duration=%d, doctor=%s)",
            len(slots), date, duration, doctor_id,
        )
        return slots

    def get_next_available_slot(
        self,
        start_date: DateLike,
        existing_sessions: Sequence[SessionReference],
        duration_minutes: Optional[int] = None,
        doctor_id: Optional[str] = None
    ) -> Optional[Slot]:
        """
        Scan forward from ``start_date`` (inclusive) for the first free slot.

        Excluded weekdays are skipped. The earliest time on the first day with
        any free slot wins. Returns None when nothing is free within
        ``MAX_DAYS_TO_CHECK`` days.
        """
        duration = self._resolve_duration(duration_minutes)
        start = self._to_day(start_date)

        for day_offset in range(MAX_DAYS_TO_CHECK):
            check_day = start.add(days=day_offset)

            if not self.settings.is_working_day(check_day.weekday()):
                continue

            date_string = check_day.format(DATE_FORMAT)
            available = self.get_available_time_slots(
                date_string, existing_sessions, duration, doctor_id
            )

            if available:
                return Slot(date=date_string, time=available[0])

        logger.info("No free slot within %d days of %s", MAX_DAYS_TO_CHECK, start.format(DATE_FORMAT))
        return None

    def suggest_appointment_times(
        self,
        preferred_date: str,
        existing_sessions: Sequence[SessionReference],
        duration_minutes: Optional[int] = None,
        doctor_id: Optional[str] = None
    ) -> List[SuggestedSlot]:
        """
        Rank free slots on the preferred date and the following week.

        Scoring:
        - Preferred date: 100, +20 for 9-11h, +15 for 14-16h,
          -10 before 9h and -10 after 16h
        - Day i after it: 80 - 5*i, +15 for 9-11h, +10 for 14-16h
          (no early/late penalty on these days)

        The preferred date itself is always considered; later days skip
        excluded weekdays. Returns at most ``MAX_SUGGESTIONS`` entries, best
        first, ties kept in date then time order.
        """
        duration = self._resolve_duration(duration_minutes)
        preferred_day = parse_date(preferred_date)
        suggestions: List[SuggestedSlot] = []

        for time in self.get_available_time_slots(
            preferred_date, existing_sessions, duration, doctor_id
        ):
            suggestions.append(
                SuggestedSlot(date=preferred_date, time=time, score=self._score_preferred(time))
            )

        for offset in range(1, SUGGESTION_DAYS_AHEAD + 1):
            check_day = preferred_day.add(days=offset)

            if not self.settings.is_working_day(check_day.weekday()):
                continue

            date_string = check_day.format(DATE_FORMAT)
            for time in self.get_available_time_slots(
                date_string, existing_sessions, duration, doctor_id
            ):
                suggestions.append(
                    SuggestedSlot(date=date_string, time=time, score=self._score_later(time, offset))
                )

        # sorted() is stable, so equal scores keep generation order
        ranked = sorted(suggestions, key=lambda s: s.score, reverse=True)
        return ranked[:MAX_SUGGESTIONS]

    def get_notification_time(self, appointment_date: str, appointment_time: str) -> DateTime:
        """Return when the reminder for an appointment is due."""
        appointment = self._appointment_datetime(appointment_date, appointment_time)
        return appointment.subtract(hours=self.settings.notification_lead_time_hours)

    def should_send_notification(
        self,
        appointment_date: str,
        appointment_time: str,
        now: Optional[datetime] = None
    ) -> bool:
        """
        Check whether the reminder window for an appointment is open.

        True from the notification time up to, but excluding, the appointment
        itself. The caller is responsible for not sending twice. A naive
        ``now`` is read as wall-clock time in the configured timezone.
        """
        appointment = self._appointment_datetime(appointment_date, appointment_time)
        notification_time = self.get_notification_time(appointment_date, appointment_time)
        if now is None:
            current = pendulum.now(self.settings.timezone)
        else:
            current = pendulum.instance(now, tz=self.settings.timezone)

        return notification_time <= current < appointment

    def _resolve_duration(self, duration_minutes: Optional[int]) -> int:
        if duration_minutes is None:
            return self.settings.default_duration_minutes
        return validate_duration(duration_minutes)

    def _busy_ranges_for_day(
        self,
        day: DateTime,
        date: str,
        existing_sessions: Iterable[SessionReference],
        doctor_id: Optional[str]
    ) -> List[TimeRange]:
        """
        Collect the occupied intervals that can conflict on ``date``.

        Dates match on exact string equality. With a doctor filter, sessions
        without a doctor id never block.
        """
        busy: List[TimeRange] = []

        for session in existing_sessions:
            if session.date != date:
                continue
            if doctor_id and session.doctor_id != doctor_id:
                continue
            busy.append(session.time_range(day))

        return busy

    def _appointment_datetime(self, appointment_date: str, appointment_time: str) -> DateTime:
        day = parse_date(appointment_date, tz=self.settings.timezone)
        minutes = parse_clock_time(appointment_time)
        return day.set(hour=minutes // 60, minute=minutes % 60)

    @staticmethod
    def _to_day(value: DateLike) -> DateTime:
        if isinstance(value, str):
            return parse_date(value)
        if isinstance(value, date_type):
            return pendulum.datetime(value.year, value.month, value.day, tz="UTC")
        raise TypeError(f"Expected a date or YYYY-MM-DD string, got {type(value).__name__}")

    @staticmethod
    def _score_preferred(time: str) -> int:
        hour = parse_clock_time(time) // 60
        score = 100

        # Morning and afternoon peak times
        if 9 <= hour <= 11:
            score += 20
        if 14 <= hour <= 16:
            score += 15

        if hour < 9:
            score -= 10
        if hour > 16:
            score -= 10

        return score

    @staticmethod
    def _score_later(time: str, days_ahead: int) -> int:
        hour = parse_clock_time(time) // 60
        score = 80 - days_ahead * 5

        if 9 <= hour <= 11:
            score += 15
        if 14 <= hour <= 16:
            score += 10

        return score
