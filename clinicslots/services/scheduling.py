"""
Application services for clinic appointment scheduling.

The service reads the current settings through a store adapter and delegates
the slot computations to the domain-level ``SlotAllocator``. Settings are
reloaded on every call so edits made elsewhere apply immediately, and the
store dependency can be swapped for an in-memory one in tests.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from pendulum import DateTime
from pydantic import ValidationError

from ..adapters.session_source import SessionSource
from ..adapters.settings_store import SettingsStore
from ..config import SchedulingSettings
from ..domain.exceptions import InvalidSchedulingInputError
from ..domain.models import SessionReference, Slot, SuggestedSlot
from ..domain.slot_allocator import DateLike, SlotAllocator

logger = logging.getLogger(__name__)


class SchedulingService:
    """
    Orchestrates settings persistence, session retrieval and slot allocation.
    """

    def __init__(
        self,
        settings_store: SettingsStore,
        session_source: Optional[SessionSource] = None,
    ) -> None:
        self._settings_store = settings_store
        self._session_source = session_source

    def get_settings(self) -> SchedulingSettings:
        """Return the current settings (defaults when none are stored)."""
        return self._settings_store.load()

    def update_settings(self, **changes: Any) -> SchedulingSettings:
        """
        Apply a partial update to the stored settings.

        Raises:
            InvalidSchedulingInputError: If the resulting settings are invalid
        """
        current = self.get_settings()

        try:
            updated = SchedulingSettings.model_validate({**current.to_dict(), **changes})
        except ValidationError as exc:
            raise InvalidSchedulingInputError(f"Invalid settings: {exc}") from exc

        if not updated.has_working_window:
            logger.warning(
                "Working hours end (%s) is not after start (%s); no slots will be offered",
                updated.working_hours_end,
                updated.working_hours_start,
            )

        if not self._settings_store.save(updated):
            logger.warning("Settings could not be persisted; change applies to this call only")

        return updated

    def reset_settings(self) -> SchedulingSettings:
        """Drop stored settings and return the defaults."""
        return self._settings_store.reset()

    def allocator(self) -> SlotAllocator:
        """Build an allocator bound to the current settings."""
        return SlotAllocator(settings=self.get_settings())

    def get_sessions(self, sessions: Optional[Sequence[SessionReference]] = None) -> List[SessionReference]:
        """Return explicitly passed sessions, else those of the session source."""
        if sessions is not None:
            return list(sessions)
        if self._session_source is None:
            return []
        return self._session_source.get_sessions()

    def get_available_time_slots(
        self,
        date: str,
        sessions: Optional[Sequence[SessionReference]] = None,
        duration_minutes: Optional[int] = None,
        doctor_id: Optional[str] = None,
    ) -> List[str]:
        return self.allocator().get_available_time_slots(
            date, self.get_sessions(sessions), duration_minutes, doctor_id
        )

    def get_next_available_slot(
        self,
        start_date: DateLike,
        sessions: Optional[Sequence[SessionReference]] = None,
        duration_minutes: Optional[int] = None,
        doctor_id: Optional[str] = None,
    ) -> Optional[Slot]:
        return self.allocator().get_next_available_slot(
            start_date, self.get_sessions(sessions), duration_minutes, doctor_id
        )

    def suggest_appointment_times(
        self,
        preferred_date: str,
        sessions: Optional[Sequence[SessionReference]] = None,
        duration_minutes: Optional[int] = None,
        doctor_id: Optional[str] = None,
    ) -> List[SuggestedSlot]:
        return self.allocator().suggest_appointment_times(
            preferred_date, self.get_sessions(sessions), duration_minutes, doctor_id
        )

    def get_notification_time(self, appointment_date: str, appointment_time: str) -> DateTime:
        return self.allocator().get_notification_time(appointment_date, appointment_time)

    def should_send_notification(
        self,
        appointment_date: str,
        appointment_time: str,
        now: Optional[DateTime] = None,
    ) -> bool:
        return self.allocator().should_send_notification(appointment_date, appointment_time, now)

    def sessions_due_for_reminder(
        self,
        sessions: Optional[Sequence[SessionReference]] = None,
        now: Optional[DateTime] = None,
    ) -> List[SessionReference]:
        """
        Return sessions whose reminder window is currently open.

        Empty when automatic reminders are switched off. Nothing is recorded
        about sent reminders; the dispatcher has to deduplicate.
        """
        allocator = self.allocator()

        if not allocator.settings.auto_reminders_enabled:
            logger.debug("Automatic reminders disabled; nothing to send")
            return []

        return [
            session
            for session in self.get_sessions(sessions)
            if allocator.should_send_notification(session.date, session.time, now)
        ]
