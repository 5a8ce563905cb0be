"""
Scheduling configuration using Pydantic models.
"""

from datetime import time
from pathlib import Path
from typing import Any, Tuple

import pendulum
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .domain.models import parse_clock_time

DEFAULT_CONFIG_FILENAME = "clinicslots.yaml"


class SchedulingSettings(BaseModel):
    """
    Clinic-wide scheduling configuration.

    Instances are plain values handed to the allocator; loading and saving is
    the job of a settings store. ``working_hours_end`` at or before
    ``working_hours_start`` is accepted and simply yields no slots.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    default_duration_minutes: int = Field(default=60, alias="defaultDuration")
    notification_lead_time_hours: int = Field(default=24, alias="notificationLeadTime")
    working_hours_start: time = Field(default=time(9, 0), alias="workingHoursStart")
    working_hours_end: time = Field(default=time(17, 0), alias="workingHoursEnd")
    buffer_minutes: int = Field(default=15, alias="bufferTime")
    auto_reminders_enabled: bool = Field(default=True, alias="autoReminders")
    auto_confirmation_enabled: bool = Field(default=True, alias="autoConfirmation")
    exclude_weekdays: Tuple[int, ...] = (5, 6)  # Saturday, Sunday
    timezone: str = "UTC"

    @field_validator("default_duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure the default session duration is positive."""
        if value <= 0:
            raise ValueError("default_duration_minutes must be greater than zero")
        return value

    @field_validator("notification_lead_time_hours", "buffer_minutes")
    @classmethod
    def validate_non_negative(cls, value: int) -> int:
        """Lead time and buffer may be zero but never negative."""
        if value < 0:
            raise ValueError(f"Value must not be negative, got {value}")
        return value

    @field_validator("working_hours_start", "working_hours_end", mode="before")
    @classmethod
    def coerce_clock_time(cls, value: Any) -> Any:
        """
        Parse HH:MM strings with the same strict rules as session times.

        Minutes since midnight are accepted too (YAML reads unquoted 17:00 as 1020).
        """
        if isinstance(value, str):
            minutes = parse_clock_time(value)
            return time(hour=minutes // 60, minute=minutes % 60)
        if isinstance(value, int) and not isinstance(value, bool):
            if not 0 <= value < 24 * 60:
                raise ValueError(f"Time of day out of range: {value}")
            return time(hour=value // 60, minute=value % 60)
        return value

    @field_validator("working_hours_start", "working_hours_end")
    @classmethod
    def truncate_seconds(cls, value: time) -> time:
        """Working hours are minute-granular."""
        return value.replace(second=0, microsecond=0)

    @field_validator("exclude_weekdays")
    @classmethod
    def validate_exclude_weekdays(cls, value: Tuple[int, ...]) -> Tuple[int, ...]:
        """Ensure weekdays are in valid range and deduplicated."""
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"exclude_weekdays must be between 0 and 6, got {invalid_days}")
        # Preserve order while removing duplicates
        seen: set[int] = set()
        deduped: list[int] = []
        for day in value:
            if day not in seen:
                deduped.append(day)
                seen.add(day)
        return tuple(deduped)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Reject unknown IANA timezone names early."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_serializer("working_hours_start", "working_hours_end")
    def serialize_clock_time(self, value: time) -> str:
        return value.strftime("%H:%M")

    @property
    def working_start_minutes(self) -> int:
        """Start of the working day in minutes since midnight."""
        return self.working_hours_start.hour * 60 + self.working_hours_start.minute

    @property
    def working_end_minutes(self) -> int:
        """End of the working day in minutes since midnight."""
        return self.working_hours_end.hour * 60 + self.working_hours_end.minute

    @property
    def has_working_window(self) -> bool:
        """True when the working day has a positive length."""
        return self.working_end_minutes > self.working_start_minutes

    def is_working_day(self, weekday: int) -> bool:
        """Check a weekday (0=Monday, 6=Sunday) against the excluded days."""
        return weekday not in self.exclude_weekdays

    def to_dict(self) -> dict:
        """Return a plain mapping suitable for YAML or JSON storage."""
        return self.model_dump(mode="json")


DEFAULT_SETTINGS = SchedulingSettings()


def load_settings_mapping(config_path: Path) -> dict:
    """
    Read a YAML file that must contain a mapping at the root level.

    Args:
        config_path: Path to the YAML file

    Returns:
        The parsed mapping (empty when the file is empty)

    Raises:
        ValueError: If the file is not valid YAML or not a mapping
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping at the root level.")

    return data


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for clinicslots.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / DEFAULT_CONFIG_FILENAME

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / DEFAULT_CONFIG_FILENAME

    return config_path
