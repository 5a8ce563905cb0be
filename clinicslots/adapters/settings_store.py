"""
Persistence adapters for the scheduling settings.

Settings live under one well-known key, either in an arbitrary string
key-value mapping (the in-memory demo mode uses a plain dict) or in a YAML
file. Unreadable or invalid stored data falls back to the defaults.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import MutableMapping, Optional, Protocol

import yaml
from pydantic import ValidationError

from ..config import DEFAULT_SETTINGS, SchedulingSettings, load_settings_mapping
from ..domain.exceptions import SettingsStoreError

logger = logging.getLogger(__name__)

SETTINGS_KEY = "clinic_scheduling_settings"


class SettingsStore(Protocol):
    """Protocol describing the persistence behaviour needed by the service."""

    def load(self) -> SchedulingSettings:
        """Return the stored settings, or the defaults when none are stored."""

    def save(self, settings: SchedulingSettings) -> bool:
        """Persist settings; return False when they could not be written."""

    def reset(self) -> SchedulingSettings:
        """Drop stored settings and return the defaults."""


def _validate_stored(data: object, source: str) -> SchedulingSettings:
    if not isinstance(data, dict):
        logger.warning("Stored settings in %s are not a mapping; using defaults", source)
        return DEFAULT_SETTINGS

    try:
        return SchedulingSettings.model_validate(data)
    except ValidationError as exc:
        logger.warning("Stored settings in %s are invalid; using defaults: %s", source, exc)
        return DEFAULT_SETTINGS


class MappingSettingsStore:
    """
    Stores settings as a JSON document in a string key-value mapping.
    """

    def __init__(
        self,
        mapping: Optional[MutableMapping[str, str]] = None,
        key: str = SETTINGS_KEY
    ):
        self.mapping: MutableMapping[str, str] = mapping if mapping is not None else {}
        self.key = key

    def load(self) -> SchedulingSettings:
        stored = self.mapping.get(self.key)
        if not stored:
            return DEFAULT_SETTINGS

        try:
            data = json.loads(stored)
        except (TypeError, ValueError) as exc:
            logger.warning("Could not decode stored settings under %r: %s", self.key, exc)
            return DEFAULT_SETTINGS

        return _validate_stored(data, repr(self.key))

    def save(self, settings: SchedulingSettings) -> bool:
        self.mapping[self.key] = settings.model_dump_json()
        return True

    def reset(self) -> SchedulingSettings:
        self.mapping.pop(self.key, None)
        return DEFAULT_SETTINGS


class YamlSettingsStore:
    """
    Stores settings under ``key`` in a YAML file.

    Other top-level entries in the file are left untouched on save.
    """

    def __init__(self, path: Path, key: str = SETTINGS_KEY):
        self.path = Path(path)
        self.key = key

        if self.path.exists() and self.path.is_dir():
            raise SettingsStoreError(f"Settings path {self.path} is a directory")

    def load(self) -> SchedulingSettings:
        if not self.path.exists():
            logger.debug("No settings file at %s; using defaults", self.path)
            return DEFAULT_SETTINGS

        try:
            document = load_settings_mapping(self.path)
        except (OSError, ValueError) as exc:
            logger.warning("Could not load settings file %s: %s", self.path, exc)
            return DEFAULT_SETTINGS

        if self.key not in document:
            return DEFAULT_SETTINGS

        return _validate_stored(document[self.key], str(self.path))

    def save(self, settings: SchedulingSettings) -> bool:
        document = self._read_document()
        document[self.key] = settings.to_dict()

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as file_handle:
                yaml.safe_dump(document, file_handle, sort_keys=False)
        except OSError as exc:
            logger.warning("Could not save settings to %s: %s", self.path, exc)
            return False

        return True

    def reset(self) -> SchedulingSettings:
        document = self._read_document()

        if document.pop(self.key, None) is not None:
            try:
                with open(self.path, "w", encoding="utf-8") as file_handle:
                    yaml.safe_dump(document, file_handle, sort_keys=False)
            except OSError as exc:
                logger.warning("Could not reset settings in %s: %s", self.path, exc)

        return DEFAULT_SETTINGS

    def _read_document(self) -> dict:
        if not self.path.exists():
            return {}

        try:
            return load_settings_mapping(self.path)
        except (OSError, ValueError) as exc:
            logger.warning("Overwriting unreadable settings file %s: %s", self.path, exc)
            return {}
