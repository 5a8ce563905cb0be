"""
Adapters layer - Settings persistence and session data sources.
"""

from .session_source import DEMO_SESSIONS_FILE, JsonSessionSource, SessionSource
from .settings_store import SETTINGS_KEY, MappingSettingsStore, SettingsStore, YamlSettingsStore

__all__ = [
    "DEMO_SESSIONS_FILE",
    "JsonSessionSource",
    "SessionSource",
    "SETTINGS_KEY",
    "MappingSettingsStore",
    "SettingsStore",
    "YamlSettingsStore",
]
