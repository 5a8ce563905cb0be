"""
Domain layer - Pure scheduling logic without I/O.
"""

from .exceptions import InvalidSchedulingInputError, SchedulingError, SettingsStoreError
from .models import SessionReference, Slot, SuggestedSlot, TimeRange
from .slot_allocator import SlotAllocator

__all__ = [
    "InvalidSchedulingInputError",
    "SchedulingError",
    "SettingsStoreError",
    "SessionReference",
    "Slot",
    "SuggestedSlot",
    "TimeRange",
    "SlotAllocator",
]
