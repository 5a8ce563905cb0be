"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .scheduling import SchedulingService

__all__ = ["SchedulingService"]
