"""
Session sources that feed existing bookings to the allocator.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Protocol

from ..domain.exceptions import InvalidSchedulingInputError
from ..domain.models import SessionReference

logger = logging.getLogger(__name__)

DEMO_SESSIONS_FILE = Path(__file__).parent / "demo_sessions.json"


class SessionSource(Protocol):
    """Protocol describing where booked sessions come from."""

    def get_sessions(self) -> List[SessionReference]:
        """Return all booked sessions."""


class JsonSessionSource:
    """
    Loads booked sessions from a JSON array of session records.

    Without a path the bundled demo calendar is used, which lets the
    application run without a datastore.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else DEMO_SESSIONS_FILE

    @property
    def is_demo(self) -> bool:
        """True when serving the bundled demo data."""
        return self.path == DEMO_SESSIONS_FILE

    def get_sessions(self) -> List[SessionReference]:
        """
        Read and validate session records.

        Returns:
            Valid sessions in file order; malformed records are skipped

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is not a JSON array
        """
        if not self.path.exists():
            raise FileNotFoundError(f"Sessions file not found: {self.path}")

        with open(self.path, "r", encoding="utf-8") as f:
            try:
                records = json.load(f)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid JSON in {self.path}: {exc}") from exc

        if not isinstance(records, list):
            raise ValueError(f"Sessions file {self.path} must contain a JSON array.")

        sessions: List[SessionReference] = []

        for index, record in enumerate(records):
            if not isinstance(record, dict):
                logger.warning("Skipping session #%d in %s: not an object", index, self.path)
                continue
            try:
                sessions.append(SessionReference.from_mapping(record))
            except InvalidSchedulingInputError as exc:
                logger.warning("Skipping session #%d in %s: %s", index, self.path, exc)

        return sessions
