"""
Tests for session sources.
"""

import json
import logging

import pytest

from clinicslots.adapters.session_source import DEMO_SESSIONS_FILE, JsonSessionSource
from clinicslots.domain.models import SessionReference


def test_demo_calendar_loads():
    source = JsonSessionSource()

    sessions = source.get_sessions()

    assert source.is_demo
    assert source.path == DEMO_SESSIONS_FILE
    assert len(sessions) == 6
    assert all(isinstance(s, SessionReference) for s in sessions)
    assert any(s.doctor_id is None and s.practitioner_name for s in sessions)


def test_malformed_records_are_skipped(tmp_path, caplog):
    path = tmp_path / "sessions.json"
    path.write_text(json.dumps([
        {"date": "2024-01-15", "time": "09:00", "duration": 60, "doctor_id": "D1"},
        {"date": "2024-01-15", "time": "nine", "duration": 60},
        "not a session",
        {"date": "2024-01-15", "time": "11:00", "duration_minutes": 30},
    ]), encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        sessions = JsonSessionSource(path).get_sessions()

    assert [s.time for s in sessions] == ["09:00", "11:00"]
    assert "Skipping session #1" in caplog.text
    assert "Skipping session #2" in caplog.text


def test_root_must_be_array(tmp_path):
    path = tmp_path / "sessions.json"
    path.write_text(json.dumps({"date": "2024-01-15"}), encoding="utf-8")

    with pytest.raises(ValueError, match="JSON array"):
        JsonSessionSource(path).get_sessions()


def test_invalid_json(tmp_path):
    path = tmp_path / "sessions.json"
    path.write_text("[{", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid JSON"):
        JsonSessionSource(path).get_sessions()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        JsonSessionSource(tmp_path / "nope.json").get_sessions()


def test_unpadded_dates_and_times_are_skipped(tmp_path, caplog):
    """A record dated 2024-1-15 would never block 2024-01-15, so it is rejected up front."""
    path = tmp_path / "sessions.json"
    path.write_text(json.dumps([
        {"date": "2024-1-15", "time": "09:00", "duration": 60},
        {"date": "2024-01-15", "time": "9:5", "duration": 60},
        {"date": "2024-01-15", "time": "10:00", "duration": 60},
    ]), encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        sessions = JsonSessionSource(path).get_sessions()

    assert [(s.date, s.time) for s in sessions] == [("2024-01-15", "10:00")]
    assert "Skipping session #0" in caplog.text
    assert "Skipping session #1" in caplog.text
