"""Tests for steps.json generation and loading."""

import json
from datetime import datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from demosmith.core.config import SessionOptions
from demosmith.generator.json_log import generate_steps_json, load_session, write_steps_json
from demosmith.session.views import (
    ActionKind,
    AssertDetails,
    Evidence,
    FillDetails,
    NavigateDetails,
    Session,
    SessionStatus,
    StepDraft,
    SwitchViewportDetails,
    details_from_dict,
    parse_action_kind,
)


def make_session(output_dir: Path) -> Session:
    session = Session(
        id="abc12345",
        title="Sign up",
        start_url="https://example.test",
        options=SessionOptions(),
        output_dir=output_dir,
        started_at=datetime(2024, 5, 1, 9, 30, 0),
        status=SessionStatus.COMPLETED,
        completed_at=datetime(2024, 5, 1, 9, 31, 0),
        video_origin=1_714_555_800.0,
    )
    session._append(StepDraft(
        description="Open the site",
        timestamp=datetime(2024, 5, 1, 9, 30, 1),
        duration_ms=1200,
        video_start_ms=1000,
        video_end_ms=2200,
        details=NavigateDetails(url="https://example.test"),
        evidence=Evidence(screenshot_path="assets/step-001.png"),
    ))
    session._append(StepDraft(
        description="Enter the email",
        timestamp=datetime(2024, 5, 1, 9, 30, 3),
        duration_ms=300,
        details=FillDetails(ref="1", value="me@example.test"),
        success=False,
        error="Element not found: 1",
    ))
    session._append(StepDraft(
        description="Check the title",
        timestamp=datetime(2024, 5, 1, 9, 30, 4),
        duration_ms=20,
        details=AssertDetails(type="title", expected="Welcome", actual="Welcome", message="ok"),
    ))
    return session


def test_step_entries_have_exact_fields(tmp_path):
    data = generate_steps_json(make_session(tmp_path))
    first, second, _ = data["steps"]

    assert set(first) == {"id", "action", "description", "timestamp", "duration", "details", "evidence", "success"}
    assert first["action"] == "navigate"
    assert first["timestamp"] == "2024-05-01T09:30:01"
    assert first["duration"] == 1200
    assert first["details"] == {"url": "https://example.test"}
    assert first["evidence"] == {"screenshotPath": "assets/step-001.png"}

    assert second["error"] == "Element not found: 1"
    assert second["evidence"] == {}
    assert second["success"] is False


def test_summary_block(tmp_path):
    summary = generate_steps_json(make_session(tmp_path))["summary"]
    assert summary == {
        "totalSteps": 3,
        "successCount": 2,
        "failureCount": 1,
        "totalDuration": 1520,
        "successRate": pytest.approx(2 / 3),
    }


def test_video_offsets_live_in_timeline_block(tmp_path):
    timeline = generate_steps_json(make_session(tmp_path))["timeline"]
    assert timeline["videoOriginMs"] == 1_714_555_800_000
    assert timeline["offsets"] == [{"id": 1, "startMs": 1000, "endMs": 2200}]


def test_round_trip_through_file(tmp_path):
    original = make_session(tmp_path)
    path = write_steps_json(original, tmp_path / "steps.json")

    loaded = load_session(path, tmp_path / "rebuilt")

    assert loaded.status == SessionStatus.COMPLETED
    assert loaded.output_dir == tmp_path / "rebuilt"
    assert loaded.video_origin == original.video_origin
    assert [s.id for s in loaded.steps] == [1, 2, 3]
    for before, after in zip(original.steps, loaded.steps):
        assert after.details == before.details
        assert after.description == before.description
        assert after.success == before.success
        assert after.error == before.error
        assert after.video_start_ms == before.video_start_ms
    assert generate_steps_json(loaded)["steps"] == generate_steps_json(original)["steps"]


def test_loads_legacy_action_names(tmp_path):
    document = {
        "sessionId": "legacy01",
        "title": "Old log",
        "startUrl": "https://example.test",
        "startedAt": "2024-01-01T10:00:00",
        "steps": [
            {"id": 1, "action": "newTab", "description": "Open a tab", "timestamp": "2024-01-01T10:00:01",
             "duration": 100, "details": {"url": "https://example.test/docs"}, "evidence": {}, "success": True},
            {"id": 2, "action": "switchTab", "description": "Back to the first tab",
             "timestamp": "2024-01-01T10:00:02", "duration": 50, "details": {"ref": "0"},
             "evidence": {}, "success": True},
            {"id": 3, "action": "pressKey", "description": "Press Enter", "timestamp": "2024-01-01T10:00:03",
             "duration": 10, "details": {"key": "Enter"}, "evidence": {}, "success": True},
        ],
    }
    path = tmp_path / "steps.json"
    path.write_text(json.dumps(document), encoding="utf-8")

    session = load_session(path)

    assert [s.action for s in session.steps] == [
        ActionKind.OPEN_VIEWPORT, ActionKind.SWITCH_VIEWPORT, ActionKind.PRESS_KEY,
    ]
    assert session.steps[1].details == SwitchViewportDetails(viewport_id=0)
    assert session.output_dir == tmp_path
    assert session.video_origin is None


def test_parse_action_kind_rejects_unknown_names():
    assert parse_action_kind("press-key") == ActionKind.PRESS_KEY
    with pytest.raises(ValueError):
        parse_action_kind("teleport")


def test_details_require_kind_specific_fields():
    with pytest.raises(ValidationError):
        details_from_dict("navigate", {})
