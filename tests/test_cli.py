"""Tests for the command line interface."""

import json
from datetime import datetime

from click.testing import CliRunner

from demosmith.cli.runner import cli
from demosmith.core.config import SessionOptions
from demosmith.generator.json_log import write_steps_json
from demosmith.session.views import NavigateDetails, PressKeyDetails, Session, SessionStatus, StepDraft


def write_log(directory):
    session = Session(
        id="cli00001",
        title="Search the docs",
        start_url="https://example.test",
        options=SessionOptions(),
        output_dir=directory,
        started_at=datetime(2024, 5, 1, 9, 0, 0),
        status=SessionStatus.COMPLETED,
    )
    session._append(StepDraft(
        description="Open the docs",
        timestamp=datetime(2024, 5, 1, 9, 0, 1),
        duration_ms=900,
        details=NavigateDetails(url="https://example.test/docs"),
    ))
    session._append(StepDraft(
        description="Press Enter",
        timestamp=datetime(2024, 5, 1, 9, 0, 2),
        duration_ms=40,
        details=PressKeyDetails(key="Enter"),
    ))
    directory.mkdir(parents=True, exist_ok=True)
    return write_steps_json(session, directory / "steps.json")


def test_tools_lists_surface():
    result = CliRunner().invoke(cli, ["tools"])
    assert result.exit_code == 0
    assert "start_session" in result.output
    assert "list_viewports" in result.output


def test_generate_rebuilds_deliverables(tmp_path):
    steps_json = write_log(tmp_path / "original")
    output = tmp_path / "rebuilt"

    result = CliRunner().invoke(cli, ["generate", steps_json, "-o", str(output)])

    assert result.exit_code == 0, result.output
    for name in ("guide.md", "steps.json", "subtitles.srt", "subtitles.vtt", "tutorial.html", "manifest.json"):
        assert (output / name).exists(), name
    manifest = json.loads((output / "manifest.json").read_text())
    assert manifest["summary"]["totalSteps"] == 2


def test_view_shows_steps(tmp_path):
    steps_json = write_log(tmp_path / "session")
    CliRunner().invoke(cli, ["generate", steps_json])

    result = CliRunner().invoke(cli, ["view", str(tmp_path / "session")])

    assert result.exit_code == 0, result.output
    assert "Open the docs" in result.output
    assert "Deliverables" in result.output


def test_view_requires_steps_json(tmp_path):
    result = CliRunner().invoke(cli, ["view", str(tmp_path)])
    assert result.exit_code != 0
    assert "No steps.json" in result.output
