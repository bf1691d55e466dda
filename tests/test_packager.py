"""Tests for deliverable packaging."""

import asyncio
import json
from datetime import datetime

import pytest

from demosmith.browser.views import SessionArtifacts
from demosmith.core.config import SessionOptions
from demosmith.core.exceptions import GeneratorError, SessionNotCompletedError
from demosmith.generator import packager as packager_module
from demosmith.generator.html_tutorial import generate_html_tutorial
from demosmith.generator.markdown import generate_markdown_guide
from demosmith.generator.packager import DeliverablePackager
from demosmith.generator.preview import generate_animated_preview
from demosmith.session.views import (
    ClickDetails,
    Evidence,
    NavigateDetails,
    Session,
    SessionStatus,
    StepDraft,
)


def make_session(output_dir, status=SessionStatus.COMPLETED):
    session = Session(
        id="pkg00001",
        title="Create a <project>",
        start_url="https://example.test",
        options=SessionOptions(),
        output_dir=output_dir,
        status=status,
    )
    session.assets_dir.mkdir(parents=True, exist_ok=True)
    (session.assets_dir / "step-001.png").write_bytes(b"\x89PNG")
    session._append(StepDraft(
        description="Open the site",
        timestamp=datetime(2024, 5, 1, 9, 30, 1),
        duration_ms=1200,
        details=NavigateDetails(url="https://example.test"),
        evidence=Evidence(screenshot_path="assets/step-001.png"),
    ))
    session._append(StepDraft(
        description="Click New project",
        timestamp=datetime(2024, 5, 1, 9, 30, 3),
        duration_ms=300,
        details=ClickDetails(selector="text:New project"),
        success=False,
        error="Element not found: text:New project",
    ))
    return session


EXPECTED_FILES = [
    "guide.md",
    "steps.json",
    "narration.txt",
    "narration.json",
    "subtitles.srt",
    "subtitles.vtt",
    "tutorial.html",
    "animated-preview.html",
    "manifest.json",
]


def test_package_without_video(tmp_path):
    session = make_session(tmp_path)
    manifest = asyncio.run(DeliverablePackager(session).package())

    for name in EXPECTED_FILES:
        assert (tmp_path / name).exists(), name
    assert manifest.ok
    assert manifest.files.video is None
    assert manifest.files.trace is None
    assert manifest.files.audio == []
    assert manifest.files.assets == [str(tmp_path / "assets" / "step-001.png")]
    assert manifest.summary.total_steps == 2
    assert manifest.summary.failure_count == 1

    written = json.loads((tmp_path / "manifest.json").read_text())
    assert written["sessionId"] == "pkg00001"
    assert written["files"]["video"] is None
    assert written["files"]["subtitleSrt"] == str(tmp_path / "subtitles.srt")


def test_package_finds_final_video(tmp_path):
    (tmp_path / "demo.webm").write_bytes(b"webm")
    (tmp_path / "trace.zip").write_bytes(b"zip")
    manifest = asyncio.run(DeliverablePackager(make_session(tmp_path)).package())

    assert manifest.files.video == str(tmp_path / "demo.webm")
    assert manifest.files.trace == str(tmp_path / "trace.zip")
    assert 'src="demo.webm"' in (tmp_path / "tutorial.html").read_text()


def test_package_falls_back_to_staged_video(tmp_path):
    staging = tmp_path / "videos"
    staging.mkdir()
    (staging / "3f2a.webm").write_bytes(b"webm")

    manifest = asyncio.run(DeliverablePackager(make_session(tmp_path)).package())
    assert manifest.files.video == str(staging / "3f2a.webm")


def test_package_prefers_recorded_video_over_other_tabs(tmp_path):
    staging = tmp_path / "videos"
    staging.mkdir()
    # One video per page; the primary viewport's is not first by name
    (staging / "0a1b.webm").write_bytes(b"second tab")
    (staging / "f9e8.webm").write_bytes(b"primary")
    (tmp_path / "elsewhere").mkdir()
    (tmp_path / "elsewhere" / "trace.zip").write_bytes(b"zip")

    session = make_session(tmp_path)
    session.artifacts = SessionArtifacts(
        video_path=str(staging / "f9e8.webm"),
        trace_path=str(tmp_path / "elsewhere" / "trace.zip"),
    )
    manifest = asyncio.run(DeliverablePackager(session).package())

    assert manifest.files.video == str(staging / "f9e8.webm")
    assert manifest.files.trace == str(tmp_path / "elsewhere" / "trace.zip")
    assert 'src="videos/f9e8.webm"' in (tmp_path / "tutorial.html").read_text()



def test_failing_generator_does_not_stop_others(tmp_path, monkeypatch):
    def broken(session):
        raise RuntimeError("template exploded")

    monkeypatch.setattr(packager_module, "generate_markdown_guide", broken)

    manifest = asyncio.run(DeliverablePackager(make_session(tmp_path)).package())

    assert not manifest.ok
    assert manifest.errors == {"guide": "template exploded"}
    assert manifest.files.guide is None
    assert not (tmp_path / "guide.md").exists()
    for name in EXPECTED_FILES:
        if name != "guide.md":
            assert (tmp_path / name).exists(), name


def test_running_session_cannot_be_packaged(tmp_path):
    session = make_session(tmp_path, status=SessionStatus.RUNNING)
    with pytest.raises(SessionNotCompletedError):
        asyncio.run(DeliverablePackager(session).package())


class FakeSynthesizer:
    def __init__(self, fail=False):
        self.fail = fail
        self.timelines = []

    async def synthesize(self, timeline, output_dir):
        if self.fail:
            raise GeneratorError("tts", "quota exceeded")
        self.timelines.append(timeline)
        return [str(output_dir / "audio" / f"segment-{s.index:03d}.mp3") for s in timeline.segments]


def test_audio_paths_in_manifest(tmp_path):
    synthesizer = FakeSynthesizer()
    manifest = asyncio.run(DeliverablePackager(make_session(tmp_path), synthesizer).package())

    assert len(manifest.files.audio) == len(synthesizer.timelines[0].segments)


def test_audio_failure_is_isolated(tmp_path):
    manifest = asyncio.run(DeliverablePackager(make_session(tmp_path), FakeSynthesizer(fail=True)).package())

    assert "audio" in manifest.errors
    assert manifest.files.audio == []
    assert manifest.files.tutorial is not None


def test_guide_content(tmp_path):
    guide = generate_markdown_guide(make_session(tmp_path))

    assert guide.startswith("# Create a <project>")
    assert "### Step 1: Open the site" in guide
    assert "![Step 1 screenshot](assets/step-001.png)" in guide
    assert "**Success rate:** 50%" in guide
    assert "❌ Failed" in guide


def test_tutorial_escapes_content(tmp_path):
    html = generate_html_tutorial(make_session(tmp_path))

    assert "<title>Create a &lt;project&gt;" in html
    assert "Create a <project>" not in html.split("<script>")[0]
    assert "subtitles.vtt" not in html


def test_preview_needs_screenshots(tmp_path):
    session = make_session(tmp_path)
    assert "assets/step-001.png" in generate_animated_preview(session)

    bare = Session(
        id="bare0001",
        title="Bare",
        start_url="https://example.test",
        options=SessionOptions(),
        output_dir=tmp_path / "bare",
        status=SessionStatus.COMPLETED,
    )
    assert generate_animated_preview(bare) is None
