"""Tests for evidence capture around actions."""

import asyncio

import pytest

from demosmith.core.config import SessionOptions
from demosmith.session.evidence import ActionMeta, EvidenceCollector, step_asset_name
from demosmith.session.views import ClickDetails, NavigateDetails


def _meta(description="Click sign in"):
    return ActionMeta(description=description, details=ClickDetails(selector="text:Sign in"))


def test_step_asset_name_is_zero_padded():
    assert step_asset_name(7) == "assets/step-007.png"
    assert step_asset_name(12, ".before.txt") == "assets/step-012.before.txt"


def test_screenshot_is_taken_before_action(store):
    session = asyncio.run(store.start("https://example.test"))
    page = session.viewports.active
    seen = []

    async def action():
        seen.append((session.output_dir / "assets" / "step-001.png").exists())

    step = asyncio.run(EvidenceCollector(store).execute(_meta(), action))

    assert seen == [True]
    assert step.id == 1
    assert step.evidence.screenshot_path == "assets/step-001.png"
    assert step.success
    assert page.url == "https://example.test"


def test_failed_action_is_recorded_then_raised(store):
    session = asyncio.run(store.start("https://example.test"))

    async def action():
        raise RuntimeError("element detached")

    with pytest.raises(RuntimeError, match="element detached"):
        asyncio.run(EvidenceCollector(store).execute(_meta(), action))

    (step,) = session.steps
    assert step.success is False
    assert step.error == "element detached"
    assert step.evidence.screenshot_path == "assets/step-001.png"


def test_ids_stay_contiguous_across_failures(store):
    session = asyncio.run(store.start("https://example.test"))
    collector = EvidenceCollector(store)

    async def ok():
        return None

    async def boom():
        raise ValueError("nope")

    async def run():
        for action in (ok, boom, ok, boom, ok):
            try:
                await collector.execute(_meta(), action)
            except ValueError:
                pass

    asyncio.run(run())
    assert [step.id for step in session.steps] == [1, 2, 3, 4, 5]
    assert [step.success for step in session.steps] == [True, False, True, False, True]


def test_appending_does_not_touch_earlier_steps(store):
    session = asyncio.run(store.start("https://example.test"))
    collector = EvidenceCollector(store)

    async def ok():
        return None

    first = asyncio.run(collector.execute(_meta("First"), ok))
    before = first.model_dump()
    asyncio.run(collector.execute(_meta("Second"), ok))

    assert session.steps[0] is first
    assert session.steps[0].model_dump() == before
    with pytest.raises(Exception):
        first.description = "changed"


def test_duration_and_video_offsets_come_from_clock(store, clock):
    session = asyncio.run(store.start("https://example.test"))
    origin = session.video_origin

    async def ok():
        return None

    step = asyncio.run(EvidenceCollector(store).execute(_meta(), ok))

    # One tick between the start and finish readings
    assert step.duration_ms == 250
    assert step.video_start_ms == round((step.timestamp.timestamp() - origin) * 1000)
    assert step.video_end_ms == step.video_start_ms + 250


def test_no_offsets_without_video(store, config):
    options = SessionOptions.from_config(config, video=False)
    asyncio.run(store.start("https://example.test", options=options))

    async def ok():
        return None

    step = asyncio.run(EvidenceCollector(store).execute(_meta(), ok))
    assert step.video_start_ms is None
    assert step.video_end_ms is None


def test_screenshot_failure_does_not_block_action(store):
    session = asyncio.run(store.start("https://example.test"))
    session.viewports.active.fail_screenshots = True

    async def ok():
        return "done"

    meta = _meta()
    step = asyncio.run(EvidenceCollector(store).execute(meta, ok))
    assert step.success
    assert step.evidence.screenshot_path is None
    assert meta.result == "done"


def test_screenshot_per_step_disabled(store, config):
    options = SessionOptions.from_config(config, screenshot_on_step=False)
    session = asyncio.run(store.start("https://example.test", options=options))

    async def ok():
        return None

    step = asyncio.run(EvidenceCollector(store).execute(_meta(), ok))
    assert step.evidence.screenshot_path is None
    assert list(session.assets_dir.glob("*.png")) == []


def test_snapshots_around_step(store, config):
    options = SessionOptions.from_config(config, snapshot_on_step=True)
    session = asyncio.run(store.start("https://example.test", options=options))

    async def ok():
        return None

    meta = ActionMeta(description="Go", details=NavigateDetails(url="https://example.test"))
    step = asyncio.run(EvidenceCollector(store).execute(meta, ok))

    assert step.evidence.before_snapshot == "assets/step-001.before.txt"
    assert step.evidence.after_snapshot == "assets/step-001.after.txt"
    text = (session.output_dir / step.evidence.before_snapshot).read_text()
    assert '[2] button "Sign in"' in text


def test_after_snapshot_is_not_timed(store, config, clock):
    options = SessionOptions.from_config(config, snapshot_on_step=True)
    session = asyncio.run(store.start("https://example.test", options=options))
    page = session.viewports.active
    calls = []
    original_evaluate = page.evaluate

    async def slow_evaluate(script, arg=None):
        calls.append(script)
        if len(calls) > 1:
            clock.now += 5.0
        return await original_evaluate(script, arg)

    page.evaluate = slow_evaluate

    async def ok():
        return None

    step = asyncio.run(EvidenceCollector(store).execute(_meta(), ok))

    assert len(calls) == 2
    assert step.evidence.after_snapshot == "assets/step-001.after.txt"
    assert step.duration_ms == 250
    assert step.video_end_ms == step.video_start_ms + 250


def test_snapshot_write_failure_keeps_step_successful(store, config):
    options = SessionOptions.from_config(config, snapshot_on_step=True)
    session = asyncio.run(store.start("https://example.test", options=options))
    # A directory in the way makes the after-snapshot write fail
    (session.output_dir / "assets" / "step-001.after.txt").mkdir(parents=True)

    async def ok():
        return "done"

    meta = _meta()
    step = asyncio.run(EvidenceCollector(store).execute(meta, ok))

    assert step.success
    assert step.error is None
    assert step.evidence.before_snapshot == "assets/step-001.before.txt"
    assert step.evidence.after_snapshot is None
    assert meta.result == "done"
