"""Evidence capture around recorded actions."""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from demosmith.core.logging import log_step
from demosmith.session.store import SessionStore
from demosmith.session.views import Evidence, Session, Step, StepDetails, StepDraft

logger = logging.getLogger(__name__)

ActionCallable = Callable[[], Awaitable[Any]]


def step_asset_name(step_id: int, suffix: str = ".png") -> str:
    """Relative asset path for a step, e.g. ``assets/step-001.png``."""
    return f"assets/step-{step_id:03d}{suffix}"


@dataclass
class ActionMeta:
    """
    What is being recorded for one action.

    The action callback may replace ``details`` (for example to add an
    observed value) and set ``evidence_path`` when it produces its own
    screenshot. ``result`` holds the callback's return value.
    """
    description: str
    details: StepDetails
    capture_before: bool = True
    evidence_path: Optional[str] = None
    result: Any = None


class EvidenceCollector:
    """
    Wraps actions so every one of them lands in the step log.

    Order per action: pre-action screenshot, action, then the step is
    appended whatever the outcome. A failing action is re-raised only
    after its step has been recorded.
    """

    def __init__(self, store: SessionStore, clock: Optional[Callable[[], float]] = None):
        self._store = store
        self._clock = clock or store.clock

    async def execute(self, meta: ActionMeta, action: ActionCallable) -> Step:
        """
        Run an action with evidence capture.

        Args:
            meta: Description and details of the action
            action: Coroutine function performing it

        Returns:
            The appended step (only when the action succeeded)
        """
        # The active viewport is only needed for screenshots and snapshots
        session = self._store.require_session()
        step_id = session.next_step_id
        options = session.options

        screenshot_path = None
        before_snapshot = None
        if meta.capture_before and options.screenshot_on_step:
            screenshot_path = await self._screenshot(session, step_asset_name(step_id))
        if options.snapshot_on_step:
            before_snapshot = await self._snapshot(session, step_asset_name(step_id, ".before.txt"))

        start = self._clock()
        finished = None
        after_snapshot = None
        error = None
        succeeded = False
        try:
            meta.result = await action()
            finished = self._clock()
            succeeded = True
            if options.snapshot_on_step:
                after_snapshot = await self._snapshot(session, step_asset_name(step_id, ".after.txt"))
        except Exception as e:
            error = str(e) or e.__class__.__name__
            raise
        finally:
            if finished is None:
                finished = self._clock()
            video_start_ms = None
            video_end_ms = None
            if session.video_origin is not None:
                video_start_ms = max(0, int(round((start - session.video_origin) * 1000)))
                video_end_ms = max(video_start_ms, int(round((finished - session.video_origin) * 1000)))

            draft = StepDraft(
                description=meta.description,
                timestamp=datetime.fromtimestamp(start),
                duration_ms=max(0, int(round((finished - start) * 1000))),
                video_start_ms=video_start_ms,
                video_end_ms=video_end_ms,
                details=meta.details,
                evidence=Evidence(
                    screenshot_path=meta.evidence_path or screenshot_path,
                    before_snapshot=before_snapshot,
                    after_snapshot=after_snapshot,
                ),
                success=succeeded,
                error=error,
            )
            step = self._store.append_step(draft)
            log_step(
                step.id,
                step.action.value,
                result=meta.description,
                error=error,
                duration_ms=step.duration_ms,
            )

        return step

    async def _screenshot(self, session: Session, relative_path: str) -> Optional[str]:
        try:
            return await take_screenshot(session, relative_path)
        except Exception as e:
            logger.warning(f"⚠️ Pre-action screenshot failed: {e}")
            return None

    async def _snapshot(self, session: Session, relative_path: str) -> Optional[str]:
        try:
            text = await session.refs.capture(session.viewports.active)
            Path(session.output_dir, relative_path).write_text(text, encoding="utf-8")
        except Exception as e:
            logger.warning(f"⚠️ Snapshot failed: {e}")
            return None
        return relative_path


async def take_screenshot(session: Session, relative_path: Optional[str] = None) -> str:
    """
    Screenshot the active viewport into the session's output directory.

    Args:
        session: Running session
        relative_path: Target path under the output directory
            (``assets/step-NNN.png`` for the next step if None)

    Returns:
        The relative path that was written
    """
    relative_path = relative_path or step_asset_name(session.next_step_id)
    target = Path(session.output_dir, relative_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    await session.viewports.active.screenshot(path=str(target))
    logger.debug(f"Screenshot saved: {target}")
    return relative_path
