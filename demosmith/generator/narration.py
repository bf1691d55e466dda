"""Narration text and timing derived from a session's step log."""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from demosmith.session.views import ActionKind, Session, Step

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 150
MIN_SEGMENT_MS = 2000
STEP_PAUSE_MS = 500

ESTIMATED_INTRO_MS = 3000
ESTIMATED_OUTRO_MS = 4000
VIDEO_INTRO_END_MS = 2000
VIDEO_TAIL_MS = 5000

FILL_VALUE_PREVIEW = 20


class TimingMode(str, Enum):
    ESTIMATED = "estimated"
    VIDEO = "video"


class SegmentKind(str, Enum):
    INTRO = "intro"
    STEP = "step"
    OUTRO = "outro"


class NarrationSegment(BaseModel):
    """One timed piece of narration."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    index: int = Field(description="0-based position in the timeline")
    kind: SegmentKind
    step_id: Optional[int] = None
    start_ms: int
    end_ms: int
    text: str

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms


class NarrationTimeline(BaseModel):
    """Ordered, non-overlapping narration segments."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    title: str
    mode: TimingMode
    segments: List[NarrationSegment]

    @property
    def total_duration_ms(self) -> int:
        return self.segments[-1].end_ms if self.segments else 0


# Per-kind narration text

def _preview(value: str, limit: int = FILL_VALUE_PREVIEW) -> str:
    return value[:limit] + "..." if len(value) > limit else value


def _narrate_navigate(step: Step) -> str:
    return f"First, let's navigate to the page. {step.description}"


def _narrate_click(step: Step) -> str:
    description = step.description
    if description.lower().startswith("click"):
        return f"Now, {description}"
    return f"Now, click to {description.lower()}"


def _narrate_fill(step: Step) -> str:
    value = step.details.value
    if not value:
        return step.description
    return f'{step.description}. I\'ll type "{_preview(value)}".'


def _narrate_select(step: Step) -> str:
    value = step.details.value
    if not value:
        return step.description
    return f'{step.description}. I\'ll select "{value}".'


def _narrate_scroll(step: Step) -> str:
    return f"Let me scroll {step.details.direction or 'down'} to show you more."


def _narrate_wait(step: Step) -> str:
    return "I'll wait for the page to load."


def _narrate_silent(step: Step) -> str:
    return ""


def _narrate_description(step: Step) -> str:
    return step.description


_NARRATORS: Dict[ActionKind, Callable[[Step], str]] = {
    ActionKind.NAVIGATE: _narrate_navigate,
    ActionKind.CLICK: _narrate_click,
    ActionKind.FILL: _narrate_fill,
    ActionKind.SELECT: _narrate_select,
    ActionKind.PRESS_KEY: _narrate_description,
    ActionKind.HOVER: _narrate_description,
    ActionKind.DRAG: _narrate_description,
    ActionKind.UPLOAD: _narrate_description,
    ActionKind.SCROLL: _narrate_scroll,
    ActionKind.WAIT: _narrate_wait,
    ActionKind.SCREENSHOT: _narrate_silent,
    ActionKind.ASSERT: _narrate_description,
    ActionKind.OPEN_VIEWPORT: _narrate_description,
    ActionKind.SWITCH_VIEWPORT: _narrate_description,
    ActionKind.CLOSE_VIEWPORT: _narrate_description,
}

_unmapped = set(ActionKind) - set(_NARRATORS)
if _unmapped:
    raise RuntimeError(f"No narration for action kinds: {sorted(k.value for k in _unmapped)}")


def step_to_narration(step: Step) -> str:
    """Spoken text for a step; empty for steps that are not narrated."""
    return _NARRATORS[step.action](step)


def estimate_duration_ms(text: str) -> int:
    """Reading time at WORDS_PER_MINUTE, floored at MIN_SEGMENT_MS."""
    words = len(text.split())
    return max(MIN_SEGMENT_MS, round(words / WORDS_PER_MINUTE * 60 * 1000))


def intro_text(title: str) -> str:
    return f"Welcome! In this tutorial, I'll show you how to {title.lower()}. Let's get started."


def outro_text(title: str) -> str:
    return f"And that's it! You've successfully completed {title.lower()}. Thanks for watching!"


# Timeline construction

def build_timeline(
    steps: Sequence[Step],
    title: str,
    video_synced: Optional[bool] = None,
) -> NarrationTimeline:
    """
    Project a step log onto timed narration segments.

    Args:
        steps: Step log in sequence order
        title: Demo title used in the intro and outro
        video_synced: Use recorded video offsets; defaults to whether any
            step carries them

    Returns:
        Timeline with an intro, one segment per narrated step, and an outro
    """
    narrated = []
    for step in steps:
        text = step_to_narration(step)
        if text:
            narrated.append((step, text))

    if video_synced is None:
        video_synced = any(step.has_video_offsets for step in steps)

    if video_synced:
        segments = _video_segments(steps, narrated, title)
        mode = TimingMode.VIDEO
    else:
        segments = _estimated_segments(narrated, title)
        mode = TimingMode.ESTIMATED

    logger.debug(f"Built {mode.value} narration timeline with {len(segments)} segments")
    return NarrationTimeline(title=title, mode=mode, segments=segments)


def timeline_for_session(session: Session) -> NarrationTimeline:
    """Timeline for a session; video offsets are used only if video was recorded."""
    steps = session.steps
    video_synced = session.video_origin is not None and any(s.has_video_offsets for s in steps)
    return build_timeline(steps, session.title, video_synced=video_synced)


def _estimated_segments(narrated: List[tuple], title: str) -> List[NarrationSegment]:
    segments = [NarrationSegment(
        index=0, kind=SegmentKind.INTRO, start_ms=0, end_ms=ESTIMATED_INTRO_MS, text=intro_text(title),
    )]
    clock = ESTIMATED_INTRO_MS

    for step, text in narrated:
        duration = estimate_duration_ms(text)
        segments.append(NarrationSegment(
            index=len(segments),
            kind=SegmentKind.STEP,
            step_id=step.id,
            start_ms=clock,
            end_ms=clock + duration,
            text=text,
        ))
        # Never advance less than the segment itself so cues cannot overlap
        clock += max(duration, step.duration_ms) + STEP_PAUSE_MS

    segments.append(NarrationSegment(
        index=len(segments),
        kind=SegmentKind.OUTRO,
        start_ms=clock,
        end_ms=clock + ESTIMATED_OUTRO_MS,
        text=outro_text(title),
    ))
    return segments


def _video_segments(steps: Sequence[Step], narrated: List[tuple], title: str) -> List[NarrationSegment]:
    segments = [NarrationSegment(
        index=0, kind=SegmentKind.INTRO, start_ms=0, end_ms=VIDEO_INTRO_END_MS, text=intro_text(title),
    )]
    previous_end = VIDEO_INTRO_END_MS

    for step, text in narrated:
        if step.video_start_ms is not None:
            # Only the start is clamped; cues keep the recorded end
            start = max(step.video_start_ms, previous_end)
            end = max(start, step.video_end_ms if step.video_end_ms is not None else start)
        else:
            start = previous_end
            end = start + step.duration_ms

        segments.append(NarrationSegment(
            index=len(segments),
            kind=SegmentKind.STEP,
            step_id=step.id,
            start_ms=start,
            end_ms=end,
            text=text,
        ))
        previous_end = end

    if steps and steps[-1].video_end_ms is not None:
        video_duration = steps[-1].video_end_ms
    else:
        video_duration = sum(step.duration_ms for step in steps) + VIDEO_TAIL_MS

    segments.append(NarrationSegment(
        index=len(segments),
        kind=SegmentKind.OUTRO,
        start_ms=previous_end,
        end_ms=max(video_duration, previous_end + MIN_SEGMENT_MS),
        text=outro_text(title),
    ))
    return segments


# Text outputs

def generate_narration_script(session: Session) -> str:
    """Plain-text voiceover script (narration.txt)."""
    title = session.title
    lines = [
        f"=== {title} ===",
        "",
        f"Welcome! In this tutorial, I'll show you how to {title.lower()}.",
        "",
        "Let's get started.",
        "",
    ]

    for step in session.steps:
        narration = step_to_narration(step)
        if narration:
            lines.append(f"[Step {step.id}]")
            lines.append(narration)
            lines.append("")

    lines.extend([
        "---",
        "",
        f"And that's it! You've successfully completed {title.lower()}.",
        "",
        "If you have any questions, feel free to reach out.",
        "Thanks for watching!",
    ])
    return "\n".join(lines)


def timeline_to_dict(timeline: NarrationTimeline) -> Dict[str, Any]:
    """JSON payload for narration.json."""
    return {
        "title": timeline.title,
        "mode": timeline.mode.value,
        "totalDurationMs": timeline.total_duration_ms,
        "segments": [
            {**segment.model_dump(by_alias=True, mode="json"), "durationMs": segment.duration_ms}
            for segment in timeline.segments
        ],
    }
