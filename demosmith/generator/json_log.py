"""Machine-readable step log (steps.json) and its loader."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from demosmith.core.config import SessionOptions
from demosmith.session.views import (
    Evidence,
    Session,
    SessionStatus,
    StepDraft,
    details_from_dict,
)

logger = logging.getLogger(__name__)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StepRecord(_CamelModel):
    """One entry of the ``steps`` array."""

    id: int
    action: str
    description: str = ""
    timestamp: datetime
    duration: int = 0
    details: Dict[str, Any] = Field(default_factory=dict)
    evidence: Dict[str, Any] = Field(default_factory=dict)
    success: bool = True
    error: Optional[str] = None


class StepOffset(_CamelModel):
    id: int
    start_ms: int
    end_ms: int


class Timeline(_CamelModel):
    video_origin_ms: Optional[int] = None
    offsets: List[StepOffset] = Field(default_factory=list)


class StepsLog(_CamelModel):
    """Top-level steps.json document."""

    session_id: str
    title: str
    start_url: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    steps: List[StepRecord] = Field(default_factory=list)
    timeline: Optional[Timeline] = None


def generate_steps_json(session: Session) -> Dict[str, Any]:
    """
    Build the steps.json document for a session.

    Step entries keep the exact field set consumers replay from; video
    offsets live in the separate ``timeline`` block.
    """
    summary = session.summary()
    steps = []
    offsets = []

    for step in session.steps:
        entry = {
            "id": step.id,
            "action": step.action.value,
            "description": step.description,
            "timestamp": step.timestamp.isoformat(),
            "duration": step.duration_ms,
            "details": step.details.to_json(),
            "evidence": {},
            "success": step.success,
        }
        if step.evidence.screenshot_path:
            entry["evidence"]["screenshotPath"] = step.evidence.screenshot_path
        if step.error is not None:
            entry["error"] = step.error
        steps.append(entry)

        if step.has_video_offsets:
            offsets.append({"id": step.id, "startMs": step.video_start_ms, "endMs": step.video_end_ms})

    return {
        "sessionId": session.id,
        "title": session.title,
        "startUrl": session.start_url,
        "startedAt": session.started_at.isoformat(),
        "completedAt": session.completed_at.isoformat() if session.completed_at else None,
        "summary": {
            "totalSteps": summary.total_steps,
            "successCount": summary.success_count,
            "failureCount": summary.failure_count,
            "totalDuration": summary.total_duration_ms,
            "successRate": summary.success_rate,
        },
        "steps": steps,
        "timeline": {
            "videoOriginMs": round(session.video_origin * 1000) if session.video_origin is not None else None,
            "offsets": offsets,
        },
    }


def write_steps_json(session: Session, path: Union[str, Path]) -> str:
    """Write steps.json and return its path."""
    path = Path(path)
    path.write_text(
        json.dumps(generate_steps_json(session), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    return str(path)


def load_session(path: Union[str, Path], output_dir: Optional[Union[str, Path]] = None) -> Session:
    """
    Rebuild a completed session from a steps.json file.

    Legacy action names (``pressKey``, ``newTab``, ...) are accepted.

    Args:
        path: steps.json to read
        output_dir: Where regenerated deliverables go (defaults to the
            file's directory)

    Returns:
        Completed session whose step log mirrors the file
    """
    path = Path(path)
    log = StepsLog.model_validate_json(path.read_text(encoding="utf-8"))
    output_dir = Path(output_dir) if output_dir else path.parent

    session = Session(
        id=log.session_id,
        title=log.title,
        start_url=log.start_url,
        options=SessionOptions(output_dir=str(output_dir)),
        output_dir=output_dir,
        started_at=log.started_at,
        status=SessionStatus.COMPLETED,
        completed_at=log.completed_at,
    )

    offsets = {}
    if log.timeline is not None:
        offsets = {o.id: o for o in log.timeline.offsets}
        if log.timeline.video_origin_ms is not None:
            session.video_origin = log.timeline.video_origin_ms / 1000

    for record in sorted(log.steps, key=lambda r: r.id):
        offset = offsets.get(record.id)
        session._append(StepDraft(
            description=record.description,
            timestamp=record.timestamp,
            duration_ms=record.duration,
            video_start_ms=offset.start_ms if offset else None,
            video_end_ms=offset.end_ms if offset else None,
            details=details_from_dict(record.action, record.details),
            evidence=Evidence(screenshot_path=record.evidence.get("screenshotPath")),
            success=record.success,
            error=record.error,
        ))

    logger.info(f"Loaded session {session.id} with {len(session.steps)} steps from {path}")
    return session
