"""Deliverable packaging for completed sessions."""

import json
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from demosmith.core.exceptions import SessionNotCompletedError
from demosmith.generator.html_tutorial import generate_html_tutorial
from demosmith.generator.json_log import generate_steps_json
from demosmith.generator.markdown import generate_markdown_guide
from demosmith.generator.narration import (
    generate_narration_script,
    timeline_for_session,
    timeline_to_dict,
)
from demosmith.generator.preview import generate_animated_preview
from demosmith.generator.subtitle import generate_srt, generate_vtt
from demosmith.generator.tts import NarrationSynthesizer
from demosmith.session.views import Session, SessionStatus, StepSummary

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"


class DeliverableFiles(BaseModel):
    """Paths of produced artifacts; None where an artifact is absent."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    video: Optional[str] = None
    trace: Optional[str] = None
    guide: Optional[str] = None
    steps: Optional[str] = None
    narration: Optional[str] = None
    narration_timing: Optional[str] = None
    subtitle_srt: Optional[str] = None
    subtitle_vtt: Optional[str] = None
    tutorial: Optional[str] = None
    preview: Optional[str] = None
    audio: List[str] = Field(default_factory=list)
    assets: List[str] = Field(default_factory=list)


class DeliverableManifest(BaseModel):
    """Index of everything packaging produced for one session."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    session_id: str
    title: str
    output_dir: str
    files: DeliverableFiles
    summary: StepSummary
    errors: Dict[str, str] = Field(default_factory=dict, description="Generator name -> failure message")

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class DeliverablePackager:
    """
    Writes every deliverable for a completed session.

    Each generator runs on its own: a failure is logged, recorded in
    ``manifest.errors`` and the remaining generators still run.

    Usage:
        manifest = await DeliverablePackager(session).package()
    """

    def __init__(
        self,
        session: Session,
        synthesizer: Optional[NarrationSynthesizer] = None,
    ):
        self.session = session
        self.synthesizer = synthesizer
        self.output_dir = Path(session.output_dir)
        self._errors: Dict[str, str] = {}

    async def package(self) -> DeliverableManifest:
        """
        Generate all deliverables.

        Returns:
            Manifest with the produced paths and a fresh step summary

        Raises:
            SessionNotCompletedError: The session has not completed
        """
        session = self.session
        if session.status != SessionStatus.COMPLETED:
            raise SessionNotCompletedError(session.id, session.status.value)

        logger.info(f"📦 Packaging deliverables for session {session.id}")
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self._errors = {}

        video = self._locate_video()
        trace = self._locate_trace()
        video_rel = self._relative(video) if video else None

        files = DeliverableFiles(
            video=str(video) if video else None,
            trace=str(trace) if trace else None,
            guide=self._write("guide", "guide.md", lambda: generate_markdown_guide(session)),
            steps=self._write("steps", "steps.json", lambda: _to_json(generate_steps_json(session))),
            narration=self._write("narration", "narration.txt", lambda: generate_narration_script(session)),
            narration_timing=self._write(
                "narration_timing",
                "narration.json",
                lambda: _to_json(timeline_to_dict(timeline_for_session(session))),
            ),
            subtitle_srt=self._write("subtitle_srt", "subtitles.srt", lambda: generate_srt(session)),
            subtitle_vtt=self._write("subtitle_vtt", "subtitles.vtt", lambda: generate_vtt(session)),
            tutorial=self._write(
                "tutorial",
                "tutorial.html",
                lambda: generate_html_tutorial(session, video_file=video_rel),
            ),
            preview=self._write("preview", "animated-preview.html", lambda: generate_animated_preview(session)),
            audio=await self._synthesize(),
            assets=sorted(str(p) for p in session.assets_dir.glob("*.png")) if session.assets_dir.exists() else [],
        )

        manifest = DeliverableManifest(
            session_id=session.id,
            title=session.title,
            output_dir=str(self.output_dir),
            files=files,
            summary=session.summary(),
            errors=dict(self._errors),
        )
        self._write("manifest", MANIFEST_FILENAME, lambda: _to_json(manifest.to_dict()))

        if manifest.errors:
            logger.warning(f"⚠️ Packaging finished with {len(manifest.errors)} failed generator(s)")
        else:
            logger.info(f"✅ Deliverables written to {self.output_dir}")
        return manifest

    def _write(self, name: str, filename: str, render: Callable[[], Optional[str]]) -> Optional[str]:
        try:
            content = render()
            if content is None:
                logger.info(f"Skipping {filename}: nothing to render")
                return None
            path = self.output_dir / filename
            path.write_text(content, encoding="utf-8")
        except Exception as e:
            logger.error(f"❌ Generator '{name}' failed: {e}", exc_info=True)
            self._errors[name] = str(e) or e.__class__.__name__
            return None

        logger.debug(f"Wrote {path}")
        return str(path)

    async def _synthesize(self) -> List[str]:
        if self.synthesizer is None:
            return []
        try:
            return await self.synthesizer.synthesize(timeline_for_session(self.session), self.output_dir)
        except Exception as e:
            logger.error(f"❌ Generator 'audio' failed: {e}", exc_info=True)
            self._errors["audio"] = str(e) or e.__class__.__name__
            return []

    def _locate_video(self) -> Optional[Path]:
        # The driver records the primary viewport's video; other tabs have their own files
        recorded = self.session.artifacts.video_path
        if recorded and Path(recorded).exists():
            return Path(recorded)
        expected = self.output_dir / "demo.webm"
        if expected.exists():
            return expected
        staging = self.output_dir / "videos"
        if staging.is_dir():
            candidates = sorted(staging.glob("*.webm"), key=lambda p: (p.stat().st_mtime, p.name))
            if len(candidates) > 1:
                logger.warning(f"⚠️ {len(candidates)} staged videos found, using the oldest: {candidates[0].name}")
            if candidates:
                return candidates[0]
        return None

    def _locate_trace(self) -> Optional[Path]:
        recorded = self.session.artifacts.trace_path
        if recorded and Path(recorded).exists():
            return Path(recorded)
        expected = self.output_dir / "trace.zip"
        return expected if expected.exists() else None


    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self.output_dir).as_posix()
        except ValueError:
            return str(path)


def _to_json(data: dict) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)
