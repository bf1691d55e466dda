"""Data models for recording sessions and their step log."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from demosmith.browser.views import SessionArtifacts
from demosmith.core.config import SessionOptions


class ActionKind(str, Enum):
    """Closed vocabulary of recordable actions."""
    NAVIGATE = "navigate"
    CLICK = "click"
    FILL = "fill"
    SELECT = "select"
    PRESS_KEY = "press-key"
    HOVER = "hover"
    DRAG = "drag"
    UPLOAD = "upload"
    SCROLL = "scroll"
    WAIT = "wait"
    SCREENSHOT = "screenshot"
    ASSERT = "assert"
    OPEN_VIEWPORT = "open-viewport"
    SWITCH_VIEWPORT = "switch-viewport"
    CLOSE_VIEWPORT = "close-viewport"


# Names used by older step logs
LEGACY_ACTION_NAMES = {
    "pressKey": ActionKind.PRESS_KEY,
    "newTab": ActionKind.OPEN_VIEWPORT,
    "switchTab": ActionKind.SWITCH_VIEWPORT,
    "closeTab": ActionKind.CLOSE_VIEWPORT,
}


def parse_action_kind(name: str) -> ActionKind:
    """Resolve an action name, accepting legacy spellings."""
    if name in LEGACY_ACTION_NAMES:
        return LEGACY_ACTION_NAMES[name]
    return ActionKind(name)


class SessionStatus(str, Enum):
    """Lifecycle status of a recording session."""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# Step details: one frozen model per action kind

class _Details(BaseModel):
    """Base for per-kind step details."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json(self) -> Dict[str, Any]:
        """Serialize with camelCase keys, dropping unset fields and the tag."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"kind"})


class NavigateDetails(_Details):
    kind: Literal["navigate"] = "navigate"
    url: str


class ClickDetails(_Details):
    kind: Literal["click"] = "click"
    ref: Optional[str] = None
    selector: Optional[str] = None


class FillDetails(_Details):
    kind: Literal["fill"] = "fill"
    ref: Optional[str] = None
    selector: Optional[str] = None
    value: str = ""


class SelectDetails(_Details):
    kind: Literal["select"] = "select"
    ref: Optional[str] = None
    selector: Optional[str] = None
    value: str = ""


class PressKeyDetails(_Details):
    kind: Literal["press-key"] = "press-key"
    key: str


class HoverDetails(_Details):
    kind: Literal["hover"] = "hover"
    ref: Optional[str] = None
    selector: Optional[str] = None


class DragDetails(_Details):
    kind: Literal["drag"] = "drag"
    from_ref: str
    to_ref: str


class UploadDetails(_Details):
    kind: Literal["upload"] = "upload"
    ref: Optional[str] = None
    selector: Optional[str] = None
    file_path: str
    file_name: Optional[str] = None


class ScrollDetails(_Details):
    kind: Literal["scroll"] = "scroll"
    ref: Optional[str] = None
    direction: Optional[str] = None
    amount: Optional[int] = None


class WaitDetails(_Details):
    kind: Literal["wait"] = "wait"
    condition: Optional[str] = None
    timeout: Optional[int] = None


class ScreenshotDetails(_Details):
    kind: Literal["screenshot"] = "screenshot"
    name: Optional[str] = None


class AssertDetails(_Details):
    kind: Literal["assert"] = "assert"
    type: str
    ref: Optional[str] = None
    expected: Optional[str] = None
    actual: Optional[str] = None
    message: Optional[str] = None


class OpenViewportDetails(_Details):
    kind: Literal["open-viewport"] = "open-viewport"
    url: Optional[str] = None
    viewport_id: Optional[int] = None


class SwitchViewportDetails(_Details):
    kind: Literal["switch-viewport"] = "switch-viewport"
    viewport_id: Optional[int] = None


class CloseViewportDetails(_Details):
    kind: Literal["close-viewport"] = "close-viewport"
    viewport_id: Optional[int] = None


StepDetails = Annotated[
    Union[
        NavigateDetails,
        ClickDetails,
        FillDetails,
        SelectDetails,
        PressKeyDetails,
        HoverDetails,
        DragDetails,
        UploadDetails,
        ScrollDetails,
        WaitDetails,
        ScreenshotDetails,
        AssertDetails,
        OpenViewportDetails,
        SwitchViewportDetails,
        CloseViewportDetails,
    ],
    Field(discriminator="kind"),
]

_details_adapter: TypeAdapter = TypeAdapter(StepDetails)


def details_from_dict(action: str, data: Optional[Dict[str, Any]] = None) -> StepDetails:
    """
    Rebuild a details variant from a step-log entry.

    Args:
        action: Action name (current or legacy spelling)
        data: camelCase detail fields as written to steps.json

    Returns:
        The matching details model
    """
    kind = parse_action_kind(action)
    payload = dict(data or {})
    if kind in (ActionKind.SWITCH_VIEWPORT, ActionKind.CLOSE_VIEWPORT) and "viewportId" not in payload:
        # older logs stored the tab id as a string ref
        ref = payload.pop("ref", None)
        if ref is not None and str(ref).isdigit():
            payload["viewportId"] = int(ref)
    payload["kind"] = kind.value
    return _details_adapter.validate_python(payload)


class Evidence(BaseModel):
    """Artifacts captured around a step."""

    model_config = ConfigDict(frozen=True)

    screenshot_path: Optional[str] = Field(default=None, description="Screenshot taken before the action")
    before_snapshot: Optional[str] = Field(default=None, description="Accessibility snapshot before the action")
    after_snapshot: Optional[str] = Field(default=None, description="Accessibility snapshot after the action")


class StepDraft(BaseModel):
    """Everything about a step except its sequence id."""

    model_config = ConfigDict(frozen=True)

    description: str
    timestamp: datetime = Field(default_factory=datetime.now)
    duration_ms: int = 0
    video_start_ms: Optional[int] = None
    video_end_ms: Optional[int] = None
    details: StepDetails
    evidence: Evidence = Field(default_factory=Evidence)
    success: bool = True
    error: Optional[str] = None


class Step(StepDraft):
    """One recorded action. Immutable once appended."""

    id: int = Field(ge=1, description="1-based sequence id")

    @property
    def action(self) -> ActionKind:
        """Action kind, taken from the details variant."""
        return ActionKind(self.details.kind)

    @property
    def has_video_offsets(self) -> bool:
        return self.video_start_ms is not None and self.video_end_ms is not None


class StepSummary(BaseModel):
    """Aggregate statistics over a step log."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_steps: int
    success_count: int
    failure_count: int
    total_duration_ms: int
    success_rate: float

    @classmethod
    def from_steps(cls, steps: Tuple[Step, ...]) -> "StepSummary":
        total = len(steps)
        successes = sum(1 for s in steps if s.success)
        return cls(
            total_steps=total,
            success_count=successes,
            failure_count=total - successes,
            total_duration_ms=sum(s.duration_ms for s in steps),
            success_rate=successes / total if total else 1.0,
        )


@dataclass
class Session:
    """
    One recording, from start to end.

    Owned by the SessionStore; the step log is append-only and only the
    store appends to it.
    """

    id: str
    title: str
    start_url: str
    options: SessionOptions
    output_dir: Path
    started_at: datetime = field(default_factory=datetime.now)
    status: SessionStatus = SessionStatus.RUNNING
    completed_at: Optional[datetime] = None

    # Epoch seconds when video capture began
    video_origin: Optional[float] = None

    # Runtime handles (not serialized)
    viewports: Optional[Any] = field(default=None, repr=False)
    refs: Optional[Any] = field(default=None, repr=False)
    driver: Optional[Any] = field(default=None, repr=False)

    artifacts: SessionArtifacts = field(default_factory=SessionArtifacts)
    _steps: List[Step] = field(default_factory=list, repr=False)

    @property
    def steps(self) -> Tuple[Step, ...]:
        """Snapshot of the step log."""
        return tuple(self._steps)

    @property
    def next_step_id(self) -> int:
        return len(self._steps) + 1

    @property
    def is_running(self) -> bool:
        return self.status == SessionStatus.RUNNING

    @property
    def assets_dir(self) -> Path:
        return self.output_dir / "assets"

    def summary(self) -> StepSummary:
        """Summary computed from the current step log."""
        return StepSummary.from_steps(self.steps)

    def _append(self, draft: StepDraft) -> Step:
        step = Step(id=self.next_step_id, **dict(draft))
        self._steps.append(step)
        return step


class ViewportInfo(BaseModel):
    """Point-in-time description of one live viewport."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    url: str = ""
    title: str = ""
    is_active: bool = False
