"""Recording sessions - data model, viewport registry, store, and evidence capture."""

from demosmith.session.views import (
    ActionKind,
    Evidence,
    Session,
    SessionStatus,
    Step,
    StepDraft,
    StepSummary,
    ViewportInfo,
    details_from_dict,
    parse_action_kind,
)
from demosmith.session.viewports import ViewportRegistry
from demosmith.session.store import SessionStore
from demosmith.session.evidence import ActionMeta, EvidenceCollector, take_screenshot

__all__ = [
    "ActionKind",
    "Evidence",
    "Session",
    "SessionStatus",
    "Step",
    "StepDraft",
    "StepSummary",
    "ViewportInfo",
    "details_from_dict",
    "parse_action_kind",
    "ViewportRegistry",
    "SessionStore",
    "ActionMeta",
    "EvidenceCollector",
    "take_screenshot",
]
