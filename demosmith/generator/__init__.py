"""Deliverable generators - narration, subtitles, guides, tutorials, and packaging."""

from demosmith.generator.narration import (
    NarrationSegment,
    NarrationTimeline,
    build_timeline,
    generate_narration_script,
    step_to_narration,
    timeline_for_session,
    timeline_to_dict,
)
from demosmith.generator.subtitle import (
    encode_srt,
    encode_vtt,
    format_timestamp,
    generate_srt,
    generate_vtt,
)
from demosmith.generator.markdown import generate_markdown_guide
from demosmith.generator.json_log import generate_steps_json, load_session
from demosmith.generator.html_tutorial import generate_html_tutorial
from demosmith.generator.preview import generate_animated_preview
from demosmith.generator.tts import NarrationSynthesizer
from demosmith.generator.packager import DeliverableManifest, DeliverablePackager

__all__ = [
    "NarrationSegment",
    "NarrationTimeline",
    "build_timeline",
    "generate_narration_script",
    "step_to_narration",
    "timeline_for_session",
    "timeline_to_dict",
    "encode_srt",
    "encode_vtt",
    "format_timestamp",
    "generate_srt",
    "generate_vtt",
    "generate_markdown_guide",
    "generate_steps_json",
    "load_session",
    "generate_html_tutorial",
    "generate_animated_preview",
    "NarrationSynthesizer",
    "DeliverableManifest",
    "DeliverablePackager",
]
