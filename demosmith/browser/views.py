"""Views for browser-side recording artifacts."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class SessionArtifacts:
    """Recording artifacts produced when the browser closes."""
    video_path: Optional[str] = None
    trace_path: Optional[str] = None
