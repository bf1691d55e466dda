"""SRT and WebVTT encoders for narration timelines."""

from typing import List, Sequence

from demosmith.generator.narration import NarrationSegment, timeline_for_session
from demosmith.session.views import Session


def format_timestamp(ms: int, separator: str = ",") -> str:
    """
    Format milliseconds as ``HH:MM:SS<sep>mmm``.

    Args:
        ms: Offset in milliseconds (negative values clamp to zero)
        separator: "," for SRT, "." for WebVTT
    """
    ms = max(0, int(ms))
    hours, rest = divmod(ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    seconds, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}{separator}{millis:03d}"


def _cues(segments: Sequence[NarrationSegment], separator: str) -> List[str]:
    lines = []
    for index, segment in enumerate(segments, start=1):
        lines.append(str(index))
        lines.append(
            f"{format_timestamp(segment.start_ms, separator)} --> "
            f"{format_timestamp(segment.end_ms, separator)}"
        )
        lines.append(segment.text)
        lines.append("")
    return lines


def encode_srt(segments: Sequence[NarrationSegment]) -> str:
    """One SRT cue per segment, in segment order."""
    return "\n".join(_cues(segments, ","))


def encode_vtt(segments: Sequence[NarrationSegment]) -> str:
    """One WebVTT cue per segment, in segment order."""
    return "\n".join(["WEBVTT", ""] + _cues(segments, "."))


def generate_srt(session: Session) -> str:
    return encode_srt(timeline_for_session(session).segments)


def generate_vtt(session: Session) -> str:
    return encode_vtt(timeline_for_session(session).segments)
