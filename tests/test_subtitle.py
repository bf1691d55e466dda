"""Tests for the SRT and WebVTT encoders."""

import re
from datetime import datetime

from demosmith.generator.narration import NarrationSegment, SegmentKind, build_timeline
from demosmith.generator.subtitle import encode_srt, encode_vtt, format_timestamp
from demosmith.session.views import (
    FillDetails,
    NavigateDetails,
    PressKeyDetails,
    ScreenshotDetails,
    Step,
)

SRT_TIME = re.compile(r"^(\d{2}:\d{2}:\d{2},\d{3}) --> (\d{2}:\d{2}:\d{2},\d{3})$")


def _timeline():
    steps = [
        Step(id=1, description="Open the site", timestamp=datetime(2024, 1, 1),
             duration_ms=1200, details=NavigateDetails(url="https://example.test")),
        Step(id=2, description="Enter the email", timestamp=datetime(2024, 1, 1),
             duration_ms=800, details=FillDetails(ref="1", value="a-very-long-example-value-123")),
        Step(id=3, description="Screenshot", timestamp=datetime(2024, 1, 1),
             duration_ms=100, details=ScreenshotDetails()),
        Step(id=4, description="Submit the form", timestamp=datetime(2024, 1, 1),
             duration_ms=3000, details=PressKeyDetails(key="Enter")),
    ]
    return build_timeline(steps, "Sign up")


def _to_ms(stamp: str) -> int:
    hms, millis = re.split(r"[,.]", stamp)
    hours, minutes, seconds = (int(part) for part in hms.split(":"))
    return ((hours * 60 + minutes) * 60 + seconds) * 1000 + int(millis)


def test_format_timestamp():
    assert format_timestamp(0) == "00:00:00,000"
    assert format_timestamp(3_723_004) == "01:02:03,004"
    assert format_timestamp(61_500, ".") == "00:01:01.500"
    assert format_timestamp(-5) == "00:00:00,000"


def test_single_cue_layout():
    segment = NarrationSegment(index=0, kind=SegmentKind.INTRO, start_ms=0, end_ms=3000, text="Hello")

    assert encode_srt([segment]) == "1\n00:00:00,000 --> 00:00:03,000\nHello\n"
    assert encode_vtt([segment]) == "WEBVTT\n\n1\n00:00:00.000 --> 00:00:03.000\nHello\n"


def test_cue_count_and_order_match_segments():
    timeline = _timeline()
    srt_blocks = encode_srt(timeline.segments).strip().split("\n\n")
    vtt_blocks = encode_vtt(timeline.segments).strip().split("\n\n")[1:]

    assert len(srt_blocks) == len(timeline.segments) == 5
    assert len(vtt_blocks) == len(timeline.segments)
    for number, (block, segment) in enumerate(zip(srt_blocks, timeline.segments), start=1):
        index, _, text = block.split("\n", 2)
        assert index == str(number)
        assert text == segment.text
    for block, segment in zip(vtt_blocks, timeline.segments):
        assert block.split("\n", 2)[2] == segment.text


def test_cue_times_are_non_decreasing_and_non_overlapping():
    lines = encode_srt(_timeline().segments).splitlines()
    ranges = [SRT_TIME.match(line).groups() for line in lines if SRT_TIME.match(line)]

    previous_end = 0
    for start, end in ranges:
        start_ms, end_ms = _to_ms(start), _to_ms(end)
        assert start_ms >= previous_end
        assert end_ms >= start_ms
        previous_end = end_ms


def test_srt_and_vtt_differ_only_in_header_and_separator():
    segments = _timeline().segments
    srt = encode_srt(segments)
    vtt = encode_vtt(segments)

    assert vtt.startswith("WEBVTT\n\n")
    converted = re.sub(r"(\d{2}:\d{2}:\d{2})\.(\d{3})", r"\1,\2", vtt[len("WEBVTT\n\n"):])
    assert converted == srt
