"""Animated slideshow preview of step screenshots."""

import json
from html import escape
from typing import Optional

from demosmith.session.views import Session

DEFAULT_FRAME_DELAY_MS = 1500

SCRIPT = """
let index = 0;
let playing = true;
let timer = setInterval(next, frameDelay);
const img = document.getElementById('frame');
const counter = document.getElementById('current');
const caption = document.getElementById('description');
const toggle = document.getElementById('playPause');

function show() {
  img.src = frames[index].src;
  counter.textContent = index + 1;
  caption.textContent = frames[index].description;
}
function next() { index = (index + 1) % frames.length; show(); }
function prev() { index = (index - 1 + frames.length) % frames.length; show(); }
function togglePlay() {
  playing = !playing;
  toggle.textContent = playing ? 'Pause' : 'Play';
  if (playing) { timer = setInterval(next, frameDelay); } else { clearInterval(timer); }
}

document.getElementById('prev').addEventListener('click', prev);
document.getElementById('next').addEventListener('click', next);
toggle.addEventListener('click', togglePlay);
document.addEventListener('keydown', (e) => {
  if (e.key === 'ArrowLeft') prev();
  if (e.key === 'ArrowRight') next();
  if (e.key === ' ') { e.preventDefault(); togglePlay(); }
});
show();
"""


def generate_animated_preview(
    session: Session,
    frame_delay_ms: int = DEFAULT_FRAME_DELAY_MS,
) -> Optional[str]:
    """
    Render animated-preview.html cycling through step screenshots.

    Returns:
        HTML document, or None when no step has a screenshot
    """
    frames = [
        {"src": step.evidence.screenshot_path, "description": f"Step {step.id}: {step.description}"}
        for step in session.steps
        if step.evidence.screenshot_path
    ]
    if not frames:
        return None

    data = json.dumps(frames, ensure_ascii=False).replace("</", "<\\/")
    title = escape(session.title)

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{title} - Animated Preview</title>
<style>
* {{ margin: 0; padding: 0; box-sizing: border-box; }}
body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background: #1a1a2e;
        min-height: 100vh; display: flex; flex-direction: column; align-items: center; padding: 20px; }}
h1 {{ color: #eee; margin-bottom: 20px; font-size: 24px; }}
.player {{ background: #000; border-radius: 8px; overflow: hidden; box-shadow: 0 10px 40px rgba(0,0,0,.5); }}
.player img {{ display: block; max-width: 100%; height: auto; }}
.controls {{ display: flex; gap: 10px; margin-top: 20px; }}
button {{ padding: 10px 20px; border: none; border-radius: 6px; cursor: pointer; background: #4361ee; color: #fff; }}
.indicator {{ color: #aaa; margin-top: 15px; }}
.caption {{ color: #fff; margin-top: 10px; max-width: 600px; text-align: center; }}
</style>
</head>
<body>
<h1>{title}</h1>
<div class="player"><img id="frame" alt="Demo frame"></div>
<div class="controls">
  <button id="prev">&larr; Previous</button>
  <button id="playPause">Pause</button>
  <button id="next">Next &rarr;</button>
</div>
<div class="indicator">Frame <span id="current">1</span> of {len(frames)}</div>
<div class="caption" id="description"></div>
<script>
const frames = {data};
const frameDelay = {int(frame_delay_ms)};
{SCRIPT}
</script>
</body>
</html>
"""
