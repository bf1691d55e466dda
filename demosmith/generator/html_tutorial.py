"""Self-contained interactive HTML tutorial."""

import json
from html import escape
from typing import Any, Dict, List, Optional

from demosmith.session.views import Session, Step

STYLE = """
:root { --primary: #4361ee; --bg: #0f0f1a; --card: #1a1a2e; --hover: #252542;
        --text: #e8e8e8; --muted: #888; --border: #333; --ok: #10b981; --fail: #ef4444; }
* { margin: 0; padding: 0; box-sizing: border-box; }
body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
       background: var(--bg); color: var(--text); line-height: 1.6; }
.container { max-width: 1200px; margin: 0 auto; padding: 32px 20px; }
header { text-align: center; margin-bottom: 24px; }
h1 { font-size: 2rem; }
.subtitle { color: var(--muted); }
.progress { height: 4px; background: var(--border); border-radius: 2px; margin-bottom: 24px; }
.progress-bar { height: 100%; width: 0; background: var(--primary); transition: width .3s; }
.layout { display: grid; grid-template-columns: 280px 1fr; gap: 24px; }
.sidebar { background: var(--card); border-radius: 12px; padding: 12px; max-height: 80vh; overflow-y: auto; }
.step-item { padding: 10px 12px; border-radius: 8px; cursor: pointer; display: flex; gap: 10px; }
.step-item:hover { background: var(--hover); }
.step-item.active { background: var(--primary); }
.step-item.completed .step-num { background: var(--ok); }
.step-item.failed .step-num { background: var(--fail); }
.step-num { min-width: 24px; height: 24px; border-radius: 50%; background: var(--border);
            display: inline-flex; align-items: center; justify-content: center; font-size: .8rem; }
.viewer { background: var(--card); border-radius: 12px; padding: 20px; }
.viewer img, .viewer video { width: 100%; border-radius: 8px; border: 1px solid var(--border); }
.viewer-header { display: flex; justify-content: space-between; margin-bottom: 12px; }
.badge { background: var(--hover); border-radius: 6px; padding: 2px 8px; font-size: .8rem; }
.description { margin: 16px 0 8px; font-size: 1.1rem; }
.meta { color: var(--muted); font-size: .9rem; }
.error { color: var(--fail); }
.nav { display: flex; justify-content: space-between; margin-top: 20px; }
button { background: var(--primary); color: #fff; border: 0; border-radius: 8px; padding: 10px 20px; cursor: pointer; }
button:disabled { opacity: .4; cursor: default; }
section.video { margin-top: 32px; }
"""

SCRIPT = """
let current = 0;
const total = steps.length;
const $ = (id) => document.getElementById(id);

function render() {
  if (!total) return;
  const step = steps[current];
  $('progress').style.width = ((current + 1) / total * 100) + '%';
  document.querySelectorAll('.step-item').forEach((item, i) => {
    item.classList.toggle('active', i === current);
    item.classList.toggle('completed', i < current && steps[i].success);
  });
  $('viewerTitle').textContent = 'Step ' + step.id;
  $('viewerAction').textContent = step.action;
  $('viewerDescription').textContent = step.description;
  $('viewerDuration').textContent = step.duration + 'ms';
  $('viewerError').textContent = step.error || '';
  const img = $('viewerImage');
  img.style.display = step.screenshot ? '' : 'none';
  if (step.screenshot) img.src = step.screenshot;
  $('prevBtn').disabled = current === 0;
  $('nextBtn').disabled = current === total - 1;
}

function goTo(index) {
  if (index >= 0 && index < total) { current = index; render(); }
}

$('prevBtn').addEventListener('click', () => goTo(current - 1));
$('nextBtn').addEventListener('click', () => goTo(current + 1));
document.querySelectorAll('.step-item').forEach(item => {
  item.addEventListener('click', () => goTo(parseInt(item.dataset.index, 10)));
});
document.addEventListener('keydown', (e) => {
  if (e.key === 'ArrowLeft') goTo(current - 1);
  if (e.key === 'ArrowRight' || e.key === ' ') { e.preventDefault(); goTo(current + 1); }
});
render();
"""


def _step_payload(step: Step) -> Dict[str, Any]:
    return {
        "id": step.id,
        "action": step.action.value,
        "description": step.description,
        "duration": step.duration_ms,
        "screenshot": step.evidence.screenshot_path,
        "success": step.success,
        "error": step.error,
    }


def _sidebar(steps: List[Step]) -> str:
    items = []
    for index, step in enumerate(steps):
        state = "" if step.success else " failed"
        items.append(
            f'<div class="step-item{state}" data-index="{index}">'
            f'<span class="step-num">{step.id}</span>'
            f"<span>{escape(step.description)}</span></div>"
        )
    return "\n".join(items)


def generate_html_tutorial(
    session: Session,
    video_file: Optional[str] = None,
    subtitles_file: Optional[str] = "subtitles.vtt",
) -> str:
    """
    Render the interactive tutorial page (tutorial.html).

    Args:
        session: Completed session
        video_file: Video path relative to the output directory, if any
        subtitles_file: WebVTT track attached to the video

    Returns:
        HTML document
    """
    steps = list(session.steps)
    summary = session.summary()
    # Keep "</script>" inside step text from closing the data block
    data = json.dumps([_step_payload(s) for s in steps], ensure_ascii=False).replace("</", "<\\/")

    video = ""
    if video_file:
        track = ""
        if subtitles_file:
            track = f'<track kind="subtitles" src="{escape(subtitles_file)}" srclang="en" label="English" default>'
        video = (
            '<section class="video"><h2>Full recording</h2>'
            f'<video controls src="{escape(video_file)}">{track}</video></section>'
        )

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{escape(session.title)} - Interactive Tutorial</title>
<style>{STYLE}</style>
</head>
<body>
<div class="container">
  <header>
    <h1>{escape(session.title)}</h1>
    <p class="subtitle">{summary.total_steps} steps · {summary.total_duration_ms / 1000:.1f}s · {escape(session.start_url)}</p>
  </header>
  <div class="progress"><div class="progress-bar" id="progress"></div></div>
  <div class="layout">
    <nav class="sidebar">
{_sidebar(steps)}
    </nav>
    <main class="viewer">
      <div class="viewer-header"><strong id="viewerTitle"></strong><span class="badge" id="viewerAction"></span></div>
      <img id="viewerImage" alt="Step screenshot">
      <p class="description" id="viewerDescription"></p>
      <p class="meta">Duration: <span id="viewerDuration"></span></p>
      <p class="error" id="viewerError"></p>
      <div class="nav"><button id="prevBtn">&larr; Previous</button><button id="nextBtn">Next &rarr;</button></div>
    </main>
  </div>
  {video}
</div>
<script>
const steps = {data};
{SCRIPT}
</script>
</body>
</html>
"""
