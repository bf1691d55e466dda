"""Markdown walkthrough guide."""

from datetime import datetime

from demosmith.session.views import Session, Step


def _step_to_markdown(step: Step) -> str:
    md = f"### Step {step.id}: {step.description}\n\n"

    if step.evidence.screenshot_path:
        md += f"![Step {step.id} screenshot]({step.evidence.screenshot_path})\n\n"

    details = step.details.to_json()
    md += f"- **Action:** `{step.action.value}`\n"
    if "url" in details:
        md += f"- **URL:** {details['url']}\n"
    if details.get("value"):
        md += f"- **Value:** `{details['value']}`\n"
    if "key" in details:
        md += f"- **Key:** `{details['key']}`\n"
    if "viewportId" in details:
        md += f"- **Viewport:** {details['viewportId']}\n"

    if step.success:
        md += "- **Status:** ✅ Success\n"
    else:
        md += "- **Status:** ❌ Failed\n"
        if step.error:
            md += f"- **Error:** {step.error}\n"

    md += f"- **Duration:** {step.duration_ms}ms\n\n"
    return md


def generate_markdown_guide(session: Session) -> str:
    """
    Render the session as a step-by-step markdown guide (guide.md).

    Args:
        session: Completed session

    Returns:
        Markdown text
    """
    summary = session.summary()

    md = f"# {session.title}\n\n"
    md += "## Overview\n\n"
    md += f"- **Start URL:** {session.start_url}\n"
    md += f"- **Total steps:** {summary.total_steps}\n"
    md += f"- **Success rate:** {round(summary.success_rate * 100)}%\n"
    md += f"- **Total time:** {summary.total_duration_ms / 1000:.1f}s\n\n"

    md += "## Steps\n\n"
    for step in session.steps:
        md += _step_to_markdown(step)

    md += "---\n"
    md += f"*Generated by demosmith on {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}*\n"
    return md
