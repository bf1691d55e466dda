"""
Record Demo Example
===================

Records a short walkthrough of example.com through the tool layer and
packages the deliverables (guide, subtitles, tutorial, ...).

Usage:
    python examples/record_demo.py
"""

import asyncio
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from demosmith import SessionStore, create_default_registry


async def record_demo():
    """
    Record three steps and print where the deliverables went.
    """
    registry = create_default_registry()

    async with SessionStore() as store:
        result = await registry.execute("start_session", {
            "url": "https://example.com",
            "title": "Example Domain Tour",
        }, store)
        print(f"🎬 Session {result.data['sessionId']} recording to {result.data['outputDir']}")

        snapshot = await registry.execute("snapshot", {}, store)
        print(snapshot.data["snapshot"])

        steps = [
            ("assert", {"type": "title", "expected": "Example Domain", "description": "Check the page title"}),
            ("screenshot", {"name": "landing", "description": "Capture the landing page"}),
            ("click", {"selector": "text:More information", "description": "Open more information"}),
        ]
        for tool_name, params in steps:
            step = await registry.execute(tool_name, params, store)
            if step.success:
                print(f"✅ {params['description']}")
            else:
                print(f"❌ {params['description']}: {step.error.message}")

        result = await registry.execute("end_session", {}, store)

    print("\n" + "=" * 50)
    print("📦 DELIVERABLES")
    print("=" * 50)

    files = result.data["deliverables"]["files"]
    for name, path in files.items():
        if path and not isinstance(path, list):
            print(f"   • {name}: {path}")

    errors = result.data["deliverables"]["errors"]
    if errors:
        print(f"\n⚠️  Failed generators: {', '.join(errors)}")


if __name__ == "__main__":
    asyncio.run(record_demo())
