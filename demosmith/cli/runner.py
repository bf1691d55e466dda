"""CLI runner for demo recording and deliverable generation."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from demosmith import __version__
from demosmith.core.config import Config
from demosmith.generator.json_log import load_session
from demosmith.generator.packager import MANIFEST_FILENAME, DeliverableManifest, DeliverablePackager
from demosmith.generator.tts import NarrationSynthesizer
from demosmith.session.store import SessionStore
from demosmith.tools.actions import create_default_registry, replay_step

console = Console()


def setup_cli_logging(verbose: bool = False) -> None:
    """Set up logging for CLI."""
    level = "DEBUG" if verbose else "INFO"

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(
            console=console,
            rich_tracebacks=True,
            show_time=False,
        )]
    )

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("playwright").setLevel(logging.WARNING)


def display_manifest(manifest: DeliverableManifest) -> None:
    """Show what packaging produced."""
    console.print()

    table = Table(title="Deliverables", border_style="blue")
    table.add_column("Artifact", style="cyan")
    table.add_column("Path", style="green")

    for name, path in manifest.files.model_dump().items():
        if isinstance(path, list):
            value = f"{len(path)} file(s)" if path else "-"
        else:
            value = path or "-"
        table.add_row(name, value)
    console.print(table)

    summary = manifest.summary
    console.print(
        f"\n[bold]Steps:[/bold] {summary.success_count}/{summary.total_steps} succeeded "
        f"({summary.total_duration_ms / 1000:.1f}s)"
    )

    if manifest.errors:
        console.print(Panel(
            "\n".join(f"{name}: {message}" for name, message in manifest.errors.items()),
            title="⚠️ Failed generators",
            border_style="red",
        ))


async def generate_deliverables(steps_json: str, output_dir: Optional[str], tts: bool) -> DeliverableManifest:
    """
    Re-render deliverables from an existing step log.

    Args:
        steps_json: Path to steps.json
        output_dir: Target directory (the log's directory if None)
        tts: Synthesize narration audio

    Returns:
        Packaging manifest
    """
    session = load_session(steps_json, output_dir)
    console.print(f"[dim]Loaded {len(session.steps)} steps from {steps_json}[/dim]")

    synthesizer = NarrationSynthesizer() if tts else None
    return await DeliverablePackager(session, synthesizer).package()


async def replay_session(
    steps_json: str,
    output_dir: Optional[str],
    headless: bool,
    video: bool,
    width: Optional[int],
    height: Optional[int],
) -> DeliverableManifest:
    """
    Re-execute a step log through the tool layer and package the new session.

    Failed steps are reported and replay carries on with the next one.
    """
    source = load_session(steps_json)
    registry = create_default_registry()
    store = SessionStore()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Launching browser...", total=None)

        started = await registry.execute("start_session", {
            "url": source.start_url,
            "title": source.title,
            "outputDir": output_dir,
            "headless": headless,
            "video": video,
            "viewportWidth": width,
            "viewportHeight": height,
        }, store)
        if not started.success:
            raise click.ClickException(f"Could not start session: {started.error.message}")

        failures = 0
        for step in source.steps:
            progress.update(task, description=f"Step {step.id}/{len(source.steps)}: {step.description}")
            result = await replay_step(registry, store, step)
            if not result.success:
                failures += 1

        progress.update(task, description="Packaging deliverables...")
        ended = await registry.execute("end_session", {"package": True}, store)

    if failures:
        console.print(f"[yellow]{failures} step(s) failed during replay[/yellow]")
    if not ended.success:
        raise click.ClickException(f"Could not end session: {ended.error.message}")
    return DeliverableManifest.model_validate(ended.data["deliverables"])


async def save_login(url: str, output: str, width: int, height: int) -> None:
    """Open a headed browser for a manual login and save its storage state."""
    from playwright.async_api import async_playwright

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=False)
        context = await browser.new_context(viewport={"width": width, "height": height})
        page = await context.new_page()
        await page.goto(url)

        console.print(Panel(
            "Log in in the browser window, then come back here.",
            title="🔐 Login",
            border_style="blue",
        ))
        await asyncio.get_running_loop().run_in_executor(
            None, input, "Press ENTER when you're done logging in..."
        )

        Path(output).parent.mkdir(parents=True, exist_ok=True)
        await context.storage_state(path=output)
        await browser.close()


def _run(coro, verbose: bool):
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(1)
    except click.ClickException:
        raise
    except Exception as e:
        console.print(f"\n[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
def cli():
    """🎬 demosmith - record browser demos and turn them into tutorials"""
    pass


@cli.command()
@click.argument("steps_json", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(file_okay=False), help="Output directory")
@click.option("--tts", is_flag=True, help="Synthesize narration audio")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def generate(steps_json: str, output: Optional[str], tts: bool, verbose: bool):
    """Regenerate deliverables from a steps.json file (no browser needed).

    Examples:

        demosmith generate out/steps.json

        demosmith generate out/steps.json -o rebuilt/
    """
    setup_cli_logging(verbose)
    manifest = _run(generate_deliverables(steps_json, output, tts), verbose)
    display_manifest(manifest)
    if not manifest.ok:
        sys.exit(1)


@cli.command()
@click.argument("steps_json", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(file_okay=False), help="Output directory")
@click.option("--headless", "-h", is_flag=True, help="Run browser in headless mode")
@click.option("--video/--no-video", default=True, help="Record video")
@click.option("--width", type=int, help="Viewport width")
@click.option("--height", type=int, help="Viewport height")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def replay(
    steps_json: str,
    output: Optional[str],
    headless: bool,
    video: bool,
    width: Optional[int],
    height: Optional[int],
    verbose: bool,
):
    """Re-record a session from its steps.json.

    Examples:

        demosmith replay out/steps.json -o take2/ --headless
    """
    setup_cli_logging(verbose)
    console.print(Panel(
        f"[bold blue]Replaying:[/bold blue] {steps_json}",
        title="🎬 demosmith",
        border_style="blue",
    ))
    manifest = _run(replay_session(steps_json, output, headless, video, width, height), verbose)
    display_manifest(manifest)


@cli.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
def view(directory: str):
    """Show the steps of a packaged session."""
    root = Path(directory)
    steps_path = root / "steps.json"
    if not steps_path.exists():
        raise click.ClickException(f"No steps.json in {directory}")

    data = json.loads(steps_path.read_text(encoding="utf-8"))

    table = Table(title=data.get("title", "Demo"), border_style="blue")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Action", style="magenta")
    table.add_column("Description")
    table.add_column("Duration", justify="right")
    table.add_column("Result")

    for step in data.get("steps", []):
        table.add_row(
            str(step["id"]),
            step["action"],
            step["description"],
            f"{step['duration']}ms",
            "✅" if step["success"] else f"❌ {step.get('error') or ''}",
        )
    console.print(table)

    manifest_path = root / MANIFEST_FILENAME
    if manifest_path.exists():
        manifest = DeliverableManifest.model_validate_json(manifest_path.read_text(encoding="utf-8"))
        display_manifest(manifest)


@cli.command()
def tools():
    """List the tool surface."""
    registry = create_default_registry()

    table = Table(title="Tools", border_style="blue")
    table.add_column("Name", style="cyan")
    table.add_column("Description", style="green")
    for definition in registry:
        table.add_row(definition.name, definition.description)
    console.print(table)


@cli.command()
@click.argument("url")
@click.option("--output", "-o", default="browser_session.json", help="Storage state file")
@click.option("--width", default=1280, help="Viewport width")
@click.option("--height", default=720, help="Viewport height")
def login(url: str, output: str, width: int, height: int):
    """Log in manually and save the browser storage state.

    Pass the file as DEMOSMITH_STORAGE_STATE (or storageState) to record
    demos behind a login.
    """
    setup_cli_logging()
    _run(save_login(url, output, width, height), verbose=False)
    console.print(f"✅ Session saved to: {output}")


@cli.command()
def info():
    """Show configuration."""
    config = Config.from_env()

    table = Table(title="Configuration", border_style="blue")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Headless", "Yes" if config.browser.headless else "No")
    table.add_row("Viewport", f"{config.browser.viewport_width}x{config.browser.viewport_height}")
    table.add_row("Timeout", f"{config.browser.timeout}ms")
    table.add_row("Storage State", config.browser.storage_state or "-")
    table.add_row("Video", "Yes" if config.recording.video else "No")
    table.add_row("Trace", "Yes" if config.recording.trace else "No")
    table.add_row("Output Root", config.recording.output_root)
    table.add_row("TTS", f"{config.tts.model}/{config.tts.voice}" if config.tts.enabled else "Off")

    console.print(table)

    if config.tts.enabled and not config.tts.api_key:
        console.print("\n[yellow]⚠️  OPENAI_API_KEY not set. Narration audio will fail.[/yellow]")


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
