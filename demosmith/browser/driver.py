"""Browser driver owning the Playwright resources of one recording."""

import logging
from pathlib import Path
from typing import Any, Optional
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
)

from demosmith.core.config import CONFIG, Config, SessionOptions
from demosmith.core.exceptions import BrowserError
from demosmith.core.logging import log_browser_event
from demosmith.browser.views import SessionArtifacts

logger = logging.getLogger(__name__)

VIDEO_FILENAME = "demo.webm"
TRACE_FILENAME = "trace.zip"
VIDEO_STAGING_DIR = "videos"


class BrowserDriver:
    """
    Launches and releases the browser, video writer and trace recorder.

    One driver serves one session. ``close`` always tears everything
    down, even when an earlier step in the chain fails.
    """

    def __init__(
        self,
        options: SessionOptions,
        output_dir: Path,
        config: Optional[Config] = None,
    ):
        self.options = options
        self.output_dir = Path(output_dir)
        self.config = config or CONFIG
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._video: Optional[Any] = None
        self._tracing = False

    @property
    def context(self) -> BrowserContext:
        """Get the browser context."""
        if not self._context:
            raise BrowserError("Browser not launched")
        return self._context

    async def launch(self) -> Page:
        """
        Launch the browser and open the first page.

        Returns:
            The primary page, which carries the session video
        """
        logger.info("Launching browser...")

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.options.headless,
            slow_mo=self.config.browser.slow_mo,
        )

        context_options = {"viewport": self.options.viewport}

        if self.options.video:
            staging = self.output_dir / VIDEO_STAGING_DIR
            staging.mkdir(parents=True, exist_ok=True)
            context_options["record_video_dir"] = str(staging)
            context_options["record_video_size"] = self.options.viewport

        # Load saved login state if available
        if self.options.storage_state and Path(self.options.storage_state).exists():
            context_options["storage_state"] = self.options.storage_state
            logger.info(f"Loading saved session from {self.options.storage_state}")

        self._context = await self._browser.new_context(**context_options)
        self._context.set_default_timeout(self.config.browser.timeout)

        if self.options.trace:
            await self._context.tracing.start(screenshots=True, snapshots=True, sources=False)
            self._tracing = True

        page = await self._context.new_page()
        self._video = page.video

        log_browser_event(
            "launched",
            headless=self.options.headless,
            video=self.options.video,
            trace=self.options.trace,
        )
        logger.info(f"Browser launched (headless={self.options.headless})")
        return page

    async def new_page(self) -> Page:
        """Open another page in the recording context."""
        return await self.context.new_page()

    async def close(self) -> SessionArtifacts:
        """
        Stop tracing and release the browser.

        Returns:
            Paths of the trace and video that were written
        """
        logger.info("Closing browser...")
        artifacts = SessionArtifacts()

        try:
            if self._context and self._tracing:
                trace_path = self.output_dir / TRACE_FILENAME
                await self._context.tracing.stop(path=str(trace_path))
                artifacts.trace_path = str(trace_path)
                logger.info(f"Trace saved: {trace_path}")
        except Exception as e:
            logger.warning(f"Failed to save trace: {e}")
        finally:
            self._tracing = False
            try:
                if self._context:
                    await self._context.close()
            finally:
                self._context = None
                try:
                    if self._browser:
                        await self._browser.close()
                finally:
                    self._browser = None
                    if self._playwright:
                        await self._playwright.stop()
                        self._playwright = None

        # The video file is complete only once the context is closed
        if self._video is not None:
            artifacts.video_path = await self._finalize_video()
            self._video = None

        log_browser_event("closed", **artifacts.__dict__)
        logger.info("Browser closed")
        return artifacts

    async def _finalize_video(self) -> Optional[str]:
        try:
            recorded = Path(await self._video.path())
        except Exception as e:
            logger.warning(f"Video path unavailable: {e}")
            return None

        target = self.output_dir / VIDEO_FILENAME
        try:
            recorded.replace(target)
        except OSError as e:
            logger.warning(f"Could not move video to {target}: {e}")
            return str(recorded)

        logger.info(f"Video saved: {target}")
        return str(target)
