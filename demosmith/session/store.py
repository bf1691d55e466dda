"""Session store: owner of the single active recording session."""

import asyncio
import logging
import time
from datetime import datetime
from typing import Any, Callable, Optional
from uuid import uuid4

from demosmith.browser.driver import BrowserDriver
from demosmith.browser.snapshot import SnapshotRefs
from demosmith.browser.views import SessionArtifacts
from demosmith.core.config import CONFIG, Config, SessionOptions
from demosmith.core.exceptions import NoActiveSessionError
from demosmith.session.viewports import ViewportRegistry
from demosmith.session.views import Session, SessionStatus, Step, StepDraft

logger = logging.getLogger(__name__)

DriverFactory = Callable[..., Any]


class SessionStore:
    """
    Holds at most one running session.

    Starting a session while another is running ends the old one first.
    Tool calls serialize on ``lock``; the store itself does not lock.

    Usage:
        async with SessionStore() as store:
            session = await store.start("https://example.com", "Sign in")
            ...
    """

    def __init__(
        self,
        driver_factory: Optional[DriverFactory] = None,
        config: Optional[Config] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            driver_factory: Called as ``factory(options=, output_dir=, config=)``;
                defaults to BrowserDriver
            config: Configuration (CONFIG if None)
            clock: Wall clock in epoch seconds
        """
        self.config = config or CONFIG
        self.clock = clock
        self._driver_factory = driver_factory or BrowserDriver
        self._active: Optional[Session] = None
        self._lock = asyncio.Lock()

    @property
    def active(self) -> Optional[Session]:
        return self._active

    @property
    def lock(self) -> asyncio.Lock:
        return self._lock

    async def start(
        self,
        url: str,
        title: Optional[str] = None,
        options: Optional[SessionOptions] = None,
    ) -> Session:
        """
        Start a new recording session.

        Args:
            url: Starting location for the first viewport
            title: Demo title
            options: Recording options (from config if None)

        Returns:
            The running session
        """
        if self._active is not None:
            logger.info(f"Ending session {self._active.id} before starting a new one")
            await self.end()

        options = options or SessionOptions.from_config(self.config)
        session_id = uuid4().hex[:8]
        output_dir = options.resolve_output_dir(session_id, self.config)
        output_dir.mkdir(parents=True, exist_ok=True)

        session = Session(
            id=session_id,
            title=title or "Demo",
            start_url=url,
            options=options,
            output_dir=output_dir,
            refs=SnapshotRefs(),
        )
        session.assets_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"🎬 Starting session {session_id}: {session.title}")

        try:
            driver = self._driver_factory(
                options=options,
                output_dir=output_dir,
                config=self.config,
            )
            session.driver = driver
            page = await driver.launch()
            if options.video:
                session.video_origin = self.clock()

            session.viewports = ViewportRegistry(
                driver.new_page,
                timeout=self.config.browser.timeout,
            )
            session.viewports.adopt(page)
            await page.goto(url, wait_until="domcontentloaded", timeout=self.config.browser.timeout)
        except Exception as e:
            logger.error(f"❌ Failed to start session {session_id}: {e}")
            try:
                session.artifacts = await self._release(session)
            finally:
                session.status = SessionStatus.FAILED
                session.completed_at = datetime.now()
            raise

        self._active = session
        logger.info(f"Session {session_id} recording to {output_dir}")
        return session

    async def end(self, status: SessionStatus = SessionStatus.COMPLETED) -> Optional[Session]:
        """
        End the active session and release its browser resources.

        Args:
            status: Final status to record

        Returns:
            The finished session, or None when no session was active
        """
        session = self._active
        if session is None:
            return None

        logger.info(f"🛑 Ending session {session.id}")
        try:
            session.artifacts = await self._release(session)
        finally:
            session.status = status
            session.completed_at = datetime.now()
            self._active = None

        summary = session.summary()
        logger.info(
            f"Session {session.id} {status.value}: "
            f"{summary.success_count}/{summary.total_steps} steps succeeded"
        )
        return session

    async def _release(self, session: Session) -> SessionArtifacts:
        artifacts = SessionArtifacts()
        try:
            if session.viewports is not None:
                await session.viewports.close_all()
        finally:
            if session.driver is not None:
                artifacts = await session.driver.close()
                session.driver = None
        return artifacts

    def require_session(self) -> Session:
        """
        Return the running session without checking its active viewport.

        Viewport tools use this so a caller can switch away from a page
        that was closed underneath it.

        Raises:
            NoActiveSessionError: No session is running
        """
        if self._active is None:
            raise NoActiveSessionError()
        return self._active

    def require_active(self) -> Session:
        """
        Return the running session.

        Raises:
            NoActiveSessionError: No session is running
            NoActiveViewportError: The active viewport is gone
        """
        session = self.require_session()
        # Raises NoActiveViewportError if the active page was closed
        session.viewports.active
        return session

    def append_step(self, draft: StepDraft) -> Step:
        """Assign the next sequence id and append to the active session's log."""
        if self._active is None or not self._active.is_running:
            raise NoActiveSessionError()
        return self._active._append(draft)

    async def __aenter__(self) -> "SessionStore":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.end()
