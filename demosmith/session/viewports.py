"""Viewport (tab) registry for a recording session."""

import logging
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from demosmith.core.exceptions import (
    CannotCloseLastViewportError,
    NoActiveViewportError,
    UnknownViewportError,
)
from demosmith.core.logging import log_browser_event
from demosmith.session.views import ViewportInfo

logger = logging.getLogger(__name__)

PageFactory = Callable[[], Awaitable[Any]]


class ViewportRegistry:
    """
    Arena of page handles indexed by viewport id.

    Ids come from a monotonic counter (the arena length) and are never
    reused; closed slots stay in the arena as None. Exactly one live
    viewport is active while the registry is non-empty.
    """

    def __init__(self, page_factory: PageFactory, timeout: int = 30000):
        """
        Args:
            page_factory: Coroutine function returning a new page handle
            timeout: Navigation timeout in milliseconds for opened viewports
        """
        self._page_factory = page_factory
        self._timeout = timeout
        self._pages: List[Optional[Any]] = []
        self._active_id: Optional[int] = None

    def _is_live(self, viewport_id: int) -> bool:
        if viewport_id < 0 or viewport_id >= len(self._pages):
            return False
        page = self._pages[viewport_id]
        return page is not None and not page.is_closed()

    def _registered(self, viewport_id: int) -> bool:
        return 0 <= viewport_id < len(self._pages) and self._pages[viewport_id] is not None

    @property
    def live_ids(self) -> List[int]:
        """Ids of viewports whose page is still open, ascending."""
        return [i for i in range(len(self._pages)) if self._is_live(i)]

    @property
    def active_id(self) -> Optional[int]:
        return self._active_id

    @property
    def active(self) -> Any:
        """Page handle of the active viewport, re-validated on every access."""
        if self._active_id is None or not self._is_live(self._active_id):
            raise NoActiveViewportError(self._active_id)
        return self._pages[self._active_id]

    def get(self, viewport_id: int) -> Any:
        """Return the page for a live viewport id."""
        if not self._is_live(viewport_id):
            raise UnknownViewportError(viewport_id)
        return self._pages[viewport_id]

    def adopt(self, page: Any) -> int:
        """
        Register an already-open page under the next id.

        The first adopted page becomes the active viewport.
        """
        viewport_id = len(self._pages)
        self._pages.append(page)
        if self._active_id is None:
            self._active_id = viewport_id
        log_browser_event("viewport_adopted", viewport_id=viewport_id)
        return viewport_id

    async def open(self, url: Optional[str] = None) -> Tuple[int, Any]:
        """
        Open a new viewport, optionally navigating it.

        The active viewport does not change.

        Args:
            url: Location to load in the new viewport

        Returns:
            Tuple of (viewport id, page handle)
        """
        page = await self._page_factory()
        viewport_id = self.adopt(page)

        if url:
            try:
                await page.goto(url, wait_until="domcontentloaded", timeout=self._timeout)
            except Exception:
                self._pages[viewport_id] = None
                await page.close()
                raise

        log_browser_event("viewport_opened", viewport_id=viewport_id, url=url)
        logger.info(f"📑 Opened viewport {viewport_id}{': ' + url if url else ''}")
        return viewport_id, page

    async def switch(self, viewport_id: int) -> Any:
        """Make a live viewport active and bring it to the foreground."""
        page = self.get(viewport_id)
        self._active_id = viewport_id
        await page.bring_to_front()
        log_browser_event("viewport_switched", viewport_id=viewport_id)
        return page

    async def close(self, viewport_id: int) -> None:
        """
        Close a viewport.

        If it was active, the lowest remaining id becomes active.

        Raises:
            UnknownViewportError: The id is not registered
            CannotCloseLastViewportError: It is the only live viewport
        """
        if not self._registered(viewport_id):
            raise UnknownViewportError(viewport_id)

        remaining = [i for i in self.live_ids if i != viewport_id]
        if not remaining:
            raise CannotCloseLastViewportError(viewport_id)

        page = self._pages[viewport_id]
        if not page.is_closed():
            await page.close()
        self._pages[viewport_id] = None
        log_browser_event("viewport_closed", viewport_id=viewport_id)

        if self._active_id == viewport_id:
            await self.switch(min(remaining))

    async def list(self) -> List[ViewportInfo]:
        """Snapshot of all live viewports."""
        infos = []
        for viewport_id in self.live_ids:
            page = self._pages[viewport_id]
            try:
                title = await page.title()
            except Exception:
                # Execution context can be destroyed mid-navigation
                title = ""
            infos.append(ViewportInfo(
                id=viewport_id,
                url=page.url,
                title=title,
                is_active=viewport_id == self._active_id,
            ))
        return infos

    async def close_all(self) -> None:
        """Close every page. Ids stay consumed."""
        for viewport_id, page in enumerate(self._pages):
            if page is None:
                continue
            try:
                if not page.is_closed():
                    await page.close()
            except Exception as e:
                logger.warning(f"Failed to close viewport {viewport_id}: {e}")
            self._pages[viewport_id] = None
        self._active_id = None
        log_browser_event("viewports_closed")

    def __len__(self) -> int:
        return len(self.live_ids)

    def __contains__(self, viewport_id: int) -> bool:
        return self._is_live(viewport_id)
