"""Shared fixtures: in-memory stand-ins for Playwright pages and the browser driver."""

from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from demosmith.browser.views import SessionArtifacts
from demosmith.core.config import BrowserConfig, Config, RecordingConfig, TTSConfig
from demosmith.session.store import SessionStore

DEFAULT_NODES = [
    {"ref": "1", "role": "textbox", "name": "Email", "depth": 0},
    {"ref": "2", "role": "button", "name": "Sign in", "depth": 0},
]


class FakeClock:
    """Monotonic clock that advances a fixed amount on every reading."""

    def __init__(self, start: float = 1_700_000_000.0, tick: float = 0.25):
        self.now = start
        self.tick = tick

    def __call__(self) -> float:
        current = self.now
        self.now += self.tick
        return current


class FakeKeyboard:
    def __init__(self, page: "FakePage"):
        self._page = page

    async def press(self, key: str):
        self._page.actions.append(("press", key))


class FakeMouse:
    def __init__(self, page: "FakePage"):
        self._page = page

    async def wheel(self, dx: int, dy: int):
        self._page.actions.append(("wheel", dx, dy))


class FakeLocator:
    """Locator keyed by the selector that produced it."""

    def __init__(self, page: "FakePage", key: str):
        self.page = page
        self.key = key

    @property
    def first(self) -> "FakeLocator":
        return self

    def _record(self, action: str, *args):
        if self.key in self.page.failing:
            raise RuntimeError(f"{action} failed on {self.key}")
        self.page.actions.append((action, self.key) + args)

    async def count(self) -> int:
        return self.page.counts.get(self.key, 1)

    async def click(self):
        self._record("click")

    async def fill(self, value: str):
        self._record("fill", value)
        self.page.values[self.key] = value

    async def hover(self):
        self._record("hover")

    async def select_option(self, value: str):
        self._record("select", value)
        return [value]

    async def drag_to(self, target: "FakeLocator"):
        self._record("drag", target.key)

    async def set_input_files(self, path: str):
        self._record("upload", path)

    async def scroll_into_view_if_needed(self):
        self._record("scroll_into_view")

    async def text_content(self) -> str:
        return self.page.texts.get(self.key, "")

    async def input_value(self) -> str:
        return self.page.values.get(self.key, "")

    async def is_visible(self) -> bool:
        return self.key not in self.page.hidden

    async def is_checked(self) -> bool:
        return self.key in self.page.checked

    async def is_enabled(self) -> bool:
        return self.key not in self.page.disabled

    async def is_disabled(self) -> bool:
        return self.key in self.page.disabled


class FakePage:
    """Page double recording every interaction in ``actions``."""

    def __init__(self, url: str = "about:blank", title: str = ""):
        self.url = url
        self._title = title
        self.closed = False
        self.actions: List[tuple] = []
        self.counts: Dict[str, int] = {}
        self.texts: Dict[str, str] = {}
        self.values: Dict[str, str] = {}
        self.hidden: set = set()
        self.checked: set = set()
        self.disabled: set = set()
        self.failing: set = set()
        self.fail_urls: set = set()
        self.fail_screenshots = False
        self.nodes: List[Dict[str, Any]] = list(DEFAULT_NODES)
        self.keyboard = FakeKeyboard(self)
        self.mouse = FakeMouse(self)

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[int] = None):
        if url in self.fail_urls:
            raise RuntimeError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        self.url = url
        self.actions.append(("goto", url))

    async def title(self) -> str:
        return self._title

    def is_closed(self) -> bool:
        return self.closed

    async def close(self):
        self.closed = True

    async def bring_to_front(self):
        self.actions.append(("bring_to_front",))

    async def screenshot(self, path: str):
        if self.fail_screenshots:
            raise RuntimeError("screenshot failed")
        Path(path).write_bytes(b"\x89PNG\r\n")

    async def evaluate(self, script: str, arg: Any = None):
        return [dict(node) for node in self.nodes]

    async def wait_for_load_state(self, state: str, timeout: Optional[int] = None):
        self.actions.append(("wait", state))

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    def get_by_text(self, text) -> FakeLocator:
        return FakeLocator(self, f"text={getattr(text, 'pattern', text)}")

    def get_by_label(self, text: str) -> FakeLocator:
        return FakeLocator(self, f"label={text}")

    def get_by_placeholder(self, text: str) -> FakeLocator:
        return FakeLocator(self, f"placeholder={text}")

    def get_by_role(self, role: str, name: Optional[str] = None) -> FakeLocator:
        return FakeLocator(self, f"role={role}:{name or ''}")

    def get_by_test_id(self, test_id: str) -> FakeLocator:
        return FakeLocator(self, f"testid={test_id}")

    def get_by_alt_text(self, text: str) -> FakeLocator:
        return FakeLocator(self, f"alt={text}")

    def get_by_title(self, text: str) -> FakeLocator:
        return FakeLocator(self, f"title={text}")


class FakeDriver:
    """Driver double; hands out FakePages and tracks its own lifecycle."""

    def __init__(self, options=None, output_dir=None, config=None, fail_launch: bool = False):
        self.options = options
        self.output_dir = output_dir
        self.config = config
        self.fail_launch = fail_launch
        self.pages: List[FakePage] = []
        self.launched = False
        self.closed = False

    async def launch(self) -> FakePage:
        if self.fail_launch:
            raise RuntimeError("browser failed to launch")
        self.launched = True
        return await self.new_page()

    async def new_page(self) -> FakePage:
        page = FakePage()
        self.pages.append(page)
        return page

    async def close(self) -> SessionArtifacts:
        self.closed = True
        return SessionArtifacts()


class DriverFactory:
    """Records every driver the store creates."""

    def __init__(self, fail_launch: bool = False):
        self.fail_launch = fail_launch
        self.drivers: List[FakeDriver] = []

    def __call__(self, options=None, output_dir=None, config=None) -> FakeDriver:
        driver = FakeDriver(options, output_dir, config, fail_launch=self.fail_launch)
        self.drivers.append(driver)
        return driver

    @property
    def last(self) -> FakeDriver:
        return self.drivers[-1]


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        browser=BrowserConfig(),
        recording=RecordingConfig(output_root=str(tmp_path / "sessions")),
        tts=TTSConfig(),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def driver_factory() -> DriverFactory:
    return DriverFactory()


@pytest.fixture
def store(driver_factory, config, clock) -> SessionStore:
    return SessionStore(driver_factory=driver_factory, config=config, clock=clock)
