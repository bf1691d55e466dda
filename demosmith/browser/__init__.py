"""Browser layer - Playwright driver, snapshots, and element lookup."""

from demosmith.browser.driver import BrowserDriver
from demosmith.browser.snapshot import SnapshotRefs, build_locator, find_element
from demosmith.browser.views import SessionArtifacts

__all__ = [
    "BrowserDriver",
    "SnapshotRefs",
    "build_locator",
    "find_element",
    "SessionArtifacts",
]
