"""Core components - configuration, logging, and exceptions."""

from demosmith.core.config import (
    BrowserConfig,
    Config,
    RecordingConfig,
    SessionOptions,
    TTSConfig,
)
from demosmith.core.exceptions import (
    DemoSmithError,
    SessionError,
    NoActiveSessionError,
    NoActiveViewportError,
    UnknownViewportError,
    CannotCloseLastViewportError,
    BrowserError,
    ElementNotFoundError,
    AmbiguousSelectorError,
    GeneratorError,
)
from demosmith.core.logging import setup_logging, get_logger

__all__ = [
    "BrowserConfig",
    "Config",
    "RecordingConfig",
    "SessionOptions",
    "TTSConfig",
    "DemoSmithError",
    "SessionError",
    "NoActiveSessionError",
    "NoActiveViewportError",
    "UnknownViewportError",
    "CannotCloseLastViewportError",
    "BrowserError",
    "ElementNotFoundError",
    "AmbiguousSelectorError",
    "GeneratorError",
    "setup_logging",
    "get_logger",
]
