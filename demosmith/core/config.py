"""Configuration management for demo recording sessions."""

import os
import tempfile
from pathlib import Path
from typing import Any, Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class BrowserConfig(BaseModel):
    """Browser-specific configuration."""

    headless: bool = Field(
        default=False,
        description="Run browser in headless mode"
    )
    timeout: int = Field(
        default=30000,
        description="Default timeout in milliseconds"
    )
    viewport_width: int = Field(
        default=1280,
        description="Browser viewport width"
    )
    viewport_height: int = Field(
        default=720,
        description="Browser viewport height"
    )
    slow_mo: int = Field(
        default=0,
        description="Slow down operations by specified milliseconds"
    )
    storage_state: Optional[str] = Field(
        default=None,
        description="Storage state file with a saved login session"
    )

    @classmethod
    def from_env(cls) -> "BrowserConfig":
        """Create config from environment variables."""
        return cls(
            headless=_env_flag("DEMOSMITH_HEADLESS", "false"),
            timeout=int(os.getenv("DEMOSMITH_TIMEOUT", "30000")),
            viewport_width=int(os.getenv("DEMOSMITH_VIEWPORT_WIDTH", "1280")),
            viewport_height=int(os.getenv("DEMOSMITH_VIEWPORT_HEIGHT", "720")),
            slow_mo=int(os.getenv("DEMOSMITH_SLOW_MO", "0")),
            storage_state=os.getenv("DEMOSMITH_STORAGE_STATE"),
        )


class RecordingConfig(BaseModel):
    """Defaults applied to every new recording session."""

    video: bool = Field(default=True, description="Record a video of the session")
    trace: bool = Field(default=True, description="Record a Playwright trace")
    screenshot_on_step: bool = Field(
        default=True,
        description="Capture a screenshot before every recorded step"
    )
    snapshot_on_step: bool = Field(
        default=False,
        description="Capture accessibility snapshots around every recorded step"
    )
    output_root: str = Field(
        default_factory=lambda: str(Path(tempfile.gettempdir()) / "demosmith"),
        description="Parent directory for per-session output directories"
    )

    @classmethod
    def from_env(cls) -> "RecordingConfig":
        """Create config from environment variables."""
        return cls(
            video=_env_flag("DEMOSMITH_VIDEO", "true"),
            trace=_env_flag("DEMOSMITH_TRACE", "true"),
            screenshot_on_step=_env_flag("DEMOSMITH_SCREENSHOT_ON_STEP", "true"),
            snapshot_on_step=_env_flag("DEMOSMITH_SNAPSHOT_ON_STEP", "false"),
            output_root=os.getenv(
                "DEMOSMITH_OUTPUT_ROOT",
                str(Path(tempfile.gettempdir()) / "demosmith"),
            ),
        )


class TTSConfig(BaseModel):
    """Speech synthesis settings for narration audio."""

    enabled: bool = Field(default=False, description="Synthesize narration audio")
    api_key: str = Field(default="", description="OpenAI API key")
    model: str = Field(default="tts-1", description="Speech model name")
    voice: str = Field(default="alloy", description="Voice to use")
    timeout: int = Field(default=60, description="Request timeout in seconds")

    @classmethod
    def from_env(cls) -> "TTSConfig":
        """Create config from environment variables."""
        return cls(
            enabled=_env_flag("DEMOSMITH_TTS_ENABLED", "false"),
            api_key=os.getenv("OPENAI_API_KEY", ""),
            model=os.getenv("DEMOSMITH_TTS_MODEL", "tts-1"),
            voice=os.getenv("DEMOSMITH_TTS_VOICE", "alloy"),
            timeout=int(os.getenv("DEMOSMITH_TTS_TIMEOUT", "60")),
        )


class Config(BaseModel):
    """Main configuration container."""

    browser: BrowserConfig = Field(default_factory=BrowserConfig.from_env)
    recording: RecordingConfig = Field(default_factory=RecordingConfig.from_env)
    tts: TTSConfig = Field(default_factory=TTSConfig.from_env)

    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Log file path"
    )
    json_logs: bool = Field(
        default=False,
        description="Render logs as JSON"
    )

    @classmethod
    def from_env(cls) -> "Config":
        """Create complete config from environment variables."""
        return cls(
            browser=BrowserConfig.from_env(),
            recording=RecordingConfig.from_env(),
            tts=TTSConfig.from_env(),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE"),
            json_logs=_env_flag("LOG_JSON", "false"),
        )


class SessionOptions(BaseModel):
    """Per-session recording options."""

    video: bool = True
    trace: bool = True
    screenshot_on_step: bool = True
    snapshot_on_step: bool = False
    output_dir: Optional[str] = Field(
        default=None,
        description="Output directory (defaults to <output_root>/<session id>)"
    )
    headless: bool = False
    viewport_width: int = 1280
    viewport_height: int = 720
    storage_state: Optional[str] = None

    @classmethod
    def from_config(cls, config: Optional[Config] = None, **overrides: Any) -> "SessionOptions":
        """
        Build session options from the global configuration.

        Args:
            config: Configuration to read defaults from (CONFIG if None)
            **overrides: Explicit values; None values are ignored

        Returns:
            SessionOptions with overrides applied
        """
        config = config or CONFIG
        values = {
            "video": config.recording.video,
            "trace": config.recording.trace,
            "screenshot_on_step": config.recording.screenshot_on_step,
            "snapshot_on_step": config.recording.snapshot_on_step,
            "headless": config.browser.headless,
            "viewport_width": config.browser.viewport_width,
            "viewport_height": config.browser.viewport_height,
            "storage_state": config.browser.storage_state,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def viewport(self) -> dict:
        """Viewport size in the shape Playwright expects."""
        return {"width": self.viewport_width, "height": self.viewport_height}

    def resolve_output_dir(self, session_id: str, config: Optional[Config] = None) -> Path:
        """Return the output directory, defaulting to a per-session folder."""
        if self.output_dir:
            return Path(self.output_dir)
        config = config or CONFIG
        return Path(config.recording.output_root) / session_id


# Global configuration instance
CONFIG = Config.from_env()
