"""Data models for tool inputs and results."""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from demosmith.core.exceptions import DemoSmithError


class ToolErrorInfo(BaseModel):
    """Structured error payload."""
    type: str = Field(description="Exception class name")
    message: str


class ToolResult(BaseModel):
    """Result of executing a tool."""

    success: bool = True
    data: Dict[str, Any] = Field(default_factory=dict, description="Tool-specific payload")
    error: Optional[ToolErrorInfo] = Field(default=None, description="Set when the tool failed")

    @classmethod
    def ok(cls, data: Optional[Dict[str, Any]] = None) -> "ToolResult":
        return cls(success=True, data=data or {})

    @classmethod
    def failure(cls, exc: Exception) -> "ToolResult":
        """Convert an exception into a structured error result."""
        message = exc.message if isinstance(exc, DemoSmithError) else str(exc)
        return cls(
            success=False,
            error=ToolErrorInfo(type=exc.__class__.__name__, message=message or exc.__class__.__name__),
        )

    @property
    def has_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        return self.model_dump(exclude_none=True)


# Tool parameter models. Field names accept camelCase aliases so step-log
# details can be passed straight back in.

class ToolParams(BaseModel):
    """Base for tool parameters."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NoParams(ToolParams):
    """Tool that requires no parameters."""
    pass


class StartSessionParams(ToolParams):
    url: str = Field(description="Starting URL for the demo")
    title: str = Field(default="Demo", description="Demo title (used in documentation)")
    output_dir: Optional[str] = Field(default=None, description="Output directory (default: temp dir)")
    video: Optional[bool] = Field(default=None, description="Record video")
    trace: Optional[bool] = Field(default=None, description="Record Playwright trace")
    screenshot_on_step: Optional[bool] = Field(default=None, description="Screenshot before each step")
    snapshot_on_step: Optional[bool] = Field(default=None, description="Save snapshots around each step")
    headless: Optional[bool] = Field(default=None, description="Run browser headless")
    viewport_width: Optional[int] = Field(default=None, ge=200)
    viewport_height: Optional[int] = Field(default=None, ge=200)
    storage_state: Optional[str] = Field(default=None, description="Storage state file with a saved login")


class EndSessionParams(ToolParams):
    package: bool = Field(default=True, description="Generate deliverables after ending")
    tts: Optional[bool] = Field(default=None, description="Synthesize narration audio (config default if unset)")


class _DescribedParams(ToolParams):
    description: Optional[str] = Field(default=None, description="What this step does (for documentation)")


class _TargetParams(_DescribedParams):
    ref: Optional[str] = Field(default=None, description="Element ref from the latest snapshot")
    selector: Optional[str] = Field(
        default=None,
        description="Selector such as 'text:Submit', 'label:Email' or 'role:button:Save'",
    )

    @model_validator(mode="after")
    def validate_target(self):
        """Ensure a ref or a selector is provided."""
        if not self.ref and not self.selector:
            raise ValueError("Must provide either ref or selector")
        return self

    @property
    def target(self) -> str:
        return self.ref or self.selector


class NavigateParams(_DescribedParams):
    url: str = Field(description="URL to navigate to")


class ClickParams(_TargetParams):
    pass


class FillParams(_TargetParams):
    value: str = Field(description="Text to type")


class SelectParams(_TargetParams):
    value: str = Field(description="Option value or label to select")


class PressKeyParams(_DescribedParams):
    key: str = Field(description="Key or chord, e.g. 'Enter' or 'Control+A'")


class HoverParams(_TargetParams):
    pass


class DragParams(_DescribedParams):
    from_ref: str = Field(description="Ref or selector of the element to drag")
    to_ref: str = Field(description="Ref or selector of the drop target")


class UploadParams(_TargetParams):
    file_path: str = Field(description="Local file to upload")


class ScrollParams(_DescribedParams):
    ref: Optional[str] = Field(default=None, description="Element to scroll into view (scrolls the page if unset)")
    direction: Literal["up", "down", "left", "right"] = "down"
    amount: int = Field(default=500, ge=0, description="Pixels to scroll when no ref is given")


class WaitParams(_DescribedParams):
    condition: Literal["load", "domcontentloaded", "networkidle"] = "load"
    timeout: int = Field(default=30000, ge=0, description="Timeout in milliseconds")


class ScreenshotParams(_DescribedParams):
    name: Optional[str] = Field(default=None, description="Label for the screenshot")


AssertionType = Literal[
    "text", "visible", "hidden", "url", "title", "value", "checked", "enabled", "disabled", "count",
]


class AssertParams(_DescribedParams):
    type: AssertionType = Field(description="Kind of assertion")
    ref: Optional[str] = Field(default=None, description="Element ref or selector (element assertions)")
    expected: Optional[str] = Field(default=None, description="Expected value (substring for text/url/title)")
    pattern: Optional[str] = Field(default=None, description="Regex alternative to expected")
    count: Optional[int] = Field(default=None, ge=0, description="Expected count (count assertion)")


class OpenViewportParams(_DescribedParams):
    url: Optional[str] = Field(default=None, description="URL to open in the new viewport")


class SwitchViewportParams(_DescribedParams):
    viewport_id: int = Field(ge=0, description="Viewport to activate")


class CloseViewportParams(_DescribedParams):
    viewport_id: int = Field(ge=0, description="Viewport to close")


@dataclass
class ToolDefinition:
    """Definition of a registered tool."""

    name: str
    description: str
    param_model: Type[BaseModel]
    handler: Callable

    def get_schema(self) -> Dict[str, Any]:
        """Get JSON schema for this tool."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.param_model.model_json_schema(by_alias=False),
        }
