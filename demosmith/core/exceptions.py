"""Custom exceptions for demo recording and deliverable generation."""

from typing import Optional


class DemoSmithError(Exception):
    """Base exception for all demosmith errors."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        recoverable: bool = True
    ):
        self.message = message
        self.details = details
        self.recoverable = recoverable
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\nDetails: {self.details}"
        return self.message


class SessionError(DemoSmithError):
    """Errors related to the recording session lifecycle."""
    pass


class NoActiveSessionError(SessionError):
    """An operation needed a running session but none is active."""

    def __init__(self, **kwargs):
        super().__init__(
            "No active demo session. Call start_session first.",
            recoverable=False,
            **kwargs
        )


class NoActiveViewportError(SessionError):
    """The session is running but its active viewport is gone."""

    def __init__(self, viewport_id: Optional[int] = None, **kwargs):
        self.viewport_id = viewport_id
        super().__init__(
            f"Active viewport {viewport_id} is not available. Switch to another viewport.",
            **kwargs
        )


class SessionNotCompletedError(SessionError):
    """Deliverables can only be packaged for a completed session."""

    def __init__(self, session_id: str, status: str, **kwargs):
        self.session_id = session_id
        self.status = status
        super().__init__(
            f"Session '{session_id}' is {status}; only completed sessions can be packaged",
            recoverable=False,
            **kwargs
        )


class ViewportError(SessionError):
    """Misuse of the viewport registry."""

    def __init__(self, viewport_id: int, message: str, **kwargs):
        self.viewport_id = viewport_id
        super().__init__(message, **kwargs)


class UnknownViewportError(ViewportError):
    """No live viewport has the requested id."""

    def __init__(self, viewport_id: int, **kwargs):
        super().__init__(viewport_id, f"Viewport {viewport_id} not found", **kwargs)


class CannotCloseLastViewportError(ViewportError):
    """A running session must keep at least one viewport."""

    def __init__(self, viewport_id: int, **kwargs):
        super().__init__(
            viewport_id,
            f"Cannot close viewport {viewport_id}: it is the last open viewport",
            **kwargs
        )


class BrowserError(DemoSmithError):
    """Errors related to browser operations."""
    pass


class NavigationError(BrowserError):
    """Errors during page navigation."""
    pass


class ElementNotFoundError(BrowserError):
    """Element could not be found on the page."""

    def __init__(
        self,
        selector: str,
        message: Optional[str] = None,
        **kwargs
    ):
        self.selector = selector
        msg = message or f"Element not found: {selector}"
        super().__init__(msg, **kwargs)


class AmbiguousSelectorError(BrowserError):
    """A selector matched more than one element."""

    def __init__(self, selector: str, count: int, **kwargs):
        self.selector = selector
        self.count = count
        super().__init__(
            f"Selector '{selector}' matched {count} elements; use a more specific selector",
            **kwargs
        )


class AssertionFailedError(DemoSmithError):
    """An assert step did not hold."""

    def __init__(self, assertion_type: str, message: str, **kwargs):
        self.assertion_type = assertion_type
        super().__init__(message, **kwargs)


class ToolError(DemoSmithError):
    """Errors raised by the tool layer itself."""

    def __init__(
        self,
        tool_name: str,
        message: str,
        **kwargs
    ):
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' failed: {message}", **kwargs)


class ToolNotFoundError(ToolError):
    """Requested tool is not registered."""

    def __init__(self, tool_name: str, **kwargs):
        super().__init__(
            tool_name,
            f"Tool '{tool_name}' not found in registry",
            recoverable=False,
            **kwargs
        )


class ToolValidationError(ToolError):
    """Tool input failed validation."""

    def __init__(
        self,
        tool_name: str,
        validation_error: str,
        **kwargs
    ):
        self.validation_error = validation_error
        super().__init__(
            tool_name,
            f"Invalid parameters: {validation_error}",
            **kwargs
        )


class GeneratorError(DemoSmithError):
    """A deliverable generator failed."""

    def __init__(self, generator: str, message: str, **kwargs):
        self.generator = generator
        super().__init__(f"Generator '{generator}' failed: {message}", **kwargs)
