"""
demosmith
=========

Record browser-driven demo walkthroughs and turn them into time-aligned
tutorials: a written guide, a step log, narration, subtitles, an
interactive HTML tutorial and an animated preview, alongside the session
video and trace.

Main Components:
- SessionStore: Owns the single active recording session
- ToolRegistry: Tool surface that records every action as a step
- DeliverablePackager: Writes all deliverables for a completed session

Quick Start:
    >>> from demosmith import SessionStore, create_default_registry
    >>>
    >>> async def main():
    ...     registry = create_default_registry()
    ...     async with SessionStore() as store:
    ...         await registry.execute("start_session", {"url": "https://example.com"}, store)
    ...         await registry.execute("click", {"selector": "text:More information"}, store)
    ...         result = await registry.execute("end_session", {}, store)
    ...     return result
"""

__version__ = "1.0.0"
__author__ = "demosmith contributors"

# Lazy imports for better performance
_LAZY_IMPORTS = {
    "SessionStore": ("demosmith.session.store", "SessionStore"),
    "Session": ("demosmith.session.views", "Session"),
    "EvidenceCollector": ("demosmith.session.evidence", "EvidenceCollector"),
    "ViewportRegistry": ("demosmith.session.viewports", "ViewportRegistry"),
    "BrowserDriver": ("demosmith.browser.driver", "BrowserDriver"),
    "ToolRegistry": ("demosmith.tools.registry", "ToolRegistry"),
    "ToolResult": ("demosmith.tools.views", "ToolResult"),
    "create_default_registry": ("demosmith.tools.actions", "create_default_registry"),
    "DeliverablePackager": ("demosmith.generator.packager", "DeliverablePackager"),
    "build_timeline": ("demosmith.generator.narration", "build_timeline"),
    "Config": ("demosmith.core.config", "Config"),
}


def __getattr__(name: str):
    """Lazy import mechanism for main components."""
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        from importlib import import_module
        module = import_module(module_path)
        attr = getattr(module, attr_name)
        globals()[name] = attr
        return attr
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "SessionStore",
    "Session",
    "EvidenceCollector",
    "ViewportRegistry",
    "BrowserDriver",
    "ToolRegistry",
    "ToolResult",
    "create_default_registry",
    "DeliverablePackager",
    "build_timeline",
    "Config",
    "__version__",
]
