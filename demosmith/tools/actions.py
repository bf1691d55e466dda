"""Default tool implementations."""

import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from demosmith.browser.snapshot import build_locator, find_element
from demosmith.core.config import SessionOptions
from demosmith.core.exceptions import (
    AssertionFailedError,
    BrowserError,
    NavigationError,
    NoActiveSessionError,
    NoActiveViewportError,
)
from demosmith.generator.packager import DeliverablePackager
from demosmith.generator.tts import NarrationSynthesizer
from demosmith.session.evidence import ActionMeta, EvidenceCollector, take_screenshot
from demosmith.session.store import SessionStore
from demosmith.session.views import (
    ActionKind,
    AssertDetails,
    ClickDetails,
    CloseViewportDetails,
    DragDetails,
    FillDetails,
    HoverDetails,
    NavigateDetails,
    OpenViewportDetails,
    PressKeyDetails,
    ScreenshotDetails,
    ScrollDetails,
    SelectDetails,
    Session,
    Step,
    SwitchViewportDetails,
    UploadDetails,
    WaitDetails,
)
from demosmith.tools.registry import ToolRegistry
from demosmith.tools.views import (
    AssertParams,
    ClickParams,
    CloseViewportParams,
    DragParams,
    EndSessionParams,
    FillParams,
    HoverParams,
    NavigateParams,
    NoParams,
    OpenViewportParams,
    PressKeyParams,
    ScreenshotParams,
    ScrollParams,
    SelectParams,
    StartSessionParams,
    SwitchViewportParams,
    UploadParams,
    WaitParams,
)

logger = logging.getLogger(__name__)

# Tool that records each action kind; replay goes through these
ACTION_TOOLS: Dict[ActionKind, str] = {
    ActionKind.NAVIGATE: "navigate",
    ActionKind.CLICK: "click",
    ActionKind.FILL: "fill",
    ActionKind.SELECT: "select",
    ActionKind.PRESS_KEY: "press_key",
    ActionKind.HOVER: "hover",
    ActionKind.DRAG: "drag",
    ActionKind.UPLOAD: "upload",
    ActionKind.SCROLL: "scroll",
    ActionKind.WAIT: "wait",
    ActionKind.SCREENSHOT: "screenshot",
    ActionKind.ASSERT: "assert",
    ActionKind.OPEN_VIEWPORT: "open_viewport",
    ActionKind.SWITCH_VIEWPORT: "switch_viewport",
    ActionKind.CLOSE_VIEWPORT: "close_viewport",
}

_unmapped = set(ActionKind) - set(ACTION_TOOLS)
if _unmapped:
    raise RuntimeError(f"No tool for action kinds: {sorted(k.value for k in _unmapped)}")

SCROLL_DELTAS = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}


def tool_call_for_step(step: Step) -> Tuple[str, Dict[str, Any]]:
    """
    Tool name and input that would record the same step again.

    Returns:
        Tuple of (tool name, camelCase params)
    """
    params = dict(step.details.to_json())
    params["description"] = step.description
    if step.action == ActionKind.ASSERT and params.get("type") == "count" and str(params.get("expected", "")).isdigit():
        params["count"] = int(params.pop("expected"))
    return ACTION_TOOLS[step.action], params


def _step_data(step: Step, **extra) -> Dict[str, Any]:
    data = {"stepId": step.id, "durationMs": step.duration_ms}
    if step.evidence.screenshot_path:
        data["screenshotPath"] = step.evidence.screenshot_path
    data.update(extra)
    return data


def _matches(actual: str, expected: Optional[str], pattern: Optional[str], exact: bool = False) -> bool:
    if pattern:
        return re.search(pattern, actual) is not None
    if expected is None:
        return True
    return actual == expected if exact else expected in actual


async def _evaluate_assertion(session: Session, params: AssertParams) -> Tuple[bool, str, str]:
    """Returns (passed, actual, message)."""
    page = session.viewports.active
    kind = params.type
    wanted = params.pattern or params.expected

    if kind in ("url", "title"):
        actual = page.url if kind == "url" else await page.title()
        passed = _matches(actual, params.expected, params.pattern)
        label = kind.upper() if kind == "url" else "Title"
        if passed:
            return True, actual, f"{label} matches \"{wanted}\"" if wanted else f"{label} is \"{actual}\""
        return False, actual, f"{label} \"{actual}\" does not match \"{wanted}\""

    if not params.ref:
        raise AssertionFailedError(kind, f"ref is required for {kind} assertion")

    if kind == "count":
        actual_count = await build_locator(page, params.ref, session.refs).count()
        passed = params.count is None or actual_count == params.count
        if passed:
            return True, str(actual_count), f"Found {actual_count} elements"
        return False, str(actual_count), f"Expected {params.count} elements, found {actual_count}"

    if kind == "hidden":
        locator = build_locator(page, params.ref, session.refs)
        visible = await locator.count() > 0 and await locator.first.is_visible()
        if visible:
            return False, "visible", "Element is visible (expected hidden)"
        return True, "hidden", "Element is hidden"

    locator = await find_element(page, params.ref, session.refs)

    if kind == "text":
        actual = (await locator.text_content()) or ""
        passed = _matches(actual, params.expected, params.pattern)
        if passed:
            return True, actual, f"Text contains \"{wanted}\"" if wanted else "Text present"
        return False, actual, f"Text \"{actual}\" does not match \"{wanted}\""

    if kind == "value":
        actual = await locator.input_value()
        passed = _matches(actual, params.expected, params.pattern, exact=True)
        if passed:
            return True, actual, f"Value equals \"{wanted}\"" if wanted else "Value present"
        return False, actual, f"Value \"{actual}\" does not equal \"{wanted}\""

    if kind == "visible":
        state = await locator.is_visible()
        return state, str(state).lower(), "Element is visible" if state else "Element is not visible"
    if kind == "checked":
        state = await locator.is_checked()
        return state, str(state).lower(), "Element is checked" if state else "Element is not checked"
    if kind == "enabled":
        state = await locator.is_enabled()
        return state, str(state).lower(), "Element is enabled" if state else "Element is disabled"

    state = await locator.is_disabled()
    return state, str(state).lower(), "Element is disabled" if state else "Element is enabled"


def register_default_tools(registry: ToolRegistry) -> None:
    """
    Register the full tool surface with the registry.

    Args:
        registry: ToolRegistry to register tools with
    """

    # Session lifecycle

    @registry.tool(
        description="Start recording a demo session at a URL. Ends any session already running.",
        param_model=StartSessionParams,
    )
    async def start_session(params: StartSessionParams, store: SessionStore) -> Dict[str, Any]:
        overrides = params.model_dump(exclude={"url", "title"})
        options = SessionOptions.from_config(store.config, **overrides)
        session = await store.start(params.url, params.title, options)

        logger.info(f"🎬 Recording '{session.title}' at {session.start_url}")
        return {
            "sessionId": session.id,
            "title": session.title,
            "startUrl": session.start_url,
            "outputDir": str(session.output_dir),
            "options": {
                "video": options.video,
                "trace": options.trace,
                "screenshotOnStep": options.screenshot_on_step,
                "snapshotOnStep": options.snapshot_on_step,
            },
        }

    @registry.tool(
        description="End the session and generate the guide, step log, narration, subtitles and tutorial.",
        param_model=EndSessionParams,
    )
    async def end_session(
        params: EndSessionParams,
        store: SessionStore,
        synthesizer: Optional[NarrationSynthesizer] = None,
    ) -> Dict[str, Any]:
        session = await store.end()
        if session is None:
            raise NoActiveSessionError()

        data: Dict[str, Any] = {"sessionId": session.id, "status": session.status.value}
        if params.package:
            use_tts = params.tts if params.tts is not None else store.config.tts.enabled
            if use_tts and synthesizer is None:
                synthesizer = NarrationSynthesizer(store.config.tts)
            manifest = await DeliverablePackager(session, synthesizer if use_tts else None).package()
            data["deliverables"] = manifest.to_dict()
        return data

    @registry.tool(description="Report the active session and its progress.", param_model=NoParams)
    async def status(store: SessionStore) -> Dict[str, Any]:
        session = store.active
        if session is None:
            return {"active": False, "message": "No active demo session. Use start_session to begin."}

        summary = session.summary()
        data = {
            "active": True,
            "sessionId": session.id,
            "title": session.title,
            "startUrl": session.start_url,
            "status": session.status.value,
            "outputDir": str(session.output_dir),
            "progress": summary.model_dump(by_alias=True),
            "activeViewportId": session.viewports.active_id,
        }
        try:
            data["currentUrl"] = session.viewports.active.url
        except NoActiveViewportError:
            data["currentUrl"] = None
        return data

    # Inspection

    @registry.tool(
        description="Capture an accessibility snapshot of the active viewport. Returns numbered refs.",
        param_model=NoParams,
    )
    async def snapshot(store: SessionStore) -> Dict[str, Any]:
        session = store.require_active()
        page = session.viewports.active
        text = await session.refs.capture(page)
        return {"url": page.url, "elements": len(session.refs), "snapshot": text}

    # Recorded actions

    @registry.tool(description="Navigate the active viewport to a URL.", param_model=NavigateParams)
    async def navigate(params: NavigateParams, store: SessionStore) -> Dict[str, Any]:
        session = store.require_active()
        meta = ActionMeta(
            description=params.description or f"Navigate to {params.url}",
            details=NavigateDetails(url=params.url),
        )

        async def run():
            page = session.viewports.active
            try:
                await page.goto(params.url, wait_until="domcontentloaded")
            except Exception as e:
                raise NavigationError(f"Failed to navigate to {params.url}: {e}")
            logger.info(f"🔗 Navigated to {params.url}")

        step = await EvidenceCollector(store).execute(meta, run)
        return _step_data(step, url=session.viewports.active.url)

    @registry.tool(
        description="Click an element by snapshot ref (e.g. \"3\") or selector (e.g. \"text:Submit\").",
        param_model=ClickParams,
    )
    async def click(params: ClickParams, store: SessionStore) -> Dict[str, Any]:
        session = store.require_active()
        meta = ActionMeta(
            description=params.description or f"Click {params.target}",
            details=ClickDetails(ref=params.ref, selector=params.selector),
        )

        async def run():
            locator = await find_element(session.viewports.active, params.target, session.refs)
            await locator.click()
            logger.info(f"🖱️ Clicked {params.target}")

        step = await EvidenceCollector(store).execute(meta, run)
        return _step_data(step)

    @registry.tool(
        description="Fill a text input, e.g. selector \"label:Email\" or \"placeholder:Enter name\".",
        param_model=FillParams,
    )
    async def fill(params: FillParams, store: SessionStore) -> Dict[str, Any]:
        session = store.require_active()
        meta = ActionMeta(
            description=params.description or f"Fill {params.target}",
            details=FillDetails(ref=params.ref, selector=params.selector, value=params.value),
        )

        async def run():
            locator = await find_element(session.viewports.active, params.target, session.refs)
            await locator.fill(params.value)
            logger.info(f"⌨️ Filled {params.target}")

        step = await EvidenceCollector(store).execute(meta, run)
        return _step_data(step)

    @registry.tool(description="Select an option in a dropdown.", param_model=SelectParams)
    async def select(params: SelectParams, store: SessionStore) -> Dict[str, Any]:
        session = store.require_active()
        meta = ActionMeta(
            description=params.description or f"Select {params.value}",
            details=SelectDetails(ref=params.ref, selector=params.selector, value=params.value),
        )

        async def run():
            locator = await find_element(session.viewports.active, params.target, session.refs)
            return await locator.select_option(params.value)

        step = await EvidenceCollector(store).execute(meta, run)
        return _step_data(step, selected=meta.result)

    @registry.tool(description="Press a key or chord on the active viewport.", param_model=PressKeyParams)
    async def press_key(params: PressKeyParams, store: SessionStore) -> Dict[str, Any]:
        session = store.require_active()
        meta = ActionMeta(
            description=params.description or f"Press {params.key}",
            details=PressKeyDetails(key=params.key),
        )

        async def run():
            await session.viewports.active.keyboard.press(params.key)

        step = await EvidenceCollector(store).execute(meta, run)
        return _step_data(step, key=params.key)

    @registry.tool(description="Hover over an element.", param_model=HoverParams)
    async def hover(params: HoverParams, store: SessionStore) -> Dict[str, Any]:
        session = store.require_active()
        meta = ActionMeta(
            description=params.description or f"Hover over {params.target}",
            details=HoverDetails(ref=params.ref, selector=params.selector),
        )

        async def run():
            locator = await find_element(session.viewports.active, params.target, session.refs)
            await locator.hover()

        step = await EvidenceCollector(store).execute(meta, run)
        return _step_data(step)

    @registry.tool(description="Drag one element onto another.", param_model=DragParams)
    async def drag(params: DragParams, store: SessionStore) -> Dict[str, Any]:
        session = store.require_active()
        meta = ActionMeta(
            description=params.description or f"Drag {params.from_ref} to {params.to_ref}",
            details=DragDetails(from_ref=params.from_ref, to_ref=params.to_ref),
        )

        async def run():
            page = session.viewports.active
            source = await find_element(page, params.from_ref, session.refs)
            target = await find_element(page, params.to_ref, session.refs)
            await source.drag_to(target)

        step = await EvidenceCollector(store).execute(meta, run)
        return _step_data(step)

    @registry.tool(description="Upload a local file through a file input.", param_model=UploadParams)
    async def upload(params: UploadParams, store: SessionStore) -> Dict[str, Any]:
        session = store.require_active()
        file_path = Path(params.file_path)
        meta = ActionMeta(
            description=params.description or f"Upload {file_path.name}",
            details=UploadDetails(
                ref=params.ref,
                selector=params.selector,
                file_path=str(file_path),
                file_name=file_path.name,
            ),
        )

        async def run():
            if not file_path.is_file():
                raise BrowserError(f"File not found: {file_path}")
            locator = await find_element(session.viewports.active, params.target, session.refs)
            await locator.set_input_files(str(file_path))

        step = await EvidenceCollector(store).execute(meta, run)
        return _step_data(step, fileName=file_path.name)

    @registry.tool(
        description="Scroll an element into view, or scroll the page by an amount.",
        param_model=ScrollParams,
    )
    async def scroll(params: ScrollParams, store: SessionStore) -> Dict[str, Any]:
        session = store.require_active()
        meta = ActionMeta(
            description=params.description or f"Scroll {params.direction}",
            details=ScrollDetails(ref=params.ref, direction=params.direction, amount=params.amount),
        )

        async def run():
            page = session.viewports.active
            if params.ref:
                locator = await find_element(page, params.ref, session.refs)
                await locator.scroll_into_view_if_needed()
            else:
                dx, dy = SCROLL_DELTAS[params.direction]
                await page.mouse.wheel(dx * params.amount, dy * params.amount)

        step = await EvidenceCollector(store).execute(meta, run)
        return _step_data(step)

    @registry.tool(description="Wait for the active viewport to reach a load state.", param_model=WaitParams)
    async def wait(params: WaitParams, store: SessionStore) -> Dict[str, Any]:
        session = store.require_active()
        meta = ActionMeta(
            description=params.description or f"Wait for {params.condition}",
            details=WaitDetails(condition=params.condition, timeout=params.timeout),
        )

        async def run():
            await session.viewports.active.wait_for_load_state(params.condition, timeout=params.timeout)

        step = await EvidenceCollector(store).execute(meta, run)
        return _step_data(step, condition=params.condition)

    @registry.tool(description="Take a screenshot of the active viewport.", param_model=ScreenshotParams)
    async def screenshot(params: ScreenshotParams, store: SessionStore) -> Dict[str, Any]:
        session = store.require_active()
        meta = ActionMeta(
            description=params.description or params.name or "Screenshot",
            details=ScreenshotDetails(name=params.name),
            capture_before=False,
        )

        async def run():
            meta.evidence_path = await take_screenshot(session)

        step = await EvidenceCollector(store).execute(meta, run)
        return _step_data(step, path=str(session.output_dir / meta.evidence_path))

    @registry.tool(
        description="Check a condition (text, visible, hidden, url, title, value, checked, enabled, "
                    "disabled, count). A failed check is recorded as a failed step.",
        param_model=AssertParams,
        name="assert",
    )
    async def assert_(params: AssertParams, store: SessionStore) -> Dict[str, Any]:
        session = store.require_active()
        if params.type == "count" and params.count is not None:
            expected = str(params.count)
        else:
            expected = params.pattern or params.expected
        meta = ActionMeta(
            description=params.description or f"Assert {params.type}",
            details=AssertDetails(type=params.type, ref=params.ref, expected=expected),
        )

        async def run():
            passed, actual, message = await _evaluate_assertion(session, params)
            meta.details = meta.details.model_copy(update={"actual": actual, "message": message})
            if not passed:
                raise AssertionFailedError(params.type, message)
            return actual, message

        step = await EvidenceCollector(store).execute(meta, run)
        actual, message = meta.result
        logger.info(f"✅ Assertion passed: {message}")
        return _step_data(step, passed=True, type=params.type, actual=actual, message=message)

    # Viewports: these only need a session, so a closed active page can be switched away from

    @registry.tool(
        description="Open a new viewport (tab). The active viewport does not change.",
        param_model=OpenViewportParams,
    )
    async def open_viewport(params: OpenViewportParams, store: SessionStore) -> Dict[str, Any]:
        session = store.require_session()
        meta = ActionMeta(
            description=params.description or f"Open a new tab{' at ' + params.url if params.url else ''}",
            details=OpenViewportDetails(url=params.url),
        )

        async def run():
            viewport_id, page = await session.viewports.open(params.url)
            meta.details = meta.details.model_copy(update={"viewport_id": viewport_id})
            return viewport_id, page.url

        step = await EvidenceCollector(store).execute(meta, run)
        viewport_id, url = meta.result
        return _step_data(step, viewportId=viewport_id, url=url)

    @registry.tool(description="Make another viewport active.", param_model=SwitchViewportParams)
    async def switch_viewport(params: SwitchViewportParams, store: SessionStore) -> Dict[str, Any]:
        session = store.require_session()
        meta = ActionMeta(
            description=params.description or f"Switch to tab {params.viewport_id}",
            details=SwitchViewportDetails(viewport_id=params.viewport_id),
        )

        async def run():
            page = await session.viewports.switch(params.viewport_id)
            return page.url

        step = await EvidenceCollector(store).execute(meta, run)
        return _step_data(step, viewportId=params.viewport_id, url=meta.result)

    @registry.tool(
        description="Close a viewport. The last open viewport cannot be closed.",
        param_model=CloseViewportParams,
    )
    async def close_viewport(params: CloseViewportParams, store: SessionStore) -> Dict[str, Any]:
        session = store.require_session()
        meta = ActionMeta(
            description=params.description or f"Close tab {params.viewport_id}",
            details=CloseViewportDetails(viewport_id=params.viewport_id),
        )

        async def run():
            await session.viewports.close(params.viewport_id)

        step = await EvidenceCollector(store).execute(meta, run)
        return _step_data(
            step,
            closedViewportId=params.viewport_id,
            activeViewportId=session.viewports.active_id,
        )

    @registry.tool(description="List open viewports.", param_model=NoParams)
    async def list_viewports(store: SessionStore) -> Dict[str, Any]:
        session = store.require_session()
        infos = await session.viewports.list()
        return {
            "viewports": [info.model_dump(by_alias=True) for info in infos],
            "activeViewportId": session.viewports.active_id,
        }


def create_default_registry(exclude_tools: Optional[list] = None) -> ToolRegistry:
    """
    Create a registry with the full default tool surface.

    Args:
        exclude_tools: Tool names to leave out

    Returns:
        Configured ToolRegistry
    """
    registry = ToolRegistry(exclude_tools=exclude_tools)
    register_default_tools(registry)
    return registry


async def replay_step(registry: ToolRegistry, store: SessionStore, step: Step) -> Any:
    """Re-execute one logged step through the tool layer."""
    name, params = tool_call_for_step(step)
    result = await registry.execute(name, params, store)
    if not result.success:
        logger.warning(f"Replay of step {step.id} ({name}) failed: {result.error.message}")
    return result
