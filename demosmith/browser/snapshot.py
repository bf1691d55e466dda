"""Accessibility-style page snapshots and element lookup."""

import logging
import re
from typing import Any, Dict, List, Optional

from demosmith.core.exceptions import AmbiguousSelectorError, ElementNotFoundError

logger = logging.getLogger(__name__)

REF_ATTRIBUTE = "data-demosmith-ref"

# Walks the DOM, stamps each reported element with a ref attribute and
# returns a flat pre-order list with depths.
SNAPSHOT_SCRIPT = """
(attr) => {
    document.querySelectorAll('[' + attr + ']').forEach(el => el.removeAttribute(attr));
    const nodes = [];
    const skip = new Set(['script', 'style', 'noscript', 'template', 'meta', 'link']);
    let counter = 0;

    function isVisible(el) {
        const style = window.getComputedStyle(el);
        if (style.display === 'none' || style.visibility === 'hidden') return false;
        const rect = el.getBoundingClientRect();
        return rect.width > 0 || rect.height > 0 || el.children.length > 0;
    }

    function directText(el) {
        let text = '';
        for (const child of el.childNodes) {
            if (child.nodeType === Node.TEXT_NODE) text += child.textContent;
        }
        return text.trim().replace(/\\s+/g, ' ');
    }

    function walk(el, depth) {
        const tag = el.tagName.toLowerCase();
        if (skip.has(tag) || !isVisible(el)) return;

        const role = el.getAttribute('role') || tag;
        const labelled = el.labels && el.labels.length ? el.labels[0].textContent.trim() : '';
        const name = (el.getAttribute('aria-label') || labelled || el.getAttribute('placeholder')
            || el.getAttribute('alt') || el.getAttribute('title') || directText(el) || '').slice(0, 80);
        const interactive = ['a', 'button', 'input', 'select', 'textarea', 'option', 'summary'].includes(tag)
            || el.hasAttribute('role') || el.hasAttribute('onclick')
            || el.getAttribute('contenteditable') === 'true';

        let childDepth = depth;
        if (interactive || name) {
            const ref = String(++counter);
            el.setAttribute(attr, ref);
            const node = { ref, role, name, depth };
            if (el.value !== undefined && el.value !== '' && tag !== 'button' && tag !== 'li') node.value = String(el.value);
            if (el.type === 'checkbox' || el.type === 'radio') node.checked = !!el.checked;
            if (el.disabled) node.disabled = true;
            if (document.activeElement === el) node.focused = true;
            nodes.push(node);
            childDepth = depth + 1;
        }
        for (const child of el.children) walk(child, childDepth);
    }

    if (document.body) walk(document.body, 0);
    return nodes;
}
"""


class SnapshotRefs:
    """
    Numbered element references from the most recent snapshot.

    Refs are reassigned on every capture; a ref taken from an older
    snapshot may no longer resolve.
    """

    def __init__(self):
        self._nodes: Dict[str, Dict[str, Any]] = {}

    async def capture(self, page: Any) -> str:
        """
        Snapshot the page as an indented text tree.

        Args:
            page: Page handle to inspect

        Returns:
            One line per element: ``[ref] role "name" value=... checked=...``
        """
        nodes: List[Dict[str, Any]] = await page.evaluate(SNAPSHOT_SCRIPT, REF_ATTRIBUTE)
        self._nodes = {node["ref"]: node for node in nodes}
        logger.debug(f"Snapshot captured {len(nodes)} elements")

        if not nodes:
            return "Page has no accessible content"
        return "\n".join(format_node(node) for node in nodes)

    def get(self, ref: str) -> Optional[Dict[str, Any]]:
        return self._nodes.get(ref)

    def __contains__(self, ref: str) -> bool:
        return ref in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)


def format_node(node: Dict[str, Any]) -> str:
    """Render one snapshot node as a text line."""
    line = f"{'  ' * node.get('depth', 0)}[{node['ref']}] {node['role']}"
    if node.get("name"):
        line += f' "{node["name"]}"'
    if node.get("value") not in (None, ""):
        line += f' value="{node["value"]}"'
    if "checked" in node:
        line += f" checked={str(node['checked']).lower()}"
    if node.get("disabled"):
        line += " disabled"
    if node.get("focused"):
        line += " focused"
    return line


def build_locator(page: Any, selector: str, refs: Optional[SnapshotRefs] = None) -> Any:
    """
    Translate a selector string into a Playwright locator.

    Supported formats:
        "12"                    ref from the latest snapshot
        "text:Submit"           visible text
        "text:/Submit|Cancel/"  visible text regex
        "label:Email"           label text
        "placeholder:Email"     placeholder
        "role:button:Submit"    ARIA role with optional name
        "testid:submit-btn"     data-testid
        "css:.btn-primary"      CSS selector
        "xpath://button"        XPath
        "alt:Logo"              image alt text
        "title:Close"           title attribute
    Anything else is treated as visible text.
    """
    if selector.isdigit():
        if refs is not None and selector not in refs:
            raise ElementNotFoundError(
                selector,
                f"Unknown ref: {selector}. Take a new snapshot.",
            )
        return page.locator(f'[{REF_ATTRIBUTE}="{selector}"]')

    prefix, sep, value = selector.partition(":")
    if not sep:
        return page.get_by_text(selector)

    prefix = prefix.lower()
    if prefix == "text":
        if len(value) > 1 and value.startswith("/") and value.endswith("/"):
            return page.get_by_text(re.compile(value[1:-1]))
        return page.get_by_text(value)
    if prefix == "label":
        return page.get_by_label(value)
    if prefix == "placeholder":
        return page.get_by_placeholder(value)
    if prefix == "role":
        role, _, name = value.partition(":")
        if name:
            return page.get_by_role(role, name=name)
        return page.get_by_role(role)
    if prefix == "testid":
        return page.get_by_test_id(value)
    if prefix == "css":
        return page.locator(value)
    if prefix == "xpath":
        return page.locator(f"xpath={value}")
    if prefix == "alt":
        return page.get_by_alt_text(value)
    if prefix == "title":
        return page.get_by_title(value)

    return page.get_by_text(selector)


async def find_element(page: Any, selector: str, refs: Optional[SnapshotRefs] = None) -> Any:
    """
    Resolve a selector to exactly one element.

    Raises:
        ElementNotFoundError: Nothing matched
        AmbiguousSelectorError: More than one element matched
    """
    locator = build_locator(page, selector, refs)
    count = await locator.count()
    if count == 0:
        raise ElementNotFoundError(selector)
    if count > 1:
        raise AmbiguousSelectorError(selector, count)
    return locator
