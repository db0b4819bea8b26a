"""In-page primitives over Playwright handles.

Every read of the live document goes through one of the scripts below so the
rest of the engine can stay in Python. Nothing here caches handles; each call
re-evaluates against the page as it is right now.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Union
from urllib.parse import urlsplit

from playwright.async_api import ElementHandle, JSHandle, Page

DomRoot = Union[JSHandle, ElementHandle]

DOCUMENT_JS = "() => document"

QUERY_ALL_JS = """
(root, selectors) => {
    const out = new Set();
    for (const selector of selectors) {
        for (const node of root.querySelectorAll(selector)) {
            out.add(node);
        }
    }
    return Array.from(out);
}
"""

OPEN_SHADOW_ROOTS_JS = """
(root) => Array.from(root.querySelectorAll("*"))
    .map((el) => el.shadowRoot)
    .filter(Boolean)
"""

TAG_NAME_JS = "(el) => el.tagName.toLowerCase()"

CLOSEST_JS = "(el, selector) => el.closest(selector) !== null"

STYLE_CHAIN_JS = """
(el) => {
    const chain = [];
    let node = el;
    while (node) {
        const style = window.getComputedStyle(node);
        chain.push({
            display: style.display,
            visibility: style.visibility,
            opacity: style.opacity,
        });
        node = node.parentElement;
    }
    return chain;
}
"""

CLIENT_RECT_JS = """
(el) => {
    const rect = el.getBoundingClientRect();
    return {
        top: rect.top,
        left: rect.left,
        bottom: rect.bottom,
        right: rect.right,
        width: rect.width,
        height: rect.height,
        viewportWidth: window.innerWidth || document.documentElement.clientWidth || 0,
        viewportHeight: window.innerHeight || document.documentElement.clientHeight || 0,
    };
}
"""

CLICK_JS = "(el) => el.click()"

FORCE_LAYOUT_JS = "() => void document.body.offsetHeight"

DESIGN_MODE_JS = "() => document.designMode || ''"

ELEMENT_SUMMARY_JS = """
(el) => ({
    tag: el.tagName ? el.tagName.toLowerCase() : "",
    id: el.getAttribute("id") || "",
    name: el.getAttribute("name") || "",
    type: el.getAttribute("type") || "",
})
"""


@dataclass
class ClientRect:
    top: float
    left: float
    bottom: float
    right: float
    width: float
    height: float
    viewport_width: float
    viewport_height: float


async def document_root(page: Page) -> JSHandle:
    return await page.evaluate_handle(DOCUMENT_JS)


async def _array_items(array: JSHandle) -> List[JSHandle]:
    properties = await array.get_properties()
    indexed = [(int(key), value) for key, value in properties.items() if str(key).isdigit()]
    return [value for _, value in sorted(indexed, key=lambda item: item[0])]


async def query_all(root: DomRoot, selectors: Sequence[str]) -> List[ElementHandle]:
    """Match ``selectors`` against ``root`` with the host's own selector engine.

    Results are unioned in selector order and deduplicated by identity. Only
    the given root is searched; nested shadow trees are left alone.
    """
    array = await root.evaluate_handle(QUERY_ALL_JS, list(selectors))
    elements: List[ElementHandle] = []
    for item in await _array_items(array):
        element = item.as_element()
        if element is not None:
            elements.append(element)
    return elements


async def query_first(root: DomRoot, selector: str) -> Optional[ElementHandle]:
    matches = await query_all(root, [selector])
    return matches[0] if matches else None


async def open_shadow_roots(root: DomRoot) -> List[JSHandle]:
    array = await root.evaluate_handle(OPEN_SHADOW_ROOTS_JS)
    return await _array_items(array)


async def tag_name(element: ElementHandle) -> str:
    return (await element.evaluate(TAG_NAME_JS)) or ""


async def closest_matches(element: ElementHandle, selector: str) -> bool:
    return bool(await element.evaluate(CLOSEST_JS, selector))


async def style_chain(element: ElementHandle) -> List[dict[str, Any]]:
    return list(await element.evaluate(STYLE_CHAIN_JS) or [])


async def client_rect(element: ElementHandle) -> ClientRect:
    raw = await element.evaluate(CLIENT_RECT_JS) or {}
    return ClientRect(
        top=float(raw.get("top", 0.0) or 0.0),
        left=float(raw.get("left", 0.0) or 0.0),
        bottom=float(raw.get("bottom", 0.0) or 0.0),
        right=float(raw.get("right", 0.0) or 0.0),
        width=float(raw.get("width", 0.0) or 0.0),
        height=float(raw.get("height", 0.0) or 0.0),
        viewport_width=float(raw.get("viewportWidth", 0.0) or 0.0),
        viewport_height=float(raw.get("viewportHeight", 0.0) or 0.0),
    )


async def click(element: ElementHandle) -> None:
    # DOM-level click: no actionability waits, no scrolling.
    await element.evaluate(CLICK_JS)


async def force_layout(page: Page) -> None:
    await page.evaluate(FORCE_LAYOUT_JS)


async def design_mode_on(page: Page) -> bool:
    mode = await page.evaluate(DESIGN_MODE_JS)
    return str(mode or "").lower() == "on"


def page_hostname(page: Page) -> str:
    try:
        return (urlsplit(page.url).hostname or "").lower()
    except ValueError:
        return ""


async def describe(element: ElementHandle) -> str:
    """Short CSS-ish label for logs, e.g. ``input#q[name=q][type=search]``."""
    try:
        info = await element.evaluate(ELEMENT_SUMMARY_JS) or {}
    except Exception:
        return "<detached>"
    label = info.get("tag") or "element"
    if info.get("id"):
        label += f"#{info['id']}"
    if info.get("name"):
        label += f"[name={info['name']}]"
    if info.get("type"):
        label += f"[type={info['type']}]"
    return label
