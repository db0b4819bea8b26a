"""The "/" keyboard shortcut: event qualification and page listener wiring."""

from __future__ import annotations

import json
import logging
import weakref
from dataclasses import dataclass
from typing import Any, Optional

from playwright.async_api import ElementHandle, Error as PlaywrightError, JSHandle, Page

from ..engine import dom
from ..engine.discovery import find_and_focus

SHORTCUT_KEY = "/"
BINDING_NAME = "__slashSearchKeydown"

EDITABLE_SELECTOR = 'input, textarea, [contenteditable="true"]'
EDITABLE_ROLE_SELECTORS = ("[role='textbox']", "[role='combobox']", "[role='searchbox']")

# Capture phase on document so the page's own hotkeys have not run yet. The
# binding answers asynchronously, so qualification and suppression happen here,
# synchronously, with the same rules as is_shortcut_key / is_editable_target.
LISTENER_SCRIPT = f"""
(() => {{
    if (window.__slashSearchListening) return;
    window.__slashSearchListening = true;
    const editableSelectors = {json.dumps([EDITABLE_SELECTOR, *EDITABLE_ROLE_SELECTORS])};
    const isEditable = (el) =>
        el instanceof Element && editableSelectors.some((selector) => el.closest(selector) !== null);
    document.addEventListener("keydown", (e) => {{
        if (e.defaultPrevented || e.key !== "{SHORTCUT_KEY}") return;
        if (e.ctrlKey || e.metaKey || e.altKey || e.shiftKey) return;
        if ((document.designMode || "").toLowerCase() === "on") return;
        if (isEditable(e.target)) return;
        if (typeof window.{BINDING_NAME} !== "function") return;
        const snapshot = {{
            key: e.key,
            ctrlKey: e.ctrlKey,
            metaKey: e.metaKey,
            altKey: e.altKey,
            shiftKey: e.shiftKey,
            defaultPrevented: false,
            target: e.target instanceof Element ? e.target : null,
        }};
        e.preventDefault();
        e.stopImmediatePropagation();
        window.{BINDING_NAME}(snapshot);
    }}, true);
}})();
"""

EVENT_FIELDS_JS = """
(e) => ({
    key: e.key,
    ctrlKey: !!e.ctrlKey,
    metaKey: !!e.metaKey,
    altKey: !!e.altKey,
    shiftKey: !!e.shiftKey,
    defaultPrevented: !!e.defaultPrevented,
})
"""
EVENT_TARGET_JS = "(e) => e.target"

_attached_pages: "weakref.WeakSet[Page]" = weakref.WeakSet()


@dataclass
class KeyEvent:
    key: str
    ctrl_key: bool = False
    meta_key: bool = False
    alt_key: bool = False
    shift_key: bool = False
    default_prevented: bool = False
    target: Optional[ElementHandle] = None


def is_shortcut_key(event: KeyEvent) -> bool:
    """Plain "/" only; shift would make it "?" on most layouts."""
    if event.default_prevented or event.key != SHORTCUT_KEY:
        return False
    return not (event.ctrl_key or event.meta_key or event.alt_key or event.shift_key)


async def is_editable_target(target: Optional[ElementHandle]) -> bool:
    if target is None:
        return False
    if await dom.closest_matches(target, EDITABLE_SELECTOR):
        return True
    for selector in EDITABLE_ROLE_SELECTORS:
        if await dom.closest_matches(target, selector):
            return True
    return False


async def handle_key_down(page: Page, event: KeyEvent) -> bool:
    """
    Run the shortcut for one keydown. Returns True only when a search input was
    found and focused; the caller is then expected to suppress the event's
    default action and propagation. Never raises.
    """
    try:
        if not is_shortcut_key(event):
            return False
        if await dom.design_mode_on(page):
            return False
        if await is_editable_target(event.target):
            logging.debug("shortcut: ignored reason=editable_target")
            return False
        return await find_and_focus(page)
    except Exception as exc:
        logging.warning("shortcut: keydown_failed reason=%r", exc)
        return False


async def key_event_from_handle(payload: JSHandle) -> KeyEvent:
    fields: dict[str, Any] = await payload.evaluate(EVENT_FIELDS_JS) or {}
    target = (await payload.evaluate_handle(EVENT_TARGET_JS)).as_element()
    return KeyEvent(
        key=fields.get("key") or "",
        ctrl_key=bool(fields.get("ctrlKey")),
        meta_key=bool(fields.get("metaKey")),
        alt_key=bool(fields.get("altKey")),
        shift_key=bool(fields.get("shiftKey")),
        default_prevented=bool(fields.get("defaultPrevented")),
        target=target,
    )


async def attach_shortcut(page: Page) -> bool:
    """
    Install the page-wide "/" listener once per page. Returns False when the
    page already has it.

    The in-page listener suppresses every keydown that qualifies as the
    shortcut, then forwards a snapshot of it to Python for discovery.
    """
    if page in _attached_pages:
        return False

    async def on_keydown(source: Any, payload: JSHandle) -> bool:
        try:
            event = await key_event_from_handle(payload)
        except PlaywrightError as exc:
            logging.debug("shortcut: event_read_failed reason=%r", exc)
            return False
        return await handle_key_down(source["page"], event)

    await page.expose_binding(BINDING_NAME, on_keydown, handle=True)
    await page.add_init_script(LISTENER_SCRIPT)
    _attached_pages.add(page)
    try:
        # Also cover the document that is already loaded.
        await page.evaluate(LISTENER_SCRIPT)
    except PlaywrightError as exc:
        logging.debug("shortcut: live_attach_failed reason=%r", exc)
    logging.info("shortcut: attached url=%s", page.url)
    return True
