from __future__ import annotations

import logging

from playwright.async_api import ElementHandle, Error as PlaywrightError

from .visibility import is_in_viewport

FOCUS_PREVENT_SCROLL_JS = "(el) => el.focus({ preventScroll: true })"
FOCUS_JS = "(el) => el.focus()"
SCROLL_TO_CENTER_JS = "(el) => el.scrollIntoView({ block: 'center', inline: 'nearest' })"
SELECTION_SUPPORT_JS = """
(el) => ({
    select: typeof el.select === "function",
    range: typeof el.setSelectionRange === "function" && typeof el.value === "string",
    length: typeof el.value === "string" ? el.value.length : 0,
})
"""
SELECT_ALL_JS = "(el) => el.select()"
SELECT_RANGE_JS = "(el, end) => el.setSelectionRange(0, end)"


async def _focus(element: ElementHandle) -> bool:
    try:
        await element.evaluate(FOCUS_PREVENT_SCROLL_JS)
        return True
    except PlaywrightError as exc:
        logging.debug("focus: prevent_scroll_unsupported reason=%r", exc)
    try:
        await element.evaluate(FOCUS_JS)
        return True
    except PlaywrightError as exc:
        logging.warning("focus: failed reason=%r", exc)
        return False


async def _select_contents(element: ElementHandle) -> None:
    support = await element.evaluate(SELECTION_SUPPORT_JS) or {}
    if support.get("select"):
        await element.evaluate(SELECT_ALL_JS)
    elif support.get("range"):
        await element.evaluate(SELECT_RANGE_JS, int(support.get("length", 0) or 0))


async def focus_and_select(element: ElementHandle) -> None:
    """
    Focus without jumping the scroll position, center the element only when it
    is not fully on screen, then select its current text so typing replaces it.
    Page errors are logged, not raised; selection is best effort.
    """
    if not await _focus(element):
        return

    if not await is_in_viewport(element):
        try:
            await element.evaluate(SCROLL_TO_CENTER_JS)
        except PlaywrightError as exc:
            logging.debug("focus: scroll_failed reason=%r", exc)

    try:
        await _select_contents(element)
    except PlaywrightError as exc:
        logging.debug("focus: select_failed reason=%r", exc)
