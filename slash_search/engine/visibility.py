from __future__ import annotations

import logging
from typing import Any, Iterable

from playwright.async_api import ElementHandle, Error as PlaywrightError

from . import dom

MIN_RENDERED_SIZE = 1.0


def _style_hides(style: dict[str, Any]) -> bool:
    if style.get("display") == "none" or style.get("visibility") == "hidden":
        return True
    try:
        return float(style.get("opacity", "1")) == 0
    except (TypeError, ValueError):
        return False


def chain_is_rendered(chain: Iterable[dict[str, Any]]) -> bool:
    """True when no element in the element-to-root style chain hides it."""
    return not any(_style_hides(style) for style in chain)


async def is_visible(element: ElementHandle) -> bool:
    """
    Visible and interactable right now: not disabled, not aria-hidden, not
    ``hidden``, rendered through every ancestor, and larger than a pixel in
    both dimensions. Reads layout fresh on every call.
    """
    try:
        if await element.get_attribute("disabled") is not None:
            return False
        if await element.get_attribute("aria-hidden") == "true":
            return False
        if await element.get_attribute("hidden") is not None:
            return False
        if not chain_is_rendered(await dom.style_chain(element)):
            return False
        rect = await dom.client_rect(element)
    except PlaywrightError as exc:
        logging.debug("is_visible: read_failed reason=%r", exc)
        return False
    return rect.width > MIN_RENDERED_SIZE and rect.height > MIN_RENDERED_SIZE


def rect_in_viewport(rect: dom.ClientRect) -> bool:
    return (
        rect.top >= 0
        and rect.left >= 0
        and rect.bottom <= rect.viewport_height
        and rect.right <= rect.viewport_width
    )


async def is_in_viewport(element: ElementHandle) -> bool:
    try:
        rect = await dom.client_rect(element)
    except PlaywrightError as exc:
        logging.debug("is_in_viewport: read_failed reason=%r", exc)
        return False
    return rect_in_viewport(rect)
