from __future__ import annotations

from playwright.async_api import ElementHandle, Error as PlaywrightError

from . import dom

TEXT_ENTRY_TAGS = {"input", "textarea"}
SEARCHY_INPUT_TYPES = {"search", "text", "url", "tel", "email"}


def is_searchy_type(tag: str, input_type: str | None) -> bool:
    tag = (tag or "").lower()
    if tag not in TEXT_ENTRY_TAGS:
        return False
    if tag == "textarea":
        return True
    # A missing type attribute means a plain text field; password is never eligible.
    return (input_type or "text").lower() in SEARCHY_INPUT_TYPES


async def is_searchy_input(element: ElementHandle) -> bool:
    """Single-line text-like ``input`` or a ``textarea``."""
    try:
        tag = await dom.tag_name(element)
        input_type = await element.get_attribute("type")
    except PlaywrightError:
        return False
    return is_searchy_type(tag, input_type)
