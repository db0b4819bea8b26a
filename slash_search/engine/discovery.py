from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional

from playwright.async_api import ElementHandle, Page

from . import dom
from .focus import focus_and_select
from .generic_scanner import find_generic_scored
from .site_adapters import adapter_for_host, find_site_specific

DiscoverySource = Literal["adapter", "generic"]


@dataclass
class Discovery:
    element: ElementHandle
    source: DiscoverySource
    adapter: Optional[str] = None
    score: Optional[float] = None


async def discover(page: Page) -> Discovery | None:
    """Site adapters first; the generic light-document scan only when they come up empty."""
    hostname = dom.page_hostname(page)

    element = await find_site_specific(page, hostname)
    if element is not None:
        adapter = adapter_for_host(hostname)
        return Discovery(element=element, source="adapter", adapter=adapter.name if adapter else None)

    best = await find_generic_scored(page)
    if best is None:
        return None
    element, score = best
    return Discovery(element=element, source="generic", score=score)


async def find_search_input(page: Page) -> ElementHandle | None:
    found = await discover(page)
    return found.element if found else None


async def find_and_focus(page: Page) -> bool:
    """Find the page's search input and focus it. Reports success; never raises."""
    try:
        found = await discover(page)
        if found is None:
            logging.debug("search_input: not_found url=%s", page.url)
            return False
        logging.info(
            "search_input: resolved source=%s adapter=%s element=%s",
            found.source,
            found.adapter,
            await dom.describe(found.element),
        )
        await focus_and_select(found.element)
        return True
    except Exception as exc:
        logging.warning("search_input: discovery_failed reason=%r", exc)
        return False
