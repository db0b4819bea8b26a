from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from playwright.async_api import ElementHandle, Error as PlaywrightError, Page

from ..config import settings
from . import dom
from .eligibility import is_searchy_input
from .visibility import is_visible


async def _collect_from_root(
    root: dom.DomRoot,
    selectors: Sequence[str],
    out: List[ElementHandle],
    depth: int,
    max_depth: int,
) -> None:
    try:
        out.extend(await dom.query_all(root, selectors))
        if depth >= max_depth:
            logging.debug("deep_query: depth_limit depth=%s", depth)
            return
        shadow_roots = await dom.open_shadow_roots(root)
    except PlaywrightError as exc:
        # Closed or access-restricted roots are skipped; siblings still run.
        logging.debug("deep_query: skipped_root depth=%s reason=%r", depth, exc)
        return

    for shadow_root in shadow_roots:
        await _collect_from_root(shadow_root, selectors, out, depth + 1, max_depth)


async def query_all_deep(
    page: Page, selectors: Sequence[str], max_depth: int | None = None
) -> List[ElementHandle]:
    """
    Collect matches for ``selectors`` in the document and in every open shadow
    tree below it.

    Within a root the matches are deduplicated and kept in selector order; an
    element belongs to exactly one root, so the concatenation stays unique.
    """
    limit = settings.max_shadow_depth if max_depth is None else max_depth
    out: List[ElementHandle] = []
    try:
        root = await dom.document_root(page)
    except PlaywrightError as exc:
        logging.debug("deep_query: no_document reason=%r", exc)
        return out
    await _collect_from_root(root, selectors, out, 0, limit)
    logging.debug("deep_query: selectors=%s matches=%s", len(selectors), len(out))
    return out


async def _first_usable(elements: Sequence[ElementHandle]) -> Optional[ElementHandle]:
    for element in elements:
        if await is_visible(element) and await is_searchy_input(element):
            return element
    return None


async def pick_first_visible_deep(page: Page, selectors: Sequence[str]) -> Optional[ElementHandle]:
    return await _first_usable(await query_all_deep(page, selectors))


async def pick_first_visible(page: Page, selectors: Sequence[str]) -> Optional[ElementHandle]:
    """Light document only: selectors in order, first visible eligible match wins."""
    root = await dom.document_root(page)
    for selector in selectors:
        found = await _first_usable(await dom.query_all(root, [selector]))
        if found is not None:
            return found
    return None
