from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from playwright.async_api import ElementHandle, Error as PlaywrightError, Page

from . import dom
from .eligibility import is_searchy_input
from .visibility import is_visible

CANDIDATE_SELECTORS: Tuple[str, ...] = (
    # Strong semantic markers
    "[role='search'] input[type='search']",
    "form[role='search'] input[type='search']",
    "input[role='searchbox']",
    "input[type='search']",
    # Names, ids, classes
    "input[name='q']",
    "input[name*='search' i]",
    "input[id*='search' i]",
    "input[class*='search' i]",
    # ARIA and placeholders
    "[role='search'] input",
    "form[role='search'] input",
    "input[aria-label*='search' i]",
    "input[placeholder*='search' i]",
    "#search, #search-box, #searchbox, #search-field, #search-query, #search-input",
    "textarea[aria-label*='search' i]",
)

SEARCH_LANDMARK_SELECTOR = "[role='search'], form[role='search']"


@dataclass(frozen=True)
class ScoreWeights:
    type_search: float = 5.0
    name_is_q: float = 4.0
    name_contains: float = 3.0
    id_contains: float = 3.0
    aria_label_contains: float = 3.0
    placeholder_contains: float = 3.0
    class_contains: float = 2.0
    search_landmark: float = 4.0
    position: float = 2.0


DEFAULT_WEIGHTS = ScoreWeights()


@dataclass
class CandidateSignals:
    input_type: str = ""
    name: str = ""
    id: str = ""
    class_name: str = ""
    aria_label: str = ""
    placeholder: str = ""
    in_search_landmark: bool = False
    top: float = 0.0
    left: float = 0.0
    viewport_width: float = 0.0
    viewport_height: float = 0.0


def position_bias(signals: CandidateSignals, weight: float = DEFAULT_WEIGHTS.position) -> float:
    # 0 at the top/left edge, 1 at the bottom/right edge.
    y = max(0.0, signals.top) / max(1.0, signals.viewport_height)
    x = max(0.0, signals.left) / max(1.0, signals.viewport_width)
    return max(0.0, weight - (y * 2 + x) * weight / 2)


def score_candidate(signals: CandidateSignals, weights: ScoreWeights = DEFAULT_WEIGHTS) -> float:
    score = 0.0
    if signals.input_type.lower() == "search":
        score += weights.type_search
    name = signals.name.lower()
    if name == "q":
        score += weights.name_is_q
    if "search" in name:
        score += weights.name_contains
    if "search" in signals.id.lower():
        score += weights.id_contains
    if "search" in signals.class_name.lower():
        score += weights.class_contains
    if "search" in signals.aria_label.lower():
        score += weights.aria_label_contains
    if "search" in signals.placeholder.lower():
        score += weights.placeholder_contains
    if signals.in_search_landmark:
        score += weights.search_landmark
    score += position_bias(signals, weights.position)
    return score


async def read_signals(element: ElementHandle) -> CandidateSignals:
    async def attr(name: str) -> str:
        return (await element.get_attribute(name)) or ""

    rect = await dom.client_rect(element)
    return CandidateSignals(
        input_type=await attr("type"),
        name=await attr("name"),
        id=await attr("id"),
        class_name=await attr("class"),
        aria_label=await attr("aria-label"),
        placeholder=await attr("placeholder"),
        in_search_landmark=await dom.closest_matches(element, SEARCH_LANDMARK_SELECTOR),
        top=rect.top,
        left=rect.left,
        viewport_width=rect.viewport_width,
        viewport_height=rect.viewport_height,
    )


async def collect_candidates(page: Page, selectors: Sequence[str] = CANDIDATE_SELECTORS) -> List[ElementHandle]:
    """Visible, eligible matches in the light document, first-seen order, no duplicates."""
    root = await dom.document_root(page)
    candidates: List[ElementHandle] = []
    for element in await dom.query_all(root, selectors):
        if await is_visible(element) and await is_searchy_input(element):
            candidates.append(element)
    return candidates


def pick_best(scored: Sequence[Tuple[ElementHandle, float]]) -> Optional[Tuple[ElementHandle, float]]:
    best: Optional[Tuple[ElementHandle, float]] = None
    for element, score in scored:
        # Strictly greater: the first candidate keeps a tie.
        if best is None or score > best[1]:
            best = (element, score)
    return best


async def find_generic_scored(
    page: Page, weights: ScoreWeights = DEFAULT_WEIGHTS
) -> Optional[Tuple[ElementHandle, float]]:
    candidates = await collect_candidates(page)
    if not candidates:
        logging.debug("generic_scan: no_candidates")
        return None

    scored: List[Tuple[ElementHandle, float]] = []
    for index, element in enumerate(candidates):
        try:
            signals = await read_signals(element)
        except PlaywrightError as exc:
            # Detached between collection and scoring; the rest still compete.
            logging.debug("generic_scan: candidate_skipped index=%s reason=%r", index, exc)
            continue
        score = score_candidate(signals, weights)
        logging.debug("generic_scan: candidate index=%s score=%.3f", index, score)
        scored.append((element, score))
    return pick_best(scored)


async def find_generic(page: Page, weights: ScoreWeights = DEFAULT_WEIGHTS) -> Optional[ElementHandle]:
    best = await find_generic_scored(page, weights)
    return best[0] if best else None
