"""Hand-authored search field locations for sites the generic scan gets wrong."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Literal, Optional, Sequence, Tuple

from playwright.async_api import ElementHandle, Error as PlaywrightError, Page

from . import dom
from .deep_query import pick_first_visible, pick_first_visible_deep
from .eligibility import is_searchy_input
from .visibility import is_visible

AdapterKind = Literal["selectors", "custom"]
HostPredicate = Callable[[str], bool]
CustomFinder = Callable[[Page], Awaitable[Optional[ElementHandle]]]


@dataclass(frozen=True)
class SiteAdapter:
    name: str
    matches: HostPredicate
    kind: AdapterKind
    selectors: Tuple[str, ...] = ()
    finder: Optional[CustomFinder] = None

    def __post_init__(self) -> None:
        if self.kind == "selectors":
            if not self.selectors or self.finder is not None:
                raise ValueError(f"adapter {self.name!r}: selector rules need selectors and no finder")
        elif self.kind == "custom":
            if self.finder is None or self.selectors:
                raise ValueError(f"adapter {self.name!r}: custom rules need a finder and no selectors")
        else:
            raise ValueError(f"adapter {self.name!r}: unknown kind {self.kind!r}")


def selector_adapter(name: str, matches: HostPredicate, *selectors: str) -> SiteAdapter:
    return SiteAdapter(name=name, matches=matches, kind="selectors", selectors=tuple(selectors))


def custom_adapter(name: str, matches: HostPredicate, finder: CustomFinder) -> SiteAdapter:
    return SiteAdapter(name=name, matches=matches, kind="custom", finder=finder)


def on_domain(domain: str) -> HostPredicate:
    """The registered domain itself or any subdomain of it, ignoring case."""
    domain = domain.lower().strip(".")

    def matches(hostname: str) -> bool:
        host = (hostname or "").lower().rstrip(".")
        return host == domain or host.endswith("." + domain)

    return matches


def on_brand(label: str) -> HostPredicate:
    """Any host with ``label`` followed by another label: amazon.com, amazon.co.uk, ..."""
    pattern = re.compile(r"(^|\.)" + re.escape(label.lower()) + r"\.[^.]")

    def matches(hostname: str) -> bool:
        return bool(pattern.search((hostname or "").lower()))

    return matches


def light_then_deep(light: Sequence[str], deep: Sequence[str]) -> CustomFinder:
    """Try the light document first, then descend into open shadow roots."""

    async def find(page: Page) -> Optional[ElementHandle]:
        found = await pick_first_visible(page, light)
        if found is not None:
            return found
        return await pick_first_visible_deep(page, deep)

    return find


def open_then_query(field: str, opener: str) -> CustomFinder:
    """
    Two-phase lookup for sites that only mount their search field after a
    toggle: query the field; if it is not visible, click the opener, force a
    layout pass and query again.
    """

    async def find(page: Page) -> Optional[ElementHandle]:
        root = await dom.document_root(page)
        element = await dom.query_first(root, field)
        if element is not None and await is_visible(element):
            return element

        toggle = await dom.query_first(root, opener)
        if toggle is not None:
            try:
                await dom.click(toggle)
            except PlaywrightError as exc:
                logging.debug("site_adapter: opener_click_failed reason=%r", exc)
            await dom.force_layout(page)
            element = await dom.query_first(root, field)
            if element is not None and await is_visible(element):
                return element

        if element is not None and await is_searchy_input(element):
            return element
        return None

    return find


_STORE_LIGHT = (
    "[role='search'] input[type='search']",
    "form[role='search'] input[type='search']",
    "input[role='searchbox']",
    "input[type='search']",
)

_STORE_DEEP = (
    "[role='search'] input[type='search']",
    "form[role='search'] input[type='search']",
    "input[role='searchbox']",
    "input[type='search']",
    "input[name='q']",
    "input[name*='search' i]",
    "input[id*='search' i]",
    "input[class*='search' i]",
    "input[aria-label*='search' i]",
    "input[placeholder*='search' i]",
)

_COMMON_SEARCH_IDS = "#search, #search-box, #searchbox, #search-field, #search-query, #search-input"

APPLE_FIELD_SELECTOR = (
    "#ac-gn-searchform-input, form#ac-gn-searchform input[type='search'], "
    ".ac-gn-searchform input[type='search']"
)
APPLE_OPENER_SELECTOR = (
    "button.ac-gn-link-search, a#ac-gn-link-search, .ac-gn-link-search, "
    "button[aria-label*='Search' i], [data-analytics-title='open-search']"
)


SITE_ADAPTERS: Tuple[SiteAdapter, ...] = (
    # The new Chrome Web Store renders its header inside shadow roots.
    custom_adapter(
        "chrome-web-store",
        on_domain("chromewebstore.google.com"),
        light_then_deep(
            _STORE_LIGHT + ("input[aria-label*='search' i]", "input[placeholder*='search' i]"),
            _STORE_DEEP + (_COMMON_SEARCH_IDS,),
        ),
    ),
    custom_adapter(
        "edge-add-ons",
        on_domain("microsoftedge.microsoft.com"),
        light_then_deep(
            _STORE_LIGHT
            + (
                "input[name='q']",
                "input[aria-label*='search' i]",
                "input[placeholder*='search' i]",
                "input[placeholder*='extensions' i]",
            ),
            _STORE_DEEP + ("input[placeholder*='extensions' i]", _COMMON_SEARCH_IDS),
        ),
    ),
    selector_adapter(
        "amazon",
        on_brand("amazon"),
        "#twotabsearchtextbox",
        "#nav-bb-search",
        "form[name='site-search'] input[type='search']",
    ),
    selector_adapter(
        "linkedin",
        on_domain("linkedin.com"),
        "input.search-global-typeahead__input",
        "input.search-global-typeahead__search-input",
        "input[placeholder*='Search' i][role='combobox']",
        "header input[placeholder*='Search' i]",
    ),
    selector_adapter(
        "reddit",
        on_domain("reddit.com"),
        "#header-search-bar",
        "input[placeholder*='Search' i]",
    ),
    selector_adapter(
        "bilibili",
        on_domain("bilibili.com"),
        "#nav-searchform input[type='text']",
        "input.nav-search-input",
        "input#search-keyword",
        "input[placeholder*='搜索']",
        "input[placeholder*='Search' i]",
    ),
    selector_adapter(
        "shein",
        on_domain("shein.com"),
        "input#searchInput",
        "input[name='keywords']",
        "input[name='q']",
        "input[type='search']",
        "input[placeholder*='Search' i]",
    ),
    custom_adapter(
        "apple",
        on_domain("apple.com"),
        open_then_query(field=APPLE_FIELD_SELECTOR, opener=APPLE_OPENER_SELECTOR),
    ),
    selector_adapter(
        "tiktok",
        on_domain("tiktok.com"),
        "input[data-e2e='search-user-input']",
        "form[role='search'] input[type='search']",
        "input[placeholder*='Search' i]",
    ),
    selector_adapter(
        "pinterest",
        on_domain("pinterest.com"),
        "input[data-test-id='search-box-input']",
        "input[name='q']",
        "input[placeholder*='Search' i]",
    ),
    selector_adapter(
        "imdb",
        on_domain("imdb.com"),
        "input#suggestion-search",
        "form[action*='/find'] input[type='text']",
        "form[action*='/find'] input[type='search']",
        "input[aria-label*='Search IMDb' i]",
        "input[placeholder*='Search IMDb' i]",
        "header input[name='q']",
    ),
    selector_adapter(
        "aliexpress",
        on_brand("aliexpress"),
        "input#search-key",
        "input#search-words",
        "input[name='SearchText']",
        "form[role='search'] input[type='search']",
        "input[aria-label*='Search' i]",
        "input[placeholder*='Search' i]",
    ),
    selector_adapter(
        "eporner",
        on_domain("eporner.com"),
        "form#search_form input[type='text']",
        "input#query",
        "input[name='q']",
        "input[type='search']",
        "header input[placeholder*='Search' i]",
    ),
    selector_adapter(
        "home-depot",
        on_domain("homedepot.com"),
        "input#headerSearch",
        "input#SearchBox",
        "input[name='keyword']",
        "form[role='search'] input[type='search']",
        "input[placeholder*='Search' i]",
    ),
    selector_adapter(
        "realtor-ca",
        on_domain("realtor.ca"),
        "input#homeSearch",
        "input[name='searchText']",
        "input[aria-label*='Search' i]",
        "input[placeholder*='Search' i]",
        "form[role='search'] input[type='search']",
    ),
    selector_adapter(
        "costco",
        on_domain("costco.com"),
        "input#search-field",
        "input[name='keyword']",
        "form[role='search'] input[type='search']",
        "input[placeholder*='Search' i]",
    ),
    selector_adapter(
        "meteomedia",
        on_domain("meteomedia.com"),
        "input#search",
        "input[name='search']",
        "form[role='search'] input[type='search']",
        "input[aria-label*='Recherche' i]",
        "input[placeholder*='Recherche' i]",
        "input[placeholder*='Search' i]",
    ),
    selector_adapter(
        "ebay",
        on_domain("ebay.com"),
        "#gh-ac",
        "input[name='_nkw']",
        "form[role='search'] input[type='search']",
        "input[placeholder*='Search' i]",
    ),
    selector_adapter(
        "weather-com",
        on_domain("weather.com"),
        "#LocationSearch_input",
        "form[role='search'] input[type='search']",
        "input[aria-label*='Search' i]",
        "input[placeholder*='Search' i]",
    ),
    selector_adapter(
        "fandom",
        on_domain("fandom.com"),
        "#searchInput",
        "input[name='search']",
        "input[name='query']",
        "form[role='search'] input[type='search']",
        "input[placeholder*='Search' i]",
    ),
    selector_adapter(
        "pornhub",
        on_domain("pornhub.com"),
        "input#search",
        "input#searchInput",
        "input#search-input",
        "input#searchBar",
        "input[name='search']",
        "input[type='search']",
        "header input[placeholder*='Search' i]",
    ),
    selector_adapter(
        "xvideos",
        on_domain("xvideos.com"),
        "input#search-input",
        "input[name='k']",
        "input[name='q']",
        "input[type='search']",
        "header input[placeholder*='Search' i]",
    ),
    selector_adapter(
        "xhamster",
        on_domain("xhamster.com"),
        "input[name='q']",
        "input#search-input",
        "input[type='search']",
        "header input[placeholder*='Search' i]",
    ),
    selector_adapter(
        "xnxx",
        on_domain("xnxx.com"),
        "input#search-input",
        "input[name='search']",
        "input[name='k']",
        "input[name='q']",
        "input[type='search']",
        "header input[placeholder*='Search' i]",
    ),
    selector_adapter("wikipedia", on_domain("wikipedia.org"), "#searchInput", "input[name='search']"),
    selector_adapter("stackoverflow", on_domain("stackoverflow.com"), "input.s-input[name='q']", "input[name='q']"),
)


def adapter_for_host(hostname: str, adapters: Sequence[SiteAdapter] | None = None) -> Optional[SiteAdapter]:
    """First rule whose host predicate accepts ``hostname``; later rules are never consulted."""
    host = (hostname or "").lower()
    if not host:
        return None
    for adapter in SITE_ADAPTERS if adapters is None else adapters:
        if adapter.matches(host):
            return adapter
    return None


async def find_site_specific(
    page: Page, hostname: str | None = None, adapters: Sequence[SiteAdapter] | None = None
) -> Optional[ElementHandle]:
    host = dom.page_hostname(page) if hostname is None else hostname.lower()
    adapter = adapter_for_host(host, adapters)
    if adapter is None:
        return None

    logging.debug("site_adapter: matched name=%s host=%s kind=%s", adapter.name, host, adapter.kind)
    try:
        if adapter.kind == "custom":
            found = await adapter.finder(page)
        else:
            found = await pick_first_visible(page, adapter.selectors)
    except Exception as exc:
        logging.debug("site_adapter: strategy_failed name=%s reason=%r", adapter.name, exc)
        return None

    if found is None:
        logging.debug("site_adapter: no_match name=%s", adapter.name)
    return found
