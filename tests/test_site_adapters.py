import asyncio
import logging

import pytest

from fake_dom import FakeElement, FakePage, FakeRoot
from slash_search.engine.site_adapters import (
    APPLE_FIELD_SELECTOR,
    APPLE_OPENER_SELECTOR,
    SITE_ADAPTERS,
    SiteAdapter,
    adapter_for_host,
    custom_adapter,
    find_site_specific,
    on_brand,
    on_domain,
    open_then_query,
    selector_adapter,
)


@pytest.mark.parametrize("host", ["example.com", "www.Example.com", "sub.example.com", "M.EXAMPLE.COM"])
def test_domain_predicate_accepts_domain_and_subdomains(host):
    assert on_domain("example.com")(host)


@pytest.mark.parametrize("host", ["notexample.com", "example.com.evil.org", "example.org", ""])
def test_domain_predicate_rejects_lookalikes(host):
    assert not on_domain("example.com")(host)


@pytest.mark.parametrize("host", ["amazon.com", "www.amazon.co.uk", "smile.amazon.de", "AMAZON.ca"])
def test_brand_predicate_covers_country_domains(host):
    assert on_brand("amazon")(host)


@pytest.mark.parametrize("host", ["amazonia.com", "myamazon.com", "amazon"])
def test_brand_predicate_needs_a_whole_label(host):
    assert not on_brand("amazon")(host)


def test_adapter_requires_exactly_one_strategy():
    async def finder(_page):
        return None

    with pytest.raises(ValueError):
        SiteAdapter(name="empty", matches=on_domain("a.com"), kind="selectors")
    with pytest.raises(ValueError):
        SiteAdapter(name="both", matches=on_domain("a.com"), kind="custom", selectors=("#q",), finder=finder)
    with pytest.raises(ValueError):
        SiteAdapter(name="odd", matches=on_domain("a.com"), kind="xpath", selectors=("#q",))


@pytest.mark.parametrize(
    "host,name",
    [
        ("www.amazon.co.jp", "amazon"),
        ("en.wikipedia.org", "wikipedia"),
        ("chromewebstore.google.com", "chrome-web-store"),
        ("www.apple.com", "apple"),
        ("stackoverflow.com", "stackoverflow"),
        ("www.LinkedIn.com", "linkedin"),
        ("best.aliexpress.us", "aliexpress"),
    ],
)
def test_registry_lookup(host, name):
    assert adapter_for_host(host).name == name


def test_registry_has_no_match_for_unknown_hosts():
    assert adapter_for_host("example.org") is None
    assert adapter_for_host("") is None


def test_registry_names_are_unique():
    names = [adapter.name for adapter in SITE_ADAPTERS]
    assert len(names) == len(set(names))


def test_first_matching_rule_wins_without_fallthrough():
    calls = []

    async def first(_page):
        calls.append("first")
        return None

    async def second(_page):
        calls.append("second")
        return FakeElement("input", {"type": "search"})

    adapters = (
        custom_adapter("broad", on_domain("example.com"), first),
        custom_adapter("narrow", on_domain("shop.example.com"), second),
    )
    page = FakePage("https://shop.example.com/")

    assert adapter_for_host("shop.example.com", adapters).name == "broad"
    assert asyncio.run(find_site_specific(page, adapters=adapters)) is None
    assert calls == ["first"]


def test_selector_rule_returns_first_visible_match():
    real = FakeElement("input", {"id": "real-search", "type": "search"})
    page = FakePage("https://www.example.com/", FakeRoot({"#real-search": [real]}))
    adapters = (selector_adapter("example", on_domain("example.com"), "#missing", "#real-search"),)

    assert asyncio.run(find_site_specific(page, adapters=adapters)) is real


def test_explicit_hostname_overrides_page_url():
    real = FakeElement("input", {"id": "real-search"})
    page = FakePage("about:blank", FakeRoot({"#real-search": [real]}))
    adapters = (selector_adapter("example", on_domain("example.com"), "#real-search"),)

    assert asyncio.run(find_site_specific(page, "Example.COM", adapters)) is real


def test_failing_custom_finder_counts_as_no_match(caplog):
    caplog.set_level(logging.DEBUG)

    async def explode(_page):
        raise RuntimeError("opener vanished")

    adapters = (custom_adapter("flaky", on_domain("example.com"), explode),)

    assert asyncio.run(find_site_specific(FakePage(), adapters=adapters)) is None
    assert any("strategy_failed name=flaky" in record.getMessage() for record in caplog.records)


def _apple_page(field_style=None, with_opener=True):
    field = FakeElement("input", {"id": "ac-gn-searchform-input", "type": "search"}, style=field_style)
    document = FakeRoot({APPLE_FIELD_SELECTOR: [field]})
    opener = None
    if with_opener:
        opener = FakeElement("button", {"class": "ac-gn-link-search"}, on_click=lambda: field.style.update(display="block"))
        document.add(APPLE_OPENER_SELECTOR, opener)
    return FakePage("https://www.apple.com/", document), field, opener


def test_open_then_query_returns_visible_field_without_clicking():
    page, field, opener = _apple_page()

    assert asyncio.run(find_site_specific(page)) is field
    assert opener.clicks == 0
    assert page.layout_passes == 0


def test_open_then_query_clicks_opener_and_requeries():
    page, field, opener = _apple_page(field_style={"display": "none"})

    assert asyncio.run(find_site_specific(page)) is field
    assert opener.clicks == 1
    assert page.layout_passes == 1


def test_open_then_query_falls_back_to_eligible_hidden_field():
    page, field, _ = _apple_page(field_style={"display": "none"}, with_opener=False)
    assert asyncio.run(find_site_specific(page)) is field


def test_open_then_query_continues_when_opener_click_fails(caplog):
    caplog.set_level(logging.DEBUG)
    field = FakeElement("input", {"id": "ac-gn-searchform-input", "type": "search"}, style={"display": "none"})
    opener = FakeElement("button", {"class": "ac-gn-link-search"}, click_error=True)
    document = FakeRoot({APPLE_FIELD_SELECTOR: [field], APPLE_OPENER_SELECTOR: [opener]})
    page = FakePage("https://www.apple.com/", document)

    assert asyncio.run(find_site_specific(page)) is field
    assert page.layout_passes == 1
    assert document.queries.count([APPLE_FIELD_SELECTOR]) == 2
    assert any("opener_click_failed" in record.getMessage() for record in caplog.records)


def test_open_then_query_without_field_or_opener():
    finder = open_then_query("#nope", "#no-opener")
    assert asyncio.run(finder(FakePage())) is None


def test_store_adapter_descends_into_shadow_roots():
    shadow_input = FakeElement("input", {"type": "search", "aria-label": "Search extensions"})
    host = FakeElement("cws-header", shadow_root=FakeRoot({"input[type='search']": [shadow_input]}))
    page = FakePage("https://chromewebstore.google.com/category/extensions", FakeRoot(elements=[host]))

    assert asyncio.run(find_site_specific(page)) is shadow_input
