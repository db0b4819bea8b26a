import asyncio
import logging

from fake_dom import BrokenPage, FakeElement, FakePage, FakeRoot, search_form_page
from slash_search.engine import discovery, site_adapters
from slash_search.engine.discovery import discover, find_and_focus, find_search_input
from slash_search.engine.site_adapters import on_domain, selector_adapter


def _fail_generic(*_args, **_kwargs):
    raise AssertionError("generic scan should not run")


def test_adapter_result_skips_generic_scan(monkeypatch):
    monkeypatch.setattr(discovery, "find_generic_scored", _fail_generic)
    real = FakeElement("input", {"id": "real-search", "type": "search"})
    page = FakePage("https://shop.example.com/cart", FakeRoot({"#real-search": [real]}))
    monkeypatch.setattr(
        site_adapters,
        "SITE_ADAPTERS",
        (selector_adapter("example", on_domain("example.com"), "#missing", "#real-search"),),
    )

    found = asyncio.run(discover(page))

    assert found.element is real
    assert found.source == "adapter"
    assert found.adapter == "example"


def test_builtin_adapter_wins_over_better_generic_match(monkeypatch):
    monkeypatch.setattr(discovery, "find_generic_scored", _fail_generic)
    wiki = FakeElement("input", {"id": "searchInput", "type": "text"})
    page = FakePage("https://en.wikipedia.org/wiki/Python", FakeRoot({"#searchInput": [wiki]}))

    assert asyncio.run(find_search_input(page)) is wiki


def test_adapter_miss_falls_through_to_generic():
    page, search, _ = search_form_page("https://en.wikipedia.org/wiki/Main_Page")

    found = asyncio.run(discover(page))

    assert found.element is search
    assert found.source == "generic"
    assert found.score is not None


def test_pages_without_host_use_generic_scan():
    page, search, _ = search_form_page("about:blank")
    assert asyncio.run(find_search_input(page)) is search


def test_nothing_found():
    page = FakePage("https://example.org/")

    assert asyncio.run(find_search_input(page)) is None
    assert asyncio.run(find_and_focus(page)) is False


def test_find_and_focus_is_idempotent():
    page, search, text_filter = search_form_page()

    assert asyncio.run(find_and_focus(page)) is True
    assert asyncio.run(find_and_focus(page)) is True

    assert search.focus_count == 2
    assert text_filter.focus_count == 0
    assert search.selection == (0, len("old query"))


def test_find_and_focus_logs_resolution(caplog):
    caplog.set_level(logging.INFO)
    page, _, _ = search_form_page()

    asyncio.run(find_and_focus(page))

    messages = [record.getMessage() for record in caplog.records]
    assert any("source=generic" in m and "input[name=q][type=search]" in m for m in messages)


def test_find_and_focus_never_raises(caplog):
    assert asyncio.run(find_and_focus(BrokenPage())) is False
    assert any("discovery_failed" in record.getMessage() for record in caplog.records)


def test_find_and_focus_survives_a_candidate_detaching_mid_scan():
    stale = FakeElement("input", {"type": "search"}, closest_error=True)
    good = FakeElement("input", {"type": "text", "name": "q"}, rect=(10, 40, 200, 30))
    page = FakePage(document=FakeRoot({"input[type='search']": [stale], "input[name='q']": [good]}))

    assert asyncio.run(find_and_focus(page)) is True
    assert good.focus_count == 1
    assert stale.focus_count == 0
