import asyncio

import pytest

from fake_dom import FakeElement
from slash_search.engine.eligibility import is_searchy_input, is_searchy_type


@pytest.mark.parametrize("input_type", ["search", "text", "url", "tel", "email", "TEXT", "Search"])
def test_text_like_inputs_are_eligible(input_type):
    assert asyncio.run(is_searchy_input(FakeElement("input", {"type": input_type})))


def test_input_without_type_is_a_text_field():
    assert asyncio.run(is_searchy_input(FakeElement("input")))


def test_textarea_is_eligible():
    assert asyncio.run(is_searchy_input(FakeElement("textarea", {"aria-label": "Search"})))


@pytest.mark.parametrize(
    "input_type", ["password", "checkbox", "radio", "hidden", "submit", "button", "file", "number", "bogus"]
)
def test_non_text_inputs_are_rejected(input_type):
    assert not asyncio.run(is_searchy_input(FakeElement("input", {"type": input_type})))


@pytest.mark.parametrize("tag", ["div", "select", "button", "span"])
def test_other_tags_are_rejected(tag):
    assert not is_searchy_type(tag, "search")


def test_detached_element_is_not_eligible():
    assert not asyncio.run(is_searchy_input(FakeElement("input", detached=True)))
