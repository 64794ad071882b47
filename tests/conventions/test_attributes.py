from __future__ import annotations

from datetime import date

import pytest

from asciidoctor_conventions.conventions.attributes import (
    DOCUMENT_OPTIONS,
    HTML_STYLESHEET,
    AttributeSet,
    common_attributes,
    compose_attributes,
    html_only_attributes,
)

DAY = date(2024, 5, 17)

COMMON_KEYS = {
    "attribute-missing",
    "icons",
    "idprefix",
    "idseparator",
    "docinfo",
    "sectanchors",
    "sectnums",
    "today-year",
}
HTML_KEYS = {
    "source-highlighter",
    "highlightjsdir",
    "highlightjs-theme",
    "linkcss",
    "icons",
    "stylesheet",
}


def test_common_attributes_values():
    attributes = common_attributes(DAY)

    assert dict(attributes) == {
        "attribute-missing": "warn",
        "icons": "font",
        "idprefix": "",
        "idseparator": "-",
        "docinfo": "shared",
        "sectanchors": "",
        "sectnums": "",
        "today-year": 2024,
    }


def test_html_attributes_values():
    assert dict(html_only_attributes()) == {
        "source-highlighter": "highlight.js",
        "highlightjsdir": "js/highlight",
        "highlightjs-theme": "github",
        "linkcss": True,
        "icons": "font",
        "stylesheet": HTML_STYLESHEET,
    }
    assert HTML_STYLESHEET == "css/spring.css"


def test_html_jobs_carry_common_and_html_keys():
    assert set(compose_attributes(html=True, today=DAY)) == COMMON_KEYS | HTML_KEYS


def test_non_html_jobs_carry_common_keys_only():
    attributes = compose_attributes(html=False, today=DAY)

    assert set(attributes) == COMMON_KEYS
    assert not (set(attributes) & (HTML_KEYS - COMMON_KEYS))


@pytest.mark.parametrize("html", [True, False])
def test_composition_is_deterministic_and_idempotent(html):
    first = compose_attributes(html=html, today=DAY)
    second = compose_attributes(html=html, today=DAY)

    assert first == second
    assert hash(first) == hash(second)
    assert first.compose(first) == first
    if html:
        assert first | html_only_attributes() == first


def test_year_follows_the_clock():
    assert common_attributes(date(2031, 1, 1))["today-year"] == 2031
    assert common_attributes()["today-year"] == date.today().year


def test_attribute_set_is_immutable_and_last_write_wins():
    base = AttributeSet({"stylesheet": "css/spring.css", "icons": "font"})

    merged = base | {"stylesheet": "css/custom.css"}

    assert merged["stylesheet"] == "css/custom.css"
    assert merged["icons"] == "font"
    assert base["stylesheet"] == "css/spring.css"
    with pytest.raises(TypeError):
        base["icons"] = "image"  # type: ignore[index]
    assert "custom.css" in repr(merged)


def test_document_options_are_read_only():
    assert dict(DOCUMENT_OPTIONS) == {"doctype": "book"}
    with pytest.raises(TypeError):
        DOCUMENT_OPTIONS["doctype"] = "article"  # type: ignore[index]
