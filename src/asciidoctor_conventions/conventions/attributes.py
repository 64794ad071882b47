"""Attribute and option sets applied to every render task."""

from __future__ import annotations

from datetime import date
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from asciidoctor_conventions.asciidoctor.runner import AttributeValue

__all__ = [
    "AttributeSet",
    "DOCUMENT_OPTIONS",
    "HTML_STYLESHEET",
    "common_attributes",
    "compose_attributes",
    "html_only_attributes",
]

HTML_STYLESHEET = "css/spring.css"

DOCUMENT_OPTIONS: Mapping[str, object] = MappingProxyType({"doctype": "book"})


class AttributeSet(Mapping[str, AttributeValue]):
    """An immutable attribute mapping.

    ``a | b`` and :meth:`compose` produce a new set in which later keys win.
    """

    __slots__ = ("_values",)

    def __init__(
        self, values: Optional[Mapping[str, AttributeValue]] = None
    ) -> None:
        self._values: Mapping[str, AttributeValue] = MappingProxyType(
            dict(values or {})
        )

    def __getitem__(self, key: str) -> AttributeValue:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __or__(self, other: Mapping[str, AttributeValue]) -> "AttributeSet":
        return self.compose(other)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return dict(self._values) == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._values.items()))

    def __repr__(self) -> str:
        return f"AttributeSet({dict(self._values)!r})"

    def compose(self, *others: Mapping[str, AttributeValue]) -> "AttributeSet":
        merged = dict(self._values)
        for other in others:
            merged.update(other)
        return AttributeSet(merged)


def common_attributes(today: Optional[date] = None) -> AttributeSet:
    """Attributes for every backend.

    ``attribute-missing`` only warns here; the fatal-warnings policy on the
    render extension is what turns a missing reference into a failure.
    """

    year = (today or date.today()).year
    return AttributeSet(
        {
            "attribute-missing": "warn",
            "icons": "font",
            "idprefix": "",
            "idseparator": "-",
            "docinfo": "shared",
            "sectanchors": "",
            "sectnums": "",
            "today-year": year,
        }
    )


def html_only_attributes() -> AttributeSet:
    return AttributeSet(
        {
            "source-highlighter": "highlight.js",
            "highlightjsdir": "js/highlight",
            "highlightjs-theme": "github",
            "linkcss": True,
            "icons": "font",
            "stylesheet": HTML_STYLESHEET,
        }
    )


def compose_attributes(
    *, html: bool, today: Optional[date] = None
) -> AttributeSet:
    """Common attributes, then the HTML-only ones when ``html`` is set."""

    attributes = common_attributes(today)
    if html:
        attributes = attributes | html_only_attributes()
    return attributes
