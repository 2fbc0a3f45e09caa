"""Minimal document-tree interface the page scrapers are written against.

Scrapers only ever need four things from a parsed page: select elements by
CSS selector, read trimmed text, read an attribute, and step to the next
element sibling. ``Node`` is that interface; ``SoupNode`` satisfies it on top
of BeautifulSoup.
"""

from typing import Protocol

from bs4 import BeautifulSoup, Tag


class Node(Protocol):
    """A parsed element (or whole document)."""

    @property
    def tag(self) -> str: ...

    @property
    def text(self) -> str: ...

    @property
    def inner_html(self) -> str: ...

    def select(self, selector: str) -> list["Node"]: ...

    def select_one(self, selector: str) -> "Node | None": ...

    def attr(self, name: str) -> str | None: ...

    def next_sibling(self) -> "Node | None": ...


class SoupNode:
    """``Node`` backed by a BeautifulSoup ``Tag``."""

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    def __repr__(self) -> str:
        return f"SoupNode(<{self.tag}>)"

    @property
    def tag(self) -> str:
        return (self._tag.name or "").lower()

    @property
    def text(self) -> str:
        """Concatenated text content, whitespace-trimmed at both ends."""
        return self._tag.get_text().strip()

    @property
    def inner_html(self) -> str:
        return self._tag.decode_contents()

    def select(self, selector: str) -> list["SoupNode"]:
        return [SoupNode(t) for t in self._tag.select(selector)]

    def select_one(self, selector: str) -> "SoupNode | None":
        found = self._tag.select_one(selector)
        return SoupNode(found) if found is not None else None

    def attr(self, name: str) -> str | None:
        value = self._tag.get(name)
        if isinstance(value, list):
            # Multi-valued attributes (class, rel) come back as lists
            return " ".join(value)
        return value

    def next_sibling(self) -> "SoupNode | None":
        sibling = self._tag.find_next_sibling()
        return SoupNode(sibling) if sibling is not None else None


def parse_html(html: str) -> SoupNode:
    """Parse a fetched page into a ``Node``."""
    return SoupNode(BeautifulSoup(html, "lxml"))
