from __future__ import annotations

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import NavigableString, Tag

_WHITESPACE = re.compile(r"\s+")


class HCardElement:
    """Wraps the HTML element carrying one hCard property."""

    def __init__(self, tag: Tag, base_url: str | None = None):
        self.tag = tag
        self.base_url = base_url

    @property
    def tag_name(self) -> str:
        return self.tag.name

    def attr(self, name: str) -> str:
        value = self.tag.get(name)
        if value is None:
            return ""
        if isinstance(value, list):
            return " ".join(value)
        return value

    def abs_url(self, name: str) -> str:
        value = self.attr(name)
        if value and self.base_url:
            return urljoin(self.base_url, value)
        return value

    def class_names(self) -> list[str]:
        return list(self.tag.get("class") or [])

    def value(self) -> str:
        """The property value shown by this element.

        ``<abbr title>`` wins, then the concatenated text of ``.value``
        children, then the element's visible text. ``.type`` children and
        ``<del>`` are ignored and ``<br>`` becomes a newline.
        """
        if self.tag_name == "abbr":
            title = self.attr("title")
            if title:
                return title

        value_tags = self.tag.find_all(class_="value")
        if value_tags:
            seen = {id(tag) for tag in value_tags}
            parts = []
            for tag in value_tags:
                if any(id(parent) in seen for parent in tag.parents):
                    continue
                if tag.name == "abbr" and tag.get("title"):
                    parts.append(tag["title"])
                else:
                    parts.append(_visible_text(tag))
            return _tidy("".join(parts))

        return _tidy(_visible_text(self.tag))

    def first_value(self, css_class: str) -> str | None:
        tag = self.tag.find(class_=css_class)
        if tag is None:
            return None
        return HCardElement(tag, self.base_url).value()

    def all_values(self, css_class: str) -> list[str]:
        return [HCardElement(tag, self.base_url).value() for tag in self.tag.find_all(class_=css_class)]

    def types(self) -> list[str]:
        return [t.lower() for t in self.all_values("type")]

    def append(self, text: str) -> None:
        """Append text, writing newlines as ``<br>``."""
        soup = document_of(self.tag)
        for i, line in enumerate(text.split("\n")):
            if i:
                self.tag.append(soup.new_tag("br"))
            self.tag.append(line)

    def append_child(self, name: str, css_class: str | None = None, **attrs: str) -> HCardElement:
        soup = document_of(self.tag)
        if css_class:
            attrs["class"] = css_class
        child = soup.new_tag(name, attrs=attrs)
        self.tag.append(child)
        return HCardElement(child, self.base_url)


def _visible_text(tag: Tag) -> str:
    out: list[str] = []
    for node in tag.children:
        if isinstance(node, NavigableString):
            if type(node) is NavigableString:
                out.append(_WHITESPACE.sub(" ", str(node)))
            continue
        if not isinstance(node, Tag):
            continue
        if "type" in (node.get("class") or []) or node.name == "del":
            continue
        if node.name == "br":
            out.append("\n")
            continue
        out.append(_visible_text(node))
    return "".join(out)


def _tidy(text: str) -> str:
    lines = [line.strip() for line in text.split("\n")]
    return "\n".join(lines).strip()


def document_of(tag: Tag) -> BeautifulSoup:
    node = tag
    while node.parent is not None:
        node = node.parent
    if not isinstance(node, BeautifulSoup):
        raise ValueError("Element is not attached to a document.")
    return node
