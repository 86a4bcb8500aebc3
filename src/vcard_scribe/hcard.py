from __future__ import annotations

import logging
from typing import Iterable, Iterator
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from .exceptions import CannotParseError, SkipMeError
from .hcard_element import HCardElement, document_of
from .io import PRODUCT_ID, assign_labels
from .messages import parse_message
from .model import VCard
from .properties import Address, Categories, Email, Label, Nickname, ProductId, Telephone, VCardProperty
from .scribe import ParseFailure, ParseWarning, VCardPropertyScribe
from .scribe_index import ScribeIndex
from .scribes import RawPropertyScribe
from .version import VCardVersion

logger = logging.getLogger(__name__)

V3_0 = VCardVersion.V3_0

# hCard class names that differ from the property name
_CLASS_TO_NAME = {"category": "CATEGORIES"}
_NAME_TO_CLASS = {v: k for k, v in _CLASS_TO_NAME.items()}

# Properties whose values are gathered into a single property
_MERGED = (Nickname, Categories)

# Properties whose TYPE parameters are written as .type children
_TYPED = (Telephone, Email, Address)


# ── Reading ────────────────────────────────────────────────────────────────────

class HCardParser:
    """Reads the hCards (microformat vCards) embedded in an HTML page.

    Every element with the ``vcard`` class becomes a vCard 3.0. Relative
    URLs are resolved against ``<base href>`` or ``page_url``.
    """

    def __init__(self, html: str, page_url: str | None = None, index: ScribeIndex | None = None):
        self.soup = BeautifulSoup(html, "html.parser")
        self.index = index or ScribeIndex()

        base = self.soup.find("base", href=True)
        if base is not None:
            page_url = urljoin(page_url or "", base["href"])
        self.page_url = page_url

        self._elements = [
            tag for tag in self.soup.find_all(class_="vcard")
            if tag.find_parent(class_="vcard") is None
        ]
        self._position = 0
        self.warnings: list[ParseWarning] = []
        self.failures: list[ParseFailure] = []

    def __iter__(self) -> Iterator[VCard]:
        while True:
            vcard = self.read_next()
            if vcard is None:
                return
            yield vcard

    def read_all(self) -> list[VCard]:
        return list(self)

    def read_next(self) -> VCard | None:
        self.warnings = []
        self.failures = []
        if self._position >= len(self._elements):
            return None
        element = self._elements[self._position]
        self._position += 1

        vcard = VCard(V3_0)
        labels: list[Label] = []
        self._visit(element, vcard, labels)
        assign_labels(vcard, labels)
        return vcard

    def _visit(self, tag: Tag, vcard: VCard, labels: list[Label]) -> None:
        for child in tag.find_all(True, recursive=False):
            classes = [c.lower() for c in child.get("class") or []]
            if "vcard" in classes:
                self._warn(None, 23)
                continue
            for css_class in classes:
                self._read_property(child, css_class, vcard, labels)
            self._visit(child, vcard, labels)

    def _scribe_for(self, element: HCardElement, css_class: str) -> VCardPropertyScribe | None:
        if css_class == "url" and element.tag_name == "a":
            href = element.attr("href").lower()
            if href.startswith("mailto:"):
                return self.index.get_property_scribe("EMAIL")
            if href.startswith("tel:"):
                return self.index.get_property_scribe("TEL")

        name = _CLASS_TO_NAME.get(css_class, css_class.upper())
        if name in _NAME_TO_CLASS and css_class != _NAME_TO_CLASS[name]:
            return None
        scribe = self.index.get_property_scribe(name)
        if scribe is None and css_class.startswith("x-"):
            scribe = RawPropertyScribe(name)
        return scribe

    def _read_property(self, tag: Tag, css_class: str, vcard: VCard, labels: list[Label]) -> None:
        element = HCardElement(tag, self.page_url)
        scribe = self._scribe_for(element, css_class)
        if scribe is None:
            return

        name = scribe.property_name
        try:
            result = scribe.parse_html(element)
        except SkipMeError as exc:
            self._warn(name, 0, exc)
            return
        except CannotParseError as exc:
            self.failures.append(ParseFailure(name, str(tag), str(exc)))
            self._warn(name, 1, exc)
            return

        for message in result.warnings:
            self.warnings.append(ParseWarning(message, property_name=name))

        prop = result.property
        if isinstance(prop, Label):
            labels.append(prop)
            return
        if isinstance(prop, _MERGED):
            existing = vcard.get_property(type(prop))
            if existing is not None:
                existing.values.extend(prop.values)
                return
        vcard.add_property(prop)

    def _warn(self, name: str | None, code: int, *args) -> None:
        message = parse_message(code, *args)
        logger.debug("%s", message)
        self.warnings.append(ParseWarning(message, property_name=name))


# ── Writing ────────────────────────────────────────────────────────────────────

class HCardWriter:
    """Writes vCards as hCard markup, one ``div.vcard`` each."""

    def __init__(self, index: ScribeIndex | None = None, add_prodid: bool = False, version_strict: bool = True):
        self.index = index or ScribeIndex()
        self.add_prodid = add_prodid
        self.version_strict = version_strict

    def write(self, vcards: VCard | Iterable[VCard]) -> str:
        if isinstance(vcards, VCard):
            vcards = [vcards]
        soup = BeautifulSoup("", "html.parser")
        for vcard in vcards:
            div = soup.new_tag("div", attrs={"class": "vcard"})
            soup.append(div)
            self._vcard(vcard, HCardElement(div))
        return soup.decode(formatter="html5")

    def _vcard(self, vcard: VCard, root: HCardElement) -> None:
        if self.add_prodid:
            root.append_child("span", "prodid").append(PRODUCT_ID)

        for prop in vcard:
            if self.add_prodid and isinstance(prop, ProductId):
                continue
            if self.version_strict and not prop.is_supported_by(V3_0):
                continue
            self._property(prop, vcard, root)

    def _property(self, prop: VCardProperty, vcard: VCard, root: HCardElement) -> None:
        scribe = self.index.get_property_scribe_for(prop)
        if scribe is None:
            raise KeyError(f"No scribe registered for {type(prop).__name__}.")

        css_class = _NAME_TO_CLASS.get(scribe.property_name, scribe.property_name.lower())
        element = root.append_child("span", css_class)
        try:
            scribe.write_html(prop, element)
        except SkipMeError as exc:
            logger.debug("skipping %s: %s", scribe.property_name, exc)
            element.tag.decompose()
            return

        if isinstance(prop, _TYPED):
            parameters = scribe.prepare_parameters(prop, V3_0, vcard)
            soup = document_of(element.tag)
            for position, type_ in enumerate(parameters.types):
                type_tag = soup.new_tag("span", attrs={"class": "type"})
                type_tag.string = type_
                element.tag.insert(position, type_tag)


# ── Public API ─────────────────────────────────────────────────────────────────

def parse_html(html: str, page_url: str | None = None, index: ScribeIndex | None = None) -> list[VCard]:
    return HCardParser(html, page_url, index).read_all()


def write_html(vcards: VCard | Iterable[VCard], **kwargs) -> str:
    return HCardWriter(**kwargs).write(vcards)
