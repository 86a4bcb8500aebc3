from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Iterable, Iterator

from .exceptions import CannotParseError, DocumentParseError, SkipMeError
from .io import PRODUCT_ID
from .messages import parse_message
from .model import VCard
from .parameters import VCardParameters
from .properties import ProductId, VCardProperty
from .scribe import ParseFailure, ParseWarning
from .scribe_index import ScribeIndex
from .scribes import RawPropertyScribe
from .version import XCARD_NAMESPACE, VCardVersion
from .xcard_element import XCardElement, local_name, namespace_of

logger = logging.getLogger(__name__)

V4_0 = VCardVersion.V4_0

ET.register_namespace("", XCARD_NAMESPACE)

# The data type each parameter's value is wrapped in.
PARAMETER_TYPES = {
    "ALTID": "text",
    "CALSCALE": "text",
    "GEO": "uri",
    "INDEX": "integer",
    "LABEL": "text",
    "LANGUAGE": "language-tag",
    "LEVEL": "text",
    "MEDIATYPE": "text",
    "PID": "text",
    "PREF": "integer",
    "SORT-AS": "text",
    "TYPE": "text",
    "TZ": "text",
}


def _q(name: str) -> str:
    return f"{{{XCARD_NAMESPACE}}}{name}"


# ── Writing ────────────────────────────────────────────────────────────────────

class XCardWriter:
    """Writes vCards as xCard (RFC 6351). xCard is always vCard 4.0."""

    def __init__(self, index: ScribeIndex | None = None, add_prodid: bool = True, version_strict: bool = True):
        self.index = index or ScribeIndex()
        self.add_prodid = add_prodid
        self.version_strict = version_strict

    def to_element(self, vcards: Iterable[VCard]) -> ET.Element:
        root = ET.Element(_q("vcards"))
        for vcard in vcards:
            root.append(self._vcard(vcard))
        return root

    def write(self, vcards: VCard | Iterable[VCard], indent: bool = True) -> str:
        if isinstance(vcards, VCard):
            vcards = [vcards]
        root = self.to_element(vcards)
        if indent:
            ET.indent(root)
        body = ET.tostring(root, encoding="unicode")
        return '<?xml version="1.0" encoding="UTF-8"?>\n' + body

    def _vcard(self, vcard: VCard) -> ET.Element:
        element = ET.Element(_q("vcard"))
        props: list[VCardProperty] = []
        if self.add_prodid:
            props.append(ProductId(PRODUCT_ID))
        for prop in vcard:
            if self.add_prodid and isinstance(prop, ProductId):
                continue
            if self.version_strict and not prop.is_supported_by(V4_0):
                continue
            props.append(prop)

        groups: dict[str, ET.Element] = {}
        for prop in props:
            child = self._property(prop, vcard)
            if child is None:
                continue
            if prop.group:
                group = groups.get(prop.group)
                if group is None:
                    group = ET.SubElement(element, _q("group"), name=prop.group)
                    groups[prop.group] = group
                group.append(child)
            else:
                element.append(child)
        return element

    def _property(self, prop: VCardProperty, vcard: VCard) -> ET.Element | None:
        scribe = self.index.get_property_scribe_for(prop)
        if scribe is None:
            raise KeyError(f"No scribe registered for {type(prop).__name__}.")

        element = XCardElement.create(scribe.property_name)
        try:
            scribe.write_xml(prop, element)
        except SkipMeError as exc:
            logger.debug("skipping %s: %s", scribe.property_name, exc)
            return None

        parameters = scribe.prepare_parameters(prop, V4_0, vcard)
        parameters.value = None
        if parameters:
            element.element.insert(0, _parameters_element(parameters))
        return element.element


def _parameters_element(parameters: VCardParameters) -> ET.Element:
    holder = ET.Element(_q("parameters"))
    for name, values in parameters:
        param = ET.SubElement(holder, _q(name.lower()))
        type_name = PARAMETER_TYPES.get(name, "unknown")
        for value in values:
            ET.SubElement(param, _q(type_name)).text = value
    return holder


# ── Reading ────────────────────────────────────────────────────────────────────

class XCardReader:
    """Reads the vCards out of an xCard document."""

    def __init__(self, source: str, index: ScribeIndex | None = None):
        try:
            root = ET.fromstring(source)
        except ET.ParseError as exc:
            raise DocumentParseError(f"Invalid XML: {exc}") from exc

        if root.tag == _q("vcard"):
            self._elements = [root]
        else:
            self._elements = list(root.iter(_q("vcard")))

        self.index = index or ScribeIndex()
        self.warnings: list[ParseWarning] = []
        self.failures: list[ParseFailure] = []
        self._position = 0

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

        vcard = VCard(V4_0)
        for child in element:
            if child.tag == _q("group"):
                group = child.get("name")
                for grouped in child:
                    self._read_property(grouped, group, vcard)
            else:
                self._read_property(child, None, vcard)
        return vcard

    def _read_property(self, element: ET.Element, group: str | None, vcard: VCard) -> None:
        if namespace_of(element.tag) != XCARD_NAMESPACE:
            logger.debug("ignoring foreign element %s", element.tag)
            return

        name = local_name(element.tag).upper()
        parameters = _read_parameters(element)
        scribe = self.index.get_property_scribe_by_qname(element.tag) or RawPropertyScribe(name)

        try:
            result = scribe.parse_xml(XCardElement(element), parameters)
        except SkipMeError as exc:
            self._warn(name, 0, exc)
            return
        except CannotParseError as exc:
            value = ET.tostring(element, encoding="unicode")
            self.failures.append(ParseFailure(name, value, str(exc)))
            self._warn(name, 1, exc)
            return

        for message in result.warnings:
            self.warnings.append(ParseWarning(message, property_name=name))
        prop = result.property
        prop.group = group
        vcard.add_property(prop)

    def _warn(self, name: str | None, code: int, *args) -> None:
        message = parse_message(code, *args)
        logger.debug("%s", message)
        self.warnings.append(ParseWarning(message, property_name=name))


def _read_parameters(element: ET.Element) -> VCardParameters:
    parameters = VCardParameters()
    holder = element.find(_q("parameters"))
    if holder is None:
        return parameters
    for param in holder:
        name = local_name(param.tag)
        values = [value.text or "" for value in param]
        if not values and param.text:
            values = [param.text.strip()]
        parameters.put_all(name, values)
    return parameters


# ── Public API ─────────────────────────────────────────────────────────────────

def parse_xml(text: str, index: ScribeIndex | None = None) -> list[VCard]:
    return XCardReader(text, index).read_all()


def write_xml(vcards: VCard | Iterable[VCard], **kwargs) -> str:
    return XCardWriter(**kwargs).write(vcards)
