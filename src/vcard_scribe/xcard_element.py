from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Iterable

from .datatype import VCardDataType
from .version import VCardVersion

UNKNOWN = "unknown"


def local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def namespace_of(tag: str) -> str | None:
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return None


class XCardElement:
    """Wraps the XML element of one xCard property.

    Child element names are either value names (``surname``, ``given``)
    or data type names (``text``, ``uri``), both in the xCard namespace.
    """

    def __init__(self, element: ET.Element, version: VCardVersion = VCardVersion.V4_0):
        self.element = element
        self.version = version
        self.namespace = version.xml_namespace

    @classmethod
    def create(cls, property_name: str, version: VCardVersion = VCardVersion.V4_0) -> XCardElement:
        tag = f"{{{version.xml_namespace}}}{property_name.lower()}"
        return cls(ET.Element(tag), version)

    def qualify(self, name: str | VCardDataType | None) -> str:
        if name is None:
            name = UNKNOWN
        elif isinstance(name, VCardDataType):
            name = name.name
        return f"{{{self.namespace}}}{name.lower()}"

    def first(self, *names: str | VCardDataType | None) -> str | None:
        """Text of the first child matching any of ``names``, in document order."""
        wanted = {self.qualify(n) for n in names}
        for child in self.element:
            if child.tag in wanted:
                return child.text or ""
        return None

    def all(self, name: str | VCardDataType | None) -> list[str]:
        tag = self.qualify(name)
        return [child.text or "" for child in self.element if child.tag == tag]

    def append(self, name: str | VCardDataType | None, value: str | Iterable[str] | None) -> list[ET.Element]:
        """Append child elements; an empty list still produces one empty element."""
        if value is None or isinstance(value, str):
            values = [value or ""]
        else:
            values = list(value) or [""]

        created = []
        for text in values:
            child = ET.SubElement(self.element, self.qualify(name))
            child.text = text
            created.append(child)
        return created

    def first_value(self) -> tuple[VCardDataType | None, str]:
        """The data type and text of the first namespaced child.

        Falls back to the element's own text when it has no such child.
        """
        for child in self.element:
            if namespace_of(child.tag) != self.namespace:
                continue
            name = local_name(child.tag)
            if name == "parameters":
                continue
            data_type = None if name == UNKNOWN else VCardDataType.get(name)
            return data_type, child.text or ""
        return None, (self.element.text or "").strip()

    def children(self) -> list[ET.Element]:
        return [c for c in self.element if local_name(c.tag) != "parameters"]

    @property
    def name(self) -> str:
        return local_name(self.element.tag)
