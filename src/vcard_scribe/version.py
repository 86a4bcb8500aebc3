from __future__ import annotations

from enum import Enum

XCARD_NAMESPACE = "urn:ietf:params:xml:ns:vcard-4.0"


class VCardVersion(Enum):
    """The vCard versions this library reads and writes.

    Members are ordered by precedence, so ``V2_1 < V4_0`` holds.
    """

    V2_1 = ("2.1", None)
    V3_0 = ("3.0", None)
    V4_0 = ("4.0", XCARD_NAMESPACE)

    def __init__(self, label: str, xml_namespace: str | None):
        self.label = label
        self.xml_namespace = xml_namespace

    def __str__(self) -> str:
        return self.label

    def __lt__(self, other: VCardVersion) -> bool:
        if not isinstance(other, VCardVersion):
            return NotImplemented
        return _ORDER.index(self) < _ORDER.index(other)

    def __le__(self, other: VCardVersion) -> bool:
        if not isinstance(other, VCardVersion):
            return NotImplemented
        return self is other or self < other

    @classmethod
    def from_label(cls, label: str | None) -> VCardVersion | None:
        if label is None:
            return None
        label = label.strip()
        for version in cls:
            if version.label == label:
                return version
        return None

    @classmethod
    def from_xml_namespace(cls, namespace: str | None) -> VCardVersion | None:
        for version in cls:
            if version.xml_namespace is not None and version.xml_namespace == namespace:
                return version
        return None


_ORDER = (VCardVersion.V2_1, VCardVersion.V3_0, VCardVersion.V4_0)

ALL_VERSIONS = frozenset(VCardVersion)
