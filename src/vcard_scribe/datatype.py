from __future__ import annotations

from typing import ClassVar, Iterable

from .version import ALL_VERSIONS, VCardVersion

V2_1 = VCardVersion.V2_1
V3_0 = VCardVersion.V3_0
V4_0 = VCardVersion.V4_0


class OpenEnum:
    """A value set that knows its standard members but accepts extensions.

    Standard members are created once at import time and compared by
    identity. Anything else handed to :meth:`get` becomes an ad-hoc member
    that compares equal to other members with the same (case-insensitive)
    value.
    """

    _known: ClassVar[dict[str, "OpenEnum"]]

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls._known = {}

    def __init__(self, value: str, supported_versions: Iterable[VCardVersion] = ALL_VERSIONS):
        self.value = value
        self.supported_versions = frozenset(supported_versions)
        self.known = False

    @classmethod
    def _define(cls, value: str, *versions: VCardVersion):
        member = cls(value, versions or ALL_VERSIONS)
        member.known = True
        cls._known[value.lower()] = member
        return member

    @classmethod
    def find(cls, value: str | None):
        """Return the standard member matching ``value`` or ``None``."""
        if value is None:
            return None
        return cls._known.get(value.lower())

    @classmethod
    def get(cls, value: str | None):
        """Return the standard member matching ``value`` or an extension."""
        if value is None:
            return None
        return cls.find(value) or cls(value)

    @classmethod
    def all(cls) -> list:
        return list(cls._known.values())

    def is_supported_by(self, version: VCardVersion) -> bool:
        return version in self.supported_versions

    def __eq__(self, other) -> bool:
        if not isinstance(other, type(self)):
            return NotImplemented
        if self.known or other.known:
            return self is other
        return self.value.lower() == other.value.lower()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.value.lower()))

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"


class VCardDataType(OpenEnum):
    """The VALUE a property's value is encoded as."""

    URL: ClassVar[VCardDataType]
    CONTENT_ID: ClassVar[VCardDataType]
    BINARY: ClassVar[VCardDataType]
    URI: ClassVar[VCardDataType]
    TEXT: ClassVar[VCardDataType]
    DATE: ClassVar[VCardDataType]
    TIME: ClassVar[VCardDataType]
    DATE_TIME: ClassVar[VCardDataType]
    DATE_AND_OR_TIME: ClassVar[VCardDataType]
    TIMESTAMP: ClassVar[VCardDataType]
    BOOLEAN: ClassVar[VCardDataType]
    INTEGER: ClassVar[VCardDataType]
    FLOAT: ClassVar[VCardDataType]
    UTC_OFFSET: ClassVar[VCardDataType]
    LANGUAGE_TAG: ClassVar[VCardDataType]

    @property
    def name(self) -> str:
        return self.value


VCardDataType.URL = VCardDataType._define("url", V2_1)
VCardDataType.CONTENT_ID = VCardDataType._define("content-id", V2_1)
VCardDataType.BINARY = VCardDataType._define("binary", V3_0)
VCardDataType.URI = VCardDataType._define("uri", V3_0, V4_0)
VCardDataType.TEXT = VCardDataType._define("text")
VCardDataType.DATE = VCardDataType._define("date", V3_0, V4_0)
VCardDataType.TIME = VCardDataType._define("time", V3_0, V4_0)
VCardDataType.DATE_TIME = VCardDataType._define("date-time", V3_0, V4_0)
VCardDataType.DATE_AND_OR_TIME = VCardDataType._define("date-and-or-time", V4_0)
VCardDataType.TIMESTAMP = VCardDataType._define("timestamp", V4_0)
VCardDataType.BOOLEAN = VCardDataType._define("boolean", V4_0)
VCardDataType.INTEGER = VCardDataType._define("integer", V4_0)
VCardDataType.FLOAT = VCardDataType._define("float", V4_0)
VCardDataType.UTC_OFFSET = VCardDataType._define("utc-offset", V4_0)
VCardDataType.LANGUAGE_TAG = VCardDataType._define("language-tag", V4_0)
