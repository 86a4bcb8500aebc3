from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, ClassVar

from .datatype import VCardDataType
from .dates import PartialDate, UtcOffset
from .mediatypes import ImageType, KeyType, MediaTypeParameter, SoundType
from .parameters import VCardParameters
from .uris import GeoUri, TelUri
from .validation import ValidationWarning
from .version import ALL_VERSIONS, VCardVersion

if TYPE_CHECKING:
    from .model import VCard

V2_1 = VCardVersion.V2_1
V3_0 = VCardVersion.V3_0
V4_0 = VCardVersion.V4_0

_GROUP_RE = re.compile(r"^[-a-z0-9]+$", re.IGNORECASE)


# ── Base classes ───────────────────────────────────────────────────────────────

@dataclass(kw_only=True)
class VCardProperty:
    """A single property of a vCard: an optional group, parameters and a value."""

    group: str | None = None
    parameters: VCardParameters = field(default_factory=VCardParameters)

    supported_versions: ClassVar[frozenset[VCardVersion]] = ALL_VERSIONS

    def is_supported_by(self, version: VCardVersion) -> bool:
        return version in self.supported_versions

    def validate(self, version: VCardVersion, vcard: VCard | None = None) -> list[ValidationWarning]:
        warnings: list[ValidationWarning] = []

        if not self.is_supported_by(version):
            labels = ", ".join(v.label for v in sorted(self.supported_versions))
            warnings.append(ValidationWarning.of(2, labels))

        warnings.extend(self.parameters.validate(version))

        if self.group is not None and not _GROUP_RE.match(self.group):
            warnings.append(ValidationWarning.of(23, self.group))

        self._validate(version, vcard, warnings)
        return warnings

    def _validate(self, version: VCardVersion, vcard: VCard | None, warnings: list[ValidationWarning]) -> None:
        pass

    def copy(self):
        return copy.deepcopy(self)


class HasAltId:
    """Mixin for properties that may hold several ALTID-linked representations."""

    parameters: VCardParameters

    @property
    def alt_id(self) -> str | None:
        return self.parameters.alt_id

    @alt_id.setter
    def alt_id(self, value: str | None) -> None:
        self.parameters.alt_id = value

    @property
    def language(self) -> str | None:
        return self.parameters.language

    @language.setter
    def language(self, value: str | None) -> None:
        self.parameters.language = value


class Preferable:
    """Mixin for properties that may carry PREF and TYPE parameters."""

    parameters: VCardParameters

    @property
    def pref(self) -> int | None:
        return self.parameters.pref

    @pref.setter
    def pref(self, value: int | None) -> None:
        self.parameters.pref = value

    @property
    def types(self) -> list[str]:
        return self.parameters.types

    def add_type(self, value: str) -> None:
        self.parameters.add_type(value)


@dataclass
class TextProperty(VCardProperty):
    value: str | None = None

    def _validate(self, version, vcard, warnings):
        if self.value is None:
            warnings.append(ValidationWarning.of(8))


@dataclass
class UriProperty(TextProperty):
    pass


@dataclass
class TextListProperty(VCardProperty):
    values: list[str] = field(default_factory=list)


# ── Text properties ────────────────────────────────────────────────────────────

@dataclass
class FormattedName(TextProperty, HasAltId):
    pass


@dataclass
class Note(TextProperty, HasAltId):
    pass


@dataclass
class Title(TextProperty, HasAltId):
    pass


@dataclass
class Role(TextProperty, HasAltId):
    pass


@dataclass
class Email(TextProperty, HasAltId, Preferable):
    pass


@dataclass
class ProductId(TextProperty):
    supported_versions: ClassVar[frozenset[VCardVersion]] = frozenset({V3_0, V4_0})


@dataclass
class SortString(TextProperty):
    supported_versions: ClassVar[frozenset[VCardVersion]] = frozenset({V3_0})


@dataclass
class Mailer(TextProperty):
    supported_versions: ClassVar[frozenset[VCardVersion]] = frozenset({V2_1, V3_0})


@dataclass
class Classification(TextProperty):
    supported_versions: ClassVar[frozenset[VCardVersion]] = frozenset({V3_0})


@dataclass
class Language(TextProperty, HasAltId, Preferable):
    supported_versions: ClassVar[frozenset[VCardVersion]] = frozenset({V4_0})


@dataclass
class Kind(TextProperty):
    INDIVIDUAL: ClassVar[str] = "individual"
    GROUP: ClassVar[str] = "group"
    ORG: ClassVar[str] = "org"
    LOCATION: ClassVar[str] = "location"

    supported_versions: ClassVar[frozenset[VCardVersion]] = frozenset({V4_0})

    def is_group(self) -> bool:
        return (self.value or "").lower() == self.GROUP


@dataclass
class Label(TextProperty):
    """A delivery label. vCard 4.0 stores these as the LABEL parameter of ADR."""

    supported_versions: ClassVar[frozenset[VCardVersion]] = frozenset({V2_1, V3_0})

    @property
    def types(self) -> list[str]:
        return self.parameters.types


# ── URI properties ─────────────────────────────────────────────────────────────

@dataclass
class Url(UriProperty, HasAltId, Preferable):
    pass


@dataclass
class Source(UriProperty, HasAltId, Preferable):
    supported_versions: ClassVar[frozenset[VCardVersion]] = frozenset({V3_0, V4_0})


@dataclass
class Uid(UriProperty):
    pass


@dataclass
class Impp(UriProperty, HasAltId, Preferable):
    supported_versions: ClassVar[frozenset[VCardVersion]] = frozenset({V3_0, V4_0})


@dataclass
class Member(UriProperty, HasAltId, Preferable):
    supported_versions: ClassVar[frozenset[VCardVersion]] = frozenset({V4_0})

    def _validate(self, version, vcard, warnings):
        super()._validate(version, vcard, warnings)
        if vcard is not None:
            kind = vcard.get_property(Kind)
            if kind is None or not kind.is_group():
                warnings.append(ValidationWarning.of(15))


# ── List and structured properties ─────────────────────────────────────────────

@dataclass
class Categories(TextListProperty, HasAltId, Preferable):
    pass


@dataclass
class Nickname(TextListProperty, HasAltId, Preferable):
    supported_versions: ClassVar[frozenset[VCardVersion]] = frozenset({V3_0, V4_0})


@dataclass
class Organization(VCardProperty, HasAltId, Preferable):
    """ORG: the organisation name followed by unit names."""

    values: list[str | None] = field(default_factory=list)

    def _validate(self, version, vcard, warnings):
        if not self.values:
            warnings.append(ValidationWarning.of(8))


@dataclass
class StructuredName(VCardProperty, HasAltId):
    family: str | None = None
    given: str | None = None
    additional_names: list[str] = field(default_factory=list)
    prefixes: list[str] = field(default_factory=list)
    suffixes: list[str] = field(default_factory=list)

    @property
    def sort_as(self) -> list[str]:
        return self.parameters.sort_as

    @sort_as.setter
    def sort_as(self, values: list[str] | None) -> None:
        self.parameters.sort_as = values


@dataclass
class Address(VCardProperty, HasAltId, Preferable):
    """ADR. Every component is a list since vCard 4.0 allows several values each."""

    po_boxes: list[str] = field(default_factory=list)
    extended_addresses: list[str] = field(default_factory=list)
    street_addresses: list[str] = field(default_factory=list)
    localities: list[str] = field(default_factory=list)
    regions: list[str] = field(default_factory=list)
    postal_codes: list[str] = field(default_factory=list)
    countries: list[str] = field(default_factory=list)

    @property
    def label(self) -> str | None:
        return self.parameters.label

    @label.setter
    def label(self, value: str | None) -> None:
        self.parameters.label = value

    @property
    def geo(self) -> GeoUri | None:
        return self.parameters.geo

    @property
    def timezone(self) -> str | None:
        return self.parameters.timezone

    def components(self) -> list[list[str]]:
        return [
            self.po_boxes,
            self.extended_addresses,
            self.street_addresses,
            self.localities,
            self.regions,
            self.postal_codes,
            self.countries,
        ]


@dataclass
class Telephone(VCardProperty, HasAltId, Preferable):
    """TEL as free text (any version) or as a tel URI (written natively in 4.0)."""

    text: str | None = None
    uri: TelUri | None = None

    def _validate(self, version, vcard, warnings):
        if self.text is None and self.uri is None:
            warnings.append(ValidationWarning.of(8))


@dataclass
class Geo(VCardProperty, HasAltId, Preferable):
    latitude: float | None = None
    longitude: float | None = None

    @classmethod
    def from_uri(cls, uri: GeoUri) -> Geo:
        return cls(uri.latitude, uri.longitude)

    def to_uri(self) -> GeoUri:
        return GeoUri(self.latitude or 0.0, self.longitude or 0.0)

    def _validate(self, version, vcard, warnings):
        if self.latitude is None:
            warnings.append(ValidationWarning.of(9))
        if self.longitude is None:
            warnings.append(ValidationWarning.of(10))


@dataclass
class Timezone(VCardProperty, HasAltId, Preferable):
    offset: UtcOffset | None = None
    text: str | None = None

    def _validate(self, version, vcard, warnings):
        if self.offset is None and self.text is None:
            warnings.append(ValidationWarning.of(13))


@dataclass
class Gender(VCardProperty):
    MALE: ClassVar[str] = "M"
    FEMALE: ClassVar[str] = "F"
    OTHER: ClassVar[str] = "O"
    NONE: ClassVar[str] = "N"
    UNKNOWN: ClassVar[str] = "U"

    sex: str | None = None
    text: str | None = None

    supported_versions: ClassVar[frozenset[VCardVersion]] = frozenset({V4_0})

    def _validate(self, version, vcard, warnings):
        allowed = (self.MALE, self.FEMALE, self.OTHER, self.NONE, self.UNKNOWN)
        if self.sex is not None and self.sex.upper() not in allowed:
            warnings.append(ValidationWarning.of(12, self.sex, ", ".join(allowed)))


# ── Dates ──────────────────────────────────────────────────────────────────────

@dataclass
class DateOrTimeProperty(VCardProperty, HasAltId):
    """A date that may also be a partial date or free text (the latter two are 4.0 only)."""

    date: date | datetime | None = None
    partial_date: PartialDate | None = None
    text: str | None = None

    @property
    def has_time(self) -> bool:
        if self.date is not None:
            return isinstance(self.date, datetime)
        if self.partial_date is not None:
            return self.partial_date.has_time_component()
        return False

    def _validate(self, version, vcard, warnings):
        if self.date is None and self.partial_date is None and self.text is None:
            warnings.append(ValidationWarning.of(8))
        if version is not V4_0 and (self.text is not None or self.partial_date is not None):
            warnings.append(ValidationWarning.of(11))


@dataclass
class Birthday(DateOrTimeProperty):
    pass


@dataclass
class Anniversary(DateOrTimeProperty):
    supported_versions: ClassVar[frozenset[VCardVersion]] = frozenset({V4_0})


@dataclass
class Deathdate(DateOrTimeProperty):
    supported_versions: ClassVar[frozenset[VCardVersion]] = frozenset({V4_0})


@dataclass
class Revision(VCardProperty):
    timestamp: datetime | None = None

    def _validate(self, version, vcard, warnings):
        if self.timestamp is None:
            warnings.append(ValidationWarning.of(8))


# ── Binary ─────────────────────────────────────────────────────────────────────

@dataclass
class BinaryProperty(VCardProperty, HasAltId, Preferable):
    """Binary content held either inline (``data``) or by reference (``url``)."""

    url: str | None = None
    data: bytes | None = None
    content_type: MediaTypeParameter | None = None

    media_types: ClassVar[type[MediaTypeParameter]] = MediaTypeParameter

    def _validate(self, version, vcard, warnings):
        if self.url is None and self.data is None:
            warnings.append(ValidationWarning.of(7))


@dataclass
class Photo(BinaryProperty):
    media_types: ClassVar[type[MediaTypeParameter]] = ImageType


@dataclass
class Logo(BinaryProperty):
    media_types: ClassVar[type[MediaTypeParameter]] = ImageType


@dataclass
class Sound(BinaryProperty):
    media_types: ClassVar[type[MediaTypeParameter]] = SoundType


@dataclass
class Key(BinaryProperty):
    media_types: ClassVar[type[MediaTypeParameter]] = KeyType


# ── Extended properties ────────────────────────────────────────────────────────

@dataclass
class RawProperty(VCardProperty):
    """A property no scribe knows about, kept as its name and undecoded value."""

    name: str = ""
    value: str | None = None
    data_type: VCardDataType | None = None

    def _validate(self, version, vcard, warnings):
        if not re.match(r"^[-a-zA-Z0-9]+$", self.name):
            warnings.append(ValidationWarning.of(16, self.name, "property name"))
