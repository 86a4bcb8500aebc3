from __future__ import annotations

import codecs
import logging
import re
from functools import lru_cache
from typing import ClassVar, Iterable, Iterator, NamedTuple

from .datatype import OpenEnum, VCardDataType
from .uris import GeoUri
from .validation import ValidationWarning
from .version import VCardVersion

logger = logging.getLogger(__name__)

V2_1 = VCardVersion.V2_1
V3_0 = VCardVersion.V3_0
V4_0 = VCardVersion.V4_0


class Encoding(OpenEnum):
    QUOTED_PRINTABLE: ClassVar[Encoding]
    BASE64: ClassVar[Encoding]
    BIT8: ClassVar[Encoding]
    BIT7: ClassVar[Encoding]
    B: ClassVar[Encoding]


Encoding.QUOTED_PRINTABLE = Encoding._define("QUOTED-PRINTABLE", V2_1)
Encoding.BASE64 = Encoding._define("BASE64", V2_1)
Encoding.BIT8 = Encoding._define("8BIT", V2_1)
Encoding.BIT7 = Encoding._define("7BIT", V2_1)
Encoding.B = Encoding._define("b", V3_0)


class Calscale(OpenEnum):
    GREGORIAN: ClassVar[Calscale]


Calscale.GREGORIAN = Calscale._define("gregorian", V4_0)


class Pid(NamedTuple):
    local_id: int
    client_pid_map_ref: int | None = None

    def __str__(self) -> str:
        if self.client_pid_map_ref is None:
            return str(self.local_id)
        return f"{self.local_id}.{self.client_pid_map_ref}"


# Parameters that only exist in some versions. PREF and LABEL are missing on
# purpose: writers translate them for older versions instead of dropping them.
SUPPORTED_VERSIONS: dict[str, frozenset[VCardVersion]] = {
    "ALTID": frozenset({V4_0}),
    "CALSCALE": frozenset({V4_0}),
    "CHARSET": frozenset({V2_1}),
    "GEO": frozenset({V4_0}),
    "INDEX": frozenset({V4_0}),
    "LEVEL": frozenset({V4_0}),
    "MEDIATYPE": frozenset({V4_0}),
    "PID": frozenset({V4_0}),
    "SORT-AS": frozenset({V4_0}),
    "TZ": frozenset({V4_0}),
}

_NAME_RE = re.compile(r"^[-a-zA-Z0-9]+$")
_PID_RE = re.compile(r"^\d+(\.\d+)?$")
_CONTROL_CHARS = "".join(chr(c) for c in range(0x20) if c != 0x09) + "\x7f"
_INVALID_VALUE_CHARS = {
    V2_1: _CONTROL_CHARS + '",.:=[]',
    V3_0: _CONTROL_CHARS + '"',
    V4_0: _CONTROL_CHARS + '"',
}


# ── Cached parsers for typed parameter values ──────────────────────────────────

@lru_cache(maxsize=256)
def _parse_geo(raw: str) -> GeoUri | None:
    try:
        return GeoUri.parse(raw)
    except ValueError:
        return None


@lru_cache(maxsize=256)
def _parse_int(raw: str) -> int | None:
    try:
        return int(raw)
    except ValueError:
        return None


@lru_cache(maxsize=256)
def _parse_pid(raw: str) -> Pid | None:
    if not _PID_RE.match(raw):
        return None
    local, _, ref = raw.partition(".")
    return Pid(int(local), int(ref) if ref else None)


class VCardParameters:
    """The parameters of a property: an ordered multi-map with upper-cased keys."""

    ALTID = "ALTID"
    CALSCALE = "CALSCALE"
    CHARSET = "CHARSET"
    ENCODING = "ENCODING"
    GEO = "GEO"
    INDEX = "INDEX"
    LABEL = "LABEL"
    LANGUAGE = "LANGUAGE"
    LEVEL = "LEVEL"
    MEDIATYPE = "MEDIATYPE"
    PID = "PID"
    PREF = "PREF"
    SORT_AS = "SORT-AS"
    TYPE = "TYPE"
    TZ = "TZ"
    VALUE = "VALUE"

    def __init__(self, items: Iterable[tuple[str, str]] | dict[str, list[str]] | None = None):
        self._map: dict[str, list[str]] = {}
        if isinstance(items, dict):
            for name, values in items.items():
                self.put_all(name, values)
        elif items is not None:
            for name, value in items:
                self.put(name, value)

    # ── Multi-map ──────────────────────────────────────────────────────────────

    def get(self, name: str) -> list[str]:
        return list(self._map.get(name.upper(), ()))

    def first(self, name: str) -> str | None:
        values = self._map.get(name.upper())
        return values[0] if values else None

    def put(self, name: str, value: str) -> None:
        self._map.setdefault(name.upper(), []).append(value)

    def put_all(self, name: str, values: Iterable[str]) -> None:
        values = list(values)
        if values:
            self._map.setdefault(name.upper(), []).extend(values)

    def replace(self, name: str, value: str | None) -> list[str]:
        """Set ``name`` to a single value (``None`` removes it); returns the old values."""
        old = self.remove_all(name)
        if value is not None:
            self.put(name, value)
        return old

    def replace_all(self, name: str, values: Iterable[str]) -> list[str]:
        old = self.remove_all(name)
        self.put_all(name, values)
        return old

    def remove(self, name: str, value: str) -> bool:
        key = name.upper()
        values = self._map.get(key)
        if not values:
            return False
        for i, existing in enumerate(values):
            if existing.lower() == value.lower():
                del values[i]
                if not values:
                    del self._map[key]
                return True
        return False

    def remove_all(self, name: str) -> list[str]:
        return self._map.pop(name.upper(), [])

    def names(self) -> list[str]:
        return list(self._map)

    def items(self) -> Iterator[tuple[str, str]]:
        for name, values in self._map.items():
            for value in values:
                yield name, value

    def copy(self) -> VCardParameters:
        clone = VCardParameters()
        clone._map = {name: list(values) for name, values in self._map.items()}
        return clone

    def __iter__(self) -> Iterator[tuple[str, list[str]]]:
        for name, values in self._map.items():
            yield name, list(values)

    def __contains__(self, name: str) -> bool:
        return name.upper() in self._map

    def __len__(self) -> int:
        return len(self._map)

    def __bool__(self) -> bool:
        return bool(self._map)

    def __eq__(self, other) -> bool:
        if not isinstance(other, VCardParameters):
            return NotImplemented
        return self._comparable() == other._comparable()

    def _comparable(self) -> dict[str, list[str]]:
        return {name: sorted(v.lower() for v in values) for name, values in self._map.items()}

    def __repr__(self) -> str:
        return f"VCardParameters({self._map!r})"

    # ── Typed accessors ────────────────────────────────────────────────────────

    @property
    def alt_id(self) -> str | None:
        return self.first(self.ALTID)

    @alt_id.setter
    def alt_id(self, value: str | None) -> None:
        self.replace(self.ALTID, value)

    @property
    def calscale(self) -> Calscale | None:
        return Calscale.get(self.first(self.CALSCALE))

    @calscale.setter
    def calscale(self, value: Calscale | None) -> None:
        self.replace(self.CALSCALE, None if value is None else value.value)

    @property
    def charset(self) -> str | None:
        return self.first(self.CHARSET)

    @charset.setter
    def charset(self, value: str | None) -> None:
        self.replace(self.CHARSET, value)

    @property
    def encoding(self) -> Encoding | None:
        return Encoding.get(self.first(self.ENCODING))

    @encoding.setter
    def encoding(self, value: Encoding | None) -> None:
        self.replace(self.ENCODING, None if value is None else value.value)

    @property
    def geo(self) -> GeoUri | None:
        """The GEO parameter, or ``None`` when absent or malformed."""
        raw = self.first(self.GEO)
        return None if raw is None else _parse_geo(raw)

    @geo.setter
    def geo(self, value: GeoUri | None) -> None:
        self.replace(self.GEO, None if value is None else str(value))

    @property
    def index(self) -> int | None:
        raw = self.first(self.INDEX)
        return None if raw is None else _parse_int(raw)

    @index.setter
    def index(self, value: int | None) -> None:
        if value is not None and value <= 0:
            raise ValueError(f"INDEX must be greater than 0, got {value}.")
        self.replace(self.INDEX, None if value is None else str(value))

    @property
    def label(self) -> str | None:
        return self.first(self.LABEL)

    @label.setter
    def label(self, value: str | None) -> None:
        self.replace(self.LABEL, value)

    @property
    def language(self) -> str | None:
        return self.first(self.LANGUAGE)

    @language.setter
    def language(self, value: str | None) -> None:
        self.replace(self.LANGUAGE, value)

    @property
    def level(self) -> str | None:
        return self.first(self.LEVEL)

    @level.setter
    def level(self, value: str | None) -> None:
        self.replace(self.LEVEL, value)

    @property
    def media_type(self) -> str | None:
        return self.first(self.MEDIATYPE)

    @media_type.setter
    def media_type(self, value: str | None) -> None:
        self.replace(self.MEDIATYPE, value)

    @property
    def pids(self) -> list[Pid]:
        """Well-formed PID values; malformed ones are skipped."""
        out = []
        for raw in self.get(self.PID):
            pid = _parse_pid(raw)
            if pid is not None:
                out.append(pid)
        return out

    def add_pid(self, pid: Pid) -> None:
        self.put(self.PID, str(pid))

    @property
    def pref(self) -> int | None:
        """The PREF parameter, or ``None`` when absent or malformed."""
        raw = self.first(self.PREF)
        return None if raw is None else _parse_int(raw)

    @pref.setter
    def pref(self, value: int | None) -> None:
        if value is not None and not 1 <= value <= 100:
            raise ValueError(f"PREF must be between 1 and 100 inclusive, got {value}.")
        self.replace(self.PREF, None if value is None else str(value))

    @property
    def sort_as(self) -> list[str]:
        return self.get(self.SORT_AS)

    @sort_as.setter
    def sort_as(self, values: Iterable[str] | None) -> None:
        self.replace_all(self.SORT_AS, values or [])

    @property
    def timezone(self) -> str | None:
        return self.first(self.TZ)

    @timezone.setter
    def timezone(self, value: str | None) -> None:
        self.replace(self.TZ, value)

    @property
    def type(self) -> str | None:
        return self.first(self.TYPE)

    @type.setter
    def type(self, value: str | None) -> None:
        self.replace(self.TYPE, value)

    @property
    def types(self) -> list[str]:
        return self.get(self.TYPE)

    def add_type(self, value: str) -> None:
        self.put(self.TYPE, value)

    def remove_type(self, value: str) -> bool:
        return self.remove(self.TYPE, value)

    def has_type(self, value: str) -> bool:
        return any(t.lower() == value.lower() for t in self.types)

    @property
    def value(self) -> VCardDataType | None:
        return VCardDataType.get(self.first(self.VALUE))

    @value.setter
    def value(self, data_type: VCardDataType | None) -> None:
        self.replace(self.VALUE, None if data_type is None else data_type.name)

    # ── Validation ─────────────────────────────────────────────────────────────

    def validate(self, version: VCardVersion) -> list[ValidationWarning]:
        warnings: list[ValidationWarning] = []

        for name, values in self._map.items():
            supported = SUPPORTED_VERSIONS.get(name)
            if supported is not None and version not in supported:
                warnings.append(ValidationWarning.of(6, name))
                continue

            if not _NAME_RE.match(name):
                warnings.append(ValidationWarning.of(26, name))

            invalid = _INVALID_VALUE_CHARS[version]
            for value in values:
                if any(ch in invalid for ch in value):
                    printable = " ".join(c for c in invalid if c.isprintable())
                    warnings.append(ValidationWarning.of(25, name, value, printable))

        warnings.extend(self._validate_enum(self.CALSCALE, Calscale, version))
        warnings.extend(self._validate_enum(self.ENCODING, Encoding, version))
        warnings.extend(self._validate_enum(self.VALUE, VCardDataType, version))

        if version is V4_0:
            raw = self.first(self.GEO)
            if raw is not None and _parse_geo(raw) is None:
                warnings.append(ValidationWarning.of(5, self.GEO, raw))

            raw = self.first(self.INDEX)
            if raw is not None:
                index = _parse_int(raw)
                if index is None:
                    warnings.append(ValidationWarning.of(5, self.INDEX, raw))
                elif index <= 0:
                    warnings.append(ValidationWarning.of(28, raw))

            for raw in self.get(self.PID):
                if _parse_pid(raw) is None:
                    warnings.append(ValidationWarning.of(27, raw))

        raw = self.first(self.PREF)
        if raw is not None:
            pref = _parse_int(raw)
            if pref is None:
                warnings.append(ValidationWarning.of(5, self.PREF, raw))
            elif not 1 <= pref <= 100:
                warnings.append(ValidationWarning.of(29, raw))

        charset = self.first(self.CHARSET)
        if charset is not None and version is V2_1:
            try:
                codecs.lookup(charset)
            except LookupError:
                warnings.append(ValidationWarning.of(22, charset))

        return warnings

    def _validate_enum(self, name: str, enum: type[OpenEnum], version: VCardVersion) -> list[ValidationWarning]:
        raw = self.first(name)
        if raw is None:
            return []
        member = enum.find(raw)
        if member is None:
            standard = ", ".join(m.value for m in enum.all())
            return [ValidationWarning.of(3, name, raw, standard)]
        if not member.is_supported_by(version):
            return [ValidationWarning.of(4, name, raw)]
        return []
