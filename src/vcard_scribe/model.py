from __future__ import annotations

import copy
from typing import Iterable, Iterator, TypeVar

from .datatype import VCardDataType
from .properties import FormattedName, RawProperty, StructuredName, VCardProperty
from .validation import ValidationWarning, ValidationWarnings
from .version import VCardVersion

P = TypeVar("P", bound=VCardProperty)


class VCard:
    """A contact: a version plus properties, grouped by property class in insertion order."""

    def __init__(self, version: VCardVersion = VCardVersion.V3_0, properties: Iterable[VCardProperty] = ()):
        self.version = version
        self._properties: dict[type[VCardProperty], list[VCardProperty]] = {}
        for prop in properties:
            self.add_property(prop)

    # ── Properties ─────────────────────────────────────────────────────────────

    def __iter__(self) -> Iterator[VCardProperty]:
        for props in self._properties.values():
            yield from props

    def __len__(self) -> int:
        return sum(len(props) for props in self._properties.values())

    def get_property(self, cls: type[P]) -> P | None:
        props = self._properties.get(cls)
        return props[0] if props else None  # type: ignore[return-value]

    def get_properties(self, cls: type[P] | None = None) -> list[P]:
        if cls is None:
            return list(self)  # type: ignore[arg-type]
        return list(self._properties.get(cls, ()))  # type: ignore[arg-type]

    def add_property(self, prop: VCardProperty) -> None:
        self._properties.setdefault(type(prop), []).append(prop)

    def add_properties(self, props: Iterable[VCardProperty]) -> None:
        for prop in props:
            self.add_property(prop)

    def set_property(self, prop: VCardProperty) -> list[VCardProperty]:
        """Replace every property of ``prop``'s class with ``prop``; returns the ones removed."""
        removed = self.remove_properties(type(prop))
        self.add_property(prop)
        return removed

    def remove_property(self, prop: VCardProperty) -> bool:
        props = self._properties.get(type(prop))
        if not props:
            return False
        for i, existing in enumerate(props):
            if existing is prop:
                del props[i]
                if not props:
                    del self._properties[type(prop)]
                return True
        return False

    def remove_properties(self, cls: type[VCardProperty]) -> list[VCardProperty]:
        return self._properties.pop(cls, [])

    # ── Alternative representations (ALTID) ────────────────────────────────────

    def get_properties_alt(self, cls: type[P]) -> list[list[P]]:
        """Group properties sharing an ALTID; properties without one come last, alone."""
        groups: dict[str, list[P]] = {}
        singles: list[list[P]] = []
        for prop in self.get_properties(cls):
            alt_id = prop.parameters.alt_id
            if alt_id is None:
                singles.append([prop])
            else:
                groups.setdefault(alt_id, []).append(prop)
        return list(groups.values()) + singles

    def add_property_alt(self, cls: type[P], props: Iterable[P]) -> None:
        props = list(props)
        alt_id = generate_alt_id(self.get_properties(cls))
        for prop in props:
            if not isinstance(prop, cls):
                raise TypeError(f"{type(prop).__name__} is not a {cls.__name__}")
            prop.parameters.alt_id = alt_id
            self.add_property(prop)

    def set_property_alt(self, cls: type[P], props: Iterable[P]) -> list[VCardProperty]:
        removed = self.remove_properties(cls)
        self.add_property_alt(cls, props)
        return removed

    # ── Extended properties ────────────────────────────────────────────────────

    def get_extended_property(self, name: str) -> RawProperty | None:
        found = self.get_extended_properties(name)
        return found[0] if found else None

    def get_extended_properties(self, name: str | None = None) -> list[RawProperty]:
        raws = self.get_properties(RawProperty)
        if name is None:
            return raws
        return [raw for raw in raws if raw.name.lower() == name.lower()]

    def add_extended_property(
        self, name: str, value: str | None, data_type: VCardDataType | None = None
    ) -> RawProperty:
        raw = RawProperty(name, value, data_type)
        self.add_property(raw)
        return raw

    def set_extended_property(self, name: str, value: str | None) -> RawProperty:
        self.remove_extended_property(name)
        return self.add_extended_property(name, value)

    def remove_extended_property(self, name: str) -> list[RawProperty]:
        removed = self.get_extended_properties(name)
        for raw in removed:
            self.remove_property(raw)
        return removed

    # ── Conveniences ───────────────────────────────────────────────────────────

    @property
    def formatted_name(self) -> FormattedName | None:
        return self.get_property(FormattedName)

    @formatted_name.setter
    def formatted_name(self, value: FormattedName | str | None) -> None:
        if value is None:
            self.remove_properties(FormattedName)
            return
        if isinstance(value, str):
            value = FormattedName(value)
        self.set_property(value)

    @property
    def structured_name(self) -> StructuredName | None:
        return self.get_property(StructuredName)

    @structured_name.setter
    def structured_name(self, value: StructuredName | None) -> None:
        if value is None:
            self.remove_properties(StructuredName)
        else:
            self.set_property(value)

    # ── Validation ─────────────────────────────────────────────────────────────

    def validate(self, version: VCardVersion | None = None) -> ValidationWarnings:
        version = version or self.version
        warnings = ValidationWarnings()

        if version in (VCardVersion.V2_1, VCardVersion.V3_0) and self.structured_name is None:
            warnings.add(None, ValidationWarning.of(0))
        if version in (VCardVersion.V3_0, VCardVersion.V4_0) and self.formatted_name is None:
            warnings.add(None, ValidationWarning.of(1))

        for prop in self:
            warnings.add(prop, prop.validate(version, self))
        return warnings

    def copy(self) -> VCard:
        return copy.deepcopy(self)

    def __eq__(self, other) -> bool:
        if not isinstance(other, VCard):
            return NotImplemented
        return self.version is other.version and self._properties == other._properties

    def __repr__(self) -> str:
        return f"VCard(version={self.version.label}, properties={len(self)})"


def generate_alt_id(props: Iterable[VCardProperty]) -> str:
    """The lowest positive integer not already used as an ALTID."""
    taken = set()
    for prop in props:
        alt_id = prop.parameters.alt_id
        if alt_id is not None and alt_id.isdigit():
            taken.add(int(alt_id))
    candidate = 1
    while candidate in taken:
        candidate += 1
    return str(candidate)
