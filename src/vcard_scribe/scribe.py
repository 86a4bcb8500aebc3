from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from .datatype import VCardDataType
from .exceptions import CannotParseError
from .hcard_element import HCardElement
from .jcard_value import JCardValue
from .messages import parse_message
from .parameters import VCardParameters
from .properties import VCardProperty
from .values import escape, unescape, write_list, write_structured
from .version import XCARD_NAMESPACE, VCardVersion
from .xcard_element import XCardElement

if TYPE_CHECKING:
    from .model import VCard

V2_1 = VCardVersion.V2_1
V3_0 = VCardVersion.V3_0
V4_0 = VCardVersion.V4_0

P = TypeVar("P", bound=VCardProperty)


@dataclass(frozen=True)
class WriteContext:
    version: VCardVersion
    include_trailing_semicolons: bool = False


@dataclass
class ParseContext:
    version: VCardVersion
    warnings: list[str] = field(default_factory=list)

    def warn(self, code: int, *args) -> None:
        self.warnings.append(parse_message(code, *args))


@dataclass
class ParseResult(Generic[P]):
    property: P
    warnings: list[str]


@dataclass(frozen=True)
class ParseWarning:
    """Something a reader noticed but recovered from."""

    message: str
    line_number: int | None = None
    property_name: str | None = None

    def __str__(self) -> str:
        where = []
        if self.line_number is not None:
            where.append(f"Line {self.line_number}")
        if self.property_name is not None:
            where.append(f"{self.property_name} property")
        prefix = " | ".join(where)
        return f"{prefix}: {self.message}" if prefix else self.message


@dataclass(frozen=True)
class ParseFailure:
    """A property that could not be read and was left out of its vCard."""

    property_name: str
    value: str
    message: str
    line_number: int | None = None


# ── Base scribe ────────────────────────────────────────────────────────────────

class VCardPropertyScribe(Generic[P]):
    """Reads and writes one kind of property in every wire format.

    Subclasses implement the ``_``-prefixed hooks. The public methods copy
    parameters, attach them to parsed properties and collect warnings, so
    a hook only deals with the value.
    """

    def __init__(self, property_class: type[P], property_name: str, qname: str | None = None):
        self.property_class = property_class
        self.property_name = property_name.upper()
        self.qname = qname or f"{{{XCARD_NAMESPACE}}}{property_name.lower()}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.property_name})"

    # ── Data types ─────────────────────────────────────────────────────────────

    def default_data_type(self, version: VCardVersion) -> VCardDataType | None:
        """The data type a value has when it carries no VALUE parameter."""
        return self._default_data_type(version)

    def data_type(self, prop: P, version: VCardVersion) -> VCardDataType | None:
        return self._data_type(prop, version)

    def _default_data_type(self, version: VCardVersion) -> VCardDataType | None:
        return VCardDataType.TEXT

    def _data_type(self, prop: P, version: VCardVersion) -> VCardDataType | None:
        return self.default_data_type(version)

    # ── Writing ────────────────────────────────────────────────────────────────

    def prepare_parameters(self, prop: P, version: VCardVersion, vcard: VCard | None = None) -> VCardParameters:
        """A copy of the property's parameters, adjusted for ``version``."""
        copy = prop.parameters.copy()
        self._prepare_parameters(prop, copy, version, vcard)
        return copy

    def write_text(self, prop: P, context: WriteContext) -> str:
        return self._write_text(prop, context)

    def write_xml(self, prop: P, element: XCardElement) -> None:
        self._write_xml(prop, element)

    def write_html(self, prop: P, element: HCardElement) -> None:
        self._write_html(prop, element)

    def write_json(self, prop: P) -> JCardValue:
        return self._write_json(prop)

    def _prepare_parameters(self, prop: P, copy: VCardParameters, version: VCardVersion, vcard: VCard | None) -> None:
        pass

    def _write_text(self, prop: P, context: WriteContext) -> str:
        raise NotImplementedError

    def _write_xml(self, prop: P, element: XCardElement) -> None:
        value = self.write_text(prop, WriteContext(V4_0))
        element.append(self.data_type(prop, V4_0), value)

    def _write_html(self, prop: P, element: HCardElement) -> None:
        element.append(unescape(self.write_text(prop, WriteContext(V3_0))))

    def _write_json(self, prop: P) -> JCardValue:
        return JCardValue.single(self.write_text(prop, WriteContext(V4_0)))

    # ── Parsing ────────────────────────────────────────────────────────────────

    def parse_text(
        self,
        value: str,
        data_type: VCardDataType | None,
        parameters: VCardParameters,
        version: VCardVersion,
    ) -> ParseResult[P]:
        context = ParseContext(version)
        prop = self._parse_text(value, data_type, parameters, context)
        prop.parameters = parameters
        return ParseResult(prop, context.warnings)

    def parse_xml(self, element: XCardElement, parameters: VCardParameters) -> ParseResult[P]:
        context = ParseContext(V4_0)
        prop = self._parse_xml(element, parameters, context)
        prop.parameters = parameters
        return ParseResult(prop, context.warnings)

    def parse_html(self, element: HCardElement) -> ParseResult[P]:
        context = ParseContext(V3_0)
        parameters = VCardParameters()
        prop = self._parse_html(element, parameters, context)
        prop.parameters = parameters
        return ParseResult(prop, context.warnings)

    def parse_json(
        self,
        value: JCardValue,
        data_type: VCardDataType | None,
        parameters: VCardParameters,
    ) -> ParseResult[P]:
        context = ParseContext(V4_0)
        prop = self._parse_json(value, data_type, parameters, context)
        prop.parameters = parameters
        return ParseResult(prop, context.warnings)

    def _parse_text(
        self, value: str, data_type: VCardDataType | None, parameters: VCardParameters, context: ParseContext
    ) -> P:
        raise NotImplementedError

    def _parse_xml(self, element: XCardElement, parameters: VCardParameters, context: ParseContext) -> P:
        data_type, value = element.first_value()
        return self._parse_text(escape(value), data_type, parameters, context)

    def _parse_html(self, element: HCardElement, parameters: VCardParameters, context: ParseContext) -> P:
        return self._parse_text(escape(element.value()), None, parameters, context)

    def _parse_json(
        self, value: JCardValue, data_type: VCardDataType | None, parameters: VCardParameters, context: ParseContext
    ) -> P:
        return self._parse_text(jcard_value_to_string(value), data_type, parameters, context)


# ── Shared helpers ─────────────────────────────────────────────────────────────

def text_escape(value: str, context: WriteContext) -> str:
    """Escape a text value, except for 2.1 which has no escaping."""
    if context.version is V2_1:
        return value
    return escape(value)


def jcard_value_to_string(value: JCardValue) -> str:
    """Turn a jCard value into the text form a ``_parse_text`` hook expects."""
    values = value.values
    if len(values) > 1:
        multi = value.as_multi()
        if multi:
            return write_list(multi)

    if values and isinstance(values[0], list):
        structured = value.as_structured()
        if structured:
            return write_structured(structured, include_trailing_semicolons=True)

    return escape(value.as_single())


def missing_xml_elements(*names: str | VCardDataType | None) -> CannotParseError:
    labels = ", ".join("unknown" if n is None else str(n) for n in names)
    return CannotParseError(19, labels)


def handle_pref_param(prop: VCardProperty, copy: VCardParameters, version: VCardVersion, vcard: VCard | None) -> None:
    """Translate between PREF=N (4.0) and TYPE=pref (2.1 and 3.0).

    For 2.1/3.0 only the sibling with the lowest PREF gets TYPE=pref;
    siblings with no or malformed PREF are never chosen. For 4.0 a
    TYPE=pref becomes PREF=1.
    """
    if version is V4_0:
        for type_ in copy.types:
            if type_.lower() == "pref":
                copy.remove_type(type_)
                copy.pref = 1
                break
        return

    copy.replace(VCardParameters.PREF, None)

    siblings = vcard.get_properties(type(prop)) if vcard is not None else [prop]
    most_preferred = None
    lowest = None
    for sibling in siblings:
        pref = sibling.parameters.pref
        if pref is None:
            continue
        if lowest is None or pref < lowest:
            lowest = pref
            most_preferred = sibling

    if most_preferred is prop and not copy.has_type("pref"):
        copy.add_type("pref")
