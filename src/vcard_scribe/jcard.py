from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Iterator

from .datatype import VCardDataType
from .exceptions import CannotParseError, DocumentParseError, SkipMeError
from .io import PRODUCT_ID
from .jcard_value import JCardValue
from .messages import parse_message
from .model import VCard
from .parameters import VCardParameters
from .properties import ProductId, VCardProperty
from .scribe import ParseFailure, ParseWarning
from .scribe_index import ScribeIndex
from .version import VCardVersion

logger = logging.getLogger(__name__)

V4_0 = VCardVersion.V4_0


# ── Writing ────────────────────────────────────────────────────────────────────

class JCardWriter:
    """Writes vCards as jCard (RFC 7095). jCard is always vCard 4.0."""

    def __init__(self, index: ScribeIndex | None = None, add_prodid: bool = True, version_strict: bool = True):
        self.index = index or ScribeIndex()
        self.add_prodid = add_prodid
        self.version_strict = version_strict

    def to_json(self, vcard: VCard) -> list[Any]:
        props: list[Any] = [["version", {}, "text", V4_0.label]]
        if self.add_prodid:
            props.append(["prodid", {}, "text", PRODUCT_ID])

        for prop in vcard:
            if self.add_prodid and isinstance(prop, ProductId):
                continue
            if self.version_strict and not prop.is_supported_by(V4_0):
                continue
            entry = self._property(prop, vcard)
            if entry is not None:
                props.append(entry)
        return ["vcard", props]

    def _property(self, prop: VCardProperty, vcard: VCard) -> list[Any] | None:
        scribe = self.index.get_property_scribe_for(prop)
        if scribe is None:
            raise KeyError(f"No scribe registered for {type(prop).__name__}.")

        try:
            value = scribe.write_json(prop)
        except SkipMeError as exc:
            logger.debug("skipping %s: %s", scribe.property_name, exc)
            return None

        parameters = scribe.prepare_parameters(prop, V4_0, vcard)
        parameters.value = None

        params: dict[str, Any] = {}
        if prop.group:
            params["group"] = prop.group
        for name, values in parameters:
            params[name.lower()] = values[0] if len(values) == 1 else values

        data_type = scribe.data_type(prop, V4_0)
        type_name = data_type.name if data_type is not None else "unknown"
        return [scribe.property_name.lower(), params, type_name, *value.to_json()]

    def write(self, vcards: VCard | Iterable[VCard], indent: int | None = None) -> str:
        if isinstance(vcards, VCard):
            return json.dumps(self.to_json(vcards), indent=indent, ensure_ascii=False)
        return json.dumps([self.to_json(v) for v in vcards], indent=indent, ensure_ascii=False)


# ── Reading ────────────────────────────────────────────────────────────────────

class JCardReader:
    """Reads a jCard document holding one vCard or an array of them."""

    def __init__(self, source: str, index: ScribeIndex | None = None):
        try:
            data = json.loads(source)
        except json.JSONDecodeError as exc:
            raise DocumentParseError(f"Invalid JSON: {exc}") from exc

        if isinstance(data, list) and data and data[0] == "vcard":
            self._documents = [data]
        elif isinstance(data, list):
            self._documents = data
        else:
            raise DocumentParseError("A jCard document must be a JSON array.")

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
        if self._position >= len(self._documents):
            return None
        document = self._documents[self._position]
        self._position += 1

        if not (isinstance(document, list) and len(document) == 2 and document[0] == "vcard"):
            raise DocumentParseError("Expected [\"vcard\", [properties...]].")

        vcard = VCard(V4_0)
        for entry in document[1]:
            prop = self._read_property(entry)
            if prop is not None:
                vcard.add_property(prop)
        return vcard

    def _read_property(self, entry: Any) -> VCardProperty | None:
        if not (isinstance(entry, list) and len(entry) >= 3 and isinstance(entry[1], dict)):
            self._warn(None, 14, entry)
            return None

        name, params, type_name, *values = entry
        name = str(name)
        if name.lower() == "version":
            if values and str(values[0]) != V4_0.label:
                self._warn(name, 4, values[0])
            return None

        group = params.get("group")
        parameters = VCardParameters()
        for param_name, value in params.items():
            if param_name.lower() == "group":
                continue
            if isinstance(value, list):
                parameters.put_all(param_name, [str(v) for v in value])
            else:
                parameters.put(param_name, str(value))

        data_type = None if type_name == "unknown" else VCardDataType.get(str(type_name))
        scribe = self.index.scribe_or_raw(name)
        try:
            result = scribe.parse_json(JCardValue(values), data_type, parameters)
        except SkipMeError as exc:
            self._warn(name, 0, exc)
            return None
        except CannotParseError as exc:
            self.failures.append(ParseFailure(name.upper(), json.dumps(values), str(exc)))
            self._warn(name, 1, exc)
            return None

        for message in result.warnings:
            self.warnings.append(ParseWarning(message, property_name=name.upper()))
        prop = result.property
        prop.group = group
        return prop

    def _warn(self, name: str | None, code: int, *args) -> None:
        message = parse_message(code, *args)
        logger.debug("%s", message)
        self.warnings.append(ParseWarning(message, property_name=name.upper() if name else None))


# ── Public API ─────────────────────────────────────────────────────────────────

def parse_json(text: str, index: ScribeIndex | None = None) -> list[VCard]:
    return JCardReader(text, index).read_all()


def write_json(vcards: VCard | Iterable[VCard], indent: int | None = None, **kwargs) -> str:
    return JCardWriter(**kwargs).write(vcards, indent=indent)
