from __future__ import annotations

import codecs
import io
import logging
import quopri
from pathlib import Path
from typing import Iterable, Iterator, TextIO

import vobject

from .datatype import VCardDataType
from .exceptions import CannotParseError, SkipMeError
from .messages import parse_message
from .model import VCard
from .parameters import Encoding, VCardParameters
from .properties import Address, Label, ProductId, RawProperty, VCardProperty
from .scribe import ParseFailure, ParseWarning, WriteContext
from .scribe_index import ScribeIndex
from .version import VCardVersion

logger = logging.getLogger(__name__)

PRODUCT_ID = "-//vcard-scribe//vcard-scribe//EN"

V2_1 = VCardVersion.V2_1
V4_0 = VCardVersion.V4_0

_DATE_TYPES = (VCardDataType.DATE, VCardDataType.DATE_TIME, VCardDataType.TIME)


# ── Reading ────────────────────────────────────────────────────────────────────

class VCardReader:
    """Reads plain-text vCards one at a time.

    Problems never stop the reader: lines that cannot be parsed are skipped
    and properties whose values cannot be read are left out. Both are
    reported in :attr:`warnings`, and dropped properties also in
    :attr:`failures`. Both lists describe the most recently read vCard.
    """

    def __init__(
        self,
        source: str | TextIO,
        index: ScribeIndex | None = None,
        default_version: VCardVersion = V2_1,
    ):
        fp = io.StringIO(source) if isinstance(source, str) else source
        self._lines = vobject.base.getLogicalLines(fp)
        self.index = index or ScribeIndex()
        self.default_version = default_version
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

        vcard: VCard | None = None
        labels: list[Label] = []
        nested = 0

        for line, number in self._lines:
            try:
                name, params, value, group = vobject.base.parseLine(line, number)
            except vobject.base.ParseError:
                self._warn(number, None, 2, line)
                continue

            upper = name.upper()
            is_vcard = value.strip().upper() == "VCARD"

            if vcard is None:
                if upper == "BEGIN" and is_vcard:
                    vcard = VCard(self.default_version)
                continue

            if nested:
                if upper == "BEGIN":
                    nested += 1
                elif upper == "END":
                    nested -= 1
                continue

            if upper == "BEGIN":
                self._warn(number, upper, 23)
                nested = 1
                continue

            if upper == "END":
                if is_vcard:
                    assign_labels(vcard, labels)
                    return vcard
                self._warn(number, None, 3, value)
                continue

            if upper == "VERSION":
                version = VCardVersion.from_label(value)
                if version is None:
                    self._warn(number, upper, 4, value)
                    version = V2_1
                vcard.version = version
                continue

            prop = self._read_property(upper, group, params, value, vcard.version, number)
            if prop is None:
                continue
            if isinstance(prop, Label):
                labels.append(prop)
            else:
                vcard.add_property(prop)

        if vcard is not None:
            logger.debug("vCard ended without END:VCARD")
            assign_labels(vcard, labels)
        return vcard

    def _read_property(
        self,
        name: str,
        group: str | None,
        params: list[list[str]],
        value: str,
        version: VCardVersion,
        number: int,
    ) -> VCardProperty | None:
        parameters = self._build_parameters(params, version)

        if parameters.encoding == Encoding.QUOTED_PRINTABLE:
            value = self._decode_quoted_printable(value, parameters, name, number)

        scribe = self.index.scribe_or_raw(name)
        data_type = parameters.value
        if data_type is not None:
            parameters.remove_all(VCardParameters.VALUE)
        else:
            data_type = scribe.default_data_type(version)

        try:
            result = scribe.parse_text(value, data_type, parameters, version)
        except SkipMeError as exc:
            self._warn(number, name, 0, exc)
            return None
        except CannotParseError as exc:
            logger.debug("line %s: dropping %s: %s", number, name, exc)
            self.failures.append(ParseFailure(name, value, str(exc), number))
            self._warn(number, name, 1, exc)
            return None

        for message in result.warnings:
            self.warnings.append(ParseWarning(message, number, name))

        prop = result.property
        prop.group = group
        return prop

    def _build_parameters(self, params: list[list[str]], version: VCardVersion) -> VCardParameters:
        parameters = VCardParameters()
        for param in params:
            param_name, values = param[0], param[1:]

            if not values:
                # 2.1 allows parameter values without names, e.g. "TEL;HOME;VOICE:"
                if VCardDataType.find(param_name) is not None:
                    parameters.put(VCardParameters.VALUE, param_name)
                elif Encoding.find(param_name) is not None:
                    parameters.put(VCardParameters.ENCODING, param_name)
                else:
                    parameters.put(VCardParameters.TYPE, param_name)
                continue

            for value in values:
                if param_name.upper() == VCardParameters.TYPE and "," in value:
                    parameters.put_all(param_name, [v for v in value.split(",") if v])
                else:
                    parameters.put(param_name, value)
        return parameters

    def _decode_quoted_printable(self, value: str, parameters: VCardParameters, name: str, number: int) -> str:
        charset = parameters.charset or "utf-8"
        try:
            codecs.lookup(charset)
        except LookupError:
            self._warn(number, name, 21, charset)
            charset = "utf-8"

        try:
            decoded = quopri.decodestring(value.encode("latin-1", errors="replace")).decode(charset, errors="replace")
        except ValueError:
            self._warn(number, name, 22, value)
            return value

        parameters.encoding = None
        parameters.charset = None
        return decoded.replace("\r\n", "\n")

    def _warn(self, number: int | None, name: str | None, code: int, *args) -> None:
        message = parse_message(code, *args)
        logger.debug("line %s: %s", number, message)
        self.warnings.append(ParseWarning(message, number, name))


# ── Writing ────────────────────────────────────────────────────────────────────

class VCardWriter:
    """Writes plain-text vCards.

    ``target_version`` defaults to each vCard's own version. With
    ``version_strict`` properties the target version does not support are
    left out. ``include_trailing_semicolons`` defaults to on for 4.0 only.
    """

    def __init__(
        self,
        target_version: VCardVersion | None = None,
        index: ScribeIndex | None = None,
        include_trailing_semicolons: bool | None = None,
        add_prodid: bool = True,
        version_strict: bool = True,
        line_length: int | None = 75,
    ):
        self.target_version = target_version
        self.index = index or ScribeIndex()
        self.include_trailing_semicolons = include_trailing_semicolons
        self.add_prodid = add_prodid
        self.version_strict = version_strict
        self.line_length = line_length

    def write(self, vcard: VCard) -> str:
        version = self.target_version or vcard.version
        trailing = self.include_trailing_semicolons
        if trailing is None:
            trailing = version is V4_0
        context = WriteContext(version, trailing)

        out = io.StringIO()
        self._write_line(out, "BEGIN:VCARD")
        self._write_line(out, f"VERSION:{version.label}")

        for prop in self._prepare(vcard, version):
            scribe = self.index.get_property_scribe_for(prop)
            if scribe is None:
                raise KeyError(f"No scribe registered for {type(prop).__name__}.")

            try:
                value = scribe.write_text(prop, context)
            except SkipMeError as exc:
                logger.debug("skipping %s: %s", scribe.property_name, exc)
                continue

            parameters = scribe.prepare_parameters(prop, version, vcard)

            data_type = scribe.data_type(prop, version)
            default = scribe.default_data_type(version)
            if data_type is None or data_type == default or (
                default == VCardDataType.DATE_AND_OR_TIME and data_type in _DATE_TYPES
            ):
                parameters.value = None
            else:
                parameters.value = data_type

            if isinstance(prop, Address) and parameters.label is not None:
                parameters.label = parameters.label.replace("\r\n", "\n").replace("\n", "\\n")

            fold = True
            if version is V2_1 and ("\n" in value or "\r" in value):
                value = _quoted_printable(value)
                parameters.encoding = Encoding.QUOTED_PRINTABLE
                parameters.charset = "UTF-8"
                fold = False
            elif version is not V2_1 and parameters.encoding == Encoding.QUOTED_PRINTABLE:
                parameters.encoding = None

            line = _content_line(prop.group, scribe.property_name, parameters, value, version)
            self._write_line(out, line, fold)

        self._write_line(out, "END:VCARD")
        return out.getvalue()

    def write_all(self, vcards: Iterable[VCard]) -> str:
        return "".join(self.write(vcard) for vcard in vcards)

    def _prepare(self, vcard: VCard, version: VCardVersion) -> list[VCardProperty]:
        props: list[VCardProperty] = []
        if self.add_prodid:
            if version is V2_1:
                props.append(RawProperty("X-PRODID", PRODUCT_ID))
            else:
                props.append(ProductId(PRODUCT_ID))

        for prop in vcard:
            if self.add_prodid and isinstance(prop, ProductId):
                continue
            if self.version_strict and not prop.is_supported_by(version):
                logger.debug("%s is not supported by %s, leaving it out", type(prop).__name__, version)
                continue
            props.append(prop)

            if version is not V4_0 and isinstance(prop, Address) and prop.label is not None:
                label = Label(prop.label)
                label.parameters.put_all(VCardParameters.TYPE, prop.types)
                props.append(label)
        return props

    def _write_line(self, out: io.StringIO, line: str, fold: bool = True) -> None:
        if fold and self.line_length:
            vobject.base.foldOneLine(out, line, self.line_length)
        else:
            out.write(line + "\r\n")


def _quoted_printable(value: str) -> str:
    """Encode a multi-line 2.1 value onto a single line, newlines as =0D=0A."""
    lines = value.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    encoded = (quopri.encodestring(line.encode("utf-8")).decode("ascii").replace("=\n", "") for line in lines)
    return "=0D=0A".join(encoded)


def _content_line(
    group: str | None,
    name: str,
    parameters: VCardParameters,
    value: str,
    version: VCardVersion,
) -> str:
    line = f"{group}.{name}" if group else name
    for param_name, values in parameters:
        if version is V2_1:
            for v in values:
                line += f";{param_name}={v}"
        else:
            quoted = [vobject.base.dquoteEscape(v.replace('"', "'")) for v in values]
            line += f";{param_name}={','.join(quoted)}"
    return f"{line}:{value}"


# ── Public API ─────────────────────────────────────────────────────────────────

def parse_text(text: str, index: ScribeIndex | None = None) -> list[VCard]:
    return VCardReader(text, index).read_all()


def write_text(vcards: VCard | Iterable[VCard], version: VCardVersion | None = None, **kwargs) -> str:
    if isinstance(vcards, VCard):
        vcards = [vcards]
    return VCardWriter(version, **kwargs).write_all(vcards)


def read_vcards_from_files(paths: list[Path], index: ScribeIndex | None = None) -> list[tuple[VCard, str]]:
    """Parse all .vcf files and return (vcard, source_label) pairs."""
    results: list[tuple[VCard, str]] = []
    for p in paths:
        label = p.stem
        reader = VCardReader(p.read_text(encoding="utf-8", errors="replace"), index)
        for vcard in reader:
            for warning in reader.warnings:
                logger.debug("%s: %s", label, warning)
            results.append((vcard, label))
    return results


def write_vcards_to_file(path: Path, vcards: Iterable[VCard], version: VCardVersion | None = None, **kwargs) -> int:
    vcards = list(vcards)
    path.write_text(write_text(vcards, version, **kwargs), encoding="utf-8", newline="")
    return len(vcards)


def assign_labels(vcard: VCard, labels: Iterable[Label]) -> None:
    """Attach LABEL properties to the ADR with the same TYPEs; keep the rest as they are."""
    addresses = vcard.get_properties(Address)
    for label in labels:
        label_types = {t.lower() for t in label.types}
        for adr in addresses:
            if adr.label is None and {t.lower() for t in adr.types} == label_types:
                adr.label = label.value
                break
        else:
            logger.debug("%s", parse_message(20))
            vcard.add_property(label)
