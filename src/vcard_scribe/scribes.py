from __future__ import annotations

import base64
import binascii
import re
from datetime import date, datetime, timezone
from urllib.parse import unquote, urlparse

from .datatype import VCardDataType
from .dates import DateWriter, PartialDate, UtcOffset, parse_date
from .exceptions import CannotParseError, SkipMeError
from .jcard_value import JCardValue
from .mediatypes import MediaTypeParameter
from .parameters import Encoding, VCardParameters
from .properties import (
    Address,
    Anniversary,
    BinaryProperty,
    Birthday,
    Categories,
    Classification,
    DateOrTimeProperty,
    Deathdate,
    Email,
    FormattedName,
    Gender,
    Geo,
    Impp,
    Key,
    Kind,
    Label,
    Language,
    Logo,
    Mailer,
    Member,
    Nickname,
    Note,
    Organization,
    Photo,
    ProductId,
    RawProperty,
    Revision,
    Role,
    SortString,
    Sound,
    Source,
    StructuredName,
    Telephone,
    TextListProperty,
    TextProperty,
    Timezone,
    Title,
    Uid,
    Url,
)
from .scribe import (
    ParseContext,
    VCardPropertyScribe,
    WriteContext,
    handle_pref_param,
    jcard_value_to_string,
    missing_xml_elements,
    text_escape,
)
from .uris import DataUri, GeoUri, TelUri, format_coordinate
from .values import (
    SemiStructuredIterator,
    StructuredIterator,
    escape,
    parse_list,
    parse_semi_structured,
    parse_structured,
    unescape,
    write_list,
    write_semi_structured,
    write_structured,
)
from .version import VCardVersion

V2_1 = VCardVersion.V2_1
V3_0 = VCardVersion.V3_0
V4_0 = VCardVersion.V4_0

TEXT = VCardDataType.TEXT
URI = VCardDataType.URI


# ── Text ───────────────────────────────────────────────────────────────────────

class TextScribe(VCardPropertyScribe[TextProperty]):
    """Single text values: FN, NOTE, TITLE and friends."""

    def __init__(self, property_class, property_name, data_type: VCardDataType = TEXT):
        super().__init__(property_class, property_name)
        self._type = data_type

    def _default_data_type(self, version):
        return self._type

    def _write_text(self, prop, context):
        return text_escape(prop.value or "", context)

    def _parse_text(self, value, data_type, parameters, context):
        return self.property_class(unescape(value))

    def _write_xml(self, prop, element):
        element.append(self.data_type(prop, V4_0), prop.value or "")

    def _parse_xml(self, element, parameters, context):
        data_type, value = element.first_value()
        return self.property_class(value)

    def _write_json(self, prop):
        return JCardValue.single(prop.value or "")

    def _parse_json(self, value, data_type, parameters, context):
        return self.property_class(value.as_single())

    def _parse_html(self, element, parameters, context):
        return self.property_class(element.value())


class UriScribe(TextScribe):
    """URI values. In hCard the link target is the value."""

    def __init__(self, property_class, property_name):
        super().__init__(property_class, property_name, URI)

    def _parse_html(self, element, parameters, context):
        if element.tag_name in ("a", "link", "area"):
            href = element.abs_url("href")
            if href:
                return self.property_class(href)
        return self.property_class(element.value())

    def _write_html(self, prop, element):
        element.tag.name = "a"
        element.tag["href"] = prop.value or ""
        element.append(prop.value or "")


class PreferableUriScribe(UriScribe):
    def _prepare_parameters(self, prop, copy, version, vcard):
        handle_pref_param(prop, copy, version, vcard)


class EmailScribe(TextScribe):
    def __init__(self):
        super().__init__(Email, "EMAIL")

    def _prepare_parameters(self, prop, copy, version, vcard):
        handle_pref_param(prop, copy, version, vcard)

    def _parse_html(self, element, parameters, context):
        value = element.value()
        href = element.attr("href") if element.tag_name == "a" else ""
        if href.lower().startswith("mailto:"):
            value = unquote(href[len("mailto:"):].split("?", 1)[0])
        for type_ in element.types():
            parameters.add_type(type_)
        return Email(value)

    def _write_html(self, prop, element):
        element.tag.name = "a"
        element.tag["href"] = f"mailto:{prop.value or ''}"
        element.append(prop.value or "")


class LanguageScribe(TextScribe):
    def __init__(self):
        super().__init__(Language, "LANG", VCardDataType.LANGUAGE_TAG)

    def _prepare_parameters(self, prop, copy, version, vcard):
        handle_pref_param(prop, copy, version, vcard)


class KindScribe(TextScribe):
    def __init__(self):
        super().__init__(Kind, "KIND")

    def _parse_text(self, value, data_type, parameters, context):
        return Kind(unescape(value).lower())


class LabelScribe(TextScribe):
    def __init__(self):
        super().__init__(Label, "LABEL")

    def _parse_html(self, element, parameters, context):
        for type_ in element.types():
            parameters.add_type(type_)
        return Label(element.value())


# ── Lists ──────────────────────────────────────────────────────────────────────

class TextListScribe(VCardPropertyScribe[TextListProperty]):
    def _write_text(self, prop, context):
        return write_list(prop.values)

    def _parse_text(self, value, data_type, parameters, context):
        return self.property_class(parse_list(value))

    def _write_xml(self, prop, element):
        element.append(TEXT, prop.values)

    def _parse_xml(self, element, parameters, context):
        values = element.all(TEXT)
        if not values:
            raise missing_xml_elements(TEXT)
        return self.property_class([v for v in values if v])

    def _write_json(self, prop):
        if not prop.values:
            return JCardValue.single("")
        return JCardValue.multi(prop.values)

    def _parse_json(self, value, data_type, parameters, context):
        return self.property_class([v for v in value.as_multi() if v])

    def _prepare_parameters(self, prop, copy, version, vcard):
        handle_pref_param(prop, copy, version, vcard)


class CategoriesScribe(TextListScribe):
    def __init__(self):
        super().__init__(Categories, "CATEGORIES")

    def _parse_html(self, element, parameters, context):
        # rel="tag" links name the category in the last path segment
        if element.tag_name == "a" and "tag" in element.attr("rel").split():
            path = urlparse(element.attr("href")).path.rstrip("/")
            if path:
                return Categories([unquote(path.rsplit("/", 1)[-1])])
        return Categories([element.value()])


class NicknameScribe(TextListScribe):
    def __init__(self):
        super().__init__(Nickname, "NICKNAME")

    def _parse_html(self, element, parameters, context):
        return Nickname([element.value()])


# ── Structured values ──────────────────────────────────────────────────────────

class StructuredNameScribe(VCardPropertyScribe[StructuredName]):
    _XML = ("surname", "given", "additional", "prefix", "suffix")
    _HTML = ("family-name", "given-name", "additional-name", "honorific-prefix", "honorific-suffix")

    def __init__(self):
        super().__init__(StructuredName, "N")

    def _components(self, prop):
        return [prop.family, prop.given, prop.additional_names, prop.prefixes, prop.suffixes]

    def _write_text(self, prop, context):
        return write_structured(self._components(prop), context.include_trailing_semicolons)

    def _parse_text(self, value, data_type, parameters, context):
        it = StructuredIterator.of(value)
        return StructuredName(
            family=it.next_value(),
            given=it.next_value(),
            additional_names=it.next_component(),
            prefixes=it.next_component(),
            suffixes=it.next_component(),
        )

    def _write_xml(self, prop, element):
        for name, value in zip(self._XML, self._components(prop)):
            element.append(name, value)

    def _parse_xml(self, element, parameters, context):
        return StructuredName(
            family=element.first("surname") or None,
            given=element.first("given") or None,
            additional_names=[v for v in element.all("additional") if v],
            prefixes=[v for v in element.all("prefix") if v],
            suffixes=[v for v in element.all("suffix") if v],
        )

    def _write_json(self, prop):
        return JCardValue.structured(self._components(prop))

    def _parse_json(self, value, data_type, parameters, context):
        it = StructuredIterator(value.as_structured())
        return StructuredName(
            family=it.next_value(),
            given=it.next_value(),
            additional_names=it.next_component(),
            prefixes=it.next_component(),
            suffixes=it.next_component(),
        )

    def _parse_html(self, element, parameters, context):
        return StructuredName(
            family=element.first_value("family-name"),
            given=element.first_value("given-name"),
            additional_names=element.all_values("additional-name"),
            prefixes=element.all_values("honorific-prefix"),
            suffixes=element.all_values("honorific-suffix"),
        )

    def _write_html(self, prop, element):
        for css, value in zip(self._HTML, self._components(prop)):
            values = value if isinstance(value, list) else [value]
            for text in values:
                if text:
                    element.append_child("span", css).append(text)
                    element.append(" ")


class AddressScribe(VCardPropertyScribe[Address]):
    _XML = ("pobox", "ext", "street", "locality", "region", "code", "country")
    _HTML = (
        "post-office-box",
        "extended-address",
        "street-address",
        "locality",
        "region",
        "postal-code",
        "country-name",
    )

    def __init__(self):
        super().__init__(Address, "ADR")

    def _prepare_parameters(self, prop, copy, version, vcard):
        handle_pref_param(prop, copy, version, vcard)
        # 2.1 and 3.0 carry labels as separate LABEL properties
        if version is not V4_0:
            copy.label = None

    def _write_text(self, prop, context):
        return write_structured(prop.components(), context.include_trailing_semicolons)

    def _from_components(self, components):
        it = StructuredIterator(components)
        return Address(
            po_boxes=it.next_component(),
            extended_addresses=it.next_component(),
            street_addresses=it.next_component(),
            localities=it.next_component(),
            regions=it.next_component(),
            postal_codes=it.next_component(),
            countries=it.next_component(),
        )

    def _parse_text(self, value, data_type, parameters, context):
        label = parameters.label
        if label is not None and "\\n" in label.lower():
            parameters.label = re.sub(r"\\[nN]", "\n", label)
        return self._from_components(parse_structured(value))

    def _write_xml(self, prop, element):
        for name, values in zip(self._XML, prop.components()):
            element.append(name, values)

    def _parse_xml(self, element, parameters, context):
        return self._from_components([[v for v in element.all(name) if v] for name in self._XML])

    def _write_json(self, prop):
        return JCardValue.structured(prop.components())

    def _parse_json(self, value, data_type, parameters, context):
        return self._from_components(value.as_structured())

    def _parse_html(self, element, parameters, context):
        for type_ in element.types():
            parameters.add_type(type_)
        return self._from_components([element.all_values(css) for css in self._HTML])

    def _write_html(self, prop, element):
        for css, values in zip(self._HTML, prop.components()):
            for text in values:
                element.append_child("div", css).append(text)


class OrganizationScribe(VCardPropertyScribe[Organization]):
    def __init__(self):
        super().__init__(Organization, "ORG")

    def _prepare_parameters(self, prop, copy, version, vcard):
        handle_pref_param(prop, copy, version, vcard)

    def _write_text(self, prop, context):
        return write_semi_structured(
            prop.values,
            escape_commas=context.version is not V2_1,
            include_trailing_semicolons=context.include_trailing_semicolons,
        )

    def _parse_text(self, value, data_type, parameters, context):
        return Organization(parse_semi_structured(value))

    def _write_xml(self, prop, element):
        element.append(TEXT, [v or "" for v in prop.values])

    def _parse_xml(self, element, parameters, context):
        values = element.all(TEXT)
        if not values:
            raise missing_xml_elements(TEXT)
        return Organization([v or None for v in values])

    def _write_json(self, prop):
        if not prop.values:
            return JCardValue.single("")
        if len(prop.values) == 1:
            return JCardValue.single(prop.values[0] or "")
        return JCardValue.structured(prop.values)

    def _parse_json(self, value, data_type, parameters, context):
        return Organization([c[0] if c else None for c in value.as_structured()])

    def _parse_html(self, element, parameters, context):
        name = element.first_value("organization-name")
        if name is None:
            return Organization([element.value()])
        return Organization([name] + element.all_values("organization-unit"))

    def _write_html(self, prop, element):
        names = [v for v in prop.values if v]
        if not names:
            raise SkipMeError("Organization has no name.")
        element.append_child("span", "organization-name").append(names[0])
        for unit in names[1:]:
            element.append(" ")
            element.append_child("span", "organization-unit").append(unit)


class GenderScribe(VCardPropertyScribe[Gender]):
    def __init__(self):
        super().__init__(Gender, "GENDER")

    def _write_text(self, prop, context):
        values = [prop.sex, prop.text] if prop.text is not None else [prop.sex]
        return write_semi_structured(values, include_trailing_semicolons=context.include_trailing_semicolons)

    def _parse_text(self, value, data_type, parameters, context):
        it = SemiStructuredIterator(value, 2)
        sex = it.next()
        return Gender(sex.upper() if sex else None, it.next())

    def _write_xml(self, prop, element):
        element.append("sex", prop.sex or "")
        if prop.text is not None:
            element.append("identity", prop.text)

    def _parse_xml(self, element, parameters, context):
        sex = element.first("sex")
        if sex is None:
            raise missing_xml_elements("sex")
        return Gender(sex.upper() or None, element.first("identity"))

    def _write_json(self, prop):
        if prop.text is None:
            return JCardValue.single(prop.sex or "")
        return JCardValue.structured([prop.sex, prop.text])

    def _parse_json(self, value, data_type, parameters, context):
        it = StructuredIterator(value.as_structured())
        sex = it.next_value()
        return Gender(sex.upper() if sex else None, it.next_value())


# ── Telephone ──────────────────────────────────────────────────────────────────

class TelephoneScribe(VCardPropertyScribe[Telephone]):
    def __init__(self):
        super().__init__(Telephone, "TEL")

    def _data_type(self, prop, version):
        if version is V4_0 and prop.text is None and prop.uri is not None:
            return URI
        return TEXT

    def _prepare_parameters(self, prop, copy, version, vcard):
        handle_pref_param(prop, copy, version, vcard)

    def _write_text(self, prop, context):
        if prop.text is not None:
            return text_escape(prop.text, context)
        if prop.uri is None:
            return ""
        if context.version is V4_0:
            return str(prop.uri)
        number = prop.uri.number
        if prop.uri.extension is not None:
            number += f" x{prop.uri.extension}"
        return text_escape(number, context)

    def _parse_text(self, value, data_type, parameters, context):
        value = unescape(value)
        if data_type == URI or (data_type is None and value.lower().startswith("tel:")):
            try:
                return Telephone(uri=TelUri.parse(value))
            except ValueError:
                context.warn(18, value)
        return Telephone(value)

    def _parse_xml(self, element, parameters, context):
        text = element.first(TEXT)
        if text is not None:
            return Telephone(text)
        uri = element.first(URI)
        if uri is None:
            raise missing_xml_elements(TEXT, URI)
        try:
            return Telephone(uri=TelUri.parse(uri))
        except ValueError:
            context.warn(18, uri)
            return Telephone(uri)

    def _parse_json(self, value, data_type, parameters, context):
        return self._parse_text(escape(value.as_single()), data_type, parameters, context)

    def _parse_html(self, element, parameters, context):
        for type_ in element.types():
            parameters.add_type(type_)
        href = element.attr("href") if element.tag_name == "a" else ""
        if href.lower().startswith("tel:"):
            try:
                return Telephone(uri=TelUri.parse(href))
            except ValueError:
                context.warn(18, href)
                return Telephone(href[4:])
        return Telephone(element.value())

    def _write_html(self, prop, element):
        if prop.uri is not None:
            element.tag.name = "a"
            element.tag["href"] = str(prop.uri)
            element.append(prop.text or prop.uri.number)
        else:
            element.append(prop.text or "")


# ── Geo and time zones ─────────────────────────────────────────────────────────

class GeoScribe(VCardPropertyScribe[Geo]):
    def __init__(self):
        super().__init__(Geo, "GEO")

    def _default_data_type(self, version):
        return URI if version is V4_0 else None

    def _prepare_parameters(self, prop, copy, version, vcard):
        handle_pref_param(prop, copy, version, vcard)

    def _write_text(self, prop, context):
        if prop.latitude is None or prop.longitude is None:
            return ""
        if context.version is V4_0:
            return str(prop.to_uri())
        return f"{format_coordinate(prop.latitude)};{format_coordinate(prop.longitude)}"

    def _parse_text(self, value, data_type, parameters, context):
        value = unescape(value)
        if context.version is V4_0:
            try:
                return Geo.from_uri(GeoUri.parse(value))
            except ValueError:
                raise CannotParseError(12, value) from None

        lat_text, sep, lon_text = value.partition(";")
        if not sep:
            raise CannotParseError(11)
        try:
            latitude = float(lat_text)
        except ValueError:
            raise CannotParseError(8, lat_text) from None
        try:
            longitude = float(lon_text)
        except ValueError:
            raise CannotParseError(10, lon_text) from None
        return Geo(latitude, longitude)

    def _parse_xml(self, element, parameters, context):
        value = element.first(URI)
        if value is None:
            raise missing_xml_elements(URI)
        return self._parse_text(value, URI, parameters, context)

    def _parse_json(self, value, data_type, parameters, context):
        return self._parse_text(value.as_single(), data_type, parameters, context)

    def _parse_html(self, element, parameters, context):
        lat_text = element.first_value("latitude")
        lon_text = element.first_value("longitude")
        if lat_text is None and lon_text is None:
            return self._parse_text(element.value(), None, parameters, context)
        if lat_text is None:
            raise CannotParseError(7)
        if lon_text is None:
            raise CannotParseError(9)
        return self._parse_text(f"{lat_text};{lon_text}", None, parameters, context)

    def _write_html(self, prop, element):
        element.append_child("abbr", "latitude", title=str(prop.latitude)).append(str(prop.latitude))
        element.append(" ")
        element.append_child("abbr", "longitude", title=str(prop.longitude)).append(str(prop.longitude))


class TimezoneScribe(VCardPropertyScribe[Timezone]):
    def __init__(self):
        super().__init__(Timezone, "TZ")

    def _default_data_type(self, version):
        return TEXT if version is V4_0 else VCardDataType.UTC_OFFSET

    def _data_type(self, prop, version):
        if version is V4_0:
            return TEXT if prop.text is not None or prop.offset is None else VCardDataType.UTC_OFFSET
        return VCardDataType.UTC_OFFSET if prop.offset is not None else TEXT

    def _prepare_parameters(self, prop, copy, version, vcard):
        handle_pref_param(prop, copy, version, vcard)

    def _write_text(self, prop, context):
        if context.version is V4_0:
            if prop.text is not None:
                return escape(prop.text)
            return prop.offset.to_string(False) if prop.offset is not None else ""
        if prop.offset is not None:
            return prop.offset.to_string(True)
        return text_escape(prop.text or "", context)

    def _parse_text(self, value, data_type, parameters, context):
        value = unescape(value)
        if data_type == TEXT:
            return Timezone(text=value)
        try:
            return Timezone(offset=UtcOffset.parse(value))
        except ValueError:
            context.warn(13, value)
            return Timezone(text=value)

    def _write_json(self, prop):
        if prop.text is None and prop.offset is not None:
            return JCardValue.single(prop.offset.to_string(True))
        return JCardValue.single(prop.text or "")

    def _parse_json(self, value, data_type, parameters, context):
        return self._parse_text(escape(value.as_single()), data_type, parameters, context)

    def _write_xml(self, prop, element):
        if prop.text is None and prop.offset is not None:
            element.append(VCardDataType.UTC_OFFSET, prop.offset.to_string(False))
        else:
            element.append(TEXT, prop.text or "")


# ── Dates ──────────────────────────────────────────────────────────────────────

class DateOrTimePropertyScribe(VCardPropertyScribe[DateOrTimeProperty]):
    """BDAY, ANNIVERSARY and DEATHDATE.

    Versions 2.1 and 3.0 only know full dates. Version 4.0 also allows
    partial dates ("--0412") and free text ("circa 1800").
    """

    def _default_data_type(self, version):
        return VCardDataType.DATE_AND_OR_TIME if version is V4_0 else None

    def _data_type(self, prop, version):
        if prop.text is not None and prop.date is None:
            return TEXT
        if version is not V4_0:
            return None
        if prop.date is not None:
            return VCardDataType.DATE_TIME if isinstance(prop.date, datetime) else VCardDataType.DATE
        if prop.partial_date is not None:
            return _partial_date_type(prop.partial_date)
        return self.default_data_type(version)

    def _write_text(self, prop, context):
        if prop.date is not None:
            return _write_date(prop.date, extended=context.version is V3_0)
        if prop.partial_date is not None:
            return prop.partial_date.to_iso8601(context.version is V3_0)
        if prop.text is not None:
            return text_escape(prop.text, context)
        return ""

    def _parse_text(self, value, data_type, parameters, context):
        value = unescape(value)
        if context.version is V4_0 and data_type == TEXT:
            return self.property_class(text=value)
        return self._parse_date(value, context)

    def _parse_date(self, value, context):
        try:
            return self.property_class(parse_date(value))
        except ValueError:
            if context.version is not V4_0:
                raise CannotParseError(5, value) from None

        try:
            return self.property_class(partial_date=PartialDate.parse(value))
        except ValueError:
            context.warn(6, value)
            return self.property_class(text=value)

    def _write_xml(self, prop, element):
        if prop.date is not None:
            data_type = VCardDataType.DATE_TIME if isinstance(prop.date, datetime) else VCardDataType.DATE
            element.append(data_type, _write_date(prop.date, extended=False))
        elif prop.partial_date is not None:
            element.append(_partial_date_type(prop.partial_date), prop.partial_date.to_iso8601(False))
        elif prop.text is not None:
            element.append(TEXT, prop.text)
        else:
            element.append(VCardDataType.DATE_AND_OR_TIME, "")

    def _parse_xml(self, element, parameters, context):
        value = element.first(
            VCardDataType.DATE,
            VCardDataType.DATE_TIME,
            VCardDataType.DATE_AND_OR_TIME,
            VCardDataType.TIME,
        )
        if value is not None:
            return self._parse_date(value, context)
        text = element.first(TEXT)
        if text is not None:
            return self.property_class(text=text)
        raise missing_xml_elements(VCardDataType.DATE, VCardDataType.DATE_TIME, TEXT)

    def _write_json(self, prop):
        if prop.date is not None:
            return JCardValue.single(_write_date(prop.date, extended=True))
        if prop.partial_date is not None:
            return JCardValue.single(prop.partial_date.to_iso8601(True))
        return JCardValue.single(prop.text or "")

    def _parse_json(self, value, data_type, parameters, context):
        text = value.as_single()
        if data_type == TEXT:
            return self.property_class(text=text)
        return self._parse_date(text, context)

    def _parse_html(self, element, parameters, context):
        value = element.attr("datetime") if element.tag_name == "time" else ""
        value = value or element.value()
        try:
            return self.property_class(parse_date(value))
        except ValueError:
            raise CannotParseError(5, value) from None

    def _write_html(self, prop, element):
        if prop.date is None:
            raise SkipMeError("Only full dates are written to hCard.")
        element.tag.name = "time"
        element.tag["datetime"] = _write_date(prop.date, extended=True)
        element.append(_write_date(prop.date, extended=True))


def _write_date(value: date | datetime, extended: bool) -> str:
    return DateWriter(value).time(isinstance(value, datetime)).extended(extended).utc(False).write()


def _partial_date_type(partial: PartialDate) -> VCardDataType:
    if partial.has_date_component() and partial.has_time_component():
        return VCardDataType.DATE_TIME
    if partial.has_time_component():
        return VCardDataType.TIME
    return VCardDataType.DATE


class RevisionScribe(VCardPropertyScribe[Revision]):
    def __init__(self):
        super().__init__(Revision, "REV")

    def _default_data_type(self, version):
        return VCardDataType.TIMESTAMP

    def _write_text(self, prop, context):
        if prop.timestamp is None:
            return ""
        return DateWriter(prop.timestamp).extended(context.version is V3_0).write()

    def _parse_text(self, value, data_type, parameters, context):
        value = unescape(value)
        try:
            parsed = parse_date(value)
        except ValueError:
            raise CannotParseError(17, value) from None
        if not isinstance(parsed, datetime):
            parsed = datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc)
        return Revision(parsed)

    def _write_json(self, prop):
        if prop.timestamp is None:
            return JCardValue.single("")
        return JCardValue.single(DateWriter(prop.timestamp).extended(True).write())

    def _parse_json(self, value, data_type, parameters, context):
        return self._parse_text(value.as_single(), data_type, parameters, context)


# ── Binary ─────────────────────────────────────────────────────────────────────

def get_file_extension(url: str) -> str | None:
    """The extension of the last path segment, if there is one."""
    dot = url.rfind(".")
    if dot < 0 or dot == len(url) - 1 or "/" in url[dot:]:
        return None
    return url[dot + 1:]


class BinaryPropertyScribe(VCardPropertyScribe[BinaryProperty]):
    """PHOTO, LOGO, SOUND and KEY: inline data or a link to it.

    The content type comes from, in order: a MEDIATYPE (4.0) or TYPE
    (2.1/3.0) parameter, the type inside a data URI, the URL's file
    extension.
    """

    def _default_data_type(self, version):
        return URI if version is V4_0 else None

    def _data_type(self, prop, version):
        if prop.url is not None:
            return VCardDataType.URL if version is V2_1 else URI
        if prop.data is not None:
            return URI if version is V4_0 else None
        return self.default_data_type(version)

    def _prepare_parameters(self, prop, copy, version, vcard):
        content_type = prop.content_type

        if prop.url is not None:
            copy.encoding = None
            if version is V4_0:
                if content_type is not None and content_type.media_type:
                    copy.media_type = content_type.media_type
            else:
                copy.media_type = None
                if content_type is not None and content_type.value:
                    copy.type = content_type.value
        elif prop.data is not None:
            copy.media_type = None
            if version is V4_0:
                copy.encoding = None
            else:
                copy.encoding = Encoding.BASE64 if version is V2_1 else Encoding.B
                if content_type is not None and content_type.value:
                    copy.type = content_type.value

        handle_pref_param(prop, copy, version, vcard)

    def _write_text(self, prop, context):
        if prop.url is not None:
            return prop.url
        if prop.data is None:
            return ""
        if context.version is V4_0:
            media_type = None
            if prop.content_type is not None:
                media_type = prop.content_type.media_type
            return str(DataUri(media_type or "application/octet-stream", prop.data))
        return base64.b64encode(prop.data).decode("ascii")

    def _parse_text(self, value, data_type, parameters, context):
        value = unescape(value).strip()
        media_types = self.property_class.media_types
        content_type = self._content_type_from_parameters(parameters, context.version)

        if context.version is V4_0:
            try:
                uri = DataUri.parse(value)
            except ValueError:
                return self._from_url(value, content_type)
            if content_type is None:
                content_type = media_types.get(media_type=uri.content_type)
            data = uri.data if uri.data is not None else (uri.text or "").encode("utf-8")
            return self.property_class(data=data, content_type=content_type)

        encoding = parameters.encoding
        if data_type in (VCardDataType.URL, URI) or (
            encoding not in (Encoding.BASE64, Encoding.B) and value.lower().startswith(("http", "ftp", "file:"))
        ):
            return self._from_url(value, content_type)

        try:
            data = base64.b64decode(re.sub(r"\s+", "", value), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise CannotParseError(15, exc) from None
        parameters.encoding = None
        return self.property_class(data=data, content_type=content_type)

    def _content_type_from_parameters(self, parameters: VCardParameters, version) -> MediaTypeParameter | None:
        media_types = self.property_class.media_types
        if version is V4_0:
            media_type = parameters.media_type
            if media_type is None:
                return None
            parameters.media_type = None
            return media_types.get(media_type=media_type)

        for type_ in parameters.types:
            found = media_types.find(type_value=type_)
            if found is None and "/" in type_:
                found = media_types.get(media_type=type_)
            if found is not None:
                parameters.remove_type(type_)
                return found

        if parameters.encoding in (Encoding.BASE64, Encoding.B) and parameters.types:
            type_ = parameters.types[0]
            parameters.remove_type(type_)
            return media_types.get(type_value=type_)
        return None

    def _from_url(self, url: str, content_type: MediaTypeParameter | None) -> BinaryProperty:
        if content_type is None:
            extension = get_file_extension(url)
            if extension is not None:
                content_type = self.property_class.media_types.find(extension=extension)
        return self.property_class(url=url, content_type=content_type)

    def _parse_html(self, element, parameters, context):
        attribute = {"img": "src", "object": "data", "a": "href"}.get(element.tag_name)
        if attribute is None:
            raise SkipMeError(f"Cannot read binary data from <{element.tag_name}>.")
        url = element.abs_url(attribute)
        if not url:
            raise CannotParseError(1, f"<{element.tag_name}> has no {attribute} attribute")

        media_type = element.attr("type")
        if media_type:
            parameters.media_type = media_type
        return self._parse_text(escape(url), None, parameters, ParseContext(V4_0, context.warnings))

    def _write_html(self, prop, element):
        element.tag.name = "img"
        element.tag["src"] = self.write_text(prop, WriteContext(V4_0))


# ── Extended properties ────────────────────────────────────────────────────────

class RawPropertyScribe(VCardPropertyScribe[RawProperty]):
    """Carries a property nobody registered a scribe for, value untouched."""

    def __init__(self, property_name: str):
        super().__init__(RawProperty, property_name)

    def _default_data_type(self, version):
        return None

    def _data_type(self, prop, version):
        return prop.data_type

    def _write_text(self, prop, context):
        return prop.value or ""

    def _parse_text(self, value, data_type, parameters, context):
        return RawProperty(self.property_name, value, data_type)

    def _parse_xml(self, element, parameters, context):
        data_type, value = element.first_value()
        return RawProperty(self.property_name, value, data_type)

    def _parse_html(self, element, parameters, context):
        return RawProperty(self.property_name, element.value())

    def _parse_json(self, value, data_type, parameters, context):
        if len(value.values) == 1 and not isinstance(value.values[0], list):
            return RawProperty(self.property_name, value.as_single(), data_type)
        return RawProperty(self.property_name, jcard_value_to_string(value), data_type)

    def _write_html(self, prop, element):
        element.append(unescape(prop.value or ""))


# ── Standard set ───────────────────────────────────────────────────────────────

def standard_scribes() -> list[VCardPropertyScribe]:
    return [
        TextScribe(FormattedName, "FN"),
        TextScribe(Note, "NOTE"),
        TextScribe(Title, "TITLE"),
        TextScribe(Role, "ROLE"),
        TextScribe(ProductId, "PRODID"),
        TextScribe(SortString, "SORT-STRING"),
        TextScribe(Mailer, "MAILER"),
        TextScribe(Classification, "CLASS"),
        EmailScribe(),
        LanguageScribe(),
        KindScribe(),
        LabelScribe(),
        PreferableUriScribe(Url, "URL"),
        PreferableUriScribe(Source, "SOURCE"),
        PreferableUriScribe(Impp, "IMPP"),
        PreferableUriScribe(Member, "MEMBER"),
        UriScribe(Uid, "UID"),
        CategoriesScribe(),
        NicknameScribe(),
        StructuredNameScribe(),
        AddressScribe(),
        OrganizationScribe(),
        GenderScribe(),
        TelephoneScribe(),
        GeoScribe(),
        TimezoneScribe(),
        DateOrTimePropertyScribe(Birthday, "BDAY"),
        DateOrTimePropertyScribe(Anniversary, "ANNIVERSARY"),
        DateOrTimePropertyScribe(Deathdate, "DEATHDATE"),
        RevisionScribe(),
        BinaryPropertyScribe(Photo, "PHOTO"),
        BinaryPropertyScribe(Logo, "LOGO"),
        BinaryPropertyScribe(Sound, "SOUND"),
        BinaryPropertyScribe(Key, "KEY"),
    ]
