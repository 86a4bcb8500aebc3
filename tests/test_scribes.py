from datetime import date

import pytest

from vcard_scribe.datatype import VCardDataType
from vcard_scribe.exceptions import CannotParseError
from vcard_scribe.jcard_value import JCardValue
from vcard_scribe.mediatypes import ImageType
from vcard_scribe.model import VCard
from vcard_scribe.parameters import VCardParameters
from vcard_scribe.properties import (
    Birthday,
    Email,
    Geo,
    Organization,
    Photo,
    RawProperty,
    StructuredName,
    Telephone,
)
from vcard_scribe.scribe import WriteContext
from vcard_scribe.scribe_index import ScribeIndex
from vcard_scribe.scribes import BinaryPropertyScribe, TextScribe, get_file_extension
from vcard_scribe.uris import TelUri
from vcard_scribe.version import VCardVersion

V2_1 = VCardVersion.V2_1
V3_0 = VCardVersion.V3_0
V4_0 = VCardVersion.V4_0

index = ScribeIndex()


def _email(address, pref=None):
    email = Email(address)
    if pref is not None:
        email.pref = pref
    return email


# ── PREF translation ───────────────────────────────────────────────────────────

def test_pref_becomes_type_pref_on_lowest_sibling_only():
    emails = [_email("two@example.com", 2), _email("one@example.com", 1), _email("none@example.com")]
    vcard = VCard(V4_0, emails)
    scribe = index.get_property_scribe_for(emails[0])

    prepared = [scribe.prepare_parameters(e, V2_1, vcard) for e in emails]
    assert [p.has_type("pref") for p in prepared] == [False, True, False]
    assert all(p.pref is None for p in prepared)


def test_pref_kept_as_is_for_4_0():
    emails = [_email("two@example.com", 2), _email("one@example.com", 1), _email("none@example.com")]
    vcard = VCard(V4_0, emails)
    scribe = index.get_property_scribe_for(emails[0])

    prepared = [scribe.prepare_parameters(e, V4_0, vcard) for e in emails]
    assert [p.pref for p in prepared] == [2, 1, None]
    assert not any(p.has_type("pref") for p in prepared)


def test_type_pref_becomes_pref_1_for_4_0():
    email = Email("a@example.com")
    email.add_type("work")
    email.add_type("pref")
    params = index.get_property_scribe_for(email).prepare_parameters(email, V4_0, VCard(V3_0, [email]))
    assert params.pref == 1
    assert params.types == ["work"]
    assert email.types == ["work", "pref"]


# ── Binary content types ───────────────────────────────────────────────────────

def _photo(value, parameters=None, version=V4_0):
    scribe = BinaryPropertyScribe(Photo, "PHOTO")
    return scribe.parse_text(value, VCardDataType.URI, parameters or VCardParameters(), version).property


def test_content_type_from_extension():
    assert _photo("http://example.com/me.jpg").content_type is ImageType.JPEG
    assert _photo("http://example.com/me.aaa").content_type is None
    assert _photo("http://example.com/me").content_type is None


def test_mediatype_parameter_beats_extension():
    photo = _photo("http://example.com/me.jpg", VCardParameters({"MEDIATYPE": ["image/png"]}))
    assert photo.content_type is ImageType.PNG
    assert photo.parameters.media_type is None


def test_data_uri_content_type():
    photo = _photo("data:image/gif;base64,R0lGODlh")
    assert photo.content_type is ImageType.GIF
    assert photo.data == b"GIF89a"


def test_inline_base64_for_older_versions():
    params = VCardParameters({"ENCODING": ["b"], "TYPE": ["JPEG"]})
    scribe = BinaryPropertyScribe(Photo, "PHOTO")
    result = scribe.parse_text("R0lGODlh", None, params, V3_0)
    assert result.property.data == b"GIF89a"
    assert result.property.content_type is ImageType.JPEG
    assert "ENCODING" not in result.property.parameters

    written = scribe.prepare_parameters(result.property, V2_1, None)
    assert written.first("ENCODING") == "BASE64"
    assert written.type == "JPEG"
    assert scribe.write_text(result.property, WriteContext(V4_0)) == "data:image/jpeg;base64,R0lGODlh"


def test_bad_base64_cannot_be_parsed():
    scribe = BinaryPropertyScribe(Photo, "PHOTO")
    with pytest.raises(CannotParseError):
        scribe.parse_text("!!!", None, VCardParameters({"ENCODING": ["b"]}), V3_0)


def test_file_extension():
    assert get_file_extension("http://example.com/a.b/photo.PNG") == "PNG"
    assert get_file_extension("http://example.com/a.b/photo") is None
    assert get_file_extension("photo.") is None


# ── Value scribes ──────────────────────────────────────────────────────────────

def test_text_escaping_depends_on_version():
    scribe = TextScribe(Email, "EMAIL")
    email = Email("a;b")
    assert scribe.write_text(email, WriteContext(V2_1)) == "a;b"
    assert scribe.write_text(email, WriteContext(V3_0)) == "a\\;b"


def test_structured_name_round_trip():
    scribe = index.get_property_scribe("n")
    name = StructuredName(family="Doe", given="Jonathan", additional_names=["Joh;nny,", "John"],
                          prefixes=["Mr."], suffixes=["III"])
    text = scribe.write_text(name, WriteContext(V3_0))
    assert text == "Doe;Jonathan;Joh\\;nny\\,,John;Mr.;III"
    parsed = scribe.parse_text(text, None, VCardParameters(), V3_0).property
    assert parsed == name


def test_organization_commas_in_2_1():
    scribe = index.get_property_scribe("ORG")
    org = Organization(["Acme, Inc.", "Sales"])
    assert scribe.write_text(org, WriteContext(V2_1)) == "Acme, Inc.;Sales"
    assert scribe.write_text(org, WriteContext(V4_0)) == "Acme\\, Inc.;Sales"
    assert scribe.write_json(org) == JCardValue.structured(["Acme, Inc.", "Sales"])


def test_telephone_uri_only_for_4_0():
    scribe = index.get_property_scribe("TEL")
    tel = Telephone(uri=TelUri("+1-555-555-1234", extension="101"))
    assert scribe.write_text(tel, WriteContext(V4_0)) == "tel:+1-555-555-1234;ext=101"
    assert scribe.data_type(tel, V4_0) is VCardDataType.URI
    assert scribe.write_text(tel, WriteContext(V3_0)) == "+1-555-555-1234 x101"


def test_telephone_bad_uri_is_kept_as_text():
    scribe = index.get_property_scribe("TEL")
    result = scribe.parse_text("tel:abc", VCardDataType.URI, VCardParameters(), V4_0)
    assert result.property == Telephone("tel:abc")
    assert len(result.warnings) == 1


def test_geo_per_version():
    scribe = index.get_property_scribe("GEO")
    geo = Geo(46.772673, -71.282945)
    assert scribe.write_text(geo, WriteContext(V3_0)) == "46.772673;-71.282945"
    assert scribe.write_text(geo, WriteContext(V4_0)) == "geo:46.772673,-71.282945"
    assert scribe.parse_text("1.5;2.5", None, VCardParameters(), V3_0).property == Geo(1.5, 2.5)
    with pytest.raises(CannotParseError):
        scribe.parse_text("1.5,2.5", None, VCardParameters(), V3_0)
    with pytest.raises(CannotParseError):
        scribe.parse_text("1.5;2.5", None, VCardParameters(), V4_0)


def test_dates_per_version():
    scribe = index.get_property_scribe("BDAY")
    assert scribe.parse_text("1980-03-22", None, VCardParameters(), V3_0).property == Birthday(date(1980, 3, 22))
    with pytest.raises(CannotParseError):
        scribe.parse_text("--0322", None, VCardParameters(), V3_0)

    partial = scribe.parse_text("--0322", VCardDataType.DATE_AND_OR_TIME, VCardParameters(), V4_0)
    assert partial.property.partial_date.month == 3
    assert scribe.data_type(partial.property, V4_0) is VCardDataType.DATE

    text = scribe.parse_text("circa 1800", VCardDataType.DATE_AND_OR_TIME, VCardParameters(), V4_0)
    assert text.property.text == "circa 1800"
    assert len(text.warnings) == 1
    assert scribe.data_type(text.property, V4_0) is VCardDataType.TEXT


def test_date_writing():
    scribe = index.get_property_scribe("BDAY")
    bday = Birthday(date(1980, 3, 22))
    assert scribe.write_text(bday, WriteContext(V3_0)) == "1980-03-22"
    assert scribe.write_text(bday, WriteContext(V4_0)) == "19800322"


# ── Index ──────────────────────────────────────────────────────────────────────

def test_index_lookups():
    assert index.get_property_scribe("email") is index.get_property_scribe_for_class(Email)
    assert index.get_property_scribe("X-UNKNOWN") is None
    raw = index.scribe_or_raw("X-UNKNOWN")
    assert raw.parse_text("a\\,b", None, VCardParameters(), V3_0).property == RawProperty("X-UNKNOWN", "a\\,b")
    assert index.get_property_scribe_by_qname("{urn:ietf:params:xml:ns:vcard-4.0}fn").property_name == "FN"


def test_registered_scribe_overrides_standard_one_locally():
    local = ScribeIndex()
    custom = TextScribe(Email, "EMAIL")
    local.register(custom)
    assert local.get_property_scribe("EMAIL") is custom
    assert index.get_property_scribe("EMAIL") is not custom
    local.unregister(custom)
    assert local.get_property_scribe("EMAIL") is index.get_property_scribe("EMAIL")
