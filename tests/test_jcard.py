import json
from datetime import date

import pytest

from vcard_scribe.datatype import VCardDataType
from vcard_scribe.exceptions import DocumentParseError
from vcard_scribe.io import PRODUCT_ID
from vcard_scribe.jcard import JCardReader, JCardWriter, parse_json, write_json
from vcard_scribe.model import VCard
from vcard_scribe.properties import (
    Birthday,
    Categories,
    Email,
    Geo,
    Label,
    StructuredName,
)
from vcard_scribe.version import VCardVersion


def _card() -> VCard:
    vcard = VCard(VCardVersion.V3_0)
    vcard.formatted_name = "John Doe"
    vcard.structured_name = StructuredName(family="Doe", given="John")
    return vcard


def test_write_layout():
    vcard = _card()
    email = Email("john@example.com", group="item1")
    email.add_type("work")
    email.pref = 1
    vcard.add_properties([email, Birthday(date(1980, 3, 22)), Categories(["friends", "golf"])])

    data = json.loads(write_json(vcard))
    assert data[0] == "vcard"
    props = data[1]
    assert props[0] == ["version", {}, "text", "4.0"]
    assert props[1] == ["prodid", {}, "text", PRODUCT_ID]
    assert ["fn", {}, "text", "John Doe"] in props
    assert ["n", {}, "text", ["Doe", "John", "", "", ""]] in props
    assert ["email", {"group": "item1", "type": "work", "pref": "1"}, "text", "john@example.com"] in props
    assert ["bday", {}, "date", "1980-03-22"] in props
    assert ["categories", {}, "text", "friends", "golf"] in props


def test_write_drops_3_0_only_properties():
    vcard = _card()
    vcard.add_property(Label("PO Box 1"))
    assert "PO Box 1" not in write_json(vcard)
    assert "PO Box 1" in JCardWriter(version_strict=False).write(vcard)


def test_write_many_is_an_array():
    data = json.loads(write_json([_card(), _card()], indent=2))
    assert [d[0] for d in data] == ["vcard", "vcard"]


def test_read():
    document = ["vcard", [
        ["version", {}, "text", "4.0"],
        ["fn", {}, "text", "Jane Doe"],
        ["n", {}, "text", ["Doe", "Jane", ["Ann", "Marie"], "", ""]],
        ["email", {"group": "home", "type": ["home", "internet"], "pref": 1}, "text", "jane@example.com"],
        ["geo", {}, "uri", "nowhere"],
        ["x-shoe-size", {}, "integer", 9],
        "junk",
    ]]
    reader = JCardReader(json.dumps(document))
    vcard = reader.read_next()

    assert vcard.version is VCardVersion.V4_0
    assert vcard.formatted_name.value == "Jane Doe"
    assert vcard.structured_name == StructuredName(family="Doe", given="Jane", additional_names=["Ann", "Marie"])

    email = vcard.get_property(Email)
    assert email.value == "jane@example.com"
    assert email.group == "home"
    assert email.types == ["home", "internet"]
    assert email.pref == 1

    raw = vcard.get_extended_property("X-SHOE-SIZE")
    assert raw.value == "9"
    assert raw.data_type == VCardDataType.INTEGER

    assert vcard.get_property(Geo) is None
    assert [(f.property_name, f.value) for f in reader.failures] == [("GEO", '["nowhere"]')]
    assert len(reader.warnings) == 2
    assert reader.read_next() is None


def test_read_reports_other_versions():
    reader = JCardReader(json.dumps(["vcard", [["version", {}, "text", "3.0"], ["fn", {}, "text", "X"]]]))
    vcard = reader.read_next()
    assert vcard.formatted_name.value == "X"
    assert len(reader.warnings) == 1


def test_round_trip():
    first = _card()
    second = _card()
    second.formatted_name = "Someone Else"
    vcards = parse_json(write_json([first, second]))
    assert [v.formatted_name.value for v in vcards] == ["John Doe", "Someone Else"]
    assert vcards[0].structured_name == first.structured_name


@pytest.mark.parametrize("source", ["{not json", '{"vcard": []}', '"vcard"'])
def test_bad_documents(source):
    with pytest.raises(DocumentParseError):
        JCardReader(source)
