import xml.etree.ElementTree as ET

import pytest

from vcard_scribe.datatype import VCardDataType
from vcard_scribe.exceptions import DocumentParseError
from vcard_scribe.model import VCard
from vcard_scribe.properties import Email, Geo, Label, StructuredName
from vcard_scribe.version import XCARD_NAMESPACE, VCardVersion
from vcard_scribe.xcard import XCardReader, XCardWriter, parse_xml, write_xml

NS = {"v": XCARD_NAMESPACE}

DOCUMENT = f"""<?xml version="1.0" encoding="UTF-8"?>
<vcards xmlns="{XCARD_NAMESPACE}" xmlns:x="http://example.com/ns">
  <vcard>
    <fn><text>Jane Doe</text></fn>
    <n><surname>Doe</surname><given>Jane</given><additional/><prefix/><suffix/></n>
    <group name="work">
      <email>
        <parameters>
          <type><text>work</text></type>
          <pref><integer>1</integer></pref>
        </parameters>
        <text>jane@example.com</text>
      </email>
    </group>
    <geo><uri>nowhere</uri></geo>
    <x-shoe-size><integer>9</integer></x-shoe-size>
    <x:extra>ignored</x:extra>
  </vcard>
</vcards>
"""


def _card() -> VCard:
    vcard = VCard(VCardVersion.V3_0)
    vcard.formatted_name = "John Doe"
    vcard.structured_name = StructuredName(family="Doe", given="John")
    return vcard


def test_write_layout():
    vcard = _card()
    email = Email("john@example.com", group="item1")
    email.add_type("work")
    vcard.add_property(email)

    xml = write_xml(vcard)
    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>\n')
    assert f'xmlns="{XCARD_NAMESPACE}"' in xml

    root = ET.fromstring(xml)
    card = root.find("v:vcard", NS)
    assert card.find("v:prodid/v:text", NS) is not None
    assert card.find("v:fn/v:text", NS).text == "John Doe"
    assert card.find("v:n/v:surname", NS).text == "Doe"
    assert card.find("v:n/v:given", NS).text == "John"

    written = card.find("v:group[@name='item1']/v:email", NS)
    assert written.find("v:parameters/v:type/v:text", NS).text == "work"
    assert written.find("v:text", NS).text == "john@example.com"


def test_write_drops_3_0_only_properties():
    vcard = _card()
    vcard.add_property(Label("PO Box 1"))
    assert "PO Box 1" not in write_xml(vcard)
    assert "PO Box 1" in XCardWriter(version_strict=False).write(vcard)


def test_read():
    reader = XCardReader(DOCUMENT)
    vcard = reader.read_next()

    assert vcard.version is VCardVersion.V4_0
    assert len(vcard) == 4
    assert vcard.formatted_name.value == "Jane Doe"
    assert vcard.structured_name == StructuredName(family="Doe", given="Jane")

    email = vcard.get_property(Email)
    assert email.value == "jane@example.com"
    assert email.group == "work"
    assert email.types == ["work"]
    assert email.pref == 1

    raw = vcard.get_extended_property("x-shoe-size")
    assert raw.value == "9"
    assert raw.data_type == VCardDataType.INTEGER

    assert vcard.get_property(Geo) is None
    assert [f.property_name for f in reader.failures] == ["GEO"]
    assert "nowhere" in reader.failures[0].value
    assert len(reader.warnings) == 1
    assert reader.read_next() is None


def test_round_trip():
    first = _card()
    second = _card()
    second.add_property(Email("other@example.com"))
    vcards = parse_xml(write_xml([first, second]))
    assert len(vcards) == 2
    assert vcards[0].structured_name == first.structured_name
    assert vcards[1].get_property(Email).value == "other@example.com"


def test_single_vcard_root():
    vcards = parse_xml(f'<vcard xmlns="{XCARD_NAMESPACE}"><fn><text>Solo</text></fn></vcard>')
    assert [v.formatted_name.value for v in vcards] == ["Solo"]


def test_bad_document():
    with pytest.raises(DocumentParseError):
        XCardReader("<vcards>")
