from vcard_scribe.datatype import VCardDataType
from vcard_scribe.mediatypes import ImageType, KeyType
from vcard_scribe.parameters import Encoding
from vcard_scribe.version import XCARD_NAMESPACE, VCardVersion


# ── Versions ───────────────────────────────────────────────────────────────────

def test_version_lookup_and_order():
    assert VCardVersion.from_label("3.0") is VCardVersion.V3_0
    assert VCardVersion.from_label("5.0") is None
    assert VCardVersion.from_xml_namespace(XCARD_NAMESPACE) is VCardVersion.V4_0
    assert VCardVersion.V2_1 < VCardVersion.V4_0
    assert sorted([VCardVersion.V4_0, VCardVersion.V2_1, VCardVersion.V3_0])[0] is VCardVersion.V2_1


# ── Open value sets ────────────────────────────────────────────────────────────

def test_known_data_types_are_singletons():
    assert VCardDataType.get("text") is VCardDataType.TEXT
    assert VCardDataType.get("TEXT") is VCardDataType.TEXT
    assert VCardDataType.find("date-and-or-time") is VCardDataType.DATE_AND_OR_TIME


def test_unknown_data_types_compare_by_value():
    custom = VCardDataType.get("x-foo")
    assert custom == VCardDataType.get("X-FOO")
    assert custom != VCardDataType.TEXT
    assert VCardDataType.find("x-foo") is None
    assert custom not in VCardDataType.all()


def test_data_type_versions():
    assert VCardDataType.TEXT.is_supported_by(VCardVersion.V2_1)
    assert not VCardDataType.DATE_AND_OR_TIME.is_supported_by(VCardVersion.V3_0)
    assert VCardDataType.URL.is_supported_by(VCardVersion.V2_1)
    assert not VCardDataType.URL.is_supported_by(VCardVersion.V4_0)


def test_encoding_values_per_version():
    assert Encoding.find("quoted-printable") is Encoding.QUOTED_PRINTABLE
    assert Encoding.B.is_supported_by(VCardVersion.V3_0)
    assert not Encoding.BASE64.is_supported_by(VCardVersion.V3_0)


# ── Media types ────────────────────────────────────────────────────────────────

def test_media_type_lookup():
    assert ImageType.find(extension="jpg") is ImageType.JPEG
    assert ImageType.find(media_type="IMAGE/PNG") is ImageType.PNG
    assert ImageType.find(extension="aaa") is None
    adhoc = KeyType.get(media_type="application/x-custom")
    assert adhoc.media_type == "application/x-custom"
    assert adhoc.value is None
