import pytest

from vcard_scribe.datatype import VCardDataType
from vcard_scribe.parameters import Encoding, Pid, VCardParameters
from vcard_scribe.uris import GeoUri
from vcard_scribe.version import VCardVersion

V2_1 = VCardVersion.V2_1
V3_0 = VCardVersion.V3_0
V4_0 = VCardVersion.V4_0


def _codes(warnings):
    return [w.code for w in warnings]


# ── Multi-map ──────────────────────────────────────────────────────────────────

def test_names_are_case_insensitive():
    params = VCardParameters()
    params.put("type", "home")
    params.put("TYPE", "work")
    assert params.get("Type") == ["home", "work"]
    assert "type" in params
    assert params.names() == ["TYPE"]


def test_replace_and_remove():
    params = VCardParameters([("TYPE", "home"), ("TYPE", "work")])
    assert params.remove("type", "HOME")
    assert params.types == ["work"]
    assert params.replace("TYPE", "cell") == ["work"]
    assert params.types == ["cell"]
    params.replace("TYPE", None)
    assert "TYPE" not in params
    assert not params


def test_copy_is_independent():
    params = VCardParameters({"TYPE": ["home"]})
    clone = params.copy()
    clone.add_type("work")
    assert params.types == ["home"]
    assert clone == VCardParameters({"type": ["WORK", "home"]})


# ── Typed accessors ────────────────────────────────────────────────────────────

def test_typed_accessors():
    params = VCardParameters()
    params.encoding = Encoding.QUOTED_PRINTABLE
    params.value = VCardDataType.URI
    params.geo = GeoUri(12.5, -3.25)
    params.add_pid(Pid(1, 2))
    params.index = 3
    assert params.first("ENCODING") == "QUOTED-PRINTABLE"
    assert params.value is VCardDataType.URI
    assert params.geo == GeoUri(12.5, -3.25)
    assert params.first("GEO") == "geo:12.5,-3.25"
    assert params.pids == [Pid(1, 2)]
    assert params.index == 3


def test_malformed_values_read_as_none():
    params = VCardParameters({"PREF": ["high"], "GEO": ["somewhere"], "INDEX": ["x"], "PID": ["a.b"]})
    assert params.pref is None
    assert params.geo is None
    assert params.index is None
    assert params.pids == []


def test_programmer_errors_raise_immediately():
    params = VCardParameters()
    with pytest.raises(ValueError):
        params.pref = 0
    with pytest.raises(ValueError):
        params.pref = 101
    with pytest.raises(ValueError):
        params.index = 0
    params.pref = 100
    assert params.pref == 100


# ── Validation ─────────────────────────────────────────────────────────────────

def test_geo_parameter_is_version_gated():
    params = VCardParameters({"GEO": ["geo:12.5,-3.25"]})
    warnings = params.validate(V2_1)
    assert _codes(warnings) == [6]
    assert params.validate(V4_0) == []


def test_malformed_typed_values_warn_on_4_0():
    params = VCardParameters({"GEO": ["nowhere"], "INDEX": ["0"], "PID": ["x"], "PREF": ["200"]})
    assert sorted(_codes(params.validate(V4_0))) == [5, 27, 28, 29]


def test_unknown_and_unsupported_enum_values():
    assert _codes(VCardParameters({"ENCODING": ["b"]}).validate(V2_1)) == [4]
    assert _codes(VCardParameters({"VALUE": ["x-thing"]}).validate(V3_0)) == [3]


def test_invalid_characters():
    assert 25 in _codes(VCardParameters({"TYPE": ["a:b"]}).validate(V2_1))
    assert VCardParameters({"TYPE": ["a:b"]}).validate(V4_0) == []
    assert 26 in _codes(VCardParameters({"X_BAD": ["a"]}).validate(V4_0))


def test_bad_charset_on_2_1():
    assert _codes(VCardParameters({"CHARSET": ["no-such-charset"]}).validate(V2_1)) == [22]
