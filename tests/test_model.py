from vcard_scribe.model import VCard, generate_alt_id
from vcard_scribe.parameters import VCardParameters
from vcard_scribe.properties import (
    Email,
    FormattedName,
    Gender,
    Kind,
    Member,
    Note,
    RawProperty,
    StructuredName,
)
from vcard_scribe.version import VCardVersion


# ── Properties ─────────────────────────────────────────────────────────────────

def test_add_get_remove():
    vcard = VCard()
    first = Email("a@example.com")
    second = Email("a@example.com")
    vcard.add_properties([first, second, Note("hi")])
    assert len(vcard) == 3
    assert vcard.get_property(Email) is first
    assert vcard.remove_property(second)
    assert vcard.get_properties(Email) == [first]
    assert vcard.get_properties(Email)[0] is first


def test_set_property_replaces_all_of_a_kind():
    vcard = VCard(properties=[Note("one"), Note("two")])
    removed = vcard.set_property(Note("three"))
    assert [n.value for n in removed] == ["one", "two"]
    assert [n.value for n in vcard.get_properties(Note)] == ["three"]


def test_name_shortcuts():
    vcard = VCard()
    vcard.formatted_name = "Jane Doe"
    vcard.structured_name = StructuredName(family="Doe", given="Jane")
    assert vcard.formatted_name == FormattedName("Jane Doe")
    assert vcard.structured_name.given == "Jane"
    vcard.formatted_name = None
    assert vcard.formatted_name is None


def test_extended_properties():
    vcard = VCard()
    vcard.add_extended_property("X-SPOUSE", "Sam")
    vcard.add_extended_property("X-KID", "Alex")
    assert vcard.get_extended_property("x-spouse").value == "Sam"
    vcard.set_extended_property("X-SPOUSE", "Pat")
    assert [r.value for r in vcard.get_extended_properties("X-SPOUSE")] == ["Pat"]
    assert len(vcard.remove_extended_property("x-kid")) == 1
    assert vcard.get_properties(RawProperty) == [RawProperty("X-SPOUSE", "Pat")]


# ── Alternative representations ────────────────────────────────────────────────

def _note(text, alt_id=None):
    note = Note(text)
    if alt_id is not None:
        note.parameters.alt_id = alt_id
    return note


def test_alt_id_groups_come_before_singletons():
    vcard = VCard(VCardVersion.V4_0, [
        _note("solo one"),
        _note("hello", "1"),
        _note("bonjour", "1"),
        _note("solo two"),
        _note("hallo", "1"),
    ])
    groups = vcard.get_properties_alt(Note)
    assert [len(g) for g in groups] == [3, 1, 1]
    assert [n.value for n in groups[0]] == ["hello", "bonjour", "hallo"]
    assert [g[0].value for g in groups[1:]] == ["solo one", "solo two"]


def test_add_property_alt_picks_an_unused_id():
    vcard = VCard(VCardVersion.V4_0, [_note("x", "1")])
    vcard.add_property_alt(Note, [Note("a"), Note("b")])
    new = vcard.get_properties(Note)[1:]
    assert new[0].alt_id == new[1].alt_id
    assert new[0].alt_id != "1"
    assert generate_alt_id(vcard.get_properties(Note)) not in {"1", new[0].alt_id}


# ── Validation ─────────────────────────────────────────────────────────────────

def test_required_names_per_version():
    vcard = VCard()
    assert [w.code for w in vcard.validate(VCardVersion.V2_1).by_property(None)] == [0]
    assert [w.code for w in vcard.validate(VCardVersion.V3_0).by_property(None)] == [0, 1]
    assert [w.code for w in vcard.validate(VCardVersion.V4_0).by_property(None)] == [1]


def test_property_warnings_are_kept_apart():
    vcard = VCard(VCardVersion.V4_0)
    vcard.formatted_name = "Jane"
    one = Email("a@example.com", parameters=VCardParameters({"PREF": ["500"]}))
    two = Email("a@example.com")
    vcard.add_properties([one, two])
    warnings = vcard.validate()
    assert [w.code for w in warnings.get(one)] == [29]
    assert warnings.get(two) == []
    assert len(warnings) == 1
    assert "W29" in str(warnings)


def test_version_support_and_value_checks():
    vcard = VCard(VCardVersion.V3_0)
    vcard.formatted_name = "Jane"
    vcard.structured_name = StructuredName(family="Doe")
    gender = Gender("X")
    vcard.add_property(gender)
    codes = [w.code for w in vcard.validate().get(gender)]
    assert codes == [2, 12]


def test_member_requires_group_kind():
    vcard = VCard(VCardVersion.V4_0)
    vcard.formatted_name = "Team"
    member = Member("urn:uuid:1234")
    vcard.add_property(member)
    assert [w.code for w in vcard.validate().get(member)] == [15]
    vcard.add_property(Kind(Kind.GROUP))
    assert vcard.validate().get(member) == []


def test_bad_group_name():
    vcard = VCard(VCardVersion.V4_0)
    fn = FormattedName("Jane", group="item 1")
    vcard.add_property(fn)
    assert [w.code for w in vcard.validate().get(fn)] == [23]
