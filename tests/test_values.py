import pytest

from vcard_scribe.values import (
    SemiStructuredIterator,
    Splitter,
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


# ── Escaping ───────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("text", ["plain", "a,b;c", "back\\slash", "multi\nline", "", "trailing;"])
def test_escape_round_trip(text):
    assert unescape(escape(text)) == text


def test_escape_special_characters():
    assert escape("a,b;c\\d") == "a\\,b\\;c\\\\d"
    assert escape("one\r\ntwo\rthree\nfour") == "one\\ntwo\\nthree\\nfour"


def test_unescape_keeps_unknown_escapes():
    assert unescape("a\\tb") == "a\\tb"
    assert unescape("A\\Nb") == "A\nb"
    assert unescape("ends with\\") == "ends with\\"


# ── Splitter ───────────────────────────────────────────────────────────────────

def test_split_single_field_is_one_token():
    assert Splitter(";").split("abc") == ["abc"]
    assert Splitter(";", unescape=True).split("a\\,b") == ["a,b"]


def test_split_ignores_escaped_delimiters():
    assert Splitter(";").split("a\\;b;c") == ["a\\;b", "c"]


def test_split_limit_leaves_remainder_whole():
    assert Splitter(";", limit=2).split("a;b;c") == ["a", "b;c"]


def test_split_empty_tokens():
    assert Splitter(",", null_empties=True).split("a,,b") == ["a", None, "b"]
    assert Splitter(",", remove_empties=True).split("a,,b") == ["a", "b"]
    assert Splitter(",").split(" a , b ") == ["a", "b"]
    assert Splitter(",", trim=False).split(" a , b ") == [" a ", " b "]


def test_splitter_rejects_long_delimiter():
    with pytest.raises(ValueError):
        Splitter(";;")


# ── Lists and structured values ────────────────────────────────────────────────

def test_list_read_write():
    assert parse_list("") == []
    assert parse_list("a\\,b,c") == ["a,b", "c"]
    assert write_list(["a,b", None, "c"]) == "a\\,b,c"


def test_structured_round_trip_keeps_escaped_delimiters():
    values = ["Doe", "Jonathan", ["Joh;nny,", "John"], "Mr.", "III"]
    text = write_structured(values)
    assert text == "Doe;Jonathan;Joh\\;nny\\,,John;Mr.;III"
    assert parse_structured(text) == [["Doe"], ["Jonathan"], ["Joh;nny,", "John"], ["Mr."], ["III"]]


def test_trailing_semicolons_policy():
    assert write_structured(["a", None, []]) == "a"
    assert write_structured(["a", None, []], include_trailing_semicolons=True) == "a;;"
    assert write_semi_structured(["a", None], include_trailing_semicolons=True) == "a;"


def test_semi_structured():
    assert parse_semi_structured("a;;b") == ["a", None, "b"]
    assert parse_semi_structured("a;b;c", limit=2) == ["a", "b;c"]
    assert write_semi_structured(["Acme, Inc.", "Sales"]) == "Acme\\, Inc.;Sales"
    assert write_semi_structured(["Acme, Inc.", "Sales"], escape_commas=False) == "Acme, Inc.;Sales"


def test_iterators_run_past_the_end():
    it = StructuredIterator.of("Doe")
    assert it.next_value() == "Doe"
    assert it.next_value() is None
    assert it.next_component() == []

    semi = SemiStructuredIterator("M;it's complicated", 2)
    assert semi.next() == "M"
    assert semi.next() == "it's complicated"
    assert semi.next() is None
