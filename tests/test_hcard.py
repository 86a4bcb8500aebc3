from datetime import date

from bs4 import BeautifulSoup

from vcard_scribe.hcard import HCardParser, parse_html, write_html
from vcard_scribe.mediatypes import ImageType
from vcard_scribe.model import VCard
from vcard_scribe.properties import (
    Address,
    Birthday,
    Categories,
    Email,
    Gender,
    Label,
    Nickname,
    Photo,
    StructuredName,
    Telephone,
    Url,
)
from vcard_scribe.version import VCardVersion

PAGE = """
<html>
<head><base href="http://example.com/people/"></head>
<body>
<div class="vcard">
  <span class="fn">Jane Doe</span>
  <div class="n"><span class="given-name">Jane</span> <span class="family-name">Doe</span></div>
  <span class="nickname">JD</span>
  <span class="nickname">Janie</span>
  <a class="url" href="mailto:jane@example.com">mail me</a>
  <a class="url" href="home.html">home page</a>
  <span class="tel"><span class="type">Work</span> +1 555 555 1234</span>
  <div class="adr">
    <span class="type">home</span>
    <span class="street-address">1 Main St</span>
    <span class="locality">Springfield</span>
  </div>
  <span class="label"><span class="type">home</span>1 Main St<br>Springfield</span>
  <a class="category" rel="tag" href="http://example.com/tags/golf">Golf</a>
  <span class="category">Friends</span>
  <span class="categories">not a property</span>
  <img class="photo" src="me.jpg">
  <span class="x-mood">happy</span>
  <abbr class="bday" title="1980-03-22">March 22nd</abbr>
  <div class="vcard"><span class="fn">Nested</span></div>
</div>
<div class="vcard"><span class="fn">Second</span></div>
</body>
</html>
"""


def test_parse_page():
    parser = HCardParser(PAGE)
    vcard = parser.read_next()

    assert vcard.version is VCardVersion.V3_0
    assert vcard.formatted_name.value == "Jane Doe"
    assert vcard.structured_name == StructuredName(family="Doe", given="Jane")
    assert vcard.get_property(Nickname).values == ["JD", "Janie"]
    assert vcard.get_property(Categories).values == ["golf", "Friends"]
    assert vcard.get_property(Email).value == "jane@example.com"
    assert vcard.get_property(Url).value == "http://example.com/people/home.html"

    tel = vcard.get_property(Telephone)
    assert tel.text == "+1 555 555 1234"
    assert tel.types == ["work"]

    adr = vcard.get_property(Address)
    assert adr.types == ["home"]
    assert adr.street_addresses == ["1 Main St"]
    assert adr.localities == ["Springfield"]
    assert adr.label == "1 Main St\nSpringfield"
    assert vcard.get_property(Label) is None

    photo = vcard.get_property(Photo)
    assert photo.url == "http://example.com/people/me.jpg"
    assert photo.content_type is ImageType.JPEG

    assert vcard.get_extended_property("X-MOOD").value == "happy"
    assert vcard.get_property(Birthday).date == date(1980, 3, 22)
    assert len(parser.warnings) == 1

    second = parser.read_next()
    assert second.formatted_name.value == "Second"
    assert parser.read_next() is None


def test_page_url_resolves_relative_links():
    html = '<div class="vcard"><a class="url" href="/about">About</a></div>'
    vcard = parse_html(html, page_url="http://example.org/team/")[0]
    assert vcard.get_property(Url).value == "http://example.org/about"


def _card() -> VCard:
    vcard = VCard(VCardVersion.V3_0)
    vcard.formatted_name = "John Doe"
    vcard.structured_name = StructuredName(family="Doe", given="John")
    email = Email("john@example.com")
    email.add_type("work")
    vcard.add_properties([email, Birthday(date(1980, 3, 22)), Categories(["a", "b"])])
    return vcard


def test_write():
    vcard = _card()
    vcard.add_property(Gender("F"))
    soup = BeautifulSoup(write_html(vcard), "html.parser")

    div = soup.find("div", class_="vcard")
    assert div.find(class_="fn").get_text() == "John Doe"
    assert div.find(class_="prodid") is None
    assert div.find(class_="gender") is None
    assert div.find(class_="category") is not None

    email = div.find("a", class_="email")
    assert email["href"] == "mailto:john@example.com"
    assert email.find(class_="type").get_text() == "work"

    assert div.find("time", class_="bday")["datetime"] == "1980-03-22"


def test_write_then_parse():
    vcard = _card()
    again = parse_html(write_html([vcard, vcard]))
    assert len(again) == 2

    first = again[0]
    assert first.formatted_name.value == "John Doe"
    assert first.structured_name == vcard.structured_name
    assert first.get_property(Email).value == "john@example.com"
    assert first.get_property(Email).types == ["work"]
    assert first.get_property(Birthday).date == date(1980, 3, 22)
