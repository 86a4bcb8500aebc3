from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass, field
from urllib.parse import quote, unquote

# ── geo: ───────────────────────────────────────────────────────────────────────

_GEO_RE = re.compile(
    r"^geo:(-?\d+(?:\.\d+)?),(-?\d+(?:\.\d+)?)(?:,(-?\d+(?:\.\d+)?))?((?:;[^;=]+=[^;]*)*)$",
    re.IGNORECASE,
)


def format_coordinate(value: float) -> str:
    """Six decimal places, without trailing zeros."""
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


@dataclass(frozen=True)
class GeoUri:
    """A location as a geo URI (RFC 5870), e.g. ``geo:46.772673,-71.282945``."""

    latitude: float
    longitude: float
    altitude: float | None = None
    crs: str | None = None
    uncertainty: float | None = None
    parameters: dict[str, str] = field(default_factory=dict, compare=False)

    @classmethod
    def parse(cls, text: str) -> GeoUri:
        m = _GEO_RE.match(text.strip())
        if not m:
            raise ValueError(f"Invalid geo URI: {text}")
        lat, lon, alt, rest = m.groups()

        crs = None
        uncertainty = None
        params: dict[str, str] = {}
        for piece in filter(None, rest.split(";")):
            name, _, value = piece.partition("=")
            name = name.lower()
            if name == "crs":
                crs = value
            elif name == "u":
                try:
                    uncertainty = float(value)
                except ValueError:
                    raise ValueError(f"Invalid uncertainty in geo URI: {text}") from None
            else:
                params[name] = unquote(value)

        return cls(
            float(lat),
            float(lon),
            float(alt) if alt is not None else None,
            crs,
            uncertainty,
            params,
        )

    def __str__(self) -> str:
        out = f"geo:{format_coordinate(self.latitude)},{format_coordinate(self.longitude)}"
        if self.altitude is not None:
            out += f",{format_coordinate(self.altitude)}"
        if self.crs is not None and self.crs.lower() != "wgs84":
            out += f";crs={self.crs}"
        if self.uncertainty is not None:
            out += f";u={format_coordinate(self.uncertainty)}"
        for name, value in self.parameters.items():
            out += f";{name}={quote(value, safe='')}"
        return out


# ── data: ──────────────────────────────────────────────────────────────────────

_DATA_RE = re.compile(r"^data:([^,]*?)(;base64)?,(.*)$", re.IGNORECASE | re.DOTALL)


@dataclass(frozen=True)
class DataUri:
    """Inline binary data, e.g. ``data:image/png;base64,iVBORw0...``."""

    content_type: str
    data: bytes | None = None
    text: str | None = None

    @classmethod
    def parse(cls, uri: str) -> DataUri:
        m = _DATA_RE.match(uri.strip())
        if not m:
            raise ValueError(f"Not a data URI: {uri[:40]}")
        media, b64, payload = m.groups()

        charset = None
        pieces = media.split(";")
        content_type = pieces[0].strip().lower()
        for piece in pieces[1:]:
            name, _, value = piece.partition("=")
            if name.strip().lower() == "charset":
                charset = value.strip()

        if b64:
            try:
                data = base64.b64decode(payload, validate=True)
            except binascii.Error as exc:
                raise ValueError(f"Data URI contains invalid base64: {exc}") from exc
        else:
            data = unquote(payload).encode("utf-8")

        if charset:
            return cls(content_type, text=data.decode(charset, errors="replace"))
        return cls(content_type, data=data)

    def __str__(self) -> str:
        if self.text is not None:
            payload = base64.b64encode(self.text.encode("utf-8")).decode("ascii")
            return f"data:{self.content_type};charset=utf-8;base64,{payload}"
        payload = base64.b64encode(self.data or b"").decode("ascii")
        return f"data:{self.content_type};base64,{payload}"


# ── tel: ───────────────────────────────────────────────────────────────────────

_VISUAL_SEPARATORS = re.compile(r"[-.()\s]")
_GLOBAL_NUMBER = re.compile(r"^\+[0-9]+$")
_LOCAL_NUMBER = re.compile(r"^[0-9A-Fa-f*#]+$")


@dataclass(frozen=True)
class TelUri:
    """A telephone number URI (RFC 3966), e.g. ``tel:+1-555-555-1234;ext=101``."""

    number: str
    extension: str | None = None
    isdn_subaddress: str | None = None
    phone_context: str | None = None
    parameters: dict[str, str] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        digits = _VISUAL_SEPARATORS.sub("", self.number)
        if self.phone_context is None:
            if not _GLOBAL_NUMBER.match(digits):
                raise ValueError(
                    f"Global number \"{self.number}\" must start with \"+\" and contain only digits."
                )
        elif not _LOCAL_NUMBER.match(digits):
            raise ValueError(f"Local number \"{self.number}\" contains invalid characters.")

    @classmethod
    def global_number(cls, number: str, extension: str | None = None) -> TelUri:
        return cls(number, extension=extension)

    @classmethod
    def parse(cls, uri: str) -> TelUri:
        uri = uri.strip()
        if not uri.lower().startswith("tel:"):
            raise ValueError(f"Not a tel URI: {uri}")

        number, *pieces = uri[4:].split(";")
        kwargs: dict[str, str] = {}
        params: dict[str, str] = {}
        for piece in pieces:
            name, _, value = piece.partition("=")
            value = unquote(value)
            name = name.lower()
            if name == "ext":
                kwargs["extension"] = value
            elif name == "isub":
                kwargs["isdn_subaddress"] = value
            elif name == "phone-context":
                kwargs["phone_context"] = value
            else:
                params[name] = value
        return cls(unquote(number), parameters=params, **kwargs)

    def __str__(self) -> str:
        out = f"tel:{self.number}"
        if self.extension is not None:
            out += f";ext={self.extension}"
        if self.isdn_subaddress is not None:
            out += f";isub={self.isdn_subaddress}"
        if self.phone_context is not None:
            out += f";phone-context={self.phone_context}"
        for name, value in self.parameters.items():
            out += f";{name}={quote(value, safe='')}"
        return out
