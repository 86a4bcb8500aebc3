from __future__ import annotations

from typing import Iterable, Sequence

# ── Escaping ───────────────────────────────────────────────────────────────────
#
# Text values escape backslash, comma and semicolon with a backslash, and
# newlines become the two characters "\n". Reading accepts "\N" as well and
# leaves any escape it does not recognise untouched.

_UNESCAPES = {
    "\\": "\\",
    ",": ",",
    ";": ";",
    "n": "\n",
    "N": "\n",
}


def escape(text: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in "\\,;":
            out.append("\\" + ch)
        elif ch == "\r":
            out.append("\\n")
            if text[i + 1:i + 2] == "\n":
                i += 1
        elif ch == "\n":
            out.append("\\n")
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def unescape(text: str) -> str:
    if "\\" not in text:
        return text

    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            if nxt in _UNESCAPES:
                out.append(_UNESCAPES[nxt])
            else:
                out.append(ch + nxt)
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


# ── Splitting ──────────────────────────────────────────────────────────────────

class Splitter:
    """Splits a value on a delimiter that is not escaped with a backslash.

    ``limit`` caps the number of tokens; once reached, the rest of the text
    becomes the final token and is not split any further. ``trim`` strips
    surrounding whitespace from each token, ``unescape`` decodes each token,
    ``null_empties`` turns empty tokens into ``None`` and ``remove_empties``
    drops them.
    """

    def __init__(
        self,
        delimiter: str,
        limit: int = -1,
        unescape: bool = False,
        null_empties: bool = False,
        remove_empties: bool = False,
        trim: bool = True,
    ):
        if len(delimiter) != 1:
            raise ValueError("delimiter must be a single character")
        self.delimiter = delimiter
        self.limit = limit
        self.unescape = unescape
        self.null_empties = null_empties
        self.remove_empties = remove_empties
        self.trim = trim

    def split(self, text: str) -> list[str | None]:
        raw = self._split_raw(text)

        tokens: list[str | None] = []
        for token in raw:
            if self.trim:
                token = token.strip()
            if self.unescape:
                token = unescape(token)
            if token == "":
                if self.remove_empties:
                    continue
                if self.null_empties:
                    tokens.append(None)
                    continue
            tokens.append(token)
        return tokens

    def _split_raw(self, text: str) -> list[str]:
        parts: list[str] = []
        start = 0
        escaped = False
        for i, ch in enumerate(text):
            if escaped:
                escaped = False
                continue
            if ch == "\\":
                escaped = True
                continue
            if ch == self.delimiter:
                if 0 < self.limit <= len(parts) + 1:
                    break
                parts.append(text[start:i])
                start = i + 1
        parts.append(text[start:])
        return parts


# ── Readers ────────────────────────────────────────────────────────────────────

def parse_list(value: str) -> list[str]:
    """Parse a comma-delimited list, e.g. ``NICKNAME:Jon,Johnny``."""
    if value == "":
        return []
    return Splitter(",", unescape=True).split(value)


def parse_semi_structured(value: str, limit: int = -1) -> list[str | None]:
    """Parse a semicolon-delimited value whose fields are not comma lists."""
    return Splitter(";", limit=limit, unescape=True, null_empties=True).split(value)


def parse_structured(value: str) -> list[list[str]]:
    """Parse a semicolon-delimited value whose fields are comma lists."""
    if value == "":
        return []
    return [parse_list(component) for component in Splitter(";").split(value)]


class SemiStructuredIterator:
    def __init__(self, value: str, limit: int = -1):
        self._it = iter(parse_semi_structured(value, limit))

    def next(self) -> str | None:
        return next(self._it, None)

    def __iter__(self):
        return self._it


class StructuredIterator:
    """Walks the components of a structured value.

    Missing components read as ``None`` (or ``[]`` for list components), so
    short values such as ``N:Doe`` can be read field by field.
    """

    def __init__(self, components: list[list[str]]):
        self._it = iter(components)

    @classmethod
    def of(cls, value: str) -> StructuredIterator:
        return cls(parse_structured(value))

    def next_value(self) -> str | None:
        component = next(self._it, None)
        if not component:
            return None
        value = component[0]
        return value or None

    def next_component(self) -> list[str]:
        component = next(self._it, None)
        if component is None:
            return []
        if len(component) == 1 and component[0] == "":
            return []
        return list(component)


# ── Writers ────────────────────────────────────────────────────────────────────

def write_list(values: Iterable[object]) -> str:
    return ",".join(escape(str(v)) for v in values if v is not None)


def write_semi_structured(
    values: Sequence[object],
    escape_commas: bool = True,
    include_trailing_semicolons: bool = False,
) -> str:
    fields: list[str] = []
    for value in values:
        if value is None:
            fields.append("")
            continue
        text = escape(str(value))
        if not escape_commas:
            text = text.replace("\\,", ",")
        fields.append(text)
    return _join_fields(fields, include_trailing_semicolons)


def write_structured(values: Sequence[object], include_trailing_semicolons: bool = False) -> str:
    """Write a structured value; each field may be a value, a list or ``None``."""
    fields: list[str] = []
    for value in values:
        if value is None:
            fields.append("")
        elif isinstance(value, (list, tuple)):
            fields.append(write_list(value))
        else:
            fields.append(escape(str(value)))
    return _join_fields(fields, include_trailing_semicolons)


def _join_fields(fields: list[str], include_trailing_semicolons: bool) -> str:
    if not include_trailing_semicolons:
        while fields and fields[-1] == "":
            fields.pop()
    return ";".join(fields)
