from __future__ import annotations

from .messages import parse_message


class VCardError(Exception):
    """Base class for errors raised by vcard_scribe."""


class SkipMeError(VCardError):
    """Raised by a scribe to leave a property out of the output entirely."""


class CannotParseError(VCardError):
    """Raised by a scribe when a property value cannot be read at all.

    Readers drop the property and record a parse failure; the rest of the
    vCard is unaffected.
    """

    def __init__(self, code: int | None = None, *args):
        self.code = code
        if code is None:
            message = str(args[0]) if args else "Unparsable value."
        else:
            message = parse_message(code, *args)
        super().__init__(message)


class DocumentParseError(VCardError):
    """Raised when an xCard or jCard document is not well-formed."""
