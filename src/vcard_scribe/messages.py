from __future__ import annotations

# Numbered message templates. Validation warnings and parse warnings keep
# separate numbering so the codes stay stable for callers that filter on them.

VALIDATE: dict[int, str] = {
    0: "A StructuredName property (N) is required for vCard versions 2.1 and 3.0.",
    1: "A FormattedName property (FN) is required for vCard versions 3.0 and 4.0.",
    2: "Property is not supported in this vCard version. Supported versions are: {0}",
    3: "{0} parameter has a non-standard value (\"{1}\"). Standard values are: {2}",
    4: "{0} parameter value (\"{1}\") is not supported by this vCard version.",
    5: "{0} parameter value (\"{1}\") is malformed and could not be parsed.",
    6: "{0} parameter is not supported by this vCard version.",
    7: "Property has neither a URL nor binary data attached to it.",
    8: "Property value is empty.",
    9: "Property has no latitude.",
    10: "Property has no longitude.",
    11: "Text values and partial dates are only supported in vCard version 4.0.",
    12: "Gender sex value (\"{0}\") is not one of: {1}",
    13: "Property has neither an offset nor a text value.",
    14: "A Label property may only be assigned to a single address.",
    15: "KIND must be \"group\" for a vCard to have MEMBER properties.",
    16: "Property value (\"{0}\") is not a valid {1}.",
    22: "Invalid character set: \"{0}\"",
    23: "Group name \"{0}\" contains invalid characters. Only letters, digits and hyphens are allowed.",
    25: "{0} parameter value (\"{1}\") contains invalid characters. These characters are not allowed: {2}",
    26: "{0} parameter name contains invalid characters. Only letters, digits and hyphens are allowed.",
    27: "PID parameter value (\"{0}\") is invalid. It must be an integer or a decimal number with one decimal point.",
    28: "INDEX parameter value (\"{0}\") must be greater than 0.",
    29: "PREF parameter value (\"{0}\") must be between 1 and 100 inclusive.",
}

PARSE: dict[int, str] = {
    0: "Property has requested that it be skipped: {0}",
    1: "Property value could not be parsed and was dropped: {0}",
    2: "Unable to parse line: {0}",
    3: "Ignoring END property that does not match any BEGIN: {0}",
    4: "Unknown vCard version \"{0}\", treating as 2.1.",
    5: "Date string \"{0}\" could not be parsed.",
    6: "Date string \"{0}\" could not be parsed, treating it as a text value.",
    7: "Latitude missing from hCard element.",
    8: "Could not parse latitude \"{0}\".",
    9: "Longitude missing from hCard element.",
    10: "Could not parse longitude \"{0}\".",
    11: "Expected latitude and longitude separated by a semicolon.",
    12: "Invalid geo URI \"{0}\".",
    13: "Could not parse UTC offset \"{0}\", treating it as a text value.",
    14: "Expected a JSON value, found \"{0}\".",
    15: "Could not decode binary data: {0}",
    16: "Invalid data URI \"{0}\".",
    17: "Could not parse revision timestamp \"{0}\".",
    18: "Could not parse tel URI \"{0}\", treating it as text.",
    19: "Missing XML element: {0}",
    20: "Could not find a LABEL's matching ADR; keeping it as its own property.",
    21: "Unknown quoted-printable character set \"{0}\", defaulting to UTF-8.",
    22: "Property value is not quoted-printable encoded: {0}",
    23: "Nested vCards are not supported and were skipped.",
}


def validate_message(code: int, *args) -> str:
    return VALIDATE[code].format(*args)


def parse_message(code: int, *args) -> str:
    return PARSE[code].format(*args)
