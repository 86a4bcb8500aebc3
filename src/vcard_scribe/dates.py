from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

# ── Full dates and date-times ──────────────────────────────────────────────────

_DATE_RE = re.compile(r"^(\d{4})-?(\d{2})-?(\d{2})$")
_DATE_TIME_RE = re.compile(
    r"^(\d{4})-?(\d{2})-?(\d{2})"
    r"T(\d{2}):?(\d{2})(?::?(\d{2})(?:[.,](\d+))?)?"
    r"(Z|[-+]\d{2}(?::?\d{2})?)?$"
)


def parse_date(text: str) -> date | datetime:
    """Parse an ISO-8601 date or date-time, basic or extended format.

    Date-times must state their offset ("Z" or "+0200"); local times with
    no offset are rejected since they cannot be placed on the timeline.
    """
    text = text.strip()

    m = _DATE_RE.match(text)
    if m:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _DATE_TIME_RE.match(text)
    if not m:
        raise ValueError(f"Date string \"{text}\" is not in a valid ISO-8601 format.")

    year, month, day, hour, minute, second, fraction, zone = m.groups()
    if zone is None:
        raise ValueError(f"Date-time \"{text}\" has no UTC offset.")

    micro = int((fraction or "0")[:6].ljust(6, "0"))
    tz = timezone.utc if zone == "Z" else UtcOffset.parse(zone).to_timezone()
    return datetime(
        int(year), int(month), int(day),
        int(hour), int(minute), int(second or 0), micro,
        tzinfo=tz,
    )


class DateWriter:
    """Formats a ``date`` or ``datetime``.

    ``time`` controls whether a time component is written, ``extended``
    chooses ``2024-01-02T03:04:05Z`` over ``20240102T030405Z`` and ``utc``
    converts to UTC instead of keeping the value's own offset.
    """

    def __init__(self, value: date | datetime):
        self._value = value
        self._time = True
        self._extended = False
        self._utc = True

    def time(self, include: bool) -> DateWriter:
        self._time = include
        return self

    def extended(self, extended: bool) -> DateWriter:
        self._extended = extended
        return self

    def utc(self, utc: bool) -> DateWriter:
        self._utc = utc
        return self

    def write(self) -> str:
        value = self._value
        date_fmt = "%Y-%m-%d" if self._extended else "%Y%m%d"
        if not isinstance(value, datetime) or not self._time:
            return value.strftime(date_fmt)

        time_fmt = "%H:%M:%S" if self._extended else "%H%M%S"
        fmt = f"{date_fmt}T{time_fmt}"

        if value.tzinfo is None:
            raise ValueError("Cannot write a date-time without a UTC offset.")
        if self._utc:
            return value.astimezone(timezone.utc).strftime(fmt) + "Z"

        offset = UtcOffset.from_timedelta(value.utcoffset() or timedelta(0))
        return value.strftime(fmt) + offset.to_string(self._extended)


# ── UTC offsets ────────────────────────────────────────────────────────────────

_OFFSET_RE = re.compile(r"^([-+])?(\d{1,2}):?(\d{2})?$")


@dataclass(frozen=True)
class UtcOffset:
    positive: bool
    hour: int
    minute: int = 0

    def __post_init__(self):
        if not 0 <= self.minute <= 59:
            raise ValueError(f"Minute value must be between 0 and 59 inclusive, got {self.minute}.")
        if self.hour < 0:
            raise ValueError("Hour value must not be negative, use positive=False instead.")

    @classmethod
    def parse(cls, text: str) -> UtcOffset:
        m = _OFFSET_RE.match(text.strip())
        if not m:
            raise ValueError(f"Offset string \"{text}\" is not in ISO-8601 format.")
        sign, hour, minute = m.groups()
        return cls(sign != "-", int(hour), int(minute or 0))

    @classmethod
    def from_timedelta(cls, delta: timedelta) -> UtcOffset:
        total = int(delta.total_seconds()) // 60
        positive = total >= 0
        hours, minutes = divmod(abs(total), 60)
        return cls(positive, hours, minutes)

    def to_timedelta(self) -> timedelta:
        delta = timedelta(hours=self.hour, minutes=self.minute)
        return delta if self.positive else -delta

    def to_timezone(self) -> timezone:
        return timezone(self.to_timedelta())

    def to_string(self, extended: bool = False) -> str:
        sign = "+" if self.positive else "-"
        sep = ":" if extended else ""
        return f"{sign}{self.hour:02d}{sep}{self.minute:02d}"

    def __str__(self) -> str:
        return self.to_string()


# ── Partial dates ──────────────────────────────────────────────────────────────
#
# vCard 4.0 allows reduced accuracy and truncated ISO-8601 values:
#
#   1985         year only
#   1985-04      year and month
#   --0412       month and day, no year
#   --04         month only
#   ---12        day only
#   T10 / T1022  hour, hour and minute
#   T-2200       minute and second
#   T--00        second only

_DATE_FORMATS = (
    (re.compile(r"^(\d{4})$"), ("year",)),
    (re.compile(r"^(\d{4})-(\d{2})$"), ("year", "month")),
    (re.compile(r"^(\d{4})-?(\d{2})-?(\d{2})$"), ("year", "month", "day")),
    (re.compile(r"^--(\d{2})-?(\d{2})$"), ("month", "day")),
    (re.compile(r"^--(\d{2})$"), ("month",)),
    (re.compile(r"^---(\d{2})$"), ("day",)),
)

_TZ = r"(Z|[-+]\d{1,2}(?::?\d{2})?)?"

_TIME_FORMATS = (
    (re.compile(r"^(\d{2})" + _TZ + "$"), ("hour",)),
    (re.compile(r"^(\d{2}):?(\d{2})" + _TZ + "$"), ("hour", "minute")),
    (re.compile(r"^(\d{2}):?(\d{2}):?(\d{2})" + _TZ + "$"), ("hour", "minute", "second")),
    (re.compile(r"^-(\d{2}):?(\d{2})" + _TZ + "$"), ("minute", "second")),
    (re.compile(r"^-(\d{2})" + _TZ + "$"), ("minute",)),
    (re.compile(r"^--(\d{2})" + _TZ + "$"), ("second",)),
)


@dataclass(frozen=True)
class PartialDate:
    year: int | None = None
    month: int | None = None
    day: int | None = None
    hour: int | None = None
    minute: int | None = None
    second: int | None = None
    offset: UtcOffset | None = None
    utc: bool = False

    @classmethod
    def parse(cls, text: str) -> PartialDate:
        text = text.strip()
        date_part, sep, time_part = text.partition("T")
        if not text or (sep and not time_part):
            raise ValueError(f"Could not parse date string \"{text}\".")

        fields: dict[str, object] = {}
        if date_part:
            if _match_into(_DATE_FORMATS, date_part, fields) is None:
                raise ValueError(f"Could not parse date component of \"{text}\".")
        if sep:
            zone = _match_into(_TIME_FORMATS, time_part, fields)
            if zone is None:
                raise ValueError(f"Could not parse time component of \"{text}\".")
            if zone == "Z":
                fields["utc"] = True
            elif zone:
                fields["offset"] = UtcOffset.parse(zone)
        return cls(**fields)

    def has_date_component(self) -> bool:
        return self.year is not None or self.month is not None or self.day is not None

    def has_time_component(self) -> bool:
        return self.hour is not None or self.minute is not None or self.second is not None

    def to_iso8601(self, extended: bool = False) -> str:
        out = ""
        dash = "-" if extended else ""
        colon = ":" if extended else ""

        year, month, day = self.year, self.month, self.day
        if year is not None and month is None and day is not None:
            raise ValueError("A year and a day without a month cannot be written.")
        if year is not None:
            out += f"{year:04d}"
            if month is not None:
                out += f"-{month:02d}" if day is None else f"{dash}{month:02d}"
                if day is not None:
                    out += f"{dash}{day:02d}"
        elif month is not None:
            out += f"--{month:02d}"
            if day is not None:
                out += f"{dash}{day:02d}"
        elif day is not None:
            out += f"---{day:02d}"

        hour, minute, second = self.hour, self.minute, self.second
        if hour is not None and minute is None and second is not None:
            raise ValueError("An hour and a second without a minute cannot be written.")
        if self.has_time_component():
            out += "T"
            if hour is not None:
                out += f"{hour:02d}"
                if minute is not None:
                    out += f"{colon}{minute:02d}"
                    if second is not None:
                        out += f"{colon}{second:02d}"
            elif minute is not None:
                out += f"-{minute:02d}"
                if second is not None:
                    out += f"{colon}{second:02d}"
            else:
                out += f"--{second:02d}"

            if self.utc:
                out += "Z"
            elif self.offset is not None:
                out += self.offset.to_string(extended)
        return out

    def __str__(self) -> str:
        return self.to_iso8601(True)


def _match_into(formats, text: str, fields: dict[str, object]) -> str | None:
    """Match ``text`` against ``formats``; returns the zone suffix ("" if absent)."""
    for regex, names in formats:
        m = regex.match(text)
        if not m:
            continue
        groups = m.groups()
        for name, value in zip(names, groups):
            fields[name] = int(value)
        extra = groups[len(names):]
        return extra[0] or "" if extra else ""
    return None
