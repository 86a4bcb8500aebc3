from datetime import date, datetime, timedelta, timezone

import pytest

from vcard_scribe.dates import DateWriter, PartialDate, UtcOffset, parse_date


# ── Full dates ─────────────────────────────────────────────────────────────────

def test_parse_dates_in_both_forms():
    assert parse_date("2024-01-02") == date(2024, 1, 2)
    assert parse_date("20240102") == date(2024, 1, 2)


def test_parse_date_times_need_an_offset():
    assert parse_date("2024-01-02T03:04:05Z") == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert parse_date("20240102T030405+0200").utcoffset() == timedelta(hours=2)
    with pytest.raises(ValueError):
        parse_date("2024-01-02T03:04:05")
    with pytest.raises(ValueError):
        parse_date("not a date")


def test_date_writer_toggles():
    value = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert DateWriter(value).write() == "20240102T030405Z"
    assert DateWriter(value).extended(True).write() == "2024-01-02T03:04:05Z"
    assert DateWriter(value).time(False).write() == "20240102"
    assert DateWriter(date(2024, 1, 2)).extended(True).write() == "2024-01-02"


def test_date_writer_keeps_or_converts_offset():
    value = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=2)))
    assert DateWriter(value).write() == "20240102T010405Z"
    assert DateWriter(value).utc(False).extended(True).write() == "2024-01-02T03:04:05+02:00"


# ── UTC offsets ────────────────────────────────────────────────────────────────

def test_utc_offset():
    offset = UtcOffset.parse("-0530")
    assert offset == UtcOffset(False, 5, 30)
    assert offset.to_string(True) == "-05:30"
    assert offset.to_timedelta() == -timedelta(hours=5, minutes=30)
    assert UtcOffset.from_timedelta(timedelta(hours=1)) == UtcOffset(True, 1, 0)


def test_utc_offset_rejects_bad_minutes():
    with pytest.raises(ValueError):
        UtcOffset(True, 1, 60)


# ── Partial dates ──────────────────────────────────────────────────────────────

def test_partial_date_forms():
    assert PartialDate.parse("--0412") == PartialDate(month=4, day=12)
    assert PartialDate.parse("1985-04") == PartialDate(year=1985, month=4)
    assert PartialDate.parse("---12") == PartialDate(day=12)
    assert PartialDate.parse("T1022") == PartialDate(hour=10, minute=22)
    assert PartialDate.parse("T-2200") == PartialDate(minute=22, second=0)
    assert PartialDate.parse("T10Z") == PartialDate(hour=10, utc=True)


def test_partial_date_writes_back():
    assert PartialDate(month=4, day=12).to_iso8601() == "--0412"
    assert PartialDate(year=1985, month=4).to_iso8601() == "1985-04"
    assert PartialDate(hour=10, minute=22).to_iso8601(True) == "T10:22"
    assert PartialDate(year=1985, month=4, day=12, hour=10, offset=UtcOffset(True, 2)).to_iso8601() == "19850412T10+0200"


def test_partial_date_components():
    partial = PartialDate.parse("--0412T10")
    assert partial.has_date_component()
    assert partial.has_time_component()


def test_partial_date_rejects_gaps():
    with pytest.raises(ValueError):
        PartialDate(year=1985, day=3).to_iso8601()
    with pytest.raises(ValueError):
        PartialDate(hour=10, second=3).to_iso8601()
    with pytest.raises(ValueError):
        PartialDate.parse("circa 1800")
