from datetime import datetime, timezone

import pytest

from linkedin_growth.services.snapshot import (
    first_record,
    parse_count,
    parse_datetime,
    record_engagement,
    record_media_type,
    record_text,
    snapshot_records,
    sorted_record_dates,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("12", 12),
        ("12 likes", 12),
        (" +7", 7),
        (12.7, 12),
        (-3, 0),
        (None, 0),
        ("", 0),
        ("n/a", 0),
        (True, 0),
    ],
)
def test_parse_count(value, expected):
    assert parse_count(value) == expected


def test_parse_datetime_formats():
    expected = datetime(2026, 1, 5, 9, 30, tzinfo=timezone.utc)
    assert parse_datetime("2026-01-05 09:30:00") == expected
    assert parse_datetime("2026-01-05T09:30:00Z") == expected
    assert parse_datetime("2026-01-05T10:30:00+01:00") == expected
    assert parse_datetime(int(expected.timestamp() * 1000)) == expected


def test_parse_datetime_invalid():
    assert parse_datetime(None) is None
    assert parse_datetime("") is None
    assert parse_datetime("yesterday") is None


def test_snapshot_records_first_element_by_default():
    payload = {
        "elements": [
            {"snapshotDomain": "PROFILE", "snapshotData": [{"First Name": "Ava"}, "junk"]},
            {"snapshotDomain": "CONNECTIONS", "snapshotData": [{"Industry": "Design"}]},
        ]
    }
    assert snapshot_records(payload) == [{"First Name": "Ava"}]
    assert snapshot_records(payload, "CONNECTIONS") == [{"Industry": "Design"}]
    assert snapshot_records(payload, "SKILLS") == []


@pytest.mark.parametrize("payload", [None, [], "x", {}, {"elements": "nope"}, {"elements": [None]}])
def test_snapshot_records_tolerates_malformed_payloads(payload):
    assert snapshot_records(payload) == []
    assert first_record(payload) == {}


def test_record_accessors_accept_camel_case():
    record = {"likesCount": "3", "commentsCount": 2, "mediaType": "VIDEO", "Commentary": "hello"}
    assert record_engagement(record) == 5
    assert record_media_type(record) == "VIDEO"
    assert record_text(record) == "hello"
    assert record_media_type({}) == "TEXT"


def test_sorted_record_dates_skips_unparseable():
    records = [{"Date": "2026-02-01 00:00:00"}, {"Date": "bad"}, {"date": "2026-01-01 00:00:00"}]
    dates = sorted_record_dates(records)
    assert [d.month for d in dates] == [1, 2]
