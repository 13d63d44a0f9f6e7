"""Unit tests for building working records from source metadata."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest

from mkseq.core.geo_point import GeoPoint
from mkseq.core.sequence import RawMetadata, SequenceRecord
from mkseq.errors import MetadataReadError
from mkseq.utils.time_resolver import TimestampCandidates


def test_missing_position_becomes_zero_point(caplog):
    with caplog.at_level(logging.WARNING, logger="mkseq"):
        record = SequenceRecord.from_metadata("IMG_1.jpg", RawMetadata())
    assert record.point == GeoPoint.zero()
    assert "IMG_1.jpg" in caplog.text


def test_altitude_falls_back_to_point_altitude():
    record = SequenceRecord.from_metadata("a.jpg", RawMetadata(point=GeoPoint(1.0, 2.0, 40.0)))
    assert record.altitude == 40.0
    record = SequenceRecord.from_metadata(
        "a.jpg", RawMetadata(point=GeoPoint(1.0, 2.0, 40.0), altitude=-2.0)
    )
    assert record.altitude == -2.0


def test_gps_timestamp_only_with_date_stamp():
    with_date = RawMetadata(candidates=TimestampCandidates(gps_date="2016:05:01", gps_time=(1, 2, 3)))
    assert SequenceRecord.from_metadata("a.jpg", with_date).timestamp == datetime(
        2016, 5, 1, 1, 2, 3, tzinfo=timezone.utc
    )

    exif_only = RawMetadata(candidates=TimestampCandidates(datetime_original="2016:05:01 01:02:03"))
    assert SequenceRecord.from_metadata("a.jpg", exif_only).timestamp is None


def test_malformed_gps_date_raises():
    metadata = RawMetadata(candidates=TimestampCandidates(gps_date="May 1st"))
    with pytest.raises(MetadataReadError) as excinfo:
        SequenceRecord.from_metadata("a.jpg", metadata)
    assert excinfo.value.file_id == "a.jpg"


def test_describe():
    record = SequenceRecord(
        file_id="a.jpg",
        point=GeoPoint(52.5, -4.25),
        timestamp=datetime(2016, 5, 1, 12, tzinfo=timezone.utc),
        bearing=90.0,
        speed=12.0,
        speed_ref="N",
        altitude=3.0,
        area_information="Pier",
    )
    text = record.describe(utc=True, iso=True)
    assert text.splitlines()[0] == "a.jpg"
    assert "52°30'0.000\"N 4°15'0.000\"W" in text
    assert "90.00° T" in text
    assert "12.00 knots" in text
    assert "2016-05-01T12:00:00+00:00" in text
    assert "area: Pier" in text
