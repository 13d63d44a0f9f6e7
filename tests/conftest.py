"""Global pytest fixtures & helpers.

Adds the src directory to the path and provides in-memory metadata sources
and sinks so sequencing tests run without touching real photos.
"""
from __future__ import annotations

import os
import sys
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

SRC = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from mkseq.core.geo_point import GeoPoint
from mkseq.core.sequence import RawMetadata, SequenceRecord
from mkseq.errors import MetadataReadError
from mkseq.utils.time_resolver import TimestampCandidates


class InMemorySource:
    """Metadata source over a dict, counting reads per identifier."""

    def __init__(self, entries: Dict[str, RawMetadata]):
        self.entries = dict(entries)
        self.reads: Dict[str, int] = {}

    def read(self, file_id: str) -> RawMetadata:
        self.reads[file_id] = self.reads.get(file_id, 0) + 1
        if file_id not in self.entries:
            raise MetadataReadError(f"Unknown photo: {file_id}", file_id=file_id)
        return self.entries[file_id]


class RecordingSink:
    """Metadata sink keeping written records, optionally failing on one photo."""

    def __init__(self, fail_on: Optional[str] = None):
        self.fail_on = fail_on
        self.written: List[SequenceRecord] = []

    def write(self, record: SequenceRecord):
        if record.file_id == self.fail_on:
            raise OSError(f"disk full while writing {record.file_id}")
        self.written.append(record)

    @property
    def file_ids(self) -> List[str]:
        return [r.file_id for r in self.written]


# --- Factory helpers -------------------------------------------------
def make_records(coords: Sequence[Tuple[float, float]], **fields) -> List[SequenceRecord]:
    return [
        SequenceRecord(file_id=f"IMG_{i:04d}.jpg", point=GeoPoint(lat, lon), **fields)
        for i, (lat, lon) in enumerate(coords)
    ]


def gps_metadata(lat: float, lon: float, date: str, time: Tuple[float, float, float], **fields) -> RawMetadata:
    return RawMetadata(
        point=GeoPoint(lat, lon),
        candidates=TimestampCandidates(gps_date=date, gps_time=time),
        **fields
    )


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def line_source():
    """Three photos on the equator, 10 seconds apart, listed out of order."""
    return InMemorySource({
        "c.jpg": gps_metadata(0.0, 20.0, "2016:05:01", (12, 0, 20)),
        "a.jpg": gps_metadata(0.0, 0.0, "2016:05:01", (12, 0, 0)),
        "b.jpg": gps_metadata(0.0, 10.0, "2016:05:01", (12, 0, 10)),
    })


@pytest.fixture
def sink():
    return RecordingSink()
