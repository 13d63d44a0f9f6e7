"""End-to-end tests for the Sequencer orchestration."""

from __future__ import annotations

import pytest

from conftest import InMemorySource, RecordingSink, gps_metadata
from mkseq.core.config import SmoothingConfig, TransformationConfig
from mkseq.errors import MetadataReadError, MetadataWriteError
from mkseq.processors.sequencer import Sequencer


def make_sequencer(source, sink, **kwargs):
    config = TransformationConfig(log_level="WARNING", **kwargs)
    return Sequencer(config, source, sink, show_progress=False)


def test_run_orders_by_time_and_normalizes(line_source, sink):
    records = make_sequencer(line_source, sink).run(["c.jpg", "a.jpg", "b.jpg"])
    assert sink.file_ids == ["a.jpg", "b.jpg", "c.jpg"]
    assert [r.file_id for r in records] == sink.file_ids
    assert [r.bearing for r in records] == pytest.approx([90.0, 90.0, 90.0])


def test_each_photo_read_once_for_sorting(line_source, sink):
    make_sequencer(line_source, sink).run(["c.jpg", "a.jpg", "b.jpg"])
    # One read while sorting and one while loading
    assert line_source.reads == {"a.jpg": 2, "b.jpg": 2, "c.jpg": 2}


def test_statistics(line_source, sink):
    sequencer = make_sequencer(line_source, sink)
    sequencer.run(["b.jpg", "c.jpg", "a.jpg"])
    stats = sequencer.get_statistics()
    assert stats["num_records"] == 3
    assert stats["duration_s"] == pytest.approx(20.0)
    assert stats["total_distance_m"] == pytest.approx(2 * 1111949.27, rel=1e-5)
    assert (stats["first_file"], stats["last_file"]) == ("a.jpg", "c.jpg")


def test_statistics_before_run(line_source, sink):
    assert make_sequencer(line_source, sink).get_statistics() == {"num_records": 0}


def test_smoothing_run(sink):
    source = InMemorySource({
        f"{i}.jpg": gps_metadata(0.0, [0.0, 0.0, 9.0][i], "2016:05:01", (12, 0, i))
        for i in range(3)
    })
    sequencer = make_sequencer(source, sink, smooth=SmoothingConfig(enabled=True, nodes=3))
    records = sequencer.run(["2.jpg", "1.jpg", "0.jpg"])
    assert [r.point.longitude for r in records] == pytest.approx([0.0, 3.0, 9.0])


def test_write_failure_keeps_earlier_records(line_source):
    sink = RecordingSink(fail_on="b.jpg")
    with pytest.raises(MetadataWriteError) as excinfo:
        make_sequencer(line_source, sink).run(["a.jpg", "b.jpg", "c.jpg"])
    assert excinfo.value.file_id == "b.jpg"
    assert sink.file_ids == ["a.jpg"]


def test_read_failure_aborts_before_writing(line_source, sink):
    with pytest.raises(MetadataReadError):
        make_sequencer(line_source, sink).run(["a.jpg", "missing.jpg", "c.jpg"])
    assert sink.written == []


def test_empty_run(sink):
    assert make_sequencer(InMemorySource({}), sink).run([]) == []
    assert sink.written == []
