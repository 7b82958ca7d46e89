import random

import pytest

from shieldflow.core.log_sink import LogSink
from shieldflow.core.traffic import TrafficGenerator
from shieldflow.core.types import Severity


def test_log_is_newest_first_and_capped():
    sink = LogSink()
    for i in range(60):
        sink.record(f"event {i}")

    entries = sink.entries
    assert len(entries) == 50
    assert entries[0].message == "event 59"
    assert entries[-1].message == "event 10"


def test_log_entries_have_fresh_ids_and_timestamps():
    sink = LogSink(timestamp_source=lambda: "09:15:00")
    first = sink.record("one")
    second = sink.record("two", Severity.ERROR)

    assert first.id != second.id
    assert len(first.id) == 9
    assert first.timestamp == "09:15:00"
    assert first.severity == Severity.INFO
    assert second.severity == Severity.ERROR


def test_log_accepts_severity_strings():
    sink = LogSink()
    assert sink.record("ok", "success").severity == Severity.SUCCESS
    with pytest.raises(ValueError):
        sink.record("bad", "fatal")


def test_log_observers_and_clear():
    sink = LogSink()
    seen = []
    sink.subscribe(seen.append)
    sink.record("hello")
    sink.unsubscribe(seen.append)
    sink.record("ignored")

    assert [e.message for e in seen] == ["hello"]
    sink.clear()
    assert len(sink) == 0


def test_log_export_oldest_first(tmp_path):
    sink = LogSink(timestamp_source=lambda: "10:00:00")
    sink.record("first")
    sink.record("second", Severity.WARNING)

    path = sink.export(tmp_path / "logs" / "session.log")
    lines = path.read_text(encoding="utf-8").splitlines()

    assert lines == [
        "[10:00:00] INFO    first",
        "[10:00:00] WARNING second",
    ]


def test_traffic_window_starts_with_zeros():
    traffic = TrafficGenerator()
    assert len(traffic.samples) == 20
    assert traffic.is_idle()
    assert traffic.latest().download_mbps == 0


def test_traffic_sample_bounds_and_eviction():
    traffic = TrafficGenerator(window=5, rng=random.Random(1))
    points = [traffic.sample(float(t)) for t in range(8)]

    assert traffic.samples == points[-5:]
    for point in points:
        assert 20 <= point.download_mbps < 100
        assert 5 <= point.upload_mbps < 35


def test_traffic_is_reproducible_with_seed():
    a = TrafficGenerator(rng=random.Random(3))
    b = TrafficGenerator(rng=random.Random(3))
    assert [a.sample(1.0) for _ in range(3)] == [b.sample(1.0) for _ in range(3)]


def test_traffic_reset_discards_session_values():
    traffic = TrafficGenerator(window=3, rng=random.Random(5))
    traffic.sample(1.0)
    traffic.reset(9.0)

    assert traffic.is_idle()
    assert [s.timestamp for s in traffic.samples] == [9.0, 9.0, 9.0]


def test_invalid_sizes():
    with pytest.raises(ValueError):
        LogSink(capacity=0)
    with pytest.raises(ValueError):
        TrafficGenerator(window=0)
