from unittest import mock

from mapred.apps.jobcount import map_func, reduce_func
from mapred.keyvalue import KeyValue


@mock.patch("time.sleep")
def test_map_writes_marker_and_sleeps(sleep_mock, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert map_func("f", "") == [KeyValue("a", "x")]
    markers = list(tmp_path.glob("mr-worker-jobcount-*"))
    assert len(markers) == 1
    assert markers[0].read_text() == "x"
    (delay,), _ = sleep_mock.call_args
    assert 2.0 <= delay < 5.0


@mock.patch("time.sleep")
def test_reduce_counts_invocations(_sleep, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "unrelated.txt").write_text("y")
    assert reduce_func("a", ["x"]) == "0"
    for _ in range(3):
        map_func("f", "")
    assert len(list(tmp_path.glob("mr-worker-jobcount-*"))) == 3
    assert reduce_func("a", ["x"]) == str(3)