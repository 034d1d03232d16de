import os
import tempfile
import threading
import uuid

import pytest

from mapred.coordinator import Coordinator, main, make_coordinator
from mapred.rpc import RpcError, TaskType, call


def _in_thread(fn, *args):
    result = {}

    def run():
        result["value"] = fn(*args)

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    return thread, result


@pytest.fixture
def coordinator():
    instances = []

    def build(files, n_reduce, task_timeout=60.0):
        c = Coordinator(files, n_reduce, task_timeout=task_timeout)
        instances.append(c)
        return c

    yield build
    for c in instances:
        c.close()


def _sockname():
    return os.path.join(tempfile.gettempdir(), f"mr-t-{uuid.uuid4().hex[:12]}")


def test_map_tasks_follow_input_files(coordinator):
    c = coordinator(["a.txt", "b.txt", "c.txt"], 2)
    tasks = [c.get_task() for _ in range(3)]
    assert [t.task_type for t in tasks] == [TaskType.MAP] * 3
    assert [t.task_num for t in tasks] == [0, 1, 2]
    assert [t.filename for t in tasks] == ["a.txt", "b.txt", "c.txt"]


def test_get_reduce_n(coordinator):
    c = coordinator(["a.txt"], 7)
    assert c.get_reduce_n() == 7


def test_reduce_waits_until_maps_complete(coordinator):
    c = coordinator(["a.txt"], 1)
    first = c.get_task()
    thread, result = _in_thread(c.get_task)
    thread.join(0.2)
    assert thread.is_alive()
    c.complete_map_task(first.task_num)
    thread.join(2)
    assert not thread.is_alive()
    assert result["value"].task_type is TaskType.REDUCE
    assert result["value"].task_num == 0


def test_full_job_finishes(coordinator):
    c = coordinator(["a.txt", "b.txt"], 3)
    for _ in range(2):
        c.complete_map_task(c.get_task().task_num)
    assert not c.done()
    reduce_nums = []
    for _ in range(3):
        task = c.get_task()
        assert task.task_type is TaskType.REDUCE
        reduce_nums.append(task.task_num)
        c.complete_reduce_task(task.task_num)
    assert sorted(reduce_nums) == [0, 1, 2]
    assert c.done()
    assert c.get_task().task_type is TaskType.EXIT


def test_waiting_worker_exits_when_job_done(coordinator):
    c = coordinator(["a.txt"], 1)
    c.complete_map_task(c.get_task().task_num)
    reduce_task = c.get_task()
    thread, result = _in_thread(c.get_task)
    thread.join(0.2)
    assert thread.is_alive()
    c.complete_reduce_task(reduce_task.task_num)
    thread.join(2)
    assert result["value"].task_type is TaskType.EXIT


def test_no_work_is_done_immediately(coordinator):
    c = coordinator([], 0)
    assert c.done()
    assert c.get_task().task_type is TaskType.EXIT


def test_complete_unknown_map_task_raises(coordinator):
    c = coordinator(["a.txt"], 1)
    with pytest.raises(ValueError, match="not even in progress"):
        c.complete_map_task(0)


def test_complete_map_task_twice_raises(coordinator):
    c = coordinator(["a.txt"], 1)
    c.complete_map_task(c.get_task().task_num)
    with pytest.raises(ValueError):
        c.complete_map_task(0)


def test_complete_unknown_reduce_task_raises(coordinator):
    c = coordinator([], 2)
    with pytest.raises(ValueError, match="reduce"):
        c.complete_reduce_task(1)


def test_slow_map_task_is_rescheduled(coordinator):
    c = coordinator(["a.txt", "b.txt"], 1, task_timeout=0.05)
    first = c.get_task()
    second = c.get_task()
    c.complete_map_task(second.task_num)
    thread, result = _in_thread(c.get_task)
    thread.join(2)
    assert not thread.is_alive()
    again = result["value"]
    assert again.task_type is TaskType.MAP
    assert (again.task_num, again.filename) == (first.task_num, first.filename)


def test_slow_reduce_task_is_rescheduled(coordinator):
    c = coordinator([], 1, task_timeout=0.05)
    first = c.get_task()
    assert first.task_type is TaskType.REDUCE
    thread, result = _in_thread(c.get_task)
    thread.join(2)
    assert result["value"].task_type is TaskType.REDUCE
    assert result["value"].task_num == first.task_num
    with pytest.raises(ValueError):
        c.complete_reduce_task(5)


def test_close_releases_waiting_callers(coordinator):
    c = coordinator(["a.txt"], 1)
    c.get_task()
    thread, result = _in_thread(c.get_task)
    thread.join(0.2)
    assert thread.is_alive()
    c.close()
    thread.join(2)
    assert result["value"].task_type is TaskType.EXIT


def test_rpc_round_trip():
    sockname = _sockname()
    c = make_coordinator(["in.txt"], 2, sockname)
    try:
        assert call("Coordinator.GetReduceN", {}, sockname) == 2
        task = call("Coordinator.GetTask", {}, sockname)
        assert task["task_type"] == int(TaskType.MAP)
        assert task["filename"] == "in.txt"
        with pytest.raises(RpcError, match="not even in progress"):
            call("Coordinator.CompleteMapTask", {"task_num": 5}, sockname)
        call("Coordinator.CompleteMapTask", {"task_num": task["task_num"], "filename": "in.txt"}, sockname)
        reduce_task = call("Coordinator.GetTask", {}, sockname)
        assert reduce_task["task_type"] == int(TaskType.REDUCE)
    finally:
        c.close()
    assert not os.path.exists(sockname)


def test_main_without_files_prints_usage(capsys):
    assert main([]) == 1
    assert "Usage: mrcoordinator" in capsys.readouterr().err