"""The coordinator: hands out map and reduce tasks and tracks their progress."""

from __future__ import annotations

import sys
import threading
import time
from typing import Any, Iterable, Sequence

from mapred.rpc import RpcServer, Task, TaskType, coordinator_sock

TASK_TIMEOUT = 10.0
DEFAULT_N_REDUCE = 10


class Coordinator:
    """Schedule map tasks over input files, then reduce tasks over partitions.

    A task not reported complete within ``task_timeout`` seconds is put back
    into the pending pool so another worker can pick it up.
    """

    def __init__(self, files: Iterable[str], n_reduce: int, task_timeout: float = TASK_TIMEOUT):
        self.n_reduce = n_reduce
        self.task_timeout = task_timeout
        self._cond = threading.Condition()
        self._map_pending: dict[int, str] = dict(enumerate(files))
        self._map_in_progress: dict[int, str] = {}
        self._reduce_pending: dict[int, None] = dict.fromkeys(range(n_reduce))
        self._reduce_in_progress: dict[int, None] = {}
        self._reduce_completed: set[int] = set()
        self._timers: dict[tuple[TaskType, int], threading.Timer] = {}
        self._closed = False
        self._server: RpcServer | None = None

    def _is_done(self) -> bool:
        return (
            not self._map_pending
            and not self._map_in_progress
            and not self._reduce_pending
            and not self._reduce_in_progress
            and len(self._reduce_completed) == self.n_reduce
        )

    def done(self) -> bool:
        """Return whether every map and reduce task has completed."""
        with self._cond:
            return self._is_done()

    def get_task(self) -> Task:
        """Return the next task, blocking while none can be handed out yet.

        Returns an ``EXIT`` task once the whole job is finished or the
        coordinator has been closed.
        """
        with self._cond:
            while True:
                if self._closed or self._is_done():
                    return Task(TaskType.EXIT)
                if self._map_pending:
                    task_num = next(iter(self._map_pending))
                    filename = self._map_pending.pop(task_num)
                    self._map_in_progress[task_num] = filename
                    task = Task(TaskType.MAP, task_num, filename)
                    self._track(task)
                    return task
                if not self._map_in_progress and self._reduce_pending:
                    task_num = next(iter(self._reduce_pending))
                    del self._reduce_pending[task_num]
                    self._reduce_in_progress[task_num] = None
                    task = Task(TaskType.REDUCE, task_num)
                    self._track(task)
                    return task
                self._cond.wait()

    def complete_map_task(self, task_num: int) -> None:
        """Mark a map task as finished; raise ``ValueError`` if it was not in progress."""
        with self._cond:
            if task_num not in self._map_in_progress:
                raise ValueError(
                    f"worker said map taskNum {task_num} completed when it was not even in progress"
                )
            del self._map_in_progress[task_num]
            self._cancel_timer((TaskType.MAP, task_num))
            self._cond.notify_all()

    def complete_reduce_task(self, task_num: int) -> None:
        """Mark a reduce task as finished; raise ``ValueError`` if it was not in progress."""
        with self._cond:
            if task_num not in self._reduce_in_progress:
                raise ValueError(
                    f"worker said {task_num} taskNum reduce completed when it was not even in progress"
                )
            del self._reduce_in_progress[task_num]
            self._reduce_completed.add(task_num)
            self._cancel_timer((TaskType.REDUCE, task_num))
            self._cond.notify_all()

    def get_reduce_n(self) -> int:
        """Return the number of reduce tasks."""
        return self.n_reduce

    def _track(self, task: Task) -> None:
        key = (task.task_type, task.task_num)
        self._cancel_timer(key)
        timer = threading.Timer(self.task_timeout, self._expire, args=(task,))
        timer.daemon = True
        self._timers[key] = timer
        timer.start()

    def _cancel_timer(self, key: tuple[TaskType, int]) -> None:
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

    def _expire(self, task: Task) -> None:
        with self._cond:
            if self._closed:
                return
            if task.task_type is TaskType.MAP:
                if task.task_num not in self._map_in_progress:
                    return
                del self._map_in_progress[task.task_num]
                self._map_pending[task.task_num] = task.filename
            elif task.task_type is TaskType.REDUCE:
                if task.task_num not in self._reduce_in_progress:
                    return
                del self._reduce_in_progress[task.task_num]
                self._reduce_pending[task.task_num] = None
            else:
                return
            self._timers.pop((task.task_type, task.task_num), None)
            print(
                f"{int(task.task_type)} task num {task.task_num} {task.filename} "
                f"took longer than {self.task_timeout:g}s, rescheduling it..."
            )
            self._cond.notify_all()

    def _rpc_get_task(self, **_: Any) -> dict[str, Any]:
        return self.get_task().to_dict()

    def _rpc_complete_map(self, task_num: int, **_: Any) -> None:
        self.complete_map_task(int(task_num))

    def _rpc_complete_reduce(self, task_num: int, **_: Any) -> None:
        self.complete_reduce_task(int(task_num))

    def _rpc_get_reduce_n(self, **_: Any) -> int:
        return self.get_reduce_n()

    def serve(self, sockname: str | None = None) -> None:
        """Start answering worker RPCs on a Unix-domain socket in the background."""
        handlers = {
            "Coordinator.GetTask": self._rpc_get_task,
            "Coordinator.CompleteMapTask": self._rpc_complete_map,
            "Coordinator.CompleteReduceTask": self._rpc_complete_reduce,
            "Coordinator.GetReduceN": self._rpc_get_reduce_n,
        }
        self._server = RpcServer(sockname or coordinator_sock(), handlers)
        self._server.start()

    def close(self) -> None:
        """Stop timers, release blocked callers and stop serving."""
        with self._cond:
            self._closed = True
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()
            self._cond.notify_all()
        if self._server is not None:
            self._server.close()
            self._server = None

    def __enter__(self) -> "Coordinator":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def make_coordinator(
    files: Iterable[str], n_reduce: int, sockname: str | None = None
) -> Coordinator:
    """Create a coordinator for ``files`` with ``n_reduce`` reduce tasks and start serving."""
    coordinator = Coordinator(files, n_reduce)
    coordinator.serve(sockname)
    return coordinator


def main(argv: Sequence[str] | None = None) -> int:
    """Run a coordinator over the given input files until the job is done."""
    files = list(sys.argv[1:] if argv is None else argv)
    if not files:
        print("Usage: mrcoordinator inputfiles...", file=sys.stderr)
        return 1
    coordinator = make_coordinator(files, DEFAULT_N_REDUCE)
    try:
        while not coordinator.done():
            time.sleep(1)
        time.sleep(1)
    finally:
        coordinator.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())