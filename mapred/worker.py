"""The worker: asks the coordinator for tasks and runs map and reduce over files."""

from __future__ import annotations

import contextlib
import logging
import os
import sys
import tempfile
from collections import defaultdict
from pathlib import Path
from typing import IO, Callable, Sequence

from mapred.keyvalue import KeyValue, decode_pairs, encode_pairs, group_by_key, ihash
from mapred.plugins import PluginError, load_app
from mapred.rpc import RpcError, Task, TaskType, call

MapFunc = Callable[[str, str], "list[KeyValue]"]
ReduceFunc = Callable[[str, "list[str]"], str]

log = logging.getLogger(__name__)


def _atomic_write(directory: Path, name: str, write: Callable[[IO[str]], None]) -> Path:
    """Write through a temporary file in ``directory`` and rename it to ``name``."""
    fd, tmp_name = tempfile.mkstemp(prefix=f"{name}-", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as stream:
            write(stream)
        target = directory / name
        os.replace(tmp_name, target)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.remove(tmp_name)
        raise
    return target


def run_map_task(
    mapf: MapFunc,
    filename: str,
    task_num: int,
    n_reduce: int,
    directory: str | Path = ".",
) -> list[Path]:
    """Map one input file and write its pairs to ``mr-<task>-<reduce>`` files.

    Pairs are partitioned by ``ihash(key) % n_reduce``; only partitions that
    receive pairs get a file. Returns the written paths ordered by partition.
    Raises ``OSError`` if the input cannot be read and ``ValueError`` if
    ``n_reduce`` is not positive.
    """
    if n_reduce <= 0:
        raise ValueError(f"n_reduce must be positive, got {n_reduce}")
    content = Path(filename).read_text(encoding="utf-8", errors="replace")
    partitions: dict[int, list[KeyValue]] = defaultdict(list)
    for kv in mapf(filename, content):
        partitions[ihash(kv.key) % n_reduce].append(kv)

    out_dir = Path(directory)
    return [
        _atomic_write(
            out_dir,
            f"mr-{task_num}-{reduce_num}",
            lambda stream, pairs=partitions[reduce_num]: encode_pairs(pairs, stream),
        )
        for reduce_num in sorted(partitions)
    ]


def run_reduce_task(reducef: ReduceFunc, task_num: int, directory: str | Path = ".") -> Path:
    """Reduce every ``mr-*-<task_num>`` file in ``directory`` into ``mr-out-<task_num>``.

    Each output line is ``key value`` for one distinct key, in key order.
    """
    out_dir = Path(directory)
    pairs: list[KeyValue] = []
    for path in sorted(out_dir.glob(f"mr-*-{task_num}")):
        with path.open(encoding="utf-8") as stream:
            pairs.extend(decode_pairs(stream))

    def write(stream: IO[str]) -> None:
        for key, values in group_by_key(pairs):
            stream.write(f"{key} {reducef(key, values)}\n")

    return _atomic_write(out_dir, f"mr-out-{task_num}", write)


def worker(mapf: MapFunc, reducef: ReduceFunc, sockname: str | None = None) -> None:
    """Fetch and run tasks from the coordinator until it says to exit.

    Intermediate and output files go to the current directory. Raises
    ``OSError`` if the coordinator cannot be reached and :class:`RpcError`
    if it rejects a call.
    """
    n_reduce = int(call("Coordinator.GetReduceN", {}, sockname))
    while True:
        reply = call("Coordinator.GetTask", {}, sockname)
        try:
            task = Task.from_dict(reply)
        except (ValueError, KeyError, TypeError):
            log.warning("unknown task type %r", reply)
            continue

        if task.task_type is TaskType.MAP:
            run_map_task(mapf, task.filename, task.task_num, n_reduce)
            call("Coordinator.CompleteMapTask", {"task_num": task.task_num}, sockname)
        elif task.task_type is TaskType.REDUCE:
            run_reduce_task(reducef, task.task_num)
            call("Coordinator.CompleteReduceTask", {"task_num": task.task_num}, sockname)
        else:
            log.info("all tasks are finished, exiting...")
            return


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry: ``mrworker APP``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        print("Usage: mrworker xxx.so", file=sys.stderr)
        return 1
    try:
        mapf, reducef = load_app(args[0])
    except PluginError as exc:
        print(exc, file=sys.stderr)
        return 1
    try:
        worker(mapf, reducef)
    except (OSError, RpcError) as exc:
        print(f"worker failed: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main())