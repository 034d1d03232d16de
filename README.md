# mapred

A small MapReduce framework. One coordinator hands out map and reduce tasks
to any number of workers; the workers read the input files, run an
application's map and reduce functions, and write the results to
`mr-out-Y` files in the current directory.

It runs on POSIX systems: workers and coordinator talk over a UNIX-domain
socket.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running a job

Start the coordinator with the input files. It makes one map task per input
file and ten reduce tasks, and exits once every task has finished:

```
mrcoordinator pg-*.txt
```

Then start one or more workers in the same directory, each naming the
application to run:

```
mrworker wc
mrworker wc
```

The application may also be given as a path such as `../mrapps/wc.so`; only
the file's stem (`wc`) is used to pick a bundled application.

Workers reach the coordinator through the socket `/var/tmp/5840-mr-<uid>`,
one per user. A task that a worker has not reported finished within ten
seconds goes back to the pending pool and is handed to another worker (the
coordinator prints a line saying so), so workers may crash or stall without
losing the job. Reduce tasks are handed out only after every map task has
finished. A worker exits when the coordinator tells it the job is done; it
exits with status 1 if the coordinator cannot be reached or rejects a call.

Map output is split across the reduce tasks by a 32-bit FNV-1a hash of each
key (`mapred.keyvalue.ihash`) and kept in intermediate files named `mr-X-Y`
(map task X, reduce task Y), one JSON object per line. Each reduce task
writes `mr-out-Y`, one line per key in key order: the key, a space, and the
reduced value. Files are written under a temporary name and renamed when
complete.

To check results, run the same application in one process, without a
coordinator:

```
mrsequential wc pg-*.txt
```

This writes everything to `mr-out-0`; sorting the outputs of both runs
should give the same lines.

## Applications

The applications live in `mapred.apps`, each with a `map_func` and a
`reduce_func`. `mapred.plugins.available_apps()` lists their names and
`mapred.plugins.load_app(name)` returns the two functions of one of them,
raising `mapred.plugins.PluginError` for an unknown name.

- `wc` — word count.
- `indexer` — for each word, the number of documents holding it and their sorted names.
- `crash` — kills the worker process or stalls it at random, to exercise recovery.
- `nocrash` — the same output as `crash`, without the failures.
- `early_exit` — one count per input file; reduces of keys containing `sherlock` or `tom` take three seconds.
- `jobcount` — leaves a marker file per map run and reports how many there are.
- `mtiming`, `rtiming` — report how many workers ran map or reduce tasks at the same time.

## Using it from Python

```python
from mapred.apps import wc
from mapred.sequential import run_sequential

run_sequential(wc.map_func, wc.reduce_func, ["pg-being_ernest.txt"], "mr-out-0")
```

A coordinator can be run in-process with
`mapred.coordinator.make_coordinator(files, n_reduce, sockname)`, polling
`done()` and calling `close()` when finished (it is also a context manager),
and a worker with `mapred.worker.worker(mapf, reducef, sockname)`. Single
tasks can be run directly with `mapred.worker.run_map_task` and
`mapred.worker.run_reduce_task`.

## What it does not do

Applications are not loaded from files: only the applications bundled in
`mapred.apps` can be run by the commands. Workers and coordinator must share
a machine and a working directory, since tasks are exchanged over a local
socket and intermediate files are read from the current directory.