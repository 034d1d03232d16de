"""Counts how many times map tasks run, to detect needless re-execution."""

from __future__ import annotations

import itertools
import os
import random
import time
from pathlib import Path

from mapred.keyvalue import KeyValue

_PREFIX = "mr-worker-jobcount"
_invocations = itertools.count()


def map_func(filename: str, contents: str) -> list[KeyValue]:
    """Record this invocation in a marker file, then stall 2-5 seconds."""
    Path(f"{_PREFIX}-{os.getpid()}-{next(_invocations)}").write_text("x")
    time.sleep((2000 + random.randrange(3000)) / 1000)
    return [KeyValue("a", "x")]


def reduce_func(key: str, values: list[str]) -> str:
    """Return how many map invocations left marker files in the current directory."""
    return str(sum(1 for entry in os.scandir(".") if entry.name.startswith(_PREFIX)))