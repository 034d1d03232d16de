"""An application that sometimes crashes and sometimes stalls, to test recovery."""

from __future__ import annotations

import os
import secrets
import time

from mapred.keyvalue import KeyValue


def maybe_crash() -> None:
    """Exit the process about a third of the time; stall up to 10s another third."""
    roll = secrets.randbelow(1000)
    if roll < 330:
        os._exit(1)
    elif roll < 660:
        delay_ms = secrets.randbelow(10 * 1000)
        time.sleep(delay_ms / 1000)


def map_func(filename: str, contents: str) -> list[KeyValue]:
    """Emit facts about the input file."""
    maybe_crash()
    return [
        KeyValue("a", filename),
        KeyValue("b", str(len(filename.encode("utf-8")))),
        KeyValue("c", str(len(contents.encode("utf-8")))),
        KeyValue("d", "xyzzy"),
    ]


def reduce_func(key: str, values: list[str]) -> str:
    """Return the values sorted and space-joined."""
    maybe_crash()
    return " ".join(sorted(values))