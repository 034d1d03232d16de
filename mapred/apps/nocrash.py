"""The crash application without the crashes."""

from __future__ import annotations

from mapred.keyvalue import KeyValue


def map_func(filename: str, contents: str) -> list[KeyValue]:
    """Emit facts about the input file."""
    return [
        KeyValue("a", filename),
        KeyValue("b", str(len(filename.encode("utf-8")))),
        KeyValue("c", str(len(contents.encode("utf-8")))),
        KeyValue("d", "xyzzy"),
    ]


def reduce_func(key: str, values: list[str]) -> str:
    """Return the values sorted and space-joined."""
    return " ".join(sorted(values))