"""Key/value pairs, partition hashing and the intermediate file format."""

from __future__ import annotations

import json
from dataclasses import dataclass
from itertools import groupby
from operator import attrgetter
from typing import IO, Iterable, Iterator

_FNV32_OFFSET = 0x811C9DC5
_FNV32_PRIME = 0x01000193


@dataclass(frozen=True)
class KeyValue:
    """One pair emitted by a map function."""

    key: str
    value: str


def ihash(key: str) -> int:
    """Return the non-negative 32-bit FNV-1a hash of ``key``."""
    h = _FNV32_OFFSET
    for byte in key.encode("utf-8"):
        h = ((h ^ byte) * _FNV32_PRIME) & 0xFFFFFFFF
    return h & 0x7FFFFFFF


def group_by_key(pairs: Iterable[KeyValue]) -> Iterator[tuple[str, list[str]]]:
    """Yield ``(key, values)`` for each distinct key in ascending key order."""
    ordered = sorted(pairs, key=attrgetter("key"))
    for key, group in groupby(ordered, key=attrgetter("key")):
        yield key, [kv.value for kv in group]


def encode_pairs(pairs: Iterable[KeyValue], stream: IO[str]) -> None:
    """Write each pair as one JSON object per line."""
    for kv in pairs:
        stream.write(
            json.dumps({"Key": kv.key, "Value": kv.value}, separators=(",", ":"), ensure_ascii=False)
        )
        stream.write("\n")


def decode_pairs(stream: IO[str]) -> Iterator[KeyValue]:
    """Yield pairs written by :func:`encode_pairs`, stopping at the first bad record."""
    for line in stream:
        if not line.strip():
            continue
        try:
            data = json.loads(line)
        except ValueError:
            return
        if not isinstance(data, dict):
            return
        key = data.get("Key", "")
        value = data.get("Value", "")
        if not isinstance(key, str) or not isinstance(value, str):
            return
        yield KeyValue(key, value)