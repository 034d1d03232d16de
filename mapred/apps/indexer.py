"""Inverted index: for each word, the documents that contain it."""

from __future__ import annotations

from itertools import groupby

from mapred.keyvalue import KeyValue


def map_func(document: str, value: str) -> list[KeyValue]:
    """Emit ``(word, document)`` once for every distinct word in ``value``."""
    words = ("".join(run) for is_letter, run in groupby(value, str.isalpha) if is_letter)
    return [KeyValue(word, document) for word in dict.fromkeys(words)]


def reduce_func(key: str, values: list[str]) -> str:
    """Return the document count followed by the sorted, comma-joined documents."""
    documents = sorted(values)
    return f"{len(documents)} {','.join(documents)}"