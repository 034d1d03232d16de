"""Run a MapReduce application sequentially in a single process."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Iterable, Sequence

from mapred.keyvalue import KeyValue, group_by_key
from mapred.plugins import PluginError, load_app

MapFunc = Callable[[str, str], "list[KeyValue]"]
ReduceFunc = Callable[[str, "list[str]"], str]

DEFAULT_OUTPUT = "mr-out-0"


def run_sequential(
    mapf: MapFunc,
    reducef: ReduceFunc,
    filenames: Iterable[str],
    output: str | Path = DEFAULT_OUTPUT,
) -> Path:
    """Map every file, reduce each distinct key, and write ``key value`` lines to ``output``.

    Raises ``OSError`` if an input file cannot be read.
    """
    intermediate: list[KeyValue] = []
    for filename in filenames:
        content = Path(filename).read_text(encoding="utf-8", errors="replace")
        intermediate.extend(mapf(filename, content))

    out_path = Path(output)
    with out_path.open("w", encoding="utf-8") as out:
        for key, values in group_by_key(intermediate):
            out.write(f"{key} {reducef(key, values)}\n")
    return out_path


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry: ``mrsequential APP inputfiles...``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print("Usage: mrsequential xxx.so inputfiles...", file=sys.stderr)
        return 1
    try:
        mapf, reducef = load_app(args[0])
    except PluginError as exc:
        print(exc, file=sys.stderr)
        return 1
    try:
        run_sequential(mapf, reducef, args[1:])
    except OSError as exc:
        print(f"cannot open {exc.filename}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())