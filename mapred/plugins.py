"""Look up application map and reduce functions by name."""

from __future__ import annotations

from pathlib import PurePath
from types import ModuleType
from typing import Callable

from mapred.apps import crash, early_exit, indexer, jobcount, mtiming, nocrash, rtiming, wc
from mapred.keyvalue import KeyValue

MapFunc = Callable[[str, str], "list[KeyValue]"]
ReduceFunc = Callable[[str, "list[str]"], str]

_APPS: dict[str, ModuleType] = {
    "crash": crash,
    "early_exit": early_exit,
    "indexer": indexer,
    "jobcount": jobcount,
    "mtiming": mtiming,
    "nocrash": nocrash,
    "rtiming": rtiming,
    "wc": wc,
}


class PluginError(LookupError):
    """Raised when an application cannot be found."""


def available_apps() -> list[str]:
    """Return the names of the bundled applications."""
    return sorted(_APPS)


def load_app(name: str) -> tuple[MapFunc, ReduceFunc]:
    """Return ``(map_func, reduce_func)`` for an application.

    ``name`` may be a bare name such as ``wc`` or a path such as ``../mrapps/wc.so``;
    only the file stem is used.
    """
    stem = PurePath(name).stem
    module = _APPS.get(stem)
    if module is None:
        raise PluginError(f"cannot load plugin {name}")
    return module.map_func, module.reduce_func