"""Task descriptions and a small JSON-over-Unix-socket RPC layer."""

from __future__ import annotations

import contextlib
import json
import os
import socket
import socketserver
import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Mapping


class TaskType(IntEnum):
    """Kind of work handed to a worker."""

    MAP = 0
    REDUCE = 1
    EXIT = 2


@dataclass(frozen=True)
class Task:
    """A unit of work: a map over one file or one reduce partition."""

    task_type: TaskType
    task_num: int = 0
    filename: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping of this task."""
        return {
            "task_type": int(self.task_type),
            "task_num": self.task_num,
            "filename": self.filename,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Task":
        """Build a task from a mapping produced by :meth:`to_dict`."""
        return cls(
            task_type=TaskType(data["task_type"]),
            task_num=int(data.get("task_num", 0)),
            filename=str(data.get("filename", "")),
        )


class RpcError(Exception):
    """Raised when a remote call fails on the server side."""


def coordinator_sock() -> str:
    """Return a per-user Unix socket path for the coordinator."""
    return f"/var/tmp/5840-mr-{os.getuid()}"


class _RequestHandler(socketserver.StreamRequestHandler):
    def handle(self) -> None:
        line = self.rfile.readline()
        if not line:
            return
        response = self.server.dispatch(line)
        self.wfile.write(json.dumps(response).encode("utf-8") + b"\n")


class _UnixServer(socketserver.ThreadingUnixStreamServer):
    daemon_threads = True

    def __init__(self, sockname: str, dispatch: Callable[[bytes], dict]):
        self.dispatch = dispatch
        super().__init__(sockname, _RequestHandler)


class RpcServer:
    """Serve named handlers over a Unix-domain socket, one request per connection."""

    def __init__(self, sockname: str, handlers: Mapping[str, Callable[..., Any]]):
        self.sockname = sockname
        self._handlers = dict(handlers)
        with contextlib.suppress(FileNotFoundError):
            os.remove(sockname)
        self._server = _UnixServer(sockname, self._dispatch)
        self._serving = False
        self._thread: threading.Thread | None = None

    def _dispatch(self, line: bytes) -> dict[str, Any]:
        try:
            request = json.loads(line)
            method = request["method"]
            params = request.get("params") or {}
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            return {"error": f"malformed request: {exc}"}
        handler = self._handlers.get(method)
        if handler is None:
            return {"error": f"rpc: can't find method {method}"}
        try:
            return {"result": handler(**params)}
        except Exception as exc:  # reported back to the caller
            return {"error": str(exc)}

    def serve_forever(self) -> None:
        """Handle requests until :meth:`close` is called."""
        self._serving = True
        try:
            self._server.serve_forever()
        finally:
            self._serving = False

    def start(self) -> None:
        """Serve requests on a background daemon thread."""
        self._thread = threading.Thread(target=self.serve_forever, daemon=True)
        self._thread.start()

    def close(self) -> None:
        """Stop serving and remove the socket file."""
        if self._serving or self._thread is not None:
            self._server.shutdown()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        self._server.server_close()
        with contextlib.suppress(FileNotFoundError):
            os.remove(self.sockname)

    def __enter__(self) -> "RpcServer":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def call(method: str, params: Mapping[str, Any] | None = None, sockname: str | None = None) -> Any:
    """Invoke ``method`` on the server and return its result.

    Raises :class:`RpcError` when the server reports an error, and ``OSError``
    when the server cannot be reached.
    """
    path = sockname or coordinator_sock()
    request = json.dumps({"method": method, "params": dict(params or {})}).encode("utf-8") + b"\n"
    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as conn:
        conn.connect(path)
        conn.sendall(request)
        with conn.makefile("rb") as reader:
            line = reader.readline()
    if not line:
        raise RpcError(f"{method}: connection closed without a reply")
    response = json.loads(line)
    if "error" in response:
        raise RpcError(response["error"])
    return response.get("result")