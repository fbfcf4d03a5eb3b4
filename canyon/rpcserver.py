"""A request/response server that runs a handler on a worker thread."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable, Optional

from canyon.jsonrpc import ErrorCode, JsonRpcError, JsonRpcRequest, JsonRpcResponse

Handler = Callable[[JsonRpcRequest], Optional[JsonRpcResponse]]

_logger = logging.getLogger(__name__)
_DONE = object()


def _as_rpc_error(exc: BaseException) -> JsonRpcError:
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, JsonRpcError):
            return current
        seen.add(id(current))
        current = current.__cause__
    return JsonRpcError(
        ErrorCode.INTERNAL_ERROR, "internal error", {"message": str(exc)}
    )


class Server:
    """Feeds requests to a handler one at a time and queues its responses.

    Handlers may send notifications through ``request.notify``; they are
    queued alongside the responses. Errors raised by the handler become
    JSON-RPC error responses.
    """

    def __init__(self, handler: Handler):
        self.handler = handler
        self._in: queue.Queue = queue.Queue()
        self._out: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._finished = False
        self._worker = threading.Thread(target=self._run, daemon=True)
        self._worker.start()

    def put(self, request: JsonRpcRequest) -> None:
        """Queue a request for the handler."""
        with self._lock:
            if self._closed:
                raise RuntimeError("the server is closed")
            self._in.put(request)

    def get(self, timeout: Optional[float] = None) -> Optional[JsonRpcResponse]:
        """Return the next response or notification.

        Returns None once the server is closed and every output has been read.
        Raises TimeoutError when nothing arrives within ``timeout`` seconds.
        """
        if self._finished:
            return None
        try:
            item = self._out.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError("no response is ready") from None
        if item is _DONE:
            self._finished = True
            return None
        return item

    def close(self) -> None:
        """Stop accepting requests; those already queued are still handled."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._in.put(_DONE)

    def __enter__(self) -> "Server":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _forward(self, notification: Any) -> None:
        if isinstance(notification, JsonRpcResponse):
            response = notification
        else:
            response = notification.to_response()
        self._out.put(response)
        _logger.debug("forwarded notification", extra={"attrs": {"res": response.to_json()}})

    def _run(self) -> None:
        try:
            while True:
                request = self._in.get()
                if request is _DONE:
                    return
                request = request.with_notifier(self._forward)
                try:
                    response = self.handler(request)
                except Exception as exc:
                    request_id = request.id if request.id is not None else -1
                    response = JsonRpcResponse.failure(request_id, _as_rpc_error(exc))
                if response is not None:
                    self._out.put(response)
        finally:
            self._out.put(_DONE)