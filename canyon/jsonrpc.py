"""JSON-RPC 2.0 requests, responses and errors."""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Mapping, Optional

_VERSION = "2.0"
_REQUEST_FIELDS = ("jsonrpc", "id", "method", "params")


class ErrorCode(IntEnum):
    """Standard JSON-RPC error codes and the resource-not-found code."""

    NOT_FOUND = -32002
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class JsonRpcError(Exception):
    """An error that is sent back to the client as a JSON-RPC error object."""

    def __init__(self, code: int, message: str, data: Optional[Mapping[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = dict(data) if data else {}

    def __str__(self) -> str:
        if self.data:
            return f"json rpc error: {int(self.code)}: {self.message} ({self.data!r})"
        return f"json rpc error: {int(self.code)}: {self.message}"

    def to_dict(self) -> dict:
        out = {"code": int(self.code), "message": self.message}
        if self.data:
            out["data"] = self.data
        return out


@dataclass(frozen=True)
class JsonRpcRequest:
    """A request or notification received from a client."""

    method: str
    id: Optional[int] = None
    params: Any = None
    notifier: Optional[Callable[[Any], None]] = field(
        default=None, compare=False, repr=False
    )

    @classmethod
    def from_dict(cls, data: Any) -> "JsonRpcRequest":
        """Build a request from a decoded JSON object, rejecting unknown fields."""
        if not isinstance(data, dict):
            raise ValueError("a json rpc request must be a JSON object")
        values = {}
        for key, value in data.items():
            name = key.lower() if isinstance(key, str) else key
            if name not in _REQUEST_FIELDS:
                raise ValueError(f"json: unknown field {key!r}")
            values[name] = value
        request_id = values.get("id")
        if request_id is not None and (
            isinstance(request_id, bool) or not isinstance(request_id, int)
        ):
            raise ValueError("json rpc request id must be an integer or null")
        method = values.get("method")
        if method is None:
            method = ""
        if not isinstance(method, str):
            raise ValueError("json rpc request method must be a string")
        return cls(method=method, id=request_id, params=values.get("params"))

    @classmethod
    def from_json(cls, line: "str | bytes") -> "JsonRpcRequest":
        """Parse a request from one line of JSON text."""
        return cls.from_dict(json.loads(line))

    def to_dict(self) -> dict:
        out = {"jsonrpc": _VERSION, "id": self.id, "method": self.method}
        if self.params is not None:
            out["params"] = self.params
        return out

    def with_notifier(self, notify: Callable[[Any], None]) -> "JsonRpcRequest":
        """Return a copy whose handler can send notifications through ``notify``."""
        return dataclasses.replace(self, notifier=notify)

    def notify(self, notification: Any) -> None:
        """Send a server notification while this request is being handled."""
        if self.notifier is None:
            raise RuntimeError("the request has no notification channel")
        self.notifier(notification)


@dataclass(frozen=True)
class JsonRpcResponse:
    """A response to a request, or a notification sent by the server."""

    id: Optional[int] = None
    result: Any = None
    error: Optional[JsonRpcError] = None
    method: Optional[str] = None
    params: Any = None

    @classmethod
    def result(cls, request_id: int, result: Any) -> "JsonRpcResponse":
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: int, error: JsonRpcError) -> "JsonRpcResponse":
        return cls(id=request_id, error=error)

    @classmethod
    def notification(cls, method: str, params: Any = None) -> "JsonRpcResponse":
        return cls(method=method, params=params)

    def to_dict(self) -> dict:
        out: dict = {"jsonrpc": _VERSION}
        if self.id is not None or self.result is not None or self.error is not None:
            out["id"] = self.id
            if self.result is not None:
                out["result"] = self.result
            if self.error is not None:
                out["error"] = self.error.to_dict()
        if self.method is not None:
            out["method"] = self.method
            if self.params is not None:
                out["params"] = self.params
        return out

    def to_json(self) -> str:
        """Encode as compact JSON without a trailing newline."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)


def error_from_exception(exc: BaseException) -> JsonRpcError:
    """Find a JsonRpcError in the cause chain of ``exc`` or wrap it as internal."""
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, JsonRpcError):
            return current
        seen.add(id(current))
        current = current.__cause__
    return JsonRpcError(ErrorCode.INTERNAL_ERROR, str(exc))