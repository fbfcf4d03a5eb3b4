"""Handler wrappers that log traffic and turn crashes into errors."""

from __future__ import annotations

import json
import logging
import traceback
from typing import Callable, Optional

from canyon.jsonrpc import ErrorCode, JsonRpcError, JsonRpcRequest, JsonRpcResponse

Handler = Callable[[JsonRpcRequest], Optional[JsonRpcResponse]]

_logger = logging.getLogger(__name__)


def _find_rpc_error(exc: BaseException) -> Optional[JsonRpcError]:
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, JsonRpcError):
            return current
        seen.add(id(current))
        current = current.__cause__
    return None


def logging_middleware(next_handler: Handler) -> Handler:
    """Log each request and what the wrapped handler returned or raised."""

    def handle(request: JsonRpcRequest) -> Optional[JsonRpcResponse]:
        request_id = request.id if request.id is not None else -1
        request_text = json.dumps(
            request.to_dict(), separators=(",", ":"), ensure_ascii=False, default=str
        )
        _logger.debug("received", extra={"attrs": {"id": request_id, "req": request_text}})
        try:
            response = next_handler(request)
        except Exception as exc:
            rpc_error = _find_rpc_error(exc)
            level = (
                logging.ERROR
                if rpc_error is None or rpc_error.code == ErrorCode.INTERNAL_ERROR
                else logging.DEBUG
            )
            _logger.log(level, "sending", extra={"attrs": {"id": request_id, "err": str(exc)}})
            raise
        if response is not None:
            _logger.debug(
                "sending", extra={"attrs": {"id": request_id, "res": response.to_json()}}
            )
        return response

    return handle


def recovery_middleware(next_handler: Handler) -> Handler:
    """Turn unexpected exceptions into a plain error carrying the traceback.

    JSON-RPC errors pass through untouched.
    """

    def handle(request: JsonRpcRequest) -> Optional[JsonRpcResponse]:
        try:
            return next_handler(request)
        except JsonRpcError:
            raise
        except Exception as exc:
            stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            raise RuntimeError(f"caught panic: {exc} at:\n{stack}") from exc

    return handle