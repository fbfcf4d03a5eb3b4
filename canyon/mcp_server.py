"""The model context protocol server and its JSON-RPC method dispatch."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from canyon.jsonrpc import (
    ErrorCode,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    error_from_exception,
)
from canyon.mcp_types import (
    CallToolRequest,
    CallToolResponse,
    Content,
    GetPromptRequest,
    GetPromptResponse,
    Implementation,
    InitializeRequest,
    InitializeResponse,
    ListPromptsRequest,
    ListPromptsResponse,
    ListResourcesRequest,
    ListResourcesResponse,
    ListResourceTemplatesRequest,
    ListResourceTemplatesResponse,
    ListToolsRequest,
    ListToolsResponse,
    ReadResourceRequest,
    ReadResourceResponse,
    ServerCapabilities,
    SetLevelRequest,
    SetLevelResponse,
    ToolResponse,
    text_content_with_audience,
)
from canyon.util import module_name, module_version

_logger = logging.getLogger(__name__)

Handler = Callable[[JsonRpcRequest], Optional[JsonRpcResponse]]


@dataclass
class Tool:
    """A named tool with an input schema and the function that runs it.

    ``call`` receives the tool arguments and returns a list of content items;
    an exception it raises is reported to the client as a tool error.
    """

    name: str
    description: str
    input_schema: Dict[str, Any] = field(default_factory=dict)
    call: Callable[[Dict[str, Any]], List[Content]] = field(
        default=lambda arguments: [], repr=False
    )


class McpServer:
    """Answers model context protocol requests from a list of tools."""

    def __init__(self, instructions: str = "", tools: Sequence[Tool] = ()):
        self.instructions = instructions
        self.tools: List[Tool] = list(tools)
        self._lock = threading.Lock()

    def initialize(self, request: InitializeRequest) -> InitializeResponse:
        return InitializeResponse(
            protocol_version=request.protocol_version,
            server_info=Implementation(name=module_name(), version=module_version()),
            capabilities=ServerCapabilities(tools_list_changed=True),
            instructions=self.instructions,
        )

    def list_tools(self, request: ListToolsRequest) -> ListToolsResponse:
        with self._lock:
            tools = list(self.tools)
        return ListToolsResponse(
            tools=[
                ToolResponse(
                    name=tool.name,
                    description=tool.description,
                    input_schema=tool.input_schema,
                )
                for tool in tools
            ]
        )

    def call_tool(self, request: CallToolRequest) -> CallToolResponse:
        with self._lock:
            tool = next((t for t in self.tools if t.name == request.name), None)
        if tool is None:
            raise JsonRpcError(ErrorCode.INVALID_REQUEST, "tool not found")
        try:
            contents = tool.call(request.arguments)
        except Exception as exc:
            return CallToolResponse(
                contents=[text_content_with_audience(str(exc), "assistant")],
                is_error=True,
            )
        return CallToolResponse(contents=list(contents or []), is_error=False)

    def list_prompts(self, request: ListPromptsRequest) -> ListPromptsResponse:
        return ListPromptsResponse(prompts=[])

    def get_prompt(self, request: GetPromptRequest) -> GetPromptResponse:
        raise JsonRpcError(ErrorCode.INVALID_PARAMS, "Unknown prompt")

    def list_resources(self, request: ListResourcesRequest) -> ListResourcesResponse:
        return ListResourcesResponse(resources=[])

    def read_resource(self, request: ReadResourceRequest) -> ReadResourceResponse:
        raise JsonRpcError(ErrorCode.NOT_FOUND, "Unknown resource")

    def list_resource_templates(
        self, request: ListResourceTemplatesRequest
    ) -> ListResourceTemplatesResponse:
        return ListResourceTemplatesResponse(resource_templates=[])

    def set_level(self, request: SetLevelRequest) -> SetLevelResponse:
        return SetLevelResponse()

    def inject_tools(self, *args: Tool) -> None:
        """Add tools to the server while it may be serving requests."""
        with self._lock:
            self.tools.extend(args)


def _dispatch(request: JsonRpcRequest, parse: Callable[[Any], Any], method: Callable[[Any], Any]) -> JsonRpcResponse:
    try:
        parsed = parse(request.params)
    except ValueError as exc:
        raw = json.dumps(request.params, separators=(",", ":"), default=str)
        _logger.error(
            "failed to unmarshal request",
            extra={"attrs": {"err": str(exc), "request": raw}},
        )
        raise JsonRpcError(ErrorCode.INVALID_PARAMS, str(exc), {"raw": raw}) from exc
    try:
        result = method(parsed)
    except Exception as exc:
        _logger.error("returning json rpc error", extra={"attrs": {"err": str(exc)}})
        raise error_from_exception(exc) from exc
    request_id = request.id if request.id is not None else -1
    return JsonRpcResponse.result(request_id, result.to_dict())


def as_handler(inner: McpServer) -> Handler:
    """Route JSON-RPC requests to the matching method of ``inner``."""
    routes = {
        "initialize": (InitializeRequest.from_dict, inner.initialize),
        "tools/list": (ListToolsRequest.from_dict, inner.list_tools),
        "tools/call": (CallToolRequest.from_dict, inner.call_tool),
        "prompts/list": (ListPromptsRequest.from_dict, inner.list_prompts),
        "prompts/get": (GetPromptRequest.from_dict, inner.get_prompt),
        "resources/list": (ListResourcesRequest.from_dict, inner.list_resources),
        "resources/templates/list": (
            ListResourceTemplatesRequest.from_dict,
            inner.list_resource_templates,
        ),
        "resources/read": (ReadResourceRequest.from_dict, inner.read_resource),
        "logging/setLevel": (SetLevelRequest.from_dict, inner.set_level),
    }

    def handle(request: JsonRpcRequest) -> Optional[JsonRpcResponse]:
        route = routes.get(request.method)
        if route is not None:
            parse, method = route
            return _dispatch(request, parse, method)
        if request.method.startswith("notifications/"):
            _logger.debug(
                "dropping unsupported notification",
                extra={"attrs": {"method": request.method}},
            )
            return None
        _logger.warning("ignoring unknown method", extra={"attrs": {"method": request.method}})
        raise JsonRpcError(
            ErrorCode.METHOD_NOT_FOUND, f"method not found: {request.method}"
        )

    return handle