"""Tools that list and call the remote paths of an organization."""

from __future__ import annotations

import secrets
from http import HTTPStatus
from typing import Any, Dict, List

from canyon.humanitec import ApiResponse, HumanitecClient, HumanitecError
from canyon.mcp_server import Tool
from canyon.mcp_types import Content, ToolResponse, text_content
from canyon.util import pretty_json

_NO_PATHS = "There are no paths available in this org"
_FEATURE_DISABLED = (HTTPStatus.FORBIDDEN, HTTPStatus.METHOD_NOT_ALLOWED)

_LIST_NAME = "list-canyon-paths"
_LIST_DESCRIPTION = (
    "Returns a list of 'paths' supported by the canyon MCP server.\n"
    "Paths are remote functions which can be used to query or achieve a wide array of "
    "functionality.\n"
    "The list of available paths may change over time so consider listing the available paths "
    "when there is low confidence that an existing paths can be used to solve the user query.\n"
    "Canyon paths are not tools themselves and must be called through the call-canyon-path tool."
)
_LIST_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["org_id"],
    "properties": {
        "org_id": {"type": "string", "description": "The organization ID"},
    },
}

_CALL_NAME = "call-canyon-path"
_CALL_DESCRIPTION = "Call a canyon path previously discovered through list-canyon-paths"
_CALL_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "org_id": {
            "type": "string",
            "description": "The organization ID of the org in which the path is defined",
        },
        "name": {"type": "string", "description": "The name of the path to call"},
        "arguments": {
            "type": "object",
            "description": "The arguments of the path to call, these must match the input schema",
        },
        "idempotency_key": {
            "type": "string",
            "description": (
                "An idempotency key to use to continue the request if it times out, "
                "this will be created for you on the first attempt"
            ),
        },
    },
    "required": ["org_id", "name", "arguments", "idempotency_key"],
}


def _required_string(arguments: Dict[str, Any], key: str) -> str:
    value = arguments.get(key)
    if not isinstance(value, str):
        raise TypeError(f"argument {key!r} must be a string")
    return value


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _unexpected(response: ApiResponse) -> HumanitecError:
    return HumanitecError(
        f"unexpected response from humanitec: {response.status} {response.text}"
    )


def _list_paths(arguments: Dict[str, Any]) -> List[Content]:
    client = HumanitecClient.from_current_token()
    org_id = _required_string(arguments, "org_id")
    summaries = client.list_action_pipeline_summaries(org_id)
    if summaries.data is None:
        if summaries.status_code in _FEATURE_DISABLED:
            return [text_content(_NO_PATHS)]
        raise _unexpected(summaries)
    if not isinstance(summaries.data, list):
        raise _unexpected(summaries)

    tools: List[Dict[str, Any]] = []
    for summary in summaries.data:
        if not isinstance(summary, dict):
            raise _unexpected(summaries)
        pipeline = client.get_action_pipeline(
            _text(summary.get("org_id")), _text(summary.get("id"))
        )
        if not isinstance(pipeline.data, dict):
            raise _unexpected(pipeline)
        schema = pipeline.data.get("inputs_jsonschema")
        tools.append(
            ToolResponse(
                name=_text(pipeline.data.get("id")),
                description=_text(pipeline.data.get("description")),
                input_schema=schema if isinstance(schema, dict) else None,
            ).to_dict()
        )

    listing = pretty_json(tools or None)
    return [text_content("Here's an array of the current canyon tools in JSON: %s", listing)]


def _call_path(arguments: Dict[str, Any]) -> List[Content]:
    name = _text(arguments.get("name"))
    inputs = arguments.get("arguments")
    if not isinstance(inputs, dict):
        inputs = None

    client = HumanitecClient.from_current_token()

    idempotency_key = _text(arguments.get("idempotency_key"))
    if not idempotency_key:
        idempotency_key = secrets.token_hex(10)

    org_id = _required_string(arguments, "org_id")
    response = client.call_action_pipeline(org_id, name, inputs, idempotency_key)
    if response.data is None:
        if response.status_code in _FEATURE_DISABLED:
            return [text_content(_NO_PATHS)]
        if response.status_code == HTTPStatus.GATEWAY_TIMEOUT:
            return [
                text_content(
                    "The path timed out after executing for some time, you can make the "
                    "identity request with idempotency key '%s' to continue waiting",
                    idempotency_key,
                )
            ]
        raise HumanitecError(
            "unexpected response from humanitec, you can be able to continue the request "
            f"with idempotency key '{idempotency_key}' to continue waiting: "
            f"{response.status} {response.text}"
        )
    if not isinstance(response.data, dict):
        raise _unexpected(response)
    result = pretty_json({"outputs": response.data.get("outputs")})
    return [text_content("The path returned the following result in JSON: %s", result)]


def new_list_paths_tool() -> Tool:
    """Build the tool listing the paths available in an organization."""
    return Tool(
        name=_LIST_NAME, description=_LIST_DESCRIPTION, input_schema=_LIST_SCHEMA, call=_list_paths
    )


def new_call_path_tool() -> Tool:
    """Build the tool that calls a path with arguments and an idempotency key."""
    return Tool(
        name=_CALL_NAME, description=_CALL_DESCRIPTION, input_schema=_CALL_SCHEMA, call=_call_path
    )