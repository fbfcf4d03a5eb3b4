"""Tool that fetches Humanitec deployment sets."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict, List

from canyon.humanitec import HumanitecClient, HumanitecError, checked
from canyon.mcp_server import Tool
from canyon.mcp_types import Content, text_content

_NAME = "get_humanitec_deployment_sets"
_DESCRIPTION = (
    "This tool returns the contents of the specified Humanitec Deployment Sets. "
    "This can be used to fetch multiple Deployment Sets at once."
)
_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "org_id": {
            "type": "string",
            "description": "The Humanitec Organization (org) ID to work with.",
        },
        "app_id": {
            "type": "string",
            "description": "The Humanitec Application (app) ID to work with.",
        },
        "set_ids": {
            "type": "array",
            "items": {"type": "string"},
            "description": "The list of Humanitec Deployment Set (set) IDs to fetch the contents for.",
        },
    },
    "required": ["org_id", "app_id", "set_ids"],
}


def _argument(arguments: Dict[str, Any], key: str, kind: type) -> Any:
    value = arguments.get(key)
    if not isinstance(value, kind):
        raise TypeError(f"argument {key!r} must be of type {kind.__name__}")
    return value


def _fetch_sets(arguments: Dict[str, Any]) -> List[Content]:
    org_id = _argument(arguments, "org_id", str)
    app_id = _argument(arguments, "app_id", str)
    set_ids = _argument(arguments, "set_ids", list)
    client = HumanitecClient.from_current_token()
    output: List[Content] = []
    for set_id in set_ids:
        if not isinstance(set_id, str):
            raise TypeError("every entry of 'set_ids' must be a string")
        try:
            response = checked(
                lambda set_id=set_id: client.get_set(org_id, app_id, set_id), HTTPStatus.OK
            )
        except HumanitecError as exc:
            output.append(
                text_content("Failed to fetch contents for set %s: %v", set_id, str(exc))
            )
        else:
            output.append(
                text_content("The contents of set %s in JSON is: %s", set_id, response.text)
            )
    return output


def new_get_deployment_sets_tool() -> Tool:
    """Build the tool returning the raw contents of several deployment sets."""
    return Tool(name=_NAME, description=_DESCRIPTION, input_schema=_SCHEMA, call=_fetch_sets)