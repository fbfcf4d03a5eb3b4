"""Tool listing the metadata keys known for an organization."""

from __future__ import annotations

from typing import Any, Dict, List

from canyon.mcp_server import Tool
from canyon.mcp_types import Content, text_content
from canyon.util import pretty_json

_NAME = "list_organization_metadata_keys"
_DESCRIPTION = (
    "This tool lists the known metadata keys for an organization. The metadata values for "
    "workloads are found in the contents of the score spec, in the deployment set, or on resources."
)
_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "org_id": {
            "type": "string",
            "description": "The Humanitec Organization (org) ID to work with.",
        },
    },
    "required": ["org_id"],
}
_KEYS = (
    (
        "Service-Owner",
        "The project team who own this workload and are responsible for development and deployments",
    ),
    ("Github-Repo-Url", "The GitHub repository URL where the source code of a workload can be found"),
    ("Git-Tag", "The Git tag that the container image of this workload comes from"),
    ("Grafana-Dashboard-Url", "The grafana dashboard for the operations metrics"),
    ("Aws-Arn", "The AWS ARN id of the related resource"),
)


def _list_keys(arguments: Dict[str, Any]) -> List[Content]:
    listing = pretty_json([{"key": key, "description": text} for key, text in _KEYS])
    return [
        text_content(
            "The following workload and resource metadata keys are known for this org in "
            "JSON format: %s",
            listing,
        )
    ]


def new_dummy_metadata_keys_tool() -> Tool:
    """Build the tool returning a fixed list of organization metadata keys."""
    return Tool(name=_NAME, description=_DESCRIPTION, input_schema=_SCHEMA, call=_list_keys)