"""Tools that report the user's session, organizations, applications and profiles."""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from http import HTTPStatus
from typing import Any, Dict, List, Optional, Tuple

from canyon.humanitec import HumanitecClient, HumanitecError, checked
from canyon.mcp_server import Tool
from canyon.mcp_types import Content, text_content
from canyon.util import pretty_json

_logger = logging.getLogger(__name__)

_ZERO_TIME = "0001-01-01T00:00:00Z"
_MAX_PARALLEL_REQUESTS = 10
_ORG_ID_DESCRIPTION = "The Humanitec Organization (org) ID to work with."

_ORGS_NAME = "list_humanitec_orgs_and_session"
_ORGS_DESCRIPTION = (
    "This tool checks whether the local humctl (Humanitec CLI) tool has a valid and non-expired session.\n"
    "This tool should be used if you don't know whether the user has a valid session or if other "
    "related tool commands return errors indicating the user is not authenticated.\n"
    "This tool also returns the list of Organizations that the user has access to including their "
    "role in the Organization.\n"
)
_ORGS_TEMPLATE = (
    "The user is currently logged in. The following JSON is map from Humanitec Organization to Role:\n"
    "%s\n"
    "'administrators' can take all actions in the Organization, 'managers' may create applications "
    "and manage users, 'members' only have access to an application level, 'org_viewers' have read "
    "access to the whole Organization."
)

_APPS_NAME = "list_apps_and_envs_for_humanitec_organization"
_APPS_DESCRIPTION = (
    "This tool returns the Applications within the specified Humanitec Organization. It also "
    "includes the Environments within each Application including the latest deployment state and "
    "status.\n"
    "An optional app_id regex argument can filter Application Ids, while the env_type argument can "
    "filter by Environment Type (eg: development, staging, production).\n"
)
_APPS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "org_id": {"type": "string", "description": _ORG_ID_DESCRIPTION},
        "app_id": {"type": "string", "description": "Optional regex pattern to filter for app id"},
        "env_type": {
            "type": "string",
            "description": "Optional filter for a specific environment type",
        },
    },
    "required": ["org_id"],
    "additionalProperties": False,
}

_PROFILE_NAME = "get_humanitec_workload_profile_schema"
_PROFILE_DESCRIPTION = (
    "This tool returns information including the JSON schema used to define the workload profile "
    "with the specific id.\n"
    "Multiple workload profiles exist.\n"
    "The humanitec/ prefix is part of the workload profile id.\n"
    "The profile schema includes the set of properties supported in Workloads specs that use this "
    "profile."
)
_PROFILE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "org_id": {"type": "string", "description": _ORG_ID_DESCRIPTION},
        "workload_profile_id": {
            "type": "string",
            "description": "The Humanitec Workload Profile (profile) ID to work with.",
        },
    },
    "required": ["org_id", "workload_profile_id"],
}


def _required_string(arguments: Dict[str, Any], key: str) -> str:
    value = arguments.get(key)
    if not isinstance(value, str):
        raise TypeError(f"argument {key!r} must be a string")
    return value


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _time(value: Any) -> str:
    return value if isinstance(value, str) and value else _ZERO_TIME


def _list_orgs(arguments: Dict[str, Any]) -> List[Content]:
    client = HumanitecClient.from_current_token()
    response = checked(client.get_current_user, HTTPStatus.OK)
    data = response.data if isinstance(response.data, dict) else {}
    roles = data.get("roles")
    orgs: Dict[str, Any] = {}
    if isinstance(roles, dict):
        for obj, role in roles.items():
            parts = str(obj).split("/")
            if len(parts) == 3:
                orgs.setdefault(parts[2], role)
    listing = pretty_json(dict(sorted(orgs.items())))
    return [text_content(_ORGS_TEMPLATE, listing)]


def _environment_state(env: Dict[str, Any]) -> Dict[str, Any]:
    state: Dict[str, Any] = {
        "name": _text(env.get("name")),
        "type": _text(env.get("type")),
        "createdTime": _time(env.get("created_at")),
    }
    last = env.get("last_deploy")
    last_id = last_set = ""
    last_time = _ZERO_TIME
    if isinstance(last, dict):
        last_id = _text(last.get("id"))
        last_set = _text(last.get("set_id"))
        last_time = _time(last.get("created_at"))
    if last_id:
        state["lastDeploymentId"] = last_id
    if last_set:
        state["lastDeploymentSetId"] = last_set
    state["lastDeploymentTime"] = last_time
    return state


def _list_apps(arguments: Dict[str, Any]) -> List[Content]:
    try:
        client = HumanitecClient.from_current_token()
    except HumanitecError as exc:
        raise HumanitecError(f"unable to create Humanitec client: {exc}") from exc
    org_id = _text(arguments.get("org_id"))

    pattern: Optional[re.Pattern] = None
    raw_pattern = arguments.get("app_id")
    if isinstance(raw_pattern, str):
        try:
            pattern = re.compile(raw_pattern)
        except re.error as exc:
            raise ValueError(f"invalid app_id  regex: {exc}") from exc
    env_type = _text(arguments.get("env_type"))

    response = checked(lambda: client.list_applications(org_id), HTTPStatus.OK)
    apps = [app for app in (response.data or []) if isinstance(app, dict)]
    selected = [
        app for app in apps if pattern is None or pattern.search(_text(app.get("id")))
    ]

    def fetch(app: Dict[str, Any]) -> Tuple[str, Optional[Dict[str, Any]]]:
        app_id = _text(app.get("id"))
        try:
            envs_response = checked(
                lambda: client.list_environments(org_id, app_id), HTTPStatus.OK
            )
        except HumanitecError as exc:
            _logger.debug(
                "skipping application", extra={"attrs": {"app": app_id, "err": str(exc)}}
            )
            return app_id, None
        envs: Dict[str, Any] = {}
        for env in envs_response.data or []:
            if not isinstance(env, dict):
                continue
            if env_type and env.get("type") != env_type:
                continue
            envs[_text(env.get("id"))] = _environment_state(env)
        return app_id, {
            "name": _text(app.get("name")),
            "environments": dict(sorted(envs.items())),
            "createdTime": _text(app.get("created_at")),
        }

    with ThreadPoolExecutor(max_workers=_MAX_PARALLEL_REQUESTS) as pool:
        results = list(pool.map(fetch, selected))

    out = {app_id: state for app_id, state in results if state is not None}
    listing = pretty_json(dict(sorted(out.items())))
    return [
        text_content(
            "The user is has access to the following Humanitec Applications with "
            "Organization '%s' in JSON format: %s",
            org_id,
            listing,
        )
    ]


def _get_profile_schema(arguments: Dict[str, Any]) -> List[Content]:
    org_id = _required_string(arguments, "org_id")
    profile_id = _required_string(arguments, "workload_profile_id")
    client = HumanitecClient.from_current_token()
    response = checked(lambda: client.get_workload_profile(org_id, profile_id), HTTPStatus.OK)
    data = response.data if isinstance(response.data, dict) else {}
    schema = pretty_json(data.get("spec_schema"))
    return [
        text_content(
            "The humanitec workload profile has the following JSON schema for the spec "
            "of a deployment set module: %s",
            schema,
        )
    ]


def new_list_orgs_and_session_tool() -> Tool:
    """Build the tool that checks the session and lists the user's organizations."""
    return Tool(
        name=_ORGS_NAME,
        description=_ORGS_DESCRIPTION,
        input_schema={"type": "object", "additionalProperties": False},
        call=_list_orgs,
    )


def new_list_apps_and_envs_tool() -> Tool:
    """Build the tool listing applications and their environments in an organization."""
    return Tool(
        name=_APPS_NAME, description=_APPS_DESCRIPTION, input_schema=_APPS_SCHEMA, call=_list_apps
    )


def new_get_workload_profile_schema_tool() -> Tool:
    """Build the tool returning the spec schema of a workload profile."""
    return Tool(
        name=_PROFILE_NAME,
        description=_PROFILE_DESCRIPTION,
        input_schema=_PROFILE_SCHEMA,
        call=_get_profile_schema,
    )