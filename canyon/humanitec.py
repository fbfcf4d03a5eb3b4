"""HTTP client for the Humanitec API and helpers for checking its responses."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from http import HTTPStatus
from pathlib import Path
from typing import Any, Callable, Mapping, Optional
from urllib.parse import quote

import requests
import yaml

from canyon.util import module_name, module_version

DEFAULT_API_PREFIX = "https://api.humanitec.io"

NOT_LOGGED_IN_MESSAGE = (
    "The user is not currently logged in and should be prompted to run "
    "'humctl login' to fix this."
)
NOT_FOUND_MESSAGE = (
    "The API request returned a 404 (Not Found) error which may indicate that the "
    "resource does not exist. The user may have misspelt something or the state may "
    "have changed."
)


class HumanitecError(Exception):
    """A failure talking to the Humanitec API, phrased for the end user."""


@dataclass
class ApiResponse:
    """The outcome of an API request.

    ``data`` holds the decoded JSON body when the status code is 200.
    """

    status_code: int
    reason: str = ""
    body: bytes = b""
    data: Any = None

    @property
    def status(self) -> str:
        return f"{self.status_code} {self.reason}".strip()

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def get_current_humanitec_token() -> str:
    """Return the API token from the environment or the ~/.humctl file.

    An empty string means no token is configured.
    """
    token = os.environ.get("HUMANITEC_TOKEN", "")
    if token:
        return token
    try:
        home = Path.home()
    except (RuntimeError, KeyError) as exc:
        raise HumanitecError(f"failed to identify the users home directory: {exc}") from exc
    try:
        content = (home / ".humctl").read_bytes()
    except FileNotFoundError:
        return ""
    except OSError as exc:
        raise HumanitecError(f"failed to read the humctl file: {exc}") from exc
    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise HumanitecError(f"failed to unmarshal the humctl file: {exc}") from exc
    if document is None:
        return ""
    if not isinstance(document, dict):
        raise HumanitecError("failed to unmarshal the humctl file: expected a mapping")
    value = document.get("token")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise HumanitecError("failed to unmarshal the humctl file: token must be a string")
    return value


def _path(template: str, *segments: str) -> str:
    return template.format(*(quote(str(segment), safe="") for segment in segments))


class HumanitecClient:
    """Authenticated access to the Humanitec API endpoints used by the tools."""

    def __init__(
        self,
        token: str,
        api_prefix: str = DEFAULT_API_PREFIX,
        session: Optional[requests.Session] = None,
    ):
        self.token = token
        self.api_prefix = api_prefix
        self.session = session if session is not None else requests.Session()

    @classmethod
    def from_current_token(cls, session: Optional[requests.Session] = None) -> "HumanitecClient":
        """Build a client from the current user's token; raise when logged out."""
        token = get_current_humanitec_token()
        if not token:
            raise HumanitecError(NOT_LOGGED_IN_MESSAGE)
        api_prefix = os.environ.get("HUMANITEC_API_PREFIX") or DEFAULT_API_PREFIX
        return cls(token, api_prefix, session)

    def _request(
        self,
        method: str,
        path: str,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        has_body: bool = False,
    ) -> ApiResponse:
        all_headers = dict(headers or {})
        all_headers["Authorization"] = f"Bearer {self.token}"
        all_headers["Humanitec-User-Agent"] = (
            f"app {module_name()}/{module_version()}; sdk humanitec-go-autogen/latest"
        )
        data = None
        if has_body:
            data = json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        response = self.session.request(
            method, self.api_prefix + path, data=data, headers=all_headers
        )
        out = ApiResponse(
            status_code=response.status_code,
            reason=response.reason or "",
            body=response.content or b"",
        )
        if out.status_code == HTTPStatus.OK:
            try:
                out.data = json.loads(out.body)
            except ValueError as exc:
                raise HumanitecError(f"failed to decode the response body: {exc}") from exc
        return out

    def list_action_pipeline_summaries(self, org_id: str) -> ApiResponse:
        return self._request("GET", _path("/orgs/{}/action-pipelines", org_id))

    def get_action_pipeline(self, org_id: str, pipeline_id: str) -> ApiResponse:
        return self._request(
            "GET", _path("/orgs/{}/action-pipelines/{}", org_id, pipeline_id)
        )

    def call_action_pipeline(
        self,
        org_id: str,
        pipeline_id: str,
        inputs: Optional[Mapping[str, Any]] = None,
        idempotency_key: str = "",
    ) -> ApiResponse:
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else {}
        return self._request(
            "POST",
            _path("/orgs/{}/action-pipelines/{}/calls", org_id, pipeline_id),
            body={"inputs": dict(inputs) if inputs is not None else None},
            headers=headers,
            has_body=True,
        )

    def query_ai_docs(self, query: str) -> ApiResponse:
        return self._request(
            "POST", "/experimental/query-ai-documentation", body={"query": query}, has_body=True
        )

    def get_current_user(self) -> ApiResponse:
        return self._request("GET", "/current-user")

    def list_applications(self, org_id: str) -> ApiResponse:
        return self._request("GET", _path("/orgs/{}/apps", org_id))

    def list_environments(self, org_id: str, app_id: str) -> ApiResponse:
        return self._request("GET", _path("/orgs/{}/apps/{}/envs", org_id, app_id))

    def get_set(self, org_id: str, app_id: str, set_id: str) -> ApiResponse:
        return self._request(
            "GET", _path("/orgs/{}/apps/{}/sets/{}", org_id, app_id, set_id)
        )

    def get_workload_profile(self, org_id: str, profile_id: str) -> ApiResponse:
        return self._request(
            "GET", _path("/orgs/{}/workload-profiles/{}", org_id, profile_id)
        )


def _status_text(code: int) -> str:
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""


def _body_message(body: bytes) -> str:
    try:
        document = json.loads(body)
    except ValueError:
        return ""
    if not isinstance(document, dict):
        return ""
    if isinstance(document.get("message"), str):
        return document["message"]
    for key, value in document.items():
        if isinstance(key, str) and key.lower() == "message" and isinstance(value, str):
            return value
    return ""


def checked(requester: Callable[[], ApiResponse], code: int, *args: int) -> ApiResponse:
    """Run ``requester`` and return its response if the status code is expected.

    Raises HumanitecError with a user-facing explanation otherwise.
    """
    try:
        response = requester()
    except (requests.ConnectionError, requests.Timeout) as exc:
        raise HumanitecError(
            f"The API request to Humanitec hit a temporary network error '{exc}'. "
            "The request may work if the user requests it again."
        ) from exc
    except Exception as exc:
        raise HumanitecError(
            f"The API request to Humanitec hit an unexpected error '{exc}'."
        ) from exc

    status = response.status_code
    if status == code or status in args:
        return response
    if status == HTTPStatus.FORBIDDEN:
        raise HumanitecError(NOT_LOGGED_IN_MESSAGE)
    if status == HTTPStatus.NOT_FOUND:
        raise HumanitecError(NOT_FOUND_MESSAGE)
    body_text = _body_message(response.body) or response.text
    raise HumanitecError(
        f"The API request to Humanitec returned an unexpected status code {status} "
        f"({_status_text(status)}). The content of the error response is '{body_text}' "
        "and may provide a hint as to what went wrong."
    )