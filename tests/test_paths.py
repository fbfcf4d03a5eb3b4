import json
import re

import pytest
import responses

from canyon.humanitec import HumanitecError
from canyon.tools.paths import new_call_path_tool, new_list_paths_tool

API = "https://api.example.com"
LIST_PREFIX = "Here's an array of the current canyon tools in JSON: "
CALL_PREFIX = "The path returned the following result in JSON: "


@pytest.fixture
def api(monkeypatch):
    monkeypatch.setenv("HUMANITEC_TOKEN", "token")
    monkeypatch.setenv("HUMANITEC_API_PREFIX", API)
    with responses.RequestsMock() as rsps:
        yield rsps


def test_list_paths_returns_pipeline_tools(api):
    api.add(
        responses.GET,
        f"{API}/orgs/my-org/action-pipelines",
        json=[{"org_id": "my-org", "id": "p1", "description": "d", "type": "t"}],
    )
    api.add(
        responses.GET,
        f"{API}/orgs/my-org/action-pipelines/p1",
        json={"id": "p1", "description": "desc one", "inputs_jsonschema": {"type": "object"}},
    )
    [content] = new_list_paths_tool().call({"org_id": "my-org"})
    assert content.text.startswith(LIST_PREFIX)
    listing = json.loads(content.text[len(LIST_PREFIX):])
    assert listing == [
        {"name": "p1", "description": "desc one", "inputSchema": {"type": "object"}}
    ]
    assert api.calls[0].request.headers["Authorization"] == "Bearer token"


def test_list_paths_empty_listing_is_null(api):
    api.add(responses.GET, f"{API}/orgs/my-org/action-pipelines", json=[])
    [content] = new_list_paths_tool().call({"org_id": "my-org"})
    assert content.text[len(LIST_PREFIX):].strip() == "null"


@pytest.mark.parametrize("status", [403, 405])
def test_list_paths_feature_disabled(api, status):
    api.add(responses.GET, f"{API}/orgs/my-org/action-pipelines", status=status, body="")
    [content] = new_list_paths_tool().call({"org_id": "my-org"})
    assert content.text == "There are no paths available in this org"


def test_list_paths_unexpected_status_raises(api):
    api.add(responses.GET, f"{API}/orgs/my-org/action-pipelines", status=500, body="boom")
    with pytest.raises(HumanitecError, match="unexpected response from humanitec"):
        new_list_paths_tool().call({"org_id": "my-org"})


def test_call_path_returns_outputs(api):
    api.add(
        responses.POST,
        f"{API}/orgs/my-org/action-pipelines/deploy/calls",
        json={"outputs": {"result": 42}, "extra": True},
    )
    [content] = new_call_path_tool().call(
        {"org_id": "my-org", "name": "deploy", "arguments": {"a": 1}, "idempotency_key": "abc"}
    )
    assert json.loads(content.text[len(CALL_PREFIX):]) == {"outputs": {"result": 42}}
    request = api.calls[0].request
    assert request.headers["Idempotency-Key"] == "abc"
    assert json.loads(request.body) == {"inputs": {"a": 1}}


def test_call_path_generates_idempotency_key(api):
    api.add(
        responses.POST,
        f"{API}/orgs/my-org/action-pipelines/deploy/calls",
        json={"outputs": {}},
    )
    [content] = new_call_path_tool().call({"org_id": "my-org", "name": "deploy", "arguments": {}})
    key = api.calls[0].request.headers["Idempotency-Key"]
    assert re.fullmatch("[0-9a-f]{20}", key)
    assert content.text.startswith(CALL_PREFIX)
    assert json.loads(content.text[len(CALL_PREFIX):]) == {"outputs": {}}


def test_call_path_timeout_mentions_key(api):
    api.add(
        responses.POST,
        f"{API}/orgs/my-org/action-pipelines/deploy/calls",
        status=504,
        body="",
    )
    [content] = new_call_path_tool().call(
        {"org_id": "my-org", "name": "deploy", "arguments": {}, "idempotency_key": "abc"}
    )
    assert "timed out" in content.text
    assert "'abc'" in content.text


def test_call_path_unexpected_status_raises_with_key(api):
    api.add(
        responses.POST,
        f"{API}/orgs/my-org/action-pipelines/deploy/calls",
        status=500,
        body="broken",
    )
    with pytest.raises(HumanitecError) as info:
        new_call_path_tool().call(
            {"org_id": "my-org", "name": "deploy", "arguments": {}, "idempotency_key": "abc"}
        )
    assert "'abc'" in str(info.value)
    assert "broken" in str(info.value)


def test_tools_require_login(monkeypatch, tmp_path):
    monkeypatch.delenv("HUMANITEC_TOKEN", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    with pytest.raises(HumanitecError, match="humctl login"):
        new_list_paths_tool().call({"org_id": "my-org"})