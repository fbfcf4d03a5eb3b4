import json

import pytest
import requests
import responses

from canyon.humanitec import (
    NOT_FOUND_MESSAGE,
    NOT_LOGGED_IN_MESSAGE,
    ApiResponse,
    HumanitecClient,
    HumanitecError,
    checked,
    get_current_humanitec_token,
)

API = "https://api.example.com"


@pytest.fixture
def client():
    return HumanitecClient(token="token", api_prefix=API)


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.delenv("HUMANITEC_TOKEN", raising=False)
    monkeypatch.delenv("HUMANITEC_API_PREFIX", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    return tmp_path


def test_token_from_environment(monkeypatch):
    monkeypatch.setenv("HUMANITEC_TOKEN", "token")
    assert get_current_humanitec_token() == "token"


def test_token_from_humctl_file(home):
    (home / ".humctl").write_text("token: token\n")
    assert get_current_humanitec_token() == "token"


def test_missing_humctl_file_means_no_token(home):
    assert get_current_humanitec_token() == ""


def test_humctl_file_without_token(home):
    (home / ".humctl").write_text("org: my-org\n")
    assert get_current_humanitec_token() == ""


def test_invalid_humctl_file(home):
    (home / ".humctl").write_text("token: [unclosed\n")
    with pytest.raises(HumanitecError, match="failed to unmarshal the humctl file"):
        get_current_humanitec_token()


def test_from_current_token_requires_login(home):
    with pytest.raises(HumanitecError) as info:
        HumanitecClient.from_current_token()
    assert str(info.value) == NOT_LOGGED_IN_MESSAGE


def test_from_current_token_uses_environment(home, monkeypatch):
    monkeypatch.setenv("HUMANITEC_TOKEN", "token")
    monkeypatch.setenv("HUMANITEC_API_PREFIX", API)
    built = HumanitecClient.from_current_token()
    assert built.token == "token"
    assert built.api_prefix == API


def test_from_current_token_default_prefix(home, monkeypatch):
    monkeypatch.setenv("HUMANITEC_TOKEN", "token")
    assert HumanitecClient.from_current_token().api_prefix == "https://api.humanitec.io"


def test_request_headers(client):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, API + "/current-user", json={"roles": {}})
        result = client.get_current_user()
        headers = rsps.calls[0].request.headers
    assert result.data == {"roles": {}}
    assert headers["Authorization"] == "Bearer token"
    assert headers["Humanitec-User-Agent"].startswith("app canyon/")
    assert headers["Humanitec-User-Agent"].endswith("; sdk humanitec-go-autogen/latest")


@pytest.mark.parametrize(
    "method, args, path",
    [
        ("list_action_pipeline_summaries", ("o",), "/orgs/o/action-pipelines"),
        ("get_action_pipeline", ("o", "p"), "/orgs/o/action-pipelines/p"),
        ("list_applications", ("o",), "/orgs/o/apps"),
        ("list_environments", ("o", "a"), "/orgs/o/apps/a/envs"),
        ("get_set", ("o", "a", "s"), "/orgs/o/apps/a/sets/s"),
        ("get_workload_profile", ("o", "w"), "/orgs/o/workload-profiles/w"),
    ],
)
def test_get_endpoints(client, method, args, path):
    payload = [{"id": "x"}]
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, API + path, json=payload)
        result = getattr(client, method)(*args)
    assert result.status_code == 200
    assert result.data == payload


def test_call_action_pipeline_sends_inputs_and_key(client):
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.POST,
            API + "/orgs/o/action-pipelines/p/calls",
            json={"outputs": {"x": 1}},
        )
        result = client.call_action_pipeline("o", "p", {"a": 1}, "key-1")
        request = rsps.calls[0].request
    assert json.loads(request.body) == {"inputs": {"a": 1}}
    assert request.headers["Idempotency-Key"] == "key-1"
    assert result.data == {"outputs": {"x": 1}}


def test_call_action_pipeline_without_key(client):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, API + "/orgs/o/action-pipelines/p/calls", json={})
        result = client.call_action_pipeline("o", "p", None, "")
        request = rsps.calls[0].request
    assert "Idempotency-Key" not in request.headers
    assert json.loads(request.body) == {"inputs": None}
    assert result.status_code == 200
    assert result.data == {}


def test_query_ai_docs(client):
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.POST,
            API + "/experimental/query-ai-documentation",
            json={"answer": "yes", "is_uncertain": False},
        )
        result = client.query_ai_docs("what")
        request = rsps.calls[0].request
    assert json.loads(request.body) == {"query": "what"}
    assert result.data["answer"] == "yes"


def test_non_200_body_is_kept_undecoded(client):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, API + "/current-user", status=404, body="nope")
        result = client.get_current_user()
    assert result.status_code == 404
    assert result.body == b"nope"
    assert result.data is None


def test_invalid_json_on_success_raises(client):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, API + "/current-user", status=200, body="not json")
        with pytest.raises(HumanitecError):
            client.get_current_user()


def test_checked_returns_expected_status():
    response = ApiResponse(status_code=201, body=b"{}")
    assert checked(lambda: response, 200, 201) is response


def test_checked_forbidden():
    with pytest.raises(HumanitecError) as info:
        checked(lambda: ApiResponse(status_code=403), 200)
    assert str(info.value) == NOT_LOGGED_IN_MESSAGE


def test_checked_not_found():
    with pytest.raises(HumanitecError) as info:
        checked(lambda: ApiResponse(status_code=404), 200)
    assert str(info.value) == NOT_FOUND_MESSAGE


def test_checked_uses_message_field():
    response = ApiResponse(status_code=500, body=b'{"message": "boom"}')
    with pytest.raises(HumanitecError) as info:
        checked(lambda: response, 200)
    text = str(info.value)
    assert "unexpected status code 500 (Internal Server Error)" in text
    assert "'boom'" in text


def test_checked_falls_back_to_body_text():
    response = ApiResponse(status_code=400, body=b"plain failure")
    with pytest.raises(HumanitecError, match="'plain failure'"):
        checked(lambda: response, 200)


def test_checked_network_error(client):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, API + "/current-user", body=requests.ConnectionError("down"))
        with pytest.raises(HumanitecError, match="temporary network error 'down'"):
            checked(client.get_current_user, 200)


def test_checked_unexpected_error():
    def broken():
        raise ValueError("odd")

    with pytest.raises(HumanitecError, match="hit an unexpected error 'odd'"):
        checked(broken, 200)